from __future__ import annotations

from clouddedup.core.errors import InvalidArgument


class PathSafetyError(InvalidArgument):
    pass


def normalize_storage_path(raw_path: str | None) -> str:
    """Return the canonical storage key: no surrounding or doubled slashes.

    The empty string denotes the backend root. Only ``..`` segments are rejected;
    ``~`` and ``$`` are ordinary characters in object keys.
    """
    if raw_path is None:
        return ""

    parts = [part for part in raw_path.strip().split("/") if part not in ("", ".")]
    if ".." in parts:
        raise PathSafetyError("Path traversal is not allowed")
    return "/".join(parts)


def basename(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1]


def parent_of(path: str) -> str:
    head, sep, _tail = path.rstrip("/").rpartition("/")
    return head if sep else ""


def join_storage_path(*parts: str) -> str:
    return normalize_storage_path("/".join(part for part in parts if part))
