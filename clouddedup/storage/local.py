from __future__ import annotations

import mimetypes
import os
import shutil
from pathlib import Path

from clouddedup.core.errors import BackendUnavailable, ContentUnavailable, NotFound
from clouddedup.core.path_safety import PathSafetyError, normalize_storage_path
from clouddedup.storage.types import BackendName, EntryKind, StorageBackend, StorageEntry


class LocalStorageBackend(StorageBackend):
    """Directory tree exposed through the storage interface."""

    name = BackendName.LOCAL

    def __init__(self, root: Path):
        self._root = root.resolve(strict=False)

    def _ensure_root(self) -> Path:
        if not self._root.is_dir():
            raise BackendUnavailable(
                f"Local storage root does not exist: {self._root.as_posix()} (CLOUDDEDUP_LOCAL_ROOT)"
            )
        return self._root

    def _resolve(self, path: str) -> Path:
        root = self._ensure_root()
        key = normalize_storage_path(path)
        candidate = (root / key).resolve(strict=False) if key else root
        if candidate != root and root not in candidate.parents:
            raise PathSafetyError("Path escapes local storage root")
        return candidate

    def _key_for(self, candidate: Path) -> str:
        return candidate.relative_to(self._root).as_posix()

    def _file_entry(self, candidate: Path) -> StorageEntry:
        stat_result = candidate.stat()
        content_type, _encoding = mimetypes.guess_type(candidate.name)
        return StorageEntry(
            path=self._key_for(candidate),
            kind=EntryKind.FILE,
            size=int(stat_result.st_size),
            last_modified=int(stat_result.st_mtime_ns // 1_000_000),
            content_type=content_type,
        )

    def list_entries(self, path: str, *, recursive: bool = False) -> list[StorageEntry]:
        target = self._resolve(path)
        if not target.is_dir():
            return []

        entries: list[StorageEntry] = []
        if recursive:
            for current, dirnames, filenames in os.walk(target):
                dirnames.sort()
                for filename in sorted(filenames):
                    entries.append(self._file_entry(Path(current) / filename))
            return entries

        for child in sorted(target.iterdir(), key=lambda item: item.name):
            if child.is_dir():
                entries.append(StorageEntry(path=self._key_for(child), kind=EntryKind.DIRECTORY))
            elif child.is_file():
                entries.append(self._file_entry(child))
        return entries

    def stat(self, path: str) -> StorageEntry:
        candidate = self._resolve(path)
        if not candidate.is_file():
            raise NotFound(f"File not found: {normalize_storage_path(path)}")
        return self._file_entry(candidate)

    def get_content(self, path: str) -> bytes:
        candidate = self._resolve(path)
        try:
            return candidate.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise NotFound(f"File not found: {normalize_storage_path(path)}") from exc
        except OSError as exc:
            raise ContentUnavailable(f"Cannot read {normalize_storage_path(path)}: {exc}") from exc

    def put_content(self, path: str, data: bytes, *, content_type: str | None = None) -> StorageEntry:
        candidate = self._resolve(path)
        if candidate == self._root:
            raise PathSafetyError("Upload target must name a file")
        candidate.parent.mkdir(parents=True, exist_ok=True)
        candidate.write_bytes(data)
        return self._file_entry(candidate)

    def copy(self, source: str, destination: str) -> None:
        source_path = self._resolve(source)
        if not source_path.is_file():
            raise NotFound(f"Source file does not exist: {normalize_storage_path(source)}")
        destination_path = self._resolve(destination)
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source_path, destination_path)

    def delete(self, path: str) -> None:
        candidate = self._resolve(path)
        if not candidate.is_file():
            raise NotFound(f"File not found: {normalize_storage_path(path)}")
        candidate.unlink()
