from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from clouddedup.core.config import Settings
from clouddedup.core.errors import InvalidArgument
from clouddedup.core.path_safety import PathSafetyError, join_storage_path, normalize_storage_path
from clouddedup.storage.types import StorageBackend, StorageEntry

logger = logging.getLogger(__name__)


class FileService:
    def __init__(self, settings: Settings, backend: StorageBackend):
        self._settings = settings
        self._backend = backend

    def list_entries(self, path: str | None, *, recursive: bool = False) -> list[StorageEntry]:
        return self._backend.list_entries(normalize_storage_path(path), recursive=recursive)

    def copy(self, source: str, destination: str) -> tuple[str, str]:
        source_key = normalize_storage_path(source)
        destination_key = normalize_storage_path(destination)
        if not source_key or not destination_key:
            raise InvalidArgument("source and destination must name files")
        if source_key == destination_key:
            raise InvalidArgument("source and destination must differ")
        self._backend.copy(source_key, destination_key)
        logger.info("Copied %s to %s on %s", source_key, destination_key, self._backend.name.value)
        return source_key, destination_key

    def resolve_upload_target(self, target: str | None, filename: str | None) -> str:
        """Append the uploaded filename unless ``target`` already names a file."""
        raw_target = target or ""
        key = normalize_storage_path(raw_target)
        names_file = bool(key) and not raw_target.rstrip().endswith("/") and PurePosixPath(key).suffix != ""
        if names_file:
            return key

        name = normalize_storage_path(filename)
        if not name or "/" in name:
            raise PathSafetyError("Uploaded file needs a plain filename when the target is a directory")
        return join_storage_path(key, name)

    def upload(
        self,
        target: str | None,
        filename: str | None,
        data: bytes,
        *,
        content_type: str | None = None,
    ) -> StorageEntry:
        if len(data) > int(self._settings.max_upload_bytes):
            raise InvalidArgument(f"Upload exceeds configured limit of {self._settings.max_upload_bytes} bytes")
        full_path = self.resolve_upload_target(target, filename)
        entry = self._backend.put_content(full_path, data, content_type=content_type)
        logger.info("Uploaded %s (%d bytes) to %s", full_path, len(data), self._backend.name.value)
        return entry


def storage_entry_to_dict(entry: StorageEntry) -> dict[str, Any]:
    return {
        "path": entry.path,
        "type": entry.kind.value,
        "size": entry.size,
        "last_modified": entry.last_modified,
        "mime_type": entry.content_type,
    }
