from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass

from clouddedup.core.errors import NotFound


class EntryKind(str, enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"


class BackendName(str, enum.Enum):
    LOCAL = "local"
    DROPBOX = "dropbox"
    GCS = "gcs"


@dataclass(frozen=True, slots=True)
class StorageEntry:
    path: str
    kind: EntryKind
    size: int = 0
    last_modified: int | None = None
    content_type: str | None = None

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE


class StorageBackend(ABC):
    """Capability interface over a remote object store.

    Paths are canonical storage keys as produced by ``normalize_storage_path``;
    ``last_modified`` values are epoch milliseconds. Implementations raise
    ``NotFound`` for missing objects and ``BackendUnavailable`` for anything that
    prevents talking to the store at all. ``get_content`` raises
    ``ContentUnavailable`` when one object exists but cannot be downloaded.
    """

    name: BackendName

    @abstractmethod
    def list_entries(self, path: str, *, recursive: bool = False) -> list[StorageEntry]:
        raise NotImplementedError

    @abstractmethod
    def stat(self, path: str) -> StorageEntry:
        raise NotImplementedError

    @abstractmethod
    def get_content(self, path: str) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def put_content(self, path: str, data: bytes, *, content_type: str | None = None) -> StorageEntry:
        raise NotImplementedError

    @abstractmethod
    def copy(self, source: str, destination: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, path: str) -> None:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
        except NotFound:
            return False
        return True

    def list_files(self, path: str, *, recursive: bool = False) -> list[StorageEntry]:
        return [entry for entry in self.list_entries(path, recursive=recursive) if entry.is_file]
