from clouddedup.storage.registry import build_backend, parse_backend_name
from clouddedup.storage.types import BackendName, EntryKind, StorageBackend, StorageEntry

__all__ = [
    "BackendName",
    "EntryKind",
    "StorageBackend",
    "StorageEntry",
    "build_backend",
    "parse_backend_name",
]
