from __future__ import annotations

from fastapi import HTTPException, status

from clouddedup.core.config import get_settings
from clouddedup.core.errors import InvalidArgument
from clouddedup.storage import StorageBackend, build_backend, parse_backend_name


def get_storage_backend(backend: str) -> StorageBackend:
    try:
        name = parse_backend_name(backend)
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return build_backend(name, get_settings())
