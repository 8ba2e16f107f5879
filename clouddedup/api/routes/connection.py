from __future__ import annotations

from typing import cast

from fastapi import APIRouter, Depends

from clouddedup.api.errors import to_http_exception
from clouddedup.api.schemas.connection import DropboxAccountData, DropboxConnectionResponse
from clouddedup.core.config import get_settings
from clouddedup.core.errors import CloudDedupError
from clouddedup.storage import BackendName, build_backend
from clouddedup.storage.dropbox_backend import DropboxStorageBackend

router = APIRouter(tags=["connection"])


def get_dropbox_backend() -> DropboxStorageBackend:
    return cast(DropboxStorageBackend, build_backend(BackendName.DROPBOX, get_settings()))


@router.get("/dropbox/test", response_model=DropboxConnectionResponse)
def check_dropbox_connection(
    backend: DropboxStorageBackend = Depends(get_dropbox_backend),
) -> DropboxConnectionResponse:
    try:
        account = backend.account_info()
    except CloudDedupError as exc:
        raise to_http_exception(exc) from exc
    return DropboxConnectionResponse(data=DropboxAccountData.model_validate(account))
