from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from clouddedup.api.dependencies import get_storage_backend
from clouddedup.api.errors import to_http_exception
from clouddedup.api.schemas.files import (
    CopyFileData,
    CopyFileRequest,
    CopyFileResponse,
    ListEntriesResponse,
    StorageEntryResponse,
    UploadFileData,
    UploadFileResponse,
)
from clouddedup.core.config import get_settings
from clouddedup.core.errors import CloudDedupError
from clouddedup.files.service import FileService, storage_entry_to_dict
from clouddedup.storage import StorageBackend

router = APIRouter(prefix="/{backend}", tags=["files"])


def get_file_service(backend: StorageBackend = Depends(get_storage_backend)) -> FileService:
    return FileService(settings=get_settings(), backend=backend)


@router.get("/list", response_model=ListEntriesResponse)
def list_entries(
    path: str = "/",
    recursive: bool = False,
    service: FileService = Depends(get_file_service),
) -> ListEntriesResponse:
    try:
        entries = service.list_entries(path, recursive=recursive)
    except CloudDedupError as exc:
        raise to_http_exception(exc) from exc
    return ListEntriesResponse(
        data=[StorageEntryResponse.model_validate(storage_entry_to_dict(item)) for item in entries]
    )


@router.post("/copy", response_model=CopyFileResponse)
def copy_file(
    request: CopyFileRequest,
    service: FileService = Depends(get_file_service),
) -> CopyFileResponse:
    try:
        source, destination = service.copy(request.source, request.destination)
    except CloudDedupError as exc:
        raise to_http_exception(exc) from exc
    return CopyFileResponse(data=CopyFileData(source=source, destination=destination))


@router.post("/upload", response_model=UploadFileResponse)
def upload_file(
    file: UploadFile = File(...),
    path: str = Form(...),
    service: FileService = Depends(get_file_service),
) -> UploadFileResponse:
    data = file.file.read()
    try:
        entry = service.upload(path, file.filename, data, content_type=file.content_type)
    except CloudDedupError as exc:
        raise to_http_exception(exc) from exc
    return UploadFileResponse(
        data=UploadFileData(path=entry.path, size=entry.size, mime_type=file.content_type or entry.content_type)
    )
