from __future__ import annotations

from fastapi import APIRouter, Depends

from clouddedup.api.dependencies import get_storage_backend
from clouddedup.api.errors import to_http_exception
from clouddedup.api.schemas.deletion import DeleteFilesRequest, DeleteFilesResponse, DeletionData
from clouddedup.core.config import get_settings
from clouddedup.core.errors import CloudDedupError
from clouddedup.deletion.service import DeletionService, deletion_report_to_dict
from clouddedup.storage import StorageBackend

router = APIRouter(prefix="/{backend}", tags=["deletion"])


def get_deletion_service(backend: StorageBackend = Depends(get_storage_backend)) -> DeletionService:
    return DeletionService(settings=get_settings(), backend=backend)


def _delete(request: DeleteFilesRequest, service: DeletionService) -> DeleteFilesResponse:
    try:
        report = service.delete(request.paths, request.strategy, dry_run=request.dry_run)
    except CloudDedupError as exc:
        raise to_http_exception(exc) from exc
    return DeleteFilesResponse(data=DeletionData.model_validate(deletion_report_to_dict(report)))


@router.delete("/delete", response_model=DeleteFilesResponse)
def delete_files(
    request: DeleteFilesRequest,
    service: DeletionService = Depends(get_deletion_service),
) -> DeleteFilesResponse:
    return _delete(request, service)


@router.post("/batch-delete", response_model=DeleteFilesResponse)
def batch_delete_files(
    request: DeleteFilesRequest,
    service: DeletionService = Depends(get_deletion_service),
) -> DeleteFilesResponse:
    return _delete(request, service)
