from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from clouddedup.api.dependencies import get_storage_backend
from clouddedup.api.errors import to_http_exception
from clouddedup.api.schemas.duplicates import DuplicateSearchData, DuplicateSearchResponse
from clouddedup.core.config import get_settings
from clouddedup.core.errors import CloudDedupError
from clouddedup.deletion.strategy import parse_strategy, resolve_clusters
from clouddedup.duplicates.service import DuplicateService, detection_result_to_dict
from clouddedup.storage import StorageBackend

router = APIRouter(prefix="/{backend}", tags=["duplicates"])


def get_duplicate_service(backend: StorageBackend = Depends(get_storage_backend)) -> DuplicateService:
    return DuplicateService(settings=get_settings(), backend=backend)


@router.get("/duplicates", response_model=DuplicateSearchResponse)
def find_duplicates(
    path: str = Query(min_length=1),
    methods: list[str] = Query(default=["content"]),
    size_tolerance: float = Query(default=0, ge=0, le=100),
    recursive: bool = False,
    image_only: bool = False,
    strategy: str | None = None,
    service: DuplicateService = Depends(get_duplicate_service),
) -> DuplicateSearchResponse:
    try:
        parsed_strategy = parse_strategy(strategy) if strategy is not None else None
        result = service.find_duplicates(
            path,
            methods,
            recursive=recursive,
            image_only=image_only,
            size_tolerance=size_tolerance,
        )
    except CloudDedupError as exc:
        raise to_http_exception(exc) from exc

    payload = detection_result_to_dict(result)
    if parsed_strategy is not None:
        payload["strategy"] = parsed_strategy.value
        resolutions = resolve_clusters(result.clusters, parsed_strategy)
        for cluster_payload, resolution in zip(payload["duplicates"], resolutions):
            cluster_payload["keep"] = resolution.keep.path if resolution.keep is not None else None
            cluster_payload["delete_candidates"] = [item.path for item in resolution.delete_candidates]

    return DuplicateSearchResponse(data=DuplicateSearchData.model_validate(payload))
