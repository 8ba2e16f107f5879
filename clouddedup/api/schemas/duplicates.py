from __future__ import annotations

from pydantic import BaseModel


class DimensionsResponse(BaseModel):
    width: int
    height: int


class FileDescriptorResponse(BaseModel):
    path: str
    size: int
    last_modified: int | None
    is_image: bool
    dimensions: DimensionsResponse | None


class DuplicateClusterResponse(BaseModel):
    files: list[FileDescriptorResponse]
    match_type: str
    matched_criteria: list[str] | None = None
    dimensions: DimensionsResponse | None = None
    size: int | None = None
    keep: str | None = None
    delete_candidates: list[str] | None = None


class SkippedFileResponse(BaseModel):
    path: str
    method: str
    reason: str


class DuplicateSearchData(BaseModel):
    duplicates: list[DuplicateClusterResponse]
    total_groups: int
    total_duplicate_files: int
    methods: list[str]
    size_tolerance: float | None
    image_only: bool
    recursive: bool
    skipped: list[SkippedFileResponse]
    strategy: str | None = None


class DuplicateSearchResponse(BaseModel):
    success: bool = True
    data: DuplicateSearchData
