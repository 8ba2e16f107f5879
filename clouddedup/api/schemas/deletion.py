from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DeleteFilesRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    paths: list[str] = Field(min_length=1, max_length=10000)
    strategy: str | None = None
    dry_run: bool | None = None


class DeletionResultResponse(BaseModel):
    path: str
    status: str
    success: bool
    message: str | None = None


class DeletionData(BaseModel):
    results: list[DeletionResultResponse]
    kept: list[str]
    total_processed: int
    total_deleted: int
    strategy: str
    dry_run: bool


class DeleteFilesResponse(BaseModel):
    success: bool = True
    data: DeletionData
