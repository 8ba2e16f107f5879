from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class StorageEntryResponse(BaseModel):
    path: str
    type: str
    size: int
    last_modified: int | None
    mime_type: str | None


class ListEntriesResponse(BaseModel):
    success: bool = True
    data: list[StorageEntryResponse]


class CopyFileRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    source: str = Field(min_length=1, max_length=4096)
    destination: str = Field(min_length=1, max_length=4096)


class CopyFileData(BaseModel):
    source: str
    destination: str


class CopyFileResponse(BaseModel):
    success: bool = True
    data: CopyFileData


class UploadFileData(BaseModel):
    path: str
    size: int
    mime_type: str | None


class UploadFileResponse(BaseModel):
    success: bool = True
    data: UploadFileData
