from __future__ import annotations

from pydantic import BaseModel


class DropboxAccountData(BaseModel):
    account_id: str
    name: str
    email: str


class DropboxConnectionResponse(BaseModel):
    success: bool = True
    message: str = "Dropbox connection successful"
    data: DropboxAccountData
