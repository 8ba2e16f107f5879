from __future__ import annotations

import logging
import mimetypes
from datetime import datetime, timezone
from typing import Any

import dropbox
import requests
from dropbox.exceptions import ApiError, AuthError, DropboxException
from dropbox.files import FileMetadata, FolderMetadata, WriteMode

from clouddedup.core.errors import BackendUnavailable, ContentUnavailable, NotFound
from clouddedup.core.path_safety import normalize_storage_path
from clouddedup.storage.types import BackendName, EntryKind, StorageBackend, StorageEntry

logger = logging.getLogger(__name__)

# (predicate, accessor) pairs on Dropbox error unions that lead to a LookupError.
_LOOKUP_ACCESSORS = (
    ("is_path", "get_path"),
    ("is_path_lookup", "get_path_lookup"),
    ("is_from_lookup", "get_from_lookup"),
)


def _to_epoch_millis(value: datetime | None) -> int | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def _is_not_found(error: Any) -> bool:
    for predicate, accessor in _LOOKUP_ACCESSORS:
        check = getattr(error, predicate, None)
        if check is None or not check():
            continue
        lookup = getattr(error, accessor)()
        is_not_found = getattr(lookup, "is_not_found", None)
        if is_not_found is not None and is_not_found():
            return True
    return False


class DropboxStorageBackend(StorageBackend):
    name = BackendName.DROPBOX

    def __init__(self, token: str, *, client: dropbox.Dropbox | None = None):
        self._client = client if client is not None else dropbox.Dropbox(token)

    def _remote_path(self, path: str) -> str:
        key = normalize_storage_path(path)
        return f"/{key}" if key else ""

    def _translate(self, exc: Exception, path: str) -> Exception:
        if isinstance(exc, ApiError) and _is_not_found(exc.error):
            return NotFound(f"File not found: {normalize_storage_path(path)}")
        if isinstance(exc, AuthError):
            return BackendUnavailable(f"Dropbox rejected the access token (CLOUDDEDUP_DROPBOX_TOKEN): {exc}")
        return BackendUnavailable(f"Dropbox request failed for {normalize_storage_path(path) or '/'}: {exc}")

    def _to_entry(self, metadata: Any) -> StorageEntry | None:
        if isinstance(metadata, FolderMetadata):
            return StorageEntry(path=metadata.path_display.lstrip("/"), kind=EntryKind.DIRECTORY)
        if isinstance(metadata, FileMetadata):
            content_type, _encoding = mimetypes.guess_type(metadata.name)
            return StorageEntry(
                path=metadata.path_display.lstrip("/"),
                kind=EntryKind.FILE,
                size=int(metadata.size),
                last_modified=_to_epoch_millis(metadata.server_modified),
                content_type=content_type,
            )
        return None

    def list_entries(self, path: str, *, recursive: bool = False) -> list[StorageEntry]:
        remote = self._remote_path(path)
        logger.info("Listing Dropbox folder %s (recursive=%s)", remote or "/", recursive)
        try:
            result = self._client.files_list_folder(remote, recursive=recursive)
            metadata = list(result.entries)
            while result.has_more:
                result = self._client.files_list_folder_continue(result.cursor)
                metadata.extend(result.entries)
        except ApiError as exc:
            if _is_not_found(exc.error):
                return []
            raise self._translate(exc, path) from exc
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, path) from exc

        entries: list[StorageEntry] = []
        for item in metadata:
            entry = self._to_entry(item)
            if entry is None:
                continue
            if recursive and not entry.is_file:
                continue
            entries.append(entry)
        return entries

    def stat(self, path: str) -> StorageEntry:
        try:
            metadata = self._client.files_get_metadata(self._remote_path(path))
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, path) from exc
        entry = self._to_entry(metadata)
        if entry is None or not entry.is_file:
            raise NotFound(f"File not found: {normalize_storage_path(path)}")
        return entry

    def get_content(self, path: str) -> bytes:
        try:
            _metadata, response = self._client.files_download(self._remote_path(path))
        except ApiError as exc:
            if _is_not_found(exc.error):
                raise NotFound(f"File not found: {normalize_storage_path(path)}") from exc
            # unsupported_file, restricted_content and similar are per-object refusals
            raise ContentUnavailable(f"Dropbox cannot download {normalize_storage_path(path)}: {exc.error}") from exc
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, path) from exc
        return response.content

    def account_info(self) -> dict[str, str]:
        try:
            account = self._client.users_get_current_account()
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, "") from exc
        return {
            "account_id": account.account_id,
            "name": account.name.display_name,
            "email": account.email,
        }

    def put_content(self, path: str, data: bytes, *, content_type: str | None = None) -> StorageEntry:
        try:
            metadata = self._client.files_upload(data, self._remote_path(path), mode=WriteMode.overwrite)
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, path) from exc
        entry = self._to_entry(metadata)
        if entry is None:
            raise BackendUnavailable(f"Dropbox returned unexpected metadata for upload to {path}")
        return entry

    def copy(self, source: str, destination: str) -> None:
        try:
            self._client.files_copy_v2(self._remote_path(source), self._remote_path(destination))
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, source) from exc

    def delete(self, path: str) -> None:
        try:
            self._client.files_delete_v2(self._remote_path(path))
        except (DropboxException, requests.RequestException) as exc:
            raise self._translate(exc, path) from exc
