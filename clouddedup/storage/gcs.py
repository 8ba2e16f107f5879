from __future__ import annotations

import logging
import mimetypes
from datetime import datetime
from pathlib import Path

from google.api_core import exceptions as gcs_exceptions
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage

from clouddedup.core.errors import BackendUnavailable, ContentUnavailable, NotFound
from clouddedup.core.path_safety import normalize_storage_path, parent_of
from clouddedup.storage.types import BackendName, EntryKind, StorageBackend, StorageEntry

logger = logging.getLogger(__name__)


def _to_epoch_millis(value: datetime | None) -> int | None:
    if value is None:
        return None
    return int(value.timestamp() * 1000)


class GCSStorageBackend(StorageBackend):
    name = BackendName.GCS

    def __init__(
        self,
        bucket_name: str,
        *,
        project_id: str | None = None,
        key_file: Path | None = None,
        client: storage.Client | None = None,
    ):
        self._bucket_name = bucket_name
        self._project_id = project_id
        self._key_file = key_file
        self._client = client
        self._bucket: storage.Bucket | None = None

    def _get_bucket(self) -> storage.Bucket:
        if self._bucket is not None:
            return self._bucket

        if self._client is None:
            if self._key_file is not None and not self._key_file.is_file():
                raise BackendUnavailable(
                    f"Google Cloud key file not found at: {self._key_file.as_posix()} (CLOUDDEDUP_GCS_KEY_FILE)"
                )
            try:
                if self._key_file is not None:
                    self._client = storage.Client.from_service_account_json(
                        str(self._key_file),
                        project=self._project_id,
                    )
                else:
                    self._client = storage.Client(project=self._project_id)
            except (GoogleAuthError, ValueError) as exc:
                raise BackendUnavailable(f"Failed to create Google Cloud Storage client: {exc}") from exc

        try:
            bucket = self._client.bucket(self._bucket_name)
            if not bucket.exists():
                raise BackendUnavailable(f"Bucket does not exist: {self._bucket_name} (CLOUDDEDUP_GCS_BUCKET)")
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise BackendUnavailable(
                f"Failed to access bucket: {self._bucket_name}. Project ID: {self._project_id}. Error: {exc}"
            ) from exc

        self._bucket = bucket
        return bucket

    def _to_entry(self, blob: storage.Blob) -> StorageEntry:
        content_type = blob.content_type or mimetypes.guess_type(blob.name)[0]
        return StorageEntry(
            path=blob.name,
            kind=EntryKind.FILE,
            size=int(blob.size or 0),
            last_modified=_to_epoch_millis(blob.updated),
            content_type=content_type,
        )

    def _unavailable(self, exc: Exception, path: str) -> BackendUnavailable:
        return BackendUnavailable(
            f"Google Cloud Storage request failed for {self._bucket_name}/{normalize_storage_path(path)}: {exc}"
        )

    def list_entries(self, path: str, *, recursive: bool = False) -> list[StorageEntry]:
        bucket = self._get_bucket()
        key = normalize_storage_path(path)
        prefix = f"{key}/" if key else None
        delimiter = None if recursive else "/"
        logger.info("Listing gs://%s/%s (recursive=%s)", self._bucket_name, prefix or "", recursive)

        entries: list[StorageEntry] = []
        try:
            blobs = bucket.list_blobs(prefix=prefix, delimiter=delimiter)
            files: list[StorageEntry] = []
            for blob in blobs:
                # zero-byte "folder/" placeholders
                if blob.name.endswith("/"):
                    continue
                if not recursive and parent_of(blob.name) != key:
                    continue
                files.append(self._to_entry(blob))
            if not recursive:
                for folder in sorted(blobs.prefixes):
                    entries.append(StorageEntry(path=folder.rstrip("/"), kind=EntryKind.DIRECTORY))
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise self._unavailable(exc, path) from exc

        entries.extend(files)
        return entries

    def _existing_blob(self, path: str) -> storage.Blob:
        bucket = self._get_bucket()
        key = normalize_storage_path(path)
        try:
            blob = bucket.get_blob(key) if key else None
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise self._unavailable(exc, path) from exc
        if blob is None:
            raise NotFound(f"File not found: {key}")
        return blob

    def stat(self, path: str) -> StorageEntry:
        return self._to_entry(self._existing_blob(path))

    def get_content(self, path: str) -> bytes:
        blob = self._existing_blob(path)
        try:
            return blob.download_as_bytes()
        except gcs_exceptions.NotFound as exc:
            raise NotFound(f"File not found: {normalize_storage_path(path)}") from exc
        except gcs_exceptions.Forbidden as exc:
            raise ContentUnavailable(f"Access denied to {normalize_storage_path(path)}: {exc}") from exc
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise self._unavailable(exc, path) from exc

    def put_content(self, path: str, data: bytes, *, content_type: str | None = None) -> StorageEntry:
        bucket = self._get_bucket()
        blob = bucket.blob(normalize_storage_path(path))
        try:
            blob.upload_from_string(data, content_type=content_type or "application/octet-stream")
            blob.reload()
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise self._unavailable(exc, path) from exc
        return self._to_entry(blob)

    def copy(self, source: str, destination: str) -> None:
        bucket = self._get_bucket()
        try:
            blob = self._existing_blob(source)
        except NotFound as exc:
            raise NotFound(f"Source file does not exist: {normalize_storage_path(source)}") from exc
        try:
            bucket.copy_blob(blob, bucket, normalize_storage_path(destination))
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise self._unavailable(exc, source) from exc

    def delete(self, path: str) -> None:
        blob = self._existing_blob(path)
        try:
            blob.delete()
        except gcs_exceptions.NotFound as exc:
            raise NotFound(f"File not found: {normalize_storage_path(path)}") from exc
        except (gcs_exceptions.GoogleAPIError, GoogleAuthError) as exc:
            raise self._unavailable(exc, path) from exc
