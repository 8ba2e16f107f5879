from __future__ import annotations

from clouddedup.core.config import Settings
from clouddedup.core.errors import BackendUnavailable, InvalidArgument
from clouddedup.storage.types import BackendName, StorageBackend


def parse_backend_name(raw_name: str) -> BackendName:
    try:
        return BackendName(raw_name.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in BackendName)
        raise InvalidArgument(f"Unsupported storage backend: {raw_name}. Allowed: {allowed}") from exc


def build_backend(name: BackendName, settings: Settings) -> StorageBackend:
    if name == BackendName.LOCAL:
        if settings.local_root is None:
            raise BackendUnavailable("Local storage root is not configured. Please set CLOUDDEDUP_LOCAL_ROOT")
        from clouddedup.storage.local import LocalStorageBackend

        return LocalStorageBackend(settings.local_root)

    if name == BackendName.DROPBOX:
        if not settings.dropbox_token:
            raise BackendUnavailable("Dropbox token is not configured. Please set CLOUDDEDUP_DROPBOX_TOKEN")
        from clouddedup.storage.dropbox_backend import DropboxStorageBackend

        return DropboxStorageBackend(settings.dropbox_token)

    if name == BackendName.GCS:
        if not settings.gcs_bucket:
            raise BackendUnavailable(
                "Google Cloud Storage bucket name not configured. Please set CLOUDDEDUP_GCS_BUCKET"
            )
        from clouddedup.storage.gcs import GCSStorageBackend

        return GCSStorageBackend(
            settings.gcs_bucket,
            project_id=settings.gcs_project_id,
            key_file=settings.gcs_key_file,
        )

    raise InvalidArgument(f"Unsupported storage backend: {name}")
