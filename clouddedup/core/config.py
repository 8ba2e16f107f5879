from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import PositiveInt, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_HASH_ALGORITHMS = {"blake3", "sha256"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLOUDDEDUP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "CloudDedup"
    environment: str = "production"
    log_level: str = "INFO"

    dry_run: bool = True
    allow_real_delete: bool = False

    local_root: Path | None = None

    dropbox_token: str | None = None

    gcs_bucket: str | None = None
    gcs_project_id: str | None = None
    gcs_key_file: Path | None = None

    content_hash_algorithm: str = "sha256"
    fetch_concurrency: PositiveInt = 4
    max_upload_bytes: PositiveInt = 100 * 1024 * 1024

    @field_validator("local_root", "gcs_key_file", mode="before")
    @classmethod
    def _normalize_path(cls, value: str | Path | None) -> Path | None:
        if value is None or str(value).strip() == "":
            return None
        raw = str(value)
        if "~" in raw:
            raise ValueError("Home expansion syntax is not allowed in paths")
        if "$" in raw:
            raise ValueError("Environment variable syntax is not allowed in paths")
        path = Path(raw)
        if not path.is_absolute():
            raise ValueError("Path settings must be absolute")
        return path

    @field_validator("dropbox_token", "gcs_bucket", "gcs_project_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @model_validator(mode="after")
    def _validate_runtime_constraints(self) -> "Settings":
        if self.local_root is not None:
            self.local_root = self.local_root.resolve(strict=False)

        if self.allow_real_delete and self.dry_run:
            raise ValueError("allow_real_delete cannot be true while dry_run is enabled")

        normalized_algorithm = self.content_hash_algorithm.lower().strip()
        if normalized_algorithm not in SUPPORTED_HASH_ALGORITHMS:
            raise ValueError(f"content_hash_algorithm must be one of {sorted(SUPPORTED_HASH_ALGORITHMS)}")
        self.content_hash_algorithm = normalized_algorithm

        self.log_level = self.log_level.upper().strip()
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
