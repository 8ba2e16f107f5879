from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from clouddedup.core.config import Settings


def test_defaults_are_safe() -> None:
    settings = Settings(_env_file=None)

    assert settings.dry_run is True
    assert settings.allow_real_delete is False
    assert settings.content_hash_algorithm == "sha256"
    assert settings.fetch_concurrency == 4


def test_blank_values_become_unset(tmp_path: Path) -> None:
    settings = Settings(_env_file=None, dropbox_token="  ", gcs_bucket="", local_root="")

    assert settings.dropbox_token is None
    assert settings.gcs_bucket is None
    assert settings.local_root is None


def test_real_delete_conflicts_with_dry_run() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, dry_run=True, allow_real_delete=True)


@pytest.mark.parametrize("raw_path", ["relative/dir", "~/storage", "$HOME/storage"])
def test_local_root_must_be_plain_absolute_path(raw_path: str) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, local_root=raw_path)


def test_hash_algorithm_and_log_level_are_normalized() -> None:
    settings = Settings(_env_file=None, content_hash_algorithm=" BLAKE3 ", log_level="debug")

    assert settings.content_hash_algorithm == "blake3"
    assert settings.log_level == "DEBUG"

    with pytest.raises(ValidationError):
        Settings(_env_file=None, content_hash_algorithm="md5")


def test_settings_read_prefixed_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CLOUDDEDUP_LOCAL_ROOT", tmp_path.as_posix())
    monkeypatch.setenv("CLOUDDEDUP_FETCH_CONCURRENCY", "8")

    settings = Settings(_env_file=None)

    assert settings.local_root == tmp_path.resolve()
    assert settings.fetch_concurrency == 8
