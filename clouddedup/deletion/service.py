from __future__ import annotations

import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from clouddedup.core.config import Settings
from clouddedup.core.errors import BackendUnavailable, DeletionPolicyError, InvalidArgument, NotFound
from clouddedup.core.path_safety import basename, normalize_storage_path
from clouddedup.deletion.strategy import DeletionStrategy, parse_strategy, resolve
from clouddedup.duplicates.types import FileDescriptor
from clouddedup.imaging import is_image
from clouddedup.storage.types import StorageBackend

logger = logging.getLogger(__name__)


class DeletionStatus(str, enum.Enum):
    DELETED = "deleted"
    WOULD_DELETE = "would_delete"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    path: str
    status: DeletionStatus
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.status in {DeletionStatus.DELETED, DeletionStatus.WOULD_DELETE}


@dataclass(slots=True)
class DeletionReport:
    results: list[DeletionOutcome]
    kept: list[str]
    strategy: DeletionStrategy
    dry_run: bool

    @property
    def total_processed(self) -> int:
        return len(self.results)

    @property
    def total_deleted(self) -> int:
        return sum(1 for item in self.results if item.status == DeletionStatus.DELETED)


class DeletionService:
    def __init__(self, settings: Settings, backend: StorageBackend):
        self._settings = settings
        self._backend = backend

    def _effective_dry_run(self, dry_run: bool | None) -> bool:
        effective = self._settings.dry_run if dry_run is None else dry_run
        if self._settings.dry_run and not effective:
            raise DeletionPolicyError("Global dry-run mode forbids real deletes")
        if not effective and not self._settings.allow_real_delete:
            raise DeletionPolicyError("Real delete is disabled by configuration")
        return effective

    def _normalize_paths(self, paths: Sequence[str]) -> list[str]:
        if not paths:
            raise InvalidArgument("paths must contain at least one entry")
        normalized: list[str] = []
        for raw in paths:
            key = normalize_storage_path(raw)
            if not key:
                raise InvalidArgument("paths cannot contain the storage root")
            if key not in normalized:
                normalized.append(key)
        return normalized

    def _delete_one(self, path: str, dry_run: bool) -> DeletionOutcome:
        if dry_run:
            return DeletionOutcome(path=path, status=DeletionStatus.WOULD_DELETE, message="dry run")
        try:
            self._backend.delete(path)
        except NotFound as exc:
            return DeletionOutcome(path=path, status=DeletionStatus.NOT_FOUND, message=str(exc))
        except BackendUnavailable as exc:
            logger.error("Failed to delete %s: %s", path, exc)
            return DeletionOutcome(path=path, status=DeletionStatus.ERROR, message=str(exc))
        logger.info("Deleted %s from %s", path, self._backend.name.value)
        return DeletionOutcome(path=path, status=DeletionStatus.DELETED)

    def delete(
        self,
        paths: Sequence[str],
        strategy: str | DeletionStrategy | None = None,
        *,
        dry_run: bool | None = None,
    ) -> DeletionReport:
        """Delete ``paths``, keeping one file per basename group unless the strategy is ``all``."""
        resolved_strategy = parse_strategy(strategy)
        normalized = self._normalize_paths(paths)
        effective_dry_run = self._effective_dry_run(dry_run)

        results: list[DeletionOutcome] = []
        groups: dict[str, list[FileDescriptor]] = {}
        for path in normalized:
            try:
                entry = self._backend.stat(path)
            except NotFound as exc:
                results.append(DeletionOutcome(path=path, status=DeletionStatus.NOT_FOUND, message=str(exc)))
                continue
            descriptor = FileDescriptor(
                path=entry.path,
                size=entry.size,
                last_modified=entry.last_modified,
                is_image=is_image(entry.path, entry.content_type),
            )
            groups.setdefault(basename(path), []).append(descriptor)

        kept: list[str] = []
        for members in groups.values():
            resolution = resolve(members, resolved_strategy)
            if resolution.keep is not None:
                kept.append(resolution.keep.path)
            for candidate in resolution.delete_candidates:
                results.append(self._delete_one(candidate.path, effective_dry_run))

        return DeletionReport(
            results=results,
            kept=kept,
            strategy=resolved_strategy,
            dry_run=effective_dry_run,
        )


def deletion_report_to_dict(report: DeletionReport) -> dict[str, Any]:
    return {
        "results": [
            {
                "path": item.path,
                "status": item.status.value,
                "success": item.success,
                "message": item.message,
            }
            for item in report.results
        ],
        "kept": report.kept,
        "total_processed": report.total_processed,
        "total_deleted": report.total_deleted,
        "strategy": report.strategy.value,
        "dry_run": report.dry_run,
    }
