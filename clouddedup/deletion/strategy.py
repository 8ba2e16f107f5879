from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

from clouddedup.core.errors import InvalidArgument
from clouddedup.duplicates.types import DuplicateCluster, FileDescriptor


class DeletionStrategy(str, enum.Enum):
    ALL = "all"
    NEWEST = "newest"
    OLDEST = "oldest"
    LARGEST = "largest"
    SMALLEST = "smallest"


@dataclass(frozen=True, slots=True)
class Resolution:
    keep: FileDescriptor | None
    delete_candidates: list[FileDescriptor]


def parse_strategy(raw_strategy: str | DeletionStrategy | None) -> DeletionStrategy:
    if raw_strategy is None:
        return DeletionStrategy.ALL
    if isinstance(raw_strategy, DeletionStrategy):
        return raw_strategy
    try:
        return DeletionStrategy(raw_strategy.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in DeletionStrategy)
        raise InvalidArgument(f"Unsupported deletion strategy: {raw_strategy}. Allowed: {allowed}") from exc


def _modified(item: FileDescriptor) -> int:
    # unknown modification time counts as the oldest possible value
    return item.last_modified if item.last_modified is not None else 0


def resolve(files: Sequence[FileDescriptor], strategy: DeletionStrategy) -> Resolution:
    if strategy == DeletionStrategy.ALL:
        return Resolution(keep=None, delete_candidates=list(files))
    if not files:
        return Resolution(keep=None, delete_candidates=[])

    # sorted() is stable, so ties keep their scan order
    if strategy == DeletionStrategy.NEWEST:
        ordered = sorted(files, key=_modified, reverse=True)
    elif strategy == DeletionStrategy.OLDEST:
        ordered = sorted(files, key=_modified)
    elif strategy == DeletionStrategy.LARGEST:
        ordered = sorted(files, key=lambda item: item.size, reverse=True)
    elif strategy == DeletionStrategy.SMALLEST:
        ordered = sorted(files, key=lambda item: item.size)
    else:
        raise InvalidArgument(f"Unsupported deletion strategy: {strategy}")

    return Resolution(keep=ordered[0], delete_candidates=ordered[1:])


def resolve_clusters(clusters: Sequence[DuplicateCluster], strategy: DeletionStrategy) -> list[Resolution]:
    return [resolve(cluster.files, strategy) for cluster in clusters]
