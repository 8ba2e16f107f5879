from clouddedup.deletion.service import (
    DeletionOutcome,
    DeletionReport,
    DeletionService,
    DeletionStatus,
    deletion_report_to_dict,
)
from clouddedup.deletion.strategy import DeletionStrategy, Resolution, parse_strategy, resolve, resolve_clusters

__all__ = [
    "DeletionOutcome",
    "DeletionReport",
    "DeletionService",
    "DeletionStatus",
    "DeletionStrategy",
    "Resolution",
    "deletion_report_to_dict",
    "parse_strategy",
    "resolve",
    "resolve_clusters",
]
