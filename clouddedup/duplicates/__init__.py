from clouddedup.duplicates.combined import intersect_clusters
from clouddedup.duplicates.fingerprint import UNKNOWN_DIMENSIONS, content_hash, fingerprint
from clouddedup.duplicates.service import DuplicateService, detection_result_to_dict, parse_methods
from clouddedup.duplicates.size_grouping import group_by_size, size_range_key
from clouddedup.duplicates.types import (
    DetectionMethod,
    DetectionResult,
    Dimensions,
    DuplicateCluster,
    FileDescriptor,
    SkippedFile,
)

__all__ = [
    "DetectionMethod",
    "DetectionResult",
    "Dimensions",
    "DuplicateCluster",
    "DuplicateService",
    "FileDescriptor",
    "SkippedFile",
    "UNKNOWN_DIMENSIONS",
    "content_hash",
    "detection_result_to_dict",
    "fingerprint",
    "group_by_size",
    "intersect_clusters",
    "parse_methods",
    "size_range_key",
]
