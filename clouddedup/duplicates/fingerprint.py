from __future__ import annotations

import hashlib

import blake3

from clouddedup.core.config import SUPPORTED_HASH_ALGORITHMS
from clouddedup.core.errors import ContentUnavailable, UnsupportedMethod
from clouddedup.core.path_safety import basename
from clouddedup.duplicates.size_grouping import size_range_key
from clouddedup.duplicates.types import DetectionMethod, FileDescriptor, GroupKey

# Never produced for a real image; the cluster builder drops this key.
UNKNOWN_DIMENSIONS = "dimensions:unknown"


def content_hash(data: bytes, algorithm: str = "sha256") -> str:
    normalized = algorithm.lower().strip()
    if normalized == "sha256":
        digest = hashlib.sha256(data).hexdigest()
    elif normalized == "blake3":
        digest = blake3.blake3(data).hexdigest()
    else:
        raise ValueError(f"hash algorithm must be one of {sorted(SUPPORTED_HASH_ALGORITHMS)}")
    return f"{normalized}:{digest}"


def fingerprint(
    method: DetectionMethod,
    file: FileDescriptor,
    content: bytes | None = None,
    *,
    size_tolerance: float = 0,
    hash_algorithm: str = "sha256",
) -> GroupKey:
    if method == DetectionMethod.CONTENT:
        if content is None:
            raise ContentUnavailable(f"Content unavailable for {file.path}")
        return content_hash(content, hash_algorithm)
    if method == DetectionMethod.FILENAME:
        return basename(file.path)
    if method == DetectionMethod.SIZE:
        return size_range_key(file.size, size_tolerance)
    if method == DetectionMethod.DIMENSIONS:
        if file.dimensions is None:
            return UNKNOWN_DIMENSIONS
        return file.dimensions.key
    if method == DetectionMethod.COMBINED:
        raise UnsupportedMethod("combined has no direct fingerprint; it intersects the other methods")
    raise UnsupportedMethod(f"Unsupported detection method: {method}")
