from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any

from clouddedup.core.config import Settings
from clouddedup.core.errors import ContentUnavailable, DecodeError, InvalidArgument, NotFound
from clouddedup.core.path_safety import normalize_storage_path
from clouddedup.duplicates.combined import intersect_clusters
from clouddedup.duplicates.fingerprint import UNKNOWN_DIMENSIONS, fingerprint
from clouddedup.duplicates.size_grouping import group_by_size, validate_tolerance
from clouddedup.duplicates.types import (
    DetectionMethod,
    DetectionResult,
    Dimensions,
    DuplicateCluster,
    FileDescriptor,
    FingerprintTable,
    GroupKey,
    SkippedFile,
)
from clouddedup.imaging import decode_dimensions, is_image
from clouddedup.storage.types import StorageBackend, StorageEntry

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Inspection:
    index: int
    descriptor: FileDescriptor
    content_key: GroupKey | None = None
    skipped: list[SkippedFile] = field(default_factory=list)


def parse_methods(raw_methods: Iterable[str | DetectionMethod]) -> list[DetectionMethod]:
    """Validate requested method names, keeping request order and dropping repeats."""
    parsed: list[DetectionMethod] = []
    for raw in raw_methods:
        try:
            method = raw if isinstance(raw, DetectionMethod) else DetectionMethod(str(raw).strip().lower())
        except ValueError as exc:
            allowed = ", ".join(item.value for item in DetectionMethod)
            raise InvalidArgument(f"Unsupported detection method: {raw}. Allowed: {allowed}") from exc
        if method not in parsed:
            parsed.append(method)

    if not parsed:
        raise InvalidArgument("At least one detection method is required")
    if parsed == [DetectionMethod.COMBINED]:
        raise InvalidArgument("The combined method needs at least one other method to intersect")
    return parsed


class DuplicateService:
    def __init__(self, settings: Settings, backend: StorageBackend):
        self._settings = settings
        self._backend = backend

    def _needs_content(self, criteria: Sequence[DetectionMethod], image: bool) -> bool:
        if DetectionMethod.CONTENT in criteria:
            return True
        return image and DetectionMethod.DIMENSIONS in criteria

    def _inspect(
        self,
        index: int,
        entry: StorageEntry,
        image: bool,
        criteria: Sequence[DetectionMethod],
    ) -> _Inspection:
        descriptor = FileDescriptor(
            path=entry.path,
            size=entry.size,
            last_modified=entry.last_modified,
            is_image=image,
        )
        inspection = _Inspection(index=index, descriptor=descriptor)
        if not self._needs_content(criteria, image):
            return inspection

        try:
            try:
                data = self._backend.get_content(entry.path)
            except NotFound as exc:
                raise ContentUnavailable(f"File disappeared before it could be read: {entry.path}") from exc
        except ContentUnavailable as exc:
            logger.warning("Skipping content-derived criteria for %s: %s", entry.path, exc)
            for method in (DetectionMethod.CONTENT, DetectionMethod.DIMENSIONS):
                if method in criteria:
                    inspection.skipped.append(SkippedFile(path=entry.path, method=method, reason=str(exc)))
            return inspection

        if DetectionMethod.CONTENT in criteria:
            inspection.content_key = fingerprint(
                DetectionMethod.CONTENT,
                descriptor,
                data,
                hash_algorithm=self._settings.content_hash_algorithm,
            )

        if image and DetectionMethod.DIMENSIONS in criteria:
            try:
                width, height = decode_dimensions(data)
            except DecodeError as exc:
                logger.warning("Skipping dimensions for %s: %s", entry.path, exc)
                inspection.skipped.append(
                    SkippedFile(path=entry.path, method=DetectionMethod.DIMENSIONS, reason=str(exc))
                )
            else:
                inspection.descriptor = FileDescriptor(
                    path=descriptor.path,
                    size=descriptor.size,
                    last_modified=descriptor.last_modified,
                    is_image=True,
                    dimensions=Dimensions(width=width, height=height),
                )

        return inspection

    def _inspect_all(
        self,
        candidates: Sequence[tuple[StorageEntry, bool]],
        criteria: Sequence[DetectionMethod],
    ) -> list[_Inspection]:
        if not any(self._needs_content(criteria, image) for _entry, image in candidates):
            return [self._inspect(index, entry, image, criteria) for index, (entry, image) in enumerate(candidates)]

        results: list[_Inspection] = []
        executor = ThreadPoolExecutor(max_workers=int(self._settings.fetch_concurrency))
        try:
            futures = [
                executor.submit(self._inspect, index, entry, image, criteria)
                for index, (entry, image) in enumerate(candidates)
            ]
            for future in as_completed(futures):
                results.append(future.result())
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        # completion order is arbitrary; restore scan order
        results.sort(key=lambda item: item.index)
        return results

    def _build_table(
        self,
        inspections: Sequence[_Inspection],
        criteria: Sequence[DetectionMethod],
        size_tolerance: float,
    ) -> FingerprintTable:
        table: FingerprintTable = {method: {} for method in criteria}
        for inspection in inspections:
            descriptor = inspection.descriptor
            for method in criteria:
                if method == DetectionMethod.CONTENT:
                    key = inspection.content_key
                    if key is None:
                        continue
                else:
                    key = fingerprint(method, descriptor, size_tolerance=size_tolerance)
                if method == DetectionMethod.DIMENSIONS and key == UNKNOWN_DIMENSIONS:
                    continue
                table[method].setdefault(key, []).append(descriptor)
        return table

    def _method_groups(
        self,
        table: FingerprintTable,
        scan_order: dict[str, int],
        size_tolerance: float,
    ) -> dict[DetectionMethod, list[list[FileDescriptor]]]:
        groups: dict[DetectionMethod, list[list[FileDescriptor]]] = {}
        for method, keyed in table.items():
            if method == DetectionMethod.SIZE:
                # Range buckets are per-file and can split neighbours, so refine across all of them.
                bucketed = [item for bucket in keyed.values() for item in bucket]
                bucketed.sort(key=lambda item: scan_order[item.path])
                groups[method] = group_by_size(bucketed, size_tolerance)
            else:
                groups[method] = [list(members) for members in keyed.values() if len(members) > 1]
        return groups

    def _to_cluster(self, method: DetectionMethod, files: list[FileDescriptor]) -> DuplicateCluster:
        cluster = DuplicateCluster(files=files, match_type=method)
        if method == DetectionMethod.DIMENSIONS:
            cluster.dimensions = files[0].dimensions
        elif method == DetectionMethod.SIZE:
            cluster.size = files[0].size
        return cluster

    def find_duplicates(
        self,
        path: str,
        methods: Iterable[str | DetectionMethod],
        *,
        recursive: bool = False,
        image_only: bool = False,
        size_tolerance: float = 0,
    ) -> DetectionResult:
        parsed = parse_methods(methods)
        tolerance = validate_tolerance(size_tolerance)
        key = normalize_storage_path(path)
        criteria = [method for method in parsed if method != DetectionMethod.COMBINED]

        entries = self._backend.list_files(key, recursive=recursive)
        candidates: list[tuple[StorageEntry, bool]] = []
        for entry in entries:
            image = is_image(entry.path, entry.content_type)
            if image_only and not image:
                continue
            candidates.append((entry, image))

        logger.info(
            "Scanning %d files under %r on %s for %s",
            len(candidates),
            key or "/",
            self._backend.name.value,
            ",".join(method.value for method in parsed),
        )

        inspections = self._inspect_all(candidates, criteria)
        scan_order = {item.descriptor.path: item.index for item in inspections}
        table = self._build_table(inspections, criteria, tolerance)
        method_groups = self._method_groups(table, scan_order, tolerance)

        clusters: list[DuplicateCluster] = []
        for method in parsed:
            if method == DetectionMethod.COMBINED:
                clusters.extend(intersect_clusters(method_groups, criteria))
            else:
                clusters.extend(self._to_cluster(method, group) for group in method_groups[method])

        skipped = [item for inspection in inspections for item in inspection.skipped]
        logger.info("Found %d duplicate groups (%d files skipped for some criteria)", len(clusters), len(skipped))
        return DetectionResult(
            clusters=clusters,
            methods=parsed,
            size_tolerance=tolerance if DetectionMethod.SIZE in criteria else None,
            image_only=image_only,
            recursive=recursive,
            skipped=skipped,
        )


def dimensions_to_dict(dimensions: Dimensions | None) -> dict[str, int] | None:
    if dimensions is None:
        return None
    return {"width": dimensions.width, "height": dimensions.height}


def file_descriptor_to_dict(descriptor: FileDescriptor) -> dict[str, Any]:
    return {
        "path": descriptor.path,
        "size": descriptor.size,
        "last_modified": descriptor.last_modified,
        "is_image": descriptor.is_image,
        "dimensions": dimensions_to_dict(descriptor.dimensions),
    }


def duplicate_cluster_to_dict(cluster: DuplicateCluster) -> dict[str, Any]:
    return {
        "files": [file_descriptor_to_dict(item) for item in cluster.files],
        "match_type": cluster.match_type.value,
        "matched_criteria": (
            [method.value for method in cluster.matched_criteria] if cluster.matched_criteria is not None else None
        ),
        "dimensions": dimensions_to_dict(cluster.dimensions),
        "size": cluster.size,
    }


def detection_result_to_dict(result: DetectionResult) -> dict[str, Any]:
    return {
        "duplicates": [duplicate_cluster_to_dict(cluster) for cluster in result.clusters],
        "total_groups": result.total_groups,
        "total_duplicate_files": result.total_duplicate_files,
        "methods": [method.value for method in result.methods],
        "size_tolerance": result.size_tolerance,
        "image_only": result.image_only,
        "recursive": result.recursive,
        "skipped": [
            {"path": item.path, "method": item.method.value, "reason": item.reason} for item in result.skipped
        ],
    }
