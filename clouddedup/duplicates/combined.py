from __future__ import annotations

from collections.abc import Mapping, Sequence

from clouddedup.duplicates.types import DetectionMethod, DuplicateCluster, FileDescriptor


def intersect_clusters(
    method_groups: Mapping[DetectionMethod, Sequence[Sequence[FileDescriptor]]],
    methods: Sequence[DetectionMethod],
) -> list[DuplicateCluster]:
    """Clusters of files that share a group under every requested method.

    ``method_groups`` holds the final duplicate groups (two or more members) of
    each individual method. The first method seeds the candidate sets and each
    further method splits them by its own group membership. Parts left with a
    single file can never regain a partner, so they are dropped immediately.
    """
    criteria = [method for method in methods if method != DetectionMethod.COMBINED]
    if not criteria:
        return []

    membership: dict[DetectionMethod, dict[str, int]] = {}
    for method in criteria:
        membership[method] = {
            item.path: group_index
            for group_index, group in enumerate(method_groups.get(method, ()))
            for item in group
        }

    candidates = [list(group) for group in method_groups.get(criteria[0], ()) if len(group) > 1]
    for method in criteria[1:]:
        if not candidates:
            break
        lookup = membership[method]
        refined: list[list[FileDescriptor]] = []
        for candidate in candidates:
            parts: dict[int, list[FileDescriptor]] = {}
            for item in candidate:
                group_index = lookup.get(item.path)
                if group_index is None:
                    continue
                parts.setdefault(group_index, []).append(item)
            refined.extend(part for part in parts.values() if len(part) > 1)
        candidates = refined

    return [
        DuplicateCluster(
            files=candidate,
            match_type=DetectionMethod.COMBINED,
            matched_criteria=list(criteria),
        )
        for candidate in candidates
    ]
