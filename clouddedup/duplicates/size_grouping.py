"""Grouping of files whose byte sizes lie within a percentage tolerance.

Two functions live here and they are deliberately not equivalent:

``size_range_key`` quantizes a size into a coarse bucket. The bucket width is
derived from the file's own size, so two files a few bytes apart can still land
in different buckets (1000 and 1020 at 3% give 990 and 1020). It is only used as
the fingerprint table key for the size method.

``group_by_size`` is the greedy pairwise clustering that decides the final size
clusters. Every group is seeded by the first unassigned file in scan order and
collects each later unassigned file within ``seed * tolerance / 100`` bytes of
the seed. The relation is not transitive: with sizes 100, 104, 108 at 5%,
104 joins the 100 group but 108 does not, even though 104 and 108 are within
tolerance of each other.

At tolerance zero both functions degrade to exact size equality.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from clouddedup.core.errors import InvalidArgument
from clouddedup.duplicates.types import FileDescriptor


def validate_tolerance(tolerance_percent: float) -> float:
    try:
        value = float(tolerance_percent)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument("size_tolerance must be a number") from exc
    if math.isnan(value) or value < 0 or value > 100:
        raise InvalidArgument("size_tolerance must be between 0 and 100")
    return value


def size_range_key(size: int, tolerance_percent: float) -> int:
    tolerance = validate_tolerance(tolerance_percent)
    if tolerance == 0:
        return size
    range_size = max(1, math.floor(size * tolerance / 100))
    return (size // range_size) * range_size


def within_tolerance(seed_size: int, other_size: int, tolerance_percent: float) -> bool:
    return abs(seed_size - other_size) <= seed_size * tolerance_percent / 100


def group_by_size(files: Sequence[FileDescriptor], tolerance_percent: float) -> list[list[FileDescriptor]]:
    tolerance = validate_tolerance(tolerance_percent)
    assigned = [False] * len(files)
    groups: list[list[FileDescriptor]] = []

    for seed_index, seed in enumerate(files):
        if assigned[seed_index]:
            continue
        assigned[seed_index] = True
        group = [seed]
        for other_index in range(seed_index + 1, len(files)):
            if assigned[other_index]:
                continue
            candidate = files[other_index]
            if within_tolerance(seed.size, candidate.size, tolerance):
                assigned[other_index] = True
                group.append(candidate)
        if len(group) > 1:
            groups.append(group)

    return groups
