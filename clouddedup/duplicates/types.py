from __future__ import annotations

import enum
from dataclasses import dataclass, field


class DetectionMethod(str, enum.Enum):
    CONTENT = "content"
    FILENAME = "filename"
    SIZE = "size"
    DIMENSIONS = "dimensions"
    COMBINED = "combined"


@dataclass(frozen=True, slots=True)
class Dimensions:
    width: int
    height: int

    @property
    def key(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True, slots=True)
class FileDescriptor:
    path: str
    size: int
    last_modified: int | None = None
    is_image: bool = False
    dimensions: Dimensions | None = None

    def __post_init__(self) -> None:
        if self.dimensions is not None and not self.is_image:
            raise ValueError(f"Non-image file cannot carry dimensions: {self.path}")
        if self.size < 0:
            raise ValueError(f"File size cannot be negative: {self.path}")


GroupKey = str | int

FingerprintTable = dict[DetectionMethod, dict[GroupKey, list[FileDescriptor]]]


@dataclass(slots=True)
class DuplicateCluster:
    files: list[FileDescriptor]
    match_type: DetectionMethod
    matched_criteria: list[DetectionMethod] | None = None
    dimensions: Dimensions | None = None
    size: int | None = None

    def __post_init__(self) -> None:
        if len(self.files) < 2:
            raise ValueError("A duplicate cluster needs at least two files")

    @property
    def paths(self) -> list[str]:
        return [item.path for item in self.files]


@dataclass(frozen=True, slots=True)
class SkippedFile:
    path: str
    method: DetectionMethod
    reason: str


@dataclass(slots=True)
class DetectionResult:
    clusters: list[DuplicateCluster]
    methods: list[DetectionMethod]
    size_tolerance: float | None
    image_only: bool
    recursive: bool
    skipped: list[SkippedFile] = field(default_factory=list)

    @property
    def total_groups(self) -> int:
        return len(self.clusters)

    @property
    def total_duplicate_files(self) -> int:
        return sum(len(cluster.files) for cluster in self.clusters)
