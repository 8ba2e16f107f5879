from __future__ import annotations

import itertools

from clouddedup.duplicates.combined import intersect_clusters
from clouddedup.duplicates.types import DetectionMethod, FileDescriptor

A = FileDescriptor(path="a/x.jpg", size=100)
B = FileDescriptor(path="b/x.jpg", size=100)
C = FileDescriptor(path="c/x.jpg", size=300)
D = FileDescriptor(path="d/z.jpg", size=100)
E = FileDescriptor(path="e/z.jpg", size=100)


def _method_groups() -> dict[DetectionMethod, list[list[FileDescriptor]]]:
    return {
        DetectionMethod.CONTENT: [[A, B, D, E]],
        DetectionMethod.FILENAME: [[A, B, C], [D, E]],
        DetectionMethod.SIZE: [[A, B, D, E]],
    }


def _as_path_sets(clusters) -> set[frozenset[str]]:
    return {frozenset(cluster.paths) for cluster in clusters}


def test_combined_requires_agreement_on_every_method() -> None:
    methods = [DetectionMethod.CONTENT, DetectionMethod.FILENAME, DetectionMethod.SIZE]

    clusters = intersect_clusters(_method_groups(), methods)

    assert _as_path_sets(clusters) == {frozenset({"a/x.jpg", "b/x.jpg"}), frozenset({"d/z.jpg", "e/z.jpg"})}
    for cluster in clusters:
        assert cluster.match_type == DetectionMethod.COMBINED
        assert cluster.matched_criteria == methods


def test_combined_result_does_not_depend_on_method_order() -> None:
    methods = [DetectionMethod.CONTENT, DetectionMethod.FILENAME, DetectionMethod.SIZE]
    expected = _as_path_sets(intersect_clusters(_method_groups(), methods))

    for ordering in itertools.permutations(methods):
        assert _as_path_sets(intersect_clusters(_method_groups(), list(ordering))) == expected


def test_combined_is_a_subset_of_each_method() -> None:
    groups = _method_groups()
    methods = list(groups)

    clusters = intersect_clusters(groups, methods)
    combined_paths = {path for cluster in clusters for path in cluster.paths}

    for method in methods:
        method_paths = {item.path for group in groups[method] for item in group}
        assert combined_paths <= method_paths


def test_combined_short_circuits_to_empty() -> None:
    groups = _method_groups()
    groups[DetectionMethod.DIMENSIONS] = []
    methods = [DetectionMethod.DIMENSIONS, DetectionMethod.CONTENT, DetectionMethod.FILENAME]

    assert intersect_clusters(groups, methods) == []


def test_combined_drops_files_left_without_a_partner() -> None:
    groups = {
        DetectionMethod.CONTENT: [[A, B, C]],
        DetectionMethod.SIZE: [[A, B], [C, D]],
    }

    clusters = intersect_clusters(groups, [DetectionMethod.CONTENT, DetectionMethod.SIZE])

    assert _as_path_sets(clusters) == {frozenset({"a/x.jpg", "b/x.jpg"})}


def test_combined_with_single_method_degenerates_to_that_method() -> None:
    groups = {DetectionMethod.FILENAME: [[A, B, C], [D, E]]}

    clusters = intersect_clusters(groups, [DetectionMethod.FILENAME, DetectionMethod.COMBINED])

    assert [cluster.paths for cluster in clusters] == [["a/x.jpg", "b/x.jpg", "c/x.jpg"], ["d/z.jpg", "e/z.jpg"]]
    assert all(cluster.matched_criteria == [DetectionMethod.FILENAME] for cluster in clusters)
