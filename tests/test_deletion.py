from __future__ import annotations

import os
from pathlib import Path

import pytest

from clouddedup.core.config import Settings
from clouddedup.core.errors import BackendUnavailable, DeletionPolicyError, InvalidArgument
from clouddedup.deletion.service import DeletionService, DeletionStatus, deletion_report_to_dict
from clouddedup.deletion.strategy import DeletionStrategy, parse_strategy, resolve, resolve_clusters
from clouddedup.duplicates.types import DetectionMethod, DuplicateCluster, FileDescriptor
from clouddedup.storage.local import LocalStorageBackend


def _descriptor(path: str, size: int, modified: int | None) -> FileDescriptor:
    return FileDescriptor(path=path, size=size, last_modified=modified)


def test_largest_tie_keeps_first_in_scan_order() -> None:
    files = [_descriptor("a", 10, 1), _descriptor("b", 10, 2)]

    resolution = resolve(files, DeletionStrategy.LARGEST)

    assert resolution.keep is not None and resolution.keep.path == "a"
    assert [item.path for item in resolution.delete_candidates] == ["b"]


@pytest.mark.parametrize(
    ("strategy", "expected_keep"),
    [
        (DeletionStrategy.NEWEST, "new"),
        (DeletionStrategy.OLDEST, "old"),
        (DeletionStrategy.LARGEST, "big"),
        (DeletionStrategy.SMALLEST, "small"),
    ],
)
def test_strategies_pick_expected_keep(strategy: DeletionStrategy, expected_keep: str) -> None:
    files = [
        _descriptor("old", 50, 1_000),
        _descriptor("new", 60, 9_000),
        _descriptor("big", 900, 5_000),
        _descriptor("small", 1, 4_000),
    ]

    resolution = resolve(files, strategy)

    assert resolution.keep is not None and resolution.keep.path == expected_keep
    assert len(resolution.delete_candidates) == 3
    assert expected_keep not in [item.path for item in resolution.delete_candidates]


def test_all_strategy_keeps_nothing() -> None:
    files = [_descriptor("a", 1, 1), _descriptor("b", 2, 2)]

    resolution = resolve(files, DeletionStrategy.ALL)

    assert resolution.keep is None
    assert [item.path for item in resolution.delete_candidates] == ["a", "b"]


def test_missing_modification_time_counts_as_oldest() -> None:
    files = [_descriptor("dated", 1, 5), _descriptor("undated", 1, None)]

    assert resolve(files, DeletionStrategy.OLDEST).keep.path == "undated"  # type: ignore[union-attr]
    assert resolve(files, DeletionStrategy.NEWEST).keep.path == "dated"  # type: ignore[union-attr]


def test_resolve_is_idempotent() -> None:
    files = [_descriptor("a", 3, None), _descriptor("b", 3, 7), _descriptor("c", 1, 7)]

    for strategy in DeletionStrategy:
        first = resolve(files, strategy)
        second = resolve(files, strategy)
        assert first == second


def test_resolve_clusters_applies_strategy_per_cluster() -> None:
    clusters = [
        DuplicateCluster(files=[_descriptor("a", 1, 1), _descriptor("b", 2, 2)], match_type=DetectionMethod.SIZE),
        DuplicateCluster(files=[_descriptor("c", 5, 1), _descriptor("d", 4, 2)], match_type=DetectionMethod.SIZE),
    ]

    resolutions = resolve_clusters(clusters, DeletionStrategy.SMALLEST)

    assert [item.keep.path for item in resolutions] == ["a", "d"]  # type: ignore[union-attr]


def test_parse_strategy_rejects_unknown_value() -> None:
    assert parse_strategy(None) == DeletionStrategy.ALL
    assert parse_strategy("Newest") == DeletionStrategy.NEWEST
    with pytest.raises(InvalidArgument):
        parse_strategy("random")


def make_deletion_service(tmp_path: Path, *, dry_run: bool = False) -> tuple[DeletionService, Path]:
    root = tmp_path / "storage"
    root.mkdir(parents=True, exist_ok=True)
    settings = Settings(local_root=root, dry_run=dry_run, allow_real_delete=not dry_run)
    return DeletionService(settings, LocalStorageBackend(root)), root


def _write(root: Path, relative_path: str, data: bytes, *, mtime: int) -> None:
    target = root / relative_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    os.utime(target, (mtime, mtime))


def test_newest_strategy_deletes_older_copy(tmp_path: Path) -> None:
    service, root = make_deletion_service(tmp_path)
    _write(root, "a/x.jpg", b"newer", mtime=1_700_000_500)
    _write(root, "b/x.jpg", b"older", mtime=1_700_000_000)

    report = service.delete(["a/x.jpg", "b/x.jpg"], "newest")

    assert [(item.path, item.status) for item in report.results] == [("b/x.jpg", DeletionStatus.DELETED)]
    assert report.kept == ["a/x.jpg"]
    assert report.total_deleted == 1
    assert (root / "a/x.jpg").exists()
    assert not (root / "b/x.jpg").exists()


def test_all_strategy_deletes_every_path_and_reports_missing(tmp_path: Path) -> None:
    service, root = make_deletion_service(tmp_path)
    _write(root, "one.txt", b"1", mtime=1_700_000_000)
    _write(root, "two.txt", b"2", mtime=1_700_000_000)

    report = service.delete(["/one.txt", "two.txt", "ghost.txt"])

    statuses = {item.path: item.status for item in report.results}
    assert statuses == {
        "one.txt": DeletionStatus.DELETED,
        "two.txt": DeletionStatus.DELETED,
        "ghost.txt": DeletionStatus.NOT_FOUND,
    }
    assert report.kept == []
    assert report.total_processed == 3
    assert report.total_deleted == 2


def test_deleting_twice_reports_not_found(tmp_path: Path) -> None:
    service, root = make_deletion_service(tmp_path)
    _write(root, "once.txt", b"1", mtime=1_700_000_000)

    service.delete(["once.txt"])
    second = service.delete(["once.txt"])

    assert [(item.path, item.status) for item in second.results] == [("once.txt", DeletionStatus.NOT_FOUND)]


def test_dry_run_reports_without_deleting(tmp_path: Path) -> None:
    service, root = make_deletion_service(tmp_path, dry_run=True)
    _write(root, "a/x.jpg", b"big file", mtime=1_700_000_000)
    _write(root, "b/x.jpg", b"tiny", mtime=1_700_000_000)

    report = service.delete(["a/x.jpg", "b/x.jpg"], "largest")

    assert report.dry_run is True
    assert [(item.path, item.status) for item in report.results] == [("b/x.jpg", DeletionStatus.WOULD_DELETE)]
    assert report.total_deleted == 0
    assert (root / "b/x.jpg").exists()


def test_dry_run_policy_blocks_real_delete_request(tmp_path: Path) -> None:
    service, _root = make_deletion_service(tmp_path, dry_run=True)

    with pytest.raises(DeletionPolicyError):
        service.delete(["a.txt"], dry_run=False)


def test_real_delete_requires_explicit_allowance(tmp_path: Path) -> None:
    root = tmp_path / "storage"
    root.mkdir()
    service = DeletionService(
        Settings(local_root=root, dry_run=False, allow_real_delete=False),
        LocalStorageBackend(root),
    )

    with pytest.raises(DeletionPolicyError):
        service.delete(["a.txt"])


def test_delete_rejects_unsafe_paths(tmp_path: Path) -> None:
    service, _root = make_deletion_service(tmp_path)

    with pytest.raises(InvalidArgument):
        service.delete(["../outside.txt"])
    with pytest.raises(InvalidArgument):
        service.delete(["/"])
    with pytest.raises(InvalidArgument):
        service.delete([])


class _FailingDeleteBackend(LocalStorageBackend):
    def delete(self, path: str) -> None:
        raise BackendUnavailable("network down")


def test_backend_errors_are_reported_per_path(tmp_path: Path) -> None:
    root = tmp_path / "storage"
    root.mkdir()
    _write(root, "a.txt", b"1", mtime=1_700_000_000)
    _write(root, "b.txt", b"2", mtime=1_700_000_000)
    service = DeletionService(
        Settings(local_root=root, dry_run=False, allow_real_delete=True),
        _FailingDeleteBackend(root),
    )

    report = service.delete(["a.txt", "b.txt"])
    payload = deletion_report_to_dict(report)

    assert [item["status"] for item in payload["results"]] == ["error", "error"]
    assert all(item["success"] is False for item in payload["results"])
    assert payload["total_deleted"] == 0
    assert payload["strategy"] == "all"


def test_keys_with_tilde_and_dollar_can_be_deleted(tmp_path: Path) -> None:
    service, root = make_deletion_service(tmp_path)
    _write(root, "a/scan~1.jpg", b"1", mtime=1_700_000_000)
    _write(root, "$draft.png", b"2", mtime=1_700_000_000)

    report = service.delete(["a/scan~1.jpg", "/$draft.png"])

    assert [(item.path, item.status) for item in report.results] == [
        ("a/scan~1.jpg", DeletionStatus.DELETED),
        ("$draft.png", DeletionStatus.DELETED),
    ]
    assert not (root / "a/scan~1.jpg").exists()
    assert not (root / "$draft.png").exists()
