from __future__ import annotations

import pytest

from clouddedup.core.path_safety import (
    PathSafetyError,
    basename,
    join_storage_path,
    normalize_storage_path,
    parent_of,
)


@pytest.mark.parametrize(
    "raw_path",
    [
        "../evil.bin",
        "nested/../../escape.bin",
    ],
)
def test_normalize_storage_path_rejects_unsafe_input(raw_path: str) -> None:
    with pytest.raises(PathSafetyError):
        normalize_storage_path(raw_path)


@pytest.mark.parametrize(
    ("raw_path", "expected"),
    [
        ("media/photo.jpg", "media/photo.jpg"),
        ("/media//photo.jpg", "media/photo.jpg"),
        ("./media/./photo.jpg/", "media/photo.jpg"),
        ("/", ""),
        ("a/scan~1.jpg", "a/scan~1.jpg"),
        ("/$draft.png", "$draft.png"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_storage_path_canonicalizes_keys(raw_path: str | None, expected: str) -> None:
    assert normalize_storage_path(raw_path) == expected


def test_path_helpers() -> None:
    assert basename("a/b/Report.pdf") == "Report.pdf"
    assert basename("Report.pdf") == "Report.pdf"
    assert parent_of("a/b/Report.pdf") == "a/b"
    assert parent_of("Report.pdf") == ""
    assert join_storage_path("uploads/", "photo.jpg") == "uploads/photo.jpg"
    assert join_storage_path("", "photo.jpg") == "photo.jpg"
