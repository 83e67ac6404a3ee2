"""Tests for creating tag directories."""

from __future__ import annotations

from pathlib import Path

import pytest

from linktag.tagging import (
    InvalidNameError,
    TagAlreadyExistsError,
    TagCreateError,
    TagDirectoryManager,
)


def test_create_tag_makes_directory(tmp_path: Path) -> None:
    tags = tmp_path / "tags"
    tags.mkdir()

    tag = TagDirectoryManager().create_tag(tags, "work")

    assert tag.name == "work"
    assert tag.path == tags.resolve() / "work"
    assert tag.path.is_dir()


def test_create_existing_tag_fails_and_creates_nothing(tmp_path: Path) -> None:
    tags = tmp_path / "tags"
    (tags / "work").mkdir(parents=True)
    (tags / "work" / "a.txt").symlink_to(tmp_path)

    with pytest.raises(TagAlreadyExistsError):
        TagDirectoryManager().create_tag(tags, "work")

    assert sorted(entry.name for entry in tags.iterdir()) == ["work"]
    assert [entry.name for entry in (tags / "work").iterdir()] == ["a.txt"]


@pytest.mark.parametrize("kind", ["file", "broken-link"])
def test_create_tag_rejects_any_existing_entry(tmp_path: Path, kind: str) -> None:
    tags = tmp_path / "tags"
    tags.mkdir()
    if kind == "file":
        (tags / "work").write_text("x", encoding="utf-8")
    else:
        (tags / "work").symlink_to(tmp_path / "missing")

    with pytest.raises(TagAlreadyExistsError):
        TagDirectoryManager().create_tag(tags, "work")


@pytest.mark.parametrize("name", ["", "   ", ".", "..", "a/b", "/work", "nul\0byte"])
def test_create_tag_rejects_invalid_names(tmp_path: Path, name: str) -> None:
    tags = tmp_path / "tags"
    tags.mkdir()

    with pytest.raises(InvalidNameError):
        TagDirectoryManager().create_tag(tags, name)

    assert list(tags.iterdir()) == []


def test_create_tag_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(TagCreateError):
        TagDirectoryManager().create_tag(tmp_path / "missing", "work")
