"""Tests for path canonicalization and relative link targets."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from linktag.scanning import PathResolutionError, canonicalize, is_within, relative_target
from linktag.scanning.paths import display_name, resolves_to


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("data", encoding="utf-8")
    return path


@pytest.mark.parametrize(
    ("tag_rel", "item_rel", "expected"),
    [
        ("tags/work", "source/a.txt", "../../source/a.txt"),
        ("tags/work", "tags/b.txt", "../b.txt"),
        ("tags/a/b/c", "source/x/y/z.txt", "../../../../source/x/y/z.txt"),
        ("tags/work", "tags/work/inner/f.txt", "inner/f.txt"),
        ("tags", "source/deep/er/f.txt", "../source/deep/er/f.txt"),
    ],
)
def test_relative_target_round_trips(
    tmp_path: Path, tag_rel: str, item_rel: str, expected: str
) -> None:
    tag_dir = tmp_path / tag_rel
    tag_dir.mkdir(parents=True, exist_ok=True)
    item = _touch(tmp_path / item_rel)

    target = relative_target(tag_dir, item)

    assert target == Path(expected)
    assert not target.is_absolute()
    assert resolves_to(tag_dir, target) == item.resolve()


def test_relative_target_to_ancestor_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    tag_dir = project / "sub" / "tag"
    tag_dir.mkdir(parents=True)

    target = relative_target(tag_dir, project)

    assert target == Path("../..")
    assert (tag_dir / target).resolve() == project.resolve()


def test_relative_target_uses_canonical_paths(tmp_path: Path) -> None:
    real_tags = tmp_path / "real" / "tags" / "work"
    real_tags.mkdir(parents=True)
    alias = tmp_path / "alias"
    alias.symlink_to(tmp_path / "real")
    item = _touch(tmp_path / "source" / "a.txt")

    target = relative_target(alias / "tags" / "work", item)

    assert target == Path("../../../source/a.txt")
    assert (real_tags / target).resolve() == item.resolve()


def test_relative_target_is_independent_of_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    tag_dir = tmp_path / "tags" / "work"
    tag_dir.mkdir(parents=True)
    item = _touch(tmp_path / "source" / "a.txt")

    monkeypatch.chdir(tmp_path / "source")
    from_source = relative_target(tag_dir, item)
    monkeypatch.chdir(tag_dir)
    from_tag = relative_target(tag_dir, item)

    assert from_source == from_tag == Path("../../source/a.txt")


def test_relative_target_missing_item_raises(tmp_path: Path) -> None:
    tag_dir = tmp_path / "tags" / "work"
    tag_dir.mkdir(parents=True)

    with pytest.raises(PathResolutionError):
        relative_target(tag_dir, tmp_path / "source" / "missing.txt")


def test_relative_target_missing_tag_raises(tmp_path: Path) -> None:
    item = _touch(tmp_path / "source" / "a.txt")

    with pytest.raises(PathResolutionError):
        relative_target(tmp_path / "tags" / "nope", item)


def test_canonicalize_resolves_relative_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    item = _touch(tmp_path / "source" / "a.txt")
    monkeypatch.chdir(tmp_path)

    assert canonicalize("source/./a.txt") == item.resolve()


def test_is_within() -> None:
    root = Path("/data/source")

    assert is_within(Path("/data/source"), root)
    assert is_within(Path("/data/source/a/b"), root)
    assert not is_within(Path("/data/sourcery"), root)
    assert not is_within(Path("/data"), root)


@pytest.mark.skipif(os.name != "posix", reason="byte file names are a POSIX feature")
def test_display_name_replaces_undecodable_bytes() -> None:
    raw = Path("tags") / os.fsdecode(b"caf\xe9.txt")

    assert display_name(raw) == "tags/caf�.txt"
    assert display_name("plain/name.txt") == "plain/name.txt"
