"""Tests for the link collection facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from linktag.collection import LinkCollection
from linktag.config.models import ScanOptions
from linktag.scanning import OverlappingRootsError, PathResolutionError, ScanError
from linktag.tagging import AppliedMutation, SkippedMutation, TagAlreadyExistsError, TagState


def _collection(tmp_path: Path, scan: ScanOptions | None = None) -> LinkCollection:
    source = tmp_path / "source"
    tags = tmp_path / "tags"
    (source / "docs").mkdir(parents=True)
    (tags / "work").mkdir(parents=True)
    (source / "a.txt").write_text("a", encoding="utf-8")
    (source / "b.txt").write_text("b", encoding="utf-8")
    (source / "docs" / "c.txt").write_text("c", encoding="utf-8")
    return LinkCollection(source, tags, scan)


def test_collection_scenario(tmp_path: Path) -> None:
    collection = _collection(tmp_path)
    selection = collection.select(["a.txt", "b.txt"])
    work = collection.tag("work")

    assert collection.aggregate(selection, work) is TagState.UNTAGGED

    result = collection.toggle(selection, work)
    assert isinstance(result, AppliedMutation)
    assert len(result.created) == 2
    assert collection.aggregate(selection, work) is TagState.TAGGED

    (work.path / "a.txt").unlink()
    assert collection.aggregate(selection, work) is TagState.MIXED
    assert isinstance(collection.toggle(selection, work), SkippedMutation)
    assert [entry.name for entry in work.path.iterdir()] == ["b.txt"]


def test_item_accepts_relative_absolute_and_cwd_paths(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    collection = _collection(tmp_path, ScanOptions(recursive=True))

    by_root = collection.item("docs/c.txt")
    by_absolute = collection.item(tmp_path / "source" / "docs" / "c.txt")
    monkeypatch.chdir(tmp_path / "source" / "docs")
    by_cwd = collection.item("c.txt")

    assert by_root == by_absolute == by_cwd
    assert by_root.name == "docs/c.txt"


def test_item_prefers_source_root_over_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    collection = _collection(tmp_path)
    work = collection.tag("work")
    collection.toggle(collection.select(["a.txt"]), work)

    monkeypatch.chdir(work.path)
    item = collection.item("a.txt")

    assert item.path == collection.source_root / "a.txt"
    assert item.name == "a.txt"


def test_item_rejects_entries_the_scan_does_not_list(tmp_path: Path) -> None:
    collection = _collection(tmp_path)
    (collection.source_root / ".hidden").write_text("h", encoding="utf-8")

    for path in ("docs/c.txt", ".hidden"):
        with pytest.raises(PathResolutionError):
            collection.item(path)
    assert [item.name for item in collection.list_items()] == ["a.txt", "b.txt", "docs"]


def test_item_follows_scan_options(tmp_path: Path) -> None:
    shallow = _collection(tmp_path, ScanOptions(recursive=True, max_depth=1))
    (shallow.source_root / ".hidden").write_text("h", encoding="utf-8")
    deep = LinkCollection(
        shallow.source_root,
        shallow.tags_root,
        ScanOptions(recursive=True, include_hidden=True),
    )

    with pytest.raises(PathResolutionError, match="levels deep"):
        shallow.item("docs/c.txt")
    with pytest.raises(PathResolutionError, match="hidden"):
        shallow.item(".hidden")
    assert deep.item("docs/c.txt").name == "docs/c.txt"
    assert deep.item(".hidden").name == ".hidden"


@pytest.mark.parametrize("path", ["missing.txt", "../tags/work", "."])
def test_item_rejects_paths_outside_source(tmp_path: Path, path: str) -> None:
    collection = _collection(tmp_path)

    with pytest.raises(PathResolutionError):
        collection.item(collection.source_root / path)


def test_select_drops_duplicates(tmp_path: Path) -> None:
    collection = _collection(tmp_path)

    selection = collection.select(["b.txt", "a.txt", "b.txt"])

    assert [item.name for item in selection] == ["b.txt", "a.txt"]


def test_unknown_tag_raises_scan_error(tmp_path: Path) -> None:
    collection = _collection(tmp_path)

    with pytest.raises(ScanError):
        collection.tag("nope")


def test_memberships_and_aggregate_all(tmp_path: Path) -> None:
    collection = _collection(tmp_path)
    home = collection.create_tag("home")
    a, b = collection.select(["a.txt", "b.txt"])
    collection.toggle([a], home)
    collection.toggle([a, b], collection.tag("work"))

    memberships = collection.memberships(collection.list_items())
    states = collection.aggregate_all([a, b])

    assert [tag.name for tag in memberships[a.path]] == ["home", "work"]
    assert [tag.name for tag in memberships[b.path]] == ["work"]
    assert {tag.name: state for tag, state in states.items()} == {
        "home": TagState.MIXED,
        "work": TagState.TAGGED,
    }


def test_create_tag_twice_fails(tmp_path: Path) -> None:
    collection = _collection(tmp_path)

    with pytest.raises(TagAlreadyExistsError):
        collection.create_tag("work")


def test_recursive_scan_lists_nested_items(tmp_path: Path) -> None:
    collection = _collection(tmp_path, ScanOptions(recursive=True))

    names = [item.name for item in collection.list_items()]

    assert names == ["a.txt", "b.txt", "docs", "docs/c.txt"]


def test_overlapping_roots_are_rejected(tmp_path: Path) -> None:
    (tmp_path / "source" / "tags").mkdir(parents=True)

    with pytest.raises(OverlappingRootsError):
        LinkCollection(tmp_path / "source", tmp_path / "source" / "tags")
