"""Tests for tag state aggregation and selections."""

from __future__ import annotations

from pathlib import Path

from linktag.scanning import FilesystemScanner, Item, Tag
from linktag.tagging import Selection, TagState, TagStateAggregator


def _setup(tmp_path: Path) -> tuple[list[Item], Tag, Tag, FilesystemScanner]:
    source = tmp_path / "source"
    tags = tmp_path / "tags"
    source.mkdir()
    (tags / "work").mkdir(parents=True)
    (tags / "home").mkdir()
    for name in ("a.txt", "b.txt", "c.txt"):
        (source / name).write_text(name, encoding="utf-8")
    scanner = FilesystemScanner()
    items = scanner.list_items(source)
    work, home = (Tag(path=tags.resolve() / name, name=name) for name in ("work", "home"))
    return items, work, home, scanner


def _link(tag: Tag, item: Item) -> None:
    (tag.path / item.path.name).symlink_to(item.real_path)


def test_empty_selection_is_untagged(tmp_path: Path) -> None:
    _, work, _, scanner = _setup(tmp_path)

    assert TagStateAggregator(scanner).aggregate([], work) is TagState.UNTAGGED


def test_aggregate_uniform_and_mixed_states(tmp_path: Path) -> None:
    items, work, _, scanner = _setup(tmp_path)
    aggregator = TagStateAggregator(scanner)
    a, b, c = items

    assert aggregator.aggregate(items, work) is TagState.UNTAGGED

    _link(work, a)
    assert aggregator.aggregate([a], work) is TagState.TAGGED
    assert aggregator.aggregate([a, b], work) is TagState.MIXED
    assert aggregator.aggregate([b, c], work) is TagState.UNTAGGED

    _link(work, b)
    _link(work, c)
    assert aggregator.aggregate(items, work) is TagState.TAGGED


def test_aggregate_reads_live_state(tmp_path: Path) -> None:
    items, work, _, scanner = _setup(tmp_path)
    aggregator = TagStateAggregator(scanner)
    a = items[0]

    _link(work, a)
    assert aggregator.aggregate([a], work) is TagState.TAGGED

    (work.path / a.path.name).unlink()
    assert aggregator.aggregate([a], work) is TagState.UNTAGGED


def test_aggregate_all_reports_each_tag(tmp_path: Path) -> None:
    items, work, home, scanner = _setup(tmp_path)
    for item in items:
        _link(home, item)
    _link(work, items[0])

    states = TagStateAggregator(scanner).aggregate_all(Selection(items), [home, work])

    assert states == {home: TagState.TAGGED, work: TagState.MIXED}


def test_tag_state_markers() -> None:
    assert TagState.TAGGED.marker == "[X]"
    assert TagState.UNTAGGED.marker == "[ ]"
    assert TagState.MIXED.marker == "[?]"


def test_selection_keeps_order_and_uniqueness(tmp_path: Path) -> None:
    items, _, _, _ = _setup(tmp_path)
    a, b, c = items

    selection = Selection([c, a, c])
    selection.add(b)
    selection.add(a)

    assert list(selection) == [c, a, b]
    assert len(selection) == 3
    assert a in selection

    assert selection.toggle(a) is False
    assert a not in selection
    assert selection.toggle(a) is True
    assert list(selection) == [c, b, a]

    selection.discard(c)
    selection.clear()
    assert len(selection) == 0
