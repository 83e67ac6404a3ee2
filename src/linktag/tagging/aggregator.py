"""Fold per-item link presence into a single tag state."""

from __future__ import annotations

from typing import Iterable

from linktag.scanning.models import Item, Tag
from linktag.scanning.scanner import FilesystemScanner

from .models import TagState


class TagStateAggregator:
    """Derive the tag state of a selection from the live tags tree."""

    def __init__(self, scanner: FilesystemScanner) -> None:
        self.scanner = scanner

    def aggregate(self, selection: Iterable[Item], tag: Tag) -> TagState:
        """Return whether every, no, or some selected item is linked from the tag.

        An empty selection is untagged. The tag directory is read once per call
        and the result is never cached.

        Args:
            selection: Items to inspect.
            tag: Tag directory to inspect.

        Returns:
            TagState: Aggregate state for the selection.

        Raises:
            ScanError: If the tag directory cannot be read.
        """
        items = list(selection)
        if not items:
            return TagState.UNTAGGED

        index = self.scanner.link_index(tag)
        linked = sum(1 for item in items if len(index.get(item.real_path, [])) == 1)
        if linked == len(items):
            return TagState.TAGGED
        if linked == 0:
            return TagState.UNTAGGED
        return TagState.MIXED

    def aggregate_all(self, selection: Iterable[Item], tags: Iterable[Tag]) -> dict[Tag, TagState]:
        """Return the state of the selection for every tag, in tag order."""
        items = list(selection)
        return {tag: self.aggregate(items, tag) for tag in tags}


__all__ = ["TagStateAggregator"]
