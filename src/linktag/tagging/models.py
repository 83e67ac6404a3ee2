"""Selections, derived tag states, and mutation outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator, Literal, Union

from linktag.scanning.models import Item, Tag
from linktag.scanning.paths import display_name

from .errors import LinkError


class TagState(str, Enum):
    """Aggregate tagging status of a selection with respect to one tag."""

    TAGGED = "tagged"
    UNTAGGED = "untagged"
    MIXED = "mixed"

    @property
    def marker(self) -> str:
        """Return the checkbox marker used when rendering the state."""
        return {
            TagState.TAGGED: "[X]",
            TagState.UNTAGGED: "[ ]",
            TagState.MIXED: "[?]",
        }[self]


class Selection:
    """Ordered set of unique items chosen for a batch action.

    Items are keyed by their listed path; adding an item twice keeps the
    first position.
    """

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._items: dict[Path, Item] = {}
        for item in items:
            self.add(item)

    def add(self, item: Item) -> None:
        self._items.setdefault(item.path, item)

    def discard(self, item: Item) -> None:
        self._items.pop(item.path, None)

    def toggle(self, item: Item) -> bool:
        """Select or deselect the item; return whether it is now selected."""
        if item in self:
            self.discard(item)
            return False
        self.add(item)
        return True

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, item: object) -> bool:
        return isinstance(item, Item) and item.path in self._items

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        names = ", ".join(item.name for item in self._items.values())
        return f"Selection([{names}])"


@dataclass(slots=True)
class ItemFailure:
    """A per-item link change that failed during a batch.

    Attributes:
        item: Item whose link could not be changed.
        error: Underlying create or remove error.
    """

    item: Item
    error: LinkError


@dataclass(slots=True)
class AppliedMutation:
    """Outcome of a toggle that tagged or untagged the selection.

    Attributes:
        tag: Tag that was toggled.
        action: Whether links were created (`tag`) or removed (`untag`).
        created: Items that received a new link.
        removed: Items whose link was deleted.
        unchanged: Items already in the requested state when reached.
        failed: Items whose link could not be changed.
    """

    tag: Tag
    action: Literal["tag", "untag"]
    created: list[Item] = field(default_factory=list)
    removed: list[Item] = field(default_factory=list)
    unchanged: list[Item] = field(default_factory=list)
    failed: list[ItemFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def json_payload(self) -> dict[str, Any]:
        return {
            "tag": self.tag.name,
            "status": "applied",
            "action": self.action,
            "created": [item.name for item in self.created],
            "removed": [item.name for item in self.removed],
            "unchanged": [item.name for item in self.unchanged],
            "failed": [
                {
                    "item": failure.item.name,
                    "error": type(failure.error).__name__,
                    "message": display_name(str(failure.error)),
                }
                for failure in self.failed
            ],
        }


@dataclass(slots=True)
class SkippedMutation:
    """Outcome of a toggle that changed nothing because the selection was mixed.

    Attributes:
        tag: Tag that was toggled.
        state: Aggregate state that prevented the change.
    """

    tag: Tag
    state: TagState = TagState.MIXED

    @property
    def ok(self) -> bool:
        return True

    @property
    def json_payload(self) -> dict[str, Any]:
        return {"tag": self.tag.name, "status": "skipped", "state": self.state.value}


MutationResult = Union[AppliedMutation, SkippedMutation]


__all__ = [
    "TagState",
    "Selection",
    "ItemFailure",
    "AppliedMutation",
    "SkippedMutation",
    "MutationResult",
]
