"""Apply tag toggles by creating or removing symlinks."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from linktag.scanning.errors import PathResolutionError, ScanError
from linktag.scanning.models import Item, Tag
from linktag.scanning.paths import relative_target
from linktag.scanning.scanner import FilesystemScanner

from .aggregator import TagStateAggregator
from .errors import LinkCreateError, LinkRemoveError
from .models import AppliedMutation, ItemFailure, MutationResult, SkippedMutation, TagState

LOGGER = logging.getLogger(__name__)


class TagMutationEngine:
    """Toggle a tag for a selection of items.

    The current state is always re-derived from disk before deciding what to
    do. A uniformly tagged selection is untagged, a uniformly untagged one is
    tagged, and a mixed selection is left untouched.
    """

    def __init__(
        self,
        scanner: FilesystemScanner,
        aggregator: TagStateAggregator | None = None,
    ) -> None:
        self.scanner = scanner
        self.aggregator = aggregator or TagStateAggregator(scanner)

    def toggle(self, selection: Iterable[Item], tag: Tag) -> MutationResult:
        """Tag or untag every selected item, or skip when the selection is mixed.

        Items are processed one at a time; a failure on one item is recorded and
        processing continues. Changes already applied are never rolled back.

        Args:
            selection: Items to toggle.
            tag: Tag to toggle.

        Returns:
            MutationResult: Applied changes, or a skip carrying the mixed state.

        Raises:
            ScanError: If the tag directory cannot be read before mutating.
        """
        items = list(selection)
        state = self.aggregator.aggregate(items, tag)

        if state is TagState.MIXED:
            LOGGER.info("Selection is mixed for tag %s; leaving links untouched.", tag.name)
            return SkippedMutation(tag=tag, state=state)

        if state is TagState.TAGGED:
            result = AppliedMutation(tag=tag, action="untag")
            for item in items:
                self._remove_link(tag, item, result)
        else:
            result = AppliedMutation(tag=tag, action="tag")
            for item in items:
                self._create_link(tag, item, result)

        for failure in result.failed:
            LOGGER.warning("%s", failure.error)
        return result

    def _create_link(self, tag: Tag, item: Item, result: AppliedMutation) -> None:
        link_path = tag.path / item.path.name
        try:
            existing = self.scanner.find_links(tag, item)
        except ScanError as exc:
            self._fail_create(result, item, link_path, str(exc))
            return
        if existing:
            result.unchanged.append(item)
            return

        if os.path.lexists(link_path):
            self._fail_create(result, item, link_path, "name is taken by another entry")
            return

        try:
            target = relative_target(tag.path, item.real_path)
        except PathResolutionError as exc:
            self._fail_create(result, item, link_path, str(exc))
            return

        try:
            link_path.symlink_to(target, target_is_directory=item.is_dir)
        except OSError as exc:
            self._fail_create(result, item, link_path, exc.strerror or str(exc))
            return

        LOGGER.info("Linked %s -> %s", link_path, target)
        result.created.append(item)

    def _remove_link(self, tag: Tag, item: Item, result: AppliedMutation) -> None:
        try:
            links = self.scanner.find_links(tag, item)
        except ScanError as exc:
            result.failed.append(
                ItemFailure(
                    item=item,
                    error=LinkRemoveError(
                        f"Cannot remove link for {item.name}: {exc}",
                        item=item,
                        link_path=tag.path / item.path.name,
                    ),
                )
            )
            return

        removed = False
        for link in links:
            if not link.is_symlink():
                continue
            try:
                link.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                result.failed.append(
                    ItemFailure(
                        item=item,
                        error=LinkRemoveError(
                            f"Cannot remove link {link}: {exc.strerror or exc}",
                            item=item,
                            link_path=link,
                        ),
                    )
                )
                return
            LOGGER.info("Removed link %s", link)
            removed = True

        if removed:
            result.removed.append(item)
        else:
            result.unchanged.append(item)

    def _fail_create(
        self,
        result: AppliedMutation,
        item: Item,
        link_path: Path,
        reason: str,
    ) -> None:
        error = LinkCreateError(
            f"Cannot create link {link_path} for {item.name}: {reason}",
            item=item,
            link_path=link_path,
        )
        result.failed.append(ItemFailure(item=item, error=error))


__all__ = ["TagMutationEngine"]
