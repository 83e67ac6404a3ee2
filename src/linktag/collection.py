"""Facade binding the source and tags roots to the tagging engine."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from linktag.config.models import ScanOptions
from linktag.scanning import (
    FilesystemScanner,
    Item,
    PathResolutionError,
    ScanError,
    Tag,
    canonicalize,
    display_name,
    is_within,
    validate_roots,
)
from linktag.tagging import (
    MutationResult,
    Selection,
    TagDirectoryManager,
    TagMutationEngine,
    TagState,
    TagStateAggregator,
)


class LinkCollection:
    """Items in a source root categorized by symlinks under a tags root.

    Every query reads the filesystem afresh; nothing about tag membership is
    kept between calls.
    """

    def __init__(
        self,
        source_root: Path | str,
        tags_root: Path | str,
        scan_options: ScanOptions | None = None,
    ) -> None:
        """Validate both roots and wire the engine components.

        Args:
            source_root: Directory holding the items.
            tags_root: Directory whose subdirectories are tags.
            scan_options: Discovery settings; defaults list direct entries only.

        Raises:
            PathResolutionError: If either root cannot be canonicalized.
            OverlappingRootsError: If the roots contain one another.
        """
        self.source_root, self.tags_root = validate_roots(source_root, tags_root)
        self.scanner = FilesystemScanner(scan_options)
        self.aggregator = TagStateAggregator(self.scanner)
        self.engine = TagMutationEngine(self.scanner, self.aggregator)
        self.directories = TagDirectoryManager()

    def list_items(self) -> list[Item]:
        return self.scanner.list_items(self.source_root, tags_root=self.tags_root)

    def list_tags(self) -> list[Tag]:
        return self.scanner.list_tags(self.tags_root)

    def item(self, path: Path | str) -> Item:
        """Return the item for a path given absolutely, from the source root, or from the cwd.

        A relative path is read from the source root when that entry exists, and
        from the working directory otherwise.

        Raises:
            PathResolutionError: If the path does not exist, is not below the source
                root, or names an entry that `list_items` does not list.
        """
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            rooted = self.source_root / candidate
            if os.path.lexists(rooted) or not os.path.lexists(candidate):
                candidate = rooted
        candidate = Path(os.path.abspath(candidate))

        listed = canonicalize(candidate.parent) / candidate.name
        if listed == self.source_root or not is_within(listed, self.source_root):
            raise PathResolutionError(
                f"{display_name(path)} is not inside source root {self.source_root}"
            )
        relative = listed.relative_to(self.source_root)
        self.scanner.check_listed(relative)

        real_path = canonicalize(listed)
        if listed.is_symlink() and is_within(real_path, self.tags_root):
            raise PathResolutionError(
                f"{display_name(path)} resolves into tags root {self.tags_root}"
            )

        return Item(
            path=listed,
            real_path=real_path,
            name=display_name(relative.as_posix()),
            is_dir=real_path.is_dir(),
        )

    def select(self, paths: Iterable[Path | str]) -> Selection:
        """Build a selection from paths, dropping duplicates."""
        return Selection(self.item(path) for path in paths)

    def tag(self, name: str) -> Tag:
        """Return the existing tag with the given name.

        Raises:
            ScanError: If no such tag exists.
        """
        wanted = display_name(name.strip("/"))
        for tag in self.list_tags():
            if tag.name == wanted:
                return tag
        raise ScanError(f"No tag named {wanted!r} under {self.tags_root}")

    def memberships(self, items: Iterable[Item]) -> dict[Path, list[Tag]]:
        """Map each item's path to the tags that currently link to it.

        Each tag directory is read once.
        """
        result: dict[Path, list[Tag]] = {}
        targets: dict[Path, list[Path]] = {}
        for item in items:
            result[item.path] = []
            targets.setdefault(item.real_path, []).append(item.path)
        for tag in self.list_tags():
            for target, links in self.scanner.link_index(tag).items():
                if len(links) != 1:
                    continue
                for path in targets.get(target, []):
                    result[path].append(tag)
        return result

    def aggregate(self, selection: Iterable[Item], tag: Tag) -> TagState:
        return self.aggregator.aggregate(selection, tag)

    def aggregate_all(self, selection: Iterable[Item]) -> dict[Tag, TagState]:
        return self.aggregator.aggregate_all(selection, self.list_tags())

    def toggle(self, selection: Iterable[Item], tag: Tag) -> MutationResult:
        return self.engine.toggle(selection, tag)

    def create_tag(self, name: str) -> Tag:
        return self.directories.create_tag(self.tags_root, name)


__all__ = ["LinkCollection"]
