"""Read-only discovery of items, tags, and the links inside tag directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from linktag.config.models import ScanOptions

from .errors import OverlappingRootsError, PathResolutionError, ScanError
from .models import Item, Tag
from .paths import canonicalize, display_name, is_within

LOGGER = logging.getLogger(__name__)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def _open_root(root: Path | str, label: str) -> Path:
    try:
        canonical = canonicalize(root)
    except PathResolutionError as exc:
        raise ScanError(f"{label} root {root} is not accessible: {exc}") from exc
    if not canonical.is_dir():
        raise ScanError(f"{label} root {canonical} is not a directory")
    return canonical


def _entries(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as iterator:
        return sorted(iterator, key=lambda entry: entry.name)


def validate_roots(source_root: Path | str, tags_root: Path | str) -> tuple[Path, Path]:
    """Canonicalize both roots and reject trees that contain one another.

    Args:
        source_root: Directory holding the items.
        tags_root: Directory holding the tag directories.

    Returns:
        tuple[Path, Path]: Canonical source and tags roots.

    Raises:
        PathResolutionError: If either root cannot be canonicalized.
        OverlappingRootsError: If the roots are equal or nested.
    """
    source = canonicalize(source_root)
    tags = canonicalize(tags_root)
    if is_within(source, tags) or is_within(tags, source):
        raise OverlappingRootsError(
            f"Source root {source} and tags root {tags} overlap; links would point into "
            "their own tree."
        )
    return source, tags


class FilesystemScanner:
    """Discover items and tags, and inspect links inside tag directories."""

    def __init__(self, options: ScanOptions | None = None) -> None:
        self.options = options or ScanOptions()

    @property
    def item_depth(self) -> int | None:
        """Return how many levels below the source root are listed (None for unlimited)."""
        if not self.options.recursive:
            return 1
        return self.options.max_depth

    def check_listed(self, relative: Path) -> None:
        """Reject a source-relative path that `list_items` would never return.

        Raises:
            PathResolutionError: If a component is hidden while hidden entries are
                skipped, or the path lies deeper than `item_depth`.
        """
        parts = relative.parts
        if not self.options.include_hidden and any(_is_hidden(part) for part in parts):
            raise PathResolutionError(
                f"{display_name(relative)} is hidden; set scan.include_hidden to list it"
            )
        limit = self.item_depth
        if limit is not None and len(parts) > limit:
            raise PathResolutionError(
                f"{display_name(relative)} is {len(parts)} levels deep; "
                f"the scan lists {limit}"
            )

    def list_items(
        self, source_root: Path | str, *, tags_root: Path | str | None = None
    ) -> list[Item]:
        """List the items under the source root, sorted by name.

        Args:
            source_root: Directory holding the items.
            tags_root: Tags root; symlinks resolving inside it are not items.

        Returns:
            list[Item]: Items discovered under the root.

        Raises:
            ScanError: If the source root cannot be read.
        """
        root = _open_root(source_root, "Source")
        excluded = canonicalize(tags_root) if tags_root is not None else None
        try:
            entries = _entries(root)
        except OSError as exc:
            raise ScanError(f"Cannot list source root {root}: {exc}") from exc

        items = list(self._walk_items(root, entries, excluded))
        return sorted(items, key=lambda item: item.name)

    def list_tags(self, tags_root: Path | str) -> list[Tag]:
        """List the tag directories under the tags root, sorted by name.

        Raises:
            ScanError: If the tags root cannot be read.
        """
        root = _open_root(tags_root, "Tags")
        try:
            entries = _entries(root)
        except OSError as exc:
            raise ScanError(f"Cannot list tags root {root}: {exc}") from exc

        tags: list[Tag] = []
        pending = [entries]
        while pending:
            for entry in pending.pop():
                if _is_hidden(entry.name):
                    continue
                try:
                    if not entry.is_dir(follow_symlinks=False):
                        continue
                except OSError:
                    continue
                path = Path(entry.path)
                name = display_name(path.relative_to(root).as_posix())
                tags.append(Tag(path=path, name=name))
                if self.options.nested_tags:
                    try:
                        pending.append(_entries(path))
                    except OSError as exc:
                        LOGGER.debug("Skipping unreadable tag directory %s: %s", path, exc)
        return sorted(tags, key=lambda tag: tag.name)

    def link_index(self, tag: Tag) -> dict[Path, list[Path]]:
        """Map each canonical link target in the tag directory to its link paths.

        Broken links and entries that cannot be resolved are left out.

        Raises:
            ScanError: If the tag directory cannot be read.
        """
        try:
            entries = _entries(tag.path)
        except OSError as exc:
            raise ScanError(f"Cannot read tag directory {tag.path}: {exc}") from exc

        index: dict[Path, list[Path]] = {}
        for entry in entries:
            if not entry.is_symlink():
                continue
            link = Path(entry.path)
            try:
                target = link.resolve(strict=True)
            except (OSError, RuntimeError):
                continue
            index.setdefault(target, []).append(link)
        return index

    def find_links(self, tag: Tag, item: Item) -> list[Path]:
        """Return the links in the tag directory that resolve to the item."""
        return self.link_index(tag).get(item.real_path, [])

    def has_link(self, tag: Tag, item: Item) -> bool:
        """Return whether exactly one link in the tag directory resolves to the item."""
        return len(self.find_links(tag, item)) == 1

    def _walk_items(
        self,
        root: Path,
        entries: list[os.DirEntry[str]],
        excluded: Path | None,
    ) -> Iterator[Item]:
        limit = self.item_depth
        visited = {root}
        pending: list[tuple[list[os.DirEntry[str]], int]] = [(entries, 1)]
        while pending:
            batch, depth = pending.pop()
            for entry in batch:
                if not self.options.include_hidden and _is_hidden(entry.name):
                    continue
                path = Path(entry.path)
                try:
                    is_link = entry.is_symlink()
                    real_path = path.resolve(strict=True)
                    is_dir = real_path.is_dir()
                except (OSError, RuntimeError) as exc:
                    LOGGER.debug("Skipping unreadable entry %s: %s", path, exc)
                    continue
                if is_link and excluded is not None and is_within(real_path, excluded):
                    LOGGER.debug("Skipping %s: resolves into the tags root", path)
                    continue

                yield Item(
                    path=path,
                    real_path=real_path,
                    name=display_name(path.relative_to(root).as_posix()),
                    is_dir=is_dir,
                )

                if not is_dir or (limit is not None and depth >= limit):
                    continue
                if is_link and not self.options.follow_symlinks:
                    continue
                if real_path in visited:
                    continue
                visited.add(real_path)
                try:
                    pending.append((_entries(path), depth + 1))
                except OSError as exc:
                    LOGGER.debug("Skipping unreadable directory %s: %s", path, exc)


__all__ = ["FilesystemScanner", "validate_roots"]
