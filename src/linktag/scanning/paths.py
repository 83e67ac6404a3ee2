"""Path canonicalization and relative link target computation."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import PathResolutionError


def canonicalize(path: Path | str) -> Path:
    """Return the absolute, symlink-free form of an existing path.

    Args:
        path: Path to canonicalize; relative paths are taken from the working directory.

    Returns:
        Path: Canonical path.

    Raises:
        PathResolutionError: If the path does not exist or cannot be traversed.
    """
    try:
        return Path(path).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise PathResolutionError(f"Cannot resolve {path}: {exc}") from exc


def display_name(path: os.PathLike[str] | str) -> str:
    """Return printable text for a path, replacing bytes that are not valid UTF-8.

    Undecodable file names arrive as lone surrogates, which cannot be written to
    a strict UTF-8 stream. Only use the result for output, never to open files.
    """
    return os.fsencode(path).decode("utf-8", "replace")


def is_within(path: Path, root: Path) -> bool:
    """Return whether `path` equals `root` or lies below it (both canonical)."""
    return path == root or root in path.parents


def resolves_to(tag_dir: Path, target: Path | str) -> Path:
    """Resolve a link target string the way the OS does from inside `tag_dir`.

    Raises:
        PathResolutionError: If the target does not resolve to an existing path.
    """
    return canonicalize(Path(tag_dir) / target)


def relative_target(tag_dir: Path | str, item: Path | str) -> Path:
    """Compute the relative symlink target pointing from `tag_dir` to `item`.

    The result climbs out of `tag_dir` to the deepest common ancestor with one
    `..` per component, then descends to the item. It is independent of the
    working directory and verified by resolving it back from `tag_dir`.

    Args:
        tag_dir: Directory that will hold the link.
        item: Path the link must resolve to.

    Returns:
        Path: Relative target such that `tag_dir / target` resolves to the canonical item.

    Raises:
        PathResolutionError: If either path cannot be canonicalized, or no relative
            path leads from one to the other (different drives on Windows).
    """
    canonical_tag = canonicalize(tag_dir)
    canonical_item = canonicalize(item)
    try:
        target = Path(os.path.relpath(canonical_item, canonical_tag))
    except ValueError as exc:
        raise PathResolutionError(
            f"No relative path from {canonical_tag} to {canonical_item}: {exc}"
        ) from exc

    resolved = resolves_to(canonical_tag, target)
    if resolved != canonical_item:
        raise PathResolutionError(
            f"Link target {target} from {canonical_tag} resolves to {resolved}, "
            f"expected {canonical_item}"
        )
    return target


__all__ = ["canonicalize", "display_name", "is_within", "resolves_to", "relative_target"]
