"""Models describing items and tags discovered on disk."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Item(BaseModel):
    """A file or directory under the source root.

    Attributes:
        path: Absolute path of the entry as listed under the source root.
        real_path: Canonical path links must resolve to.
        name: Display name relative to the source root.
        is_dir: Whether the entry is a directory.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    real_path: Path
    name: str
    is_dir: bool = False


class Tag(BaseModel):
    """A directory under the tags root.

    Attributes:
        path: Canonical path of the tag directory.
        name: Tag name relative to the tags root, using forward slashes.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    name: str


__all__ = ["Item", "Tag"]
