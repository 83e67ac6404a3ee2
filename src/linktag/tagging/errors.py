"""Errors raised while mutating links and tag directories."""

from __future__ import annotations

from pathlib import Path

from linktag.scanning.models import Item


class TaggingError(Exception):
    """Base exception for operations that change the tags tree."""


class LinkError(TaggingError):
    """Raised when a single item's link cannot be changed."""

    def __init__(self, message: str, *, item: Item, link_path: Path) -> None:
        super().__init__(message)
        self.item = item
        self.link_path = link_path


class LinkCreateError(LinkError):
    """Raised when a link cannot be created for an item."""


class LinkRemoveError(LinkError):
    """Raised when an item's link cannot be deleted."""


class TagDirectoryError(TaggingError):
    """Base exception for tag directory creation."""


class TagAlreadyExistsError(TagDirectoryError):
    """Raised when the requested tag name is already taken."""


class InvalidNameError(TagDirectoryError):
    """Raised when a tag name cannot be used as a single directory name."""


class TagCreateError(TagDirectoryError):
    """Raised when the filesystem refuses to create the tag directory."""
