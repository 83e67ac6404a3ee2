"""Creation of new tag directories."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from linktag.scanning.errors import PathResolutionError
from linktag.scanning.models import Tag
from linktag.scanning.paths import canonicalize, display_name

from .errors import InvalidNameError, TagAlreadyExistsError, TagCreateError

LOGGER = logging.getLogger(__name__)

_SEPARATORS = {"/", os.sep} | ({os.altsep} if os.altsep else set())


def validate_tag_name(name: str) -> str:
    """Return the name if it can be used as a single directory name.

    Raises:
        InvalidNameError: If the name is blank, a relative path marker, or
            contains a path separator or NUL byte.
    """
    if not name or not name.strip():
        raise InvalidNameError("Tag name cannot be empty.")
    if name in (".", ".."):
        raise InvalidNameError(f"Tag name {name!r} is reserved.")
    if any(separator in name for separator in _SEPARATORS) or "\0" in name:
        raise InvalidNameError(f"Tag name {name!r} must not contain path separators.")
    return name


class TagDirectoryManager:
    """Create tag directories under a tags root."""

    def create_tag(self, tags_root: Path | str, name: str) -> Tag:
        """Create a new, empty tag directory.

        Args:
            tags_root: Directory holding the tag directories.
            name: Name of the new tag.

        Returns:
            Tag: The created tag.

        Raises:
            InvalidNameError: If the name is not a valid single directory name.
            TagAlreadyExistsError: If any entry with that name already exists.
            TagCreateError: If the directory cannot be created.
        """
        validate_tag_name(name)
        try:
            root = canonicalize(tags_root)
        except PathResolutionError as exc:
            raise TagCreateError(f"Cannot create tag {name!r}: {exc}") from exc

        path = root / name
        if os.path.lexists(path):
            raise TagAlreadyExistsError(f"Tag {name!r} already exists in {root}.")

        try:
            path.mkdir()
        except FileExistsError as exc:
            raise TagAlreadyExistsError(f"Tag {name!r} already exists in {root}.") from exc
        except OSError as exc:
            raise TagCreateError(f"Cannot create tag {name!r}: {exc}") from exc

        LOGGER.info("Created tag directory %s", path)
        return Tag(path=path, name=display_name(name))


__all__ = ["TagDirectoryManager", "validate_tag_name"]
