"""Path resolution and read-only scanning of the source and tags trees."""

from .errors import (
    MissingRootError,
    OverlappingRootsError,
    PathResolutionError,
    ScanError,
    ScanningError,
)
from .models import Item, Tag
from .paths import canonicalize, display_name, is_within, relative_target, resolves_to
from .scanner import FilesystemScanner, validate_roots

__all__ = [
    "FilesystemScanner",
    "Item",
    "Tag",
    "canonicalize",
    "display_name",
    "is_within",
    "relative_target",
    "resolves_to",
    "validate_roots",
    "ScanningError",
    "PathResolutionError",
    "ScanError",
    "MissingRootError",
    "OverlappingRootsError",
]
