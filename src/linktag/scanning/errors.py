"""Errors raised while resolving paths and reading the directory trees."""


class ScanningError(Exception):
    """Base exception for read-only filesystem operations."""


class PathResolutionError(ScanningError):
    """Raised when a path cannot be canonicalized or linked to."""


class ScanError(ScanningError):
    """Raised when a root or tag directory cannot be read."""


class OverlappingRootsError(ScanError):
    """Raised when the source root and tags root contain one another."""


class MissingRootError(ScanError):
    """Raised when a source or tags root was neither passed nor configured."""
