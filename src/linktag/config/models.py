"""Configuration models describing linktag settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LinktagBaseModel(BaseModel):
    """Shared configuration for linktag Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class RootSettings(LinktagBaseModel):
    """Default locations of the two directory trees.

    Attributes:
        source: Directory holding the items being tagged.
        tags: Directory whose subdirectories are the tags.
    """

    source: Optional[str] = None
    tags: Optional[str] = None


class ScanOptions(LinktagBaseModel):
    """Options governing how items and tags are discovered.

    Attributes:
        recursive: Whether to list entries below the direct children of the source root.
        max_depth: Maximum depth to descend when recursive (1 lists direct entries only).
        include_hidden: Whether dot-prefixed entries are listed.
        follow_symlinks: Whether symlinked directories in the source tree are descended.
        nested_tags: Whether subdirectories of tag directories are tags too.
    """

    recursive: bool = False
    max_depth: Optional[int] = None
    include_hidden: bool = False
    follow_symlinks: bool = False
    nested_tags: bool = False

    @field_validator("max_depth")
    @classmethod
    def _check_depth(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("max_depth must be at least 1")
        return value


class LoggingSettings(LinktagBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; enables a rotating file handler.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(LinktagBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        open_command: Command used by `linktag open` when `--with` is omitted.
    """

    quiet_default: bool = False
    open_command: Optional[str] = None


class LinktagConfig(LinktagBaseModel):
    """Top-level configuration struct for linktag.

    Attributes:
        roots: Default source and tags roots.
        scan: Item and tag discovery settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    roots: RootSettings = Field(default_factory=RootSettings)
    scan: ScanOptions = Field(default_factory=ScanOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "LinktagBaseModel",
    "RootSettings",
    "ScanOptions",
    "LoggingSettings",
    "CLIOptions",
    "LinktagConfig",
]
