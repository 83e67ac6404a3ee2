"""Logging setup for the linktag command line."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from linktag.config.models import LoggingSettings

_HANDLER_MARKER = "_linktag_handler"


def configure_logging(
    settings: LoggingSettings,
    *,
    verbose: bool = False,
    console: Console | None = None,
) -> logging.Logger:
    """Attach linktag handlers to the package logger.

    Repeated calls replace the handlers installed by earlier calls.

    Args:
        settings: Logging section of the loaded configuration.
        verbose: Force DEBUG output on the console.
        console: Console to render records on; defaults to stderr.

    Returns:
        logging.Logger: The configured `linktag` logger.
    """
    logger = logging.getLogger("linktag")
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    level = logging.DEBUG if verbose else logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(level)
    setattr(rich_handler, _HANDLER_MARKER, True)
    logger.addHandler(rich_handler)

    handler_levels = [level]
    if settings.file:
        log_path = Path(settings.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
            errors="backslashreplace",
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        file_handler.setLevel(logging.INFO if level > logging.INFO else level)
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)
        handler_levels.append(file_handler.level)

    logger.setLevel(min(handler_levels))
    return logger


__all__ = ["configure_logging"]
