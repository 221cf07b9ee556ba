"""Logging configuration helpers for Tractor."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

from tractor.config.models import LoggingSettings

LOG_FILENAME: Final[str] = "tractor.log"
_FILE_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT: Final[str] = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level_name: str) -> int:
    """Translate a log level string or number into a logging level."""

    value = level_name.strip()
    if value.isdigit():
        return int(value)

    numeric = getattr(logging, value.upper(), None)
    if isinstance(numeric, int):
        return numeric

    return logging.WARNING


def configure_logging(settings: LoggingSettings, log_dir: Path | None = None) -> logging.Logger:
    """Attach console and rotating file handlers to the ``tractor`` logger.

    Handlers installed by a previous call are closed and replaced, so the
    function can be invoked once per command run.

    Args:
        settings: Level and rotation settings.
        log_dir: Directory for ``tractor.log``; no file handler when None.

    Returns:
        logging.Logger: The configured package logger.
    """
    level = _resolve_level(settings.level)
    app_logger = logging.getLogger("tractor")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(level)
    app_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILENAME,
            maxBytes=max(settings.max_size_mb, 1) * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, _DEFAULT_DATEFMT))
        # File handler records INFO and above even when the console is quieter.
        file_handler.setLevel(min(level, logging.INFO))
        app_logger.addHandler(file_handler)

    app_logger.setLevel(min(level, logging.INFO) if log_dir is not None else level)
    app_logger.propagate = False
    return app_logger


__all__ = ["LOG_FILENAME", "configure_logging"]
