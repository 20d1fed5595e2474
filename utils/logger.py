"""
utils/logger.py
───────────────
Loguru-based logger configured once and imported across the project.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from config.settings import Settings, get_settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> — "
    "<level>{message}</level>"
)

_console_handler_id: int | None = None


def _add_console_handler(level: str) -> None:
    global _console_handler_id
    # add before removing so an unknown level leaves the old handler in place
    new_id = logger.add(
        sys.stderr,
        level=level.upper(),
        format=_CONSOLE_FORMAT,
        colorize=True,
    )
    if _console_handler_id is not None:
        logger.remove(_console_handler_id)
    _console_handler_id = new_id


def setup_logger(settings: Optional[Settings] = None) -> None:
    """
    Install the console and JSON file handlers from ``settings``.

    Without explicit settings the process settings are used; if those do
    not validate, only an INFO console handler is installed and the
    ValidationError is left for ``get_settings()`` callers to report.
    """
    global _console_handler_id
    if settings is None:
        try:
            settings = get_settings()
        except ValidationError:
            settings = None

    logger.remove()  # remove default stderr handler
    _console_handler_id = None

    # Console handler: colourful, human-readable
    _add_console_handler(settings.log_level if settings is not None else "INFO")

    # File handler: JSON lines
    log_file: Path | None = settings.log_file if settings is not None else None
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="14 days",
            serialize=True,
        )


def set_log_level(level: str) -> None:
    """Swap the console handler for one at ``level``; the file handler is untouched."""
    _add_console_handler(level)


setup_logger()

__all__ = ["logger", "setup_logger", "set_log_level"]
