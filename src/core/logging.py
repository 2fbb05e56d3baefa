"""
Application logging.

All modules log below the ``privasweep`` namespace. The file log rotates by
size; the console handler is optional so the command-line runner can stay
quiet unless ``--verbose`` is given.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "privasweep.log"
LOGGER_NAMESPACE = "privasweep"
LOG_FORMAT = "%(asctime)sZ %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class UtcFormatter(logging.Formatter):
    """ISO-8601 timestamps in UTC, whatever the host time zone."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.strftime(datefmt) if datefmt else stamp.isoformat(timespec="seconds")


def log_file_path(log_dir: Path) -> Path:
    return log_dir / LOG_FILE_NAME


def reset_logging() -> None:
    """Close and detach every handler installed on the application logger."""
    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()


def configure_logging(
    log_dir: Path,
    level: int | str = logging.INFO,
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 10,
    console: bool = True,
) -> Logger:
    """
    Install the rotating file handler (and optionally a console handler).

    Calling this again replaces the previous handlers, so a long-running GUI
    can re-read its configuration without duplicating output.

    Args:
        log_dir: Directory for ``privasweep.log``; created if missing
        level: Threshold for the application namespace
        max_bytes: Size at which the file log rotates
        backup_count: Rotated files kept
        console: Also write to stderr

    Returns:
        The ``privasweep`` logger
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    reset_logging()

    formatter = UtcFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.setLevel(level)

    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_file_path(log_dir),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    app_logger.debug(
        "Logging to %s (rotate at %d MB, keep %d)",
        log_file_path(log_dir), max_bytes // (1024 * 1024), backup_count,
    )
    return app_logger


def get_logger(name: Optional[str] = None) -> Logger:
    """``get_logger("probes.base")`` -> the ``privasweep.probes.base`` logger."""
    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    return app_logger.getChild(name) if name else app_logger
