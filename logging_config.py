"""Logging setup for the retainer invoice app.

The TUI owns the terminal, so log records go to a rotating file next to
the database instead of the console.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def get_log_level() -> str:
    """Log level from RETAINER_LOG_LEVEL, falling back to INFO."""
    level = os.environ.get("RETAINER_LOG_LEVEL", "INFO").upper()
    return level if level in VALID_LEVELS else "INFO"


def setup_logging(log_file: Path, level: str | None = None, max_bytes: int = 1024 * 1024, backup_count: int = 3) -> None:
    """Send all log records to a rotating file, replacing existing handlers."""
    level = (level or get_log_level()).upper()
    if level not in VALID_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {', '.join(sorted(VALID_LEVELS))}")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(file_handler)
    root_logger.setLevel(getattr(logging, level))
