"""Logging configuration for the face search service.

Structured log lines with timestamps, module names and a level taken from
the environment. Level names are colourised when writing to a terminal.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Formatter that colours level names (terminal only)."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if terminal supports it."""
        if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
            return super().format(record)

        # Colour a copy so other handlers still see plain names
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}{self.BOLD}{levelname}{self.RESET}"
            )
            record.name = f"{self.BOLD}{record.name}{self.RESET}"

        return super().format(record)


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        try:
            from face_search.config import get_config

            level = get_config().log_level
        except ValueError:
            level = "INFO"
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    name: str = "face_search",
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Setup and configure logger with consistent formatting.

    Args:
        name: Logger name (usually module name or 'face_search' for root)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, reads from environment via Config.
        log_file: Optional file path to also log to a file.

    Returns:
        Configured logger instance.

    Example:
        >>> logger = setup_logging(__name__)
        >>> logger.info("Search started")
    """
    logger = logging.getLogger(name)

    # Already configured, avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(_resolve_level(level))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logger.level)
    console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger for a specific module.

    Module loggers live under the ``face_search`` hierarchy and share the
    handlers installed on it by :func:`setup_logging`.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance.
    """
    setup_logging("face_search")
    return logging.getLogger(name)
