"""Centralized logging configuration for Yanıt.

Every module logs through ``logging.getLogger(__name__)`` and therefore
inherits from the top-level ``yanit`` logger. Applications embedding the
library call :func:`setup_logging` once at start-up.

Usage::

    from yanit.logging import setup_logging

    # Local development, everything to stderr
    setup_logging(level="DEBUG")

    # Service: INFO to a file, only warnings on the console
    setup_logging(level="INFO", log_file="yanit.log", console_level="WARNING")
"""

import logging
import sys
from typing import Optional


LIBRARY_LOGGER_NAME = "yanit"

_DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console_level: Optional[str] = None,
    fmt: Optional[str] = None,
    date_fmt: Optional[str] = None,
) -> logging.Logger:
    """Configure the ``yanit`` logger hierarchy.

    Args:
        level: Level of the ``yanit`` logger and of the optional file handler.
        log_file: When given, a UTF-8 FileHandler is attached (Turkish text
            appears in log lines).
        console_level: Level of the stderr handler; defaults to *level*.
        fmt: Log format string.
        date_fmt: Date format string.

    Returns:
        The configured ``yanit`` logger.
    """
    logger = logging.getLogger(LIBRARY_LOGGER_NAME)
    logger.setLevel(_level(level))

    # Repeated calls replace handlers instead of stacking them
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt=fmt or _DEFAULT_FORMAT,
        datefmt=date_fmt or _DEFAULT_DATE_FORMAT,
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_level(console_level or level))
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(_level(level))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def preview(text: object, limit: int = 50) -> str:
    """Shorten user-supplied text for a log line.

    Questions end up in log files; only their head is logged.
    """
    value = text if isinstance(text, str) else repr(text)
    if len(value) <= limit:
        return value
    return value[:limit] + "..."
