from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Logging initialization with labeled prefixes.

Console output carries one label per line (INFO|WARN|ERROR|SUMMARY) so the
import log can be grepped by operators. Per-row failures additionally go to
the JSON Lines error log (``employee_import.logging.error_log``).
"""

__all__ = [
    "LOGGER_NAME",
    "setup_logging",
    "get_logger",
    "log_summary",
]

LOGGER_NAME = "employee_import"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter that prefixes each message with its level label."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        message = f"{level_label} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Configure the ``employee_import`` logger hierarchy (idempotent).

    Module loggers (``logging.getLogger(__name__)``) are children of this
    logger, so everything the services log shares the labeled handler. It
    writes to stdout unless ``stream`` says otherwise; a later call with a
    stream moves the handler there.
    """
    global _logger

    if _logger is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

        logger = logging.getLogger(LOGGER_NAME)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)

        # Prevent propagation to root logger to avoid duplicate output
        logger.propagate = False
        _logger = logger

    level = logging.DEBUG if debug else logging.INFO
    _logger.setLevel(level)
    for handler in _logger.handlers:
        handler.setLevel(level)
        if stream is not None and isinstance(handler, logging.StreamHandler):
            handler.setStream(stream)
    return _logger


def get_logger() -> logging.Logger:
    """Return the application logger, configuring it on first use."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    _logger = None
