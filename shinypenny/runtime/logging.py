"""Logging setup shared by every shinypenny module.

All loggers hang below the ``shinypenny`` namespace and write to stderr
through one handler, so warnings about skipped inputs or clamped images never
mix with the CLI's stdout report.

Usage:
    from shinypenny.runtime import get_logger
    logger = get_logger(__name__)

Environment variables:
    SHINYPENNY_LOG_LEVEL: DEBUG, INFO, WARNING (default) or ERROR.
"""

import logging
import os
import sys
from typing import TextIO

DEFAULT_LOG_LEVEL = logging.WARNING

LOGGER_NAMESPACE = "shinypenny"

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_handler: logging.Handler | None = None


def _level_from_env() -> int:
    name = os.environ.get("SHINYPENNY_LOG_LEVEL", "").strip().upper()
    return _LEVEL_NAMES.get(name, DEFAULT_LOG_LEVEL)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None, stream: TextIO | None = None) -> None:
    """Attach the stderr handler to the package logger, once per process.

    Args:
        level: Explicit level; defaults to SHINYPENNY_LOG_LEVEL or WARNING.
        stream: Output stream, stderr when omitted.
    """
    global _handler

    if _handler is not None:
        return

    if level is None:
        level = _level_from_env()

    _handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    _handler.setFormatter(_formatter_for(level))

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.setLevel(level)
    package_logger.addHandler(_handler)
    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed below the package namespace when it is not already."""
    configure_logging()

    if name != LOGGER_NAMESPACE and not name.startswith(LOGGER_NAMESPACE + "."):
        name = f"{LOGGER_NAMESPACE}.{name}"
    return logging.getLogger(name)


def set_log_level(level: int) -> None:
    """Switch the package logger to ``level``; DEBUG adds line numbers to records."""
    configure_logging(level)
    logging.getLogger(LOGGER_NAMESPACE).setLevel(level)
    if _handler is not None:
        _handler.setFormatter(_formatter_for(level))
