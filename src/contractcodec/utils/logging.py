"""Logging helpers for contractcodec."""

from __future__ import annotations

import logging
import sys
from typing import Optional

_PACKAGE_LOGGER = "contractcodec"
_DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Logger name (usually ``__name__``)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(
    level: str = "INFO",
    fmt: Optional[str] = None,
    stream=None,
) -> logging.Logger:
    """Configure the package logger.

    Safe to call more than once; the handler is replaced, not stacked.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        fmt: Optional log format string
        stream: Output stream (defaults to stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
