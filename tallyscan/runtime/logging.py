"""Logging for the tallyscan namespace.

Every module logs through ``get_logger(__name__)``; records go to a single
stderr handler attached to the ``tallyscan`` logger, never to the root logger.

The level comes from, in order: an explicit ``configure_logging(level)`` /
``set_log_level(level)`` call, the ``TALLYSCAN_LOG_LEVEL`` environment
variable (DEBUG, INFO, WARNING, ERROR), or INFO.
"""

import logging
import os
import sys
from typing import TextIO

LOG_NAMESPACE = "tallyscan"
LOG_LEVEL_ENV = "TALLYSCAN_LOG_LEVEL"
DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
# DEBUG output carries the source line.
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_handler: logging.Handler | None = None


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "")
    return _LEVEL_NAMES.get(level.strip().upper(), DEFAULT_LOG_LEVEL)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | str | None = None, stream: TextIO | None = None) -> logging.Logger:
    """
    Attach the namespace handler once and return the namespace logger.

    Later calls leave the handler in place; pass ``level`` to change the level.
    """
    global _handler

    namespace_logger = logging.getLogger(LOG_NAMESPACE)
    if _handler is None:
        resolved = _resolve_level(level)
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(_formatter_for(resolved))
        namespace_logger.addHandler(_handler)
        namespace_logger.setLevel(resolved)
        namespace_logger.propagate = False
    elif level is not None:
        set_log_level(level)
    return namespace_logger


def reset_logging() -> None:
    """Detach the namespace handler so the next configure_logging() starts fresh."""
    global _handler

    if _handler is not None:
        logging.getLogger(LOG_NAMESPACE).removeHandler(_handler)
        _handler = None


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module inside the tallyscan namespace."""
    configure_logging()
    if name == LOG_NAMESPACE or name.startswith(f"{LOG_NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOG_NAMESPACE}.{name}")


def set_log_level(level: int | str) -> None:
    resolved = _resolve_level(level)
    logging.getLogger(LOG_NAMESPACE).setLevel(resolved)
    if _handler is not None:
        _handler.setFormatter(_formatter_for(resolved))
