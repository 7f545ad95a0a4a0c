"""Logging for tagcollect: records carry the class being collected."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "tagcollect"
_CONSOLE_FORMAT = "[tagcollect] %(levelname)s %(class_prefix)s%(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(class_name)s] %(message)s"

_current_class: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "tagcollect_class", default=None
)


def get_logger(name: str | None = None) -> logging.Logger:
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


@contextlib.contextmanager
def class_context(class_name: str) -> Iterator[None]:
    """Attribute log records emitted inside the block to ``class_name``."""
    token = _current_class.set(class_name)
    try:
        yield
    finally:
        _current_class.reset(token)


class ClassContextFilter(logging.Filter):
    """Adds ``class_name`` (``-`` outside a class) and ``class_prefix`` to records."""

    def filter(self, record: logging.LogRecord) -> bool:
        class_name = _current_class.get()
        record.class_name = class_name or "-"
        record.class_prefix = f"{class_name}: " if class_name else ""
        return True


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console and optional file handlers on the tagcollect logger.

    Calling this again replaces (and closes) the handlers installed earlier.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_context_handler(logging.StreamHandler(), _CONSOLE_FORMAT, level))
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        logger.addHandler(_context_handler(file_handler, _FILE_FORMAT, level))
    return logger


def _context_handler(handler: logging.Handler, fmt: str, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.addFilter(ClassContextFilter())
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["ClassContextFilter", "class_context", "configure_logging", "get_logger"]
