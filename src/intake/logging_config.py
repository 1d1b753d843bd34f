"""Logging setup for the intake engine.

Every module logs through ``get_logger(__name__)``-style names under the
``intake`` namespace. Records are rendered on one line with any
``extra={...}`` fields appended as ``key=value`` pairs, so a stock
contention warning carries the product id and attempt count with it.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import Any, TextIO

_LOGGER_PREFIX = "intake"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


class KeyValueFormatter(logging.Formatter):
    """``<time> <LEVEL> <logger>: <message> key=value ...``"""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {
            key: val
            for key, val in vars(record).items()
            if key not in _STDLIB_KEYS and not key.startswith("_")
        }
        if extras:
            line += " " + " ".join(f"{k}={_render(v)}" for k, v in sorted(extras.items()))
        return line


def _render(value: Any) -> str:
    text = getattr(value, "value", value)  # enums log their value
    text = str(text)
    return f'"{text}"' if " " in text else text


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the intake namespace."""
    if name == _LOGGER_PREFIX or name.startswith(f"{_LOGGER_PREFIX}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> None:
    """Attach one stream handler to the intake logger (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(KeyValueFormatter())
    root_logger.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. For tests."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, KeyValueFormatter):
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
