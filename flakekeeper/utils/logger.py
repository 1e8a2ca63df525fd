"""
Logging utilities for flakekeeper.

This module centralizes logger configuration, formatting, and retrieval
for the flakekeeper package. Library modules only ever call
:func:`get_logger`; the CLI calls :func:`setup_logging` once per
invocation with a level derived from ``-v`` flags.

Diagnostic messages about individual lock file inputs carry structured
context (file, input name, reason) rendered by :func:`format_context`, so
a debug log can be grepped per input.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Any, Optional

from flakekeeper.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

_ROOT_LOGGER_NAME = "flakekeeper"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Logging formatter with optional ANSI color support."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not (self.use_color and self._should_use_color()):
            return super().format(record)

        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)

        # Colour a copy of the level name only; handlers sharing the record
        # must still see the plain value.
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original

    @staticmethod
    def _should_use_color() -> bool:
        """Determine whether ANSI colors should be emitted."""
        if os.environ.get("NO_COLOR"):
            return False
        if os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


def level_for_verbosity(verbose: int) -> int:
    """Map a ``-v`` count to a logging level.

    ``0`` → WARNING, ``1`` → INFO, ``2`` or more → DEBUG.
    """
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
    use_color: Optional[bool] = None,
) -> None:
    """Configure logging for flakekeeper.

    Safe to call multiple times; every call replaces the previous handler.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Enable verbose formatting with timestamps.
        stream: Output stream; defaults to ``sys.stderr``.
        use_color: Force color on or off. ``None`` honours ``NO_COLOR``.
    """
    global _logging_configured

    if use_color is None:
        use_color = not os.environ.get("NO_COLOR")

    with _lock:
        root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=use_color,
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the flakekeeper namespace.

    Args:
        name: Logger name, either relative (``"core.extractor"``) or
            already qualified (``"flakekeeper.core.extractor"``).

    Returns:
        A logger instance under the ``flakekeeper`` hierarchy.
    """
    if not name or name == _ROOT_LOGGER_NAME:
        logger = logging.getLogger(_ROOT_LOGGER_NAME)
    elif name.startswith(f"{_ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")

    # Library-safe default when nobody configured logging
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def format_context(**fields: Any) -> str:
    """Render keyword fields as ``key=value`` pairs for log messages.

    ``None`` values are dropped and keys keep their call order.

    Example:
        >>> format_context(file="flake.lock", input="nixpkgs", rev=None)
        'file=flake.lock input=nixpkgs'
    """
    return " ".join(f"{key}={value}" for key, value in fields.items() if value is not None)


def is_logging_configured() -> bool:
    """Return True if flakekeeper logging has been configured."""
    return _logging_configured


def disable_logging() -> None:
    """Disable all flakekeeper logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
