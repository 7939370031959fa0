"""Module: logger_helper.py.

Author: Michael Economou
Date: 2026-02-10

Utility functions for retrieving loggers in a safe and consistent way.

Loggers under the "exifgate" namespace share one UTF-8 console handler
attached to the package root logger. Dev-only records (extra={"dev_only": True})
are hidden from the console but still reach file handlers.
"""

import contextlib
import logging
import re
import sys
from typing import TextIO

from exifgate.config import LOG_CONSOLE_FORMAT, SHOW_DEV_ONLY_IN_CONSOLE

ROOT_LOGGER_NAME = "exifgate"


def safe_text(text: str) -> str:
    """Replace unsupported Unicode characters with ASCII-safe alternatives."""
    replacements = {
        "\u2192": "->",  # right arrow
        "\u2014": "--",  # em dash
        "\u2013": "-",  # en dash
        "\u2026": "...",  # ellipsis
    }
    pattern = re.compile("|".join(map(re.escape, replacements.keys())))
    return pattern.sub(lambda m: replacements[m.group(0)], text)


class DevOnlyFilter(logging.Filter):
    """Hide dev-only records from the console."""

    def filter(self, record: logging.LogRecord) -> bool:
        if SHOW_DEV_ONLY_IN_CONSOLE:
            return True
        return not getattr(record, "dev_only", False)


class SafeTextFilter(logging.Filter):
    """Rewrite characters that legacy consoles cannot encode."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = safe_text(record.msg)
        return True


def _ensure_console_handler(root: logging.Logger) -> logging.StreamHandler:
    existing = getattr(root, "_exifgate_console", None)
    if existing is not None:
        return existing

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.addFilter(DevOnlyFilter())
    handler.addFilter(SafeTextFilter())
    handler.setFormatter(logging.Formatter(LOG_CONSOLE_FORMAT))

    with contextlib.suppress(AttributeError, ValueError):
        handler.stream.reconfigure(encoding="utf-8")

    root.addHandler(handler)
    root._exifgate_console = handler  # type: ignore[attr-defined]
    return handler


def set_console_stream(stream: TextIO) -> TextIO | None:
    """Point the shared console handler at another stream.

    Hosts that print results on stdout move log output to stderr.

    Returns:
        The previous stream

    """
    return _ensure_console_handler(logging.getLogger(ROOT_LOGGER_NAME)).setStream(stream)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger whose records propagate to the shared exifgate console handler.

    Args:
        name: Logger name (defaults to the package root logger)

    Returns:
        Configured logger instance

    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.level == logging.NOTSET:
        root.setLevel(logging.DEBUG)
    _ensure_console_handler(root)

    return logging.getLogger(name or ROOT_LOGGER_NAME)
