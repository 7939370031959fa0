"""Module: logger_file_helper.py

Author: Michael Economou
Date: 2026-02-10

logger_file_helper.py
Attaches rotating file handlers to a logger,
with optional filtering by logger name.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from exifgate.config import (
    LOG_DATE_FORMAT,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    LOG_FORMAT,
)


def add_file_handler(
    logger: logging.Logger,
    log_path: str,
    level: int = logging.INFO,
    max_bytes: int = LOG_FILE_MAX_BYTES,
    backup_count: int = LOG_FILE_BACKUP_COUNT,
    filter_by_name: str | None = None,
) -> RotatingFileHandler:
    """Attach a rotating file handler to a logger.

    Args:
        logger: The logger to attach the handler to.
        log_path: Path to the log file.
        level: Logging level for this file handler (e.g., logging.ERROR).
        max_bytes: Maximum file size before rotating.
        backup_count: Number of backup files to keep.
        filter_by_name: Only log records whose logger name starts with this value.

    Returns:
        The attached handler.

    """
    directory = os.path.dirname(log_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    if filter_by_name:

        class NameFilter(logging.Filter):
            def filter(self, record):
                return record.name.startswith(filter_by_name)

        file_handler.addFilter(NameFilter())

    logger.addHandler(file_handler)
    return file_handler
