"""Module: init_logging.py.

Author: Michael Economou
Date: 2026-02-10

init_logging.py
Single entry point to initialize file logging for a host embedding exifgate.
Functions:
init_logging(app_name, log_dir): Sets up rotating activity and error logs.
"""

import logging
from pathlib import Path

from exifgate.utils.logging.logger_factory import get_cached_logger
from exifgate.utils.logging.logger_file_helper import add_file_handler
from exifgate.utils.logging.logger_helper import ROOT_LOGGER_NAME


def init_logging(app_name: str = "exifgate", log_dir: str | Path | None = None) -> logging.Logger:
    """Add rotating file handlers for activity and error logs under the given app name.

    Args:
        app_name: The base name for log files (e.g., 'exifgate').
        log_dir: Target directory. Defaults to AppPaths.get_logs_dir().

    Returns:
        The exifgate package root logger.

    """
    if log_dir is None:
        from exifgate.utils.paths import AppPaths

        log_dir = AppPaths.get_logs_dir()

    logger = get_cached_logger(ROOT_LOGGER_NAME)
    log_dir = Path(log_dir)

    add_file_handler(logger, str(log_dir / f"{app_name}_activity.log"), level=logging.INFO)
    add_file_handler(logger, str(log_dir / f"{app_name}_errors.log"), level=logging.ERROR)

    return logger
