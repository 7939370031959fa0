"""
Module: test_logging.py

Author: Michael Economou
Date: 2026-02-10

Tests the logging system setup to verify:
- General logs (info) go to exifgate_activity.log
- Errors go to exifgate_errors.log
- Name filtering on file handlers
- Dev-only records stay out of the console
"""

import io
import logging
import sys

import pytest

from exifgate.utils.logging.init_logging import init_logging
from exifgate.utils.logging.logger_factory import LoggerFactory, get_cached_logger
from exifgate.utils.logging.logger_file_helper import add_file_handler
from exifgate.utils.logging.logger_helper import (
    ROOT_LOGGER_NAME,
    DevOnlyFilter,
    SafeTextFilter,
    safe_text,
    set_console_stream,
)


@pytest.fixture(autouse=True)
def debug_levels():
    """Undo level changes made by other tests, such as the CLI."""
    LoggerFactory.set_global_level(logging.DEBUG)
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)
    yield


@pytest.fixture
def detach_handlers():
    """Remove file handlers added during a test."""
    added = []
    yield added
    for logger, handler in added:
        logger.removeHandler(handler)
        handler.close()


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("exifgate.test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_init_logging_splits_activity_and_errors(tmp_path, detach_handlers):
    root = init_logging("exifgate", tmp_path)
    detach_handlers.extend((root, h) for h in root.handlers if hasattr(h, "baseFilename"))

    log = get_cached_logger("exifgate.tests.split")
    log.info("activity message")
    log.error("error message")
    for _, handler in detach_handlers:
        handler.flush()

    activity = (tmp_path / "exifgate_activity.log").read_text(encoding="utf-8")
    errors = (tmp_path / "exifgate_errors.log").read_text(encoding="utf-8")
    assert "activity message" in activity
    assert "error message" in activity
    assert "error message" in errors
    assert "activity message" not in errors


def test_file_handler_name_filter(tmp_path, detach_handlers):
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handler = add_file_handler(
        root, str(tmp_path / "logs" / "gateway.log"), filter_by_name="exifgate.services"
    )
    detach_handlers.append((root, handler))

    get_cached_logger("exifgate.services.sample").info("from services")
    get_cached_logger("exifgate.infra.sample").info("from infra")
    handler.flush()

    content = (tmp_path / "logs" / "gateway.log").read_text(encoding="utf-8")
    assert "from services" in content
    assert "from infra" not in content


def test_dev_only_filter():
    flt = DevOnlyFilter()
    assert flt.filter(_record("normal")) is True
    assert flt.filter(_record("noisy", dev_only=True)) is False


def test_safe_text_filter_rewrites_message():
    record = _record("a → b …")
    SafeTextFilter().filter(record)
    assert record.msg == "a -> b ..."
    assert safe_text("plain") == "plain"


def test_logger_factory_caches_and_sets_level():
    first = LoggerFactory.get_logger("exifgate.tests.cache")
    assert LoggerFactory.get_logger("exifgate.tests.cache") is first

    previous = first.level
    try:
        LoggerFactory.set_global_level(logging.WARNING)
        assert first.level == logging.WARNING
    finally:
        LoggerFactory.set_global_level(previous)


def test_console_stream_can_be_redirected():
    buffer = io.StringIO()
    previous = set_console_stream(buffer)
    try:
        get_cached_logger("exifgate.tests.console").warning("to buffer")
    finally:
        set_console_stream(previous or sys.__stdout__)

    assert "to buffer" in buffer.getvalue()
