"""Module: exiftool_protocol.py.

Author: Michael Economou
Date: 2026-02-10

Line-oriented request/response protocol spoken with a '-stay_open True -@ -'
exiftool process.

Request:  option lines, staged file path, '-execute'
Response: result lines, then '{ready}' (or '{ready-}')
Exit:     '-stay_open', 'False'

This class does no locking of its own; the gateway serializes exchanges.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import TextIO

from exifgate.config import (
    EXECUTE_SENTINEL,
    EXIFTOOL_EXIT_COMMAND,
    EXIFTOOL_HTML_OPTIONS,
    EXIFTOOL_PLAIN_OPTIONS,
    READY_ERROR_SENTINEL,
    READY_SENTINELS,
)
from exifgate.errors import ExchangeIOError
from exifgate.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class ExtractionMode(Enum):
    """Output flavours supported by one exchange."""

    PLAIN = "plain"
    HTML = "html"

    @property
    def options(self) -> tuple[str, ...]:
        """Option lines sent before the file path."""
        if self is ExtractionMode.HTML:
            return EXIFTOOL_HTML_OPTIONS
        return EXIFTOOL_PLAIN_OPTIONS


def build_request(path: Path | str, mode: ExtractionMode) -> str:
    """Frame one request as the exact text written to the worker."""
    lines = [*mode.options, str(path), EXECUTE_SENTINEL]
    return "".join(f"{line}\n" for line in lines)


def build_exit_command() -> str:
    return "".join(f"{line}\n" for line in EXIFTOOL_EXIT_COMMAND)


class ExifToolProtocol:
    """Writes requests to and reads responses from the worker's pipes."""

    def __init__(self, writer: TextIO, reader: TextIO) -> None:
        self._writer = writer
        self._reader = reader

    def send_request(self, path: Path | str, mode: ExtractionMode = ExtractionMode.PLAIN) -> None:
        """Write one request and flush so exiftool starts on '-execute'.

        Raises:
            ExchangeIOError: If the pipe is broken or closed.

        """
        logger.debug("[ExifToolProtocol] Notifying exiftool", extra={"dev_only": True})
        try:
            self._writer.write(build_request(path, mode))
            self._writer.flush()
        except (OSError, ValueError) as e:
            raise ExchangeIOError(f"Cannot send request for {path} to exiftool") from e
        logger.debug("[ExifToolProtocol] Exiftool notified", extra={"dev_only": True})

    def read_response(self, keep_line: Callable[[str], bool] | None = None) -> list[str]:
        """Read result lines until a ready sentinel.

        Args:
            keep_line: Predicate deciding which lines are returned (all if None)

        Returns:
            Kept lines in worker order

        Raises:
            ExchangeIOError: On a read failure or if the worker closes its output.

        """
        logger.debug("[ExifToolProtocol] Reading result from exiftool", extra={"dev_only": True})
        result: list[str] = []
        while True:
            try:
                raw = self._reader.readline()
            except (OSError, ValueError) as e:
                raise ExchangeIOError("Cannot read response from exiftool") from e

            if raw == "":
                raise ExchangeIOError("exiftool closed its output before the ready sentinel")

            line = raw.rstrip("\r\n")
            logger.debug("[ExifToolProtocol] %s", line, extra={"dev_only": True})

            if line in READY_SENTINELS:
                if line == READY_ERROR_SENTINEL:
                    logger.warning("[ExifToolProtocol] exiftool reported an error for this request")
                break

            if keep_line is None or keep_line(line):
                result.append(line)

        logger.debug(
            "[ExifToolProtocol] %d elements read", len(result), extra={"dev_only": True}
        )
        return result

    def exchange(
        self,
        path: Path | str,
        mode: ExtractionMode = ExtractionMode.PLAIN,
        keep_line: Callable[[str], bool] | None = None,
    ) -> list[str]:
        """One full request/response cycle. The caller must hold the exchange lock."""
        self.send_request(path, mode)
        return self.read_response(keep_line)

    def send_exit(self) -> None:
        """Ask exiftool to leave stay-open mode. No response is awaited.

        Raises:
            ExchangeIOError: If the pipe is already gone.

        """
        logger.info("[ExifToolProtocol] Exit exiftool")
        try:
            self._writer.write(build_exit_command())
            self._writer.flush()
        except (OSError, ValueError) as e:
            raise ExchangeIOError("Cannot send exit command to exiftool") from e
