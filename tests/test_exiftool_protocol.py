"""
Tests for the stay-open request/response protocol.

Author: Michael Economou
Date: 2026-02-10

Pipes are replaced by in-memory text streams.
"""

from __future__ import annotations

import io
from unittest.mock import MagicMock

import pytest

from exifgate.domain.ignore_rules import IgnoreRules
from exifgate.errors import ExchangeIOError
from exifgate.infra.external.exiftool_protocol import (
    ExifToolProtocol,
    ExtractionMode,
    build_exit_command,
    build_request,
)


def make_protocol(output: str = "") -> tuple[ExifToolProtocol, io.StringIO]:
    writer = io.StringIO()
    return ExifToolProtocol(writer, io.StringIO(output)), writer


class TestRequestFraming:
    """What gets written to the worker's stdin."""

    def test_plain_request(self) -> None:
        assert build_request("/tmp/ws/file123", ExtractionMode.PLAIN) == (
            "-m\n-S\n-sort\n/tmp/ws/file123\n-execute\n"
        )

    def test_html_request(self) -> None:
        assert build_request("/tmp/ws/file123", ExtractionMode.HTML) == (
            "-m\n-S\n-E\n-sort\n/tmp/ws/file123\n-execute\n"
        )

    def test_modes_differ_only_by_html_flag(self) -> None:
        plain = build_request("/p", ExtractionMode.PLAIN).splitlines()
        html = build_request("/p", ExtractionMode.HTML).splitlines()

        html.remove("-E")
        assert html == plain

    def test_exit_command(self) -> None:
        assert build_exit_command() == "-stay_open\nFalse\n"

    def test_send_request_writes_and_flushes(self) -> None:
        writer = MagicMock()
        protocol = ExifToolProtocol(writer, io.StringIO())

        protocol.send_request("/tmp/x", ExtractionMode.PLAIN)

        writer.write.assert_called_once_with("-m\n-S\n-sort\n/tmp/x\n-execute\n")
        writer.flush.assert_called_once()

    def test_send_exit_does_not_read(self) -> None:
        reader = MagicMock()
        writer = io.StringIO()
        ExifToolProtocol(writer, reader).send_exit()

        assert writer.getvalue() == "-stay_open\nFalse\n"
        reader.readline.assert_not_called()


class TestResponseReading:
    """Reading until a ready sentinel."""

    def test_reads_until_ready(self) -> None:
        protocol, _ = make_protocol("A: 1\nB: 2\n{ready}\nC: next\n")
        assert protocol.read_response() == ["A: 1", "B: 2"]

    def test_ready_error_sentinel_also_terminates(self) -> None:
        protocol, _ = make_protocol("A: 1\nError: x\n{ready-}\nC: next\n")
        assert protocol.read_response() == ["A: 1", "Error: x"]

    def test_consecutive_responses(self) -> None:
        protocol, _ = make_protocol("A: 1\n{ready}\nB: 2\n{ready}\n")
        assert protocol.read_response() == ["A: 1"]
        assert protocol.read_response() == ["B: 2"]

    def test_empty_response(self) -> None:
        protocol, _ = make_protocol("{ready}\n")
        assert protocol.read_response() == []

    def test_crlf_line_endings(self) -> None:
        protocol, _ = make_protocol("A: 1\r\n{ready}\r\n")
        assert protocol.read_response() == ["A: 1"]

    def test_sentinel_must_match_whole_line(self) -> None:
        protocol, _ = make_protocol("note {ready}\n{ready} \n{ready}\n")
        assert protocol.read_response() == ["note {ready}", "{ready} "]

    def test_filtering_keeps_order(self) -> None:
        rules = IgnoreRules.from_config(lines=["Warning"])
        protocol, _ = make_protocol("File Name:foo.jpg\nWarning:bad\nZ:last\n{ready}\n")

        assert protocol.read_response(rules.keeps_line) == ["File Name:foo.jpg", "Z:last"]

    def test_eof_before_sentinel_raises(self) -> None:
        protocol, _ = make_protocol("A: 1\n")
        with pytest.raises(ExchangeIOError):
            protocol.read_response()

    def test_read_error_raises(self) -> None:
        reader = MagicMock()
        reader.readline.side_effect = OSError("broken")
        protocol = ExifToolProtocol(io.StringIO(), reader)

        with pytest.raises(ExchangeIOError) as exc_info:
            protocol.read_response()
        assert isinstance(exc_info.value.__cause__, OSError)


class TestExchange:
    """Full cycle and write failures."""

    def test_exchange_writes_then_reads(self) -> None:
        protocol, writer = make_protocol("Tag: v\n{ready}\n")

        result = protocol.exchange("/tmp/f", ExtractionMode.HTML)

        assert writer.getvalue().endswith("/tmp/f\n-execute\n")
        assert result == ["Tag: v"]

    def test_broken_pipe_raises(self) -> None:
        writer = MagicMock()
        writer.write.side_effect = BrokenPipeError()
        protocol = ExifToolProtocol(writer, io.StringIO())

        with pytest.raises(ExchangeIOError):
            protocol.exchange("/tmp/f")

    def test_closed_pipe_raises(self) -> None:
        writer = io.StringIO()
        writer.close()
        protocol = ExifToolProtocol(writer, io.StringIO())

        with pytest.raises(ExchangeIOError):
            protocol.send_request("/tmp/f")
        with pytest.raises(ExchangeIOError):
            protocol.send_exit()
