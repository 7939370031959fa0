#!/usr/bin/env python3
"""
Module: exifgate.__main__

Author: Michael Economou
Date: 2026-02-10

Command-line host for the metadata gateway:
    python -m exifgate response1.http response2.http
    exifgate --raw-body --html image.jpg

Each file is read as a raw HTTP response (or a bare body with --raw-body),
passed through one shared gateway, and its metadata lines are printed.

Settings come from --config or the default config.json (AppPaths); command
line options override them. Logging goes to stderr.

Exit codes: 0 success, 1 initialization or config failure, 2 exchange failure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from exifgate.config import APP_NAME, APP_VERSION, EXIFTOOL_COMMAND
from exifgate.domain.response_info import ResponseInfo, analyze_response, sniff_mime_type
from exifgate.errors import ExchangeIOError, GatewayInitError
from exifgate.infra.external.exiftool_protocol import ExtractionMode
from exifgate.services.metadata_gateway import MetadataGateway
from exifgate.utils.logging.logger_factory import LoggerFactory, get_cached_logger
from exifgate.utils.logging.logger_helper import set_console_stream
from exifgate.utils.shared.external_tools import get_tool_version
from exifgate.utils.shared.json_config_manager import create_config_manager

logger = get_cached_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Read file metadata from HTTP response bodies using a persistent exiftool.",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Files holding raw responses")
    parser.add_argument("--html", action="store_true", help="HTML-escaped output (-E)")
    parser.add_argument(
        "--raw-body", action="store_true", help="Treat each file as a bare body without headers"
    )
    parser.add_argument(
        "--ignore-type", action="append", metavar="MIME", help="MIME type to skip (repeatable)"
    )
    parser.add_argument(
        "--ignore-line", action="append", metavar="TAG", help="Result tag to drop (repeatable)"
    )
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("--exiftool", metavar="CMD", help="exiftool command or path")
    parser.add_argument(
        "--exiftool-version", action="store_true", help="Print the exiftool version and exit"
    )
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser


def _response_info(raw: bytes, raw_body: bool) -> ResponseInfo:
    if raw_body:
        return ResponseInfo(body_offset=0, inferred_mime_type=sniff_mime_type(raw))
    return analyze_response(raw)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # stdout carries results only
    set_console_stream(sys.stderr)
    LoggerFactory.set_global_level(logging.DEBUG if args.verbose else logging.WARNING)

    config = create_config_manager(config_file=args.config)
    if not config.load():
        print(f"Cannot read config file {config.config_file}", file=sys.stderr)
        return 1
    kwargs = config.gateway_kwargs()
    if args.exiftool:
        kwargs["command"] = args.exiftool
    if args.ignore_type is not None:
        kwargs["types_to_ignore"] = args.ignore_type
    if args.ignore_line is not None:
        kwargs["lines_to_ignore"] = args.ignore_line

    if args.exiftool_version:
        version = get_tool_version(kwargs.get("command", EXIFTOOL_COMMAND))
        if version is None:
            print("exiftool not available", file=sys.stderr)
            return 1
        print(version)
        return 0
    if not args.files:
        parser.error("no input files")

    mode = ExtractionMode.HTML if args.html else ExtractionMode.PLAIN

    try:
        gateway = MetadataGateway(**kwargs)
    except GatewayInitError as e:
        for message in e.cause_chain():
            print(message, file=sys.stderr)
        return 1

    with gateway:
        for path in args.files:
            try:
                raw = path.read_bytes()
            except OSError as e:
                print(f"{path}: {e}", file=sys.stderr)
                continue

            try:
                lines = gateway.extract(raw, _response_info(raw, args.raw_body), mode)
            except ExchangeIOError as e:
                print(f"{path}: {e}", file=sys.stderr)
                return 2

            print(f"==> {path} <==")
            for line in lines:
                print(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())
