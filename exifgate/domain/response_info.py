"""Module: response_info.py.

Author: Michael Economou
Date: 2026-02-10

Response metadata consumed by the gateway, plus a default analyzer for raw
HTTP responses.

Hosts that already parse responses pass their own object exposing
body_offset, stated_mime_type and inferred_mime_type. The analyzer here covers
standalone use (CLI, tests): it locates the header/body boundary, reads
Content-Type and sniffs the body's leading bytes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_HEADER_TERMINATORS = (b"\r\n\r\n", b"\n\n")
_CONTENT_TYPE_RE = re.compile(rb"^content-type[ \t]*:[ \t]*([^\r\n;]*)", re.IGNORECASE | re.MULTILINE)

# (offset, signature, mime type)
_MAGIC_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"\x89PNG\r\n\x1a\n", "image/png"),
    (0, b"GIF87a", "image/gif"),
    (0, b"GIF89a", "image/gif"),
    (0, b"II*\x00", "image/tiff"),
    (0, b"MM\x00*", "image/tiff"),
    (0, b"BM", "image/bmp"),
    (0, b"%PDF-", "application/pdf"),
    (0, b"PK\x03\x04", "application/zip"),
    (0, b"ID3", "audio/mpeg"),
    (0, b"OggS", "audio/ogg"),
    (4, b"ftyp", "video/mp4"),
)


@dataclass(frozen=True)
class ResponseInfo:
    """Where the body starts and what the response claims and appears to be."""

    body_offset: int = 0
    stated_mime_type: str | None = None
    inferred_mime_type: str | None = None


def _find_body_offset(raw: bytes) -> int:
    if not raw.startswith(b"HTTP/"):
        return 0
    positions = [
        (index, len(terminator))
        for terminator in _HEADER_TERMINATORS
        if (index := raw.find(terminator)) != -1
    ]
    if not positions:
        return len(raw)
    index, length = min(positions)
    return index + length


def sniff_mime_type(body: bytes) -> str | None:
    """Guess a MIME type from leading bytes.

    Returns:
        MIME type string, or None when nothing matches

    """
    for offset, signature, mime_type in _MAGIC_SIGNATURES:
        if body[offset : offset + len(signature)] == signature:
            return mime_type

    if body[:4] == b"RIFF" and body[8:12] == b"WEBP":
        return "image/webp"

    head = body[:512].lstrip().lower()
    if head.startswith((b"<!doctype html", b"<html")):
        return "text/html"
    if head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        return "image/svg+xml"
    if head.startswith(b"<?xml"):
        return "application/xml"
    if head.startswith((b"{", b"[")):
        return "application/json"
    return None


def analyze_response(raw: bytes) -> ResponseInfo:
    """Split a raw HTTP response into header offset and MIME type hints.

    Input that does not start with an HTTP status line is treated as a bare body.
    A status line without a header terminator yields an empty body.
    """
    body_offset = _find_body_offset(raw)

    stated = None
    if body_offset:
        match = _CONTENT_TYPE_RE.search(raw[:body_offset])
        if match:
            value = match.group(1).strip().decode("latin-1").lower()
            stated = value or None

    return ResponseInfo(
        body_offset=body_offset,
        stated_mime_type=stated,
        inferred_mime_type=sniff_mime_type(raw[body_offset:]),
    )
