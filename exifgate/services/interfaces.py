"""
Protocol definitions for the host collaborator.

Author: Michael Economou
Date: 2026-02-10

The gateway never parses responses itself in an embedded setting; the host
hands it an object exposing the fields below, or an analyzer producing one.
Protocols are runtime-checkable so hosts can pass any structurally matching
object.

Usage:
    from exifgate.services.interfaces import ResponseInfoProtocol

    class BurpResponseInfo:
        body_offset = 120
        stated_mime_type = "image/jpeg"
        inferred_mime_type = "image/jpeg"
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

__all__ = [
    "ResponseAnalyzerProtocol",
    "ResponseInfoProtocol",
]


@runtime_checkable
class ResponseInfoProtocol(Protocol):
    """Metadata about one intercepted response."""

    @property
    def body_offset(self) -> int:
        """Index in the raw response where the body begins."""
        ...

    @property
    def stated_mime_type(self) -> str | None:
        """MIME type declared by the response headers."""
        ...

    @property
    def inferred_mime_type(self) -> str | None:
        """MIME type inferred from the body content."""
        ...


@runtime_checkable
class ResponseAnalyzerProtocol(Protocol):
    """Callable turning raw response bytes into ResponseInfoProtocol."""

    def __call__(self, raw: bytes) -> ResponseInfoProtocol: ...
