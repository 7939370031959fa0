"""Module: errors.py.

Author: Michael Economou
Date: 2026-02-10

Exception hierarchy for the exifgate engine.

Construction failures (workspace or worker launch) derive from
GatewayInitError so a host can catch a single type and still show the
full cause chain. Exchange failures abort one request only.
"""

from __future__ import annotations


class ExifGateError(Exception):
    """Base class for all exifgate errors."""


class GatewayInitError(ExifGateError):
    """The engine could not be initialized."""

    def cause_chain(self) -> list[str]:
        """Return human-readable messages from this error down to the root cause."""
        messages: list[str] = []
        seen: set[int] = set()
        exc: BaseException | None = self
        while exc is not None and id(exc) not in seen:
            seen.add(id(exc))
            text = str(exc) or exc.__class__.__name__
            messages.append(f"{exc.__class__.__name__}: {text}")
            exc = exc.__cause__
        return messages


class WorkspaceInitError(GatewayInitError):
    """Temporary directory or staged file could not be created or secured."""


class WorkerLaunchError(GatewayInitError):
    """The exiftool worker process could not be started."""


class ExchangeIOError(ExifGateError):
    """Pipe failure while talking to the worker during one exchange."""
