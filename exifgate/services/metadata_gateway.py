"""Module: metadata_gateway.py.

Author: Michael Economou
Date: 2026-02-10

MetadataGateway: the entry point hosts use to read metadata from response bodies.

It owns one SecureWorkspace and one persistent exiftool worker. Each eligible
request is staged to a private file, sent to the worker under a single
exchange lock and unstaged again. Ignore rules are held as one immutable
snapshot; setters replace it wholesale, one at a time, while readers never lock.

Usage:
    with MetadataGateway(types_to_ignore={"text/html"}, lines_to_ignore={"FileName"}) as gw:
        lines = gw.extract(raw_response)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from exifgate.config import (
    DEFAULT_LINES_TO_IGNORE,
    DEFAULT_TYPES_TO_IGNORE,
    EXIFTOOL_COMMAND,
    EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT,
    EXIFTOOL_SHUTDOWN_GRACE_PERIOD,
    EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT,
)
from exifgate.domain.ignore_rules import IgnoreRules
from exifgate.domain.response_info import analyze_response
from exifgate.errors import ExchangeIOError
from exifgate.infra.external.exiftool_process import ExifToolProcess
from exifgate.infra.external.exiftool_protocol import ExtractionMode
from exifgate.infra.filesystem.permissions import PermissionPolicy
from exifgate.infra.filesystem.secure_workspace import SecureWorkspace
from exifgate.services.interfaces import ResponseAnalyzerProtocol, ResponseInfoProtocol
from exifgate.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class MetadataGateway:
    """Thread-safe facade over the exiftool worker.

    Any number of threads may call extract() concurrently; staging runs in
    parallel while the pipe exchange itself is strictly one at a time.

    After a pipe failure the gateway stays unusable: every later extraction of
    eligible content raises ExchangeIOError until a new gateway is created.
    """

    def __init__(
        self,
        command: str = EXIFTOOL_COMMAND,
        types_to_ignore: Iterable[str] = DEFAULT_TYPES_TO_IGNORE,
        lines_to_ignore: Iterable[str] = DEFAULT_LINES_TO_IGNORE,
        analyzer: ResponseAnalyzerProtocol = analyze_response,
        permission_policy: PermissionPolicy | None = None,
        bundled_binary: Path | None = None,
        grace_period: float = EXIFTOOL_SHUTDOWN_GRACE_PERIOD,
        wait_timeout: float = EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT,
        kill_on_timeout: bool = EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT,
    ) -> None:
        """Create the workspace and start the worker.

        The workspace is removed before any startup error propagates.

        Raises:
            WorkspaceInitError: If the private temp directory cannot be set up.
            WorkerLaunchError: If exiftool cannot be started.

        """
        self._rules = IgnoreRules.from_config(types_to_ignore, lines_to_ignore)
        self._analyzer = analyzer
        self._grace_period = grace_period
        self._wait_timeout = wait_timeout
        self._kill_on_timeout = kill_on_timeout

        self._lock = threading.Lock()
        self._rules_lock = threading.Lock()
        self._broken = False
        self._closed = False

        self.workspace = SecureWorkspace(policy=permission_policy)
        self._process = ExifToolProcess(self.workspace, command, bundled_binary)
        try:
            self._protocol = self._process.start()
        except BaseException:
            self.workspace.destroy()
            raise

    def __enter__(self) -> MetadataGateway:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =====================================
    # CONFIGURATION
    # =====================================

    @property
    def rules(self) -> IgnoreRules:
        """Current ignore rules snapshot."""
        return self._rules

    def set_types_to_ignore(self, types_to_ignore: Iterable[str]) -> None:
        with self._rules_lock:
            self._rules = self._rules.with_types(types_to_ignore)

    def set_lines_to_ignore(self, lines_to_ignore: Iterable[str]) -> None:
        """Replace ignored tag names; each gets the field separator appended."""
        with self._rules_lock:
            self._rules = self._rules.with_lines(lines_to_ignore)

    # =====================================
    # ELIGIBILITY
    # =====================================

    def is_eligible(self, info: ResponseInfoProtocol) -> bool:
        """False if the stated or inferred MIME type is ignored."""
        return not self._rules.ignores_type(info.stated_mime_type, info.inferred_mime_type)

    def can_read_metadata(self, raw: bytes) -> bool:
        """Analyze a raw response and check whether it would be processed."""
        return self.is_eligible(self._analyzer(raw))

    # =====================================
    # EXTRACTION
    # =====================================

    def extract(
        self,
        raw: bytes,
        info: ResponseInfoProtocol | None = None,
        mode: ExtractionMode = ExtractionMode.PLAIN,
    ) -> list[str]:
        """Read metadata lines for the body of a raw response.

        Args:
            raw: Raw response bytes, headers included
            info: Response metadata (computed by the analyzer when None)
            mode: Plain or HTML-escaped output

        Returns:
            Filtered result lines; empty for ineligible content

        Raises:
            WorkspaceInitError: If the payload cannot be staged.
            ExchangeIOError: If talking to the worker fails, or failed earlier.

        """
        logger.debug("[MetadataGateway] Reading metadata from response", extra={"dev_only": True})
        if info is None:
            info = self._analyzer(raw)

        rules = self._rules
        if rules.ignores_type(info.stated_mime_type, info.inferred_mime_type):
            logger.debug(
                "[MetadataGateway] Inappropriate MIME Type: %s, %s",
                info.stated_mime_type,
                info.inferred_mime_type,
                extra={"dev_only": True},
            )
            return []

        self._ensure_usable()
        with self.workspace.staged(raw, info.body_offset) as path, self._lock:
            self._ensure_usable()
            try:
                return self._protocol.exchange(path, mode, rules.keeps_line)
            except ExchangeIOError:
                self._broken = True
                logger.exception("[MetadataGateway] Exchange with exiftool failed")
                raise

    def read_metadata(self, raw: bytes, info: ResponseInfoProtocol | None = None) -> list[str]:
        return self.extract(raw, info, ExtractionMode.PLAIN)

    def read_metadata_html(self, raw: bytes, info: ResponseInfoProtocol | None = None) -> list[str]:
        return self.extract(raw, info, ExtractionMode.HTML)

    def _ensure_usable(self) -> None:
        if self._closed:
            raise ExchangeIOError("Gateway is closed")
        if self._broken:
            raise ExchangeIOError("exiftool exchange failed earlier; recreate the gateway")

    # =====================================
    # STATUS / SHUTDOWN
    # =====================================

    @property
    def is_closed(self) -> bool:
        return self._closed

    def health_check(self) -> dict[str, Any]:
        """Worker status plus gateway state."""
        status = self._process.health_check()
        status.update(
            {
                "healthy": self._process.is_running() and not self._broken and not self._closed,
                "broken": self._broken,
                "closed": self._closed,
                "workspace": str(self.workspace.path),
            }
        )
        return status

    def close(
        self,
        grace_period: float | None = None,
        wait_timeout: float | None = None,
        kill_on_timeout: bool | None = None,
    ) -> None:
        """Stop the worker and delete the workspace. Never raises.

        Order: exit command, grace delay, bounded wait, extracted binary,
        workspace directory.
        """
        if self._closed:
            return
        self._closed = True

        grace_period = self._grace_period if grace_period is None else grace_period
        wait_timeout = self._wait_timeout if wait_timeout is None else wait_timeout
        kill_on_timeout = self._kill_on_timeout if kill_on_timeout is None else kill_on_timeout

        # An in-flight exchange gets a bounded chance to finish before exit is sent
        acquired = self._lock.acquire(timeout=wait_timeout)
        if not acquired:
            logger.warning("[MetadataGateway] Exchange still in flight, shutting down anyway")
        try:
            self._process.stop(grace_period, wait_timeout, kill_on_timeout)
        except Exception:
            logger.exception("[MetadataGateway] Error while stopping exiftool")
        finally:
            if acquired:
                self._lock.release()
            self.workspace.destroy()
        logger.info("[MetadataGateway] Closed")
