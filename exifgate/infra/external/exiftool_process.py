"""Module: exiftool_process.py.

Author: Michael Economou
Date: 2026-02-10

exiftool_process.py
Supervises the single persistent exiftool worker.

The worker is started in '-stay_open True -@ -' mode so it reads argument
batches from stdin until told to exit. When 'exiftool' cannot be launched from
PATH on Windows, the bundled exiftool.exe is copied into the private workspace
and launched from there. Shutdown is bounded and never raises.
Requires: exiftool installed and in PATH (or the bundled copy on Windows)
"""

from __future__ import annotations

import contextlib
import subprocess
import time
from pathlib import Path
from typing import Any

import psutil

from exifgate.config import (
    EXIFTOOL_COMMAND,
    EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT,
    EXIFTOOL_SHUTDOWN_GRACE_PERIOD,
    EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT,
    EXIFTOOL_STAY_OPEN_ARGS,
    EXTRACTED_BINARY_PREFIX,
    EXTRACTED_BINARY_SUFFIX,
)
from exifgate.errors import ExchangeIOError, WorkerLaunchError
from exifgate.infra.external.exiftool_protocol import ExifToolProtocol
from exifgate.infra.filesystem.secure_workspace import SecureWorkspace
from exifgate.utils.logging.logger_factory import get_cached_logger
from exifgate.utils.shared.external_tools import ToolName, get_bundled_tool_path, is_windows

logger = get_cached_logger(__name__)


def build_launch_args(executable: str) -> list[str]:
    """Command line that puts exiftool into stay-open mode reading stdin."""
    return [executable, *EXIFTOOL_STAY_OPEN_ARGS]


class ExifToolProcess:
    """Owner of the persistent exiftool process and its pipes.

    Attributes:
        process: The running subprocess (None before start)
        protocol: Protocol bound to the process pipes (None before start)
        extracted_binary: Workspace copy of the bundled binary, if one was needed

    """

    def __init__(
        self,
        workspace: SecureWorkspace,
        command: str = EXIFTOOL_COMMAND,
        bundled_binary: Path | None = None,
    ) -> None:
        self.workspace = workspace
        self.command = command
        self._bundled_binary = bundled_binary
        self.process: subprocess.Popen[str] | None = None
        self.protocol: ExifToolProtocol | None = None
        self.extracted_binary: Path | None = None
        self._stopped = False

    @staticmethod
    def _launch(executable: str) -> subprocess.Popen[str]:
        return subprocess.Popen(
            build_launch_args(executable),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,  # line buffered
        )

    def start(self) -> ExifToolProtocol:
        """Launch the worker, falling back to the bundled binary on Windows.

        Returns:
            Protocol bound to the worker's stdin/stdout

        Raises:
            WorkerLaunchError: If no worker could be started.

        """
        try:
            self.process = self._launch(self.command)
        except OSError as e:
            logger.info("[ExifToolProcess] '%s' not found in PATH.", self.command)
            if not is_windows():
                raise WorkerLaunchError("Cannot run. Do you have 'exiftool' set in PATH?") from e
            self.process = self._launch_extracted(e)

        self.protocol = ExifToolProtocol(self.process.stdin, self.process.stdout)
        logger.info("[ExifToolProcess] Process started (pid %d)", self.process.pid)
        return self.protocol

    def _launch_extracted(self, original: OSError) -> subprocess.Popen[str]:
        source = self._bundled_binary or get_bundled_tool_path(ToolName.EXIFTOOL)
        try:
            self.extracted_binary = self.workspace.extract_resource(
                source, EXTRACTED_BINARY_PREFIX, EXTRACTED_BINARY_SUFFIX
            )
            logger.info("[ExifToolProcess] Extracting exiftool to %s", self.extracted_binary)
            return self._launch(str(self.extracted_binary))
        except OSError as e:
            logger.error("[ExifToolProcess] Embedded exiftool unusable: %s", e)
            raise WorkerLaunchError(
                "Cannot run or extract embedded exiftool. Do you have 'exiftool' set in PATH?"
            ) from original

    def is_running(self) -> bool:
        """Whether the worker process is alive."""
        return self.process is not None and self.process.poll() is None

    def health_check(self) -> dict[str, Any]:
        """Report process liveness and resource usage.

        Returns:
            Dictionary with pid, status, memory and extracted binary details.

        """
        info: dict[str, Any] = {
            "pid": self.process.pid if self.process else None,
            "process_alive": self.is_running(),
            "process_status": "not started" if self.process is None else "unknown",
            "memory_rss": None,
            "extracted_binary": str(self.extracted_binary) if self.extracted_binary else None,
        }
        if self.process is None:
            return info

        try:
            proc = psutil.Process(self.process.pid)
            with proc.oneshot():
                info["process_status"] = proc.status()
                info["memory_rss"] = proc.memory_info().rss
        except psutil.NoSuchProcess:
            info["process_status"] = f"terminated (code: {self.process.poll()})"
        except psutil.AccessDenied as e:
            info["process_status"] = f"error: {e}"
        return info

    def stop(
        self,
        grace_period: float = EXIFTOOL_SHUTDOWN_GRACE_PERIOD,
        wait_timeout: float = EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT,
        kill_on_timeout: bool = EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT,
    ) -> None:
        """Ask the worker to exit, wait for it, then delete the extracted binary.

        Args:
            grace_period: Seconds to let the worker finish trailing work.
            wait_timeout: Max seconds to wait for the process to exit.
            kill_on_timeout: Kill the process tree if it is still alive afterwards.
                When False, a lingering process is left to the OS.

        """
        if self._stopped:
            return
        self._stopped = True

        proc = self.process
        if proc is not None:
            if self.protocol is not None:
                try:
                    self.protocol.send_exit()
                except ExchangeIOError as e:
                    logger.warning("[ExifToolProcess] Could not send exit command: %s", e)

            if grace_period > 0:
                time.sleep(grace_period)

            try:
                proc.wait(timeout=wait_timeout)
                logger.info("[ExifToolProcess] Process exited (code %s)", proc.returncode)
            except subprocess.TimeoutExpired:
                logger.warning(
                    "[ExifToolProcess] Process still running after %.1fs", wait_timeout
                )
                if kill_on_timeout:
                    self._kill_tree(proc.pid)

            for stream in (proc.stdin, proc.stdout):
                with contextlib.suppress(OSError, ValueError, AttributeError):
                    stream.close()

        self._delete_extracted_binary()

    @staticmethod
    def _kill_tree(pid: int, wait_s: float = 1.0) -> None:
        """Kill a process and its children."""
        try:
            parent = psutil.Process(pid)
        except psutil.NoSuchProcess:
            return

        procs = [*parent.children(recursive=True), parent]
        for proc in procs:
            with contextlib.suppress(psutil.NoSuchProcess):
                proc.kill()
        _, alive = psutil.wait_procs(procs, timeout=wait_s)
        if alive:
            logger.error("[ExifToolProcess] Zombie process detected: %s", [p.pid for p in alive])
        else:
            logger.warning("[ExifToolProcess] Process tree %d killed", pid)

    def _delete_extracted_binary(self) -> None:
        if self.extracted_binary is None:
            return
        logger.info("[ExifToolProcess] Deleting %s", self.extracted_binary)
        try:
            self.extracted_binary.unlink(missing_ok=True)
        except OSError:
            logger.exception("[ExifToolProcess] Could not delete %s", self.extracted_binary)
