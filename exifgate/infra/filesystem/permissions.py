"""Module: permissions.py.

Author: Michael Economou
Date: 2026-02-10

Owner-only access enforcement for workspace paths.

Two implementations of one PermissionPolicy protocol:
- PosixPermissionPolicy: mode bits (0o700 directories and executables, 0o600 files)
- WindowsAclPermissionPolicy: icacls, removing inherited ACEs and granting
  only the current user

select_permission_policy() picks one at startup. Every failure raises
PermissionError (an OSError) so callers never continue with a readable path.
"""

from __future__ import annotations

import getpass
import os
import stat
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from exifgate.utils.logging.logger_factory import get_cached_logger
from exifgate.utils.shared.external_tools import is_windows

logger = get_cached_logger(__name__)

DIRECTORY_MODE = 0o700
FILE_MODE = 0o600
EXECUTABLE_MODE = 0o700


@runtime_checkable
class PermissionPolicy(Protocol):
    """Restricts a path so only the current user can access it."""

    def secure_directory(self, path: Path) -> None:
        """Owner-only read, write and traverse."""
        ...

    def secure_file(self, path: Path) -> None:
        """Owner-only read and write, no execute."""
        ...

    def secure_executable(self, path: Path) -> None:
        """Owner-only read, write and execute."""
        ...


class PosixPermissionPolicy:
    """Mode-bit based policy for POSIX platforms."""

    def secure_directory(self, path: Path) -> None:
        self._apply(path, DIRECTORY_MODE)

    def secure_file(self, path: Path) -> None:
        self._apply(path, FILE_MODE)

    def secure_executable(self, path: Path) -> None:
        self._apply(path, EXECUTABLE_MODE)

    @staticmethod
    def _apply(path: Path, mode: int) -> None:
        os.chmod(path, mode)
        actual = stat.S_IMODE(os.stat(path).st_mode)
        if actual != mode:
            raise PermissionError(
                f"Could not restrict {path} to {mode:o} (mode is {actual:o})"
            )


class WindowsAclPermissionPolicy:
    """ACL based policy for Windows, where mode bits only toggle read-only."""

    def __init__(self, user: str | None = None) -> None:
        self._user = user or os.environ.get("USERNAME") or getpass.getuser()

    def secure_directory(self, path: Path) -> None:
        self._grant_only_owner(path, "(OI)(CI)F")

    def secure_file(self, path: Path) -> None:
        self._grant_only_owner(path, "(R,W)")

    def secure_executable(self, path: Path) -> None:
        # Loading an image needs execute rights on the file
        self._grant_only_owner(path, "(RX,W)")

    def _grant_only_owner(self, path: Path, rights: str) -> None:
        cmd = [
            "icacls",
            str(path),
            "/inheritance:r",
            "/grant:r",
            f"{self._user}:{rights}",
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30, check=False)
        except subprocess.TimeoutExpired as e:
            raise PermissionError(f"icacls timed out for {path}") from e

        if result.returncode != 0:
            raise PermissionError(
                f"icacls failed for {path} (code {result.returncode}): "
                f"{(result.stderr or result.stdout).strip()}"
            )
        logger.debug(
            "[WindowsAclPermissionPolicy] Restricted %s to %s",
            path,
            self._user,
            extra={"dev_only": True},
        )


def select_permission_policy() -> PermissionPolicy:
    """Choose the permission policy for the running platform."""
    if is_windows():
        return WindowsAclPermissionPolicy()
    return PosixPermissionPolicy()
