"""Module: secure_workspace.py.

Author: Michael Economou
Date: 2026-02-10

Private temporary workspace for staging response bodies.

One directory per engine instance, created owner-only. Each request gets its
own uniquely named file inside it, secured before any byte is written and
removed as soon as the exchange finishes. Shutdown-path deletes never raise.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path

from exifgate.config import (
    RESOURCE_COPY_CHUNK_SIZE,
    STAGED_FILE_PREFIX,
    STAGED_FILE_SUFFIX,
    WORKSPACE_PREFIX,
)
from exifgate.errors import WorkspaceInitError
from exifgate.infra.filesystem.permissions import PermissionPolicy, select_permission_policy
from exifgate.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class SecureWorkspace:
    """Owner-only temporary directory holding staged payloads.

    Usage:
        with SecureWorkspace() as workspace:
            with workspace.staged(raw, body_offset) as path:
                ...

    Attributes:
        path: The workspace directory
        policy: Permission policy applied to every created path

    """

    def __init__(
        self,
        prefix: str = WORKSPACE_PREFIX,
        policy: PermissionPolicy | None = None,
    ) -> None:
        """Create the workspace directory.

        Raises:
            WorkspaceInitError: If the directory cannot be created or secured.

        """
        self.policy = policy or select_permission_policy()
        self._destroyed = False

        try:
            self.path = Path(tempfile.mkdtemp(prefix=prefix))
        except OSError as e:
            raise WorkspaceInitError("Cannot create temporary directory") from e

        try:
            self.policy.secure_directory(self.path)
        except OSError as e:
            with contextlib.suppress(OSError):
                shutil.rmtree(self.path)
            raise WorkspaceInitError(f"Cannot secure temporary directory {self.path}") from e

        logger.info("[SecureWorkspace] Temp directory %s created", self.path)

    def __enter__(self) -> SecureWorkspace:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    def _create_secured_file(
        self, prefix: str, suffix: str, secure: Callable[[Path], None]
    ) -> tuple[int, Path]:
        """Create an empty owner-only file and return its open descriptor and path."""
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=self.path)
        path = Path(name)
        try:
            secure(path)
        except OSError:
            os.close(fd)
            self.unstage_file(path)
            raise
        return fd, path

    def stage_file(self, payload: bytes, body_offset: int) -> Path:
        """Write the body part of a response into a new private file.

        Args:
            payload: Raw response bytes (headers included)
            body_offset: Index where the body starts

        Returns:
            Absolute path of the staged file

        Raises:
            WorkspaceInitError: If the file cannot be created, secured or written.

        """
        logger.debug("[SecureWorkspace] Creating temp file", extra={"dev_only": True})
        try:
            fd, path = self._create_secured_file(
                STAGED_FILE_PREFIX, STAGED_FILE_SUFFIX, self.policy.secure_file
            )
        except OSError as e:
            raise WorkspaceInitError("Cannot create staged file") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(memoryview(payload)[body_offset:])
        except OSError as e:
            self.unstage_file(path)
            raise WorkspaceInitError(f"Cannot write staged file {path}") from e

        logger.debug("[SecureWorkspace] Temp file %s created", path, extra={"dev_only": True})
        return path

    def unstage_file(self, path: Path) -> None:
        """Delete a staged file. A missing file is not an error."""
        logger.debug("[SecureWorkspace] Deleting temp file %s", path, extra={"dev_only": True})
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning("[SecureWorkspace] Could not delete %s: %s", path, e)

    @contextlib.contextmanager
    def staged(self, payload: bytes, body_offset: int) -> Iterator[Path]:
        """Stage a payload for the duration of the block, then remove it."""
        path = self.stage_file(payload, body_offset)
        try:
            yield path
        finally:
            self.unstage_file(path)

    def extract_resource(self, source: Path, prefix: str, suffix: str) -> Path:
        """Copy a bundled executable into an owner-only file in the workspace.

        The copy is readable and executable by the owner only.

        Raises:
            OSError: If the source cannot be read or the copy cannot be written.

        """
        fd, target = self._create_secured_file(prefix, suffix, self.policy.secure_executable)
        try:
            with os.fdopen(fd, "wb") as dst, open(source, "rb") as src:
                shutil.copyfileobj(src, dst, RESOURCE_COPY_CHUNK_SIZE)
        except OSError:
            self.unstage_file(target)
            raise
        return target

    def destroy(self) -> None:
        """Remove the workspace directory. Failures are logged, never raised."""
        if self._destroyed:
            return
        self._destroyed = True

        logger.info("[SecureWorkspace] Deleting %s", self.path)
        try:
            shutil.rmtree(self.path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception("[SecureWorkspace] Could not delete %s", self.path)
