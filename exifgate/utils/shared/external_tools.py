"""Module: external_tools.py.

Author: Michael Economou
Date: 2026-02-10

External tool detection and path resolution for the exiftool worker.

- Platform detection (the embedded-binary fallback is Windows only)
- Location of the bundled exiftool copy shipped in bin/
- Version probing for diagnostics

Usage:
    from exifgate.utils.shared.external_tools import get_bundled_tool_path, ToolName

    bundled = get_bundled_tool_path(ToolName.EXIFTOOL)
"""

import platform
import subprocess
from enum import Enum
from pathlib import Path

from exifgate.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class ToolName(str, Enum):
    """Supported external tools."""

    EXIFTOOL = "exiftool"


def is_windows() -> bool:
    """Whether the current platform is Windows."""
    return platform.system() == "Windows"


def get_bundled_tool_path(tool_name: ToolName) -> Path:
    """Get path to the bundled Windows copy of an external tool.

    The file may not exist; callers treat a missing file as an extraction failure.

    Args:
        tool_name: Tool to locate

    Returns:
        Path to bin/windows/<tool>.exe

    """
    from exifgate.utils.paths import AppPaths

    tool_path = AppPaths.get_bundled_tools_dir() / "windows" / f"{tool_name.value}.exe"
    logger.debug(
        "[ExternalTools] Bundled %s expected at: %s",
        tool_name.value,
        tool_path,
        extra={"dev_only": True},
    )
    return tool_path


def get_tool_version(executable: str) -> str | None:
    """Get the version reported by an exiftool executable.

    Args:
        executable: Command name or path

    Returns:
        Version string or None if the tool is not available

    """
    try:
        result = subprocess.run(
            [executable, "-ver"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("[ExternalTools] Could not get %s version: %s", executable, e)
        return None

    if result.returncode != 0:
        return None

    version_line = result.stdout.strip().split("\n")[0]
    logger.debug("[ExternalTools] %s version: %s", executable, version_line)
    return version_line
