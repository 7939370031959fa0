"""Module: paths.py.

Author: Michael Economou
Date: 2026-02-10

Centralized path management for exifgate.

This module provides a unified interface for accessing application paths:
- User data directory (config, logs)
- Bundled tools directory (embedded exiftool for Windows)

Platform-specific behavior:
- Windows: %LOCALAPPDATA%/exifgate/
- Linux: ~/.local/share/exifgate/
- macOS: ~/Library/Application Support/exifgate/

Usage:
    from exifgate.utils.paths import AppPaths

    config_path = AppPaths.get_config_path()
    logs_dir = AppPaths.get_logs_dir()
"""

import os
import platform
import sys
from pathlib import Path

from exifgate.config import APP_NAME
from exifgate.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class AppPaths:
    """Centralized path management for the application.

    Directory Structure:
        <user_data_dir>/
        ├── config.json          # Ignore rules and worker settings
        └── logs/                # Log files
    """

    _user_data_dir: Path | None = None
    _initialized: bool = False

    @classmethod
    def _get_platform_data_dir(cls) -> Path:
        """Get platform-specific user data directory."""
        system = platform.system()

        if system == "Windows":
            base = os.environ.get("LOCALAPPDATA")
            if not base:
                base = Path(os.environ.get("USERPROFILE", "")) / "AppData" / "Local"
            return Path(base) / APP_NAME

        elif system == "Darwin":
            return Path.home() / "Library" / "Application Support" / APP_NAME

        else:
            xdg_data = os.environ.get("XDG_DATA_HOME")
            if xdg_data:
                return Path(xdg_data) / APP_NAME
            return Path.home() / ".local" / "share" / APP_NAME

    @classmethod
    def get_user_data_dir(cls) -> Path:
        """Get the user data directory, creating it if necessary."""
        if cls._user_data_dir is None:
            cls._user_data_dir = cls._get_platform_data_dir()

        cls._user_data_dir.mkdir(parents=True, exist_ok=True)

        if not cls._initialized:
            logger.info("[AppPaths] User data directory: %s", cls._user_data_dir)
            cls._initialized = True

        return cls._user_data_dir

    @classmethod
    def get_config_path(cls) -> Path:
        """Get path to config.json file."""
        return cls.get_user_data_dir() / "config.json"

    @classmethod
    def get_logs_dir(cls) -> Path:
        """Get path to logs directory."""
        logs_dir = cls.get_user_data_dir() / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)
        return logs_dir

    @classmethod
    def get_bundled_tools_dir(cls) -> Path:
        """Get path to bundled tools directory.

        For PyInstaller frozen executables, returns <_MEIPASS>/bin.
        Otherwise returns the bin/ directory shipped inside the package.
        """
        if getattr(sys, "frozen", False):
            base_path = Path(getattr(sys, "_MEIPASS", "."))
        else:
            # exifgate/utils/paths.py -> exifgate/
            base_path = Path(__file__).parent.parent

        return base_path / "bin"

    @classmethod
    def reset(cls) -> None:
        """Reset cached paths (mainly for testing)."""
        cls._user_data_dir = None
        cls._initialized = False
