"""Module: json_config_manager.py

Author: Michael Economou
Date: 2026-02-10

json_config_manager.py
JSON-based configuration manager for exifgate settings.
Handles JSON serialization and deserialization of typed configuration
categories (ignore rules, exiftool worker), with a backup on save and
thread-safe operations.
"""

import json
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, TypeVar

from exifgate.config import (
    APP_VERSION,
    DEFAULT_LINES_TO_IGNORE,
    DEFAULT_TYPES_TO_IGNORE,
    EXIFTOOL_COMMAND,
    EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT,
    EXIFTOOL_SHUTDOWN_GRACE_PERIOD,
    EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT,
)
from exifgate.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

T = TypeVar("T")


class ConfigCategory(Generic[T]):
    """Base class for configuration categories with type safety and defaults."""

    def __init__(self, name: str, defaults: dict[str, Any]):
        """Initialize configuration category with name and default values."""
        self.name = name
        self.defaults = defaults
        self._data = defaults.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with fallback to default."""
        return self._data.get(key, default if default is not None else self.defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._data[key] = value

    def update(self, data: dict[str, Any]) -> None:
        """Update multiple configuration values at once."""
        self._data.update(data)

    def reset(self) -> None:
        """Reset all values to defaults."""
        self._data = self.defaults.copy()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self._data.copy()

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load from dictionary, applying defaults for missing keys."""
        self._data = self.defaults.copy()
        self._data.update(data)


class IgnoreRulesConfig(ConfigCategory[Any]):
    """MIME types to skip and exiftool tags to drop from results."""

    def __init__(self) -> None:
        defaults = {
            "types_to_ignore": list(DEFAULT_TYPES_TO_IGNORE),
            "lines_to_ignore": list(DEFAULT_LINES_TO_IGNORE),
        }
        super().__init__("ignore_rules", defaults)

    def add_type(self, mime_type: str) -> None:
        types = list(self.get("types_to_ignore", []))
        if mime_type not in types:
            types.append(mime_type)
        self.set("types_to_ignore", types)

    def add_line(self, tag_name: str) -> None:
        lines = list(self.get("lines_to_ignore", []))
        if tag_name not in lines:
            lines.append(tag_name)
        self.set("lines_to_ignore", lines)


class ExifToolConfig(ConfigCategory[Any]):
    """Worker command and shutdown timings."""

    def __init__(self) -> None:
        defaults = {
            "command": EXIFTOOL_COMMAND,
            "grace_period": EXIFTOOL_SHUTDOWN_GRACE_PERIOD,
            "wait_timeout": EXIFTOOL_SHUTDOWN_WAIT_TIMEOUT,
            "kill_on_timeout": EXIFTOOL_KILL_ON_SHUTDOWN_TIMEOUT,
        }
        super().__init__("exiftool", defaults)


class JSONConfigManager:
    """JSON-based configuration manager with backup on save."""

    def __init__(self, app_name: str = "exifgate", config_file: str | Path | None = None):
        """Initialize configuration manager with app name and config file path."""
        self.app_name = app_name
        self.config_file = Path(config_file or self._get_default_config_file())
        self.backup_file = self.config_file.with_name(self.config_file.name + ".bak")

        self._lock = threading.RLock()
        self._categories: dict[str, ConfigCategory[Any]] = {}

        logger.debug(
            "[JSONConfigManager] Initialized for '%s' with file: %s",
            app_name,
            self.config_file,
            extra={"dev_only": True},
        )

    def _get_default_config_file(self) -> Path:
        """Get default configuration file using centralized AppPaths."""
        from exifgate.utils.paths import AppPaths

        return AppPaths.get_config_path()

    def register_category(self, category: ConfigCategory[Any]) -> None:
        """Register a configuration category."""
        with self._lock:
            self._categories[category.name] = category

    def get_category(self, category_name: str) -> ConfigCategory[Any] | None:
        """Get configuration category by name."""
        return self._categories.get(category_name)

    def list_categories(self) -> list[str]:
        """Get list of registered category names."""
        return list(self._categories.keys())

    def load(self) -> bool:
        """Load configuration from JSON file. A missing file means defaults."""
        with self._lock:
            if not self.config_file.exists():
                logger.info(
                    "[JSONConfigManager] No config file found, using defaults",
                    extra={"dev_only": True},
                )
                return True

            try:
                with open(self.config_file, encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error("[JSONConfigManager] Failed to load configuration: %s", e)
                return False

            if not isinstance(data, dict):
                logger.error("[JSONConfigManager] Configuration root is not an object")
                return False

            for category_name, category in self._categories.items():
                if isinstance(data.get(category_name), dict):
                    category.from_dict(data[category_name])

            logger.info("[JSONConfigManager] Configuration loaded from %s", self.config_file)
            return True

    def save(self, create_backup: bool = True) -> bool:
        """Save configuration to JSON file."""
        with self._lock:
            try:
                self.config_file.parent.mkdir(parents=True, exist_ok=True)
                if create_backup and self.config_file.exists():
                    shutil.copy2(self.config_file, self.backup_file)

                data: dict[str, Any] = {
                    name: category.to_dict() for name, category in self._categories.items()
                }
                data["_metadata"] = {
                    "last_saved": datetime.now().isoformat(),
                    "version": f"v{APP_VERSION}",
                    "app_name": self.app_name,
                }

                with open(self.config_file, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)

                logger.debug("[JSONConfigManager] Configuration saved successfully")
                return True

            except (OSError, TypeError) as e:
                logger.error("[JSONConfigManager] Failed to save configuration: %s", e)
                return False

    def gateway_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for MetadataGateway built from the loaded categories."""
        kwargs: dict[str, Any] = {}

        ignore = self.get_category("ignore_rules")
        if ignore:
            kwargs["types_to_ignore"] = list(ignore.get("types_to_ignore", []))
            kwargs["lines_to_ignore"] = list(ignore.get("lines_to_ignore", []))

        exiftool = self.get_category("exiftool")
        if exiftool:
            kwargs["command"] = str(exiftool.get("command"))
            kwargs["grace_period"] = float(exiftool.get("grace_period"))
            kwargs["wait_timeout"] = float(exiftool.get("wait_timeout"))
            kwargs["kill_on_timeout"] = bool(exiftool.get("kill_on_timeout"))

        return kwargs


def create_config_manager(
    app_name: str = "exifgate", config_file: str | Path | None = None
) -> JSONConfigManager:
    """Create a JSONConfigManager with the default exifgate categories."""
    manager = JSONConfigManager(app_name=app_name, config_file=config_file)
    manager.register_category(IgnoreRulesConfig())
    manager.register_category(ExifToolConfig())
    return manager
