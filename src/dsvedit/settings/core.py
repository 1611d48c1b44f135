"""
Core settings management for DSVEdit.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from PySide6.QtCore import QSettings

from .types import ConfigError, ConfigVersion, ValidationResult
from .section import SettingsSection
from .validation import SettingsValidator
from .paths import PathSettings
from .logging import LoggingSettings

logger = logging.getLogger(__name__)


class AppSettings:
    """
    Configuration management using QSettings.

    Provides type-safe access to application settings with automatic
    cross-platform storage and validation.
    """

    def __init__(
        self,
        profile: str = "default",
        settings_file: Optional[Union[str, Path]] = None,
    ):
        """Initialize settings.

        Args:
            profile: Settings profile name (default: "default")
            settings_file: Explicit INI file to use instead of the native
                per-user store (portable installs, tests)

        Raises:
            ConfigError: If the settings store cannot be read
        """
        if settings_file is not None:
            self.settings = QSettings(str(settings_file), QSettings.Format.IniFormat)
        else:
            self.settings = QSettings("dsvedit", "dsvedit")
        self.profile = profile

        if self.settings.status() != QSettings.Status.NoError:
            raise ConfigError(f"Cannot read settings from {self.settings.fileName()}")

        # Profile group gives the hierarchy dsvedit/dsvedit/<profile>/...
        self.settings.beginGroup(profile)

        self._app = SettingsSection(self.settings, "app")
        self._validator = SettingsValidator(self)
        self._paths = PathSettings(self.settings)
        self._logging = LoggingSettings(self.settings)

        if not self._app.get_str("version"):
            self._app.set("version", ConfigVersion.CURRENT.value)
            self._app.set("first_run", True)
            logger.info("First run detected, initializing configuration")

        logger.debug(
            f"Settings initialized for profile '{profile}', stored at: {self.settings.fileName()}"
        )

    # === SUBSYSTEM ACCESS ===

    @property
    def paths(self) -> PathSettings:
        """Access path settings subsystem."""
        return self._paths

    @property
    def logging(self) -> LoggingSettings:
        """Access logging settings subsystem."""
        return self._logging

    # === VERSION AND FIRST RUN ===

    @property
    def is_first_run(self) -> bool:
        """Check if this is the first run of the application."""
        return self._app.get_bool("first_run", True)

    def set_first_run_complete(self) -> None:
        """Mark first run as complete."""
        self._app.set("first_run", False)

    @property
    def version(self) -> str:
        """Get configuration version."""
        return self._app.get_str("version", ConfigVersion.CURRENT.value)

    # === PATH SETTINGS (DELEGATED) ===

    @property
    def last_used_folder(self) -> Optional[Path]:
        return self._paths.last_used_folder

    @last_used_folder.setter
    def last_used_folder(self, value: Optional[Path]) -> None:
        self._paths.last_used_folder = value

    @property
    def tiled_path(self) -> Optional[Path]:
        return self._paths.tiled_path

    @tiled_path.setter
    def tiled_path(self, value: Optional[Path]) -> None:
        self._paths.tiled_path = value

    @property
    def emulator_path(self) -> Optional[Path]:
        return self._paths.emulator_path

    @emulator_path.setter
    def emulator_path(self, value: Optional[Path]) -> None:
        self._paths.emulator_path = value

    @property
    def export_root(self) -> Optional[Path]:
        return self._paths.export_root

    @export_root.setter
    def export_root(self, value: Optional[Path]) -> None:
        self._paths.export_root = value

    # === LOGGING SETTINGS (DELEGATED) ===

    @property
    def console_logging(self) -> bool:
        """Check if console logging is enabled."""
        return self._logging.console_logging

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        self._logging.console_logging = value

    @property
    def console_log_level(self) -> str:
        """Get console logging level."""
        return self._logging.console_log_level

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        self._logging.console_log_level = value

    @property
    def console_level_number(self) -> int:
        return self._logging.console_level_number

    @property
    def console_use_colors(self) -> bool:
        """Check if console should use colors."""
        return self._logging.console_use_colors

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        self._logging.console_use_colors = value

    @property
    def file_logging(self) -> bool:
        """Check if file logging is enabled."""
        return self._logging.file_logging

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        self._logging.file_logging = value

    @property
    def log_file_path(self) -> Path:
        """Get log file path (read-only)."""
        return self._logging.log_file_path

    # === VALIDATION ===

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        return self._validator.validate()

    # === UTILITY METHODS ===

    def get_settings_file_path(self) -> str:
        """Get the file path where settings are stored."""
        return self.settings.fileName()

    def sync(self) -> None:
        """Force synchronization of settings to storage."""
        self.settings.sync()
