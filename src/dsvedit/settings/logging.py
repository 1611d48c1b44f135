"""
Console and file logging switches read by `setup_logging`.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .section import SettingsSection

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

# Relative to the working directory, rotated by the file handler
LOG_FILE_PATH = Path("logs") / "dsvedit.csv"
DEFAULT_CONSOLE_LEVEL = "INFO"


class LoggingSettings(SettingsSection):
    """Where log records go and how verbose the console is."""

    def __init__(self, settings: "QSettings"):
        super().__init__(settings, "logging")

    @property
    def console_logging(self) -> bool:
        return self.get_bool("console_enabled", True)

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        self.set("console_enabled", value)

    @property
    def console_log_level(self) -> str:
        """Level name for the console handler."""
        return self.get_str("console_level", DEFAULT_CONSOLE_LEVEL)

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        name = value.upper()
        # getLevelName maps unknown names to "Level <name>" strings
        if not isinstance(logging.getLevelName(name), int):
            logger.warning(f"Ignoring unknown log level {value!r}, keeping {self.console_log_level}")
            return
        self.set("console_level", name)

    @property
    def console_level_number(self) -> int:
        level = logging.getLevelName(self.console_log_level)
        return level if isinstance(level, int) else logging.INFO

    @property
    def console_use_colors(self) -> bool:
        return self.get_bool("console_use_colors", True)

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        self.set("console_use_colors", value)

    @property
    def file_logging(self) -> bool:
        """CSV file logging; off unless switched on."""
        return self.get_bool("file_enabled", False)

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        self.set("file_enabled", value)

    @property
    def log_file_path(self) -> Path:
        return LOG_FILE_PATH
