"""
Settings package for DSVEdit.

Type-safe configuration over Qt's QSettings.

Usage:
    from dsvedit.settings import AppSettings, ValidationResult

    settings = AppSettings()
    result = settings.validate()
"""

from .core import AppSettings
from .types import ConfigVersion, ConfigError, ValidationResult
from .paths import PathSettings
from .logging import LoggingSettings
from .section import SettingsSection

__all__ = [
    "AppSettings",
    "ConfigVersion",
    "ConfigError",
    "ValidationResult",
    "PathSettings",
    "LoggingSettings",
    "SettingsSection",
]
