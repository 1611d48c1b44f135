"""
Typed access to one key group of the settings store.
"""

from pathlib import Path
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings


class SettingsSection:
    """Reads and writes `<group>/<name>` keys with type coercion.

    INI-backed stores hand every value back as a string, native stores
    keep Python types, so reads normalize both.
    """

    def __init__(self, settings: "QSettings", group: str):
        self.settings = settings
        self.group = group

    def key(self, name: str) -> str:
        return f"{self.group}/{name}"

    def get_str(self, name: str, default: str = "") -> str:
        value = self.settings.value(self.key(name), default)
        return str(value) if value is not None else default

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self.settings.value(self.key(name), default)
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value) if value is not None else default

    def get_path(self, name: str) -> Optional[Path]:
        """Stored path, or None when unset."""
        value = self.get_str(name)
        return Path(value) if value else None

    def set(self, name: str, value: Any) -> None:
        """Store a value and flush it to disk."""
        if isinstance(value, Path):
            value = str(value)
        elif value is None:
            value = ""
        self.settings.setValue(self.key(name), value)
        self.settings.sync()
