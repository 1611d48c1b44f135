"""
Folder and external tool locations.
"""

from pathlib import Path
from typing import Optional, TYPE_CHECKING

from .section import SettingsSection

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings


class PathSettings(SettingsSection):
    """Last opened folder, Tiled and emulator executables, export root."""

    def __init__(self, settings: "QSettings"):
        super().__init__(settings, "paths")

    @property
    def last_used_folder(self) -> Optional[Path]:
        """Get the last opened extracted-image folder."""
        return self.get_path("last_used_folder")

    @last_used_folder.setter
    def last_used_folder(self, value: Optional[Path]) -> None:
        self.set("last_used_folder", value)

    @property
    def tiled_path(self) -> Optional[Path]:
        return self.get_path("tiled")

    @tiled_path.setter
    def tiled_path(self, value: Optional[Path]) -> None:
        self.set("tiled", value)

    @property
    def emulator_path(self) -> Optional[Path]:
        return self.get_path("emulator")

    @emulator_path.setter
    def emulator_path(self, value: Optional[Path]) -> None:
        self.set("emulator", value)

    @property
    def export_root(self) -> Optional[Path]:
        """Get the explicitly configured export root, if any."""
        return self.get_path("export_root")

    @export_root.setter
    def export_root(self, value: Optional[Path]) -> None:
        self.set("export_root", value)

    def resolve_export_root(self, folder: Path) -> Path:
        """Export root for an opened folder.

        Falls back to the folder's parent when no export root is configured.
        """
        return self.export_root or Path(folder).resolve().parent
