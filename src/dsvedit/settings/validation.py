"""
Settings validation system for DSVEdit.
"""

import logging
from typing import List, TYPE_CHECKING

from .types import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


class SettingsValidator:
    """Validates configuration settings."""

    def __init__(self, settings: "AppSettings"):
        self.settings = settings

    def validate(self) -> ValidationResult:
        """Validate current configuration."""
        errors: List[str] = []
        warnings: List[str] = []
        paths = self.settings.paths

        for label, tool_path in (("Tiled", paths.tiled_path), ("Emulator", paths.emulator_path)):
            if tool_path is None:
                warnings.append(f"{label} path not set")
            elif not tool_path.is_file():
                warnings.append(f"{label} executable not found: {tool_path}")

        export_root = paths.export_root
        if export_root is not None and export_root.is_file():
            errors.append(f"Export root is a file: {export_root}")

        last_folder = paths.last_used_folder
        if last_folder is not None and not last_folder.is_dir():
            warnings.append(f"Last used folder no longer exists: {last_folder}")

        if errors:
            logger.warning(f"Settings validation failed: {errors}")

        return ValidationResult(
            is_valid=len(errors) == 0, errors=errors, warnings=warnings
        )
