"""
Configuration type definitions and exceptions for DSVEdit.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class ConfigVersion(Enum):
    """Configuration version stored under app/version."""
    V1_0 = "1.0"
    CURRENT = V1_0


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be accessed."""
    pass


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]
