"""
Validation — Error types for configuration and manifest problems.

## Usage

    from treesync.validation import ValidationError, ConfigurationError

    try:
        manifest = load_manifest(path)
    except ValidationError as e:
        print(f"Validation failed: {e}")
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional


class ValidationError(Exception):
    """Raised when a manifest or other input file fails validation."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""
    pass


def validate_path_exists(path: Path, description: str = "Path") -> None:
    """Validate that a path exists."""
    if not path.exists():
        raise ValidationError(f"{description} does not exist: {path}")


def validate_file_readable(path: Path, description: str = "File") -> None:
    """Validate that a file exists and is readable."""
    validate_path_exists(path, description)

    if not path.is_file():
        raise ValidationError(f"{description} is not a file: {path}")

    try:
        path.read_text()
    except PermissionError:
        raise ValidationError(f"{description} is not readable: {path}")
    except UnicodeDecodeError as e:
        raise ValidationError(f"{description} cannot be read: {e}")


def parse_positive_int(value: Optional[str], name: str) -> Optional[int]:
    """
    Parse an optional positive integer setting.

    Empty or missing values mean "not set" and return None.

    Raises:
        ConfigurationError: If the value is not a positive integer
    """
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None
    try:
        number = int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a positive integer, got: {value!r}")
    if number < 1:
        raise ConfigurationError(f"{name} must be a positive integer, got: {number}")
    return number


def parse_flag(value: Optional[str]) -> bool:
    """Interpret an environment flag (1/true/yes, case-insensitive)."""
    return (value or "").strip().lower() in ("true", "1", "yes")
