"""
Manifest — The list of repositories that make up the device tree.

The built-in manifest assembles the Xiaomi redwood device/vendor tree.
A YAML file can replace it:

    version: 1
    repositories:
      - url: https://github.com/kartik-commits/hardware_xiaomi.git
        path: hardware/xiaomi
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..validation import ValidationError, validate_file_readable

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


class ManifestEntry(BaseModel):
    """A source repository and where it lives under the target root."""

    model_config = ConfigDict(frozen=True)

    url: str
    path: str

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url must not be empty")
        return value

    @field_validator("path")
    @classmethod
    def _path_stays_inside_root(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("path must not be empty")
        if value.startswith(("/", "\\")) or _DRIVE_PREFIX.match(value):
            raise ValueError(f"path must be relative: {value}")
        parts = PurePosixPath(value)
        if ".." in parts.parts:
            raise ValueError(f"path must not contain '..': {value}")
        if not parts.parts:
            raise ValueError(f"path must name a directory below the root: {value}")
        # Normalized so "./a/" and "a" compare equal
        return str(parts)


class Manifest(BaseModel):
    """The manifest schema."""

    version: int = 1
    repositories: List[ManifestEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_paths(self) -> "Manifest":
        seen = set()
        for entry in self.repositories:
            if entry.path in seen:
                raise ValueError(f"duplicate destination path: {entry.path}")
            seen.add(entry.path)
        return self


DEFAULT_REPOSITORIES = [
    ("https://github.com/kartik-commits/device_xiaomi_redwood.git", "device/xiaomi/redwood"),
    ("https://github.com/kartik-commits/device_xiaomi_sm7325-common.git", "device/xiaomi/sm7325-common"),
    ("https://github.com/kartik-commits/vendor_xiaomi_redwood.git", "vendor/xiaomi/redwood"),
    ("https://github.com/kartik-commits/vendor_xiaomi_sm7325-common.git", "vendor/xiaomi/sm7325-common"),
    ("https://gitlab.com/kartik-commits/redwood-firmware.git", "vendor/xiaomi/redwood-firmware"),
    ("https://github.com/kartik-commits/hardware_xiaomi.git", "hardware/xiaomi"),
]


def default_manifest() -> Manifest:
    """The built-in redwood manifest."""
    return Manifest(
        repositories=[ManifestEntry(url=url, path=path) for url, path in DEFAULT_REPOSITORIES]
    )


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its contents."""
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_manifest(path: Path) -> Manifest:
    """
    Load and validate a manifest YAML file.

    Raises:
        ValidationError: If the file is missing, unparsable, or fails the schema
    """
    path = Path(path)
    validate_file_readable(path, "Manifest file")

    try:
        data = load_yaml(path)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in manifest file {path}", details={"error": str(e)})

    if not isinstance(data, dict):
        raise ValidationError(f"Manifest file {path} must contain a mapping")

    try:
        manifest = Manifest.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(p) for p in first["loc"])
        raise ValidationError(
            f"{first['msg']} in {path}",
            field=location or None,
            details={"errors": e.errors()},
        )

    if not manifest.repositories:
        raise ValidationError(f"Manifest file {path} lists no repositories")

    return manifest
