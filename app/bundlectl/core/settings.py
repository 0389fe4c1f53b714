"""Collector settings and their TOML persistence.

Settings hold the default collection options used when the command
line does not override them. They are stored in
~/.config/bundlectl/config.toml:

    include_patterns = ""
    exclude_patterns = "workflow*/**, */log"
    case_sensitive = true
    max_depth = 10
    max_file_size = 2000000
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bundlectl.collector.models import DEFAULT_MAX_DEPTH, DEFAULT_MAX_FILE_SIZE, CollectionSpec
from bundlectl.collector.patterns import compile_patterns, split_patterns
from bundlectl.core.paths import get_settings_path

logger = logging.getLogger(__name__)


class CollectorSettings(BaseModel):
    """Default options for collection passes.

    Attributes:
        include_patterns: Comma/newline separated include globs.
        exclude_patterns: Comma/newline separated exclude globs.
        case_sensitive: Whether glob matching distinguishes letter case.
        max_depth: Directory levels walked below the collection root.
        max_file_size: Per-file byte cap.
    """

    model_config = ConfigDict(extra="forbid")

    include_patterns: Annotated[str, Field(description="Include globs")] = ""
    exclude_patterns: Annotated[str, Field(description="Exclude globs")] = ""
    case_sensitive: Annotated[bool, Field(description="Case-sensitive matching")] = True
    max_depth: Annotated[
        int,
        Field(ge=1, le=1000, description="Directory levels walked (1-1000)"),
    ] = DEFAULT_MAX_DEPTH
    max_file_size: Annotated[
        int,
        Field(gt=0, description="Per-file byte cap"),
    ] = DEFAULT_MAX_FILE_SIZE

    @field_validator("include_patterns", "exclude_patterns")
    @classmethod
    def validate_patterns(cls, v: str) -> str:
        """Reject malformed globs when settings are loaded."""
        compile_patterns(split_patterns(v))
        return v

    def to_spec(self, **overrides: Any) -> CollectionSpec:
        """Build a CollectionSpec from these settings.

        Overrides whose value is None are ignored, so command-line options
        that were not given fall back to the stored settings.

        Args:
            **overrides: CollectionSpec fields to replace.

        Returns:
            Validated CollectionSpec.

        Raises:
            pydantic.ValidationError: If an override is invalid.
        """
        data: dict[str, Any] = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return CollectionSpec.model_validate(data)


class SettingsError(Exception):
    """Base exception for settings errors."""


class SettingsNotFoundError(SettingsError):
    """Raised when the settings file does not exist."""


class SettingsParseError(SettingsError):
    """Raised when the settings file is not valid TOML."""


def load_settings(path: Path | None = None) -> CollectorSettings:
    """Load collector settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated CollectorSettings object.

    Raises:
        SettingsNotFoundError: If the file doesn't exist.
        SettingsParseError: If the TOML syntax is invalid.
        SettingsError: If the content doesn't match the schema.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        raise SettingsNotFoundError(f"Settings not found: {settings_path}")

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return CollectorSettings.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def load_settings_or_default(path: Path | None = None) -> CollectorSettings:
    """Load settings, falling back to defaults when no file exists.

    Raises:
        SettingsParseError: If the file exists but is not valid TOML.
        SettingsError: If the file exists but its content is invalid.
    """
    try:
        return load_settings(path)
    except SettingsNotFoundError:
        logger.debug("No settings file found, using defaults")
        return CollectorSettings()


def save_settings(settings: CollectorSettings, path: Path | None = None) -> Path:
    """Save collector settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: The settings to save.
        path: Destination path. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(settings.model_dump(), f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path
