"""Shared types and helpers for CLI commands.

Provides the output format enum and the translation of command-line
filter options into a CollectionSpec on top of the stored settings.
"""

from enum import Enum

import typer
from pydantic import ValidationError

from bundlectl.collector.models import CollectionSpec
from bundlectl.core.settings import SettingsError, load_settings_or_default
from bundlectl.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def build_spec(
    *,
    include: list[str] | None,
    exclude: list[str] | None,
    case_sensitive: bool | None,
    max_depth: int | None,
    max_file_size: int | None,
    suffix: str | None,
) -> CollectionSpec:
    """Build a CollectionSpec from CLI options layered over stored settings.

    Options that were not given fall back to the settings file (or the
    built-in defaults when no settings file exists). A pattern option given
    only as an empty string clears the stored patterns.

    Raises:
        typer.Exit: With code 1 if the settings file is broken, or code 2
            if the combined options are invalid (e.g. a malformed glob).
    """
    try:
        settings = load_settings_or_default()
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    try:
        return settings.to_spec(
            include_patterns=include or None,
            exclude_patterns=exclude or None,
            case_sensitive=case_sensitive,
            max_depth=max_depth,
            max_file_size=max_file_size,
            allowed_suffix=suffix,
        )
    except ValidationError as e:
        messages = "; ".join(str(err["msg"]) for err in e.errors())
        print_error(f"Invalid collection options: {messages}")
        raise typer.Exit(code=2) from e
