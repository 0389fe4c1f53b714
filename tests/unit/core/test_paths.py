"""Unit tests for XDG path management.

Tests for the paths module that provides XDG-compliant directory paths.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from bundlectl.core.paths import (
    APP_NAME,
    ensure_bundles_dir,
    ensure_config_dir,
    get_bundles_dir,
    get_config_dir,
    get_settings_path,
    get_state_dir,
    get_theme_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        with patch.dict(os.environ, {}):
            os.environ.pop("XDG_CONFIG_HOME", None)

            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME

    def test_empty_env_var_uses_default(self) -> None:
        """An empty XDG_CONFIG_HOME falls back to the home directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": ""}):
            result = get_config_dir()

        assert result == Path.home() / ".config" / APP_NAME


class TestGetStateDir:
    """Tests for get_state_dir function."""

    def test_default_state_dir(self) -> None:
        """get_state_dir returns default path when XDG_STATE_HOME not set."""
        with patch.dict(os.environ, {}):
            os.environ.pop("XDG_STATE_HOME", None)

            result = get_state_dir()

        assert result == Path.home() / ".local" / "state" / APP_NAME

    def test_respects_xdg_state_home(self, tmp_path: Path) -> None:
        """get_state_dir respects XDG_STATE_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_STATE_HOME": str(tmp_path)}):
            result = get_state_dir()

        assert result == tmp_path / APP_NAME


class TestFilePaths:
    """Tests for file path helpers."""

    def test_settings_path(self, isolated_xdg: Path) -> None:
        """Settings live in config.toml under the config dir."""
        assert get_settings_path() == isolated_xdg / "config" / APP_NAME / "config.toml"

    def test_theme_path(self, isolated_xdg: Path) -> None:
        """The theme file lives next to the settings."""
        assert get_theme_path() == isolated_xdg / "config" / APP_NAME / "theme.toml"

    def test_bundles_dir(self, isolated_xdg: Path) -> None:
        """Bundles are written under the state dir."""
        assert get_bundles_dir() == isolated_xdg / "state" / APP_NAME / "bundles"


class TestEnsureDirs:
    """Tests for directory creation helpers."""

    def test_ensure_config_dir_creates(self, isolated_xdg: Path) -> None:
        """ensure_config_dir creates the directory and returns it."""
        result = ensure_config_dir()

        assert result.is_dir()
        assert result == isolated_xdg / "config" / APP_NAME

    def test_ensure_bundles_dir_idempotent(self) -> None:
        """Calling ensure_bundles_dir twice is harmless."""
        first = ensure_bundles_dir()
        second = ensure_bundles_dir()

        assert first == second
        assert second.is_dir()

    def test_permission_error_wrapped(self) -> None:
        """Permission errors become RuntimeError with a readable message."""
        with (
            patch.object(Path, "mkdir", side_effect=PermissionError("denied")),
            pytest.raises(RuntimeError, match="Permission denied"),
        ):
            ensure_config_dir()

    def test_os_error_wrapped(self) -> None:
        """Other OS errors become RuntimeError as well."""
        with (
            patch.object(Path, "mkdir", side_effect=OSError("disk full")),
            pytest.raises(RuntimeError, match="disk full"),
        ):
            ensure_bundles_dir()
