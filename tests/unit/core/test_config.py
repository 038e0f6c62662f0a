"""Unit tests for configuration loading, merging and saving.

Tests for SafeDeleteConfig and the config I/O functions.
"""

import os
import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError
from safedelete.core.config import (
    DEFAULT_PROTECTED_PATTERNS,
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    SafeDeleteConfig,
    load_config,
    merge_cli_overrides,
    save_config,
    validate_for_startup,
)


class TestSafeDeleteConfig:
    """Tests for SafeDeleteConfig model."""

    def test_defaults(self) -> None:
        """Defaults protect VCS, dependency and env files."""
        config = SafeDeleteConfig()

        assert config.allowed_directories == []
        assert config.protected_patterns == list(DEFAULT_PROTECTED_PATTERNS)
        assert config.log_level == "info"
        assert config.max_batch_size == 100
        assert config.max_log_file_size == 10 * 1024 * 1024
        assert config.max_log_files == 10
        assert config.retry_attempts == 0

    def test_directories_normalized(self, tmp_path: Path) -> None:
        """Allowed directories become absolute, lose trailing slashes and are deduplicated."""
        config = SafeDeleteConfig(
            allowed_directories=[f"{tmp_path}/", str(tmp_path), f"{tmp_path}/sub/../sub"]
        )

        assert config.allowed_directories == [str(tmp_path), str(tmp_path / "sub")]

    def test_home_directory_expanded(self) -> None:
        """A leading ~ is expanded."""
        config = SafeDeleteConfig(allowed_directories=["~/work"])

        assert config.allowed_directories == [os.path.expanduser("~/work")]

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_batch_size", 0),
            ("max_batch_size", 1001),
            ("max_log_file_size", 1023),
            ("max_log_files", 0),
            ("max_log_files", 101),
            ("retry_attempts", 11),
            ("log_level", "verbose"),
        ],
    )
    def test_out_of_range_rejected(self, field: str, value: object) -> None:
        """Out-of-range values fail validation."""
        with pytest.raises(ValidationError):
            SafeDeleteConfig.model_validate({field: value})

    def test_unknown_keys_rejected(self) -> None:
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError):
            SafeDeleteConfig.model_validate({"allowed_dirs": ["/tmp"]})

    def test_effective_log_directory(self, tmp_path: Path) -> None:
        """An explicit log directory wins over the XDG state dir."""
        explicit = SafeDeleteConfig(log_directory=str(tmp_path / "audit"))
        default = SafeDeleteConfig()

        assert explicit.effective_log_directory == tmp_path / "audit"
        assert default.effective_log_directory.parts[-2:] == ("safedelete", "logs")


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_default_file_gives_defaults(self) -> None:
        """No file at the default location yields the defaults."""
        assert load_config() == SafeDeleteConfig()

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        """A missing explicit file is an error."""
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_load_values(self, tmp_path: Path) -> None:
        """Values from the file are loaded."""
        path = tmp_path / "config.toml"
        path.write_text(
            f'allowed_directories = ["{tmp_path}"]\n'
            'protected_patterns = ["*.key"]\n'
            'log_level = "warn"\n'
            "max_batch_size = 7\n"
        )

        config = load_config(path)

        assert config.allowed_directories == [str(tmp_path)]
        assert config.protected_patterns == ["*.key"]
        assert config.log_level == "warn"
        assert config.max_batch_size == 7

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("allowed_directories = [\n")

        with pytest.raises(ConfigParseError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations raise ConfigError."""
        path = tmp_path / "config.toml"
        path.write_text("max_batch_size = 0\n")

        with pytest.raises(ConfigError, match="Invalid config content"):
            load_config(path)


class TestMergeCliOverrides:
    """Tests for merge_cli_overrides function."""

    def test_cli_values_win(self, tmp_path: Path) -> None:
        """Command-line values replace file values."""
        config = SafeDeleteConfig(allowed_directories=["/srv/a"], protected_patterns=["*.db"])

        merged = merge_cli_overrides(
            config,
            allowed_directories=[str(tmp_path)],
            protected_patterns=["*.key"],
            log_level="debug",
            max_batch_size=3,
        )

        assert merged.allowed_directories == [str(tmp_path)]
        assert merged.protected_patterns == ["*.key"]
        assert merged.log_level == "debug"
        assert merged.max_batch_size == 3

    def test_empty_values_keep_file(self) -> None:
        """Empty lists and None keep the file values."""
        config = SafeDeleteConfig(allowed_directories=["/srv/a"], log_level="error")

        merged = merge_cli_overrides(config, allowed_directories=[], log_level=None)

        assert merged.allowed_directories == ["/srv/a"]
        assert merged.log_level == "error"

    def test_invalid_override_raises(self) -> None:
        """Invalid command-line values raise ConfigError."""
        with pytest.raises(ConfigError, match="Invalid configuration"):
            merge_cli_overrides(SafeDeleteConfig(), max_batch_size=5000)


class TestValidateForStartup:
    """Tests for validate_for_startup function."""

    def test_requires_allowed_directory(self) -> None:
        """At least one allowed directory is required."""
        with pytest.raises(ConfigError, match="At least one allowed directory"):
            validate_for_startup(SafeDeleteConfig())

    def test_requires_existing_directory(self, tmp_path: Path) -> None:
        """Every allowed directory must exist."""
        config = SafeDeleteConfig(allowed_directories=[str(tmp_path / "missing")])

        with pytest.raises(ConfigError, match="does not exist"):
            validate_for_startup(config)

    def test_valid(self, tmp_path: Path) -> None:
        """Existing directories pass."""
        validate_for_startup(SafeDeleteConfig(allowed_directories=[str(tmp_path)]))


class TestSaveConfig:
    """Tests for save_config function."""

    def test_save_and_reload(self, tmp_path: Path) -> None:
        """A saved config loads back to the same values."""
        path = tmp_path / "conf" / "config.toml"
        config = SafeDeleteConfig(
            allowed_directories=[str(tmp_path)],
            protected_patterns=["*.key", ".git"],
            log_level="warn",
        )

        saved = save_config(config, path)

        assert saved == path
        assert load_config(path) == config

    def test_none_values_omitted(self, tmp_path: Path) -> None:
        """Unset optional values are not written."""
        path = tmp_path / "config.toml"

        save_config(SafeDeleteConfig(), path)

        with open(path, "rb") as f:
            data = tomllib.load(f)
        assert "log_directory" not in data
        assert data["protected_patterns"] == list(DEFAULT_PROTECTED_PATTERNS)

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """The atomic write leaves no temporary files behind."""
        save_config(SafeDeleteConfig(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_default_location(self) -> None:
        """Without a path the XDG config location is used."""
        saved = save_config(SafeDeleteConfig())

        assert saved.parts[-2:] == ("safedelete", "config.toml")
        assert saved.exists()
