"""Configuration model and I/O for safedelete.

This module provides the configuration model, TOML loading and saving,
and the merge of command-line overrides over file values.

Precedence: command-line options > configuration file > defaults.

Configuration is stored in ~/.config/safedelete/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from safedelete.core.paths import get_config_path, get_log_dir

logger = logging.getLogger(__name__)

# Minimum severity written to the audit trail ("none" disables it)
LogLevelName = Literal["none", "debug", "info", "warn", "error"]

DEFAULT_PROTECTED_PATTERNS: tuple[str, ...] = (".git", "node_modules", ".env*")
DEFAULT_MAX_LOG_FILE_SIZE = 10 * 1024 * 1024


class SafeDeleteConfig(BaseModel):
    """Configuration for guarded deletion.

    Attributes:
        allowed_directories: Directory trees under which deletion is permitted.
        protected_patterns: Glob patterns that are never deleted.
        log_level: Minimum audit level ("none" disables the audit trail).
        log_directory: Audit log directory (None = XDG state directory).
        max_batch_size: Largest accepted batch.
        max_log_file_size: Rotation threshold in bytes.
        max_log_files: Number of rotated log files to retain.
        retry_attempts: Extra attempts for transient filesystem errors.
        retry_delay_ms: Delay between retry attempts in milliseconds.
    """

    model_config = ConfigDict(extra="forbid")

    allowed_directories: Annotated[
        list[str],
        Field(description="Directories where deletion is allowed"),
    ] = []
    protected_patterns: Annotated[
        list[str],
        Field(description="Glob patterns for protected files"),
    ] = list(DEFAULT_PROTECTED_PATTERNS)
    log_level: Annotated[
        LogLevelName,
        Field(description="Audit log level"),
    ] = "info"
    log_directory: Annotated[
        str | None,
        Field(description="Audit log directory (None = default state dir)"),
    ] = None
    max_batch_size: Annotated[
        int,
        Field(ge=1, le=1000, description="Maximum batch deletion size (1-1000)"),
    ] = 100
    max_log_file_size: Annotated[
        int,
        Field(ge=1024, description="Maximum log file size in bytes (>= 1 KiB)"),
    ] = DEFAULT_MAX_LOG_FILE_SIZE
    max_log_files: Annotated[
        int,
        Field(ge=1, le=100, description="Maximum number of log files to keep (1-100)"),
    ] = 10
    retry_attempts: Annotated[
        int,
        Field(ge=0, le=10, description="Retries for transient filesystem errors (0-10)"),
    ] = 0
    retry_delay_ms: Annotated[
        int,
        Field(ge=0, le=10_000, description="Delay between retries in milliseconds"),
    ] = 100

    @field_validator("allowed_directories")
    @classmethod
    def normalize_directories(cls, value: list[str]) -> list[str]:
        """Make allowed directories absolute and strip trailing separators."""
        normalized: list[str] = []
        for directory in value:
            path = os.path.abspath(os.path.expanduser(directory))
            if path not in normalized:
                normalized.append(path)
        return normalized

    @property
    def effective_log_directory(self) -> Path:
        """Get the audit log directory, falling back to the XDG state dir."""
        if self.log_directory:
            return Path(self.log_directory).expanduser()
        return get_log_dir()


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when a config file cannot be parsed."""


def load_config(path: Path | None = None) -> SafeDeleteConfig:
    """Load configuration from a TOML file.

    A missing default config file yields the default configuration; a
    missing file that was asked for explicitly is an error.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated SafeDeleteConfig object.

    Raises:
        ConfigNotFoundError: If an explicit config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if path is not None:
            raise ConfigNotFoundError(f"Config file not found: {config_path}")
        logger.debug("No config file at %s, using defaults", config_path)
        return SafeDeleteConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return SafeDeleteConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def merge_cli_overrides(
    config: SafeDeleteConfig,
    *,
    allowed_directories: list[str] | None = None,
    protected_patterns: list[str] | None = None,
    log_level: LogLevelName | None = None,
    log_directory: str | None = None,
    max_batch_size: int | None = None,
) -> SafeDeleteConfig:
    """Apply command-line values over a loaded configuration.

    Empty lists and None leave the file value in place.

    Args:
        config: Configuration loaded from file (or defaults).
        allowed_directories: Allowed directories given on the command line.
        protected_patterns: Protected patterns given on the command line.
        log_level: Log level given on the command line.
        log_directory: Log directory given on the command line.
        max_batch_size: Batch size limit given on the command line.

    Returns:
        New, re-validated SafeDeleteConfig.

    Raises:
        ConfigError: If the merged values don't match the schema.
    """
    data = config.model_dump()

    if allowed_directories:
        data["allowed_directories"] = allowed_directories
    if protected_patterns:
        data["protected_patterns"] = protected_patterns
    if log_level is not None:
        data["log_level"] = log_level
    if log_directory is not None:
        data["log_directory"] = log_directory
    if max_batch_size is not None:
        data["max_batch_size"] = max_batch_size

    try:
        return SafeDeleteConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def validate_for_startup(config: SafeDeleteConfig) -> None:
    """Check that a configuration can be used to serve deletions.

    Args:
        config: Configuration to check.

    Raises:
        ConfigError: If no allowed directory is configured or one is missing.
    """
    if not config.allowed_directories:
        raise ConfigError("At least one allowed directory must be specified")

    for directory in config.allowed_directories:
        if not Path(directory).is_dir():
            raise ConfigError(f"Allowed directory does not exist: {directory}")


def save_config(config: SafeDeleteConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The SafeDeleteConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # TOML has no null, so unset optional values are left out
    data = config.model_dump(exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
