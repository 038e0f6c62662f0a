"""XDG-compliant path management for safedelete.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage.

XDG defaults:
- Config: ~/.config/safedelete/
- State: ~/.local/state/safedelete/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "safedelete"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/safedelete/ (or XDG_CONFIG_HOME/safedelete/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the audit log files, which must persist between
    runs but are not configuration.

    Returns:
        Path to ~/.local/state/safedelete/ (or XDG_STATE_HOME/safedelete/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the default configuration file path.

    Returns:
        Path to ~/.config/safedelete/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_log_dir() -> Path:
    """Get the default audit log directory.

    Returns:
        Path to ~/.local/state/safedelete/logs.
    """
    return get_state_dir() / "logs"
