"""Shared configuration and runtime helpers for CLI commands.

Global options are stored on the Typer context by the main callback;
commands turn them into an effective configuration and a runtime here.
"""

from pathlib import Path
from typing import Any

import typer

from safedelete.core.config import (
    ConfigError,
    SafeDeleteConfig,
    load_config,
    merge_cli_overrides,
    validate_for_startup,
)
from safedelete.core.runtime import SafeDeleteRuntime, build_runtime
from safedelete.utils.formatting import print_error


def _options(ctx: typer.Context) -> dict[str, Any]:
    return ctx.obj if isinstance(ctx.obj, dict) else {}


def get_config(ctx: typer.Context, *, require_allowed: bool = False) -> SafeDeleteConfig:
    """Build the effective configuration from file and global options.

    Exits with code 1 and an error message if the configuration is invalid.

    Args:
        ctx: Typer context carrying the global options.
        require_allowed: Also require existing allowed directories.

    Returns:
        Effective SafeDeleteConfig.
    """
    options = _options(ctx)
    config_path: Path | None = options.get("config_path")

    try:
        config = load_config(config_path)
        config = merge_cli_overrides(
            config,
            allowed_directories=options.get("allowed_directories"),
            protected_patterns=options.get("protected_patterns"),
            log_level=options.get("log_level"),
        )
        if require_allowed:
            validate_for_startup(config)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    return config


def open_runtime(ctx: typer.Context, *, require_allowed: bool = True) -> SafeDeleteRuntime:
    """Build a runtime for a single CLI invocation.

    Change watching is disabled, since each invocation is short-lived.
    """
    config = get_config(ctx, require_allowed=require_allowed)
    return build_runtime(config, watch=False)
