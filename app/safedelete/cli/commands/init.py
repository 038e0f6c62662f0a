"""Init command implementation.

Creates a config.toml file from the defaults and the global options.
"""

from typing import Annotated

import typer

from safedelete.core.config import (
    ConfigError,
    SafeDeleteConfig,
    merge_cli_overrides,
    save_config,
)
from safedelete.core.paths import get_config_path
from safedelete.utils.formatting import print_error, print_info, print_success

app = typer.Typer(
    name="init",
    help="Create a configuration file.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing config file.",
        ),
    ] = False,
) -> None:
    """Write a config file with the default settings.

    Allowed directories, protected patterns and the log level given as
    global options are written into the file.

    Examples:
        safedelete -a ~/projects init
        safedelete -c ./safedelete.toml -a /tmp/work init --force
    """
    options = ctx.obj if isinstance(ctx.obj, dict) else {}
    target = options.get("config_path") or get_config_path()

    if target.exists() and not force:
        print_error(f"Config already exists: {target}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        config = merge_cli_overrides(
            SafeDeleteConfig(),
            allowed_directories=options.get("allowed_directories"),
            protected_patterns=options.get("protected_patterns"),
            log_level=options.get("log_level"),
        )
        saved = save_config(config, target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    print_success(f"Config written to {saved}")
