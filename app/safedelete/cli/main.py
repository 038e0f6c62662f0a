"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer

from safedelete import __version__
from safedelete.audit.models import LogLevel
from safedelete.cli.commands import delete, init, listing, logs

# Create main Typer app
app = typer.Typer(
    name="safedelete",
    help="Guarded file deletion with protected patterns and an audit trail.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"safedelete version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: ~/.config/safedelete/config.toml).",
        ),
    ] = None,
    allow: Annotated[
        list[str] | None,
        typer.Option(
            "--allow",
            "-a",
            help="Allowed directory (repeatable, replaces the config file list).",
        ),
    ] = None,
    protect: Annotated[
        list[str] | None,
        typer.Option(
            "--protect",
            "-p",
            help="Protected glob pattern (repeatable, replaces the config file list).",
        ),
    ] = None,
    log_level: Annotated[
        LogLevel | None,
        typer.Option(
            "--log-level",
            help="Audit log level.",
            case_sensitive=False,
        ),
    ] = None,
) -> None:
    """safedelete - Guarded file deletion.

    Files are only deleted inside allowed directories and never when they
    match a protected pattern. Every attempt is written to an audit log.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["allowed_directories"] = allow or []
    ctx.obj["protected_patterns"] = protect or []
    ctx.obj["log_level"] = log_level.value if log_level is not None else None


# Register commands
app.command(name="delete")(delete.delete)
app.command(name="check")(delete.check)
app.command(name="protected")(listing.protected)
app.command(name="allowed")(listing.allowed)
app.add_typer(logs.app, name="logs")
app.add_typer(init.app, name="init")


if __name__ == "__main__":
    app()
