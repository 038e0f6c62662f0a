"""CLI package for safedelete.

This package contains the Typer application and all subcommands.
"""

from safedelete.cli.main import app

__all__ = ["app"]
