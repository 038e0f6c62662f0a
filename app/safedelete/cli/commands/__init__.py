"""CLI commands for safedelete.

This package contains all subcommand implementations.
"""

from safedelete.cli.commands import delete, init, listing, logs

__all__ = ["delete", "init", "listing", "logs"]
