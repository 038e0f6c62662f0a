"""Logs command implementation.

Provides the `safedelete logs` command for viewing recent audit entries
from the persisted log files.
"""

import json
from typing import Annotated

import typer

from safedelete.audit.logger import AuditLogger
from safedelete.audit.models import LogLevel
from safedelete.cli.context import get_config
from safedelete.utils.formatting import console, create_audit_table, print_info

app = typer.Typer(
    name="logs",
    help="View the audit trail.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def logs(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            min=1,
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show recent audit log entries, newest first.

    Examples:
        safedelete logs              # Show last 20 entries
        safedelete logs -n 50        # Show last 50 entries
        safedelete logs --json       # JSON output for scripting
    """
    config = get_config(ctx)
    # Read-only: level "none" keeps the logger from creating anything
    reader = AuditLogger(config.effective_log_directory, level=LogLevel.NONE)
    entries = reader.read_entries(limit=limit)

    if not entries:
        print_info("No audit entries found.")
        return

    if json_output:
        console.print_json(json.dumps([entry.to_dict() for entry in entries]))
    else:
        console.print(create_audit_table(entries))
