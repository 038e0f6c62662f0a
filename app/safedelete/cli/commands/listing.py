"""Protected and allowed command implementations.

Provides `safedelete protected` to list protected patterns and
`safedelete allowed` to list the allowed directories that exist.
"""

import json
from typing import Annotated

import typer
from rich.markup import escape

from safedelete.cli.context import open_runtime
from safedelete.tools.handlers import handle_get_allowed, handle_list_protected
from safedelete.utils.formatting import console, print_info


def protected(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """List the protected patterns."""
    runtime = open_runtime(ctx, require_allowed=False)
    try:
        response = handle_list_protected(runtime.engine, runtime.audit)
    finally:
        runtime.close()

    if json_output:
        console.print_json(response.text)
        return

    patterns: list[str] = json.loads(response.text)["patterns"]
    if not patterns:
        print_info("No protected patterns configured.")
        return
    for pattern in patterns:
        console.print(f"[warning]●[/] {escape(pattern)}")


def allowed(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """List the allowed directories that currently exist."""
    runtime = open_runtime(ctx, require_allowed=False)
    try:
        response = handle_get_allowed(runtime.engine, runtime.audit)
    finally:
        runtime.close()

    if json_output:
        console.print_json(response.text)
        return

    directories: list[str] = json.loads(response.text)["allowed_dirs"]
    if not directories:
        print_info("No allowed directories available.")
        return
    for directory in directories:
        console.print(f"[success]●[/] {escape(directory)}")
