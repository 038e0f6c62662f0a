"""Delete and check command implementations.

Provides the `safedelete delete` command for guarded deletion and the
`safedelete check` command for a dry validation of paths.
"""

import asyncio
import json
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from safedelete.cli.context import open_runtime
from safedelete.deletion.models import BatchValidationResult, DeletionResult
from safedelete.tools.handlers import ToolError, handle_delete
from safedelete.utils.formatting import console, print_error, print_success


def delete(
    ctx: typer.Context,
    paths: Annotated[
        list[str],
        typer.Argument(help="Absolute paths to delete."),
    ],
    directory: Annotated[
        bool,
        typer.Option(
            "--directory",
            "-d",
            help="Delete a single empty directory instead of files.",
        ),
    ] = False,
) -> None:
    """Delete files (or one empty directory) inside the allowed directories.

    Several paths are handled as one batch: if any of them is protected
    or outside the allowed directories, nothing is deleted.

    Examples:
        safedelete -a /tmp/proj delete /tmp/proj/a.txt
        safedelete -a /tmp/proj delete /tmp/proj/a.txt /tmp/proj/b.txt
        safedelete -a /tmp/proj delete -d /tmp/proj/empty-dir
    """
    if directory and len(paths) != 1:
        print_error("--directory takes exactly one path.")
        raise typer.Exit(code=1)

    runtime = open_runtime(ctx)
    try:
        if directory:
            result = asyncio.run(runtime.service.delete_directory(paths[0]))
            _print_single_result(result)
            if not result.success:
                raise typer.Exit(code=1)
            return

        try:
            response = asyncio.run(handle_delete(runtime.service, runtime.audit, paths))
        except ToolError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from None
    finally:
        runtime.close()

    if response.is_error:
        console.print(escape(response.text), style="warning")
        raise typer.Exit(code=1)
    print_success(escape(response.text))


def check(
    ctx: typer.Context,
    paths: Annotated[
        list[str],
        typer.Argument(help="Paths to validate."),
    ],
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Validate paths without deleting anything.

    Exits with code 1 if any path would be refused.
    """
    runtime = open_runtime(ctx)
    try:
        validation = runtime.service.validate_batch(paths)
    finally:
        runtime.close()

    if json_output:
        _print_validation_json(validation)
    else:
        _print_validation_table(validation)

    if not validation.valid:
        raise typer.Exit(code=1)


def _print_single_result(result: DeletionResult) -> None:
    """Print the outcome of a single deletion."""
    if result.success:
        print_success(f"Successfully deleted: {escape(result.path)}")
    elif result.is_rejected:
        print_error(f"Rejected {escape(result.path)}: {escape(result.reason or '')}")
    else:
        print_error(f"Failed to delete {escape(result.path)}: {escape(result.error or '')}")


def _print_validation_table(validation: BatchValidationResult) -> None:
    """Print validation results as a Rich table."""
    table = Table(
        title="Path Validation",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", justify="center")
    table.add_column("Path", overflow="fold")
    table.add_column("Reason", style="muted")

    for path in validation.valid_paths:
        table.add_row("[success]ok[/]", escape(path), "")
    for rejected in validation.protected_paths:
        table.add_row("[error]protected[/]", escape(rejected.path), escape(rejected.reason))
    for rejected in validation.invalid_paths:
        table.add_row("[warning]invalid[/]", escape(rejected.path), escape(rejected.reason))

    console.print(table)


def _print_validation_json(validation: BatchValidationResult) -> None:
    """Print validation results as JSON."""
    output = {
        "valid": validation.valid,
        "validPaths": validation.valid_paths,
        "invalidPaths": [{"path": r.path, "reason": r.reason} for r in validation.invalid_paths],
        "protectedPaths": [
            {"path": r.path, "reason": r.reason} for r in validation.protected_paths
        ],
    }
    console.print_json(json.dumps(output))
