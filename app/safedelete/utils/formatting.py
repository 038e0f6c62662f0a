"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from safedelete.audit.models import AuditLogEntry, AuditResult

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "#69B9A1",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
    }
)

RESULT_STYLES: dict[AuditResult, str] = {
    AuditResult.SUCCESS: "success",
    AuditResult.FAILED: "error",
    AuditResult.REJECTED: "warning",
}


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def create_audit_table(entries: list[AuditLogEntry], title: str = "Audit Log") -> Table:
    """Create a table of audit entries.

    Args:
        entries: Entries to display, in display order.
        title: Table title.

    Returns:
        Rich Table with one row per entry.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Time", style="muted", no_wrap=True)
    table.add_column("Operation")
    table.add_column("Result", justify="center")
    table.add_column("Paths", overflow="fold")
    table.add_column("Reason", style="muted", overflow="ellipsis")

    for entry in entries:
        style = RESULT_STYLES[entry.result]
        paths = ", ".join(entry.paths) if entry.paths else "-"
        reason = (entry.reason or "-").splitlines()[0]
        table.add_row(
            entry.timestamp[:19].replace("T", " "),
            entry.operation.value,
            f"[{style}]{entry.result.value}[/]",
            escape(paths),
            escape(reason),
        )

    return table


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
