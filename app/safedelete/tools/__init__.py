"""Tool handlers exposed to a protocol layer."""

from safedelete.tools.handlers import (
    ToolError,
    ToolResponse,
    format_batch_summary,
    handle_delete,
    handle_get_allowed,
    handle_list_protected,
)

__all__ = [
    "ToolError",
    "ToolResponse",
    "format_batch_summary",
    "handle_delete",
    "handle_get_allowed",
    "handle_list_protected",
]
