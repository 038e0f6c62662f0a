"""Request handlers for the delete, list_protected and get_allowed tools.

Handlers turn service results into plain-text responses suitable for a
protocol layer. Per-path and per-batch audit entries are written by the
deletion service; handlers only audit the listing operations and
unexpected errors.
"""

import json
import logging
from dataclasses import dataclass

from safedelete.audit.logger import AuditLogger
from safedelete.audit.models import AuditOperation, AuditResult
from safedelete.core.errors import ErrorType, SafeDeletionError
from safedelete.deletion.models import BatchDeletionResult
from safedelete.deletion.service import SafeDeletionService
from safedelete.protection.engine import ProtectionEngine

logger = logging.getLogger(__name__)


class ToolError(SafeDeletionError):
    """Raised when a tool request cannot be served."""


@dataclass(frozen=True, slots=True)
class ToolResponse:
    """Text response of a tool.

    Attributes:
        text: Response body.
        is_error: Whether the request did not fully succeed.
    """

    text: str
    is_error: bool = False


async def handle_delete(
    service: SafeDeletionService,
    audit: AuditLogger,
    paths: list[str],
) -> ToolResponse:
    """Delete one path or a batch of paths.

    A single path goes through delete_file; several paths go through
    delete_batch and are answered with a summary.

    Args:
        service: Deletion service.
        audit: Audit logger for unexpected errors.
        paths: Absolute paths to delete.

    Returns:
        ToolResponse describing the outcome.

    Raises:
        ToolError: If no path was given or the deletion raised unexpectedly.
    """
    if not paths:
        raise ToolError(ErrorType.VALIDATION_ERROR, "No path provided")

    try:
        if len(paths) == 1:
            result = await service.delete_file(paths[0])
            if result.success:
                return ToolResponse(text=f"Successfully deleted: {result.path}")
            reason = result.error or result.reason or "Unknown error"
            return ToolResponse(text=f"Failed to delete {result.path}: {reason}", is_error=True)

        batch = await service.delete_batch(paths)
        return ToolResponse(text=format_batch_summary(batch), is_error=not batch.fully_succeeded)
    except Exception as e:
        audit.log_error(e, "delete tool")
        raise ToolError(ErrorType.SYSTEM_ERROR, f"Delete operation failed: {e}") from e


def handle_list_protected(engine: ProtectionEngine, audit: AuditLogger) -> ToolResponse:
    """List the configured protected patterns as JSON."""
    patterns = engine.get_protected_patterns()
    audit.log_operation(AuditOperation.LIST_PROTECTED, AuditResult.SUCCESS)
    return ToolResponse(text=json.dumps({"patterns": patterns}))


def handle_get_allowed(engine: ProtectionEngine, audit: AuditLogger) -> ToolResponse:
    """List the allowed directories that currently exist as JSON."""
    directories = engine.validate_allowed_directories()
    audit.log_operation(AuditOperation.GET_ALLOWED, AuditResult.SUCCESS)
    return ToolResponse(text=json.dumps({"allowed_dirs": directories}))


def format_batch_summary(batch: BatchDeletionResult) -> str:
    """Render a batch result as a plain-text summary with per-path details."""
    lines = [
        "Batch deletion completed:",
        f"- Successfully deleted: {len(batch.deleted)} files",
        f"- Failed: {len(batch.failed)} files",
        f"- Rejected: {len(batch.rejected)} files",
    ]
    if batch.cancelled:
        lines.append(f"- Operation cancelled: {batch.reason or 'Unknown reason'}")

    if batch.failed:
        lines.extend(["", "Failed files:"])
        lines.extend(f"- {f.path}: {f.error}" for f in batch.failed)
    if batch.rejected:
        lines.extend(["", "Rejected files:"])
        lines.extend(f"- {r.path}: {r.reason}" for r in batch.rejected)

    return "\n".join(lines)
