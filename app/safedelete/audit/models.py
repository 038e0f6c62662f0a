"""Audit log entry model.

This module defines the immutable record written to the audit trail for
every attempted operation, and the levels used to filter those records.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

DEBUG_PREFIX = "DEBUG:"


class AuditOperation(str, Enum):
    """Operation recorded in the audit trail.

    Attributes:
        DELETE: File, directory or batch deletion.
        LIST_PROTECTED: Listing of protected patterns.
        GET_ALLOWED: Listing of allowed directories.
    """

    DELETE = "delete"
    LIST_PROTECTED = "list_protected"
    GET_ALLOWED = "get_allowed"


class AuditResult(str, Enum):
    """Outcome of an audited operation.

    Attributes:
        SUCCESS: The operation completed.
        FAILED: The filesystem refused (not found, permission, busy, ...).
        REJECTED: Policy refused (outside allowed scope or protected).
    """

    SUCCESS = "success"
    FAILED = "failed"
    REJECTED = "rejected"


class LogLevel(str, Enum):
    """Minimum severity for audit entries, ordered by severity."""

    NONE = "none"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> int:
        """Numeric severity (NONE is above everything)."""
        return _SEVERITY[self]


_SEVERITY: dict[LogLevel, int] = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
    LogLevel.NONE: 4,
}


@dataclass(frozen=True, slots=True)
class AuditLogEntry:
    """Single immutable audit record.

    One entry is written per attempted operation, not per syscall.

    Attributes:
        timestamp: When the operation happened (ISO 8601, UTC).
        operation: Operation being audited.
        result: Outcome of the operation.
        request_id: Unique identifier of this record.
        paths: Paths the operation targeted, if any.
        reason: Explanation or details, if any.
    """

    timestamp: str
    operation: AuditOperation
    result: AuditResult
    request_id: str
    paths: tuple[str, ...] | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.request_id:
            msg = "Request ID cannot be empty"
            raise ValueError(msg)

    @property
    def level(self) -> LogLevel:
        """Severity of this entry.

        Failures are errors, rejections are warnings, entries whose reason
        carries the debug prefix are debug, everything else is info.
        """
        if self.result == AuditResult.FAILED:
            return LogLevel.ERROR
        if self.result == AuditResult.REJECTED:
            return LogLevel.WARN
        if self.reason is not None and self.reason.startswith(DEBUG_PREFIX):
            return LogLevel.DEBUG
        return LogLevel.INFO

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape.

        Absent optional fields are omitted rather than written as null.
        """
        result: dict[str, Any] = {
            "timestamp": self.timestamp,
            "operation": self.operation.value,
        }
        if self.paths is not None:
            result["paths"] = list(self.paths)
        result["result"] = self.result.value
        if self.reason is not None:
            result["reason"] = self.reason
        result["requestId"] = self.request_id
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuditLogEntry":
        """Deserialize from the persisted JSON shape.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If operation or result is invalid.
        """
        paths = data.get("paths")
        return cls(
            timestamp=data["timestamp"],
            operation=AuditOperation(data["operation"]),
            result=AuditResult(data["result"]),
            request_id=data["requestId"],
            paths=tuple(paths) if paths is not None else None,
            reason=data.get("reason"),
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "AuditLogEntry":
        """Deserialize from a single JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_audit_entry(
    operation: AuditOperation,
    result: AuditResult,
    paths: list[str] | None = None,
    reason: str | None = None,
) -> AuditLogEntry:
    """Factory function to create a new AuditLogEntry.

    Automatically generates a unique request ID and current timestamp.

    Args:
        operation: Operation being audited.
        result: Outcome of the operation.
        paths: Paths the operation targeted.
        reason: Optional explanation.

    Returns:
        New AuditLogEntry.
    """
    return AuditLogEntry(
        timestamp=utc_timestamp(),
        operation=operation,
        result=result,
        request_id=str(uuid.uuid4()),
        paths=tuple(paths) if paths is not None else None,
        reason=reason,
    )
