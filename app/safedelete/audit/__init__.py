"""Audit trail module.

This module provides the audit entry model and the rotating JSONL
audit logger that records every attempted operation.
"""

from safedelete.audit.logger import AuditLogger, read_log_file
from safedelete.audit.models import (
    AuditLogEntry,
    AuditOperation,
    AuditResult,
    LogLevel,
    create_audit_entry,
)

__all__ = [
    "AuditLogEntry",
    "AuditLogger",
    "AuditOperation",
    "AuditResult",
    "LogLevel",
    "create_audit_entry",
    "read_log_file",
]
