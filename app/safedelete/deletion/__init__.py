"""Deletion module.

This module provides path validation, single and batch deletion, and
the result models that classify every outcome as deleted, failed or
rejected.
"""

from safedelete.deletion.models import (
    BatchDeletionResult,
    BatchValidationResult,
    DeletionResult,
    FailedPath,
    RejectedPath,
    ValidationResult,
)
from safedelete.deletion.service import SafeDeletionService

__all__ = [
    "BatchDeletionResult",
    "BatchValidationResult",
    "DeletionResult",
    "FailedPath",
    "RejectedPath",
    "SafeDeletionService",
    "ValidationResult",
]
