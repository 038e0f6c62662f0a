"""Guarded deletion service.

Validates candidate paths against the protection engine and deletes them,
recording every attempt in the audit trail. Batches are validated as a
whole before anything is touched: one refused path cancels the batch.
"""

import asyncio
import logging
import os
from collections.abc import Callable

from safedelete.audit.logger import AuditLogger
from safedelete.audit.models import AuditOperation, AuditResult
from safedelete.core.errors import RetryPolicy, classify_system_error, execute_with_retry
from safedelete.deletion.models import (
    BatchDeletionResult,
    BatchValidationResult,
    DeletionResult,
    FailedPath,
    RejectedPath,
    ValidationResult,
)
from safedelete.protection.engine import ProtectionEngine

logger = logging.getLogger(__name__)

REASON_NOT_ABSOLUTE = "Only absolute paths are accepted"
REASON_OUTSIDE_ALLOWED = "Path is outside allowed directories"
REASON_PROTECTED = "Path matches protected pattern"
REASON_BATCH_TOO_LARGE = "Batch size limit exceeded"
REASON_BATCH_INVALID = "Batch contains protected or invalid paths"

ERROR_FILE_NOT_FOUND = "File not found"
ERROR_DIRECTORY_NOT_FOUND = "Directory not found"

PARENT_SEGMENT = ".."


class SafeDeletionService:
    """Deletes files and empty directories inside the allowed scope.

    Outcomes are classified three ways: success, failed (filesystem
    refused) and rejected (policy refused).

    Attributes:
        max_batch_size: Largest batch accepted by delete_batch.
    """

    def __init__(
        self,
        engine: ProtectionEngine,
        audit: AuditLogger,
        *,
        max_batch_size: int = 100,
        retry: RetryPolicy | None = None,
    ) -> None:
        """Initialize the SafeDeletionService.

        Args:
            engine: Protection engine deciding scope and protection.
            audit: Audit logger receiving every attempt.
            max_batch_size: Largest batch accepted by delete_batch.
            retry: Retry policy for transient filesystem errors (default: no retry).
        """
        if max_batch_size < 1:
            msg = f"max_batch_size must be >= 1, got {max_batch_size}"
            raise ValueError(msg)
        self._engine = engine
        self._audit = audit
        self._retry = retry or RetryPolicy()
        self.max_batch_size = max_batch_size

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate_path(self, path: str) -> ValidationResult:
        """Check whether a single path may be deleted.

        Checks run in order: absolute path, allowed scope, protection.
        Paths with ``..`` segments are refused as out of scope.

        Args:
            path: Candidate path.

        Returns:
            ValidationResult with a reason when refused, or the matched
            allowed directory when accepted.
        """
        if not os.path.isabs(path):
            return ValidationResult(valid=False, reason=REASON_NOT_ABSOLUTE)

        if PARENT_SEGMENT in path.split("/"):
            logger.warning("Refusing path with parent segment: %s", path)
            return ValidationResult(valid=False, reason=REASON_OUTSIDE_ALLOWED)

        matched = self._engine.get_matching_allowed_directory(path)
        if matched is None:
            return ValidationResult(valid=False, reason=REASON_OUTSIDE_ALLOWED)

        if self._engine.is_protected(path):
            return ValidationResult(valid=False, reason=REASON_PROTECTED)

        return ValidationResult(valid=True, matched_directory=matched)

    def validate_batch(self, paths: list[str]) -> BatchValidationResult:
        """Partition a batch by validation outcome.

        Protection refusals go to ``protected_paths``, other refusals to
        ``invalid_paths``. Input order is preserved within each list.
        """
        batch = BatchValidationResult()

        for path in paths:
            validation = self.validate_path(path)
            if validation.valid:
                batch.valid_paths.append(path)
            elif validation.reason == REASON_PROTECTED:
                batch.protected_paths.append(RejectedPath(path=path, reason=REASON_PROTECTED))
            else:
                batch.invalid_paths.append(
                    RejectedPath(path=path, reason=validation.reason or "Invalid path")
                )

        return batch

    # -------------------------------------------------------------------------
    # Deletion
    # -------------------------------------------------------------------------

    async def delete_file(self, path: str) -> DeletionResult:
        """Delete a single file (or symlink) inside the allowed scope.

        Args:
            path: Absolute path of the file.

        Returns:
            DeletionResult; ``reason`` is set for policy rejections and
            ``error`` for filesystem failures.
        """
        return await self._delete(path, os.unlink, ERROR_FILE_NOT_FOUND, "delete_file")

    async def delete_directory(self, path: str) -> DeletionResult:
        """Delete a single empty directory inside the allowed scope.

        A non-empty directory is an ordinary filesystem failure.

        Args:
            path: Absolute path of the directory.

        Returns:
            DeletionResult; ``reason`` is set for policy rejections and
            ``error`` for filesystem failures.
        """
        return await self._delete(path, os.rmdir, ERROR_DIRECTORY_NOT_FOUND, "delete_directory")

    async def delete_batch(self, paths: list[str]) -> BatchDeletionResult:
        """Delete a batch of files after validating all of them.

        1. A batch larger than the limit is cancelled untouched.
        2. A batch with any refused path is cancelled untouched, including
           its otherwise valid members.
        3. Otherwise every path is deleted concurrently and classified on
           its own outcome as deleted or failed.

        Args:
            paths: Absolute paths of the files.

        Returns:
            BatchDeletionResult classifying every path.
        """
        if len(paths) > self.max_batch_size:
            limit_reason = f"Batch size exceeds limit ({self.max_batch_size})"
            result = BatchDeletionResult(
                rejected=[RejectedPath(path=p, reason=limit_reason) for p in paths],
                cancelled=True,
                reason=REASON_BATCH_TOO_LARGE,
            )
            self._audit_batch(paths, result)
            return result

        validation = self.validate_batch(paths)
        if not validation.valid:
            result = BatchDeletionResult(
                rejected=[*validation.invalid_paths, *validation.protected_paths],
                cancelled=True,
                reason=REASON_BATCH_INVALID,
            )
            self._audit_batch(paths, result)
            return result

        outcomes = await asyncio.gather(
            *(self.delete_file(p) for p in validation.valid_paths),
            return_exceptions=True,
        )

        result = BatchDeletionResult()
        for path, outcome in zip(validation.valid_paths, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error("Unexpected error deleting %s: %s", path, outcome)
                result.failed.append(FailedPath(path=path, error=str(outcome) or "Unknown error"))
            elif outcome.success:
                result.deleted.append(path)
            else:
                error = outcome.error or outcome.reason or "Unknown error"
                result.failed.append(FailedPath(path=path, error=error))

        self._audit_batch(paths, result)
        return result

    async def _delete(
        self, path: str, remove: Callable[[str], None], not_found: str, context: str
    ) -> DeletionResult:
        """Validate, remove and audit a single path."""
        validation = self.validate_path(path)
        if not validation.valid:
            self._audit.log_deletion(path, AuditResult.REJECTED, validation.reason)
            return DeletionResult(success=False, path=path, reason=validation.reason)

        # lexists so that dangling symlinks can still be removed
        if not os.path.lexists(path):
            self._audit.log_deletion(path, AuditResult.FAILED, not_found)
            return DeletionResult(success=False, path=path, error=not_found)

        try:
            await execute_with_retry(
                lambda: asyncio.to_thread(remove, path),
                path,
                self._retry,
                on_retry=lambda e, attempt: self._audit.log_error(
                    e, f"Retry attempt {attempt}/{self._retry.max_retries} for {path}"
                ),
            )
        except OSError as e:
            classified = classify_system_error(e, path)
            self._audit.log_error(classified, f"{context}: {path}")
            return DeletionResult(success=False, path=path, error=classified.message)

        self._audit.log_deletion(path, AuditResult.SUCCESS)
        return DeletionResult(success=True, path=path)

    def _audit_batch(self, paths: list[str], result: BatchDeletionResult) -> None:
        """Record one audit entry summarizing a whole batch."""
        if result.cancelled:
            self._audit.log_operation(
                AuditOperation.DELETE, AuditResult.REJECTED, paths, result.reason
            )
            return

        summary = f"Batch deleted {len(result.deleted)} of {len(paths)}"
        if result.failed:
            self._audit.log_operation(
                AuditOperation.DELETE,
                AuditResult.FAILED,
                paths,
                f"{summary}, {len(result.failed)} failed",
            )
        else:
            self._audit.log_operation(AuditOperation.DELETE, AuditResult.SUCCESS, paths, summary)
