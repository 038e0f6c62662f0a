"""Error taxonomy and classification for deletion operations.

Native filesystem errors are classified into a small set of error types
so callers can tell permission problems from missing targets and policy
rejections. A bounded retry helper re-attempts operations that fail with
a transient error code.
"""

import asyncio
import errno
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# errno values considered transient and worth retrying
TRANSIENT_ERRNOS: frozenset[int] = frozenset(
    {errno.EBUSY, errno.EAGAIN, errno.EWOULDBLOCK, errno.ETIMEDOUT}
)


class ErrorType(str, Enum):
    """Classification of a deletion error.

    Attributes:
        VALIDATION_ERROR: Malformed input, relative path, schema mismatch.
        PERMISSION_DENIED: Access, ownership or read-only filesystem failures.
        FILE_NOT_FOUND: Target does not exist.
        PROTECTION_VIOLATION: Path is protected or outside allowed scope.
        SYSTEM_ERROR: Anything unclassified.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PROTECTION_VIOLATION = "PROTECTION_VIOLATION"
    SYSTEM_ERROR = "SYSTEM_ERROR"


class SafeDeletionError(Exception):
    """Classified deletion error.

    The underlying exception, when there is one, is chained as ``__cause__``.

    Attributes:
        error_type: Classification of the error.
        path: Path the error relates to, if any.
    """

    def __init__(self, error_type: ErrorType, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.path = path

    @property
    def message(self) -> str:
        """Return the error message."""
        return str(self)


def _error_code(error: BaseException) -> int | None:
    """Extract an errno value from an exception, if it carries one."""
    code = getattr(error, "errno", None)
    if isinstance(code, int):
        return code
    return None


def is_transient_error(error: BaseException) -> bool:
    """Check whether an error is transient and worth retrying.

    Args:
        error: Exception raised by a filesystem operation.

    Returns:
        True if the errno is one of the transient codes.
    """
    return _error_code(error) in TRANSIENT_ERRNOS


def classify_system_error(error: BaseException, path: str) -> SafeDeletionError:
    """Classify a native error into a SafeDeletionError.

    The errno is inspected first, then the exception type, then the
    message text for symbolic codes like ``ENOENT``.

    Args:
        error: Exception raised by a filesystem operation.
        path: Path the operation targeted.

    Returns:
        SafeDeletionError with the underlying error chained as cause.
    """
    code = _error_code(error)
    text = str(error)

    if code == errno.ENOENT or isinstance(error, FileNotFoundError) or "ENOENT" in text:
        classified = SafeDeletionError(ErrorType.FILE_NOT_FOUND, f"File not found: {path}", path)
    elif code == errno.EACCES or "EACCES" in text:
        classified = SafeDeletionError(
            ErrorType.PERMISSION_DENIED,
            f"Access denied: Insufficient permissions to access {path}",
            path,
        )
    elif code == errno.EPERM or "EPERM" in text:
        classified = SafeDeletionError(
            ErrorType.PERMISSION_DENIED,
            f"Operation not permitted: Insufficient privileges to modify {path}",
            path,
        )
    elif code == errno.EROFS or "EROFS" in text:
        classified = SafeDeletionError(
            ErrorType.PERMISSION_DENIED,
            f"Read-only file system: Cannot modify files on {path}",
            path,
        )
    elif isinstance(error, PermissionError):
        classified = SafeDeletionError(
            ErrorType.PERMISSION_DENIED, f"Permission error: Cannot access {path}", path
        )
    else:
        classified = SafeDeletionError(
            ErrorType.SYSTEM_ERROR,
            f"System error during operation on {path}: {text}",
            path,
        )

    classified.__cause__ = error
    return classified


def user_message(error: SafeDeletionError) -> str:
    """Generate a user-facing message for a classified error."""
    path = error.path or "Unknown path"

    if error.error_type == ErrorType.VALIDATION_ERROR:
        suffix = f" ({error.path})" if error.path else ""
        return f"Invalid request: {error.message}{suffix}"
    if error.error_type == ErrorType.PERMISSION_DENIED:
        return f"Access denied: {path} cannot be accessed due to insufficient permissions."
    if error.error_type == ErrorType.FILE_NOT_FOUND:
        return f"File not found: {path} does not exist or cannot be located."
    if error.error_type == ErrorType.PROTECTION_VIOLATION:
        return f"Protected file: {path} cannot be deleted because it matches a protected pattern."

    on_path = f" on {error.path}" if error.path else ""
    return f"System error: Operation failed{on_path}. {error.message}"


def recovery_suggestion(error: SafeDeletionError) -> str:
    """Suggest how a user could recover from a classified error."""
    suggestions = {
        ErrorType.PERMISSION_DENIED: (
            "Check file permissions and ensure you have necessary access rights."
        ),
        ErrorType.FILE_NOT_FOUND: "Verify the file path is correct and the file exists.",
        ErrorType.PROTECTION_VIOLATION: (
            "Review the protected patterns configuration or modify the request "
            "to exclude protected files."
        ),
        ErrorType.VALIDATION_ERROR: (
            "Check the input format and ensure all required parameters are provided correctly."
        ),
        ErrorType.SYSTEM_ERROR: (
            "Check system resources and try the operation again. "
            "If the problem persists, check system logs."
        ),
    }
    return suggestions[error.error_type]


def actionable_message(error: SafeDeletionError) -> str:
    """Combine the user message with concrete guidance for the error type."""
    base = user_message(error)
    guidance = {
        ErrorType.PROTECTION_VIOLATION: (
            "To resolve this, please review the protected patterns configuration "
            "or exclude this path from the operation."
        ),
        ErrorType.PERMISSION_DENIED: (
            "Try running with appropriate permissions or check file ownership."
        ),
        ErrorType.FILE_NOT_FOUND: "Verify that the file exists and the path is correct.",
        ErrorType.VALIDATION_ERROR: "Please check the input format and try again.",
    }
    extra = guidance.get(error.error_type)
    return f"{base} {extra}" if extra else base


@dataclass(frozen=True, slots=True)
class BatchErrorSummary:
    """Classified errors of a batch, grouped by type.

    Attributes:
        failed_operations: Total number of errors.
        errors_by_type: Errors grouped by their ErrorType.
    """

    failed_operations: int
    errors_by_type: dict[ErrorType, list[SafeDeletionError]] = field(default_factory=dict)


def summarize_batch_errors(errors: list[SafeDeletionError]) -> BatchErrorSummary:
    """Group batch errors by type.

    Every ErrorType is present in the result, possibly with an empty list.
    """
    grouped: dict[ErrorType, list[SafeDeletionError]] = {t: [] for t in ErrorType}
    for error in errors:
        grouped[error.error_type].append(error)
    return BatchErrorSummary(failed_operations=len(errors), errors_by_type=grouped)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry settings for transient filesystem errors.

    Attributes:
        max_retries: Additional attempts after the first one (0 disables retry).
        retry_delay: Fixed delay between attempts, in seconds.
    """

    max_retries: int = 0
    retry_delay: float = 0.1

    def __post_init__(self) -> None:
        """Validate retry settings after initialization."""
        if self.max_retries < 0:
            msg = f"max_retries must be >= 0, got {self.max_retries}"
            raise ValueError(msg)
        if self.retry_delay < 0:
            msg = f"retry_delay must be >= 0, got {self.retry_delay}"
            raise ValueError(msg)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    path: str,
    policy: RetryPolicy,
    *,
    on_retry: Callable[[BaseException, int], None] | None = None,
) -> T:
    """Run an async operation, retrying transient failures.

    Only errors with a transient errno (busy, would-block, timeout) are
    retried. Any other error is raised immediately.

    Args:
        operation: Zero-argument coroutine factory to execute.
        path: Path the operation targets, for diagnostics.
        policy: Retry policy to apply.
        on_retry: Optional callback invoked with (error, attempt) before each retry.

    Returns:
        The operation's result.

    Raises:
        Exception: The last error once retries are exhausted, or the first
            non-transient error.
    """
    attempt = 0
    while True:
        try:
            return await operation()
        except OSError as e:
            if not is_transient_error(e) or attempt >= policy.max_retries:
                raise
            attempt += 1
            logger.debug(
                "Retry attempt %d/%d for %s: %s", attempt, policy.max_retries, path, e
            )
            if on_retry is not None:
                on_retry(e, attempt)
            await asyncio.sleep(policy.retry_delay)
