"""Result models for path validation and deletion.

A deletion outcome is one of three kinds: success, failed (the filesystem
said no: not found, permission, busy) or rejected (policy said no: outside
allowed scope or protected). Failed results carry ``error``, rejected
results carry ``reason``, and the two are never set together.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Verdict of validating a single path.

    Attributes:
        valid: Whether the path may be deleted.
        reason: Why the path was refused (None if valid).
        matched_directory: Allowed directory containing the path (None if invalid).
    """

    valid: bool
    reason: str | None = None
    matched_directory: str | None = None


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Result of a single deletion.

    Attributes:
        success: Whether the path was deleted.
        path: Path that was operated on.
        error: Filesystem failure message, None otherwise.
        reason: Policy rejection reason, None otherwise.
    """

    success: bool
    path: str
    error: str | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        """Validate result data after initialization."""
        if self.error is not None and self.reason is not None:
            msg = "A deletion result cannot carry both an error and a rejection reason"
            raise ValueError(msg)
        if self.success and (self.error is not None or self.reason is not None):
            msg = "A successful deletion result cannot carry an error or reason"
            raise ValueError(msg)

    @property
    def is_rejected(self) -> bool:
        """Check if the deletion was refused by policy."""
        return not self.success and self.reason is not None

    @property
    def is_failed(self) -> bool:
        """Check if the deletion was refused by the filesystem."""
        return not self.success and self.reason is None


@dataclass(frozen=True, slots=True)
class FailedPath:
    """Path whose deletion failed at the filesystem level."""

    path: str
    error: str


@dataclass(frozen=True, slots=True)
class RejectedPath:
    """Path refused by policy."""

    path: str
    reason: str


@dataclass(slots=True)
class BatchValidationResult:
    """Partition of a batch by validation outcome.

    ``valid`` is derived: it is True iff there are no invalid and no
    protected paths. Order within each list follows input order.

    Attributes:
        valid_paths: Paths that passed validation.
        invalid_paths: Paths refused for reasons other than protection.
        protected_paths: Paths refused because they are protected.
    """

    valid_paths: list[str] = field(default_factory=list)
    invalid_paths: list[RejectedPath] = field(default_factory=list)
    protected_paths: list[RejectedPath] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        """Check if every path in the batch passed validation."""
        return not self.invalid_paths and not self.protected_paths


@dataclass(slots=True)
class BatchDeletionResult:
    """Classified outcome of a batch deletion.

    A cancelled batch never deleted anything.

    Attributes:
        deleted: Paths that were deleted.
        failed: Paths whose deletion failed at the filesystem level.
        rejected: Paths refused by policy.
        cancelled: Whether the batch was refused before any deletion.
        reason: Why the batch was cancelled.
    """

    deleted: list[str] = field(default_factory=list)
    failed: list[FailedPath] = field(default_factory=list)
    rejected: list[RejectedPath] = field(default_factory=list)
    cancelled: bool = False
    reason: str | None = None

    def __post_init__(self) -> None:
        """Validate result data after initialization."""
        if self.cancelled and self.deleted:
            msg = "A cancelled batch cannot report deleted paths"
            raise ValueError(msg)

    @property
    def fully_succeeded(self) -> bool:
        """Check if every path was deleted."""
        return not self.cancelled and not self.failed and not self.rejected

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dictionary."""
        result: dict[str, Any] = {
            "deleted": list(self.deleted),
            "failed": [{"path": f.path, "error": f.error} for f in self.failed],
            "rejected": [{"path": r.path, "reason": r.reason} for r in self.rejected],
        }
        if self.cancelled:
            result["cancelled"] = True
        if self.reason is not None:
            result["reason"] = self.reason
        return result
