"""Audit trail for deletion operations.

This module provides the AuditLogger class, which records every attempted
operation as a JSON line in size-rotated log files and keeps a bounded
in-memory tail of recent entries.

Storage layout: one file per rotation generation in the log directory,
named ``safe-deletion-<timestamp>-<suffix>.log``.

Errors while writing the audit trail are reported through the standard
``logging`` module and never propagated, so a broken audit sink cannot
block deletion decisions.
"""

import json
import logging
import os
import traceback
import uuid
from collections import deque
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from safedelete.audit.models import (
    DEBUG_PREFIX,
    AuditLogEntry,
    AuditOperation,
    AuditResult,
    LogLevel,
    create_audit_entry,
    utc_timestamp,
)

if TYPE_CHECKING:
    from safedelete.core.config import SafeDeleteConfig

logger = logging.getLogger(__name__)

LOG_FILE_PREFIX = "safe-deletion-"
LOG_FILE_SUFFIX = ".log"
MAX_IN_MEMORY_ENTRIES = 1000
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_FILES = 10


def is_log_file_name(name: str) -> bool:
    """Check if a file name follows the audit log naming convention."""
    return name.startswith(LOG_FILE_PREFIX) and name.endswith(LOG_FILE_SUFFIX)


def new_log_file_name() -> str:
    """Generate a sortable, unique audit log file name."""
    stamp = utc_timestamp().replace(":", "-").replace(".", "-")
    return f"{LOG_FILE_PREFIX}{stamp}-{uuid.uuid4().hex[:6]}{LOG_FILE_SUFFIX}"


class AuditLogger:
    """Writes audit entries to rotating JSONL files.

    Entries below the configured level are dropped entirely. Before each
    append the serialized size of the entry is checked against the
    maximum file size; if it would overflow the active file, a new file is
    started and old files beyond the retention count are removed.

    Attributes:
        log_directory: Directory holding the audit log files.
        level: Minimum level of entries that are kept.
        max_file_size: Rotation threshold in bytes.
        max_files: Number of log files kept by retention cleanup.
    """

    def __init__(
        self,
        log_directory: Path,
        *,
        level: LogLevel | str = LogLevel.INFO,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        max_files: int = DEFAULT_MAX_FILES,
    ) -> None:
        """Initialize the AuditLogger.

        The log directory is only created when logging is enabled.

        Args:
            log_directory: Directory for audit log files.
            level: Minimum level to record ("none" disables the audit trail).
            max_file_size: Maximum size of one log file in bytes.
            max_files: Maximum number of log files to retain.
        """
        self.log_directory = log_directory
        self.level = LogLevel(level)
        self.max_file_size = max_file_size
        self.max_files = max_files
        self._recent: deque[AuditLogEntry] = deque(maxlen=MAX_IN_MEMORY_ENTRIES)
        self._current_file: Path | None = None
        self._current_size = 0
        self._closed = False

        if self.level != LogLevel.NONE:
            self._initialize_log_directory()

    def __enter__(self) -> "AuditLogger":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def current_log_file(self) -> Path | None:
        """Path of the active log file, None if none has been set up."""
        return self._current_file

    @property
    def current_file_size(self) -> int:
        """Bytes written to the active log file."""
        return self._current_size

    @property
    def enabled(self) -> bool:
        """Check if entries can be recorded at all."""
        return self.level != LogLevel.NONE and not self._closed

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def log_deletion(
        self,
        path: str,
        result: AuditResult | str,
        reason: str | None = None,
    ) -> AuditLogEntry | None:
        """Record a deletion attempt for a single path.

        Returns:
            The recorded entry, or None if it was filtered out.
        """
        entry = create_audit_entry(AuditOperation.DELETE, AuditResult(result), [path], reason)
        return self._write_entry(entry)

    def log_operation(
        self,
        operation: AuditOperation | str,
        result: AuditResult | str,
        paths: list[str] | None = None,
        reason: str | None = None,
    ) -> AuditLogEntry | None:
        """Record a general operation (delete, list_protected, get_allowed).

        Returns:
            The recorded entry, or None if it was filtered out.
        """
        entry = create_audit_entry(
            AuditOperation(operation), AuditResult(result), paths, reason
        )
        return self._write_entry(entry)

    def log_error(self, error: BaseException, context: str) -> AuditLogEntry | None:
        """Record an error with context.

        The traceback is included only when the level is debug.

        Returns:
            The recorded entry, or None if it was filtered out.
        """
        reason = f"{context}: {error}"
        if self.level == LogLevel.DEBUG and error.__traceback__ is not None:
            stack = "".join(traceback.format_exception(error)).rstrip()
            reason = f"{reason}\n{stack}"

        entry = create_audit_entry(AuditOperation.DELETE, AuditResult.FAILED, None, reason)
        return self._write_entry(entry)

    def log_server_start(self, config: "SafeDeleteConfig") -> AuditLogEntry | None:
        """Record startup together with the effective configuration.

        Returns:
            The recorded entry, or None if it was filtered out.
        """
        details = "\n".join(
            [
                "Server started with configuration:",
                f"- Allowed directories: {', '.join(config.allowed_directories)}",
                f"- Protected patterns: {', '.join(config.protected_patterns)}",
                f"- Log level: {config.log_level}",
                f"- Max batch size: {config.max_batch_size}",
            ]
        )
        entry = create_audit_entry(AuditOperation.GET_ALLOWED, AuditResult.SUCCESS, None, details)
        return self._write_entry(entry)

    def log_debug(self, message: str) -> AuditLogEntry | None:
        """Record a debug message (only when the level is debug).

        Returns:
            The recorded entry, or None if debug logging is off.
        """
        if self.level != LogLevel.DEBUG:
            return None

        entry = create_audit_entry(
            AuditOperation.GET_ALLOWED,
            AuditResult.SUCCESS,
            None,
            f"{DEBUG_PREFIX} {message}",
        )
        return self._write_entry(entry)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def get_recent_logs(self, limit: int = 100) -> list[AuditLogEntry]:
        """Get recent entries from memory, most recent first.

        Args:
            limit: Maximum number of entries to return.
        """
        if limit <= 0:
            return []
        entries = list(self._recent)[-limit:]
        entries.reverse()
        return entries

    def log_files(self) -> list[Path]:
        """List audit log files in the log directory, oldest first by mtime."""
        try:
            candidates = [
                p for p in self.log_directory.iterdir() if p.is_file() and is_log_file_name(p.name)
            ]
        except OSError:
            return []

        def _mtime(path: Path) -> float:
            try:
                return path.stat().st_mtime
            except OSError:
                return 0.0

        return sorted(candidates, key=lambda p: (_mtime(p), p.name))

    def read_entries(self, limit: int | None = None) -> list[AuditLogEntry]:
        """Read persisted entries from all log files, newest first.

        Args:
            limit: Maximum number of entries to return. If None, returns all.
        """
        entries: list[AuditLogEntry] = []
        for path in self.log_files():
            entries.extend(read_log_file(path))

        entries.reverse()
        if limit is not None:
            return entries[:limit]
        return entries

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def flush(self) -> None:
        """Force the active log file to disk.

        Appends are already flushed to the OS on every write; this also asks
        the OS to commit them. Does nothing before the first write.
        """
        current = self._current_file
        if current is None or not current.exists():
            return
        try:
            with current.open(mode="a", encoding="utf-8") as f:
                os.fsync(f.fileno())
        except OSError as e:
            logger.error("Failed to sync audit log %s: %s", current.name, e)

    def close(self) -> None:
        """Stop recording entries. Safe to call multiple times."""
        if not self._closed:
            logger.debug("Audit logger closed (active file: %s)", self._current_file)
        self._closed = True

    # -------------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------------

    def _should_log(self, entry: AuditLogEntry) -> bool:
        return entry.level.severity >= self.level.severity

    def _write_entry(self, entry: AuditLogEntry) -> AuditLogEntry | None:
        if not self.enabled or not self._should_log(entry):
            return None

        self._recent.append(entry)
        self._write_to_file(entry)
        return entry

    def _initialize_log_directory(self) -> None:
        try:
            self.log_directory.mkdir(parents=True, exist_ok=True)
            self._current_file = self.log_directory / new_log_file_name()
            try:
                self._current_size = self._current_file.stat().st_size
            except FileNotFoundError:
                self._current_size = 0
        except OSError as e:
            logger.error("Failed to initialize log directory %s: %s", self.log_directory, e)

    def _write_to_file(self, entry: AuditLogEntry) -> None:
        try:
            if self._current_file is None:
                self._initialize_log_directory()
                if self._current_file is None:
                    return

            line = entry.to_json_line() + "\n"
            entry_size = len(line.encode("utf-8"))

            if self._should_rotate(entry_size):
                self._rotate_log_file()

            with self._current_file.open(mode="a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
            self._current_size += entry_size
        except OSError as e:
            logger.error("Failed to write audit entry to file: %s", e)

    def _should_rotate(self, entry_size: int) -> bool:
        return self._current_size + entry_size > self.max_file_size

    def _rotate_log_file(self) -> None:
        if self._current_file is None:
            return

        previous = self._current_file
        self._current_file = self.log_directory / new_log_file_name()
        self._current_size = 0
        logger.debug("Rotated audit log %s -> %s", previous.name, self._current_file.name)

        self.cleanup_old_log_files()

    def cleanup_old_log_files(self) -> list[Path]:
        """Delete the oldest log files beyond the retention count.

        Failures to delete a single file are logged and skipped.

        Returns:
            Paths that were removed.
        """
        files = self.log_files()
        if len(files) <= self.max_files:
            return []

        removed: list[Path] = []
        for path in files[: len(files) - self.max_files]:
            try:
                os.unlink(path)
                removed.append(path)
            except OSError as e:
                logger.error("Failed to remove old log file %s: %s", path.name, e)
        return removed


def read_log_file(path: Path) -> list[AuditLogEntry]:
    """Read entries from one audit log file, oldest first.

    Corrupt lines are skipped with a warning.

    Args:
        path: Log file to read.

    Returns:
        Entries in file order. Empty if the file cannot be read.
    """
    entries: list[AuditLogEntry] = []
    try:
        with path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditLogEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt audit line %s:%d: %s", path.name, line_num, e)
    except OSError as e:
        logger.warning("Cannot read audit log %s: %s", path, e)
    return entries
