"""Unit tests for runtime wiring.

Tests for build_runtime and SafeDeleteRuntime.
"""

from pathlib import Path

from safedelete.audit.models import AuditOperation, AuditResult, LogLevel
from safedelete.core.config import SafeDeleteConfig
from safedelete.core.runtime import build_runtime


class TestBuildRuntime:
    """Tests for build_runtime function."""

    def test_components_follow_config(self, allowed_dir: Path, log_dir: Path) -> None:
        """Engine, logger and service are configured from the config."""
        config = SafeDeleteConfig(
            allowed_directories=[str(allowed_dir)],
            protected_patterns=["*.key"],
            log_level="warn",
            log_directory=str(log_dir),
            max_batch_size=9,
            max_log_files=4,
            retry_attempts=2,
            retry_delay_ms=0,
        )

        runtime = build_runtime(config, watch=False)
        try:
            assert runtime.engine.allowed_directories == [str(allowed_dir)]
            assert runtime.engine.get_protected_patterns() == ["*.key"]
            assert runtime.audit.level == LogLevel.WARN
            assert runtime.audit.max_files == 4
            assert runtime.audit.log_directory == log_dir
            assert runtime.service.max_batch_size == 9
        finally:
            runtime.close()

    def test_startup_recorded(self, allowed_dir: Path, log_dir: Path) -> None:
        """Startup is written to the audit trail with the effective settings."""
        config = SafeDeleteConfig(
            allowed_directories=[str(allowed_dir)],
            log_directory=str(log_dir),
        )

        runtime = build_runtime(config, watch=False)
        runtime.close()

        entries = runtime.audit.read_entries()
        assert len(entries) == 1
        assert entries[0].operation == AuditOperation.GET_ALLOWED
        assert entries[0].result == AuditResult.SUCCESS
        assert entries[0].reason is not None
        assert str(allowed_dir) in entries[0].reason

    def test_watcher_started_and_stopped(self, allowed_dir: Path, log_dir: Path) -> None:
        """With watching enabled, close stops the change watcher."""
        config = SafeDeleteConfig(
            allowed_directories=[str(allowed_dir)],
            log_directory=str(log_dir),
        )

        runtime = build_runtime(config)
        watcher = runtime.engine._watcher
        assert watcher is not None
        assert watcher.running is True

        runtime.close()

        assert watcher.running is False
        assert runtime.engine._watcher is None
