"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from safedelete.audit.logger import AuditLogger
from safedelete.audit.models import LogLevel
from safedelete.deletion.service import SafeDeletionService
from safedelete.protection.engine import ProtectionEngine


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point XDG config and state homes into the test's temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))


@pytest.fixture
def allowed_dir(tmp_path: Path) -> Path:
    """Allowed directory with a small project tree inside it.

    Layout:
        project/a.txt
        project/b.txt
        project/src/main.py
        project/src/cache.tmp
        project/.git/config
        project/.env.local
        project/node_modules/pkg/index.js
        project/empty/
    """
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "node_modules" / "pkg").mkdir(parents=True)
    (root / "empty").mkdir()

    (root / "a.txt").write_text("a")
    (root / "b.txt").write_text("b")
    (root / "src" / "main.py").write_text("print('hi')\n")
    (root / "src" / "cache.tmp").write_text("tmp")
    (root / ".git" / "config").write_text("[core]\n")
    (root / ".env.local").write_text("SECRET=1\n")
    (root / "node_modules" / "pkg" / "index.js").write_text("module.exports = 1;\n")
    return root


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Directory for audit log files (not created up front)."""
    return tmp_path / "logs"


@pytest.fixture
def engine(allowed_dir: Path) -> Iterator[ProtectionEngine]:
    """Protection engine scoped to allowed_dir with the default patterns."""
    with ProtectionEngine([str(allowed_dir)], [".git", "node_modules", ".env*"]) as eng:
        yield eng


@pytest.fixture
def audit(log_dir: Path) -> Iterator[AuditLogger]:
    """Audit logger writing at debug level into log_dir."""
    with AuditLogger(log_dir, level=LogLevel.DEBUG) as logger:
        yield logger


@pytest.fixture
def service(engine: ProtectionEngine, audit: AuditLogger) -> SafeDeletionService:
    """Deletion service over the engine and audit fixtures."""
    return SafeDeletionService(engine, audit, max_batch_size=5)
