"""Fixtures for CLI tests."""

import pytest
from safedelete.utils import formatting


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep Rich from wrapping long temporary paths in command output."""
    monkeypatch.setattr(formatting.console, "width", 400)
    monkeypatch.setattr(formatting.err_console, "width", 400)
