"""Protection module.

This module provides scope membership and protected-pattern decisions
for candidate paths, the glob matcher behind them, and optional change
watching for decision cache invalidation.
"""

from safedelete.protection.engine import ProtectionEngine
from safedelete.protection.matcher import GlobMatcher, PatternMatcher
from safedelete.protection.watcher import ChangeWatcher, PollingChangeWatcher

__all__ = [
    "ChangeWatcher",
    "GlobMatcher",
    "PatternMatcher",
    "PollingChangeWatcher",
    "ProtectionEngine",
]
