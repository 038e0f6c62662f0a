"""Protection engine deciding which paths may be deleted.

A path is deletable only if it lies inside one of the configured allowed
directories and matches none of the configured protected patterns. Paths
outside every allowed directory are always reported as protected.
"""

import logging
import os
import threading
from collections.abc import Iterable
from types import TracebackType

from safedelete.protection.matcher import GLOBSTAR, GlobMatcher, PatternMatcher
from safedelete.protection.watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class ProtectionEngine:
    """Scope and protection decisions for candidate paths.

    Protection decisions for in-scope paths are cached by the exact input
    string. When a change watcher is supplied, cache entries touching a
    changed path are dropped as notifications arrive.

    Attributes:
        _allowed_directories: Configured allowed directories (read-only).
        _protected_patterns: Configured protected glob patterns (read-only).
    """

    def __init__(
        self,
        allowed_directories: Iterable[str],
        protected_patterns: Iterable[str],
        *,
        matcher: PatternMatcher | None = None,
        watcher: ChangeWatcher | None = None,
    ) -> None:
        """Initialize the ProtectionEngine.

        Args:
            allowed_directories: Absolute directories under which deletion is allowed.
            protected_patterns: Glob patterns that must never be deleted.
            matcher: Glob matcher to use. Defaults to GlobMatcher.
            watcher: Optional change watcher used to invalidate cached decisions.
        """
        self._allowed_directories: tuple[str, ...] = tuple(
            _strip_trailing_slash(d) for d in allowed_directories
        )
        self._protected_patterns: tuple[str, ...] = tuple(protected_patterns)
        self._matcher: PatternMatcher = matcher or GlobMatcher()
        self._cache: dict[str, bool] = {}
        self._cache_lock = threading.Lock()
        self._watcher: ChangeWatcher | None = None

        if watcher is not None:
            self._start_watcher(watcher)

    def __enter__(self) -> "ProtectionEngine":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.dispose()

    @property
    def allowed_directories(self) -> list[str]:
        """Configured allowed directories."""
        return list(self._allowed_directories)

    @property
    def cache_size(self) -> int:
        """Number of cached protection decisions."""
        return len(self._cache)

    def is_protected(self, path: str) -> bool:
        """Check whether a path must not be deleted.

        Paths outside every allowed directory are protected unconditionally.
        For in-scope paths every pattern is tried until one matches.

        Args:
            path: Absolute path to check.

        Returns:
            True if the path is protected, False if it may be deleted.
        """
        if not self.is_within_allowed_directories(path):
            return True

        with self._cache_lock:
            cached = self._cache.get(path)
            if cached is not None:
                return cached

            result = any(
                self._matches_pattern(path, pattern) for pattern in self._protected_patterns
            )
            self._cache[path] = result
            return result

    def get_protected_patterns(self) -> list[str]:
        """Get a snapshot of the configured protected patterns."""
        return list(self._protected_patterns)

    def is_within_allowed_directories(self, path: str) -> bool:
        """Check if a path equals or lies below an allowed directory.

        The check respects path boundaries: ``/a/b`` covers ``/a/b`` and
        ``/a/b/c`` but not ``/a/bc``. The path is normalized first, so
        ``/a/b/../c`` is outside ``/a/b``.
        """
        return any(_is_under(path, directory) for directory in self._allowed_directories)

    def get_matching_allowed_directory(self, path: str) -> str | None:
        """Get the most specific allowed directory containing a path.

        Args:
            path: Absolute path to look up.

        Returns:
            The longest matching allowed directory, or None if none matches.
        """
        matches = [d for d in self._allowed_directories if _is_under(path, d)]
        if not matches:
            return None
        return max(matches, key=len)

    def validate_allowed_directories(self) -> list[str]:
        """Get the configured allowed directories that currently exist.

        Only used to advertise directories; enforcement always uses the
        full configured set.
        """
        return [d for d in self._allowed_directories if os.path.isdir(d)]

    def invalidate(self, changed_path: str) -> int:
        """Drop cached decisions related to a changed path.

        An entry is dropped when either path contains the other.

        Args:
            changed_path: Path reported as changed.

        Returns:
            Number of cache entries removed.
        """
        with self._cache_lock:
            stale = [p for p in self._cache if changed_path in p or p in changed_path]
            for p in stale:
                del self._cache[p]
        if stale:
            logger.debug("Invalidated %d cached decisions for %s", len(stale), changed_path)
        return len(stale)

    def clear_cache(self) -> None:
        """Drop every cached decision."""
        with self._cache_lock:
            self._cache.clear()

    def dispose(self) -> None:
        """Stop change notifications and clear the cache.

        Safe to call multiple times; never raises.
        """
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            try:
                watcher.stop()
            except Exception as e:
                logger.warning("Failed to stop change watcher: %s", e)
        self.clear_cache()

    def _start_watcher(self, watcher: ChangeWatcher) -> None:
        """Start change notifications, degrading to no invalidation on failure."""
        try:
            watcher.start(self._allowed_directories, self.invalidate)
        except Exception as e:
            logger.warning("Change watcher unavailable, caching without invalidation: %s", e)
            return
        self._watcher = watcher

    def _matches_pattern(self, path: str, pattern: str) -> bool:
        """Try a pattern against the representations of a path."""
        normalized = os.path.normpath(path)
        match = self._matcher.match

        if match(normalized, pattern):
            return True

        if match(os.path.basename(normalized), pattern):
            return True

        if "/" in pattern or GLOBSTAR in pattern:
            directory = self.get_matching_allowed_directory(normalized)
            if directory is not None:
                relative = os.path.relpath(normalized, directory)
                if match(relative, pattern):
                    return True

        # A bare name like ".git" protects that name at any depth
        return any(match(segment, pattern) for segment in normalized.split("/"))


def _strip_trailing_slash(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


def _is_under(path: str, directory: str) -> bool:
    # Resolve ".." segments before the prefix check
    path = os.path.normpath(path)
    if path == directory:
        return True
    prefix = directory if directory.endswith("/") else directory + "/"
    return path.startswith(prefix)
