"""Filesystem change notification for protection cache invalidation.

Change watching is optional and best-effort. The protection engine only
needs something that can be started with a callback and stopped again;
PollingChangeWatcher provides that by comparing modification-time
snapshots from a background thread.
"""

import logging
import os
import threading
from collections.abc import Callable, Iterable
from typing import Protocol

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class ChangeWatcher(Protocol):
    """Capability that reports changed paths below a set of directories."""

    def start(self, directories: Iterable[str], on_change: ChangeCallback) -> None:
        """Begin watching and call on_change with each changed absolute path."""
        ...

    def stop(self) -> None:
        """Stop watching. Must be safe to call more than once."""
        ...


class PollingChangeWatcher:
    """Polls directory trees for added, modified and removed entries.

    Uses mtime snapshots for portability. Each changed path is reported
    once per poll cycle.

    Attributes:
        poll_interval: Seconds between snapshots.
    """

    def __init__(self, poll_interval: float = 1.0) -> None:
        """Initialize the watcher.

        Args:
            poll_interval: Seconds between snapshots.
        """
        self.poll_interval = poll_interval
        self._directories: list[str] = []
        self._on_change: ChangeCallback | None = None
        self._snapshot: dict[str, float] = {}
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """Check if the polling thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self, directories: Iterable[str], on_change: ChangeCallback) -> None:
        """Take an initial snapshot and start the polling thread.

        Directories that don't exist are skipped.

        Raises:
            RuntimeError: If the watcher is already running.
        """
        if self.running:
            msg = "Watcher is already running"
            raise RuntimeError(msg)

        self._directories = [d for d in directories if os.path.isdir(d)]
        self._on_change = on_change
        self._snapshot = self.take_snapshot()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="safedelete-watcher", daemon=True
        )
        self._thread.start()
        logger.debug("Watching %d directories for changes", len(self._directories))

    def stop(self) -> None:
        """Stop the polling thread and wait for it to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=max(self.poll_interval * 2, 1.0))
            self._thread = None

    def take_snapshot(self) -> dict[str, float]:
        """Take a snapshot of modification times below the watched directories."""
        snapshot: dict[str, float] = {}
        for directory in self._directories:
            for root, dirs, files in os.walk(directory):
                for name in dirs + files:
                    path = os.path.join(root, name)
                    try:
                        snapshot[path] = os.lstat(path).st_mtime
                    except OSError:
                        # Removed between listing and stat
                        continue
        return snapshot

    def poll_once(self) -> list[str]:
        """Compare a fresh snapshot with the previous one and report changes.

        Returns:
            Paths that were added, modified or removed since the last poll.
        """
        current = self.take_snapshot()
        changed = detect_changes(self._snapshot, current)
        self._snapshot = current

        if self._on_change is not None:
            for path in changed:
                try:
                    self._on_change(path)
                except Exception:
                    logger.exception("Change callback failed for %s", path)
        return changed

    def _run(self) -> None:
        while not self._stop_event.wait(self.poll_interval):
            try:
                self.poll_once()
            except OSError as e:
                logger.warning("Polling for changes failed: %s", e)


def detect_changes(old: dict[str, float], new: dict[str, float]) -> list[str]:
    """Detect which paths changed between two snapshots."""
    changed = [path for path, mtime in new.items() if old.get(path) != mtime]
    changed.extend(path for path in old if path not in new)
    return changed
