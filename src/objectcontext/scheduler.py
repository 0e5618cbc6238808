"""
Change-detection scheduler boundary.

Hosts usually run a periodic change-detection loop (a UI framework "digest",
a timer, a request hook). A context with auto-evaluation enabled registers a
watcher on that loop and evaluates whenever it ticks. This module defines the
small interface the context relies on plus an in-process implementation that
hosts can drive directly.
"""
import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class ChangeDetectionScheduler:
    """Minimal watch/tick loop.

    ``watch()`` returns an unwatch function, mirroring how UI frameworks hand
    back a deregistration handle for a watcher.
    """

    def __init__(self):
        self._watchers: List[Callable[[], None]] = []

    @property
    def watcher_count(self) -> int:
        return len(self._watchers)

    def watch(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run on every tick; returns its unwatch handle."""
        self._watchers.append(callback)

        def unwatch() -> None:
            if callback in self._watchers:
                self._watchers.remove(callback)

        return unwatch

    def tick(self) -> int:
        """Run every watcher once (best-effort); returns how many ran."""
        fired = 0
        for callback in list(self._watchers):
            try:
                callback()
                fired += 1
            except Exception as e:
                logger.warning(f"Change detection watcher failed: {e}")
        return fired
