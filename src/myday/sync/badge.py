# src/myday/sync/badge.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.ports import BadgeSink
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def badge_count(task_store: TaskStore) -> int:
    """Number of distinct active tasks that are in My Day or Important (union, not sum)."""
    ids = {t.id for t in task_store.my_day_tasks()}
    ids.update(t.id for t in task_store.important_tasks())
    return len(ids)


class BadgeTracker:
    """
    Push the badge integer to a sink whenever it changes.

    The initial value is pushed on attach; afterwards only changes are sent.
    Rendering is entirely the sink's business.
    """

    def __init__(self, task_store: TaskStore, sink: BadgeSink) -> None:
        self._tasks = task_store
        self._sink = sink
        self._last: int | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def last_count(self) -> int | None:
        return self._last

    def attach(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._tasks.subscribe(self.refresh)
        self.refresh()

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def refresh(self) -> None:
        count = badge_count(self._tasks)
        if count == self._last:
            return
        self._last = count
        try:
            self._sink.set_badge_count(count)
        except Exception:
            logger.exception("Failed to update badge count to %s", count)
