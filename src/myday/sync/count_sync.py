# src/myday/sync/count_sync.py

"""
Count synchronizer.

Recomputes every list badge count from scratch whenever the task collection
(or the set of user lists) changes, and writes the values into the ListStore.
Neither store knows about the other; this module is the only link.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..lists.list_models import SystemListId
from ..lists.list_store import ListStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


class CountSynchronizer:
    def __init__(self, task_store: TaskStore, list_store: ListStore) -> None:
        self._tasks = task_store
        self._lists = list_store
        self._unsubscribers: list[Callable[[], None]] = []

    def attach(self) -> None:
        """Subscribe to both stores and run the initial pass."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self._tasks.subscribe(self.recompute),
            self._lists.subscribe(self.recompute),
        ]
        self.recompute()

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def system_counts(self) -> dict[SystemListId, int]:
        tasks = self._tasks
        return {
            SystemListId.MY_DAY: len(tasks.my_day_tasks()),
            SystemListId.IMPORTANT: len(tasks.important_tasks()),
            SystemListId.PLANNED: len(tasks.planned_tasks()),
            SystemListId.TASKS: len(tasks.default_list_tasks()),
            SystemListId.COMPLETED: len(tasks.completed_tasks()),
            # "All" counts active tasks only, matching the list's historical behaviour.
            SystemListId.ALL: len(tasks.active_tasks()),
        }

    def recompute(self) -> None:
        for list_id, count in self.system_counts().items():
            self._lists.update_system_list_count(list_id, count)

        for lst in self._lists.user_lists:
            self._lists.update_user_list_count(lst.id, len(self._tasks.tasks_by_list(lst.id)))

        logger.debug("List counts recomputed")
