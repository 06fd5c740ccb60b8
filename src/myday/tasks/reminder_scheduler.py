# src/myday/tasks/reminder_scheduler.py

"""
Reminder scheduler.

A small polling loop that:
- looks at active tasks with a reminder time,
- fires each reminder once, the first time "now >= reminder_time" becomes true
  after the poller started,
- hands the notification to an injected notifier port.

Reminders already in the past when the poller starts are never fired, so a
restart does not flood the user. Delivery (desktop toast, log line, ...) belongs
to the notifier, not the scheduler.
"""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Callable
from datetime import datetime

from ..core.calendar_day import local_now, to_iso
from ..core.ports import ReminderNotifier
from .task_models import Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_DEDUP_CAP = 100


class ReminderService:
    def __init__(
        self,
        task_store: TaskStore,
        *,
        dedup_cap: int = DEFAULT_DEDUP_CAP,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._tasks = task_store
        self._cap = max(1, int(dedup_cap))
        self._clock = clock
        self._notified: OrderedDict[tuple[str, str], None] = OrderedDict()
        self._last_check: datetime | None = None

    @property
    def running(self) -> bool:
        return self._last_check is not None

    def start(self) -> None:
        # Anything due before this instant is considered stale.
        self._last_check = self._clock()
        logger.info("Reminder service started")

    def stop(self) -> None:
        if self._last_check is None:
            return
        self._last_check = None
        logger.info("Reminder service stopped")

    def _remember(self, key: tuple[str, str]) -> None:
        self._notified[key] = None
        while len(self._notified) > self._cap:
            self._notified.popitem(last=False)

    def check(self) -> list[Task]:
        """Return tasks whose reminder became due since the previous check, marking them notified."""
        if self._last_check is None:
            logger.debug("Reminder check skipped: service not started")
            return []

        now = self._clock()
        due: list[Task] = []
        for task in self._tasks.active_tasks():
            reminder = task.reminder_time
            if reminder is None:
                continue
            key = (task.id, to_iso(reminder) or "")
            if now >= reminder and key not in self._notified and reminder >= self._last_check:
                due.append(task)
                self._remember(key)

        self._last_check = now
        return due

    def clear_notified(self, task_id: str) -> None:
        for key in [k for k in self._notified if k[0] == task_id]:
            del self._notified[key]

    def clear_all_notified(self) -> None:
        self._notified.clear()


async def run_reminder_scheduler(
        service: ReminderService,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 30.0,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds:
    - ask the service which reminders became due
    - send each via notifier.notify_reminder(...)
      On failure: log and move on (the task store is never touched)

    To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    service.start()

    try:
        while True:
            await asyncio.sleep(sleep_s)

            try:
                due = service.check()
            except Exception:
                logger.exception("reminder check failed")
                due = []

            for task in due:
                try:
                    await notifier.notify_reminder(task_id=task.id, content=task.content)
                    logger.info("Reminder fired task_id=%s", task.id)
                except Exception:
                    logger.exception("reminder notification failed task_id=%s", task.id)
    finally:
        service.stop()
