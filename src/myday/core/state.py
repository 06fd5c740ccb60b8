# src/myday/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..lists.list_store import ListStore
from ..sync.badge import BadgeTracker
from ..sync.count_sync import CountSynchronizer
from ..tasks.reminder_scheduler import ReminderService
from ..tasks.task_store import TaskStore
from .ports import SnapshotRepo


@dataclass
class AppState:
    """
    Application context: one instance of each store/engine, wired at process start.

    Nothing in the core reaches for module-level singletons; whoever needs a
    store gets it from here.
    """

    # Store Settings on the state for easy access in other modules later.
    settings: Any

    task_store: TaskStore
    list_store: ListStore
    counts: CountSynchronizer
    badge: BadgeTracker
    reminders: ReminderService
    snapshot_repo: SnapshotRepo

    # Unsubscribe hooks registered by bootstrap (write-through persistence).
    detach_hooks: list[Callable[[], None]] = field(default_factory=list)
