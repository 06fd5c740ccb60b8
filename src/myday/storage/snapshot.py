# src/myday/storage/snapshot.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..core.calendar_day import local_now
from ..core.ports import Snapshot, SnapshotRepo
from ..lists.list_store import ListStore
from ..tasks.task_store import TaskStore
from .migrations import migrate_system_lists, migrate_tasks, migrate_user_lists

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def build_snapshot(task_store: TaskStore, list_store: ListStore) -> Snapshot:
    return {
        "version": SNAPSHOT_VERSION,
        "tasks": [t.to_dict() for t in task_store.tasks],
        "systemLists": [lst.to_dict() for lst in list_store.system_lists],
        "userLists": [lst.to_dict() for lst in list_store.user_lists],
    }


def apply_snapshot(
    snapshot: Snapshot | None,
    task_store: TaskStore,
    list_store: ListStore,
    *,
    now: datetime | None = None,
) -> None:
    """
    Migrate and install a snapshot. Raises on malformed data; callers at the
    load boundary decide what to do about it (see load_snapshot).
    """
    now = now or local_now()
    snapshot = snapshot or {}
    if not isinstance(snapshot, dict):
        raise ValueError(f"snapshot must be an object, got {type(snapshot).__name__}")

    tasks = migrate_tasks(_first_key(snapshot, "tasks", "todos"), now=now)
    system_settings = migrate_system_lists(_first_key(snapshot, "systemLists", "intelligentLists"))
    user_lists = migrate_user_lists(_first_key(snapshot, "userLists", "customLists"))

    list_store.restore(system_settings=system_settings, user_lists=user_lists)
    task_store.replace_all(tasks)


def _first_key(snapshot: Snapshot, *keys: str):
    for k in keys:
        if k in snapshot:
            return snapshot[k]
    return None


def load_snapshot(
    repo: SnapshotRepo,
    task_store: TaskStore,
    list_store: ListStore,
    *,
    now: datetime | None = None,
) -> bool:
    """
    Load, migrate and install stored state.

    Returns True if stored data was applied. Any failure (I/O, malformed data)
    falls back to an empty state instead of propagating.
    """
    try:
        raw = repo.load()
        if raw is None:
            logger.info("No stored snapshot; starting empty")
            apply_snapshot(None, task_store, list_store, now=now)
            return False
        apply_snapshot(raw, task_store, list_store, now=now)
        return True
    except Exception:
        logger.exception("Failed to load snapshot; starting from empty state")
        apply_snapshot(None, task_store, list_store, now=now)
        return False


def save_snapshot(repo: SnapshotRepo, task_store: TaskStore, list_store: ListStore) -> bool:
    """Best-effort save; failures are logged, never raised."""
    try:
        repo.save(build_snapshot(task_store, list_store))
        return True
    except Exception:
        logger.exception("Failed to save snapshot")
        return False


class SnapshotWriter:
    """
    Write-through saving hooked to store changes.

    Inside a running event loop the save is scheduled with call_soon, and any
    further requests before it runs are coalesced into that one save, so the
    mutating call returns without doing I/O. Without a running loop (tests,
    scripts) the save happens immediately.
    """

    def __init__(self, repo: SnapshotRepo, task_store: TaskStore, list_store: ListStore) -> None:
        self._repo = repo
        self._tasks = task_store
        self._lists = list_store
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def request(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return
        if self._pending:
            return
        self._pending = True
        loop.call_soon(self.flush)

    def flush(self) -> bool:
        self._pending = False
        return save_snapshot(self._repo, self._tasks, self._lists)
