# src/myday/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (stores/sync/reminders/persistence),
- loads the stored snapshot and turns on write-through saving.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..config import get_settings
from ..connectors.log_connector import LoggingBadgeSink
from ..core.calendar_day import local_now
from ..core.ports import BadgeSink, SnapshotRepo
from ..core.state import AppState
from ..lists.list_store import ListStore
from ..storage.snapshot import SnapshotWriter, load_snapshot, save_snapshot
from ..storage.snapshot_store import JsonSnapshotStore, SqliteSnapshotStore
from ..sync.badge import BadgeTracker
from ..sync.count_sync import CountSynchronizer
from ..tasks.reminder_scheduler import ReminderService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.snapshot_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.snapshot_json_path.parent.mkdir(parents=True, exist_ok=True)


def create_snapshot_repo(settings) -> SnapshotRepo:
    if getattr(settings, "snapshot_backend", "sqlite") == "json":
        return JsonSnapshotStore(settings.snapshot_json_path)
    return SqliteSnapshotStore(settings.snapshot_db_path)


def create_initial_state(
    *,
    settings=None,
    snapshot_repo: SnapshotRepo | None = None,
    badge_sink: BadgeSink | None = None,
    clock: Callable[[], datetime] = local_now,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and collaborators) injectable makes the app easier to
    test and avoids hidden global config reads. If settings is None, falls back
    to get_settings(). Nothing is loaded or attached yet; see start_state().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore(clock=clock)
    list_store = ListStore()

    return AppState(
        settings=settings,
        task_store=task_store,
        list_store=list_store,
        counts=CountSynchronizer(task_store, list_store),
        badge=BadgeTracker(task_store, badge_sink or LoggingBadgeSink()),
        reminders=ReminderService(
            task_store,
            dedup_cap=getattr(settings, "reminder_dedup_cap", 100),
            clock=clock,
        ),
        snapshot_repo=snapshot_repo or create_snapshot_repo(settings),
    )


def start_state(state: AppState) -> bool:
    """
    Load stored data, then attach derived-state listeners and write-through saving.

    Listeners are attached after the load so loading does not write back the
    snapshot it just read. Returns True if stored data was applied.
    """
    loaded = load_snapshot(state.snapshot_repo, state.task_store, state.list_store)

    state.counts.attach()
    state.badge.attach()

    writer = SnapshotWriter(state.snapshot_repo, state.task_store, state.list_store)
    state.detach_hooks.append(state.task_store.subscribe(writer.request))
    state.detach_hooks.append(state.list_store.subscribe(writer.request))

    logger.info(
        "State ready tasks=%d user_lists=%d",
        state.task_store.count_tasks(),
        len(state.list_store.user_lists),
    )
    return loaded


def stop_state(state: AppState) -> None:
    """Detach listeners and write a final snapshot (best-effort)."""
    for detach in state.detach_hooks:
        detach()
    state.detach_hooks.clear()
    state.badge.detach()
    state.counts.detach()
    save_snapshot(state.snapshot_repo, state.task_store, state.list_store)
