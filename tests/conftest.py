# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from myday.lists.list_store import ListStore
from myday.tasks.task_store import TaskStore

from .fakes import FakeClock

# Wednesday, mid-morning.
NOW = datetime(2024, 3, 6, 10, 0, 0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def task_store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock=clock)


@pytest.fixture()
def list_store() -> ListStore:
    return ListStore()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="myday-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        snapshot_backend="sqlite",
        snapshot_db_path=tmp_path / "myday.sqlite3",
        snapshot_json_path=tmp_path / "snapshot.json",
        reminders_enabled=True,
        reminder_interval_seconds=0.01,
        reminder_dedup_cap=100,
    )
