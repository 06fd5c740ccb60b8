# tests/test_bootstrap.py

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest

from myday.cli.bootstrap import create_initial_state, create_snapshot_repo, start_state, stop_state
from myday.lists.list_store import DuplicateListNameError
from myday.storage.snapshot_store import JsonSnapshotStore, SqliteSnapshotStore

from .fakes import BrokenSnapshotRepo, FakeBadgeSink, FakeClock, MemorySnapshotRepo


def test_snapshot_backend_is_chosen_from_settings(settings: SimpleNamespace) -> None:
    assert isinstance(create_snapshot_repo(settings), SqliteSnapshotStore)
    settings.snapshot_backend = "json"
    assert isinstance(create_snapshot_repo(settings), JsonSnapshotStore)


def test_state_round_trips_through_sqlite(settings: SimpleNamespace, clock: FakeClock) -> None:
    state = create_initial_state(settings=settings, badge_sink=FakeBadgeSink(), clock=clock)
    assert start_state(state) is False

    groceries = state.list_store.add_list("Groceries")
    state.task_store.add_to_list("Eggs", groceries.id)
    state.task_store.add_to_my_day("Run")
    stop_state(state)

    again = create_initial_state(settings=settings, badge_sink=FakeBadgeSink(), clock=clock)
    assert start_state(again) is True

    assert [t.content for t in again.task_store.tasks] == ["Run", "Eggs"]
    [lst] = again.list_store.user_lists
    assert lst.name == "Groceries"
    assert lst.count == 1
    my_day = again.list_store.get_system_list("my-day")
    assert my_day is not None and my_day.count == 1


def test_mutations_are_written_through(settings: SimpleNamespace, clock: FakeClock) -> None:
    repo = MemorySnapshotRepo()
    sink = FakeBadgeSink()
    state = create_initial_state(settings=settings, snapshot_repo=repo, badge_sink=sink, clock=clock)
    start_state(state)
    assert repo.saves == 0

    t = state.task_store.add_important("Pay bills")
    state.list_store.add_list("Home")

    assert repo.saves == 2
    assert repo.stored is not None
    assert repo.stored["tasks"][0]["id"] == t.id
    # counts are fresh in the written snapshot
    assert repo.stored["systemLists"][1]["count"] == 1
    assert sink.counts == [0, 1]


def test_duplicate_list_name_surfaces_to_caller(settings: SimpleNamespace, clock: FakeClock) -> None:
    state = create_initial_state(settings=settings, snapshot_repo=MemorySnapshotRepo(), clock=clock)
    start_state(state)
    state.list_store.add_list("Same")
    with pytest.raises(DuplicateListNameError):
        state.list_store.add_list("Same")


def test_broken_storage_never_blocks_the_core(settings: SimpleNamespace, clock: FakeClock) -> None:
    state = create_initial_state(settings=settings, snapshot_repo=BrokenSnapshotRepo(), clock=clock)
    assert start_state(state) is False

    t = state.task_store.add_task("works without disk")
    assert state.task_store.get_task(t.id) is t
    tasks = state.list_store.get_system_list("tasks")
    assert tasks is not None and tasks.count == 1

    stop_state(state)


@pytest.mark.asyncio
async def test_saves_are_deferred_and_coalesced_inside_event_loop(
    settings: SimpleNamespace, clock: FakeClock
) -> None:
    repo = MemorySnapshotRepo()
    state = create_initial_state(settings=settings, snapshot_repo=repo, clock=clock)
    start_state(state)

    state.task_store.add_task("one")
    state.task_store.add_task("two")
    state.list_store.add_list("Home")
    assert repo.saves == 0

    await asyncio.sleep(0)

    assert repo.saves == 1
    assert repo.stored is not None
    assert [t["content"] for t in repo.stored["tasks"]] == ["two", "one"]
    assert [lst["name"] for lst in repo.stored["userLists"]] == ["Home"]

    stop_state(state)
    assert repo.saves == 2
