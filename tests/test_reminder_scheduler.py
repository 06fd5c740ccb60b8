# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from myday.tasks.reminder_scheduler import ReminderService, run_reminder_scheduler
from myday.tasks.task_store import TaskStore

from .fakes import FakeClock, FakeNotifier


def _service(task_store: TaskStore, clock: FakeClock, cap: int = 100) -> ReminderService:
    return ReminderService(task_store, dedup_cap=cap, clock=clock)


def test_reminder_fires_once_when_it_comes_due(task_store: TaskStore, clock: FakeClock) -> None:
    t = task_store.add_task("Stand-up")
    task_store.set_reminder(t.id, clock.now + timedelta(minutes=1))
    service = _service(task_store, clock)
    service.start()

    clock.advance(seconds=30)
    assert service.check() == []

    clock.advance(seconds=60)
    assert service.check() == [t]

    clock.advance(seconds=30)
    assert service.check() == []


def test_reminders_past_at_start_are_never_fired(task_store: TaskStore, clock: FakeClock) -> None:
    t = task_store.add_task("Missed")
    task_store.set_reminder(t.id, clock.now - timedelta(minutes=5))
    service = _service(task_store, clock)
    service.start()

    clock.advance(seconds=30)
    assert service.check() == []


def test_rescheduled_reminder_fires_again(task_store: TaskStore, clock: FakeClock) -> None:
    t = task_store.add_task("Water")
    task_store.set_reminder(t.id, clock.now + timedelta(seconds=10))
    service = _service(task_store, clock)
    service.start()
    clock.advance(seconds=30)
    assert service.check() == [t]

    task_store.set_reminder(t.id, clock.now + timedelta(seconds=10))
    clock.advance(seconds=30)
    assert service.check() == [t]


def test_completed_tasks_and_stopped_service_do_not_fire(task_store: TaskStore, clock: FakeClock) -> None:
    t = task_store.add_task("Done already")
    task_store.set_reminder(t.id, clock.now + timedelta(seconds=5))
    task_store.toggle_completed(t.id)
    service = _service(task_store, clock)

    assert service.check() == []
    service.start()
    clock.advance(seconds=30)
    assert service.check() == []
    service.stop()
    assert service.running is False


def test_dedup_memory_is_capped(task_store: TaskStore, clock: FakeClock) -> None:
    service = _service(task_store, clock, cap=2)
    service.start()
    tasks = [task_store.add_task(f"t{i}") for i in range(3)]
    for t in tasks:
        task_store.set_reminder(t.id, clock.now + timedelta(seconds=1))
    clock.advance(seconds=2)

    assert len(service.check()) == 3
    assert len(service._notified) == 2

    service.clear_notified(tasks[-1].id)
    service.clear_all_notified()
    assert len(service._notified) == 0


@pytest.mark.asyncio
async def test_scheduler_notifies_due_reminder(task_store: TaskStore, clock: FakeClock) -> None:
    t = task_store.add_task("ping")
    task_store.set_reminder(t.id, clock.now + timedelta(minutes=1))
    service = _service(task_store, clock)
    notifier = FakeNotifier()

    runner = asyncio.create_task(run_reminder_scheduler(service, notifier, interval_seconds=0.01))
    await asyncio.sleep(0)
    assert service.running

    clock.advance(minutes=2)
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert [(f.task_id, f.content) for f in notifier.fired] == [(t.id, "ping")]
    assert service.running is False


@pytest.mark.asyncio
async def test_notifier_failure_is_logged_and_loop_continues(task_store: TaskStore, clock: FakeClock) -> None:
    bad = task_store.add_task("bad")
    good = task_store.add_task("good")
    for t in (bad, good):
        task_store.set_reminder(t.id, clock.now + timedelta(seconds=1))
    service = _service(task_store, clock)
    notifier = FakeNotifier(fail_for={bad.id})

    runner = asyncio.create_task(run_reminder_scheduler(service, notifier, interval_seconds=0.01))
    await asyncio.sleep(0)
    clock.advance(seconds=5)
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert [f.task_id for f in notifier.fired] == [good.id]
    assert bad.reminder_time is not None


def test_reminder_given_as_text_override_still_fires(task_store: TaskStore, clock: FakeClock) -> None:
    service = _service(task_store, clock)
    service.start()
    t = task_store.add_task("Dentist", reminder_time=(clock.now + timedelta(minutes=1)).isoformat())

    clock.advance(minutes=2)
    assert service.check() == [t]
