# tests/test_recurrence.py

from __future__ import annotations

from datetime import datetime

import pytest

from myday.tasks.recurrence import build_successor, initial_planned_date, next_occurrence, step
from myday.tasks.task_models import RecurrenceRule, RecurrenceType, SubTask, Task

from .conftest import NOW


def rule(kind: str, **kwargs) -> RecurrenceRule:
    return RecurrenceRule(type=RecurrenceType(kind), **kwargs)


@pytest.mark.parametrize(
    ("start", "r", "expected"),
    [
        (datetime(2024, 3, 6), rule("daily"), datetime(2024, 3, 7)),
        (datetime(2024, 3, 6), rule("daily", interval=3), datetime(2024, 3, 9)),
        # Friday -> Monday, interval ignored
        (datetime(2024, 3, 8), rule("weekdays", interval=5), datetime(2024, 3, 11)),
        (datetime(2024, 3, 6), rule("weekly", interval=2), datetime(2024, 3, 20)),
        # Wed with Mon+Wed listed: nothing later this week -> Monday of next week
        (datetime(2024, 3, 6), rule("weekly", days_of_week=[1, 3]), datetime(2024, 3, 11)),
        # Mon with Mon+Wed listed -> Wednesday of the same week
        (datetime(2024, 3, 11), rule("weekly", days_of_week=[3, 1]), datetime(2024, 3, 13)),
        # every other week on Monday
        (datetime(2024, 3, 11), rule("weekly", interval=2, days_of_week=[1]), datetime(2024, 3, 25)),
        (datetime(2024, 3, 1), rule("monthly"), datetime(2024, 4, 1)),
        (datetime(2024, 1, 31), rule("monthly"), datetime(2024, 2, 29)),
        (datetime(2024, 11, 15), rule("monthly", interval=3), datetime(2025, 2, 15)),
        (datetime(2024, 2, 29), rule("yearly"), datetime(2025, 2, 28)),
    ],
)
def test_single_step(start: datetime, r: RecurrenceRule, expected: datetime) -> None:
    assert step(start, r) == expected


def test_catch_up_daily_lands_on_today() -> None:
    # Anchor five days in the past: four steps are still in the past, the fifth is today.
    result = next_occurrence(datetime(2024, 3, 1), rule("daily"), now=NOW)
    assert result == datetime(2024, 3, 6)


def test_catch_up_respects_interval_boundaries() -> None:
    result = next_occurrence(datetime(2024, 2, 28), rule("daily", interval=3), now=NOW)
    # 03-02 and 03-05 are in the past; 03-08 is the next valid boundary.
    assert result == datetime(2024, 3, 8)


def test_future_anchor_steps_once() -> None:
    result = next_occurrence(datetime(2024, 6, 10), rule("daily"), now=NOW)
    assert result == datetime(2024, 6, 11)


def test_monthly_scenario_pay_rent() -> None:
    r = rule("monthly")
    assert next_occurrence(datetime(2024, 3, 1), r, now=NOW) == datetime(2024, 4, 1)
    assert next_occurrence(datetime(2024, 3, 1), r, now=datetime(2024, 5, 15, 9)) == datetime(2024, 6, 1)


def test_monthly_catch_up_does_not_drift_after_short_month() -> None:
    # Feb 29 is in the past, next is Mar 31 (not Mar 29).
    assert next_occurrence(datetime(2024, 1, 31), rule("monthly"), now=NOW) == datetime(2024, 3, 31)


def test_yearly_leap_day_returns_after_catch_up() -> None:
    r = rule("yearly")
    assert next_occurrence(datetime(2020, 2, 29), r, now=datetime(2024, 1, 10)) == datetime(2024, 2, 29)
    assert next_occurrence(datetime(2020, 2, 29), r, now=datetime(2022, 1, 10)) == datetime(2022, 2, 28)


def test_monthly_uses_explicit_day_of_month() -> None:
    r = rule("monthly", day_of_month=15)
    assert next_occurrence(datetime(2024, 3, 1), r, now=NOW) == datetime(2024, 4, 15)


def test_unknown_type_degrades_to_daily() -> None:
    assert RecurrenceType.from_raw("fortnightly") == RecurrenceType.DAILY
    r = RecurrenceRule.from_dict({"type": "fortnightly"})
    assert r is not None
    assert step(datetime(2024, 3, 6), r) == datetime(2024, 3, 7)


def test_rule_normalizes_interval_and_weekdays() -> None:
    r = RecurrenceRule(type=RecurrenceType.WEEKLY, interval=0, days_of_week=[5, 1, 1, 9])
    assert r.interval == 1
    assert r.days_of_week == [1, 5]


@pytest.mark.parametrize(
    ("now", "r", "expected"),
    [
        # Saturday / Sunday roll to Monday
        (datetime(2024, 3, 9, 8), rule("weekdays"), datetime(2024, 3, 11)),
        (datetime(2024, 3, 10, 8), rule("weekdays"), datetime(2024, 3, 11)),
        (NOW, rule("weekdays"), datetime(2024, 3, 6)),
        # Wednesday, Fridays only -> this Friday
        (NOW, rule("weekly", days_of_week=[5]), datetime(2024, 3, 8)),
        # today is listed -> today
        (NOW, rule("weekly", days_of_week=[3]), datetime(2024, 3, 6)),
        (NOW, rule("weekly"), datetime(2024, 3, 6)),
        (NOW, rule("monthly"), datetime(2024, 3, 6)),
    ],
)
def test_initial_planned_date(now: datetime, r: RecurrenceRule, expected: datetime) -> None:
    assert initial_planned_date(r, now=now) == expected


def test_build_successor_copies_content_and_resets_state() -> None:
    r = rule("weekly", days_of_week=[1, 3])
    done = Task(
        id="t1",
        content="Water plants",
        created_at=datetime(2024, 2, 1, 9),
        is_completed=True,
        is_important=True,
        my_day_date=NOW,
        planned_date=datetime(2024, 3, 6),
        reminder_time=datetime(2024, 3, 6, 9, 30),
        recurrence=r,
        note="balcony too",
        list_id="list-home",
        steps=[SubTask(id="s1", content="fill can", is_completed=True)],
        completed_at=NOW,
    )

    nxt = build_successor(done, now=NOW)

    assert nxt is not None
    assert nxt.id != done.id
    assert nxt.content == "Water plants"
    assert nxt.is_important is True
    assert nxt.note == "balcony too"
    assert nxt.list_id == "list-home"
    assert nxt.planned_date == datetime(2024, 3, 11)
    assert nxt.my_day_date is None
    assert nxt.reminder_time is None
    assert nxt.is_completed is False
    assert nxt.recurrence == r
    assert nxt.recurrence is not r
    assert nxt.recurrence.days_of_week is not r.days_of_week
    assert [(s.content, s.is_completed) for s in nxt.steps] == [("fill can", False)]
    assert nxt.steps[0].id != "s1"


def test_anchor_falls_back_to_created_at() -> None:
    done = Task(
        id="t1",
        content="Stretch",
        created_at=datetime(2024, 3, 6, 7, 45),
        recurrence=rule("daily"),
    )
    nxt = build_successor(done, now=NOW)
    assert nxt is not None
    assert nxt.planned_date == datetime(2024, 3, 7)
