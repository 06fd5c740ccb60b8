# src/myday/tasks/recurrence.py

"""
Recurrence engine.

Given a completed recurring task, compute the date of its next occurrence and
build the successor task. Dates are handled as local-midnight datetimes.

Catch-up: the single step is re-applied while the result is still before
today's local midnight, so a successor never lands in the past even if several
occurrences were missed while the app was not running.
"""

from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta

from ..core.calendar_day import (
    is_weekend,
    js_weekday,
    local_midnight,
    local_now,
    today_midnight,
    week_start,
)
from .task_models import RecurrenceRule, RecurrenceType, SubTask, Task, new_id

logger = logging.getLogger(__name__)


def _add_months(d: datetime, months: int, day: int) -> datetime:
    """Move d by `months` calendar months, landing on `day` clamped to the month length."""
    idx = d.month - 1 + months
    year = d.year + idx // 12
    month = idx % 12 + 1
    last = calendar.monthrange(year, month)[1]
    return d.replace(year=year, month=month, day=min(day, last))


def _add_years(d: datetime, years: int, day: int) -> datetime:
    year = d.year + years
    last = calendar.monthrange(year, d.month)[1]
    return d.replace(year=year, day=min(day, last))


def step(d: datetime, rule: RecurrenceRule, *, day_of_month: int | None = None) -> datetime:
    """Single-step advance from d according to rule."""
    interval = max(1, rule.interval or 1)
    kind = rule.type

    if kind == RecurrenceType.DAILY:
        return d + timedelta(days=interval)

    if kind == RecurrenceType.WEEKDAYS:
        nxt = d + timedelta(days=1)
        while is_weekend(nxt):
            nxt += timedelta(days=1)
        return nxt

    if kind == RecurrenceType.WEEKLY:
        days = rule.days_of_week or []
        if not days:
            return d + timedelta(days=7 * interval)
        start = week_start(d)
        current = js_weekday(d)
        later = [wd for wd in days if wd > current]
        if later:
            return start + timedelta(days=later[0])
        return start + timedelta(days=7 * interval + days[0])

    if kind == RecurrenceType.MONTHLY:
        target = day_of_month or rule.day_of_month or d.day
        return _add_months(d, interval, target)

    if kind == RecurrenceType.YEARLY:
        return _add_years(d, interval, day_of_month or d.day)

    # Unknown rule types degrade to a single-day advance.
    return d + timedelta(days=1)


def anchor_date(task: Task) -> datetime:
    return local_midnight(task.planned_date or task.created_at)


def next_occurrence(anchor: datetime, rule: RecurrenceRule, *, now: datetime | None = None) -> datetime:
    """
    Next occurrence strictly after anchor and not before today's local midnight.
    """
    anchor = local_midnight(anchor)
    today = today_midnight(now)

    # Pin the target day so 31st-of-month and 29 February rules do not drift
    # after a short month or a non-leap year.
    pinned_day = None
    if rule.type == RecurrenceType.MONTHLY:
        pinned_day = rule.day_of_month or anchor.day
    elif rule.type == RecurrenceType.YEARLY:
        pinned_day = anchor.day

    nxt = step(anchor, rule, day_of_month=pinned_day)
    iterations = 1
    while nxt < today:
        nxt = step(nxt, rule, day_of_month=pinned_day)
        iterations += 1

    if iterations > 1:
        logger.debug("Recurrence catch-up: %d steps from %s to %s", iterations, anchor.date(), nxt.date())
    return nxt


def initial_planned_date(rule: RecurrenceRule, *, now: datetime | None = None) -> datetime:
    """
    Planned date synthesized when a rule is attached to an unscheduled task.

    - weekdays: today, rolled forward past Saturday/Sunday
    - weekly with explicit weekdays: earliest listed weekday within the next
      `interval` weeks, today included
    - anything else: today
    """
    today = today_midnight(now)

    if rule.type == RecurrenceType.WEEKDAYS:
        while is_weekend(today):
            today += timedelta(days=1)
        return today

    if rule.type == RecurrenceType.WEEKLY and rule.days_of_week:
        for offset in range(7 * max(1, rule.interval)):
            candidate = today + timedelta(days=offset)
            if js_weekday(candidate) in rule.days_of_week:
                return candidate

    return today


def build_successor(completed: Task, *, now: datetime | None = None) -> Task | None:
    """
    Successor for a completed recurring task.

    Carries content, importance, note, list and a copy of the rule; steps are
    cloned unchecked with fresh ids; My Day membership and reminder are dropped.
    """
    rule = completed.recurrence
    if rule is None:
        return None

    planned = next_occurrence(anchor_date(completed), rule, now=now)
    return Task(
        id=new_id(),
        content=completed.content,
        created_at=now or local_now(),
        is_important=completed.is_important,
        planned_date=planned,
        recurrence=rule.copy(),
        note=completed.note,
        list_id=completed.list_id,
        steps=[SubTask(id=new_id(), content=s.content, is_completed=False) for s in completed.steps],
    )
