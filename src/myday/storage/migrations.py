# src/myday/storage/migrations.py

"""
Load-time format migration.

Older builds stored tasks with different field names and shapes:
- title/completed/important/myDay(bool)/dueDate/reminder/notes
- the first schema additionally used isDone, recurrenceRule (bare type string),
  myDay holding a date, and numeric ids
Every record is normalized to the current shape; missing fields get defaults.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..core.calendar_day import to_iso, to_local
from ..lists.list_models import ListTheme, UserList
from ..tasks.task_models import RecurrenceRule, Task

logger = logging.getLogger(__name__)

_LEGACY_TASK_KEYS = frozenset(
    {"title", "completed", "important", "myDay", "dueDate", "reminder", "notes", "isDone", "recurrenceRule"}
)

_DATE_KEYS = ("createdAt", "myDayDate", "plannedDate", "reminderTime", "completedAt")


def _first(*values: Any, default: Any = None) -> Any:
    for v in values:
        if v is not None:
            return v
    return default


def is_legacy_task(raw: dict[str, Any]) -> bool:
    return any(k in raw for k in _LEGACY_TASK_KEYS)


def migrate_task_record(raw: dict[str, Any], *, now: datetime) -> dict[str, Any]:
    """Return a current-shape record (camelCase keys) for raw."""
    if not is_legacy_task(raw):
        return dict(raw)

    my_day = raw.get("myDay")
    if my_day is True:
        my_day_date = to_iso(now)
    elif isinstance(my_day, str) and my_day.strip():
        my_day_date = my_day
    else:
        my_day_date = raw.get("myDayDate")

    out = dict(raw)
    out.update(
        {
            "content": raw.get("title") or raw.get("content") or "",
            "isCompleted": bool(_first(raw.get("completed"), raw.get("isDone"), raw.get("isCompleted"), default=False)),
            "isImportant": bool(_first(raw.get("important"), raw.get("isImportant"), default=False)),
            "myDayDate": my_day_date,
            "plannedDate": _first(raw.get("dueDate"), raw.get("plannedDate")),
            "reminderTime": _first(raw.get("reminder"), raw.get("reminderTime")),
            "recurrence": _first(raw.get("recurrence"), raw.get("recurrenceRule")),
            "note": _first(raw.get("note"), raw.get("notes"), default=""),
        }
    )
    for key in _LEGACY_TASK_KEYS:
        out.pop(key, None)
    return out


def _drop_bad_fields(record: dict[str, Any]) -> dict[str, Any]:
    out = dict(record)
    try:
        RecurrenceRule.from_dict(out.get("recurrence"))
    except (TypeError, ValueError):
        logger.warning("Task %s: dropping unreadable recurrence=%r", out.get("id"), out["recurrence"])
        out["recurrence"] = None
    for key in _DATE_KEYS:
        try:
            to_local(out.get(key))
        except (TypeError, ValueError):
            logger.warning("Task %s: dropping unparseable %s=%r", out.get("id"), key, out[key])
            out[key] = None
    return out


def _build_task(record: dict[str, Any], *, now: datetime) -> Task | None:
    """
    One record -> Task. A bad date or recurrence field is nulled instead of
    losing the whole record; a record that still fails is skipped.
    """
    try:
        return Task.from_dict(record, now=now)
    except (TypeError, ValueError):
        pass
    try:
        return Task.from_dict(_drop_bad_fields(record), now=now)
    except (TypeError, ValueError):
        logger.exception("Skipping unreadable task record id=%s", record.get("id"))
        return None


def migrate_tasks(records: Any, *, now: datetime) -> list[Task]:
    if not isinstance(records, list):
        return []

    tasks: list[Task] = []
    migrated = 0
    for raw in records:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object task record: %r", raw)
            continue
        if is_legacy_task(raw):
            migrated += 1
        task = _build_task(migrate_task_record(raw, now=now), now=now)
        if task is not None:
            tasks.append(task)

    if migrated:
        logger.info("Migrated %d legacy task records", migrated)
    return tasks


def migrate_system_lists(records: Any) -> dict[str, tuple[bool, ListTheme | None]]:
    """Persisted hidden flag and theme per system list id."""
    out: dict[str, tuple[bool, ListTheme | None]] = {}
    if not isinstance(records, list):
        return out
    for raw in records:
        if not isinstance(raw, dict) or not raw.get("id"):
            continue
        out[str(raw["id"])] = (bool(raw.get("isHidden") or False), ListTheme.from_dict(raw.get("theme")))
    return out


def migrate_user_lists(records: Any) -> list[UserList]:
    if not isinstance(records, list):
        return []

    lists: list[UserList] = []
    for index, raw in enumerate(records):
        if not isinstance(raw, dict):
            continue
        name = raw.get("name") or raw.get("title")
        if not name or raw.get("id") is None:
            logger.warning("Skipping user list without id/name: %r", raw)
            continue
        try:
            order = int(raw.get("order", index))
        except (TypeError, ValueError):
            order = index
        lists.append(
            UserList(
                id=str(raw["id"]),
                name=str(name),
                order=order,
                icon=str(raw.get("icon") or "ListTodo"),
                theme=ListTheme.from_dict(raw.get("theme")),
                count=0,
            )
        )
    return lists
