# src/myday/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.calendar_day import local_now, to_iso, to_local

DEFAULT_TASKS_LIST_ID = "tasks"


def new_id() -> str:
    return str(uuid.uuid4())


class RecurrenceType(StrEnum):
    DAILY = "daily"
    WEEKDAYS = "weekdays"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def from_raw(cls, raw: str | None) -> RecurrenceType:
        if not raw:
            return cls.DAILY
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.DAILY


@dataclass(slots=True)
class RecurrenceRule:
    type: RecurrenceType
    interval: int = 1
    # Weekly only: weekday ordinals, 0=Sunday .. 6=Saturday.
    days_of_week: list[int] | None = None
    # Monthly only.
    day_of_month: int | None = None

    def __post_init__(self) -> None:
        self.type = RecurrenceType.from_raw(self.type)
        try:
            self.interval = max(1, int(self.interval or 1))
        except (TypeError, ValueError):
            self.interval = 1
        if self.days_of_week is not None:
            days = {int(d) for d in self.days_of_week if 0 <= int(d) <= 6}
            self.days_of_week = sorted(days)
        if self.day_of_month is not None:
            self.day_of_month = min(31, max(1, int(self.day_of_month)))

    def copy(self) -> RecurrenceRule:
        return RecurrenceRule(
            type=self.type,
            interval=self.interval,
            days_of_week=list(self.days_of_week) if self.days_of_week is not None else None,
            day_of_month=self.day_of_month,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type.value, "interval": self.interval}
        if self.days_of_week is not None:
            out["daysOfWeek"] = list(self.days_of_week)
        if self.day_of_month is not None:
            out["dayOfMonth"] = self.day_of_month
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | str | None) -> RecurrenceRule | None:
        if raw is None:
            return None
        # Earliest schema stored the bare type string.
        if isinstance(raw, str):
            return cls(type=RecurrenceType.from_raw(raw)) if raw.strip() else None
        if not isinstance(raw, dict):
            return None
        return cls(
            type=RecurrenceType.from_raw(raw.get("type")),
            interval=raw.get("interval") or 1,
            days_of_week=raw.get("daysOfWeek"),
            day_of_month=raw.get("dayOfMonth"),
        )


@dataclass(slots=True)
class SubTask:
    id: str
    content: str
    is_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "isCompleted": self.is_completed}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> SubTask:
        return cls(
            id=str(raw.get("id") or new_id()),
            content=str(raw.get("content") or raw.get("title") or ""),
            is_completed=bool(raw.get("isCompleted", raw.get("completed", False))),
        )


@dataclass(slots=True)
class Task:
    id: str
    content: str
    created_at: datetime
    is_completed: bool = False
    is_important: bool = False
    my_day_date: datetime | None = None
    planned_date: datetime | None = None
    reminder_time: datetime | None = None
    recurrence: RecurrenceRule | None = None
    note: str = ""
    list_id: str = DEFAULT_TASKS_LIST_ID
    steps: list[SubTask] = field(default_factory=list)
    completed_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return not self.is_completed

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "isCompleted": self.is_completed,
            "isImportant": self.is_important,
            "myDayDate": to_iso(self.my_day_date),
            "plannedDate": to_iso(self.planned_date),
            "reminderTime": to_iso(self.reminder_time),
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "note": self.note,
            "listId": self.list_id,
            "steps": [s.to_dict() for s in self.steps],
            "createdAt": to_iso(self.created_at),
            "completedAt": to_iso(self.completed_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any], *, now: datetime | None = None) -> Task:
        """Build a Task from a current-shape record, filling defaults for missing fields."""
        steps_raw = raw.get("steps") or []
        return cls(
            id=str(raw.get("id") or new_id()),
            content=str(raw.get("content") or ""),
            created_at=to_local(raw.get("createdAt")) or now or local_now(),
            is_completed=bool(raw.get("isCompleted") or False),
            is_important=bool(raw.get("isImportant") or False),
            my_day_date=to_local(raw.get("myDayDate")),
            planned_date=to_local(raw.get("plannedDate")),
            reminder_time=to_local(raw.get("reminderTime")),
            recurrence=RecurrenceRule.from_dict(raw.get("recurrence")),
            note=str(raw.get("note") or ""),
            list_id=str(raw.get("listId") or DEFAULT_TASKS_LIST_ID),
            steps=[SubTask.from_dict(s) for s in steps_raw if isinstance(s, dict)],
            completed_at=to_local(raw.get("completedAt")),
        )
