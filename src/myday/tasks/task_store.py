# src/myday/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from ..core.calendar_day import Timestamp, is_today, local_midnight, local_now, to_local
from ..core.events import ChangeNotifier
from .recurrence import build_successor, initial_planned_date
from .task_models import DEFAULT_TASKS_LIST_ID, RecurrenceRule, SubTask, Task, new_id

logger = logging.getLogger(__name__)

# Fields a caller may set through overrides / update_task. id and created_at are immutable.
_MUTABLE_FIELDS = frozenset(
    {
        "content",
        "is_completed",
        "is_important",
        "my_day_date",
        "planned_date",
        "reminder_time",
        "recurrence",
        "note",
        "list_id",
        "steps",
        "completed_at",
    }
)


class TaskStore:
    """
    In-memory task collection, most-recent-first.

    Contract:
    - every mutation is synchronous; subscribers are notified after it commits
    - lookups by id that miss are silent no-ops (the UI may race a delete)
    - derived views are recomputed on every call, never cached
    """

    def __init__(self, *, clock: Callable[[], datetime] = local_now) -> None:
        self._clock = clock
        self._tasks: list[Task] = []
        self._changes = ChangeNotifier("TaskStore")

    # ---- low-level helpers ----

    def _now(self) -> datetime:
        return self._clock()

    def _find(self, task_id: str) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        logger.debug("Task %s not found; ignoring", task_id)
        return None

    @staticmethod
    def _normalize_field(name: str, value: Any) -> Any:
        """Coerce a caller-supplied value to the type the Task field holds."""
        if value is None:
            return None
        if name in ("my_day_date", "reminder_time", "completed_at"):
            return to_local(value)
        if name == "planned_date":
            return local_midnight(value)
        if name == "recurrence" and not isinstance(value, RecurrenceRule):
            return RecurrenceRule.from_dict(value)
        if name == "steps":
            return [s if isinstance(s, SubTask) else SubTask.from_dict(s) for s in value]
        return value

    @classmethod
    def _apply_fields(cls, task: Task, fields: dict[str, Any]) -> None:
        """Raises ValueError for an unparseable date; the task is then left unchanged."""
        updates: dict[str, Any] = {}
        for name, value in fields.items():
            if name not in _MUTABLE_FIELDS:
                logger.warning("Ignoring unknown/immutable task field %r", name)
                continue
            updates[name] = cls._normalize_field(name, value)
        for name, value in updates.items():
            setattr(task, name, value)

    def _changed(self) -> None:
        self._changes.publish()

    # ---- subscription / snapshot ----

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        return self._changes.subscribe(listener)

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    def get_task(self, task_id: str) -> Task | None:
        return self._find(task_id)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Swap in a whole collection (snapshot load)."""
        self._tasks = list(tasks)
        logger.info("TaskStore loaded total=%d", len(self._tasks))
        self._changed()

    # ---- creation ----

    def add_task(self, content: str, **overrides: Any) -> Task:
        task = Task(id=new_id(), content=content, created_at=self._now())
        self._apply_fields(task, overrides)
        self._tasks.insert(0, task)
        logger.debug("Task added id=%s list=%s", task.id, task.list_id)
        self._changed()
        return task

    def add_to_my_day(self, content: str, **overrides: Any) -> Task:
        return self.add_task(
            content, **{"my_day_date": self._now(), "list_id": DEFAULT_TASKS_LIST_ID, **overrides}
        )

    def add_important(self, content: str, **overrides: Any) -> Task:
        return self.add_task(
            content, **{"is_important": True, "list_id": DEFAULT_TASKS_LIST_ID, **overrides}
        )

    def add_planned(self, content: str, date: Timestamp | None = None, **overrides: Any) -> Task:
        planned = local_midnight(date if date is not None else self._now())
        return self.add_task(
            content, **{"planned_date": planned, "list_id": DEFAULT_TASKS_LIST_ID, **overrides}
        )

    def add_to_list(self, content: str, list_id: str, **overrides: Any) -> Task:
        return self.add_task(content, **{"list_id": list_id, **overrides})

    # ---- task-level mutations ----

    def toggle_completed(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is None:
            return

        task.is_completed = not task.is_completed
        task.completed_at = self._now() if task.is_completed else None

        if task.is_completed and task.recurrence is not None:
            successor = build_successor(task, now=self._now())
            if successor is not None:
                self._tasks.insert(0, successor)
                logger.info(
                    "Recurring task %s completed; successor %s planned for %s",
                    task.id,
                    successor.id,
                    successor.planned_date.date() if successor.planned_date else None,
                )
        self._changed()

    def toggle_important(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is None:
            return
        task.is_important = not task.is_important
        self._changed()

    def toggle_my_day(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is None:
            return
        now = self._now()
        task.my_day_date = None if is_today(task.my_day_date, now) else now
        self._changed()

    def update_task(self, task_id: str, **fields: Any) -> None:
        task = self._find(task_id)
        if task is None:
            return
        self._apply_fields(task, fields)
        self._changed()

    def update_note(self, task_id: str, note: str) -> None:
        self.update_task(task_id, note=note)

    def move_to_list(self, task_id: str, list_id: str) -> None:
        self.update_task(task_id, list_id=list_id)

    def set_scheduled_date(self, task_id: str, date: Timestamp) -> None:
        task = self._find(task_id)
        if task is None:
            return
        task.planned_date = local_midnight(date)
        self._changed()

    def clear_scheduled_date(self, task_id: str) -> None:
        # A recurrence without an anchor date is meaningless; drop both.
        task = self._find(task_id)
        if task is None:
            return
        task.planned_date = None
        task.recurrence = None
        self._changed()

    def set_reminder(self, task_id: str, reminder_time: Timestamp) -> None:
        task = self._find(task_id)
        if task is None:
            return
        task.reminder_time = to_local(reminder_time)
        self._changed()

    def clear_reminder(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is None:
            return
        task.reminder_time = None
        self._changed()

    def set_recurrence(self, task_id: str, rule: RecurrenceRule | None) -> None:
        task = self._find(task_id)
        if task is None:
            return
        task.recurrence = rule
        if rule is not None and task.planned_date is None:
            task.planned_date = initial_planned_date(rule, now=self._now())
        self._changed()

    def delete_task(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is None:
            return
        self._tasks.remove(task)
        logger.debug("Task deleted id=%s", task_id)
        self._changed()

    # ---- steps ----

    @staticmethod
    def _find_step(task: Task, step_id: str) -> SubTask | None:
        for s in task.steps:
            if s.id == step_id:
                return s
        return None

    def add_step(self, task_id: str, content: str) -> SubTask | None:
        task = self._find(task_id)
        if task is None:
            return None
        step = SubTask(id=new_id(), content=content)
        task.steps.append(step)
        self._changed()
        return step

    def toggle_step(self, task_id: str, step_id: str) -> None:
        task = self._find(task_id)
        step = self._find_step(task, step_id) if task else None
        if step is None:
            return
        step.is_completed = not step.is_completed
        self._changed()

    def update_step(self, task_id: str, step_id: str, content: str) -> None:
        task = self._find(task_id)
        step = self._find_step(task, step_id) if task else None
        if step is None:
            return
        step.content = content
        self._changed()

    def delete_step(self, task_id: str, step_id: str) -> None:
        task = self._find(task_id)
        step = self._find_step(task, step_id) if task else None
        if task is None or step is None:
            return
        task.steps.remove(step)
        self._changed()

    def reorder_steps(self, task_id: str, steps: Iterable[SubTask]) -> None:
        task = self._find(task_id)
        if task is None:
            return
        task.steps = list(steps)
        self._changed()

    def promote_step(self, task_id: str, step_id: str) -> Task | None:
        """Detach a step into a new task in the parent's list."""
        task = self._find(task_id)
        step = self._find_step(task, step_id) if task else None
        if task is None or step is None:
            return None
        promoted = Task(id=new_id(), content=step.content, created_at=self._now(), list_id=task.list_id)
        task.steps.remove(step)
        self._tasks.insert(0, promoted)
        logger.debug("Step %s promoted to task %s", step_id, promoted.id)
        self._changed()
        return promoted

    def get_steps_progress(self, task_id: str) -> tuple[int, int]:
        """(completed, total) steps of a task; (0, 0) when missing or empty."""
        task = self._find(task_id)
        if task is None or not task.steps:
            return 0, 0
        return sum(1 for s in task.steps if s.is_completed), len(task.steps)

    # ---- derived views ----

    def active_tasks(self) -> list[Task]:
        return [t for t in self._tasks if not t.is_completed]

    def my_day_tasks(self) -> list[Task]:
        now = self._now()
        return [t for t in self._tasks if not t.is_completed and is_today(t.my_day_date, now)]

    def important_tasks(self) -> list[Task]:
        return [t for t in self._tasks if not t.is_completed and t.is_important]

    def planned_tasks(self) -> list[Task]:
        return [t for t in self._tasks if not t.is_completed and t.planned_date is not None]

    def default_list_tasks(self) -> list[Task]:
        return self.tasks_by_list(DEFAULT_TASKS_LIST_ID)

    def completed_tasks(self) -> list[Task]:
        return [t for t in self._tasks if t.is_completed]

    def all_tasks(self) -> list[Task]:
        return list(self._tasks)

    def tasks_by_list(self, list_id: str) -> list[Task]:
        return [t for t in self._tasks if not t.is_completed and t.list_id == list_id]
