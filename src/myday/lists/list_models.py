# src/myday/lists/list_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ThemeType(StrEnum):
    COLOR = "color"
    IMAGE = "image"


@dataclass(slots=True, frozen=True)
class ListTheme:
    type: ThemeType
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "value": self.value}

    @classmethod
    def from_dict(cls, raw: Any) -> ListTheme | None:
        if not isinstance(raw, dict) or not raw.get("value"):
            return None
        try:
            kind = ThemeType(str(raw.get("type") or "color"))
        except ValueError:
            kind = ThemeType.COLOR
        return cls(type=kind, value=str(raw["value"]))


def color(value: str) -> ListTheme:
    return ListTheme(type=ThemeType.COLOR, value=value)


class SystemListId(StrEnum):
    MY_DAY = "my-day"
    IMPORTANT = "important"
    PLANNED = "planned"
    TASKS = "tasks"
    COMPLETED = "completed"
    ALL = "all"


@dataclass(slots=True)
class SystemList:
    """One of the six fixed smart lists. Identity, name, icon and order never change."""

    id: SystemListId
    name: str
    icon: str
    order: int
    is_hidden: bool = False
    theme: ListTheme | None = None
    # None means "unknown" until the count synchronizer has run.
    count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.value,
            "name": self.name,
            "icon": self.icon,
            "order": self.order,
            "isHidden": self.is_hidden,
            "theme": self.theme.to_dict() if self.theme else None,
            "count": self.count,
            "type": "system",
        }


@dataclass(slots=True)
class UserList:
    id: str
    name: str
    order: int
    icon: str = "ListTodo"
    theme: ListTheme | None = None
    count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "order": self.order,
            "theme": self.theme.to_dict() if self.theme else None,
            "count": self.count,
            "type": "user",
        }


def default_system_lists() -> list[SystemList]:
    return [
        SystemList(SystemListId.MY_DAY, "My Day", "Sun", 0, theme=color("#F2E7F9")),
        SystemList(SystemListId.IMPORTANT, "Important", "Star", 1, theme=color("#FCE4EC")),
        SystemList(SystemListId.PLANNED, "Planned", "Calendar", 2, theme=color("#D5F1E5")),
        SystemList(SystemListId.TASKS, "Tasks", "ListTodo", 3, theme=color("#707E89")),
        SystemList(
            SystemListId.COMPLETED, "Completed", "CheckCircle", 4, is_hidden=True, theme=color("#C5524D")
        ),
        SystemList(SystemListId.ALL, "All", "List", 5, is_hidden=True, theme=color("#CA5474")),
    ]
