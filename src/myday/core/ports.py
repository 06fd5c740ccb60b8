# src/myday/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage/notification/badge rendering swappable and makes testing easier.
"""

from __future__ import annotations

from typing import Any, Awaitable, Protocol

Snapshot = dict[str, Any]
# Plain structured data: {"version": 1, "tasks": [...], "systemLists": [...], "userLists": [...]}.


class SnapshotRepo(Protocol):
    """Persistence collaborator: whole-state load/save."""

    def load(self) -> Snapshot | None: ...
    def save(self, snapshot: Snapshot) -> None: ...


class ReminderNotifier(Protocol):
    """
    Told "this task's reminder fired".

    How the notification is delivered (desktop toast, log line, chat message)
    is up to the implementation.
    """

    def notify_reminder(self, *, task_id: str, content: str) -> Awaitable[None]: ...


class BadgeSink(Protocol):
    """Consumes the badge integer; rendering is its own concern."""

    def set_badge_count(self, count: int) -> None: ...
