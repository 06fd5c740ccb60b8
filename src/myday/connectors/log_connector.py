# src/myday/connectors/log_connector.py

"""
Log-only connector: reminders and badge updates end up as log lines.

Used by the headless daemon and as the default when no desktop integration
is wired in.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class LoggingReminderNotifier:
    async def notify_reminder(self, *, task_id: str, content: str) -> None:
        logger.info("Reminder: %s (task %s)", content or "(untitled)", task_id)


class LoggingBadgeSink:
    def set_badge_count(self, count: int) -> None:
        label = "99+" if count > 99 else str(count)
        logger.info("Badge count: %s", label)
