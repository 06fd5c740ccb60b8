# src/myday/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the stored snapshot, then runs the
reminder poller until SIGINT/SIGTERM. A final snapshot is written on the way out.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..config import get_settings
from ..connectors.log_connector import LoggingReminderNotifier
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.reminder_scheduler import run_reminder_scheduler
from .bootstrap import create_initial_state, start_state, stop_state

logger = logging.getLogger(__name__)


def _log_summary(state: AppState) -> None:
    lists = state.list_store
    for lst in lists.system_lists:
        if lst.is_hidden:
            continue
        count = lst.count if lst.count is not None else "?"
        logger.info("%-10s %s (title %s)", lst.name, count, lists.text_color(lst.id))
    for ulst in lists.user_lists:
        logger.info("%-10s %s (title %s)", ulst.name, ulst.count, lists.text_color(ulst.id))


async def _serve(state: AppState) -> None:
    settings = state.settings
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError, RuntimeError):
            # Some platforms (Windows) cannot install loop signal handlers.
            loop.add_signal_handler(sig, _handle_signal, sig)

    runner: asyncio.Task[None] | None = None
    if settings.reminders_enabled:
        runner = asyncio.create_task(
            run_reminder_scheduler(
                state.reminders,
                LoggingReminderNotifier(),
                interval_seconds=settings.reminder_interval_seconds,
            )
        )
    else:
        logger.info("Reminders disabled. Press Ctrl+C to stop.")

    try:
        await stop.wait()
    finally:
        if runner is not None:
            runner.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await runner


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s... (log file %s)", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    start_state(state)
    _log_summary(state)

    try:
        asyncio.run(_serve(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        stop_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
