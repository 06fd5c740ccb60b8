# src/myday/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_PACKAGE = "myday"

# Modules that log on every poll; their DEBUG lines only go to the file.
_CHATTY_LOGGERS = frozenset({"myday.tasks.reminder_scheduler", "myday.sync.count_sync"})


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console policy:
    - myday logs pass, except DEBUG from the chatty per-poll/per-mutation loggers
    - captured warnings ('py.warnings') and third-party logs only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name

        if name == _PACKAGE or name.startswith(_PACKAGE + "."):
            if name in _CHATTY_LOGGERS:
                return record.levelno >= logging.INFO
            return True

        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/myday",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Install a filtered stderr handler and a full file log (<log_dir>/myday.log).

    Call once, before the first log line. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{_PACKAGE}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
