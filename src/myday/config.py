# src/myday/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Components receive settings by injection; get_settings() is only the default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "MYDAY"

SNAPSHOT_BACKENDS = ("sqlite", "json")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv() -> None:
    """Load .env from the working directory; existing env vars win."""
    load_dotenv(override=False)


_load_dotenv()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Persistence ----
    data_dir: Path
    snapshot_backend: str
    snapshot_db_path: Path
    snapshot_json_path: Path

    # ---- Reminders ----
    reminders_enabled: bool
    reminder_interval_seconds: float
    reminder_dedup_cap: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "myday").strip() or "myday"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/myday"))

        snapshot_backend = _env(_k("SNAPSHOT_BACKEND"), "sqlite").strip().lower()
        if snapshot_backend not in SNAPSHOT_BACKENDS:
            snapshot_backend = "sqlite"
        snapshot_db_path = _env_path(_k("SNAPSHOT_DB_PATH"), data_dir / "myday.sqlite3")
        snapshot_json_path = _env_path(_k("SNAPSHOT_JSON_PATH"), data_dir / "snapshot.json")

        reminders_enabled = _env_bool(_k("REMINDERS_ENABLED"), True)
        reminder_interval_seconds = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 30.0)
        reminder_dedup_cap = max(1, _env_int(_k("REMINDER_DEDUP_CAP"), 100))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            snapshot_backend=snapshot_backend,
            snapshot_db_path=snapshot_db_path,
            snapshot_json_path=snapshot_json_path,
            reminders_enabled=reminders_enabled,
            reminder_interval_seconds=reminder_interval_seconds,
            reminder_dedup_cap=reminder_dedup_cap,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
