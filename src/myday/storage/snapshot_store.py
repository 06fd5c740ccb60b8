# src/myday/storage/snapshot_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import sqlite3
import time
from pathlib import Path

from ..core.ports import Snapshot

logger = logging.getLogger(__name__)


class SqliteSnapshotStore:
    """
    SQLite snapshot store.

    One row per snapshot key holding the whole state as JSON. The schema is
    intentionally simple: create table if missing, nothing else.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "myday.sqlite3", *, key: str = "default") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._key = key
        self._ensure_schema()
        logger.info("SqliteSnapshotStore ready db=%s key=%s", self._db_path, self._key)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS snapshots (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def load(self) -> Snapshot | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT payload FROM snapshots WHERE key = ?", (self._key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        data = json.loads(row["payload"])
        if not isinstance(data, dict):
            raise ValueError("stored snapshot is not an object")
        return data

    def save(self, snapshot: Snapshot) -> None:
        payload = json.dumps(snapshot, ensure_ascii=False)
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO snapshots(key, payload, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET payload = excluded.payload, updated_at = excluded.updated_at
                """,
                (self._key, payload, time.time()),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Snapshot saved db=%s tasks=%d", self._db_path, len(snapshot.get("tasks") or []))


class JsonSnapshotStore:
    """Whole-state JSON file, written atomically (tmp file + os.replace)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> Snapshot | None:
        if not self._path.exists():
            return None
        data = json.loads(self._path.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("stored snapshot is not an object")
        return data

    def save(self, snapshot: Snapshot) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), "utf-8")
        os.replace(tmp, self._path)
        with contextlib.suppress(OSError):
            # Task notes are personal; keep the file private on disk.
            os.chmod(self._path, 0o600)
        logger.debug("Snapshot saved path=%s tasks=%d", self._path, len(snapshot.get("tasks") or []))
