# src/pocket_tasks/tasks/task_storage.py

from __future__ import annotations

import contextlib
import logging
import os
import re
import sqlite3
import time
from pathlib import Path

from ..core.ports import KeyValueStorage

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]+")


class JsonFileStorage:
    """
    Key-value slots stored as one file per key under `directory`.

    Writes go to a temp file first and are moved into place with os.replace,
    so a reader never sees a half-written snapshot.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)
        logger.info("JsonFileStorage ready dir=%s", self._dir)

    def path_for(self, key: str) -> Path:
        name = _SAFE_KEY.sub("_", key.strip()) or "_"
        return self._dir / f"{name}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text("utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, "utf-8")
        os.replace(tmp, path)
        with contextlib.suppress(OSError):
            os.chmod(path, 0o600)
        logger.debug("Stored key=%s bytes=%d path=%s", key, len(value), path)

    def remove_item(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self.path_for(key).unlink()


class SqliteStorage:
    """
    SQLite-backed key-value slots.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "storage.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteStorage ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get_item(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return None if row is None else str(row["value"])
        finally:
            conn.close()

    def set_item(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
            conn.commit()
            logger.debug("Stored key=%s bytes=%d db=%s", key, len(value), self._db_path)
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()


def open_storage(backend: str, *, json_dir: str | Path, sqlite_path: str | Path) -> KeyValueStorage:
    """Build the configured backend ('json' or 'sqlite')."""
    name = (backend or "json").strip().lower()
    if name == "json":
        return JsonFileStorage(json_dir)
    if name == "sqlite":
        return SqliteStorage(sqlite_path)
    raise ValueError(f"Unknown storage backend: {backend!r} (expected 'json' or 'sqlite')")
