# src/smart_todo/storage/blob_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from enum import StrEnum
from pathlib import Path
from typing import Any

from ..core.errors import PersistenceError
from ..core.ports import BlobBackend

logger = logging.getLogger(__name__)


class Slot(StrEnum):
    """The three independent persistence slots."""

    TASKS = "tasks"
    THEME = "theme"
    WEATHER_CACHE = "weather-cache"


class SqliteBlobStore:
    """
    SQLite key/value blob store.

    One table, one row per slot. The store knows nothing about what the blobs mean.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "storage.sqlite3") -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"cannot open blob store at {self._db_path}: {e}") from e
        logger.info("SqliteBlobStore ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS blobs (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- BlobBackend ----

    def get(self, key: str) -> str | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"read failed key={key}: {e}") from e
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO blobs(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                   updated_at = excluded.updated_at
                    """,
                    (key, value, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"write failed key={key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            conn = self._get_conn()
            try:
                conn.execute("DELETE FROM blobs WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"remove failed key={key}: {e}") from e


class MemoryBlobStore:
    """Process-local backend. Used in tests and when the database cannot be opened."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


# ---- call-site helpers ----
#
# Persistence failures are never fatal: they are logged here and the caller
# keeps its in-memory state. Only durability is lost.


def read_json(backend: BlobBackend, slot: Slot) -> Any | None:
    """Load and decode one slot. Absent, unreadable or undecodable -> None."""
    try:
        raw = backend.get(slot.value)
    except PersistenceError:
        logger.exception("Failed to read slot=%s", slot.value)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Slot %s holds invalid JSON; ignoring it.", slot.value)
        return None


def write_json(backend: BlobBackend, slot: Slot, value: Any) -> bool:
    """Encode and store one slot. Returns False (after logging) on failure."""
    try:
        raw = json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        logger.exception("Failed to serialize slot=%s", slot.value)
        return False
    try:
        backend.set(slot.value, raw)
    except PersistenceError:
        logger.exception("Failed to write slot=%s", slot.value)
        return False
    logger.debug("Saved slot=%s bytes=%d", slot.value, len(raw))
    return True


def remove_slot(backend: BlobBackend, slot: Slot) -> bool:
    try:
        backend.remove(slot.value)
    except PersistenceError:
        logger.exception("Failed to remove slot=%s", slot.value)
        return False
    return True
