"""Key/value persistence for API key, suppression lists and cached results."""
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

from . import config

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class SqliteStore:
    """SQLite-backed store. Every write is committed before returning."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self._configure_conn()
        self._init_db()

    def _configure_conn(self) -> None:
        cur = self.conn.cursor()
        try:
            cur.execute("PRAGMA journal_mode=WAL")
            cur.fetchone()
        except sqlite3.DatabaseError:
            pass

    def _init_db(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT
            )
            """
        )
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()

    def get(self, key: str) -> Optional[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = cur.fetchone()
        if not row:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        cur = self.conn.cursor()
        cur.execute(
            "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
            (key, value, utc_now_iso()),
        )
        self.conn.commit()

    def remove(self, key: str) -> None:
        cur = self.conn.cursor()
        cur.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()


def load_json(store: KeyValueStore, key: str, expected_type: type) -> Optional[Any]:
    """Decode a stored JSON value; corrupt or mistyped values count as absent."""
    raw = store.get(key)
    if raw is None:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Discarding unparseable value for %s", key)
        return None
    if not isinstance(value, expected_type):
        logger.warning(
            "Discarding value for %s: expected %s, got %s",
            key,
            expected_type.__name__,
            type(value).__name__,
        )
        return None
    return value


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, ensure_ascii=False))


def get_api_key(store: KeyValueStore) -> Optional[str]:
    raw = store.get(config.STORAGE_API_KEY)
    if raw is None:
        return None
    key = raw.strip()
    return key or None


def set_api_key(store: KeyValueStore, api_key: str) -> None:
    key = (api_key or "").strip()
    if not key:
        raise ValueError("Please enter a valid API key.")
    store.set(config.STORAGE_API_KEY, key)


def clear_api_key(store: KeyValueStore) -> None:
    store.remove(config.STORAGE_API_KEY)
