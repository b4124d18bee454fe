"""Whole-value key/value backends for persisted engine data.

The history log is stored as one named value that is always read and
written in full.  Three backends share that contract:

- :class:`SQLiteKeyValueStore`: a ``settings_kv`` table in a single SQLite
  file, upserted per key.
- :class:`JsonFileKeyValueStore`: one JSON object file, replaced atomically
  on every write.
- :class:`MemoryKeyValueStore`: process-local dict, for tests and
  throw-away sessions.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from threading import RLock
from typing import Protocol

LOGGER = logging.getLogger(__name__)

VALID_BACKENDS = ("sqlite", "json", "memory")

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS settings_kv (
    key         TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


class KeyValueStore(Protocol):
    def get_value(self, key: str) -> str | None: ...

    def set_value(self, key: str, value: str) -> None: ...

    def close(self) -> None: ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self._lock = RLock()
        self._values: dict[str, str] = {}

    def get_value(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set_value(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def close(self) -> None:
        return None


class SQLiteKeyValueStore:
    """Thin wrapper around a SQLite ``settings_kv`` table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = RLock()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        with self._cursor() as cur:
            cur.executescript(_SCHEMA_SQL)
        LOGGER.info("Opened key/value store %s", db_path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _cursor(self, *, commit: bool = True):
        with self._lock:
            cur = self._conn.cursor()
            try:
                yield cur
                if commit:
                    self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cur.close()

    def get_value(self, key: str) -> str | None:
        with self._cursor(commit=False) as cur:
            cur.execute("SELECT value_json FROM settings_kv WHERE key = ?", (key,))
            row = cur.fetchone()
        if row is None:
            return None
        return str(row[0])

    def set_value(self, key: str, value: str) -> None:
        now = datetime.now(UTC).isoformat()
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO settings_kv (key, value_json, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value_json = excluded.value_json, "
                "updated_at = excluded.updated_at",
                (key, value, now),
            )


class JsonFileKeyValueStore:
    """All keys in one JSON object file; each write replaces the whole file.

    An unreadable file is treated as empty on read.  The next write then
    overwrites it.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = RLock()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Could not read key/value file %s: %s", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            LOGGER.warning("Ignoring key/value file %s: top level is not an object", self.path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get_value(self, key: str) -> str | None:
        with self._lock:
            return self._read_all().get(key)

    def set_value(self, key: str, value: str) -> None:
        with self._lock:
            payload = self._read_all()
            payload[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp.replace(self.path)

    def close(self) -> None:
        return None


def open_store(backend: str, path: Path | None) -> KeyValueStore:
    """Build the backend named by the ``storage.backend`` config key."""
    if backend == "memory":
        return MemoryKeyValueStore()
    if path is None:
        raise ValueError(f"storage backend {backend!r} requires a path")
    if backend == "sqlite":
        return SQLiteKeyValueStore(path)
    if backend == "json":
        return JsonFileKeyValueStore(path)
    raise ValueError(f"Unknown storage backend {backend!r}; expected one of {VALID_BACKENDS}")
