"""SQLite-backed persisted cache tier.

One table, one row per key. WAL journal mode lets concurrent readers proceed
while a writer replaces an entry.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_ENTRIES = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key         TEXT PRIMARY KEY,
    value_json  TEXT NOT NULL,
    updated_utc TEXT NOT NULL
);
"""


class SqliteStore:
    """Key-value store in a single SQLite database file.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_ENTRIES)
            conn.commit()

    def get(self, key: str) -> Any | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value_json FROM cache_entries WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt cache row for key %s", key)
            return None

    def set(self, key: str, value: Any) -> Any:
        with self._connect() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO cache_entries (key, value_json, updated_utc) "
                "VALUES (?, ?, ?)",
                (
                    key,
                    json.dumps(value, sort_keys=True),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()
        return value

    def count(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM cache_entries").fetchone()[0]
