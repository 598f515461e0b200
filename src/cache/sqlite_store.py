# src/cache/sqlite_store.py — v3
"""SQLite-based fingerprint store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency. Each put is its own
committed transaction. sqlite3 errors surface as CacheStoreError so
callers handle every backend through OSError.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from ink2md.cache.base_cache_store import BaseCacheStore, CacheStoreError
from ink2md.cache.models import FingerprintRecord

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS fingerprints (
    key TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    source_config_id TEXT,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_source_config ON fingerprints(source_config_id);
"""


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as e:
        raise CacheStoreError(f"SQLite fingerprint {action} failed: {e}") from e


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed fingerprint store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get(self, key: str) -> FingerprintRecord | None:
        """Retrieve the record for a source identifier."""
        with _store_errors("read"):
            row = self._conn.execute(
                "SELECT data FROM fingerprints WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return self._decode(key, row[0])

    async def put(self, key: str, record: FingerprintRecord) -> None:
        """Store a record (upsert)."""
        with _store_errors("write"):
            self._conn.execute(
                """INSERT OR REPLACE INTO fingerprints (key, data, source_config_id)
                   VALUES (?, ?, ?)""",
                (key, record.model_dump_json(by_alias=True), record.source_id),
            )
            self._conn.commit()

    async def delete(self, key: str) -> None:
        """Remove a record."""
        with _store_errors("delete"):
            self._conn.execute("DELETE FROM fingerprints WHERE key = ?", (key,))
            self._conn.commit()

    async def list_entries(self) -> dict[str, FingerprintRecord]:
        """Return every decodable record."""
        entries: dict[str, FingerprintRecord] = {}
        with _store_errors("read"):
            rows = self._conn.execute("SELECT key, data FROM fingerprints").fetchall()
        for key, data in rows:
            record = self._decode(key, data)
            if record is not None:
                entries[key] = record
        return entries

    async def reset(self, scope: str | None = None) -> int:
        """Remove every record, or those owned by ``scope``."""
        with _store_errors("reset"):
            if scope is None:
                cursor = self._conn.execute("DELETE FROM fingerprints")
            else:
                cursor = self._conn.execute(
                    "DELETE FROM fingerprints WHERE source_config_id = ?", (scope,)
                )
            self._conn.commit()
        return cursor.rowcount

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @staticmethod
    def _decode(key: str, data: str) -> FingerprintRecord | None:
        try:
            return FingerprintRecord.model_validate(json.loads(data))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Failed to deserialize fingerprint %s: %s", key, e)
            return None
