# src/cache/json_store.py — v2
"""JSON file-based fingerprint store (default CACHE_BACKEND=json).

All records live in one JSON document under CACHE_ROOT::

    {"version": 2, "records": {"<source id>": {...record...}}}

Every put rewrites the document through a temp file and an atomic rename,
so a crash between jobs never loses an earlier job's record. Version 1
files (a bare ``{id: record}`` mapping with camelCase keys) are migrated on
load.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ink2md.cache.base_cache_store import BaseCacheStore
from ink2md.cache.models import FingerprintRecord

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2
CACHE_FILENAME = "fingerprints.json"


class JsonCacheStore(BaseCacheStore):
    """File-based fingerprint store using a single JSON document."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._path = self._root / CACHE_FILENAME
        self._records: dict[str, FingerprintRecord] | None = None

    @property
    def path(self) -> Path:
        return self._path

    async def get(self, key: str) -> FingerprintRecord | None:
        """Retrieve the record for a source identifier."""
        return self._load().get(key)

    async def put(self, key: str, record: FingerprintRecord) -> None:
        """Replace a record and persist the whole document."""
        records = self._load()
        records[key] = record
        self._flush(records)

    async def delete(self, key: str) -> None:
        """Remove a record (no-op when absent)."""
        records = self._load()
        if records.pop(key, None) is not None:
            self._flush(records)

    async def list_entries(self) -> dict[str, FingerprintRecord]:
        """Return a copy of every stored record."""
        return dict(self._load())

    # --- Internal helpers ---

    def _load(self) -> dict[str, FingerprintRecord]:
        if self._records is not None:
            return self._records
        self._records = {}
        if not self._path.exists():
            return self._records
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read fingerprint cache %s: %s", self._path, e)
            return self._records

        self._records = _parse_document(data)
        return self._records

    def _flush(self, records: dict[str, FingerprintRecord]) -> None:
        payload = {
            "version": SCHEMA_VERSION,
            "records": {
                key: record.model_dump(mode="json", by_alias=True)
                for key, record in records.items()
            },
        }
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        tmp.replace(self._path)


def _parse_document(data: Any) -> dict[str, FingerprintRecord]:
    """Parse a cache document of any known schema version."""
    if not isinstance(data, dict):
        logger.warning("Ignoring fingerprint cache with unexpected shape")
        return {}

    if isinstance(data.get("records"), dict):
        raw_records = data["records"]
    else:
        # Version 1: the document itself is the record mapping.
        raw_records = {k: v for k, v in data.items() if k != "version"}
        if raw_records:
            logger.info("Migrating %d fingerprint records from schema v1", len(raw_records))

    records: dict[str, FingerprintRecord] = {}
    for key, raw in raw_records.items():
        if not isinstance(raw, dict):
            continue
        try:
            records[key] = FingerprintRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("Dropping unreadable fingerprint record %s: %s", key, e)
    return records
