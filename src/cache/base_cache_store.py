# src/cache/base_cache_store.py — v2
"""Abstract fingerprint store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ink2md.cache.models import FingerprintRecord


class CacheStoreError(OSError):
    """A fingerprint store could not be read or written."""


class BaseCacheStore(ABC):
    """Unified interface for fingerprint storage backends.

    Keys are Source identifiers. Records whose owning configuration no
    longer exists are kept and simply never looked up.
    """

    @abstractmethod
    async def get(self, key: str) -> FingerprintRecord | None:
        """Retrieve the record for a source identifier."""

    @abstractmethod
    async def put(self, key: str, record: FingerprintRecord) -> None:
        """Replace the record for a source identifier and persist it."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove one record."""

    @abstractmethod
    async def list_entries(self) -> dict[str, FingerprintRecord]:
        """Return every stored record keyed by source identifier."""

    async def reset(self, scope: str | None = None) -> int:
        """Remove every record, or only those owned by ``scope``.

        Returns:
            Number of removed records.
        """
        entries = await self.list_entries()
        removed = 0
        for key, record in entries.items():
            if scope is None or record.source_id == scope:
                await self.delete(key)
                removed += 1
        return removed
