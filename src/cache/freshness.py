# src/cache/freshness.py — v2
"""Freshness evaluator: decides whether a source must be (re)processed.

Decision flow per source (each step short-circuits):
  1. Stat the file. Failure → must process, no fingerprint.
  2. Cached record with identical size and mtime → fresh (no hashing).
  3. Hash the bytes. Failure → must process (fail open).
  4. Cached digest equals the new digest → fresh; cached size/mtime are
     refreshed so the next run takes the fast path.
  5. Otherwise → must process, returning the new fingerprint and the
     previously recorded output folder (if any) for folder reuse.

Store failures never fail an evaluation: an unreadable store means the
source is processed, and a failed stat refresh still reports it fresh.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

from ink2md.cache.base_cache_store import BaseCacheStore
from ink2md.cache.fingerprint import (
    FileStat,
    FingerprintHashError,
    FingerprintReadError,
    compute_digest_async,
    stat_file_async,
)
from ink2md.cache.models import FingerprintRecord, FreshnessResult
from ink2md.core.models import Source

logger = logging.getLogger(__name__)

StatFn = Callable[[str], Awaitable[FileStat]]
DigestFn = Callable[[str], Awaitable[str]]


class FreshnessEvaluator:
    """Three-tier freshness check backed by a fingerprint store.

    Records are looked up strictly by Source identifier; identifiers already
    encode the owning configuration, so two configurations watching the same
    file never share a record.
    """

    def __init__(
        self,
        store: BaseCacheStore,
        stat_fn: StatFn = stat_file_async,
        digest_fn: DigestFn = compute_digest_async,
    ) -> None:
        self._store = store
        self._stat = stat_fn
        self._digest = digest_fn

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    async def evaluate(self, source: Source) -> FreshnessResult:
        """Evaluate one source against its cached fingerprint."""
        try:
            stat = await self._stat(source.file_path)
        except OSError as e:
            logger.warning("Unable to stat %s, will process: %s", source.file_path, e)
            return FreshnessResult(must_process=True)

        try:
            cached = await self._store.get(source.id)
        except OSError as e:
            logger.warning(
                "Fingerprint store unreadable for %s, will process: %s", source.file_path, e,
            )
            cached = None

        if cached is not None and cached.size == stat.size and cached.mtime_ms == stat.mtime_ms:
            logger.debug("Unchanged (size/mtime): %s", source.file_path)
            return FreshnessResult(must_process=False)

        try:
            digest = await self._digest(source.file_path)
        except (FingerprintReadError, FingerprintHashError) as e:
            logger.warning("Unable to hash %s, will process: %s", source.file_path, e)
            return FreshnessResult(must_process=True)

        if cached is not None and cached.digest == digest:
            refreshed = cached.model_copy(update={"size": stat.size, "mtime_ms": stat.mtime_ms})
            try:
                await self._store.put(source.id, refreshed)
            except OSError as e:
                logger.warning("Could not refresh fingerprint for %s: %s", source.file_path, e)
            logger.debug("Unchanged (digest), refreshed stat: %s", source.file_path)
            return FreshnessResult(must_process=False)

        fingerprint = FingerprintRecord(
            digest=digest,
            size=stat.size,
            mtime_ms=stat.mtime_ms,
            output_folder=cached.output_folder if cached else "",
            source_id=source.source_config_id,
        )
        return FreshnessResult(
            must_process=True,
            fingerprint=fingerprint,
            previous_output_folder=(cached.output_folder or None) if cached else None,
        )

    async def remember(
        self,
        source: Source,
        fingerprint: FingerprintRecord | None,
        output_folder: str,
    ) -> FingerprintRecord | None:
        """Record that ``source`` was processed into ``output_folder``.

        When no fingerprint was computed during evaluation (the stat or hash
        failed then), it is computed now. Returns the stored record, or None
        if the file still cannot be fingerprinted.
        """
        if fingerprint is None:
            try:
                stat = await self._stat(source.file_path)
                digest = await self._digest(source.file_path)
            except (OSError, FingerprintHashError) as e:
                logger.warning("Cannot fingerprint %s, not caching: %s", source.file_path, e)
                return None
            fingerprint = FingerprintRecord(
                digest=digest, size=stat.size, mtime_ms=stat.mtime_ms,
            )

        record = fingerprint.model_copy(
            update={
                "processed_at": datetime.now(timezone.utc).isoformat(),
                "output_folder": output_folder,
                "source_id": source.source_config_id,
            }
        )
        await self._store.put(source.id, record)
        return record
