# src/cache/cache_factory.py — v3
"""Factory for fingerprint store instantiation."""

from __future__ import annotations

from ink2md.cache.base_cache_store import BaseCacheStore
from ink2md.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the JSON backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = "~/.ink2md/cache" if settings is None else str(settings.cache_root)

    if backend == "json":
        from ink2md.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=cache_root)

    if backend == "sqlite":
        from ink2md.cache.sqlite_store import SqliteCacheStore
        return SqliteCacheStore(db_path=f"{cache_root}/ink2md_fingerprints.db")

    raise ValueError(f"Unsupported cache backend: {backend!r}")
