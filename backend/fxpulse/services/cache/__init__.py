"""
Cache module for FX Pulse.

Persistent cache for precomputed market data payloads. Backends: Redis
(default, with in-memory fallback), SQLite, in-memory.
"""

import logging
from typing import Optional

from fxpulse.core.config import Settings, settings as default_settings
from fxpulse.db.database import get_session_factory
from fxpulse.services.cache.interface import (
    CacheStore,
    InMemoryCacheStore,
    cache_key,
)
from fxpulse.services.cache.redis_client import (
    RedisCacheStore,
    close_redis,
    get_redis,
    init_redis,
)
from fxpulse.services.cache.sql_store import SqlCacheStore

logger = logging.getLogger(__name__)


def build_cache_store(settings: Optional[Settings] = None) -> CacheStore:
    """
    Select the cache backend from settings.

    Must run after startup initialized Redis / the database. A Redis backend
    that failed to connect degrades to the in-memory store.
    """
    settings = settings or default_settings

    if settings.cache_backend == "redis":
        client = get_redis()
        if client is not None:
            return RedisCacheStore(client)
        logger.warning("Redis unavailable - market data cache is in-memory")
        return InMemoryCacheStore()

    if settings.cache_backend == "sqlite":
        session_factory = get_session_factory()
        if session_factory is not None:
            return SqlCacheStore(session_factory)
        logger.warning("Database not initialized - market data cache is in-memory")
        return InMemoryCacheStore()

    return InMemoryCacheStore()


__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "SqlCacheStore",
    "build_cache_store",
    "cache_key",
    "init_redis",
    "close_redis",
    "get_redis",
]
