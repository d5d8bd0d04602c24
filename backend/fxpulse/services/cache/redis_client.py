"""
Redis cache client for market data payloads.

Keys:
- market:global-{timeframe} -> JSON {key, payload, updated_at}

Keys are written without an expiry: stale payloads are still served when
the quote provider is down.
"""

import logging
from datetime import datetime
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from fxpulse.core.config import settings
from fxpulse.schemas.market import CacheEntry, MarketDataPayload
from fxpulse.services.base import StoreReadError, StoreWriteError
from fxpulse.services.cache.interface import decode_entry, encode_entry

logger = logging.getLogger(__name__)

REDIS_KEY_PREFIX = "market:"

# Global Redis connection pool
_redis_pool: Optional[redis.Redis] = None


async def init_redis(url: Optional[str] = None) -> Optional[redis.Redis]:
    """
    Initialize Redis connection pool.
    Called on application startup. Returns None if Redis is unreachable.
    """
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    url = url or settings.redis_url
    client = redis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.warning(f"Redis connection failed: {e}. Using in-memory fallback.")
        await client.close()
        return None

    _redis_pool = client
    logger.info(f"Redis connected: {url}")
    return _redis_pool


async def close_redis() -> None:
    """Close Redis connection pool."""
    global _redis_pool
    if _redis_pool:
        await _redis_pool.close()
        _redis_pool = None
        logger.info("Redis connection closed")


def get_redis() -> Optional[redis.Redis]:
    """Get the Redis connection pool."""
    return _redis_pool


class RedisCacheStore:
    """Redis-backed CacheStore. One SET per write, so replacement is atomic."""

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    @property
    def backend(self) -> str:
        return "redis"

    @staticmethod
    def _redis_key(key: str) -> str:
        return f"{REDIS_KEY_PREFIX}{key}"

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            value = await self._redis.get(self._redis_key(key))
        except (RedisError, OSError) as e:
            raise StoreReadError(self.backend, f"GET {key} failed: {e}") from e

        if value is None:
            return None
        return decode_entry(key, value, self.backend)

    async def upsert(
        self, key: str, payload: MarketDataPayload, updated_at: datetime
    ) -> None:
        value = encode_entry(key, payload, updated_at)
        try:
            await self._redis.set(self._redis_key(key), value)
        except (RedisError, OSError) as e:
            raise StoreWriteError(self.backend, f"SET {key} failed: {e}") from e
