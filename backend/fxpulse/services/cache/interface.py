"""
Cache Store Contract

The market data service only needs two operations from its cache:

    get(key)                      -> CacheEntry | None
    upsert(key, payload, updated) -> None

Entries are replaced wholesale on every write and are never evicted; the
caller decides freshness from ``updated_at``.
"""

from datetime import datetime
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from fxpulse.schemas.market import CacheEntry, MarketDataPayload
from fxpulse.services.base import StoreReadError

CACHE_KEY_PREFIX = "global-"


def cache_key(timeframe: str) -> str:
    """Cache partition key for a timeframe label, e.g. 'global-1D'."""
    return f"{CACHE_KEY_PREFIX}{timeframe}"


class CacheStore(Protocol):
    """Persistent key/value store for precomputed payloads."""

    @property
    def backend(self) -> str: ...

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key, None if absent. Raises StoreReadError."""
        ...

    async def upsert(
        self, key: str, payload: MarketDataPayload, updated_at: datetime
    ) -> None:
        """Replace the entry for key. Raises StoreWriteError."""
        ...


def encode_entry(key: str, payload: MarketDataPayload, updated_at: datetime) -> str:
    entry = CacheEntry(key=key, payload=payload, updated_at=updated_at)
    return entry.model_dump_json(by_alias=True)


def decode_entry(key: str, value: str, backend: str) -> CacheEntry:
    try:
        return CacheEntry.model_validate_json(value)
    except ValidationError as e:
        raise StoreReadError(backend, f"Corrupt cache entry for {key}: {e}") from e


class InMemoryCacheStore:
    """
    Process-local store.

    Used in tests and as the fallback when Redis is unavailable. Values are
    kept serialized so a read never aliases a previously written payload.
    """

    def __init__(self):
        self._entries: Dict[str, str] = {}

    @property
    def backend(self) -> str:
        return "memory"

    async def get(self, key: str) -> Optional[CacheEntry]:
        value = self._entries.get(key)
        if value is None:
            return None
        return decode_entry(key, value, self.backend)

    async def upsert(
        self, key: str, payload: MarketDataPayload, updated_at: datetime
    ) -> None:
        self._entries[key] = encode_entry(key, payload, updated_at)

    def __len__(self) -> int:
        return len(self._entries)
