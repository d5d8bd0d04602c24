"""
Market Data Service Implementation

Serves the FX dashboard payload with layered fallbacks:
1. Fresh cache (younger than the TTL)
2. Demo data when no provider key is configured
3. Live quotes from Twelve Data
4. Demo data when the provider returned nothing usable
5. Stale cache when the provider failed
6. Error response (nothing to serve)

Each step either returns a result or passes control to the next one.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from fxpulse.core.config import Settings, settings as default_settings
from fxpulse.schemas.market import CacheEntry, MarketDataPayload, Quote
from fxpulse.services.base import EmptyResultError, Err, ProviderError, ServiceError, StoreReadError, StoreWriteError
from fxpulse.services.cache import CacheStore, build_cache_store, cache_key
from fxpulse.services.market_data.interface import (
    MarketDataResult,
    MarketDataServiceInterface,
    QuoteFetcher,
)
from fxpulse.services.market_data.matrix import build_pair_matrix
from fxpulse.services.market_data.mock_data import generate_mock_quotes
from fxpulse.services.market_data.strength import calculate_currency_strength
from fxpulse.services.market_data.symbols import SYMBOL_BATCH
from fxpulse.services.market_data.twelve_data_adapter import TwelveDataClient

logger = logging.getLogger(__name__)

STALE_CACHE_NOTICE = "Using cached data - API temporarily unavailable"
DEFAULT_CACHE_TTL_SECONDS = 300


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Attempt:
    """State carried through the fallback chain for one request."""

    timeframe: str
    key: str
    now: datetime
    fetch_error: Optional[ServiceError] = None


Step = Callable[[_Attempt], Awaitable[Optional[MarketDataResult]]]


class MarketDataService(MarketDataServiceInterface):
    """
    Market Data Service.

    Stateless per request; the injected cache store is the only shared
    state. Concurrent misses each fetch and write independently (last
    write wins).
    """

    def __init__(
        self,
        cache: CacheStore,
        fetcher: Optional[QuoteFetcher] = None,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        default_timeframe: str = "1D",
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._cache = cache
        self._fetcher = fetcher
        self._ttl_seconds = ttl_seconds
        self._default_timeframe = default_timeframe
        self._rng = rng or random.Random()
        self._clock = clock

    @property
    def live_enabled(self) -> bool:
        """False means demo mode: no provider key configured."""
        return self._fetcher is not None

    @property
    def cache_backend(self) -> str:
        return self._cache.backend

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def execute(self, input_data: Optional[str] = None) -> MarketDataResult:
        """Walk the fallback chain until a step produces a result."""
        timeframe = input_data or self._default_timeframe
        attempt = _Attempt(timeframe=timeframe, key=cache_key(timeframe), now=self._clock())

        steps: tuple[Step, ...] = (
            self._fresh_cache,
            self._demo_without_key,
            self._live_quotes,
            self._demo_on_empty_result,
            self._stale_cache,
            self._failure,
        )
        for step in steps:
            result = await step(attempt)
            if result is not None:
                return result

        raise RuntimeError("market data fallback chain produced no result")

    async def health_check(self) -> bool:
        try:
            await self._cache.get(cache_key(self._default_timeframe))
        except StoreReadError as e:
            logger.warning(f"Cache health check failed: {e}")
            return False
        return True

    async def close(self) -> None:
        if self._fetcher is not None:
            await self._fetcher.close()

    # ============ Fallback steps ============

    async def _fresh_cache(self, attempt: _Attempt) -> Optional[MarketDataResult]:
        entry = await self._read_cache(attempt.key)
        if entry is None:
            logger.debug(f"Cache miss for {attempt.key}")
            return None

        age = self._age_seconds(entry, attempt.now)
        if age >= self._ttl_seconds:
            logger.debug(f"Cache expired for {attempt.key} (age: {age:.1f}s)")
            return None

        logger.info(f"Returning cached data for {attempt.key} (age: {age:.1f}s)")
        payload = entry.payload.model_copy(
            update={
                "from_cache": True,
                "cache_age": round(age),
                "next_refresh": max(0, round(self._ttl_seconds - age)),
            }
        )
        return MarketDataResult(payload=payload)

    async def _demo_without_key(self, attempt: _Attempt) -> Optional[MarketDataResult]:
        if self.live_enabled:
            return None
        logger.info("TWELVE_DATA_API_KEY not configured, using demo data")
        return await self._serve_demo(attempt)

    async def _live_quotes(self, attempt: _Attempt) -> Optional[MarketDataResult]:
        try:
            outcome = await self._fetcher.fetch_quotes(SYMBOL_BATCH)
        except Exception as e:
            logger.exception("Unexpected error fetching quotes")
            attempt.fetch_error = ProviderError("MarketDataService", str(e) or type(e).__name__)
            return None

        if isinstance(outcome, Err):
            attempt.fetch_error = outcome.error
            return None

        fetched = outcome.value
        payload = self._build_payload(
            fetched.pairs, fetched.gold, attempt.timeframe, attempt.now, is_demo=False
        )
        await self._write_cache(attempt.key, payload, attempt.now)
        logger.info(f"Returning fresh data with {len(fetched.pairs)} pairs")
        return MarketDataResult(payload=payload)

    async def _demo_on_empty_result(self, attempt: _Attempt) -> Optional[MarketDataResult]:
        if not isinstance(attempt.fetch_error, EmptyResultError):
            return None
        logger.info("No data from API, using demo data")
        return await self._serve_demo(attempt)

    async def _stale_cache(self, attempt: _Attempt) -> Optional[MarketDataResult]:
        entry = await self._read_cache(attempt.key)
        if entry is None:
            return None

        age = self._age_seconds(entry, attempt.now)
        logger.warning(
            f"Provider failed ({attempt.fetch_error}); serving stale {attempt.key} "
            f"(age: {age:.1f}s)"
        )
        payload = entry.payload.model_copy(
            update={
                "from_cache": True,
                "cache_age": round(age),
                "next_refresh": None,
                "error": STALE_CACHE_NOTICE,
            }
        )
        return MarketDataResult(payload=payload)

    async def _failure(self, attempt: _Attempt) -> MarketDataResult:
        error = attempt.fetch_error
        message = error.message if error is not None else "Failed to fetch market data"
        logger.error(f"No market data available for {attempt.key}: {message}")
        return MarketDataResult(payload=None, status_code=500, error=message)

    # ============ Helpers ============

    async def _serve_demo(self, attempt: _Attempt) -> MarketDataResult:
        demo = generate_mock_quotes(self._rng, attempt.now)
        payload = self._build_payload(
            demo.pairs, demo.gold, attempt.timeframe, attempt.now, is_demo=True
        )
        await self._write_cache(attempt.key, payload, attempt.now)
        return MarketDataResult(payload=payload)

    @staticmethod
    def _build_payload(
        pairs: list[Quote],
        gold: Optional[Quote],
        timeframe: str,
        now: datetime,
        is_demo: bool,
    ) -> MarketDataPayload:
        return MarketDataPayload(
            pairs=pairs,
            gold=gold,
            strength=calculate_currency_strength(pairs),
            matrix=build_pair_matrix(pairs),
            last_updated=now.isoformat(),
            timeframe=timeframe,
            from_cache=False,
            is_demo=True if is_demo else None,
        )

    @staticmethod
    def _age_seconds(entry: CacheEntry, now: datetime) -> float:
        return max(0.0, (now - entry.updated_at).total_seconds())

    async def _read_cache(self, key: str) -> Optional[CacheEntry]:
        """Store failures count as a miss."""
        try:
            return await self._cache.get(key)
        except StoreReadError as e:
            logger.warning(f"Cache read failed, treating as miss: {e}")
            return None

    async def _write_cache(self, key: str, payload: MarketDataPayload, now: datetime) -> None:
        """Store failures are logged; the payload is served regardless."""
        try:
            await self._cache.upsert(key, payload, now)
        except StoreWriteError as e:
            logger.warning(f"Cache write failed for {key}: {e}")


# ============ Wiring ============


def create_market_data_service(
    settings: Optional[Settings] = None,
    cache: Optional[CacheStore] = None,
) -> MarketDataService:
    """Build the service from settings; no provider key means demo mode."""
    settings = settings or default_settings

    fetcher = None
    if settings.live_data_enabled:
        fetcher = TwelveDataClient(
            api_key=settings.twelve_data_api_key.strip(),
            base_url=settings.twelve_data_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )

    rng = random.Random(settings.demo_seed) if settings.demo_seed is not None else random.Random()

    return MarketDataService(
        cache=cache if cache is not None else build_cache_store(settings),
        fetcher=fetcher,
        ttl_seconds=settings.market_cache_ttl_seconds,
        default_timeframe=settings.default_timeframe,
        rng=rng,
    )


# Singleton instance
_service_instance: Optional[MarketDataService] = None


def get_market_data_service() -> MarketDataService:
    """Get or create market data service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = create_market_data_service()
    return _service_instance


async def close_market_data_service() -> None:
    """Release the provider session. Called on application shutdown."""
    global _service_instance
    if _service_instance is not None:
        await _service_instance.close()
        _service_instance = None
