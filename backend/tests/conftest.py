"""
Shared fixtures for the FX Pulse test suite.

No network and no Redis: the service runs against an in-memory store,
a scripted fetcher and a clock that only moves when told to.
"""

import random

import pytest

from fxpulse.services.base import Ok
from fxpulse.services.cache import InMemoryCacheStore
from fxpulse.services.market_data import MarketDataService

from tests.fakes import FakeClock, FakeFetcher, make_fetched


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher(Ok(make_fetched()))


@pytest.fixture
def live_service(store, fetcher, clock) -> MarketDataService:
    return MarketDataService(cache=store, fetcher=fetcher, ttl_seconds=300, clock=clock)


@pytest.fixture
def demo_service(store, clock) -> MarketDataService:
    return MarketDataService(cache=store, fetcher=None, rng=random.Random(42), clock=clock)
