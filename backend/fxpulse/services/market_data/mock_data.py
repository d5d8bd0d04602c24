"""
Mock Data Generator

Generates plausible FX quotes for demo mode and for the fallback path when
the provider returns nothing usable.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fxpulse.schemas.market import Quote
from fxpulse.services.market_data.symbols import FOREX_PAIRS, GOLD_SYMBOL

# (low, high) price band per instrument family
JPY_PRICE_RANGE = (140.0, 160.0)
PARITY_PRICE_RANGE = (0.8, 1.6)
GOLD_PRICE_RANGE = (2040.0, 2060.0)

# Max absolute daily change in percent
PAIR_CHANGE_LIMIT = 1.0
GOLD_CHANGE_LIMIT = 1.5


@dataclass(frozen=True)
class MockQuotes:
    """Complete synthetic universe."""

    pairs: list[Quote]
    gold: Quote


def _uniform(rng: random.Random, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return low + rng.random() * (high - low)


def _change(rng: random.Random, limit: float) -> float:
    return round((rng.random() - 0.5) * 2 * limit, 2)


def generate_mock_pair(symbol: str, rng: random.Random, timestamp: str) -> Quote:
    """Generate one pair quote; JPY-quoted pairs trade in the hundreds."""
    if symbol.endswith("/JPY"):
        price = round(_uniform(rng, JPY_PRICE_RANGE), 3)
    else:
        price = round(_uniform(rng, PARITY_PRICE_RANGE), 5)

    return Quote(
        symbol=symbol,
        price=price,
        percent_change=_change(rng, PAIR_CHANGE_LIMIT),
        timestamp=timestamp,
    )


def generate_mock_quotes(
    rng: random.Random,
    now: Optional[datetime] = None,
) -> MockQuotes:
    """
    Generate the full fixed universe (28 pairs + gold).

    Pure with respect to ``rng``: the same seed yields the same prices and
    changes, so demo responses are reproducible in tests.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    timestamp = now.isoformat()

    pairs = [generate_mock_pair(symbol, rng, timestamp) for symbol in FOREX_PAIRS]
    gold = Quote(
        symbol=GOLD_SYMBOL,
        price=round(_uniform(rng, GOLD_PRICE_RANGE), 2),
        percent_change=_change(rng, GOLD_CHANGE_LIMIT),
        timestamp=timestamp,
    )
    return MockQuotes(pairs=pairs, gold=gold)
