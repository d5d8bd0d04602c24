"""
FX Pulse Schema Contracts

JSON contracts between the service, the cache and the dashboard.
"""

from fxpulse.schemas.market import (
    CacheEntry,
    CurrencyStrength,
    MarketDataError,
    MarketDataPayload,
    MatrixCell,
    PairMatrix,
    Quote,
)

__all__ = [
    "CacheEntry",
    "CurrencyStrength",
    "MarketDataError",
    "MarketDataPayload",
    "MatrixCell",
    "PairMatrix",
    "Quote",
]
