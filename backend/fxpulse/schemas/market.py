"""
CONTRACT: Market Data Payload

Output of the market data service and the unit stored in the cache.

Python attributes are snake_case; the JSON body uses camelCase
(percentChange, normalizedStrength, lastUpdated, fromCache, ...).
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# QUOTES
# =============================================================================


class Quote(CamelModel):
    """Single instrument quote, e.g. EUR/USD."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., description="BASE/QUOTE, e.g. 'EUR/USD'")
    price: float = Field(..., gt=0)
    percent_change: float
    timestamp: str


# =============================================================================
# ANALYTICS
# =============================================================================


class CurrencyStrength(CamelModel):
    """Relative strength of one currency across all fetched pairs."""

    currency: str
    strength: float
    normalized_strength: float = Field(..., ge=-100, le=100)


class MatrixCell(CamelModel):
    """Rate and percent change for one base/quote cell."""

    price: float
    change: float


PairMatrix = dict[str, dict[str, Optional[MatrixCell]]]


# =============================================================================
# OUTPUT: MarketDataPayload (Complete Response)
# =============================================================================


# Annotations dropped from the body when unset
_OPTIONAL_ANNOTATIONS = ("cache_age", "next_refresh", "is_demo", "error")


class MarketDataPayload(CamelModel):
    """
    Full market data response.

    Also the unit of caching: the stored copy never carries the
    fromCache/cacheAge/nextRefresh annotations of a particular read.
    """

    pairs: list[Quote]
    gold: Optional[Quote] = None
    strength: list[CurrencyStrength]
    matrix: PairMatrix
    last_updated: str
    timeframe: str
    from_cache: bool = False
    cache_age: Optional[int] = Field(default=None, ge=0)
    next_refresh: Optional[int] = Field(default=None, ge=0)
    is_demo: Optional[bool] = None
    error: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_unset_annotations(self, handler):
        data = handler(self)
        for name in _OPTIONAL_ANNOTATIONS:
            if getattr(self, name) is None:
                data.pop(name, None)
                data.pop(to_camel(name), None)
        return data


class CacheEntry(BaseModel):
    """One cached payload, keyed by 'global-<timeframe>'."""

    key: str
    payload: MarketDataPayload
    updated_at: datetime


class MarketDataError(BaseModel):
    """Body returned when no data of any kind is available."""

    error: str
