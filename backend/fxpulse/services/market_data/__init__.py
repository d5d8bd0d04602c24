"""
Market Data Service

CONTRACT:
    Input:  timeframe label (e.g. "1D")
    Output: MarketDataResult (MarketDataPayload or error body)

RESPONSIBILITIES:
    - Fetch forex pairs and gold from Twelve Data in one batched call
    - Compute currency strength and the pair matrix
    - Cache payloads per timeframe (TTL checked on read)
    - Serve demo data without an API key, stale data on provider failure
"""

from fxpulse.services.market_data.interface import (
    MarketDataResult,
    MarketDataServiceInterface,
    QuoteFetcher,
)
from fxpulse.services.market_data.service import (
    STALE_CACHE_NOTICE,
    MarketDataService,
    close_market_data_service,
    create_market_data_service,
    get_market_data_service,
)

__all__ = [
    "MarketDataResult",
    "MarketDataServiceInterface",
    "QuoteFetcher",
    "MarketDataService",
    "STALE_CACHE_NOTICE",
    "close_market_data_service",
    "create_market_data_service",
    "get_market_data_service",
]
