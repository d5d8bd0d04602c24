"""
Market Data API Endpoints

Dashboard payload: forex pairs, gold, currency strength and pair matrix.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from fxpulse.services.market_data import MarketDataService, get_market_data_service

router = APIRouter()


@router.get("/data")
async def get_market_data(
    timeframe: Optional[str] = Query(
        default=None, description="Timeframe label, echoed back and used as cache partition"
    ),
    service: MarketDataService = Depends(get_market_data_service),
):
    """
    Get the market data payload.

    Served from cache while fresh, otherwise refreshed from Twelve Data.
    Demo data when no API key is configured. On provider failure the last
    cached payload is returned with an `error` notice; 500 only when there
    is nothing to serve.
    """
    result = await service.execute(timeframe)
    return JSONResponse(content=result.body(), status_code=result.status_code)


@router.get("/health")
async def check_market_data_health(
    service: MarketDataService = Depends(get_market_data_service),
):
    """
    Check health of the market data service.
    """
    is_healthy = await service.health_check()

    return {
        "service": service.name,
        "healthy": is_healthy,
        "mode": "live" if service.live_enabled else "demo",
        "cache_backend": service.cache_backend,
        "cache_ttl_seconds": service.ttl_seconds,
    }
