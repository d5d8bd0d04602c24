"""
API v1 Router

All API endpoints for the dashboard.
"""

from fastapi import APIRouter

from fxpulse.api.v1.endpoints import market

router = APIRouter()

router.include_router(market.router, prefix="/market", tags=["Market Data"])
