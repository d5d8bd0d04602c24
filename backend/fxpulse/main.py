"""
FX Pulse Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fxpulse.core.config import settings
from fxpulse.api.v1 import router as api_v1_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = logging.DEBUG if settings.debug else settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Live data: {settings.live_data_enabled}")

    from fxpulse.db.database import init_db, close_db
    from fxpulse.services.cache.redis_client import init_redis, close_redis
    from fxpulse.services.market_data import close_market_data_service, get_market_data_service

    # Initialize the cache backend
    if settings.cache_backend == "sqlite":
        await init_db()
    elif settings.cache_backend == "redis":
        redis_client = await init_redis()
        if redis_client is None:
            logger.warning("Redis unavailable - using in-memory cache")

    service = get_market_data_service()
    logger.info(
        f"Market data: {'live' if service.live_enabled else 'demo'} mode, "
        f"{service.cache_backend} cache, TTL {service.ttl_seconds}s"
    )

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_market_data_service()
    await close_redis()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    FX Pulse Market Data API

    ## Architecture
    - **Quote Provider**: 28 major forex pairs and gold from Twelve Data (one batched call)
    - **Analytics**: Currency strength index and 8x8 pair matrix (pure Python/NumPy)
    - **Cache**: Precomputed payloads per timeframe, 5 minute freshness window
    - **Fallbacks**: Demo data without an API key, stale cache on provider failure
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Turn anything unhandled into a JSON 500."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "FX Pulse Backend API",
        "docs": "/docs",
        "health": "/health",
        "market_data": "/api/v1/market/data",
    }
