"""
SQLAlchemy models for the FX Pulse database.

Uses SQLite for local persistence of:
- Market data cache (one row per timeframe partition)
"""

from sqlalchemy import Column, DateTime, JSON, String
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class MarketDataCache(Base):
    """
    Precomputed market data payload for one cache key.
    Rows are replaced wholesale and never deleted.
    """
    __tablename__ = "market_data_cache"

    key = Column(String(64), primary_key=True)  # global-{timeframe}
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, nullable=False)  # UTC
