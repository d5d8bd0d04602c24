"""
Database module for FX Pulse.

Provides SQLite database connection and models.
"""

from fxpulse.db.database import close_db, get_session_factory, init_db
from fxpulse.db.models import Base, MarketDataCache

__all__ = [
    "close_db",
    "get_session_factory",
    "init_db",
    "Base",
    "MarketDataCache",
]
