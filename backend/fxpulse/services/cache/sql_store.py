"""
SQL-backed cache store (SQLite via SQLAlchemy async).

Writes are a single INSERT .. ON CONFLICT DO UPDATE, so a row is always
replaced as a whole.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fxpulse.db.models import MarketDataCache
from fxpulse.schemas.market import CacheEntry, MarketDataPayload
from fxpulse.services.base import StoreReadError, StoreWriteError


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlCacheStore:
    """CacheStore persisting payloads in the market_data_cache table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @property
    def backend(self) -> str:
        return "sqlite"

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(MarketDataCache).where(MarketDataCache.key == key)
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreReadError(self.backend, f"SELECT {key} failed: {e}") from e

        if row is None:
            return None

        try:
            payload = MarketDataPayload.model_validate(row.payload)
        except ValidationError as e:
            raise StoreReadError(self.backend, f"Corrupt cache entry for {key}: {e}") from e

        return CacheEntry(key=row.key, payload=payload, updated_at=_as_utc(row.updated_at))

    async def upsert(
        self, key: str, payload: MarketDataPayload, updated_at: datetime
    ) -> None:
        document = payload.model_dump(mode="json", by_alias=True)
        # stored naive, always UTC
        updated_at = _as_utc(updated_at).replace(tzinfo=None)
        statement = insert(MarketDataCache).values(
            key=key, payload=document, updated_at=updated_at
        )
        statement = statement.on_conflict_do_update(
            index_elements=[MarketDataCache.key],
            set_={"payload": document, "updated_at": updated_at},
        )
        try:
            async with self._session_factory() as session:
                await session.execute(statement)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreWriteError(self.backend, f"UPSERT {key} failed: {e}") from e
