"""
Market Data Service Interface

Defines the contract for the market data layer.
"""

from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Protocol

from fxpulse.schemas.market import MarketDataError, MarketDataPayload
from fxpulse.services.base import BaseService, Result
from fxpulse.services.market_data.twelve_data_adapter import FetchedQuotes


class QuoteFetcher(Protocol):
    """Upstream quote provider: one batched call per fetch."""

    async def fetch_quotes(self, symbols: Iterable[str]) -> Result[FetchedQuotes]: ...

    async def close(self) -> None: ...


@dataclass
class MarketDataResult:
    """Served payload, or the error body when no data of any kind exists."""

    payload: Optional[MarketDataPayload]
    status_code: int = 200
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None

    def body(self) -> dict[str, Any]:
        if self.ok:
            return self.payload.model_dump(mode="json", by_alias=True)
        return MarketDataError(error=self.error or "Failed to fetch market data").model_dump()


class MarketDataServiceInterface(BaseService[Optional[str], MarketDataResult]):
    """
    Market Data Service Contract.

    INPUT: timeframe label (optional, any value accepted and echoed)

    OUTPUT: MarketDataResult
        - payload: pairs, gold, strength, matrix + cache annotations
        - status_code: 200 whenever a payload is served
        - error: message when nothing could be served
    """

    @property
    def name(self) -> str:
        return "MarketDataService"

    @abstractmethod
    async def execute(self, input_data: Optional[str] = None) -> MarketDataResult:
        """Serve market data for a timeframe."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check the cache store is readable."""
        pass
