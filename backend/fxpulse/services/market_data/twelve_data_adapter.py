"""
Twelve Data Quote Adapter

Fetches the whole symbol batch with a single /quote request and parses the
loosely shaped response into typed quotes.

Response shapes handled:
    {"EUR/USD": {"symbol": "EUR/USD", "close": "1.1", ...}, "GBP/USD": {...}}
    {"symbol": "EUR/USD", "close": "1.1", ...}           (one-symbol batch)
    {"code": 401, "message": "...", "status": "error"}   (error envelope)
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import aiohttp

from fxpulse.schemas.market import Quote
from fxpulse.services.base import (
    EmptyResultError,
    Err,
    Ok,
    ProviderError,
    Result,
)
from fxpulse.services.market_data.symbols import SYMBOL_BATCH, is_gold

logger = logging.getLogger(__name__)

PROVIDER_NAME = "TwelveData"

# Field names that may carry the last price, in order of preference
PRICE_FIELDS = ("close", "price")


@dataclass(frozen=True)
class ParsedQuotes:
    """Quotes accepted from a response plus the entries that were skipped."""

    quotes: list[Quote]
    skipped: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FetchedQuotes:
    """Batch result with the commodity separated from the currency pairs."""

    pairs: list[Quote]
    gold: Optional[Quote]
    skipped: list[str] = field(default_factory=list)


# ============ Parsing ============


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def is_error_envelope(raw: Any) -> bool:
    """True when the body (or an entry) is a provider error object."""
    if not isinstance(raw, dict):
        return False
    if raw.get("status") == "error":
        return True
    return "code" in raw and "message" in raw


def _is_single_quote(raw: dict) -> bool:
    return isinstance(raw.get("symbol"), str) and any(f in raw for f in PRICE_FIELDS)


def _first_usable_price(entry: dict) -> Optional[float]:
    """First positive finite value under PRICE_FIELDS; a bad close falls through to price."""
    for price_field in PRICE_FIELDS:
        price = _to_float(entry.get(price_field))
        if price is not None and price > 0:
            return price
    return None


def _parse_entry(key: str, entry: Any, fallback_timestamp: str) -> Optional[Quote]:
    """Convert one raw entry into a Quote, or None if it is unusable."""
    if not isinstance(entry, dict) or is_error_envelope(entry):
        return None

    price = _first_usable_price(entry)
    if price is None:
        return None

    change = _to_float(entry.get("percent_change"))
    symbol = entry.get("symbol") or key

    return Quote(
        symbol=str(symbol).upper(),
        price=price,
        percent_change=change if change is not None else 0.0,
        timestamp=str(entry.get("datetime") or fallback_timestamp),
    )


def parse_quote_response(raw: Any, now: Optional[datetime] = None) -> ParsedQuotes:
    """
    Parse a /quote body into typed quotes.

    Entries without a price under any of PRICE_FIELDS, with an unusable
    price, or carrying a per-symbol error are skipped, never raised.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    fallback_timestamp = now.isoformat()

    if not isinstance(raw, dict):
        return ParsedQuotes(quotes=[])

    if _is_single_quote(raw):
        entries = {raw["symbol"]: raw}
    else:
        entries = raw

    quotes: list[Quote] = []
    skipped: list[str] = []
    for key, entry in entries.items():
        quote = _parse_entry(str(key), entry, fallback_timestamp)
        if quote is None:
            skipped.append(str(key))
        else:
            quotes.append(quote)

    return ParsedQuotes(quotes=quotes, skipped=skipped)


def split_gold(quotes: Iterable[Quote]) -> tuple[list[Quote], Optional[Quote]]:
    """Separate the commodity quote from the currency pairs."""
    pairs: list[Quote] = []
    gold: Optional[Quote] = None
    for quote in quotes:
        if is_gold(quote.symbol):
            gold = quote
        else:
            pairs.append(quote)
    return pairs, gold


# ============ Client ============


class TwelveDataClient:
    """
    Batched quote client for the Twelve Data REST API.

    One request per fetch, no retries. The aiohttp session is created on
    first use unless one is injected.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.twelvedata.com",
        timeout_seconds: float = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._session = session

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_seconds),
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def _request_batch(self, symbols: Iterable[str]) -> Any:
        session = await self._ensure_session()
        url = f"{self._base_url}/quote"
        params = {"symbol": ",".join(symbols), "apikey": self._api_key}

        try:
            async with session.get(url, params=params) as response:
                if not 200 <= response.status < 300:
                    raise ProviderError(
                        PROVIDER_NAME,
                        f"API responded with status {response.status}",
                        {"status": response.status},
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise ProviderError(PROVIDER_NAME, f"Request failed: {e}") from e

    async def fetch_quotes(
        self, symbols: Iterable[str] = SYMBOL_BATCH
    ) -> Result[FetchedQuotes]:
        """
        Fetch the full batch in one call.

        Returns Ok(FetchedQuotes) with at least one currency pair, or
        Err(ProviderError | EmptyResultError).
        """
        symbols = list(symbols)
        logger.info(f"Fetching {len(symbols)} symbols from Twelve Data")

        try:
            raw = await self._request_batch(symbols)
        except ProviderError as e:
            logger.warning(f"Twelve Data request failed: {e.message}")
            return Err(e)

        if is_error_envelope(raw):
            message = str(raw.get("message") or "Provider returned an error")
            logger.warning(f"Twelve Data error envelope: {message}")
            return Err(
                ProviderError(PROVIDER_NAME, message, {"code": raw.get("code")})
            )

        parsed = parse_quote_response(raw)
        pairs, gold = split_gold(parsed.quotes)
        logger.info(
            f"Fetched {len(pairs)} forex pairs and gold: {'yes' if gold else 'no'} "
            f"({len(parsed.skipped)} skipped)"
        )
        if parsed.skipped:
            logger.debug(f"Skipped entries: {', '.join(parsed.skipped)}")

        if not pairs:
            return Err(
                EmptyResultError(
                    PROVIDER_NAME,
                    "No usable quotes in provider response",
                    {"skipped": parsed.skipped},
                )
            )

        return Ok(FetchedQuotes(pairs=pairs, gold=gold, skipped=parsed.skipped))
