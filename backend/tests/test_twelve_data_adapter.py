"""
Tests for the Twelve Data adapter.

Parsing is tested on literal response bodies; the client runs against a
fake aiohttp session so no request leaves the process.
"""

import asyncio

import aiohttp
import pytest

from fxpulse.services.base import EmptyResultError, Err, Ok, ProviderError
from fxpulse.services.market_data.symbols import GOLD_SYMBOL, SYMBOL_BATCH
from fxpulse.services.market_data.twelve_data_adapter import (
    TwelveDataClient,
    is_error_envelope,
    parse_quote_response,
    split_gold,
)

from tests.fakes import T0, make_quote


# ============ Fakes ============


class FakeResponse:
    def __init__(self, status: int = 200, body=None, json_error: Exception = None):
        self.status = status
        self._body = body
        self._json_error = json_error

    async def json(self, content_type=None):
        if self._json_error is not None:
            raise self._json_error
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, response: FakeResponse = None, error: Exception = None):
        self._response = response
        self._error = error
        self.closed = False
        self.calls = []

    def get(self, url, params=None):
        self.calls.append((url, params))
        if self._error is not None:
            raise self._error
        return self._response

    async def close(self):
        self.closed = True


def _client(session: FakeSession) -> TwelveDataClient:
    return TwelveDataClient(api_key="test-key", base_url="https://api.example.com/", session=session)


# ============ Parsing ============


class TestParseQuoteResponse:

    def test_symbol_keyed_map(self) -> None:
        raw = {
            "EUR/USD": {"symbol": "EUR/USD", "close": "1.08512", "percent_change": "0.25"},
            "XAU/USD": {"symbol": "XAU/USD", "close": "2051.30", "percent_change": "-0.4"},
        }
        parsed = parse_quote_response(raw, now=T0)

        assert [q.symbol for q in parsed.quotes] == ["EUR/USD", "XAU/USD"]
        assert parsed.quotes[0].price == pytest.approx(1.08512)
        assert parsed.quotes[0].percent_change == pytest.approx(0.25)
        assert parsed.skipped == []

    def test_single_quote_body(self) -> None:
        """A one-symbol batch comes back as the quote object itself."""
        raw = {"symbol": "EUR/USD", "close": "1.1", "percent_change": "0.1"}
        parsed = parse_quote_response(raw, now=T0)

        assert len(parsed.quotes) == 1
        assert parsed.quotes[0].symbol == "EUR/USD"

    def test_price_field_fallback(self) -> None:
        raw = {"GBP/USD": {"symbol": "GBP/USD", "price": 1.27}}
        parsed = parse_quote_response(raw, now=T0)

        assert parsed.quotes[0].price == pytest.approx(1.27)

    @pytest.mark.parametrize("close", ["", "0", "NaN", "n/a", None])
    def test_unusable_close_falls_back_to_price(self, close) -> None:
        """A present but unusable close does not hide a valid price."""
        raw = {"EUR/USD": {"symbol": "EUR/USD", "close": close, "price": "1.1"}}
        parsed = parse_quote_response(raw, now=T0)

        assert [q.symbol for q in parsed.quotes] == ["EUR/USD"]
        assert parsed.quotes[0].price == pytest.approx(1.1)
        assert parsed.skipped == []

    def test_close_preferred_over_price(self) -> None:
        raw = {"EUR/USD": {"close": "1.2", "price": 1.1}}
        parsed = parse_quote_response(raw, now=T0)

        assert parsed.quotes[0].price == pytest.approx(1.2)

    def test_both_price_fields_unusable_skipped(self) -> None:
        raw = {"EUR/USD": {"close": "0", "price": "-1"}}
        parsed = parse_quote_response(raw, now=T0)

        assert parsed.quotes == []
        assert parsed.skipped == ["EUR/USD"]

    def test_missing_change_defaults_to_zero(self) -> None:
        raw = {"GBP/USD": {"close": "1.27", "percent_change": None}}
        parsed = parse_quote_response(raw, now=T0)

        assert parsed.quotes[0].percent_change == 0.0

    def test_symbol_falls_back_to_key(self) -> None:
        raw = {"usd/jpy": {"close": "150.1"}}
        parsed = parse_quote_response(raw, now=T0)

        assert parsed.quotes[0].symbol == "USD/JPY"

    def test_timestamp_from_entry_or_now(self) -> None:
        raw = {
            "EUR/USD": {"close": "1.1", "datetime": "2026-01-15"},
            "GBP/USD": {"close": "1.2"},
        }
        parsed = parse_quote_response(raw, now=T0)

        assert parsed.quotes[0].timestamp == "2026-01-15"
        assert parsed.quotes[1].timestamp == T0.isoformat()

    def test_malformed_entries_skipped(self) -> None:
        raw = {
            "EUR/USD": {"symbol": "EUR/USD", "close": "1.1"},
            "GBP/USD": {"symbol": "GBP/USD"},
            "USD/JPY": {"symbol": "USD/JPY", "close": "not-a-number"},
            "USD/CHF": {"symbol": "USD/CHF", "close": "0"},
            "AUD/USD": {"code": 400, "message": "symbol not found", "status": "error"},
            "NZD/USD": "garbage",
            "USD/CAD": {"symbol": "USD/CAD", "close": "NaN"},
        }
        parsed = parse_quote_response(raw, now=T0)

        assert [q.symbol for q in parsed.quotes] == ["EUR/USD"]
        assert sorted(parsed.skipped) == sorted(
            ["GBP/USD", "USD/JPY", "USD/CHF", "AUD/USD", "NZD/USD", "USD/CAD"]
        )

    def test_non_dict_body(self) -> None:
        assert parse_quote_response([1, 2, 3], now=T0).quotes == []
        assert parse_quote_response(None, now=T0).quotes == []


class TestHelpers:

    def test_error_envelope_detection(self) -> None:
        assert is_error_envelope({"code": 401, "message": "invalid api key", "status": "error"})
        assert is_error_envelope({"status": "error"})
        assert is_error_envelope({"code": 429, "message": "limit reached"})
        assert not is_error_envelope({"EUR/USD": {"close": "1.1"}})
        assert not is_error_envelope("error")

    def test_split_gold(self) -> None:
        quotes = [make_quote("EUR/USD", 1.1), make_quote(GOLD_SYMBOL, 2050.0), make_quote("USD/JPY", 150.0)]
        pairs, gold = split_gold(quotes)

        assert [q.symbol for q in pairs] == ["EUR/USD", "USD/JPY"]
        assert gold.symbol == GOLD_SYMBOL

    def test_split_gold_absent(self) -> None:
        pairs, gold = split_gold([make_quote("EUR/USD", 1.1)])

        assert len(pairs) == 1
        assert gold is None


# ============ Client ============


class TestTwelveDataClient:

    async def test_single_batched_request(self) -> None:
        session = FakeSession(FakeResponse(body={"EUR/USD": {"close": "1.1"}}))
        await _client(session).fetch_quotes(SYMBOL_BATCH)

        assert len(session.calls) == 1
        url, params = session.calls[0]
        assert url == "https://api.example.com/quote"
        assert params["symbol"] == ",".join(SYMBOL_BATCH)
        assert params["apikey"] == "test-key"

    async def test_ok_separates_gold(self) -> None:
        body = {
            "EUR/USD": {"symbol": "EUR/USD", "close": "1.1", "percent_change": "0.5"},
            "XAU/USD": {"symbol": "XAU/USD", "close": "2050", "percent_change": "0.3"},
            "GBP/USD": {"code": 400, "message": "bad symbol"},
        }
        result = await _client(FakeSession(FakeResponse(body=body))).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Ok)
        assert [q.symbol for q in result.value.pairs] == ["EUR/USD"]
        assert result.value.gold.symbol == GOLD_SYMBOL
        assert result.value.skipped == ["GBP/USD"]

    async def test_error_envelope_is_provider_error(self) -> None:
        body = {"code": 401, "message": "**apikey** parameter is incorrect", "status": "error"}
        result = await _client(FakeSession(FakeResponse(body=body))).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Err)
        assert isinstance(result.error, ProviderError)
        assert "apikey" in result.error.message

    async def test_non_success_status_is_provider_error(self) -> None:
        result = await _client(FakeSession(FakeResponse(status=503))).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Err)
        assert isinstance(result.error, ProviderError)
        assert result.error.details == {"status": 503}

    async def test_gold_only_is_empty_result(self) -> None:
        body = {"XAU/USD": {"symbol": "XAU/USD", "close": "2050"}}
        result = await _client(FakeSession(FakeResponse(body=body))).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Err)
        assert isinstance(result.error, EmptyResultError)

    async def test_all_entries_malformed_is_empty_result(self) -> None:
        body = {"EUR/USD": {"symbol": "EUR/USD"}}
        result = await _client(FakeSession(FakeResponse(body=body))).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Err)
        assert isinstance(result.error, EmptyResultError)
        assert result.error.details == {"skipped": ["EUR/USD"]}

    @pytest.mark.parametrize(
        "error",
        [aiohttp.ClientConnectionError("connection refused"), asyncio.TimeoutError()],
    )
    async def test_network_failure_is_provider_error(self, error) -> None:
        result = await _client(FakeSession(error=error)).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Err)
        assert isinstance(result.error, ProviderError)

    async def test_invalid_json_is_provider_error(self) -> None:
        response = FakeResponse(json_error=ValueError("Expecting value"))
        result = await _client(FakeSession(response)).fetch_quotes(SYMBOL_BATCH)

        assert isinstance(result, Err)
        assert isinstance(result.error, ProviderError)

    async def test_close_closes_session(self) -> None:
        session = FakeSession(FakeResponse(body={}))
        client = _client(session)
        await client.close()

        assert session.closed
