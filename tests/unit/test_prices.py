"""Unit tests for ``PriceFetcher`` and ``format_for_display``.

HTTP is mocked with respx; no real Binance traffic.
"""

from __future__ import annotations

from datetime import datetime

import httpx
import pytest
import respx
from entities.market import NO_PRICE_DATA, PriceFetcher, format_for_display
from models import Ticker

BASE_URL = "https://prices.test/fapi/v1/ticker/price"


@pytest.fixture
async def fetcher():
    async with httpx.AsyncClient() as client:
        yield PriceFetcher(client, BASE_URL, ["BTCUSDT", "ETHUSDT", "SOLUSDT"])


# ── fetch_prices ─────────────────────────────────────────────────────────


class TestFetchPrices:
    """Single-symbol and full-market fetches."""

    @respx.mock
    async def test_single_symbol(self, fetcher: PriceFetcher) -> None:
        route = respx.get(BASE_URL, params={"symbol": "BTCUSDT"}).mock(
            return_value=httpx.Response(
                200, json={"symbol": "BTCUSDT", "price": "97000.10", "time": 1730000000000}
            )
        )

        result = await fetcher.fetch_prices("BTCUSDT")

        assert route.called
        assert result == [Ticker(symbol="BTCUSDT", price="97000.10")]

    @respx.mock
    async def test_full_market(self, fetcher: PriceFetcher) -> None:
        respx.get(BASE_URL).mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"symbol": "BTCUSDT", "price": "97000.10"},
                    {"symbol": "ETHUSDT", "price": "3400.00"},
                ],
            )
        )

        result = await fetcher.fetch_prices()

        assert [t.symbol for t in result] == ["BTCUSDT", "ETHUSDT"]
        assert "symbol" not in respx.calls.last.request.url.params

    @respx.mock
    async def test_http_error_propagates(self, fetcher: PriceFetcher) -> None:
        respx.get(url__startswith=BASE_URL).mock(
            return_value=httpx.Response(400, json={"code": -1121})
        )

        with pytest.raises(httpx.HTTPStatusError):
            await fetcher.fetch_prices("NOPEUSDT")

    @respx.mock
    async def test_network_error_propagates(self, fetcher: PriceFetcher) -> None:
        respx.get(url__startswith=BASE_URL).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(httpx.ConnectError):
            await fetcher.fetch_prices("BTCUSDT")


# ── fetch_popular ────────────────────────────────────────────────────────


class TestFetchPopular:
    """Concurrent fetch with per-symbol failure isolation."""

    @respx.mock
    async def test_all_succeed_in_symbol_order(self, fetcher: PriceFetcher) -> None:
        for symbol, price in [("BTCUSDT", "1"), ("ETHUSDT", "2"), ("SOLUSDT", "3")]:
            respx.get(BASE_URL, params={"symbol": symbol}).mock(
                return_value=httpx.Response(200, json={"symbol": symbol, "price": price})
            )

        result = await fetcher.fetch_popular()

        assert [t.symbol for t in result] == ["BTCUSDT", "ETHUSDT", "SOLUSDT"]

    @respx.mock
    async def test_one_failure_keeps_the_rest(self, fetcher: PriceFetcher) -> None:
        respx.get(BASE_URL, params={"symbol": "BTCUSDT"}).mock(
            return_value=httpx.Response(200, json={"symbol": "BTCUSDT", "price": "1"})
        )
        respx.get(BASE_URL, params={"symbol": "ETHUSDT"}).mock(
            return_value=httpx.Response(503, text="maintenance")
        )
        respx.get(BASE_URL, params={"symbol": "SOLUSDT"}).mock(
            side_effect=httpx.ReadTimeout("slow")
        )

        result = await fetcher.fetch_popular()

        assert result == [Ticker(symbol="BTCUSDT", price="1")]

    @respx.mock
    async def test_all_fail_returns_empty(self, fetcher: PriceFetcher) -> None:
        respx.get(url__startswith=BASE_URL).mock(return_value=httpx.Response(500))

        assert await fetcher.fetch_popular() == []


# ── format_for_display ───────────────────────────────────────────────────


class TestFormatForDisplay:
    """Prompt rendering of ticker lists."""

    NOW = datetime(2026, 10, 19, 9, 30, 5)

    def test_empty_returns_sentinel(self) -> None:
        assert format_for_display([]) == NO_PRICE_DATA
        assert NO_PRICE_DATA == "No price data available"

    def test_header_and_lines(self) -> None:
        tickers = [
            Ticker(symbol="BTCUSDT", price="97123.456"),
            Ticker(symbol="DOGEUSDT", price="0.12345"),
        ]

        text = format_for_display(tickers, now=self.NOW)

        assert text == (
            "Current Binance futures prices (updated: 2026-10-19 09:30:05):\n"
            "BTCUSDT: $97123.46\n"
            "DOGEUSDT: $0.12"
        )

    def test_truncates_to_twenty_tickers(self) -> None:
        tickers = [Ticker(symbol=f"C{i:02d}USDT", price=str(i)) for i in range(25)]

        text = format_for_display(tickers, now=self.NOW)
        price_lines = text.splitlines()[1:]

        assert len(price_lines) == 20
        assert price_lines[0] == "C00USDT: $0.00"
        assert price_lines[-1] == "C19USDT: $19.00"

    def test_custom_limit(self) -> None:
        tickers = [Ticker(symbol=f"C{i:02d}USDT", price="1") for i in range(5)]

        assert len(format_for_display(tickers, limit=2).splitlines()) == 3

    def test_half_up_rounding(self) -> None:
        text = format_for_display([Ticker(symbol="XUSDT", price="2.345")], now=self.NOW)

        assert text.endswith("XUSDT: $2.35")
