"""Binance futures price client.

Fetches ticker prices over HTTP and renders them as plain text that can be
appended to a model prompt. The client holds no state beyond its HTTP
connection pool.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import httpx
from models import Ticker

logger = logging.getLogger(__name__)

NO_PRICE_DATA = "No price data available"

DEFAULT_PRICE_API_URL = "https://fapi.binance.com/fapi/v1/ticker/price"
DEFAULT_POPULAR_SYMBOLS = (
    "BTCUSDT",
    "ETHUSDT",
    "BNBUSDT",
    "SOLUSDT",
    "XRPUSDT",
    "ADAUSDT",
    "DOGEUSDT",
    "DOTUSDT",
)
DEFAULT_DISPLAY_LIMIT = 20

_CENTS = Decimal("0.01")


class PriceFetcher:
    """Client for the public Binance futures ticker endpoint.

    Example:
        >>> async with httpx.AsyncClient(timeout=10.0) as http:
        ...     fetcher = PriceFetcher(http)
        ...     tickers = await fetcher.fetch_prices("BTCUSDT")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_PRICE_API_URL,
        popular_symbols: Sequence[str] = DEFAULT_POPULAR_SYMBOLS,
    ) -> None:
        self.client = client
        self.base_url = base_url
        self.popular_symbols = tuple(popular_symbols)

    async def fetch_prices(self, symbol: str | None = None) -> list[Ticker]:
        """Fetch the latest price for one symbol, or for the whole market.

        Args:
            symbol: Trading pair such as ``"BTCUSDT"``. ``None`` fetches every pair.

        Returns:
            One ticker when ``symbol`` is given, otherwise the full snapshot.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
            httpx.HTTPError: On transport failures.
        """
        params = {"symbol": symbol} if symbol else None
        response = await self.client.get(self.base_url, params=params)
        response.raise_for_status()

        data = response.json()
        if isinstance(data, list):
            return [Ticker.model_validate(item) for item in data]
        return [Ticker.model_validate(data)]

    async def fetch_popular(self) -> list[Ticker]:
        """Fetch the popular symbols concurrently.

        Failures are isolated per symbol: successful results are kept in
        symbol order and failed symbols are logged and skipped.
        """
        results = await asyncio.gather(
            *(self.fetch_prices(symbol) for symbol in self.popular_symbols),
            return_exceptions=True,
        )

        tickers: list[Ticker] = []
        for symbol, result in zip(self.popular_symbols, results, strict=True):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.warning("Failed to fetch price for %s: %s", symbol, result)
                continue
            tickers.extend(result)

        logger.info(
            "Fetched %d/%d popular prices", len(tickers), len(self.popular_symbols)
        )
        return tickers


def _format_price(price: str) -> str:
    try:
        return str(Decimal(price).quantize(_CENTS, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return price


def format_for_display(
    tickers: Sequence[Ticker],
    now: datetime | None = None,
    limit: int = DEFAULT_DISPLAY_LIMIT,
) -> str:
    """Render tickers as a timestamped, one-per-line price list.

    Args:
        tickers: Price snapshots to render.
        now: Timestamp for the header (defaults to the current local time).
        limit: Maximum number of tickers rendered.

    Returns:
        ``NO_PRICE_DATA`` for an empty list, otherwise a header line followed
        by ``SYMBOL: $price`` lines with two decimal places.
    """
    if not tickers:
        return NO_PRICE_DATA

    timestamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    lines = [f"{ticker.symbol}: ${_format_price(ticker.price)}" for ticker in tickers[:limit]]
    return f"Current Binance futures prices (updated: {timestamp}):\n" + "\n".join(lines)
