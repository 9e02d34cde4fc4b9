"""Keyword intent classification for trading questions.

Pure functions, no I/O. Classification is a best-effort heuristic used only
to decide whether live prices are worth fetching; it is not authoritative.
"""

import re

TRADING_KEYWORDS: tuple[str, ...] = (
    "交易",
    "价格",
    "币安",
    "binance",
    "btc",
    "eth",
    "买入",
    "卖出",
    "做多",
    "做空",
    "建议",
    "分析",
    "行情",
    "市场",
    "加密货币",
    "crypto",
    "trading",
    "price",
    "buy",
    "sell",
    "long",
    "short",
)

_SYMBOL_PATTERN = re.compile(r"[A-Z]{2,10}USDT", re.IGNORECASE)


def is_trading_related(text: str) -> bool:
    """Return True if *text* contains any trading keyword (case-insensitive)."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in TRADING_KEYWORDS)


def extract_symbol(text: str) -> str | None:
    """Return the first USDT trading pair mentioned in *text*, upper-cased.

    Examples:
        >>> extract_symbol("price of BTCUSDT now")
        'BTCUSDT'
        >>> extract_symbol("ethusdt?")
        'ETHUSDT'
        >>> extract_symbol("no symbol here") is None
        True
    """
    match = _SYMBOL_PATTERN.search(text)
    return match.group(0).upper() if match else None
