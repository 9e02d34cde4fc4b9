"""TradingAssistant: runs chat send cycles against a paid inference provider.

Usage:
    from entities.assistant import ChatSession, TradingAssistant

    assistant = TradingAssistant(clients)
    await assistant.send(session, "What is the BTCUSDT price?")
"""

from .assistant import TradingAssistant, signed_payload, with_price_context
from .clients import AssistantClients, create_assistant_clients
from .intent import TRADING_KEYWORDS, extract_symbol, is_trading_related
from .session import ChatSession, render_session, verification_label

__all__ = [
    "TRADING_KEYWORDS",
    "AssistantClients",
    "ChatSession",
    "TradingAssistant",
    "create_assistant_clients",
    "extract_symbol",
    "is_trading_related",
    "render_session",
    "signed_payload",
    "verification_label",
    "with_price_context",
]
