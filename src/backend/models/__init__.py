"""
Shared models for entities.

These models are used across the assistant, the market data client
and the API layer.
"""

from .chat import (
    Account,
    ChatCompletion,
    Message,
    ProviderSelection,
    ServiceMetadata,
    StatusMessage,
)
from .market import Ticker

__all__ = [
    # Chat (conversation state and broker records)
    "Account",
    "ChatCompletion",
    "Message",
    "ProviderSelection",
    "ServiceMetadata",
    "StatusMessage",
    # Market (price snapshots)
    "Ticker",
]
