"""
Entities package.

Each subdirectory owns one part of the send cycle:
- assistant/: TradingAssistant, ChatSession and the intent heuristics
- market/: Binance price client and prompt formatting
- inference/: OpenAI-compatible chat completion client
- broker/: Broker gateway adapter
- shared/: Protocols and the error taxonomy
"""
