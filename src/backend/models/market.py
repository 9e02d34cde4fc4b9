"""
Market data models deserialized from the Binance ticker API.
"""

from pydantic import BaseModel, ConfigDict, Field


class Ticker(BaseModel):
    """A point-in-time price snapshot for one futures symbol."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    symbol: str = Field(description="Trading pair, e.g. 'BTCUSDT'")
    price: str = Field(description="Last price as a decimal string")
