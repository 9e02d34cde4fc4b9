"""Centralized application settings loaded from environment variables.

All configuration is defined once here. Other modules should import
``get_settings()`` rather than calling ``os.getenv()`` directly.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables.

    Field names are **lowercased** versions of the env-var names.
    ``pydantic-settings`` maps them automatically (case-insensitive).

    Example::

        settings = Settings()  # reads .env + real env
        url = settings.price_api_url
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- Market data -------------------------------------------------------

    price_api_url: str = "https://fapi.binance.com/fapi/v1/ticker/price"
    """Binance futures ticker price endpoint."""

    popular_symbols: list[str] = [
        "BTCUSDT",
        "ETHUSDT",
        "BNBUSDT",
        "SOLUSDT",
        "XRPUSDT",
        "ADAUSDT",
        "DOGEUSDT",
        "DOTUSDT",
    ]
    """Symbols fetched when a trading question names no symbol."""

    price_display_limit: int = 20
    """Maximum number of tickers rendered into the model context."""

    # -- Broker ------------------------------------------------------------

    broker_url: str = "http://localhost:3001"
    """Base URL of the broker gateway."""

    broker_timeout_seconds: float = 30.0
    """Upper bound on any single broker call."""

    top_up_amount: int = 2 * 10**18
    """Amount (base units) transferred into the provider sub-account."""

    low_balance_threshold: int = 15 * 10**17
    """Sub-account balance at or below which a top-up is made."""

    strict_acknowledgement_check: bool = False
    """Abort the send cycle when the acknowledgement check itself fails."""

    # -- Network -----------------------------------------------------------

    http_timeout_seconds: float = 60.0
    """Timeout for price, inference and broker gateway HTTP calls."""

    # -- UI status ---------------------------------------------------------

    verify_status_seconds: float = 3.0
    """How long a verification status line stays visible."""

    error_status_seconds: float = 5.0
    """How long an error status line stays visible."""

    # -- Operational -------------------------------------------------------

    max_session_cache_size: int = 1000
    """Upper bound on cached chat sessions."""

    session_ttl_seconds: int = 30 * 60
    """Idle lifetime of a cached chat session."""

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    """Origins allowed by the CORS middleware."""


def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Uses ``lru_cache`` semantics via a module-level singleton so the
    ``.env`` file is read at most once per process.

    Returns:
        The global ``Settings`` object.
    """
    return _settings


_settings = Settings()
