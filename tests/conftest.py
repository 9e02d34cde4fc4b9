"""Shared test fixtures for Brave Trader."""

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure src/backend/ is on the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "backend"))

from config.settings import Settings
from entities.assistant import AssistantClients, ChatSession, TradingAssistant
from entities.shared.errors import AccountNotFoundError
from entities.shared.protocols import NoOpReporter
from models import Account, ChatCompletion, ProviderSelection, ServiceMetadata, Ticker

PROVIDER_ADDRESS = "0xf07240Efa67755B5311bc75784a061eDB47165Dd"

# ---------------------------------------------------------------------------
# Protocol fakes
# ---------------------------------------------------------------------------


class FakeBroker:
    """In-memory fake satisfying the ``Broker`` protocol.

    Every call is recorded in ``calls`` as ``(method_name, args)``.
    Set an ``*_error`` attribute to make the matching call raise.
    """

    def __init__(
        self,
        *,
        acknowledged: bool = True,
        balance: int | None = 5 * 10**18,
        verify_result: bool | None = True,
        metadata: ServiceMetadata | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.acknowledged = acknowledged
        self.balance = balance
        self.verify_result = verify_result
        self.metadata = metadata or ServiceMetadata(
            endpoint="https://provider.test/v1/proxy", model="llama-3.3-70b-instruct"
        )
        self.headers = headers or {"X-Phala-Signature-Type": "StandaloneApi", "Address": "0xuser"}
        self.ack_error: Exception | None = None
        self.metadata_error: Exception | None = None
        self.transfer_error: Exception | None = None
        self.verify_error: Exception | None = None
        self.metadata_delay: float = 0.0
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def acknowledgement_status(self, provider_address: str) -> bool:
        self.calls.append(("acknowledgement_status", (provider_address,)))
        if self.ack_error:
            raise self.ack_error
        return self.acknowledged

    async def service_metadata(self, provider_address: str) -> ServiceMetadata:
        self.calls.append(("service_metadata", (provider_address,)))
        if self.metadata_delay:
            await asyncio.sleep(self.metadata_delay)
        if self.metadata_error:
            raise self.metadata_error
        return self.metadata

    async def request_headers(self, provider_address: str, content: str) -> dict[str, str]:
        self.calls.append(("request_headers", (provider_address, content)))
        return dict(self.headers)

    async def get_account(self, provider_address: str) -> Account:
        self.calls.append(("get_account", (provider_address,)))
        if self.balance is None:
            raise AccountNotFoundError(f"Account not found for {provider_address}")
        return Account(balance=self.balance)

    async def transfer_funds(self, provider_address: str, service_type: str, amount: int) -> None:
        self.calls.append(("transfer_funds", (provider_address, service_type, amount)))
        if self.transfer_error:
            raise self.transfer_error
        self.balance = (self.balance or 0) + amount

    async def process_response(
        self,
        provider_address: str,
        content: str,
        chat_id: str,
    ) -> bool | None:
        self.calls.append(("process_response", (provider_address, content, chat_id)))
        if self.verify_error:
            raise self.verify_error
        return self.verify_result


class FakePriceService:
    """In-memory fake satisfying the ``PriceService`` protocol."""

    def __init__(
        self,
        tickers: list[Ticker] | None = None,
        popular: list[Ticker] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.tickers = tickers if tickers is not None else [Ticker(symbol="BTCUSDT", price="97123.456")]
        self.popular = popular if popular is not None else [
            Ticker(symbol="BTCUSDT", price="97123.456"),
            Ticker(symbol="ETHUSDT", price="3412.1"),
        ]
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    async def fetch_prices(self, symbol: str | None = None) -> list[Ticker]:
        self.calls.append(("fetch_prices", symbol))
        if self.error:
            raise self.error
        return self.tickers

    async def fetch_popular(self) -> list[Ticker]:
        self.calls.append(("fetch_popular", None))
        if self.error:
            raise self.error
        return self.popular


class FakeInference:
    """In-memory fake satisfying the ``InferenceService`` protocol."""

    def __init__(
        self,
        completion: ChatCompletion | None = None,
        error: Exception | None = None,
    ) -> None:
        self.completion = completion or ChatCompletion(
            id="chatcmpl-42", content="BTC is consolidating near support."
        )
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        endpoint: str,
        model: str,
        messages: list[dict[str, str]],
        headers: dict[str, str] | None = None,
    ) -> ChatCompletion:
        self.calls.append({
            "endpoint": endpoint,
            "model": model,
            "messages": messages,
            "headers": headers,
        })
        if self.error:
            raise self.error
        return self.completion


class SpyReporter:
    """Spy satisfying the ``ProgressReporter`` protocol.

    Captures every ``step_start`` / ``step_end`` call for assertions.
    """

    def __init__(self) -> None:
        self.events: list[dict[str, str]] = []

    def step_start(self, step: str) -> None:
        """Record a step-start event."""
        self.events.append({"step": step, "status": "started"})

    def step_end(self, step: str) -> None:
        """Record a step-end event."""
        self.events.append({"step": step, "status": "completed"})


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Return a ``Settings`` instance populated with safe test defaults."""
    return Settings(
        price_api_url="https://prices.test/fapi/v1/ticker/price",
        broker_url="http://broker.test",
        broker_timeout_seconds=1.0,
        http_timeout_seconds=1.0,
        strict_acknowledgement_check=False,
    )


@pytest.fixture
def provider() -> ProviderSelection:
    """Return a selected provider."""
    return ProviderSelection(
        address=PROVIDER_ADDRESS,
        name="Provider One",
        model="llama-3.3-70b-instruct",
        endpoint="https://provider.test/v1/proxy",
    )


@pytest.fixture
def session(provider: ProviderSelection) -> ChatSession:
    """Return a session with ``provider`` selected."""
    chat_session = ChatSession()
    chat_session.select_provider(provider)
    return chat_session


@pytest.fixture
def fake_broker() -> FakeBroker:
    """Return an acknowledged, funded ``FakeBroker``."""
    return FakeBroker()


@pytest.fixture
def fake_prices() -> FakePriceService:
    """Return a ``FakePriceService`` with canned tickers."""
    return FakePriceService()


@pytest.fixture
def fake_inference() -> FakeInference:
    """Return a ``FakeInference`` with a canned completion."""
    return FakeInference()


@pytest.fixture
def spy_reporter() -> SpyReporter:
    """Return a fresh ``SpyReporter`` instance."""
    return SpyReporter()


@pytest.fixture
def noop_reporter() -> NoOpReporter:
    """Return a ``NoOpReporter`` from the protocols module."""
    return NoOpReporter()


@pytest.fixture
def clients(
    fake_broker: FakeBroker,
    fake_prices: FakePriceService,
    fake_inference: FakeInference,
    spy_reporter: SpyReporter,
) -> AssistantClients:
    """Return ``AssistantClients`` wired to the fakes."""
    return AssistantClients(
        broker=fake_broker,
        prices=fake_prices,
        inference=fake_inference,
        reporter=spy_reporter,
    )


@pytest.fixture
def assistant(clients: AssistantClients, test_settings: Settings) -> TradingAssistant:
    """Return a ``TradingAssistant`` wired to the fakes."""
    return TradingAssistant(clients, test_settings)
