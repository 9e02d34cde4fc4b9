"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
Production implementations wrap the broker gateway and HTTP clients;
test fakes return canned data with zero network access.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Protocol, runtime_checkable

from models import Account, ChatCompletion, ServiceMetadata, Ticker


@runtime_checkable
class Broker(Protocol):
    """Mediates the payment ledger and response verification for providers.

    The broker owns account creation, request signing and response
    verification. The assistant only sequences calls to it.
    """

    async def acknowledgement_status(self, provider_address: str) -> bool:
        """Return whether the user has acknowledged the provider.

        Args:
            provider_address: Provider address on the ledger.
        """
        ...

    async def service_metadata(self, provider_address: str) -> ServiceMetadata:
        """Return the provider's endpoint and model identifier.

        Args:
            provider_address: Provider address on the ledger.
        """
        ...

    async def request_headers(self, provider_address: str, content: str) -> dict[str, str]:
        """Return signed billing headers for a request.

        Args:
            provider_address: Provider address on the ledger.
            content: JSON-encoded message list that is signed.
        """
        ...

    async def get_account(self, provider_address: str) -> Account:
        """Return the provider sub-account.

        Args:
            provider_address: Provider address on the ledger.

        Raises:
            AccountNotFoundError: If no sub-account exists yet.
        """
        ...

    async def transfer_funds(self, provider_address: str, service_type: str, amount: int) -> None:
        """Move funds from the main ledger into a provider sub-account.

        Args:
            provider_address: Provider address on the ledger.
            service_type: Service the sub-account pays for (``"inference"``).
            amount: Amount in base units.
        """
        ...

    async def process_response(
        self,
        provider_address: str,
        content: str,
        chat_id: str,
    ) -> bool | None:
        """Verify and settle a response.

        Args:
            provider_address: Provider address on the ledger.
            content: Response text returned by the provider.
            chat_id: Response id returned by the provider.

        Returns:
            ``False`` if the response is invalid; ``True`` or ``None`` otherwise.
        """
        ...


@runtime_checkable
class PriceService(Protocol):
    """Fetches live ticker prices."""

    async def fetch_prices(self, symbol: str | None = None) -> list[Ticker]:
        """Fetch one symbol, or every symbol when ``symbol`` is None."""
        ...

    async def fetch_popular(self) -> list[Ticker]:
        """Fetch the configured popular symbols, skipping failures."""
        ...


@runtime_checkable
class InferenceService(Protocol):
    """Requests chat completions from a provider endpoint."""

    async def complete(
        self,
        endpoint: str,
        model: str,
        messages: list[dict[str, str]],
        headers: dict[str, str] | None = None,
    ) -> ChatCompletion:
        """Return the first choice of a non-streaming completion."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Receives the start and end of each send-cycle step."""

    def step_start(self, step: str) -> None:
        """Called when *step* (a display label) begins."""
        ...

    def step_end(self, step: str) -> None:
        """Called when *step* finishes, whether or not it succeeded."""
        ...


# ---------------------------------------------------------------------------
# Reporters
# ---------------------------------------------------------------------------


class NoOpReporter:
    """Reporter for callers without a progress UI."""

    def step_start(self, step: str) -> None:
        pass

    def step_end(self, step: str) -> None:
        pass


class QueueReporter:
    """Reporter that feeds step events to the SSE stream.

    Events are dicts with ``step`` and ``status`` keys; completed events
    also carry ``duration_ms``.

    Args:
        queue: Queue drained by the chat stream endpoint.
    """

    def __init__(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        self._queue = queue
        self._started: dict[str, float] = {}

    def step_start(self, step: str) -> None:
        self._started[step] = time.monotonic()
        self._queue.put_nowait({"step": step, "status": "started"})

    def step_end(self, step: str) -> None:
        started = self._started.pop(step, None)
        event: dict[str, Any] = {"step": step, "status": "completed"}
        if started is not None:
            event["duration_ms"] = int((time.monotonic() - started) * 1000)
        self._queue.put_nowait(event)
