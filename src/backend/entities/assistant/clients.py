"""Client container for dependency injection.

``AssistantClients`` bundles every I/O dependency a send cycle needs.
Production code constructs it via ``create_assistant_clients()`` from a
shared ``httpx.AsyncClient``; tests construct it from in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from config.settings import Settings
from entities.broker import BrokerGatewayClient
from entities.inference import InferenceClient
from entities.market import PriceFetcher
from entities.shared.protocols import (
    Broker,
    InferenceService,
    NoOpReporter,
    PriceService,
    ProgressReporter,
)


@dataclass
class AssistantClients:
    """Every external dependency of ``TradingAssistant``."""

    broker: Broker
    prices: PriceService
    inference: InferenceService
    reporter: ProgressReporter = field(default_factory=NoOpReporter)


def create_assistant_clients(
    settings: Settings,
    http_client: httpx.AsyncClient,
    reporter: ProgressReporter | None = None,
) -> AssistantClients:
    """Build production clients sharing one HTTP connection pool.

    Args:
        settings: Application settings.
        http_client: Shared async HTTP client (owned by the caller).
        reporter: Optional progress reporter (defaults to ``NoOpReporter``).

    Returns:
        A populated ``AssistantClients``.
    """
    return AssistantClients(
        broker=BrokerGatewayClient(http_client, settings.broker_url),
        prices=PriceFetcher(http_client, settings.price_api_url, settings.popular_symbols),
        inference=InferenceClient(http_client),
        reporter=reporter or NoOpReporter(),
    )
