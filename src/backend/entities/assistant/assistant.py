"""TradingAssistant: runs one chat send cycle against a paid provider.

The assistant checks that the provider is acknowledged, enriches trading
questions with live prices, makes sure the provider sub-account is funded,
calls the inference endpoint and hands the response to the broker for
verification. All state lives on the ``ChatSession`` passed in.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable
from typing import TypeVar

from config.settings import Settings, get_settings
from entities.market import format_for_display
from entities.shared.errors import (
    AccountNotFoundError,
    ProviderNotAcknowledgedError,
    UnderfundedError,
    friendly_message,
)
from models import ChatCompletion, Message, ProviderSelection

from .clients import AssistantClients
from .intent import extract_symbol, is_trading_related
from .session import ChatSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

SERVICE_TYPE = "inference"

STEP_ACKNOWLEDGEMENT = "Checking provider acknowledgement..."
STEP_PRICES = "Fetching live prices..."
STEP_PREPARE = "Preparing request..."
STEP_FUNDING = "Checking account balance..."
STEP_GENERATE = "Generating response..."
STEP_VERIFY = "Verifying response..."

NOT_ACKNOWLEDGED_MESSAGE = (
    "Error: please verify this provider on the Services page before chatting."
)
NOT_ACKNOWLEDGED_STATUS = "Please verify this provider on the Services page first"
PRICE_FAILURE_STATUS = "Failed to fetch price data, continuing without it"
ACCOUNT_CREATION_FAILED = (
    "Account creation failed, check that the main ledger balance is sufficient"
)
TOP_UP_FAILED = "Insufficient account balance, top up on the Account page first"


def signed_payload(content: str) -> str:
    """Serialize the message list that the broker signs for billing."""
    return json.dumps(
        [{"role": "user", "content": content}],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def with_price_context(content: str, price_text: str) -> str:
    """Append a live price block to the text sent to the model."""
    if not price_text:
        return content
    return f"{content}\n\n[Live price data]\n{price_text}"


class TradingAssistant:
    """Sequences the remote calls of a chat send cycle.

    Responsibilities:
    1. Guard against empty input, missing provider and concurrent sends
    2. Check provider acknowledgement
    3. Enrich trading questions with live prices
    4. Keep the provider sub-account funded
    5. Call the inference endpoint and verify the response
    6. Turn failures into user-facing messages
    """

    def __init__(self, clients: AssistantClients, settings: Settings | None = None) -> None:
        """Initialize the TradingAssistant.

        Args:
            clients: Broker, price, inference and progress dependencies
            settings: Optional settings override (defaults to ``get_settings()``)
        """
        self.clients = clients
        self.settings = settings or get_settings()

    async def _broker_call(self, call: Awaitable[T]) -> T:
        return await asyncio.wait_for(call, timeout=self.settings.broker_timeout_seconds)

    async def send(self, session: ChatSession, text: str) -> None:
        """Run one send cycle, recording every outcome on *session*.

        Failures are reported as assistant messages and never raised.
        Cancellation still propagates.
        """
        provider = session.provider
        if not text.strip() or provider is None:
            return
        if session.busy:
            logger.info("Ignoring send for busy session %s", session.session_id)
            return

        session.append(Message(role="user", content=text))
        session.loading = True

        try:
            await self._run_cycle(session, provider, text)
        except Exception as e:
            logger.error("Send failed for session %s: %s", session.session_id, e, exc_info=True)
            friendly = friendly_message(e)
            session.append(Message(role="assistant", content=f"❌ Error: {friendly}"))
            session.set_status(f"Error: {friendly}", self.settings.error_status_seconds)
        finally:
            session.loading = False

    async def _run_cycle(self, session: ChatSession, provider: ProviderSelection, text: str) -> None:
        if not await self._check_acknowledged(session, provider):
            return

        model_content = text
        if is_trading_related(text):
            model_content = with_price_context(text, await self._fetch_price_context(session, text))

        reporter = self.clients.reporter
        broker = self.clients.broker

        reporter.step_start(STEP_PREPARE)
        try:
            metadata = await self._broker_call(broker.service_metadata(provider.address))
            headers = await self._broker_call(
                broker.request_headers(provider.address, signed_payload(text))
            )
        finally:
            reporter.step_end(STEP_PREPARE)

        reporter.step_start(STEP_FUNDING)
        try:
            await self.ensure_funded(provider.address)
        finally:
            reporter.step_end(STEP_FUNDING)

        reporter.step_start(STEP_GENERATE)
        try:
            completion = await self.clients.inference.complete(
                metadata.endpoint,
                metadata.model,
                [{"role": "user", "content": model_content}],
                headers,
            )
        finally:
            reporter.step_end(STEP_GENERATE)

        session.append(
            Message(role="assistant", content=completion.content, id=completion.id, verified=False)
        )

        if completion.id:
            await self._verify(session, provider, completion)

    async def _check_acknowledged(self, session: ChatSession, provider: ProviderSelection) -> bool:
        """Return False (after telling the user) when the provider is not acknowledged.

        An error from the check itself is logged and ignored unless
        ``strict_acknowledgement_check`` is set.
        """
        reporter = self.clients.reporter
        reporter.step_start(STEP_ACKNOWLEDGEMENT)
        try:
            acknowledged = await self._broker_call(
                self.clients.broker.acknowledgement_status(provider.address)
            )
        except Exception as e:
            if self.settings.strict_acknowledgement_check:
                raise ProviderNotAcknowledgedError(
                    f"Provider acknowledgement check failed: {e}"
                ) from e
            logger.warning("Acknowledgement check failed for %s: %s", provider.address, e)
            return True
        finally:
            reporter.step_end(STEP_ACKNOWLEDGEMENT)

        if not acknowledged:
            logger.info("Provider %s is not acknowledged", provider.address)
            session.append(Message(role="assistant", content=NOT_ACKNOWLEDGED_MESSAGE))
            session.set_status(NOT_ACKNOWLEDGED_STATUS)
            return False
        return True

    async def _fetch_price_context(self, session: ChatSession, text: str) -> str:
        """Fetch and format prices for a trading question; empty string on failure."""
        reporter = self.clients.reporter
        session.fetching_prices = True
        reporter.step_start(STEP_PRICES)
        try:
            symbol = extract_symbol(text)
            if symbol:
                tickers = await self.clients.prices.fetch_prices(symbol)
            else:
                tickers = await self.clients.prices.fetch_popular()
            return format_for_display(tickers, limit=self.settings.price_display_limit)
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to fetch price data: %s", e)
            session.set_status(PRICE_FAILURE_STATUS)
            return ""
        finally:
            session.fetching_prices = False
            reporter.step_end(STEP_PRICES)

    async def ensure_funded(self, provider_address: str) -> None:
        """Create or top up the provider sub-account as needed.

        Raises:
            UnderfundedError: If creating or topping up the sub-account fails.
        """
        broker = self.clients.broker
        amount = self.settings.top_up_amount

        try:
            account = await self._broker_call(broker.get_account(provider_address))
        except AccountNotFoundError:
            logger.info("No sub-account for %s, creating it with a transfer", provider_address)
            try:
                await self._broker_call(
                    broker.transfer_funds(provider_address, SERVICE_TYPE, amount)
                )
                account = await self._broker_call(broker.get_account(provider_address))
            except Exception as e:
                logger.error("Creating sub-account for %s failed: %s", provider_address, e)
                raise UnderfundedError(ACCOUNT_CREATION_FAILED) from e

        if account.balance <= self.settings.low_balance_threshold:
            logger.info(
                "Sub-account balance %d for %s is low, topping up",
                account.balance,
                provider_address,
            )
            try:
                await self._broker_call(
                    broker.transfer_funds(provider_address, SERVICE_TYPE, amount)
                )
            except Exception as e:
                logger.error("Top-up transfer failed: %s", e)
                raise UnderfundedError(TOP_UP_FAILED) from e

    async def _verify(
        self,
        session: ChatSession,
        provider: ProviderSelection,
        completion: ChatCompletion,
    ) -> None:
        """Submit a response for verification and record the outcome."""
        chat_id = completion.id
        if chat_id is None:
            return

        reporter = self.clients.reporter
        session.verifying_message_id = chat_id
        session.set_status("Verifying response...")
        reporter.step_start(STEP_VERIFY)
        try:
            try:
                valid = await self._broker_call(
                    self.clients.broker.process_response(
                        provider.address, completion.content, chat_id
                    )
                )
            except Exception as e:  # noqa: BLE001
                logger.error("Verification failed for response %s: %s", chat_id, e)
                valid = False

            if valid is False:
                session.mark_verify_error(chat_id)
                session.set_status("Response verification failed", self.settings.verify_status_seconds)
            else:
                session.mark_verified(chat_id)
                session.set_status("Response verified", self.settings.verify_status_seconds)
        finally:
            session.verifying_message_id = None
            reporter.step_end(STEP_VERIFY)
