"""Broker adapter that talks to a broker gateway over HTTP.

The gateway hosts the broker SDK (wallet, ledger contract, request signing
and response verification). This adapter only forwards calls and maps
failures onto ``BrokerError`` so it satisfies the ``Broker`` protocol.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx
from entities.shared.errors import AccountNotFoundError, BrokerError
from models import Account, ServiceMetadata

logger = logging.getLogger(__name__)


class BrokerGatewayClient:
    """``Broker`` implementation backed by a broker gateway service.

    Example:
        >>> broker = BrokerGatewayClient(httpx.AsyncClient(), "http://localhost:3001")
        >>> await broker.acknowledgement_status("0xabc")
        True
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")

    def _provider_url(self, provider_address: str, suffix: str) -> str:
        return f"{self.base_url}/inference/providers/{quote(provider_address, safe='')}/{suffix}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:  # noqa: ANN401
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise BrokerError(f"Broker gateway unreachable: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND and "/accounts/" in url:
            raise AccountNotFoundError(f"Account not found: {response.text}", status_code=404)
        if not response.is_success:
            logger.warning("Broker call %s %s failed: %s", method, url, response.status_code)
            raise BrokerError(
                f"Broker call failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BrokerError(
                f"Broker gateway returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

    async def acknowledgement_status(self, provider_address: str) -> bool:
        data = await self._request("GET", self._provider_url(provider_address, "acknowledged"))
        return bool(data.get("acknowledged"))

    async def service_metadata(self, provider_address: str) -> ServiceMetadata:
        data = await self._request("GET", self._provider_url(provider_address, "metadata"))
        return ServiceMetadata.model_validate(data)

    async def request_headers(self, provider_address: str, content: str) -> dict[str, str]:
        data = await self._request(
            "POST",
            self._provider_url(provider_address, "headers"),
            json={"content": content},
        )
        return {str(k): str(v) for k, v in (data.get("headers") or {}).items()}

    async def get_account(self, provider_address: str) -> Account:
        data = await self._request(
            "GET", f"{self.base_url}/inference/accounts/{quote(provider_address, safe='')}"
        )
        return Account(balance=int(data["balance"]))

    async def transfer_funds(self, provider_address: str, service_type: str, amount: int) -> None:
        # Amount is a decimal string; base-unit values exceed float precision.
        await self._request(
            "POST",
            f"{self.base_url}/ledger/transfers",
            json={"provider": provider_address, "service_type": service_type, "amount": str(amount)},
        )
        logger.info("Transferred %d to %s (%s)", amount, provider_address, service_type)

    async def process_response(
        self,
        provider_address: str,
        content: str,
        chat_id: str,
    ) -> bool | None:
        data = await self._request(
            "POST",
            self._provider_url(provider_address, "responses"),
            json={"content": content, "chat_id": chat_id},
        )
        if data is None:
            return None
        return data.get("valid")
