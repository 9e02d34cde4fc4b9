"""HTTP client for OpenAI-compatible inference providers."""

import json
import logging
from typing import Any

import httpx
from entities.shared.errors import InferenceRequestError, MalformedResponseError
from models import ChatCompletion

logger = logging.getLogger(__name__)

BAD_RESPONSE_FORMAT = "AI service returned a bad response format"


def parse_completion(payload: Any) -> ChatCompletion:  # noqa: ANN401
    """Extract the first choice from a chat completion payload.

    Args:
        payload: Decoded JSON body.

    Returns:
        The response id (if any) and the first choice's message content.

    Raises:
        MalformedResponseError: If there is no first choice with message content.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError(BAD_RESPONSE_FORMAT)

    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise MalformedResponseError(BAD_RESPONSE_FORMAT)

    message = choices[0].get("message")
    if not isinstance(message, dict) or not isinstance(message.get("content"), str):
        raise MalformedResponseError(BAD_RESPONSE_FORMAT)

    response_id = payload.get("id")
    return ChatCompletion(
        id=str(response_id) if response_id else None,
        content=message["content"],
    )


class InferenceClient:
    """Posts non-streaming chat completions to a provider endpoint."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def complete(
        self,
        endpoint: str,
        model: str,
        messages: list[dict[str, str]],
        headers: dict[str, str] | None = None,
    ) -> ChatCompletion:
        """Request a chat completion.

        Args:
            endpoint: Provider base URL; ``/chat/completions`` is appended.
            model: Model identifier.
            messages: OpenAI-style message list.
            headers: Extra headers (billing headers from the broker).

        Returns:
            The parsed completion.

        Raises:
            InferenceRequestError: On transport failures or non-2xx responses.
            MalformedResponseError: If the body is not a usable completion.
        """
        url = f"{endpoint.rstrip('/')}/chat/completions"
        request_headers = {"Content-Type": "application/json", **(headers or {})}
        body = {"messages": messages, "model": model, "stream": False}

        try:
            response = await self.client.post(url, headers=request_headers, json=body)
        except httpx.HTTPError as e:
            logger.error("Inference request to %s failed: %s", url, e)
            raise InferenceRequestError(f"AI service request failed: {e}") from e

        if not response.is_success:
            raise InferenceRequestError(
                f"AI service request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            payload = response.json()
        except json.JSONDecodeError as e:
            raise MalformedResponseError(BAD_RESPONSE_FORMAT) from e

        return parse_completion(payload)
