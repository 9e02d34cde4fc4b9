"""
Conversation models.

These models represent the messages, provider selection and broker
records that flow through a chat session.
"""

import time
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Message(BaseModel):
    """A single chat message shown in the conversation."""

    role: Literal["user", "assistant"] = Field(description="Who authored the message")
    content: str = Field(description="Message text")
    id: str | None = Field(default=None, description="Inference response id (assistant only)")
    verified: bool | None = Field(
        default=None, description="Whether the broker accepted the response"
    )
    verify_error: bool = Field(default=False, description="Set when verification failed")


class ProviderSelection(BaseModel):
    """The inference provider chosen by the user."""

    model_config = ConfigDict(frozen=True)

    address: str = Field(description="Provider address on the broker ledger")
    name: str = Field(default="", description="Display name")
    model: str = Field(default="", description="Advertised model name")
    endpoint: str = Field(default="", description="Advertised service endpoint")


class ServiceMetadata(BaseModel):
    """Connection details returned by the broker for a provider."""

    endpoint: str = Field(description="Base URL of the provider's OpenAI-compatible API")
    model: str = Field(description="Model identifier to request")


class Account(BaseModel):
    """A provider sub-account on the broker ledger."""

    balance: int = Field(description="Balance in base units")


class ChatCompletion(BaseModel):
    """The parts of a chat completion response the assistant consumes."""

    id: str | None = Field(default=None, description="Response id used for verification")
    content: str = Field(description="First choice message content")


@dataclass
class StatusMessage:
    """A transient status line. ``expires_at`` is a ``time.monotonic()`` value."""

    text: str
    expires_at: float | None = None

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = time.monotonic() if now is None else now
        return current >= self.expires_at
