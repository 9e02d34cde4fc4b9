"""Per-conversation chat state.

A ``ChatSession`` is passed explicitly to ``TradingAssistant.send`` and is
the only mutable state a send cycle touches.
"""

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from models import Message, ProviderSelection, StatusMessage

logger = logging.getLogger(__name__)


@dataclass
class ChatSession:
    """Messages, status flags and provider selection for one conversation."""

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    provider: ProviderSelection | None = None
    messages: list[Message] = field(default_factory=list)
    loading: bool = False
    fetching_prices: bool = False
    verifying_message_id: str | None = None
    _status: StatusMessage | None = None

    @property
    def busy(self) -> bool:
        """True while a send cycle is in flight."""
        return self.loading or self.fetching_prices

    @property
    def status(self) -> str | None:
        """Current status line, or None once it has expired."""
        if self._status is None or self._status.is_expired():
            return None
        return self._status.text

    def set_status(self, text: str, ttl_seconds: float | None = None) -> None:
        """Show a status line, optionally for a limited time."""
        expires_at = time.monotonic() + ttl_seconds if ttl_seconds is not None else None
        self._status = StatusMessage(text=text, expires_at=expires_at)

    def clear_status(self) -> None:
        self._status = None

    def select_provider(self, provider: ProviderSelection | None) -> None:
        """Select a provider. Switching providers starts a new conversation."""
        if provider != self.provider:
            self.messages = []
            self.verifying_message_id = None
            self._status = None
            logger.info(
                "Session %s switched provider to %s",
                self.session_id,
                provider.address if provider else None,
            )
        self.provider = provider

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def _update_by_id(self, message_id: str, **changes: Any) -> None:
        self.messages = [
            msg.model_copy(update=changes) if msg.id == message_id else msg
            for msg in self.messages
        ]

    def mark_verified(self, message_id: str) -> None:
        self._update_by_id(message_id, verified=True, verify_error=False)

    def mark_verify_error(self, message_id: str) -> None:
        self._update_by_id(message_id, verified=False, verify_error=True)


def verification_label(message: Message, verifying_message_id: str | None) -> str | None:
    """Badge shown next to an assistant message that carries a response id."""
    if message.role != "assistant" or not message.id:
        return None
    if message.verify_error:
        return "failed"
    if message.verified:
        return "verified"
    if verifying_message_id == message.id:
        return "verifying"
    return "unverified"


def render_session(session: ChatSession) -> dict[str, Any]:
    """Render the session for the frontend.

    Returns:
        A JSON-serializable snapshot of the conversation and its flags.
    """
    messages = []
    for msg in session.messages:
        data = msg.model_dump()
        data["verification"] = verification_label(msg, session.verifying_message_id)
        messages.append(data)

    return {
        "session_id": session.session_id,
        "provider": session.provider.model_dump() if session.provider else None,
        "messages": messages,
        "loading": session.loading,
        "fetching_prices": session.fetching_prices,
        "verifying_message_id": session.verifying_message_id,
        "status": session.status,
        "input_enabled": not session.busy,
    }
