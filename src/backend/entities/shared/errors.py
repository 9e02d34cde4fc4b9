"""Error taxonomy for the send cycle.

Every failure the assistant can surface carries an explicit ``ErrorKind``.
Errors raised by an opaque broker implementation are classified by a small
set of message patterns as a fallback.
"""

from __future__ import annotations

from enum import Enum

import httpx


class ErrorKind(str, Enum):
    """Categories of send-cycle failures."""

    UNVERIFIED = "unverified"
    UNDERFUNDED = "underfunded"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_RESPONSE = "malformed_response"
    CONTRACT_REVERT = "contract_revert"
    UNKNOWN = "unknown"


class AssistantError(Exception):
    """Base class for failures that abort a send cycle."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class ProviderNotAcknowledgedError(AssistantError):
    """The provider has not been acknowledged by the user."""

    kind = ErrorKind.UNVERIFIED


class UnderfundedError(AssistantError):
    """The provider sub-account could not be created or topped up."""

    kind = ErrorKind.UNDERFUNDED


class InferenceRequestError(AssistantError):
    """The inference endpoint failed or returned a non-2xx status."""

    kind = ErrorKind.NETWORK_FAILURE

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(AssistantError):
    """The inference response did not contain a usable first choice."""

    kind = ErrorKind.MALFORMED_RESPONSE


class BrokerError(Exception):
    """A broker call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AccountNotFoundError(BrokerError):
    """No sub-account exists yet for the provider."""


# ── Fallback classification patterns ─────────────────────────────────────

_CONTRACT_REVERT_PATTERNS = {"missing revert data", "execution reverted"}
_UNDERFUNDED_PATTERNS = {"balance", "insufficient funds"}
_UNVERIFIED_PATTERNS = {"verif", "acknowledg"}

_FRIENDLY_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.CONTRACT_REVERT: (
        "The smart contract call failed. Make sure that: 1) the service is verified "
        "2) the account balance is sufficient 3) the network connection is working"
    ),
    ErrorKind.UNDERFUNDED: "Insufficient account balance, top up A0GI tokens on the Account page",
    ErrorKind.UNVERIFIED: "Please verify this provider on the Services page first",
}

TIMEOUT_MESSAGE = "The request timed out, please try again"


def classify_error(error: BaseException) -> ErrorKind:
    """Classify an exception into an ``ErrorKind``.

    Args:
        error: The exception raised during a send cycle.

    Returns:
        The typed kind for ``AssistantError`` subclasses, ``NETWORK_FAILURE``
        for transport errors, otherwise a kind inferred from the message.
    """
    if isinstance(error, AssistantError):
        return error.kind
    if isinstance(error, (httpx.HTTPError, TimeoutError)):
        return ErrorKind.NETWORK_FAILURE

    text = str(error).lower()
    for pattern in _CONTRACT_REVERT_PATTERNS:
        if pattern in text:
            return ErrorKind.CONTRACT_REVERT
    for pattern in _UNDERFUNDED_PATTERNS:
        if pattern in text:
            return ErrorKind.UNDERFUNDED
    for pattern in _UNVERIFIED_PATTERNS:
        if pattern in text:
            return ErrorKind.UNVERIFIED
    return ErrorKind.UNKNOWN


def friendly_message(error: BaseException) -> str:
    """Build the user-facing text for a failed send cycle.

    Kinds with a known remedy get instructions; everything else passes the
    raw message through.
    """
    kind = classify_error(error)
    if kind in _FRIENDLY_MESSAGES:
        return _FRIENDLY_MESSAGES[kind]
    if isinstance(error, TimeoutError) and not str(error):
        return TIMEOUT_MESSAGE
    return str(error) or type(error).__name__
