"""Shared protocols and error taxonomy."""

from .errors import (
    AccountNotFoundError,
    AssistantError,
    BrokerError,
    ErrorKind,
    classify_error,
    friendly_message,
)
from .protocols import Broker, NoOpReporter, ProgressReporter, QueueReporter

__all__ = [
    "AccountNotFoundError",
    "AssistantError",
    "Broker",
    "BrokerError",
    "ErrorKind",
    "NoOpReporter",
    "ProgressReporter",
    "QueueReporter",
    "classify_error",
    "friendly_message",
]
