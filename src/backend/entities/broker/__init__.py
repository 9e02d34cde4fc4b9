"""Broker adapters satisfying the ``Broker`` protocol."""

from .gateway import BrokerGatewayClient

__all__ = ["BrokerGatewayClient"]
