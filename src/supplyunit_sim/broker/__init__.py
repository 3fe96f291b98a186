"""
Broker Module
=============

Clients for the coordination broker: node registration, status heartbeat
and supply notification.
"""

from supplyunit_sim.broker.client import (
    BrokerError,
    ChannelError,
    ChannelType,
    NodeClient,
    RegistrationError,
    SupplyChannel,
)

__all__ = [
    "BrokerError",
    "ChannelError",
    "ChannelType",
    "NodeClient",
    "RegistrationError",
    "SupplyChannel",
]
