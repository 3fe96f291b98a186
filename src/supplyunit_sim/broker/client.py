"""
Broker Client
=============

WebSocket clients for the coordination broker.

Two connections are used:
    - NodeClient: talks to the node ID server (registration, status
      heartbeat, deregistration)
    - SupplyChannel: talks to the server address handed out at
      registration and delivers supply notifications

Messages are JSON objects with a ``type`` discriminator:

    -> {"type": "register", "name": "SU-Sim", "channel_types": [10, 12], "arg": "SU-Sim"}
    <- {"type": "registered", "node_id": 7, "server": "127.0.0.1:10000"}
    <- {"type": "error", "message": "..."}
    -> {"type": "status", "node_id": 7, "status": 0, "arg": "PC-Sim"}
    -> {"type": "unregister", "node_id": 7}
    -> {"type": "notify_supply", "node_id": 7, "channel_type": 13,
        "arg": "SU-Sim", "name": "BarGraphs", "content": "<base64>"}

Design Rules:
    - Registration failures raise RegistrationError (fatal for callers)
    - Transport failures on an established node raise ChannelError
    - SupplyChannel connects lazily and drops its connection on error, so
      the next call reconnects
"""

import asyncio
import base64
import json
import logging
from enum import IntEnum
from typing import Iterable, List, Optional

import websockets
from websockets.exceptions import WebSocketException


logger = logging.getLogger(__name__)


class ChannelType(IntEnum):
    """Broker channel capability identifiers."""

    PEOPLE_COUNTER_SVC = 10
    PEOPLE_AGENT_SVC = 12
    GEOGRAPHIC_SVC = 13


class BrokerError(Exception):
    """Base class for broker communication failures."""


class RegistrationError(BrokerError):
    """Node registration was refused or could not be completed."""


class ChannelError(BrokerError):
    """A message could not be delivered on an established channel."""


_TRANSPORT_ERRORS = (OSError, asyncio.TimeoutError, WebSocketException)


def _ws_url(address: str) -> str:
    if address.startswith(("ws://", "wss://")):
        return address
    return f"ws://{address}"


class NodeClient:
    """
    Connection to the node ID server.

    Attributes:
        address: host:port (or ws:// URL) of the node server
        name: Node name announced at registration
        channel_types: Declared channel capabilities
        node_id: Broker-assigned id (None until registered)
        server_address: Address for supply channels (None until registered)

    Example:
        node = NodeClient("127.0.0.1:9990", "SU-Sim",
                          [ChannelType.PEOPLE_COUNTER_SVC, ChannelType.PEOPLE_AGENT_SVC])
        server = await node.register()
        await node.set_status(0, "PC-Sim")
        await node.unregister()
    """

    def __init__(
        self,
        address: str,
        name: str,
        channel_types: Iterable[int],
        connect_timeout: float = 5.0,
    ) -> None:
        self.address = address
        self.name = name
        self.channel_types: List[int] = [int(c) for c in channel_types]
        self.connect_timeout = connect_timeout

        self.node_id: Optional[int] = None
        self.server_address: Optional[str] = None
        self._websocket: Optional[object] = None

    @property
    def registered(self) -> bool:
        return self.node_id is not None

    async def register(self) -> str:
        """
        Register this node and obtain the supply server address.

        Returns:
            Server address for SupplyChannel

        Raises:
            RegistrationError: On connection failure, timeout or refusal
        """
        url = _ws_url(self.address)
        try:
            self._websocket = await websockets.connect(
                url,
                open_timeout=self.connect_timeout,
                close_timeout=self.connect_timeout,
            )
            await self._websocket.send(json.dumps({
                "type": "register",
                "name": self.name,
                "channel_types": self.channel_types,
                "arg": self.name,
            }))
            raw = await asyncio.wait_for(
                self._websocket.recv(),
                timeout=self.connect_timeout,
            )
        except _TRANSPORT_ERRORS as e:
            await self.close()
            raise RegistrationError(f"Can't register node at {url}: {e!r}") from e

        try:
            reply = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            await self.close()
            raise RegistrationError(f"Malformed registration reply: {e}") from e

        if reply.get("type") != "registered":
            await self.close()
            raise RegistrationError(
                f"Registration refused: {reply.get('message', reply)}"
            )

        try:
            self.node_id = int(reply["node_id"])
            self.server_address = str(reply["server"])
        except (KeyError, ValueError, TypeError) as e:
            await self.close()
            raise RegistrationError(f"Incomplete registration reply: {reply}") from e

        logger.info(
            f"Registered node {self.name} (id={self.node_id}), "
            f"server at [{self.server_address}]"
        )
        return self.server_address

    async def set_status(self, status: int, arg: str) -> None:
        """
        Announce node status.

        Raises:
            ChannelError: If not registered or the send fails
        """
        await self._send({
            "type": "status",
            "node_id": self.node_id,
            "status": status,
            "arg": arg,
        })

    async def unregister(self) -> None:
        """
        Deregister the node and close the connection.

        Raises:
            ChannelError: If not registered or the send fails
        """
        try:
            await self._send({"type": "unregister", "node_id": self.node_id})
            logger.info(f"Unregistered node {self.name} (id={self.node_id})")
        finally:
            self.node_id = None
            await self.close()

    async def close(self) -> None:
        """Close the node connection if open."""
        ws = self._websocket
        self._websocket = None
        if ws is not None:
            try:
                await ws.close()
            except _TRANSPORT_ERRORS as e:
                logger.debug(f"Error closing node connection: {e!r}")

    async def _send(self, message: dict) -> None:
        if self._websocket is None or self.node_id is None:
            raise ChannelError("Node is not registered")
        try:
            await self._websocket.send(json.dumps(message))
        except _TRANSPORT_ERRORS as e:
            raise ChannelError(f"Send to node server failed: {e!r}") from e


class SupplyChannel:
    """
    Publish channel bound to one capability on the supply server.

    Attributes:
        server_address: Address returned by NodeClient.register()
        channel_type: Capability this channel publishes on
        node_id: Registered node id
        arg: Free-form channel argument (the node name)
    """

    def __init__(
        self,
        server_address: str,
        channel_type: int,
        node_id: int,
        arg: str = "",
        connect_timeout: float = 5.0,
    ) -> None:
        self.server_address = server_address
        self.channel_type = int(channel_type)
        self.node_id = node_id
        self.arg = arg
        self.connect_timeout = connect_timeout

        self._websocket: Optional[object] = None

    @property
    def connected(self) -> bool:
        return self._websocket is not None

    async def notify_supply(self, name: str, content: bytes) -> None:
        """
        Deliver one named payload.

        Args:
            name: Semantic type of the payload (e.g. "BarGraphs")
            content: Serialized payload

        Raises:
            ChannelError: If the server can't be reached or the send fails
        """
        message = json.dumps({
            "type": "notify_supply",
            "node_id": self.node_id,
            "channel_type": self.channel_type,
            "arg": self.arg,
            "name": name,
            "content": base64.b64encode(content).decode("ascii"),
        })

        try:
            if self._websocket is None:
                self._websocket = await websockets.connect(
                    _ws_url(self.server_address),
                    open_timeout=self.connect_timeout,
                    close_timeout=self.connect_timeout,
                )
                logger.info(f"Connected supply channel to {self.server_address}")
            await self._websocket.send(message)
        except _TRANSPORT_ERRORS as e:
            await self.close()
            raise ChannelError(
                f"Supply notification to {self.server_address} failed: {e!r}"
            ) from e

    async def close(self) -> None:
        """Close the channel connection if open."""
        ws = self._websocket
        self._websocket = None
        if ws is not None:
            try:
                await ws.close()
            except _TRANSPORT_ERRORS as e:
                logger.debug(f"Error closing supply channel: {e!r}")
