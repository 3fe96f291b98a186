"""
Simulator Service
=================

Owns the lifecycle of the supply-unit simulator.

Startup:
    1. Load the location roster
    2. Register the node with the broker (failure is fatal)
    3. Open the supply channel on the returned server address
    4. Start the publish scheduler and status heartbeat tasks

Shutdown:
    1. Stop both tickers and wait briefly for the tasks
    2. Cancel tasks that did not finish
    3. Deregister from the broker (best effort)
    4. Close connections
"""

import asyncio
import logging
import time
from typing import Callable, Optional, Tuple

import numpy as np

from supplyunit_sim.broker.client import (
    BrokerError,
    ChannelType,
    NodeClient,
    SupplyChannel,
)
from supplyunit_sim.config import Settings
from supplyunit_sim.models.reading import NamedLocation
from supplyunit_sim.scheduler import PublishScheduler, StatusHeartbeat, Ticker
from supplyunit_sim.supply import SupplyReadingGenerator, load_roster


logger = logging.getLogger(__name__)


NODE_CHANNEL_TYPES = (ChannelType.PEOPLE_COUNTER_SVC, ChannelType.PEOPLE_AGENT_SVC)

ChannelFactory = Callable[[str, NodeClient], SupplyChannel]


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Process-wide random source shared by the sampler and generator."""
    return np.random.default_rng(seed)


def default_channel_factory(settings: Settings) -> ChannelFactory:
    def factory(server_address: str, node: NodeClient) -> SupplyChannel:
        return SupplyChannel(
            server_address=server_address,
            channel_type=ChannelType.GEOGRAPHIC_SVC,
            node_id=node.node_id,
            arg=settings.node.name,
            connect_timeout=settings.node.connect_timeout_seconds,
        )
    return factory


class SimulatorService:
    """
    Supply-unit simulator runtime.

    Attributes:
        settings: Explicit configuration
        roster: Loaded locations (empty until started)
        scheduler: Publish scheduler (None until started)
        heartbeat: Status heartbeat (None until started)
    """

    SHUTDOWN_TIMEOUT = 5.0

    def __init__(
        self,
        settings: Settings,
        node: Optional[NodeClient] = None,
        channel_factory: Optional[ChannelFactory] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        self.settings = settings
        self.node = node or NodeClient(
            address=settings.node.server,
            name=settings.node.name,
            channel_types=NODE_CHANNEL_TYPES,
            connect_timeout=settings.node.connect_timeout_seconds,
        )
        self._channel_factory = channel_factory or default_channel_factory(settings)
        self.rng = rng if rng is not None else make_rng(settings.simulation.seed)

        self.roster: Tuple[NamedLocation, ...] = ()
        self.channel: Optional[SupplyChannel] = None
        self.scheduler: Optional[PublishScheduler] = None
        self.heartbeat: Optional[StatusHeartbeat] = None
        self._tasks: list = []
        self._started_at: float = 0.0

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    async def start(self) -> None:
        """
        Register with the broker and start both loops.

        Raises:
            RegistrationError: If the broker refuses or is unreachable
        """
        sim = self.settings.simulation
        self.roster = load_roster(self.settings.roster.path)

        logger.info(
            f"Starting {self.settings.node.name}: broker={self.settings.node.server}, "
            f"port={self.settings.server.port}, agents={sim.agent_count}, "
            f"locations={len(self.roster)}"
        )

        server_address = await self.node.register()
        logger.info(f"Connecting supply server at [{server_address}]")
        self.channel = self._channel_factory(server_address, self.node)

        self.scheduler = PublishScheduler(
            generator=SupplyReadingGenerator(self.rng),
            roster=self.roster,
            channel=self.channel,
            ticker=Ticker(interval=sim.tick_interval_seconds),
            publish_every=sim.publish_every,
            payload_name=sim.payload_name,
        )
        self.heartbeat = StatusHeartbeat(
            reporter=self.node,
            ticker=Ticker(interval=sim.heartbeat_interval_seconds),
            status_code=self.settings.node.status_code,
            label=self.settings.node.status_label,
        )

        self._tasks = [
            asyncio.create_task(self.scheduler.run(), name="supply_publisher"),
            asyncio.create_task(self.heartbeat.run(), name="status_heartbeat"),
        ]
        self._started_at = time.time()
        logger.info("Starting supply unit simulator")

    async def stop(self) -> None:
        """Stop both loops and deregister (best effort)."""
        logger.info("Shutting down gracefully...")

        if self.scheduler:
            self.scheduler.stop()
        if self.heartbeat:
            self.heartbeat.stop()

        for task in self._tasks:
            try:
                await asyncio.wait_for(task, timeout=self.SHUTDOWN_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(f"Task {task.get_name()} did not stop, cancelling")
            except asyncio.CancelledError:
                pass
        self._tasks = []

        if self.node.registered:
            try:
                await self.node.unregister()
            except BrokerError as e:
                logger.warning(f"Deregistration failed: {e}")

        if self.channel is not None:
            await self.channel.close()
        await self.node.close()

        logger.info("Shutdown complete")

    def status(self) -> dict:
        """Snapshot of runtime state for the metrics endpoint."""
        return {
            "registered": self.node.registered,
            "node_id": self.node.node_id,
            "running": self.running,
            "uptime_seconds": round(time.time() - self._started_at, 1) if self._started_at else 0.0,
            "locations": len(self.roster),
            "agent_count": self.settings.simulation.agent_count,
            "publisher": self.scheduler.metrics.to_dict() if self.scheduler else {},
            "heartbeat": self.heartbeat.to_dict() if self.heartbeat else {},
        }
