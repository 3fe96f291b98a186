"""
Status Heartbeat
================

Periodic liveness announcement to the broker.

Runs independently of the publish scheduler with its own ticker. Failed
announcements are not retried; the next tick announces again.
"""

import asyncio
import logging
from typing import Protocol

from supplyunit_sim.broker.client import BrokerError
from supplyunit_sim.scheduler.ticker import Ticker


logger = logging.getLogger(__name__)


class StatusReporter(Protocol):
    """Protocol for status sinks (implemented by broker.NodeClient)."""

    async def set_status(self, status: int, arg: str) -> None:
        ...


class StatusHeartbeat:
    """
    Fixed status announcer.

    Attributes:
        status_code: Numeric status sent every beat
        label: Status label sent every beat
        beats_sent: Successful announcements
        beats_failed: Failed announcements
    """

    def __init__(
        self,
        reporter: StatusReporter,
        ticker: Ticker,
        status_code: int = 0,
        label: str = "PC-Sim",
    ) -> None:
        self.reporter = reporter
        self.ticker = ticker
        self.status_code = status_code
        self.label = label

        self.beats_sent: int = 0
        self.beats_failed: int = 0

    async def beat(self) -> bool:
        """Send one announcement. Returns False if it failed."""
        try:
            await self.reporter.set_status(self.status_code, self.label)
        except BrokerError as e:
            self.beats_failed += 1
            logger.debug(f"Status announcement failed: {e}")
            return False

        self.beats_sent += 1
        return True

    async def run(self) -> None:
        """Announce on every tick until the ticker stops."""
        logger.info(f"Starting status heartbeat every {self.ticker.interval}s")
        async for _ in self.ticker:
            try:
                await self.beat()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Status heartbeat failed")
        logger.info("Status heartbeat stopped")

    def stop(self) -> None:
        self.ticker.stop()

    def to_dict(self) -> dict:
        return {
            "beats_sent": self.beats_sent,
            "beats_failed": self.beats_failed,
        }
