"""
Publish Cycle Scheduler
=======================

Drives the generate -> encode -> publish cycle on a periodic ticker.

On every tick the scheduler checks the gating modulus. Qualifying ticks
(``tick % publish_every == 0``) produce exactly one publish attempt:

    1. Generate a ReadingBatch stamped with the current wall clock
    2. Encode it to BarGraphs bytes
    3. Hand it to the supply channel under ``payload_name``

Design Rules:
    - Publishes are strictly sequential, one per qualifying tick
    - Channel failures become a failed PublishResult; the loop logs it and
      moves on to the next tick
    - No retry queue and no backoff; the next attempt happens at the next
      qualifying tick
    - Failure logging is throttled during a sustained outage
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from supplyunit_sim.broker.client import BrokerError
from supplyunit_sim.models.reading import NamedLocation
from supplyunit_sim.scheduler.ticker import Ticker
from supplyunit_sim.supply.codec import encode_batch
from supplyunit_sim.supply.generator import SupplyReadingGenerator


logger = logging.getLogger(__name__)


class SupplyPublisher(Protocol):
    """
    Protocol for publish channels.

    Implemented by broker.SupplyChannel; tests substitute in-memory fakes.
    """

    async def notify_supply(self, name: str, content: bytes) -> None:
        """Deliver a named payload, raising BrokerError on failure."""
        ...


@dataclass(frozen=True, slots=True)
class PublishResult:
    """
    Outcome of one publish attempt.

    Attributes:
        tick: Tick index the attempt belongs to
        ok: Whether the channel accepted the payload
        reading_count: Number of readings in the payload
        error: Failure description when ok is False
    """

    tick: int
    ok: bool
    reading_count: int = 0
    error: Optional[str] = None


class PublisherMetrics:
    """Metrics for PublishScheduler observability."""

    __slots__ = (
        "ticks",
        "publishes_attempted",
        "publishes_succeeded",
        "publishes_failed",
        "consecutive_failures",
        "last_publish_time",
    )

    def __init__(self) -> None:
        self.ticks: int = 0
        self.publishes_attempted: int = 0
        self.publishes_succeeded: int = 0
        self.publishes_failed: int = 0
        self.consecutive_failures: int = 0
        self.last_publish_time: float = 0.0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "ticks": self.ticks,
            "publishes_attempted": self.publishes_attempted,
            "publishes_succeeded": self.publishes_succeeded,
            "publishes_failed": self.publishes_failed,
            "consecutive_failures": self.consecutive_failures,
            "last_publish_time": self.last_publish_time,
        }


class PublishScheduler:
    """
    Tick-gated publisher of synthetic supply readings.

    Attributes:
        roster: Locations published every qualifying tick
        publish_every: Gating modulus N
        payload_name: Name attached to each payload
        metrics: Operational metrics

    Example:
        scheduler = PublishScheduler(
            generator=SupplyReadingGenerator(rng),
            roster=load_roster(),
            channel=supply_channel,
            ticker=Ticker(interval=5.0),
        )
        task = asyncio.create_task(scheduler.run())
        ...
        scheduler.stop()
        await task
    """

    FAILURE_LOG_EVERY = 10

    def __init__(
        self,
        generator: SupplyReadingGenerator,
        roster: Sequence[NamedLocation],
        channel: SupplyPublisher,
        ticker: Ticker,
        publish_every: int = 1,
        payload_name: str = "BarGraphs",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if publish_every < 1:
            raise ValueError("publish_every must be >= 1")
        if not roster:
            raise ValueError("roster must not be empty")

        self.generator = generator
        self.roster = tuple(roster)
        self.channel = channel
        self.ticker = ticker
        self.publish_every = publish_every
        self.payload_name = payload_name
        self._clock = clock

        self.metrics = PublisherMetrics()

    def should_publish(self, tick: int) -> bool:
        return tick % self.publish_every == 0

    async def publish_once(self, tick: int) -> PublishResult:
        """
        Generate, encode and publish one batch.

        Channel errors are returned as a failed result, never raised.
        """
        now = self._clock()
        batch = self.generator.generate_batch(self.roster, int(now))
        payload = encode_batch(batch)

        try:
            await self.channel.notify_supply(self.payload_name, payload)
        except BrokerError as e:
            return PublishResult(tick=tick, ok=False, reading_count=len(batch), error=str(e))

        self.metrics.last_publish_time = now
        return PublishResult(tick=tick, ok=True, reading_count=len(batch))

    async def step(self, tick: int) -> Optional[PublishResult]:
        """
        Handle one tick.

        Returns:
            PublishResult for qualifying ticks, None otherwise
        """
        self.metrics.ticks += 1
        if not self.should_publish(tick):
            return None

        logger.info(f"Update supply unit (tick={tick})")
        result = await self.publish_once(tick)
        self._record(result)
        return result

    async def run(self) -> None:
        """
        Run until the ticker stops.

        Unexpected errors in a step are logged and the loop continues.
        """
        logger.info(
            f"Starting supply unit publisher: {len(self.roster)} locations, "
            f"interval={self.ticker.interval}s, publish_every={self.publish_every}"
        )

        async for tick in self.ticker:
            try:
                await self.step(tick)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"Publish step failed (tick={tick})")

        logger.info("Supply unit publisher stopped")

    def stop(self) -> None:
        self.ticker.stop()

    def _record(self, result: PublishResult) -> None:
        m = self.metrics
        m.publishes_attempted += 1

        if result.ok:
            if m.consecutive_failures:
                logger.info(
                    f"Publish recovered after {m.consecutive_failures} failures"
                )
            m.publishes_succeeded += 1
            m.consecutive_failures = 0
            logger.debug(f"Published {result.reading_count} readings (tick={result.tick})")
            return

        m.publishes_failed += 1
        m.consecutive_failures += 1
        streak = m.consecutive_failures
        message = (
            f"Connection failure (tick={result.tick}, "
            f"consecutive={streak}): {result.error}"
        )
        if streak == 1 or streak % self.FAILURE_LOG_EVERY == 0:
            logger.warning(message)
        else:
            logger.debug(message)
