"""
Scheduler Tests
===============

Ticker cadence, tick-gated publishing, failure isolation and heartbeat.
Async code is driven with asyncio.run.
"""

import asyncio
import logging

import pytest

from supplyunit_sim.scheduler import (
    PublishScheduler,
    StatusHeartbeat,
    Ticker,
)
from supplyunit_sim.supply import SupplyReadingGenerator, decode_batch


def _collect(ticker):
    async def run():
        return [tick async for tick in ticker]
    return asyncio.run(run())


def _scheduler(roster, rng, channel, ticks, publish_every=10):
    return PublishScheduler(
        generator=SupplyReadingGenerator(rng),
        roster=roster,
        channel=channel,
        ticker=Ticker(interval=0, max_ticks=ticks),
        publish_every=publish_every,
        clock=lambda: 1700000000.5,
    )


class TestTicker:
    """Tests for the periodic Ticker."""

    def test_yields_consecutive_ticks(self):
        """Ticks are 0..n-1."""
        assert _collect(Ticker(interval=0.001, max_ticks=5)) == [0, 1, 2, 3, 4]

    def test_stop_wakes_pending_wait(self):
        """stop() ends a long wait promptly."""
        ticker = Ticker(interval=60.0)

        async def run():
            seen = []

            async def consume():
                async for tick in ticker:
                    seen.append(tick)

            task = asyncio.create_task(consume())
            await asyncio.sleep(0.05)
            ticker.stop()
            await asyncio.wait_for(task, timeout=1.0)
            return seen

        assert asyncio.run(run()) == [0]
        assert ticker.stopped

    def test_overrun_reanchors(self):
        """A slow consumer does not receive a burst of catch-up ticks."""
        now = [0.0]
        ticker = Ticker(interval=1.0, max_ticks=3, clock=lambda: now[0])

        async def run():
            stamps = []
            async for tick in ticker:
                stamps.append(now[0])
                now[0] += 5.0
            return stamps

        assert asyncio.run(run()) == [0.0, 5.0, 10.0]

    def test_negative_interval(self):
        with pytest.raises(ValueError):
            Ticker(interval=-1)


class TestPublishScheduler:
    """Tests for PublishScheduler."""

    def test_publishes_only_on_qualifying_ticks(self, roster, rng, fake_channel):
        """With N=10 over 30 ticks, publishes happen at 0, 10 and 20."""
        scheduler = _scheduler(roster, rng, fake_channel, ticks=30)

        async def run():
            results = {}
            for tick in range(30):
                results[tick] = await scheduler.step(tick)
            return results

        results = asyncio.run(run())
        published = [tick for tick, result in results.items() if result is not None]
        assert published == [0, 10, 20]
        assert len(fake_channel.sent) == 3
        assert scheduler.metrics.ticks == 30
        assert scheduler.metrics.publishes_attempted == 3

    def test_payload_is_named_batch(self, roster, rng, fake_channel):
        """The payload decodes to the roster, stamped with the wall clock."""
        scheduler = _scheduler(roster, rng, fake_channel, ticks=1)
        result = asyncio.run(scheduler.publish_once(0))

        assert result.ok
        assert result.reading_count == 3
        name, content = fake_channel.sent[0]
        assert name == "BarGraphs"
        batch = decode_batch(content)
        assert batch.labels == ("Station", "Castle", "University")
        assert {r.timestamp for r in batch} == {1700000000}

    def test_failure_does_not_stop_next_publish(self, roster, rng, make_channel):
        """A failure on tick 0 still lets tick 10 publish."""
        channel = make_channel(fail_calls={0})
        scheduler = _scheduler(roster, rng, channel, ticks=20)

        asyncio.run(scheduler.run())

        assert channel.calls == 2
        assert len(channel.sent) == 1
        m = scheduler.metrics
        assert (m.publishes_failed, m.publishes_succeeded) == (1, 1)
        assert m.consecutive_failures == 0

    def test_failed_result_carries_error(self, roster, rng, make_channel):
        """Channel errors come back as a failed PublishResult."""
        scheduler = _scheduler(roster, rng, make_channel(fail_calls={0}), ticks=1)
        result = asyncio.run(scheduler.step(0))
        assert not result.ok
        assert "connection not established" in result.error

    def test_failure_logging_is_throttled(self, roster, rng, make_channel, caplog):
        """A sustained outage warns on the 1st, 10th and 20th failure only."""
        channel = make_channel(fail_calls=range(25))
        scheduler = _scheduler(roster, rng, channel, ticks=25, publish_every=1)

        with caplog.at_level(logging.DEBUG, logger="supplyunit_sim.scheduler.publisher"):
            asyncio.run(scheduler.run())

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 3
        assert scheduler.metrics.consecutive_failures == 25

    def test_unexpected_error_does_not_exit_loop(self, roster, rng):
        """Errors other than broker failures are logged and the loop continues."""
        class ExplodingChannel:
            def __init__(self):
                self.calls = 0

            async def notify_supply(self, name, content):
                self.calls += 1
                raise RuntimeError("boom")

        channel = ExplodingChannel()
        asyncio.run(_scheduler(roster, rng, channel, ticks=3, publish_every=1).run())
        assert channel.calls == 3

    def test_invalid_arguments(self, roster, rng, fake_channel):
        with pytest.raises(ValueError):
            _scheduler(roster, rng, fake_channel, ticks=1, publish_every=0)
        with pytest.raises(ValueError):
            _scheduler((), rng, fake_channel, ticks=1)


class TestHeartbeat:
    """Tests for StatusHeartbeat."""

    def test_announces_every_tick(self, fake_node):
        """Each tick sends the fixed status."""
        heartbeat = StatusHeartbeat(fake_node, Ticker(interval=0, max_ticks=4))
        asyncio.run(heartbeat.run())
        assert fake_node.statuses == [(0, "PC-Sim")] * 4
        assert heartbeat.to_dict() == {"beats_sent": 4, "beats_failed": 0}

    def test_failures_are_fire_and_forget(self, make_node):
        """Announcement failures never end the loop."""
        node = make_node(fail_status=True)
        heartbeat = StatusHeartbeat(node, Ticker(interval=0, max_ticks=3))
        asyncio.run(heartbeat.run())
        assert heartbeat.beats_failed == 3
