"""
Scheduler Module
================

Timer-driven control loops:
    - Ticker: fixed-cadence async tick source
    - PublishScheduler: tick-gated generate/encode/publish cycle
    - StatusHeartbeat: periodic liveness announcement

Both loops run as independent asyncio tasks with their own tickers.
"""

from supplyunit_sim.scheduler.heartbeat import StatusHeartbeat, StatusReporter
from supplyunit_sim.scheduler.publisher import (
    PublishResult,
    PublishScheduler,
    PublisherMetrics,
    SupplyPublisher,
)
from supplyunit_sim.scheduler.ticker import Ticker

__all__ = [
    "Ticker",
    "PublishResult",
    "PublishScheduler",
    "PublisherMetrics",
    "SupplyPublisher",
    "StatusHeartbeat",
    "StatusReporter",
]
