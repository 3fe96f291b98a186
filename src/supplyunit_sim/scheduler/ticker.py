"""
Periodic Ticker
===============

Async timer yielding consecutive tick indices at a fixed cadence.

The first tick fires immediately. Later ticks are scheduled relative to the
start time on the monotonic clock, so processing time inside the consumer
does not accumulate drift. If the consumer overruns a deadline the ticker
re-anchors on the current time instead of firing a burst of late ticks.

Example:
    ticker = Ticker(interval=5.0)

    async for tick in ticker:
        await do_work(tick)

    # elsewhere
    ticker.stop()
"""

import asyncio
import logging
import time
from typing import AsyncIterator, Callable, Optional


logger = logging.getLogger(__name__)


class Ticker:
    """
    Fixed-period async tick source.

    Attributes:
        interval: Seconds between ticks (0 = back-to-back)
        max_ticks: Stop after this many ticks (None = run until stopped)
    """

    def __init__(
        self,
        interval: float,
        max_ticks: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if max_ticks is not None and max_ticks < 0:
            raise ValueError("max_ticks must be >= 0")

        self.interval = interval
        self.max_ticks = max_ticks
        self._clock = clock
        self._stop_event = asyncio.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Wake any pending wait and end iteration."""
        self._stop_event.set()

    def __aiter__(self) -> AsyncIterator[int]:
        return self.ticks()

    async def ticks(self) -> AsyncIterator[int]:
        """Yield 0, 1, 2, ... one per period until stopped."""
        tick = 0
        deadline = self._clock()

        while not self._stop_event.is_set():
            if self.max_ticks is not None and tick >= self.max_ticks:
                return

            yield tick
            tick += 1

            deadline += self.interval
            delay = deadline - self._clock()
            if delay < 0:
                logger.debug(f"Tick {tick} overran its deadline by {-delay:.3f}s")
                deadline = self._clock()
                delay = 0.0

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                return
            except asyncio.TimeoutError:
                pass
