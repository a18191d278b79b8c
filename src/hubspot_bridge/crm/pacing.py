"""Fixed-interval pacing for sequential HubSpot calls.

HubSpot applies per-app rate limits. Property provisioning issues its
creation calls one at a time and waits at least ``interval`` seconds
between the start of consecutive calls. This is a throttle only: there is
no adaptive backoff and no retry on 429.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable


class IntervalPacer:
    """Enforce a minimum spacing between successive calls.

    Usage:
        pacer = IntervalPacer(0.1)
        for item in items:
            await pacer.wait()
            await do_call(item)

    The first wait() returns immediately.

    Args:
        interval: Minimum seconds between two wait() returns.
        sleep: Awaitable sleep function, replaceable in tests.
        clock: Monotonic clock, replaceable in tests.
    """

    def __init__(
        self,
        interval: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._last: float | None = None

    async def wait(self) -> None:
        if self._last is not None:
            remaining = self.interval - (self._clock() - self._last)
            if remaining > 0:
                await self._sleep(remaining)
        self._last = self._clock()
