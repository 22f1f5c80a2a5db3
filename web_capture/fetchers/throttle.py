# web_capture/fetchers/throttle.py
"""
Per-host request spacing: a fixed minimum delay plus random jitter.
"""
from __future__ import annotations

import asyncio
import random
import time
from typing import Awaitable, Callable, Dict, Optional

SleepFunc = Callable[[float], Awaitable[None]]


class HostThrottle:
    """Keeps successive requests to one host at least ``min_delay + jitter`` apart.

    The first request to a host is never delayed. State lives as long as the
    throttle instance, so reusing one strategy across targets spaces them out.
    """

    def __init__(
        self,
        min_delay: float,
        random_delay: float,
        rng: Optional[random.Random] = None,
        sleep: SleepFunc = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_delay = min_delay
        self.random_delay = random_delay
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_request: Dict[str, float] = {}

    def _interval(self) -> float:
        jitter = self._rng.uniform(0, self.random_delay) if self.random_delay > 0 else 0.0
        return self.min_delay + jitter

    async def wait(self, host: str) -> float:
        """Sleep until *host* may be requested again. Returns the time slept.

        The slot is reserved under the lock and the sleep happens outside it,
        so a request to one host never waits behind another host's delay.
        """
        async with self._lock:
            now = self._clock()
            waited = 0.0
            last = self._last_request.get(host)
            if last is not None:
                waited = max(0.0, self._interval() - (now - last))
            self._last_request[host] = now + waited
        if waited > 0:
            await self._sleep(waited)
        return waited
