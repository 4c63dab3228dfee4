"""Per-provider admission queue that paces outbound requests.

A `RateLimitedQueue` admits submitted tasks in FIFO order, starts at most
`interval_cap` of them inside any `interval`-second window, and keeps at most
`concurrency` of them in flight. It does not limit how many tasks callers
submit at once; it only decides when each one starts.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")

# SEC allows 10 requests/second; stay below it.
SEC_INTERVAL_CAP = 8
SEC_INTERVAL = 1.0

# FMP allows 200 requests/minute; one request every 400ms is 2.5/s.
FMP_INTERVAL_CAP = 1
FMP_INTERVAL = 0.4


class RateLimitedQueue:
    """FIFO interval scheduler for one upstream provider.

    Args:
        interval_cap: Maximum number of task starts per window.
        interval: Window length in seconds.
        concurrency: Maximum number of tasks running at the same time.
        name: Label used in log lines.
        clock: Monotonic clock, injectable for tests.
        sleep: Coroutine used to wait, injectable for tests.
    """

    def __init__(
        self,
        interval_cap: int,
        interval: float,
        concurrency: int = 1,
        name: str = "queue",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_cap < 1 or concurrency < 1:
            raise ValueError("interval_cap and concurrency must be >= 1")
        self.name = name
        self._interval = interval
        self._clock = clock
        self._sleep = sleep
        self._starts: deque[float] = deque(maxlen=interval_cap)
        self._admission = asyncio.Lock()
        self._slots = asyncio.Semaphore(concurrency)
        self._waiting = 0
        self._running = 0

    async def submit(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run `task` once the queue admits it and return its result.

        Exceptions raised by `task` propagate to this caller only; the queue
        keeps admitting the tasks behind it.
        """
        self._waiting += 1
        try:
            async with self._admission:
                await self._slots.acquire()
                try:
                    await self._wait_for_window()
                except BaseException:
                    self._slots.release()
                    raise
                self._starts.append(self._clock())
        finally:
            self._waiting -= 1

        self._running += 1
        try:
            return await task()
        finally:
            self._running -= 1
            self._slots.release()

    async def _wait_for_window(self) -> None:
        if len(self._starts) < (self._starts.maxlen or 0):
            return
        delay = self._starts[0] + self._interval - self._clock()
        if delay > 0:
            log.debug("%s: waiting %.3fs for a free slot", self.name, delay)
            await self._sleep(delay)

    def stats(self) -> dict[str, int]:
        """Return `size` (tasks waiting for admission) and `pending` (in flight)."""
        return {"size": self._waiting, "pending": self._running}


def sec_queue() -> RateLimitedQueue:
    """Queue for the SEC EDGAR feed (8 starts per second)."""
    return RateLimitedQueue(SEC_INTERVAL_CAP, SEC_INTERVAL, name="sec")


def fmp_queue() -> RateLimitedQueue:
    """Queue for Financial Modeling Prep (one start every 400ms)."""
    return RateLimitedQueue(FMP_INTERVAL_CAP, FMP_INTERVAL, name="fmp")
