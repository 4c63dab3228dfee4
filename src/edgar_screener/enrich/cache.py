"""Time-boxed snapshot cache with serve-stale-on-error refresh.

A `TimedCache` holds one value produced by an async fetch function. `get()`
returns the cached value while it is younger than `ttl` seconds and refreshes
it otherwise. If the refresh raises `TransportError`, the previous value (or
`default()` when there is none) is returned and the clock is left untouched,
so the next call tries again.

Concurrent refreshes are not coordinated: a refresh is idempotent and the last
one to finish wins.
"""

from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Generic, TypeVar

from edgar_screener.errors import TransportError

log = logging.getLogger(__name__)

T = TypeVar("T")

DAY = 24 * 60 * 60.0
HOUR = 60 * 60.0


class TimedCache(Generic[T]):
    """Cache one fetched value for `ttl` seconds.

    Args:
        fetch: Coroutine function producing a fresh value.
        ttl: Validity window in seconds.
        default: Factory for the value served when nothing was ever fetched.
        name: Label used in log lines.
        clock: Clock returning seconds, injectable for tests.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        ttl: float,
        default: Callable[[], T],
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._ttl = ttl
        self._default = default
        self._clock = clock
        self.name = name
        self._value: T | None = None
        self._loaded = False
        self._stamp: float | None = None

    @property
    def is_fresh(self) -> bool:
        return self._stamp is not None and self._clock() - self._stamp < self._ttl

    async def get(self) -> T:
        """Return the cached value, refreshing it first when stale."""
        if self.is_fresh:
            return self._value  # type: ignore[return-value]

        try:
            value = await self._fetch()
        except TransportError as e:
            if not self._loaded:
                log.warning("%s: refresh failed and nothing cached: %s", self.name, e)
                return self._default()
            log.warning("%s: refresh failed, serving stale value: %s", self.name, e)
            return self._value  # type: ignore[return-value]

        self.put(value)
        return value

    def put(self, value: T) -> None:
        """Store `value` as fresh from now."""
        self._value = value
        self._loaded = True
        self._stamp = self._clock()

    def invalidate(self) -> None:
        """Mark the value stale; it is still served if the next refresh fails."""
        if self._stamp is not None:
            self._stamp = None
            log.info("%s: invalidated", self.name)
