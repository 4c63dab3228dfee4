from __future__ import annotations

import asyncio

import pytest

from edgar_screener.enrich.cache import TimedCache
from edgar_screener.errors import ConfigurationError, TransportError


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class Source:
    """Fetch function that returns queued values or raises queued errors."""

    def __init__(self, *results: object) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def test_value_is_reused_within_ttl_and_refreshed_after() -> None:
    clock = Clock()
    source = Source("a", "b")
    cache = TimedCache(source, 10.0, lambda: "default", clock=clock)

    assert asyncio.run(cache.get()) == "a"
    clock.now = 9.9
    assert asyncio.run(cache.get()) == "a"
    assert source.calls == 1

    clock.now = 10.0
    assert asyncio.run(cache.get()) == "b"
    assert source.calls == 2


def test_stale_value_served_when_refresh_fails() -> None:
    clock = Clock()
    source = Source("a", TransportError("down"), "c")
    cache = TimedCache(source, 10.0, lambda: "default", clock=clock)

    asyncio.run(cache.get())
    clock.now = 20.0
    assert asyncio.run(cache.get()) == "a"
    assert not cache.is_fresh
    # the failed refresh leaves the value stale, so the next call retries
    assert asyncio.run(cache.get()) == "c"
    assert source.calls == 3


def test_default_served_when_nothing_cached() -> None:
    source = Source(TransportError("down"), "a")
    cache = TimedCache(source, 10.0, list, clock=Clock())

    assert asyncio.run(cache.get()) == []
    assert asyncio.run(cache.get()) == "a"


def test_invalidate_forces_refresh_but_keeps_stale_value() -> None:
    clock = Clock()
    source = Source("a", "b", TransportError("down"))
    cache = TimedCache(source, 100.0, lambda: None, clock=clock)

    asyncio.run(cache.get())
    cache.invalidate()
    assert asyncio.run(cache.get()) == "b"

    cache.invalidate()
    assert asyncio.run(cache.get()) == "b"


def test_put_overrides_value() -> None:
    clock = Clock()
    source = Source(True)
    cache = TimedCache(source, 100.0, lambda: False, clock=clock)

    assert asyncio.run(cache.get()) is True
    cache.put(False)
    assert asyncio.run(cache.get()) is False
    assert source.calls == 1


def test_configuration_error_propagates() -> None:
    cache = TimedCache(Source(ConfigurationError("no key")), 10.0, lambda: None, clock=Clock())
    with pytest.raises(ConfigurationError):
        asyncio.run(cache.get())
