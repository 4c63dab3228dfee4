from __future__ import annotations

import asyncio
from datetime import date, timedelta

from edgar_screener.enrich.cache import HOUR, TimedCache
from edgar_screener.errors import ProviderUnavailable, TransportError
from edgar_screener.ingest.fmp_feed import PAGE_SIZE
from edgar_screener.ingest.hybrid import HybridFilingsSource
from edgar_screener.models import Filing

START = date(2024, 1, 1)


def _filings(n: int, first: int = 0) -> list[Filing]:
    return [
        Filing(company=f"Co {i}", identifier=str(i + 1), form_type="10-K", filing_date=START)
        for i in range(first, first + n)
    ]


class FakeRecent:
    def __init__(self) -> None:
        self.calls: list[tuple[bool, int]] = []

    async def fetch_recent(self, form_type, start_date, end_date, fetch_all=False, page=1):
        self.calls.append((fetch_all, page))
        return _filings(1, first=500)


class FakeHistorical:
    def __init__(self, pages: list[object] | None = None) -> None:
        self.pages = pages or []
        self.calls: list[int] = []

    async def fetch_historical(self, form_type, start_date, end_date, page=0, limit=PAGE_SIZE):
        self.calls.append(page)
        result = self.pages[page] if page < len(self.pages) else []
        if isinstance(result, Exception):
            raise result
        return result


class Probe:
    def __init__(self, available: bool) -> None:
        self.available = available
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        return self.available


def _source(historical: FakeHistorical, available: bool) -> tuple[HybridFilingsSource, FakeRecent, Probe]:
    recent = FakeRecent()
    probe = Probe(available)
    source = HybridFilingsSource(recent, historical, TimedCache(probe, HOUR, lambda: False))  # type: ignore[arg-type]
    return source, recent, probe


def test_short_range_uses_sec_without_probing() -> None:
    source, recent, probe = _source(FakeHistorical(), True)
    asyncio.run(source.fetch("10-K", START, START + timedelta(days=30), page=2))
    assert recent.calls == [(False, 2)]
    assert probe.calls == 0


def test_long_range_without_historical_uses_sec_only() -> None:
    historical = FakeHistorical()
    source, recent, _ = _source(historical, False)
    out = asyncio.run(source.fetch("10-K", START, START + timedelta(days=45)))
    assert recent.calls == [(False, 1)]
    assert historical.calls == []
    assert len(out) == 1


def test_long_range_single_page_uses_zero_indexed_fmp_page() -> None:
    historical = FakeHistorical([_filings(3), _filings(2, first=3)])
    source, recent, _ = _source(historical, True)
    out = asyncio.run(source.fetch("10-K", START, START + timedelta(days=90), page=2))
    assert historical.calls == [1]
    assert len(out) == 2
    assert recent.calls == []


def test_long_range_fetch_all_reads_until_short_page() -> None:
    historical = FakeHistorical([_filings(PAGE_SIZE), _filings(PAGE_SIZE, first=PAGE_SIZE), _filings(7, first=200)])
    source, _, _ = _source(historical, True)
    out = asyncio.run(source.fetch("10-K", START, START + timedelta(days=365), fetch_all=True))
    assert historical.calls == [0, 1, 2]
    assert len(out) == 2 * PAGE_SIZE + 7


def test_premium_error_falls_back_and_is_remembered() -> None:
    historical = FakeHistorical([ProviderUnavailable("upgrade your plan")])
    source, recent, probe = _source(historical, True)
    span = START + timedelta(days=60)

    asyncio.run(source.fetch("10-K", START, span))
    asyncio.run(source.fetch("10-K", START, span))

    assert historical.calls == [0]
    assert len(recent.calls) == 2
    assert probe.calls == 1


def test_transport_error_falls_back_without_disabling() -> None:
    historical = FakeHistorical([TransportError("timeout")])
    source, recent, _ = _source(historical, True)
    span = START + timedelta(days=60)

    asyncio.run(source.fetch("10-K", START, span))
    asyncio.run(source.fetch("10-K", START, span))

    assert historical.calls == [0, 0]
    assert len(recent.calls) == 2
