from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Callable
from unittest.mock import Mock

import pytest
import requests

from edgar_screener.config import Settings
from edgar_screener.errors import ConfigurationError, RateLimitExceeded, TransportError
from edgar_screener.ingest.parse_feed import ParsedFeed
from edgar_screener.ingest.rate_limit import RateLimitedQueue
from edgar_screener.ingest.sec_feed import MAX_PAGES, RESULTS_PER_PAGE, SecCurrentFeed
from edgar_screener.models import Filing
from edgar_screener.transport import FEED_TIMEOUT

START = date(2024, 1, 1)
END = date(2024, 1, 31)


def _filing(n: int, filed: date = date(2024, 1, 15)) -> Filing:
    return Filing(company=f"Company {n}", identifier=str(n + 1), form_type="10-K", filing_date=filed)


def _page(first: int, count: int = RESULTS_PER_PAGE, filed: date = date(2024, 1, 15)) -> ParsedFeed:
    return ParsedFeed(filings=[_filing(first + i, filed) for i in range(count)], entry_count=count)


def _feed(pages: Callable[[int], ParsedFeed]) -> tuple[SecCurrentFeed, list[int]]:
    """Feed whose `fetch_page` serves `pages(start)` and records each offset."""
    feed = SecCurrentFeed(Settings(sec_user_agent="ua", fmp_api_key=None), RateLimitedQueue(100, 1.0))
    offsets: list[int] = []

    async def fetch_page(form_type: str, start: int) -> ParsedFeed:
        offsets.append(start)
        return pages(start)

    feed.fetch_page = fetch_page  # type: ignore[method-assign]
    return feed, offsets


def test_single_page_request_stops_after_one_page() -> None:
    feed, offsets = _feed(lambda start: _page(start))
    out = asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=False, page=3))
    assert offsets == [200]
    assert len(out) == RESULTS_PER_PAGE


def test_three_stale_pages_stop_pagination() -> None:
    # every page repeats the same 100 filings
    feed, offsets = _feed(lambda start: _page(0))
    out = asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True))
    assert offsets == [0, 100, 200, 300]
    assert len(out) == RESULTS_PER_PAGE


def test_short_page_stops_pagination() -> None:
    feed, offsets = _feed(lambda start: _page(start) if start == 0 else _page(start, count=40))
    out = asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True))
    assert offsets == [0, 100]
    assert len(out) == 140


def test_page_reaching_past_start_date_stops_and_filters() -> None:
    def pages(start: int) -> ParsedFeed:
        page = _page(start)
        page.filings[-1] = _filing(999, START - timedelta(days=1))
        page.filings[0] = _filing(998, END + timedelta(days=1))
        return page

    feed, offsets = _feed(pages)
    out = asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True))
    assert offsets == [0]
    assert len(out) == RESULTS_PER_PAGE - 2
    assert all(START <= f.filing_date <= END for f in out)


def test_date_filter_is_inclusive() -> None:
    def pages(start: int) -> ParsedFeed:
        return ParsedFeed(filings=[_filing(1, START), _filing(2, END)], entry_count=2)

    feed, _ = _feed(pages)
    out = asyncio.run(feed.fetch_recent("10-K", START, END))
    assert [f.filing_date for f in out] == [START, END]


def test_page_ceiling_bounds_the_loop(caplog: pytest.LogCaptureFixture) -> None:
    feed, offsets = _feed(lambda start: _page(start))
    with caplog.at_level(logging.WARNING):
        out = asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True))
    assert len(offsets) == MAX_PAGES
    assert len(out) == MAX_PAGES * RESULTS_PER_PAGE
    assert "page limit" in caplog.text


def test_rate_limit_is_fatal() -> None:
    def pages(start: int) -> ParsedFeed:
        raise TransportError("slow down", status_code=429)

    feed, _ = _feed(pages)
    with pytest.raises(RateLimitExceeded):
        asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True))


def test_other_failures_keep_what_was_fetched() -> None:
    def pages(start: int) -> ParsedFeed:
        if start:
            raise TransportError("bad gateway", status_code=502)
        return _page(start)

    feed, offsets = _feed(pages)
    out = asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True))
    assert offsets == [0, 100]
    assert len(out) == RESULTS_PER_PAGE


def test_fetch_page_sends_getcurrent_request() -> None:
    resp = Mock(status_code=200, content=b"<feed xmlns='http://www.w3.org/2005/Atom'></feed>")
    session = Mock()
    session.get.return_value = resp
    feed = SecCurrentFeed(Settings(sec_user_agent="ua", fmp_api_key=None), RateLimitedQueue(8, 1.0), session=session)

    parsed = asyncio.run(feed.fetch_page("10-K", 200))

    assert parsed.entry_count == 0
    params = session.get.call_args.kwargs["params"]
    assert params["action"] == "getcurrent"
    assert params["type"] == "10-K"
    assert params["start"] == 200
    assert params["count"] == RESULTS_PER_PAGE


def test_user_agent_is_required() -> None:
    feed = SecCurrentFeed(Settings(sec_user_agent="", fmp_api_key=None), RateLimitedQueue(8, 1.0))
    with pytest.raises(ConfigurationError):
        asyncio.run(feed.fetch_recent("10-K", START, END))


def test_feed_request_uses_feed_timeout_and_maps_timeouts() -> None:
    session = Mock()
    session.get.return_value = Mock(status_code=200, content=b"<feed xmlns='http://www.w3.org/2005/Atom'></feed>")
    feed = SecCurrentFeed(Settings(sec_user_agent="ua", fmp_api_key=None), RateLimitedQueue(8, 1.0), session=session)

    asyncio.run(feed.fetch_page("10-K", 0))
    assert session.get.call_args.kwargs["timeout"] == FEED_TIMEOUT

    session.get.side_effect = requests.Timeout("read timed out")
    with pytest.raises(TransportError, match="timed out"):
        asyncio.run(feed.fetch_page("10-K", 0))
    # a timeout mid-pagination ends the walk instead of failing the request
    assert asyncio.run(feed.fetch_recent("10-K", START, END, fetch_all=True)) == []
