"""Choose between the near-real-time SEC feed and the historical FMP feed.

Ranges of up to 30 days always use the SEC feed. Longer ranges use FMP when
its `rss_feed` is available (checked at most once an hour) and fall back to
the SEC feed on any failure. The SEC feed only lists recent filings, so the
fallback can return an incomplete set for old ranges.
"""

from __future__ import annotations

import logging
from datetime import date

from edgar_screener.enrich.cache import HOUR, TimedCache
from edgar_screener.errors import ProviderUnavailable, TransportError
from edgar_screener.ingest.fmp_feed import PAGE_SIZE, FmpHistoricalFeed
from edgar_screener.ingest.sec_feed import SecCurrentFeed
from edgar_screener.models import Filing

log = logging.getLogger(__name__)

RECENT_SPAN_DAYS = 30
# Safety bound for the historical fetch-all loop
MAX_HISTORICAL_PAGES = 200


def availability_cache(historical: FmpHistoricalFeed) -> TimedCache[bool]:
    """One-hour cache of the historical feed's availability probe."""
    return TimedCache(historical.probe, HOUR, lambda: False, name="fmp rss_feed availability")


class HybridFilingsSource:
    """Filing source that picks a feed from the requested date span.

    Args:
        recent: Near-real-time SEC feed.
        historical: Historical FMP feed.
        availability: Cached availability flag for `historical`.
    """

    def __init__(
        self,
        recent: SecCurrentFeed,
        historical: FmpHistoricalFeed,
        availability: TimedCache[bool],
    ) -> None:
        self._recent = recent
        self._historical = historical
        self._availability = availability

    async def fetch(
        self,
        form_type: str,
        start_date: date,
        end_date: date,
        fetch_all: bool = False,
        page: int = 1,
    ) -> list[Filing]:
        """Return filings for the range from the most suitable feed.

        Raises:
            RateLimitExceeded: if the SEC feed answers 429.
        """
        span = (end_date - start_date).days
        log.info("Hybrid fetch: form=%s range=%s..%s (%d days)", form_type, start_date, end_date, span)

        if span <= RECENT_SPAN_DAYS:
            log.info("Using SEC feed (range <= %d days)", RECENT_SPAN_DAYS)
            return await self._recent.fetch_recent(form_type, start_date, end_date, fetch_all, page)

        if await self._availability.get():
            try:
                return await self._fetch_historical(form_type, start_date, end_date, fetch_all, page)
            except ProviderUnavailable as e:
                log.warning("FMP rss_feed requires a premium plan: %s", e)
                self._availability.put(False)
            except TransportError as e:
                log.error("FMP rss_feed failed: %s", e)
            log.info("Falling back to SEC feed")

        log.warning(
            "Using SEC feed for a %d-day range; results may be incomplete for "
            "filings older than the feed's recent window",
            span,
        )
        return await self._recent.fetch_recent(form_type, start_date, end_date, fetch_all, page)

    async def _fetch_historical(
        self,
        form_type: str,
        start_date: date,
        end_date: date,
        fetch_all: bool,
        page: int,
    ) -> list[Filing]:
        if not fetch_all:
            single = await self._historical.fetch_historical(
                form_type, start_date, end_date, page=page - 1, limit=PAGE_SIZE
            )
            log.info("FMP returned %d filings", len(single))
            return single

        filings: list[Filing] = []
        for current in range(MAX_HISTORICAL_PAGES):
            batch = await self._historical.fetch_historical(
                form_type, start_date, end_date, page=current, limit=PAGE_SIZE
            )
            filings.extend(batch)
            if len(batch) < PAGE_SIZE:
                break
        else:
            log.warning("Reached the %d page limit for FMP; results may be incomplete", MAX_HISTORICAL_PAGES)

        log.info("FMP returned %d filings in total", len(filings))
        return filings
