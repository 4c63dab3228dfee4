"""Near-real-time filings from the SEC EDGAR "getcurrent" feed.

The feed only lists the most recent filings and ignores date parameters, so
every page is filtered client-side and pagination stops on heuristics:

- a single-page request stops after the first page;
- three consecutive pages adding no unseen filing mean the feed has cycled;
- a short page means the feed has no more data;
- a page reaching past `start_date` means the window is covered.

`MAX_PAGES` bounds the loop whatever the feed returns.
"""

from __future__ import annotations

import logging
from datetime import date

import requests  # type: ignore[import-untyped]

from edgar_screener.config import Settings
from edgar_screener.errors import RateLimitExceeded, TransportError
from edgar_screener.ingest.parse_feed import ParsedFeed, parse_current_feed
from edgar_screener.ingest.rate_limit import RateLimitedQueue
from edgar_screener.models import Filing, FilingKey
from edgar_screener.transport import FEED_TIMEOUT, get_bytes, new_session

log = logging.getLogger(__name__)

SEC_BROWSE_URL = "https://www.sec.gov/cgi-bin/browse-edgar"
RESULTS_PER_PAGE = 100
MAX_PAGES = 50
MAX_STALE_PAGES = 3


class SecCurrentFeed:
    """Paginator over the SEC "getcurrent" ATOM feed.

    Args:
        settings: Pipeline settings (the SEC User-Agent is required).
        queue: Rate-limited queue shared by every SEC request.
        session: Optional preconfigured `requests.Session`.
    """

    def __init__(
        self,
        settings: Settings,
        queue: RateLimitedQueue,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._queue = queue
        self._session = session

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = new_session({
                "User-Agent": self._settings.require_sec_user_agent(),
                "Accept-Encoding": "gzip, deflate",
            })
        return self._session

    async def fetch_page(self, form_type: str, start: int) -> ParsedFeed:
        """Fetch and parse the feed page beginning at offset `start`."""
        session = self._get_session()
        params = {
            "action": "getcurrent",
            "type": form_type,
            "owner": "exclude",
            "output": "atom",
            "count": RESULTS_PER_PAGE,
            "start": start,
        }
        raw = await self._queue.submit(
            lambda: get_bytes(session, SEC_BROWSE_URL, params=params, timeout=FEED_TIMEOUT)
        )
        return parse_current_feed(raw)

    async def fetch_recent(
        self,
        form_type: str,
        start_date: date,
        end_date: date,
        fetch_all: bool = False,
        page: int = 1,
    ) -> list[Filing]:
        """Return filings of `form_type` filed between the two dates (inclusive).

        Args:
            form_type: Form type to request (e.g. '10-K').
            start_date: First filing date to keep.
            end_date: Last filing date to keep.
            fetch_all: Follow pages until a stop condition fires; otherwise
                fetch only `page`.
            page: 1-indexed feed page to start from.

        Returns:
            Filings in feed order, each identity key at most once.

        Raises:
            RateLimitExceeded: if the SEC answers 429.
        """
        filings: list[Filing] = []
        seen: set[FilingKey] = set()
        offset = (page - 1) * RESULTS_PER_PAGE
        pages = 0
        stale_pages = 0

        log.info(
            "SEC getcurrent fetch: form=%s range=%s..%s fetch_all=%s page=%d",
            form_type, start_date, end_date, fetch_all, page,
        )

        while pages < MAX_PAGES:
            try:
                parsed = await self.fetch_page(form_type, offset)
            except TransportError as e:
                if e.status_code == 429:
                    raise RateLimitExceeded("SEC API rate limit exceeded") from e
                log.warning("SEC fetch failed at start=%d, keeping %d filings: %s", offset, len(filings), e)
                break
            pages += 1

            new_count = 0
            for filing in parsed.filings:
                if not start_date <= filing.filing_date <= end_date:
                    continue
                if filing.key in seen:
                    continue
                seen.add(filing.key)
                filings.append(filing)
                new_count += 1

            oldest = parsed.oldest_date
            log.info(
                "Page %d (start=%d): %d new, %d entries, oldest=%s, cumulative=%d",
                pages, offset, new_count, parsed.entry_count, oldest, len(filings),
            )

            stale_pages = stale_pages + 1 if new_count == 0 else 0

            if not fetch_all:
                break
            if stale_pages >= MAX_STALE_PAGES:
                log.info("Stopped: %d consecutive pages with no new filings", stale_pages)
                break
            if parsed.entry_count < RESULTS_PER_PAGE:
                log.info("Stopped: short page, feed has no more data")
                break
            if oldest is not None and oldest < start_date:
                log.info("Stopped: page reaches past %s", start_date)
                break
            offset += RESULTS_PER_PAGE
        else:
            log.warning("Reached the %d page limit; results may be incomplete", MAX_PAGES)

        log.info("SEC getcurrent complete: %d filings from %d pages", len(filings), pages)
        return filings
