"""Historical filings from the FMP `rss_feed` endpoint.

The endpoint accepts explicit date ranges and zero-indexed pages but is only
served on paid plans. A "premium required" answer is raised as
`ProviderUnavailable` so the caller can remember it and stop asking.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from edgar_screener.enrich.fmp import FMP_V4_BASE_URL, FmpClient
from edgar_screener.errors import ConfigurationError, ProviderUnavailable, TransportError
from edgar_screener.models import Filing
from edgar_screener.transport import FEED_TIMEOUT

log = logging.getLogger(__name__)

PAGE_SIZE = 100
PREMIUM_RE = re.compile(r"upgrade|premium|subscription|special endpoint", re.I)


def _is_premium_error(e: TransportError) -> bool:
    return e.status_code == 403 or bool(PREMIUM_RE.search(e.detail or ""))


def row_to_filing(row: dict[str, Any]) -> Filing:
    """Map one `rss_feed` row onto a `Filing`.

    Raises:
        ValueError: if the row lacks a CIK, form type or date.
    """
    raw_date = str(row.get("fillingDate") or row.get("date") or "")
    return Filing(
        company=row.get("title") or row.get("symbol") or "Unknown",
        identifier=row.get("cik"),
        form_type=row.get("type") or "",
        filing_date=raw_date[:10],
        document_url=row.get("link") or row.get("finalLink") or None,
    )


class FmpHistoricalFeed:
    """Date-filterable filings feed backed by `FmpClient`."""

    def __init__(self, client: FmpClient) -> None:
        self._client = client

    async def fetch_historical(
        self,
        form_type: str,
        start_date: date,
        end_date: date,
        page: int = 0,
        limit: int = PAGE_SIZE,
    ) -> list[Filing]:
        """Return one zero-indexed page of filings for the date range.

        `limit` is the page size the provider serves; callers compare the
        number of rows returned against it to detect the last page.

        Raises:
            ProviderUnavailable: if the plan does not include the feed.
            TransportError: on any other failure.
        """
        log.info("FMP rss_feed: form=%s range=%s..%s page=%d", form_type, start_date, end_date, page)
        try:
            rows = await self._client.get(
                "rss_feed",
                {
                    "type": form_type,
                    "from": start_date.isoformat(),
                    "to": end_date.isoformat(),
                    "page": page,
                },
                base=FMP_V4_BASE_URL,
                timeout=FEED_TIMEOUT,
            )
        except TransportError as e:
            if _is_premium_error(e):
                raise ProviderUnavailable(f"FMP rss_feed requires a premium plan: {e}") from e
            raise

        if not isinstance(rows, list):
            raise TransportError("FMP rss_feed response is not a list")

        filings: list[Filing] = []
        for row in rows:
            try:
                filings.append(row_to_filing(row))
            except (ValueError, TypeError, AttributeError) as e:
                log.debug("Skipping rss_feed row: %s", e)

        log.info("FMP rss_feed page %d: %d rows, %d filings", page, len(rows), len(filings))
        return filings

    async def probe(self) -> bool:
        """Return True if the configured key can read `rss_feed`."""
        if not self._client.configured:
            return False
        try:
            await self._client.get(
                "rss_feed", {"type": "10-K", "page": 0}, base=FMP_V4_BASE_URL
            )
        except (TransportError, ConfigurationError) as e:
            log.info("FMP rss_feed unavailable: %s", e)
            return False
        return True
