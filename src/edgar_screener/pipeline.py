"""Pipeline boundary: one page of results, or every result for export.

`build_pipeline` wires one queue per provider, the long-lived caches and the
clients. Build it once per process and reuse it so that the caches and rate
limits are shared by every request.
"""

from __future__ import annotations

import logging

from edgar_screener.assemble.enrich_filings import FilingEnricher
from edgar_screener.assemble.paginate import dedupe_filings, paginate_results
from edgar_screener.config import Settings
from edgar_screener.enrich.fmp import FmpClient
from edgar_screener.enrich.market_cap import ProfileChain
from edgar_screener.enrich.otc import OtcMarketsClient
from edgar_screener.enrich.tickers import TickerResolver, otc_list_cache, stock_list_cache
from edgar_screener.ingest.fmp_feed import FmpHistoricalFeed
from edgar_screener.ingest.hybrid import HybridFilingsSource, availability_cache
from edgar_screener.ingest.rate_limit import fmp_queue, sec_queue
from edgar_screener.ingest.sec_feed import SecCurrentFeed
from edgar_screener.models import ExportResult, FilingQuery, PaginatedResult

log = logging.getLogger(__name__)


class FilingsPipeline:
    """Fetch, enrich, filter, dedupe and paginate filings.

    Args:
        source: Filing source (normally `HybridFilingsSource`).
        enricher: Enrichment and market-cap filtering step.
    """

    def __init__(self, source: HybridFilingsSource, enricher: FilingEnricher) -> None:
        self.source = source
        self.enricher = enricher

    async def fetch_page(self, query: FilingQuery) -> PaginatedResult:
        """Fetch one upstream page and return page `query.page` of the results.

        Raises:
            RateLimitExceeded: if the SEC feed answers 429.
            ConfigurationError: if a provider is not configured.
        """
        log.info("Fetching filings: %s", query.model_dump(mode="json"))
        filings = await self.source.fetch(
            query.form_type, query.start_date, query.end_date,
            fetch_all=False, page=query.page,
        )
        if not filings:
            return paginate_results([], query.page, query.limit)

        enriched = await self.enricher.enrich(filings, query.criteria)
        return paginate_results(dedupe_filings(enriched), query.page, query.limit)

    async def export_all(self, query: FilingQuery) -> ExportResult:
        """Fetch every upstream page and return all matching filings.

        `query.page` and `query.limit` are ignored.
        """
        log.info("Exporting all filings: %s", query.model_dump(mode="json", exclude={"page", "limit"}))
        filings = await self.source.fetch(
            query.form_type, query.start_date, query.end_date, fetch_all=True,
        )
        if not filings:
            return ExportResult(data=[], total=0)

        unique = dedupe_filings(await self.enricher.enrich(filings, query.criteria))
        log.info("Returning %d filings for export", len(unique))
        return ExportResult(data=unique, total=len(unique))


def build_pipeline(settings: Settings) -> FilingsPipeline:
    """Wire the production clients, queues and caches for `settings`."""
    sec = sec_queue()
    fmp_q = fmp_queue()

    fmp = FmpClient(settings, fmp_q)
    otc = OtcMarketsClient()
    historical = FmpHistoricalFeed(fmp)

    source = HybridFilingsSource(
        recent=SecCurrentFeed(settings, sec),
        historical=historical,
        availability=availability_cache(historical),
    )
    resolver = TickerResolver(
        fmp,
        stock_list_cache(fmp),
        otc_list_cache(otc) if settings.otc_name_lookup else None,
    )
    enricher = FilingEnricher(resolver, ProfileChain(fmp, otc))
    return FilingsPipeline(source, enricher)
