"""Merge filings with ticker and market-cap data and apply market-cap bounds.

Lookups run in sequential batches of `BATCH_SIZE`; the members of a batch run
concurrently. Each lookup is still paced by its provider's rate-limited queue,
so the batch size only caps how many logical lookups are outstanding at once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Protocol, Sequence, TypeVar

from edgar_screener.models import CompanyProfile, EnrichedFiling, Filing, FilterCriteria

log = logging.getLogger(__name__)

BATCH_SIZE = 5

K = TypeVar("K")
V = TypeVar("V")


class Resolver(Protocol):
    async def resolve(self, identifier: str, company_hint: str | None = None) -> str | None: ...


class ProfileSource(Protocol):
    async def profile(self, ticker: str) -> CompanyProfile | None: ...


def _chunks(items: Sequence[K], size: int) -> Iterable[Sequence[K]]:
    """Yield consecutive slices of `items` of length `size` (last may be shorter)."""
    for i in range(0, len(items), size):
        yield items[i : i + size]


async def gather_in_batches(
    items: Sequence[K],
    lookup: Callable[[K], Awaitable[V | None]],
    label: str,
    batch_size: int = BATCH_SIZE,
) -> dict[K, V]:
    """Run `lookup` for every item, `batch_size` at a time.

    Returns:
        Mapping of item to result for every lookup that returned a value.
    """
    results: dict[K, V] = {}
    total_batches = (len(items) + batch_size - 1) // batch_size
    for n, batch in enumerate(_chunks(items, batch_size), start=1):
        log.info("%s batch %d/%d (%d items)", label, n, total_batches, len(batch))
        values = await asyncio.gather(*(lookup(item) for item in batch))
        for item, value in zip(batch, values):
            if value is not None:
                results[item] = value
    return results


class FilingEnricher:
    """Attach ticker, market cap, industry and sector to filings.

    Args:
        resolver: CIK -> ticker lookup.
        profiles: ticker -> profile lookup.
        batch_size: Number of concurrent lookups per batch.
    """

    def __init__(
        self,
        resolver: Resolver,
        profiles: ProfileSource,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        self._resolver = resolver
        self._profiles = profiles
        self._batch_size = batch_size

    async def enrich(
        self,
        filings: Sequence[Filing],
        criteria: FilterCriteria | None = None,
    ) -> list[EnrichedFiling]:
        """Return enriched filings that pass `criteria`, in input order.

        Filings whose market cap could not be resolved are always kept.

        Raises:
            ConfigurationError: if a provider is not configured.
        """
        criteria = criteria or FilterCriteria()
        log.info("Processing %d filings", len(filings))

        # first-seen company name per CIK is the lookup hint
        hints: dict[str, str] = {}
        for f in filings:
            hints.setdefault(f.identifier, f.company)
        identifiers = list(hints)
        log.info("Found %d unique companies", len(identifiers))

        tickers = await gather_in_batches(
            identifiers,
            lambda cik: self._resolver.resolve(cik, hints[cik]),
            "Ticker resolution",
            self._batch_size,
        )
        log.info("Resolved %d of %d companies to tickers", len(tickers), len(identifiers))

        unique_tickers = list(dict.fromkeys(tickers.values()))
        profiles: dict[str, CompanyProfile] = {}
        if unique_tickers:
            profiles = await gather_in_batches(
                unique_tickers, self._profiles.profile, "Market cap", self._batch_size
            )
        log.info("Fetched market cap for %d of %d tickers", len(profiles), len(unique_tickers))

        enriched: list[EnrichedFiling] = []
        for f in filings:
            ticker = tickers.get(f.identifier)
            item = EnrichedFiling.from_filing(f, ticker, profiles.get(ticker) if ticker else None)
            if criteria.admits(item.market_cap):
                enriched.append(item)

        log.info("Filtered to %d filings matching criteria", len(enriched))
        return enriched
