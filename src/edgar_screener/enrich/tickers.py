"""Resolve a filer's CIK to a trading ticker.

`TickerResolver.resolve` tries, in order, and stops at the first hit:

1. the cached FMP stock list indexed by CIK (FMP does not publish CIKs in the
   list, so this normally misses);
2. the cached FMP stock list matched by company name (`name_match`);
3. FMP's CIK search;
4. FMP's free-text search with the normalized company name;
5. when enabled, the cached OTC Markets symbol list matched by name.

A transport failure in a remote step counts as a miss for that step.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from edgar_screener.enrich.cache import DAY, TimedCache
from edgar_screener.enrich.fmp import FmpClient
from edgar_screener.enrich.name_match import (
    MIN_QUERY_LENGTH,
    US_EXCHANGES,
    StockSnapshot,
    normalize_name,
)
from edgar_screener.enrich.otc import OtcMarketsClient
from edgar_screener.errors import TransportError

log = logging.getLogger(__name__)


def stock_list_cache(fmp: FmpClient) -> TimedCache[StockSnapshot]:
    """24-hour cache of FMP's stock list, name matching limited to US exchanges."""
    async def fetch() -> StockSnapshot:
        return StockSnapshot(await fmp.stock_list(), exchanges=US_EXCHANGES)

    return TimedCache(fetch, DAY, StockSnapshot, name="fmp stock list")


def otc_list_cache(otc: OtcMarketsClient) -> TimedCache[StockSnapshot]:
    """24-hour cache of the OTC Markets symbol list."""
    async def fetch() -> StockSnapshot:
        return StockSnapshot(await otc.symbol_list())

    return TimedCache(fetch, DAY, StockSnapshot, name="otc symbol list")


class TickerResolver:
    """Layered CIK-to-ticker lookup.

    Args:
        fmp: FMP client used for the remote searches.
        stock_list: Cached FMP reference stock list.
        otc_list: Cached OTC symbol list; None disables the OTC step.
    """

    def __init__(
        self,
        fmp: FmpClient,
        stock_list: TimedCache[StockSnapshot],
        otc_list: TimedCache[StockSnapshot] | None = None,
    ) -> None:
        self._fmp = fmp
        self._stock_list = stock_list
        self._otc_list = otc_list

    async def _remote(
        self,
        label: str,
        lookup: Callable[[str], Awaitable[str | None]],
        value: str,
    ) -> str | None:
        try:
            return await lookup(value)
        except TransportError as e:
            log.warning("%s failed for %r: %s", label, value, e)
            return None

    async def resolve(self, identifier: str, company_hint: str | None = None) -> str | None:
        """Return the ticker for `identifier`, or None if every step misses.

        Raises:
            ConfigurationError: if FMP is not configured.
        """
        snapshot = await self._stock_list.get()

        ticker = snapshot.find_by_identifier(identifier)
        if ticker:
            log.info("CIK %s -> %s (stock list, by CIK)", identifier, ticker)
            return ticker

        if company_hint:
            ticker = snapshot.find_by_name(company_hint)
            if ticker:
                log.info("CIK %s -> %s (stock list, by name %r)", identifier, ticker, company_hint)
                return ticker

        ticker = await self._remote("FMP CIK search", self._fmp.search_by_cik, identifier)
        if ticker:
            log.info("CIK %s -> %s (FMP CIK search)", identifier, ticker)
            return ticker

        if company_hint:
            clean = normalize_name(company_hint)
            if len(clean) >= MIN_QUERY_LENGTH:
                ticker = await self._remote("FMP name search", self._fmp.search_by_name, clean)
                if ticker:
                    log.info("CIK %s -> %s (FMP name search %r)", identifier, ticker, clean)
                    return ticker

        if self._otc_list is not None and company_hint:
            otc = await self._otc_list.get()
            ticker = otc.find_by_name(company_hint)
            if ticker:
                log.info("CIK %s -> %s (OTC list, by name %r)", identifier, ticker, company_hint)
                return ticker

        log.info("CIK %s (%s) -> no ticker found", identifier, company_hint)
        return None
