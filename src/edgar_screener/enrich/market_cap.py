"""Market-cap lookup: FMP first, OTC Markets as the fallback."""

from __future__ import annotations

import logging

from edgar_screener.enrich.fmp import FmpClient
from edgar_screener.enrich.otc import OtcMarketsClient
from edgar_screener.errors import TransportError
from edgar_screener.models import CompanyProfile

log = logging.getLogger(__name__)


def _has_market_cap(profile: CompanyProfile | None) -> bool:
    return profile is not None and bool(profile.market_cap)


class ProfileChain:
    """Return the first profile carrying a market cap: FMP first, then OTC.

    `None` means "no enrichment" and is never an error for the caller.
    """

    def __init__(self, fmp: FmpClient, otc: OtcMarketsClient) -> None:
        self._fmp = fmp
        self._otc = otc

    async def profile(self, ticker: str) -> CompanyProfile | None:
        """Return a profile with market cap for `ticker`, or None.

        Raises:
            ConfigurationError: if FMP is not configured.
        """
        try:
            primary = await self._fmp.profile(ticker)
        except TransportError as e:
            log.warning("[FMP] profile lookup failed for %s: %s", ticker, e)
            primary = None

        if _has_market_cap(primary):
            log.info("[FMP] %s market cap: %s", ticker, primary.market_cap)  # type: ignore[union-attr]
            return primary

        log.info("[FMP] %s has no market cap, trying OTC Markets", ticker)
        secondary = await self._otc.profile(ticker)
        if _has_market_cap(secondary):
            log.info("[OTC] %s market cap: %s", ticker, secondary.market_cap)  # type: ignore[union-attr]
            return secondary

        log.info("%s: no market cap from FMP or OTC", ticker)
        return None
