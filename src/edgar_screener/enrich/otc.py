"""OTC Markets client (secondary market-data provider).

Used when FMP has no market cap for a ticker, and optionally as an extra
name-to-ticker source. These calls do not go through the FMP queue.
"""

from __future__ import annotations

import logging
from typing import Any

import requests  # type: ignore[import-untyped]

from edgar_screener.errors import TransportError
from edgar_screener.models import CompanyProfile, NOT_AVAILABLE, StockListing
from edgar_screener.transport import FEED_TIMEOUT, METADATA_TIMEOUT, get_json, new_session

log = logging.getLogger(__name__)

OTC_SYMBOLS_URL = "https://www.otcmarkets.com/data/symbols"
OTC_PROFILE_URL = "https://backend.otcmarkets.com/otcapi/company/profile/full/{ticker}"

OTC_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en,en-US;q=0.9",
    "cache-control": "no-cache",
    "origin": "https://www.otcmarkets.com",
    "referer": "https://www.otcmarkets.com/",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/107.0.0.0 Safari/537.36"
    ),
}


def _profile_from_payload(ticker: str, data: dict[str, Any]) -> CompanyProfile:
    nested = data.get("profile") or {}
    details = data.get("securityDetails") or nested.get("securityDetails") or {}
    sector = details.get("industrySector") or None
    return CompanyProfile(
        ticker=data.get("symbol") or ticker,
        company_name=data.get("name") or data.get("securityName"),
        market_cap=data.get("marketCap") or nested.get("marketCap") or None,
        industry=sector,
        sector=sector,
    )


class OtcMarketsClient:
    """Async access to the OTC Markets symbol list and company profiles."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or new_session(OTC_HEADERS)

    async def symbol_list(self) -> list[StockListing]:
        """Return every OTC symbol with its company name.

        Raises:
            TransportError: if the list cannot be fetched or is malformed.
        """
        rows = await get_json(self._session, OTC_SYMBOLS_URL, timeout=FEED_TIMEOUT)
        if not isinstance(rows, list):
            raise TransportError("OTC symbol list response is not a list")
        listings = [
            StockListing(symbol=row["s"], name=row["c"], exchange="OTC")
            for row in rows
            if isinstance(row, dict) and row.get("s") and row.get("c")
        ]
        log.info("OTC symbol list: %d symbols", len(listings))
        return listings

    async def profile(self, ticker: str) -> CompanyProfile | None:
        """Return the OTC Markets profile for `ticker`, or None.

        A 404 means the symbol is not quoted on OTC Markets. Other failures
        are logged and also yield None.
        """
        if not ticker or ticker == NOT_AVAILABLE:
            return None
        url = OTC_PROFILE_URL.format(ticker=ticker)
        try:
            data = await get_json(
                self._session, url, params={"symbol": ticker}, timeout=METADATA_TIMEOUT
            )
        except TransportError as e:
            if e.status_code == 404:
                log.info("[OTC] %s not found on OTC Markets", ticker)
            else:
                log.warning("[OTC] profile lookup failed for %s: %s", ticker, e)
            return None

        if not isinstance(data, dict):
            return None
        try:
            return _profile_from_payload(ticker, data)
        except (ValueError, TypeError, AttributeError) as e:
            log.warning("[OTC] malformed profile for %s: %s", ticker, e.__class__.__name__)
            return None
