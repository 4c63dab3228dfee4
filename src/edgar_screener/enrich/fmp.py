"""Financial Modeling Prep client (primary ticker/profile provider).

Every call goes through the FMP `RateLimitedQueue` and requires
`FMP_API_KEY`; a missing key raises `ConfigurationError` on first use.
"""

from __future__ import annotations

import logging
from typing import Any

import requests  # type: ignore[import-untyped]

from edgar_screener.config import Settings
from edgar_screener.errors import TransportError
from edgar_screener.ingest.rate_limit import RateLimitedQueue
from edgar_screener.models import CompanyProfile, StockListing
from edgar_screener.transport import FEED_TIMEOUT, METADATA_TIMEOUT, get_json, new_session

log = logging.getLogger(__name__)

FMP_BASE_URL = "https://financialmodelingprep.com/api/v3"
FMP_V4_BASE_URL = "https://financialmodelingprep.com/api/v4"


def _pad_cik(cik: str) -> str:
    """Return zero-padded 10-digit CIK string for FMP's CIK search."""
    return str(cik).strip().zfill(10)


def _first_symbol(rows: Any) -> str | None:
    if isinstance(rows, list) and rows and isinstance(rows[0], dict):
        symbol = rows[0].get("symbol")
        return str(symbol) if symbol else None
    return None


class FmpClient:
    """Thin async wrapper over the FMP REST endpoints used by the pipeline."""

    def __init__(
        self,
        settings: Settings,
        queue: RateLimitedQueue,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._queue = queue
        self._session = session or new_session()

    @property
    def configured(self) -> bool:
        return bool(self._settings.fmp_api_key)

    async def get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        *,
        base: str = FMP_BASE_URL,
        timeout: float = METADATA_TIMEOUT,
    ) -> Any:
        """GET an FMP endpoint through the rate-limited queue.

        Raises:
            ConfigurationError: if no API key is configured.
            TransportError: on transport failure or an FMP error payload.
        """
        api_key = self._settings.require_fmp_api_key()
        url = f"{base}/{path.lstrip('/')}"
        query = dict(params or {}, apikey=api_key)
        data = await self._queue.submit(
            lambda: get_json(self._session, url, params=query, timeout=timeout)
        )
        if isinstance(data, dict) and "Error Message" in data:
            message = str(data["Error Message"])
            raise TransportError(f"FMP error for {path}: {message[:120]}", detail=message)
        return data

    async def profile(self, ticker: str) -> CompanyProfile | None:
        """Return the company profile for `ticker`, or None when FMP has none.

        Raises:
            TransportError: if the profile payload is malformed.
        """
        rows = await self.get(f"profile/{ticker}")
        if not isinstance(rows, list) or not rows:
            return None
        p = rows[0]
        try:
            return CompanyProfile(
                ticker=p.get("symbol") or ticker,
                company_name=p.get("companyName"),
                market_cap=p.get("mktCap"),
                industry=p.get("industry") or None,
                sector=p.get("sector") or None,
                identifier=str(p["cik"]) if p.get("cik") else None,
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise TransportError(f"FMP profile for {ticker} is malformed: {e.__class__.__name__}") from e

    async def search_by_cik(self, cik: str) -> str | None:
        """Return the ticker registered for a CIK, or None."""
        return _first_symbol(await self.get(f"cik-search/{_pad_cik(cik)}"))

    async def search_by_name(self, name: str) -> str | None:
        """Return the best free-text search hit for a company name, or None."""
        return _first_symbol(await self.get("search", {"query": name, "limit": 1}))

    async def stock_list(self) -> list[StockListing]:
        """Return FMP's full reference stock list."""
        rows = await self.get("stock/list", timeout=FEED_TIMEOUT)
        if not isinstance(rows, list):
            raise TransportError("FMP stock list response is not a list")

        listings: list[StockListing] = []
        for row in rows:
            if not isinstance(row, dict) or not row.get("symbol"):
                continue
            listings.append(
                StockListing(
                    symbol=row["symbol"],
                    name=row.get("name"),
                    exchange=row.get("exchangeShortName"),
                    identifier=str(row["cik"]) if row.get("cik") else None,
                )
            )
        log.info("FMP stock list: %d listings", len(listings))
        return listings
