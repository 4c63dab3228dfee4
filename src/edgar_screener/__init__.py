"""edgar_screener package.

Locates SEC filings for a form type and date range, resolves each filer to a
trading ticker, enriches filings with market cap, industry and sector, and
filters them by optional market-cap bounds.

Architecture:
- ingest: near-real-time SEC ATOM feed, historical FMP feed, hybrid selector
- enrich: ticker resolution and market-cap provider chain (FMP, OTC Markets)
- assemble: enrichment, market-cap filtering, dedup and pagination
- Pydantic models describe filings and results at every stage
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
