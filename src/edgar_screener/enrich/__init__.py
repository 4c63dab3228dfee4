"""Enrichment helpers (ticker resolution and company profiles).

These modules resolve SEC filers to trading tickers and fetch market cap,
industry and sector from FMP with OTC Markets as the fallback provider.
"""
