"""Assembly of the final result set.

Filings from either feed are enriched with market data, filtered by market
cap, deduplicated by identity key and paginated for the caller.
"""
