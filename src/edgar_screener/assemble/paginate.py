"""Deduplication and pagination of enriched filings."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from edgar_screener.models import EnrichedFiling, FilingKey, PaginatedResult

log = logging.getLogger(__name__)


def dedupe_filings(filings: Sequence[EnrichedFiling]) -> list[EnrichedFiling]:
    """Keep the first filing for each (CIK, form type, filing date)."""
    seen: set[FilingKey] = set()
    unique: list[EnrichedFiling] = []
    for f in filings:
        if f.key in seen:
            continue
        seen.add(f.key)
        unique.append(f)

    if len(unique) != len(filings):
        log.info("Removed %d duplicate filings", len(filings) - len(unique))
    return unique


def paginate_results(data: Sequence[EnrichedFiling], page: int = 1, limit: int = 50) -> PaginatedResult:
    """Return the 1-indexed `page` of `data` with `limit` items per page.

    Args:
        data: Full ordered result set.
        page: Page number, starting at 1.
        limit: Results per page.

    Returns:
        PaginatedResult whose `has_more` is `page * limit < len(data)`.
    """
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")

    start = (page - 1) * limit
    end = start + limit
    return PaginatedResult(
        data=list(data[start:end]),
        current_page=page,
        total_pages=math.ceil(len(data) / limit),
        total_results=len(data),
        results_per_page=limit,
        has_more=end < len(data),
    )
