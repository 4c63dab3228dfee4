"""Company-name normalization and ticker matching against a stock list.

Names published by the SEC feed ("K - ACME CORP.") and names in provider
stock lists ("Acme Corporation") are normalized the same way, then compared
with an ordered list of matcher strategies. The first strategy that finds a
candidate wins:

1. `exact_match`: normalized names are equal.
2. `substring_match`: one normalized name contains the other.
3. `keyword_match`: the candidate contains enough long (>= 5 chars) query words.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Sequence

from edgar_screener.models import StockListing, normalize_identifier

PREFIX_RE = re.compile(r"^[A-Z](/[A-Z])?\s*-\s*", re.I)
SUFFIX_RE = re.compile(
    r"\s+(Inc\.?|Corp\.?|Ltd\.?|LLC|LP|Co\.?|Company|Corporation|Incorporated)$",
    re.I,
)
PUNCT_RE = re.compile(r"[,.]")
SPACE_RE = re.compile(r"\s+")

MIN_QUERY_LENGTH = 3
MIN_KEYWORD_LENGTH = 5

US_EXCHANGES = frozenset({"NASDAQ", "NYSE", "AMEX", "NYSE MKT"})

Matcher = Callable[[str, str], bool]


def normalize_name(name: str) -> str:
    """Normalize a company name for comparison.

    Strips a leading form-derived prefix ("K -", "Q -", "K/A -"), one trailing
    legal suffix, commas and periods, then lowercases and collapses spaces,
    so "K - Example Corp." and "Example Corporation" both become "example".
    """
    cleaned = PREFIX_RE.sub("", name.strip())
    cleaned = SUFFIX_RE.sub("", cleaned)
    cleaned = PUNCT_RE.sub("", cleaned)
    return SPACE_RE.sub(" ", cleaned).strip().lower()


def exact_match(query: str, candidate: str) -> bool:
    return query == candidate


def substring_match(query: str, candidate: str) -> bool:
    if len(candidate) < MIN_QUERY_LENGTH:
        return False
    return candidate in query or query in candidate


def keyword_match(query: str, candidate: str) -> bool:
    # at least 2 long words in common, or 1 when the query has only one
    words = [w for w in query.split() if len(w) >= MIN_KEYWORD_LENGTH]
    if not words or len(candidate) < MIN_QUERY_LENGTH:
        return False
    hits = sum(1 for w in words if w in candidate)
    return hits >= min(2, len(words))


MATCHERS: tuple[Matcher, ...] = (exact_match, substring_match, keyword_match)


def match_ticker(
    company_name: str,
    candidates: Sequence[tuple[str, str]],
    matchers: Iterable[Matcher] = MATCHERS,
) -> str | None:
    """Return the symbol of the first candidate matching `company_name`.

    Args:
        company_name: Raw company name (normalized here).
        candidates: `(normalized_name, symbol)` pairs in priority order.
        matchers: Strategies tried in order; the first one with a hit wins.

    Returns:
        The matching symbol, or None.
    """
    query = normalize_name(company_name)
    if len(query) < MIN_QUERY_LENGTH:
        return None

    for matcher in matchers:
        for name, symbol in candidates:
            if name and matcher(query, name):
                return symbol
    return None


class StockSnapshot:
    """A reference stock list prepared for lookups.

    Args:
        listings: Entries in provider order.
        exchanges: If given, only listings on these exchanges take part in
            name matching.
    """

    def __init__(
        self,
        listings: Sequence[StockListing] = (),
        exchanges: frozenset[str] | None = None,
    ) -> None:
        self.listings = list(listings)
        self.by_identifier = {
            normalize_identifier(s.identifier): s.symbol
            for s in self.listings
            if s.identifier
        }
        self.candidates = [
            (normalize_name(s.name), s.symbol)
            for s in self.listings
            if s.name and (exchanges is None or s.exchange in exchanges)
        ]

    def __len__(self) -> int:
        return len(self.listings)

    def find_by_identifier(self, identifier: str) -> str | None:
        return self.by_identifier.get(normalize_identifier(identifier))

    def find_by_name(self, company_name: str) -> str | None:
        return match_ticker(company_name, self.candidates)
