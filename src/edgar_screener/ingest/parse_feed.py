"""Parsing helpers for the SEC EDGAR ATOM feeds.

`parse_current_feed` turns an ATOM document into a typed list of `Filing`
records. Each entry is read from its structured fields first
(`company-name`, `cik`, `filing-type`, `filing-date`, `filing-href`,
`file-number`); the "getcurrent" feed publishes none of those, so the title
(`"10-K - ACME CORP (0000123456) (Filer)"`), summary, link and category are
used as the secondary path.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping

import feedparser
from pydantic import ValidationError

from edgar_screener.errors import ParseSkip
from edgar_screener.models import Filing

log = logging.getLogger(__name__)

TITLE_RE = re.compile(r"^(?P<form>.+?)\s+-\s+(?P<company>.+?)\s*\((?P<cik>\d+)\)")
FILED_RE = re.compile(r"Filed:\s*(\d{4}-\d{2}-\d{2})")
DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")
TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class ParsedFeed:
    """Filings parsed from one feed page.

    Attributes:
        filings: Entries that carried every required field.
        entry_count: Number of entries on the page, parsed or skipped.
    """
    filings: list[Filing] = field(default_factory=list)
    entry_count: int = 0

    @property
    def oldest_date(self) -> date | None:
        return min((f.filing_date for f in self.filings), default=None)


def _text(entry: Mapping[str, Any], key: str) -> str:
    value = entry.get(key)
    return str(value).strip() if value else ""


def _alternate_link(entry: Mapping[str, Any]) -> str:
    for link in entry.get("links") or []:
        if link.get("rel", "alternate") == "alternate" and link.get("href"):
            return str(link["href"])
    return _text(entry, "link")


def _category(entry: Mapping[str, Any]) -> str:
    for tag in entry.get("tags") or []:
        if tag.get("term"):
            return str(tag["term"]).strip()
    return ""


def entry_to_filing(entry: Mapping[str, Any]) -> Filing:
    """Build a `Filing` from one parsed feed entry.

    Args:
        entry: Mapping as produced by feedparser for an ATOM `<entry>`.

    Returns:
        The parsed filing.

    Raises:
        ParseSkip: if company, CIK, form type or filing date cannot be found.
    """
    company = _text(entry, "company-name")
    cik = _text(entry, "cik")
    form_type = _text(entry, "filing-type")
    filing_date = _text(entry, "filing-date")
    document_url = _text(entry, "filing-href")
    file_number = _text(entry, "file-number")

    if not company or not cik:
        m = TITLE_RE.match(_text(entry, "title"))
        if m:
            company = m.group("company").strip()
            cik = m.group("cik")
            form_type = form_type or m.group("form").strip()

    if not filing_date:
        summary = TAG_RE.sub(" ", html.unescape(_text(entry, "summary")))
        m = FILED_RE.search(summary)
        if m:
            filing_date = m.group(1)
    if not filing_date:
        m = DATE_RE.match(_text(entry, "updated"))
        if m:
            filing_date = m.group(1)

    document_url = document_url or _alternate_link(entry)
    form_type = form_type or _category(entry)

    if not (company and cik and form_type and filing_date):
        raise ParseSkip(f"entry missing required fields: {_text(entry, 'title')!r}")

    try:
        return Filing(
            company=company,
            identifier=cik,
            form_type=form_type,
            filing_date=filing_date,
            document_url=document_url or None,
            file_number=file_number or None,
        )
    except ValidationError as e:
        raise ParseSkip(f"entry failed validation: {e.error_count()} error(s)") from e


def parse_current_feed(raw: bytes | str) -> ParsedFeed:
    """Parse an SEC ATOM document into filings, dropping malformed entries.

    Args:
        raw: ATOM document body.

    Returns:
        ParsedFeed with the usable filings and the total entry count.
    """
    feed = feedparser.parse(raw)
    if feed.bozo and not feed.entries:
        log.warning("Feed could not be parsed: %s", feed.get("bozo_exception"))

    out = ParsedFeed(entry_count=len(feed.entries))
    for entry in feed.entries:
        try:
            out.filings.append(entry_to_filing(entry))
        except ParseSkip as e:
            log.debug("Skipping feed entry: %s", e)
    return out
