"""Command-line interface for the filings screener.

Provides subcommands: `search` (one page of results) and `export` (every
result, written as CSV). Each command is implemented as a `cmd_*` function
that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Sequence

import pandas as pd
from pydantic import ValidationError

from edgar_screener.config import Settings, get_settings
from edgar_screener.errors import ScreenerError
from edgar_screener.logging_config import configure_logging
from edgar_screener.models import EnrichedFiling, FilingQuery
from edgar_screener.pipeline import build_pipeline

log = logging.getLogger(__name__)

CSV_COLUMNS = {
    "company": "Company",
    "ticker": "Ticker",
    "identifier": "CIK",
    "form_type": "Filing Type",
    "filing_date": "Filing Date",
    "market_cap": "Market Cap",
    "industry": "Industry",
    "sector": "Sector",
    "document_url": "Filing URL",
}


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _query_from_args(args: argparse.Namespace) -> FilingQuery:
    """Build a `FilingQuery` from parsed arguments."""
    return FilingQuery(
        form_type=args.form,
        start_date=args.start,
        end_date=args.end,
        page=getattr(args, "page", 1),
        limit=getattr(args, "limit", 50),
        min_market_cap=args.min_cap,
        max_market_cap=args.max_cap,
    )


def filings_to_frame(filings: Sequence[EnrichedFiling]) -> pd.DataFrame:
    """Return filings as a DataFrame with human-readable column names."""
    rows = [f.model_dump(mode="json", include=set(CSV_COLUMNS)) for f in filings]
    pdf = pd.DataFrame(rows, columns=list(CSV_COLUMNS))
    return pdf.rename(columns=CSV_COLUMNS).fillna("N/A")


# --------------------------------------------------
# SEARCH
# --------------------------------------------------
def cmd_search(args: argparse.Namespace, settings: Settings) -> None:
    """Print one page of enriched filings as a table or JSON."""
    pipeline = build_pipeline(settings)
    result = asyncio.run(pipeline.fetch_page(_query_from_args(args)))

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    if not result.data:
        print("No filings found.")
        return
    print(filings_to_frame(result.data).to_string(index=False))
    print(
        f"\nPage {result.current_page}/{result.total_pages} "
        f"({result.total_results} results, more={result.has_more})"
    )


# --------------------------------------------------
# EXPORT
# --------------------------------------------------
def cmd_export(args: argparse.Namespace, settings: Settings) -> None:
    """Write every matching filing to a CSV file."""
    pipeline = build_pipeline(settings)
    result = asyncio.run(pipeline.export_all(_query_from_args(args)))

    out: Path = args.out
    out.parent.mkdir(parents=True, exist_ok=True)
    filings_to_frame(result.data).to_csv(out, index=False)
    log.info("Wrote %d filings to %s", result.total, out)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def _add_query_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--form", required=True, help="Form type, e.g. 10-K")
    p.add_argument("--start", type=date.fromisoformat, required=True, help="YYYY-MM-DD")
    p.add_argument("--end", type=date.fromisoformat, required=True, help="YYYY-MM-DD")
    p.add_argument("--min-cap", type=float, default=None)
    p.add_argument("--max-cap", type=float, default=None)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser with `search` and `export`.
    """
    p = argparse.ArgumentParser(prog="edgar-screener")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_search = sub.add_parser("search")
    _add_query_args(p_search)
    p_search.add_argument("--page", type=int, default=1)
    p_search.add_argument("--limit", type=int, default=50)
    p_search.add_argument("--json", action="store_true")

    p_export = sub.add_parser("export")
    _add_query_args(p_export)
    p_export.add_argument("--out", type=Path, default=Path("sec-filings-export.csv"))

    return p


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(
        settings.log_path,
        logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        if args.cmd == "search":
            cmd_search(args, settings)
        elif args.cmd == "export":
            cmd_export(args, settings)
        else:
            raise SystemExit(2)
    except (ScreenerError, ValidationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
