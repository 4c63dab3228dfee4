"""Pydantic models used across acquisition, enrichment and pagination.

These models define the filing records produced by both feeds, the enriched
records returned to callers, and the request/result envelopes of the pipeline
boundary.
"""

from __future__ import annotations

from datetime import date
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

NOT_AVAILABLE = "N/A"


class FilingKey(NamedTuple):
    """Identity of a filing: one company, one form, one day."""
    identifier: str
    form_type: str
    filing_date: date


def normalize_identifier(value: object) -> str:
    """Return a CIK as a string without leading zeros ("0000320193" -> "320193")."""
    text = str(value).strip()
    if not text:
        raise ValueError("identifier must not be empty")
    return text.lstrip("0") or "0"


class Filing(BaseModel):
    """Schema for a filing parsed from either feed.

    Attributes:
        company: Filer name as published by the feed.
        identifier: Central Index Key without leading zeros.
        form_type: Filing form type (e.g., '10-K').
        filing_date: Filing date.
        document_url: Link to the filing index or document, if published.
        file_number: SEC file number, if published.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)
    company: str = Field(..., min_length=1)
    identifier: str
    form_type: str = Field(..., min_length=1)
    filing_date: date
    document_url: str | None = None
    file_number: str | None = None

    @field_validator("identifier", mode="before")
    @classmethod
    def _strip_identifier(cls, v: object) -> str:
        if v is None:
            raise ValueError("identifier is required")
        return normalize_identifier(v)

    @property
    def key(self) -> FilingKey:
        return FilingKey(self.identifier, self.form_type, self.filing_date)


class CompanyProfile(BaseModel):
    """Market data for one ticker as reported by a profile provider."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    ticker: str
    company_name: str | None = None
    market_cap: float | None = None
    industry: str | None = None
    sector: str | None = None
    identifier: str | None = None


class EnrichedFiling(Filing):
    """A filing with the market data resolved for its filer.

    Unresolved values are "N/A" for text fields and None for `market_cap`.
    """
    ticker: str = NOT_AVAILABLE
    market_cap: float | None = None
    industry: str = NOT_AVAILABLE
    sector: str = NOT_AVAILABLE

    @classmethod
    def from_filing(
        cls,
        filing: Filing,
        ticker: str | None,
        profile: CompanyProfile | None,
    ) -> "EnrichedFiling":
        """Combine a filing with its (possibly missing) ticker and profile."""
        return cls(
            **filing.model_dump(),
            ticker=ticker or NOT_AVAILABLE,
            market_cap=profile.market_cap if profile and profile.market_cap else None,
            industry=(profile.industry if profile else None) or NOT_AVAILABLE,
            sector=(profile.sector if profile else None) or NOT_AVAILABLE,
        )


class StockListing(BaseModel):
    """One entry of a provider's reference stock list."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    symbol: str
    name: str | None = None
    exchange: str | None = None
    identifier: str | None = None


class FilterCriteria(BaseModel):
    """Inclusive market-cap bounds; either side may be omitted."""
    model_config = ConfigDict(extra="forbid", frozen=True)
    min_market_cap: float | None = None
    max_market_cap: float | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "FilterCriteria":
        if (
            self.min_market_cap is not None
            and self.max_market_cap is not None
            and self.min_market_cap > self.max_market_cap
        ):
            raise ValueError("min_market_cap must not exceed max_market_cap")
        return self

    def admits(self, market_cap: float | None) -> bool:
        """Return False only for a known market cap outside the bounds."""
        if market_cap is None:
            return True
        if self.min_market_cap is not None and market_cap < self.min_market_cap:
            return False
        if self.max_market_cap is not None and market_cap > self.max_market_cap:
            return False
        return True


class FilingQuery(BaseModel):
    """Request accepted by the pipeline boundary operations."""
    model_config = ConfigDict(extra="forbid")
    form_type: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1)
    min_market_cap: float | None = None
    max_market_cap: float | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "FilingQuery":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def criteria(self) -> FilterCriteria:
        return FilterCriteria(
            min_market_cap=self.min_market_cap,
            max_market_cap=self.max_market_cap,
        )


class PaginatedResult(BaseModel):
    """One page of enriched filings plus pagination metadata."""
    model_config = ConfigDict(extra="forbid")
    data: list[EnrichedFiling]
    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_results: int = Field(..., ge=0)
    results_per_page: int = Field(..., ge=1)
    has_more: bool


class ExportResult(BaseModel):
    """Every enriched filing for a query, without paging."""
    model_config = ConfigDict(extra="forbid")
    data: list[EnrichedFiling]
    total: int = Field(..., ge=0)
