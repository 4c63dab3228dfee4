"""Exception types raised by the acquisition and enrichment pipeline."""

from __future__ import annotations


class ScreenerError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(ScreenerError, RuntimeError):
    """A provider credential or required setting is missing."""


class TransportError(ScreenerError):
    """A remote call failed: timeout, network error, bad status or bad body.

    Attributes:
        status_code: HTTP status when the server answered, else None.
        detail: Short excerpt of the response body, if any.
    """

    def __init__(self, message: str, status_code: int | None = None, detail: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class RateLimitExceeded(ScreenerError):
    """The SEC feed answered 429. Fatal for the current fetch."""


class ProviderUnavailable(ScreenerError):
    """The historical feed requires a plan the configured key does not have."""


class ParseSkip(ScreenerError):
    """A single feed entry lacks a required field and is dropped."""
