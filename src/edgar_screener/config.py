"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads provider credentials and options from the environment. Credentials are
checked when a provider is first used, not when settings are read, so that a
run that never touches FMP does not need an FMP key.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from edgar_screener.errors import ConfigurationError

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        sec_user_agent: SEC User-Agent header value ("Name email@example.com").
        fmp_api_key: Financial Modeling Prep API key, or None.
        otc_name_lookup: Also match company names against the OTC Markets
            symbol list when every other ticker lookup misses.
        log_path: File that receives a copy of the pipeline logs.
    """
    sec_user_agent: str
    fmp_api_key: str | None
    otc_name_lookup: bool = False
    log_path: Path = Path("logs/screener.log")

    def require_sec_user_agent(self) -> str:
        """Return the SEC User-Agent or raise if it is not configured.

        Raises:
            ConfigurationError: if `SEC_USER_AGENT` is empty.
        """
        if not self.sec_user_agent:
            raise ConfigurationError(
                "SEC_USER_AGENT is required. Set it in .env "
                "(example: 'Your Name your.email@example.com')."
            )
        return self.sec_user_agent

    def require_fmp_api_key(self) -> str:
        """Return the FMP API key or raise if it is not configured.

        Raises:
            ConfigurationError: if `FMP_API_KEY` is empty.
        """
        if not self.fmp_api_key:
            raise ConfigurationError(
                "FMP_API_KEY is not configured. Set it in .env to enable "
                "ticker resolution and market-cap enrichment."
            )
        return self.fmp_api_key


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object."""
    sec_user_agent = os.getenv("SEC_USER_AGENT", "").strip()
    fmp_api_key = os.getenv("FMP_API_KEY", "").strip() or None
    otc_name_lookup = os.getenv("OTC_NAME_LOOKUP", "").strip().lower() in _TRUTHY
    log_path = Path(os.getenv("SCREENER_LOG_PATH", "logs/screener.log"))

    return Settings(
        sec_user_agent=sec_user_agent,
        fmp_api_key=fmp_api_key,
        otc_name_lookup=otc_name_lookup,
        log_path=log_path,
    )
