from __future__ import annotations

from pathlib import Path

import pytest

from edgar_screener.config import Settings, get_settings
from edgar_screener.errors import ConfigurationError


def test_get_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEC_USER_AGENT", " Jane Doe jane@example.com ")
    monkeypatch.setenv("FMP_API_KEY", "secret")
    monkeypatch.setenv("OTC_NAME_LOOKUP", "Yes")
    monkeypatch.setenv("SCREENER_LOG_PATH", "/tmp/x.log")

    s = get_settings()
    assert s.sec_user_agent == "Jane Doe jane@example.com"
    assert s.fmp_api_key == "secret"
    assert s.otc_name_lookup is True
    assert s.log_path == Path("/tmp/x.log")


def test_get_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SEC_USER_AGENT", "FMP_API_KEY", "OTC_NAME_LOOKUP", "SCREENER_LOG_PATH"):
        monkeypatch.delenv(name, raising=False)

    s = get_settings()
    assert s.sec_user_agent == ""
    assert s.fmp_api_key is None
    assert s.otc_name_lookup is False
    assert s.log_path == Path("logs/screener.log")


def test_require_methods_raise_when_missing() -> None:
    s = Settings(sec_user_agent="", fmp_api_key=None)
    with pytest.raises(ConfigurationError, match="SEC_USER_AGENT"):
        s.require_sec_user_agent()
    with pytest.raises(ConfigurationError, match="FMP_API_KEY"):
        s.require_fmp_api_key()

    ok = Settings(sec_user_agent="ua", fmp_api_key="k")
    assert ok.require_sec_user_agent() == "ua"
    assert ok.require_fmp_api_key() == "k"
