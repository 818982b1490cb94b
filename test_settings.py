"""
Tests for environment-driven settings
"""

import pytest

from settings import load_settings


def test_defaults(monkeypatch):
    for name in ("ALPHA_VANTAGE_API_KEY", "ALPHA_VANTAGE_URL", "WORLD_BANK_URL", "VALUATOR_CACHE_PATH",
                 "VALUATOR_HTTP_TIMEOUT", "VALUATOR_YEARS_OF_HISTORY", "VALUATOR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.alpha_vantage.api_key == "demo"
    assert settings.alpha_vantage.rate_limit_per_day == 25
    assert settings.world_bank.base_url == "https://api.worldbank.org/v2/country"
    assert settings.cache_path == "cache/cached_data.db"
    assert settings.http_timeout == 30.0
    assert settings.years_of_history == 5


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ALPHA_VANTAGE_API_KEY", "secret")
    monkeypatch.setenv("VALUATOR_HTTP_TIMEOUT", "7.5")
    monkeypatch.setenv("VALUATOR_YEARS_OF_HISTORY", "8")
    monkeypatch.setenv("VALUATOR_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.alpha_vantage.api_key == "secret"
    assert settings.http_timeout == 7.5
    assert settings.years_of_history == 8
    assert settings.log_level == "DEBUG"


def test_malformed_number(monkeypatch):
    monkeypatch.setenv("VALUATOR_YEARS_OF_HISTORY", "five")
    with pytest.raises(ValueError, match="VALUATOR_YEARS_OF_HISTORY"):
        load_settings()
