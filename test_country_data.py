"""
Tests for the World Bank backed country economic service
"""

import math
from datetime import date

import pytest

from conftest import KZ_GDP, make_response
from country_data import (CountryDataError, CountryDataService, CountryEconomicProfile, WB_REAL_GDP,
                          format_money, leading_average)
from data_cache import COUNTRIES
from data_sources import RateLimiter
from financial_math import cagr


class TestResolve:

    def test_kazakhstan_profile(self, countries):
        profile = countries.resolve("kz")

        assert profile.country_code == "KZ"
        assert profile.country_name == "Kazakhstan"
        assert profile.currency == "KZT"
        assert (profile.first_year, profile.last_year) == (2020, 2024)
        assert profile.gdp == tuple(KZ_GDP[y] for y in range(2020, 2025))
        assert profile.inflation[0] == pytest.approx(0.081)
        assert profile.average_gdp_growth_rate == pytest.approx(cagr(1.70e11, 2.00e11, 4))
        assert profile.average_inflation_rate == pytest.approx((0.081 + 0.19 + 0.209 + 0.089 + 0.07) / 5)
        assert profile.corporate_tax_rate == pytest.approx(0.20)
        assert profile.risk_free_rate == pytest.approx(0.1425)
        assert profile.market_return_rate == pytest.approx(0.2493)

    def test_world_bank_request(self, countries, fake_session):
        countries.resolve("KZ")

        url, = fake_session.get.call_args_list[0].args
        kwargs = fake_session.get.call_args_list[0].kwargs
        assert url == f"https://wb.test/v2/country/KZ/indicator/{WB_REAL_GDP}"
        assert kwargs['params'] == {'date': '2020:2024', 'format': 'json'}
        assert kwargs['timeout'] == 5.0

    def test_second_resolve_served_from_cache(self, countries, fake_session, cache):
        first = countries.resolve("KZ")
        second = countries.resolve("KZ")

        assert fake_session.get.call_count == 2
        assert first == second
        assert cache.contains(COUNTRIES, "KZ")

    def test_expired_entry_is_refetched(self, cache, fake_session, settings, countries):
        countries.resolve("KZ")
        assert fake_session.get.call_count == 2

        # twelve months after 2024-12-31
        later = CountryDataService(cache, session=fake_session, settings=settings,
                                   today=lambda: date(2025, 12, 31))
        profile = later.resolve("KZ")

        assert fake_session.get.call_count == 4
        assert profile.last_year == 2024

    def test_entry_fresh_one_day_before_expiry(self, cache, fake_session, settings, countries):
        countries.resolve("KZ")
        later = CountryDataService(cache, session=fake_session, settings=settings,
                                   today=lambda: date(2025, 12, 30))
        later.resolve("KZ")
        assert fake_session.get.call_count == 2

    def test_unreadable_cache_entry_is_refetched(self, countries, fake_session, cache):
        cache.put(COUNTRIES, "KZ", "not json")
        profile = countries.resolve("KZ")
        assert profile.country_code == "KZ"
        assert fake_session.get.call_count == 2

    def test_null_values_become_zero(self, countries, fake_session):
        fake_session.routes['inflation'][2020] = None
        fake_session.routes['gdp'][2022] = None

        profile = countries.resolve("KZ")

        assert profile.gdp[2] == 0.0
        assert profile.inflation[0] == 0.0
        # leading average stops at the first zero
        assert profile.average_inflation_rate == 0.0

    def test_years_of_history_is_clamped(self, countries, fake_session):
        profile = countries.resolve("KZ", years_of_history=20)

        assert (profile.first_year, profile.last_year) == (2015, 2024)
        assert fake_session.get.call_args_list[0].kwargs['params']['date'] == '2015:2024'
        # no data before 2020, so the first GDP value is zero and growth undefined
        assert math.isnan(profile.average_gdp_growth_rate)

    def test_cached_window_must_match_requested_years(self, countries, fake_session):
        countries.resolve("KZ", years_of_history=5)
        profile = countries.resolve("KZ", years_of_history=10)

        assert (profile.first_year, profile.last_year) == (2015, 2024)
        assert fake_session.get.call_count == 4
        # the wider window now sits in the cache
        assert countries.resolve("KZ", years_of_history=10).first_year == 2015
        assert fake_session.get.call_count == 4

    def test_minimum_years_of_history(self, countries):
        profile = countries.resolve("KZ", years_of_history=1)
        assert (profile.first_year, profile.last_year) == (2022, 2024)

    def test_country_without_tax_entry_uses_world_average(self, countries):
        profile = countries.resolve("MC")
        assert profile.corporate_tax_rate == pytest.approx(0.2345)
        assert profile.risk_free_rate == pytest.approx(0.1411)


class TestResolveErrors:

    @pytest.mark.parametrize("code", ["", "XX", "KAZ", None])
    def test_invalid_country_code(self, countries, fake_session, code):
        with pytest.raises(CountryDataError):
            countries.resolve(code)
        fake_session.get.assert_not_called()

    def test_http_error(self, countries, fake_session):
        fake_session.get.side_effect = lambda url, params=None, timeout=None: make_response(None, 500)
        with pytest.raises(CountryDataError):
            countries.resolve("KZ")

    def test_world_bank_error_document(self, countries, fake_session):
        message = [{"message": [{"id": "120", "key": "Invalid value"}]}]
        fake_session.get.side_effect = lambda url, params=None, timeout=None: make_response(message)
        with pytest.raises(CountryDataError):
            countries.resolve("KZ")

    def test_daily_budget(self, cache, fake_session, settings, today):
        service = CountryDataService(cache, session=fake_session, settings=settings, today=today,
                                     rate_limiter=RateLimiter(calls_per_minute=10, calls_per_day=1))
        with pytest.raises(CountryDataError, match="Daily request limit"):
            service.resolve("KZ")
        # GDP went out, inflation was refused
        assert fake_session.get.call_count == 1

    def test_failure_is_not_cached(self, countries, fake_session, cache):
        fake_session.get.side_effect = lambda url, params=None, timeout=None: make_response(None, 503)
        with pytest.raises(CountryDataError):
            countries.resolve("KZ")
        assert not cache.contains(COUNTRIES, "KZ")


class TestProfile:

    def test_payload_keeps_undefined_growth(self, countries):
        profile = countries.resolve("KZ", years_of_history=10)
        restored = CountryEconomicProfile.from_payload(profile.to_payload())

        assert math.isnan(restored.average_gdp_growth_rate)
        assert restored.gdp == profile.gdp
        assert restored.corporate_tax_rate == profile.corporate_tax_rate

    def test_year_accessors(self, countries):
        profile = countries.resolve("KZ")
        assert profile.gdp_at(2024) == 2.00e11
        assert math.isnan(profile.gdp_at(2019))
        assert math.isnan(profile.inflation_at(2025))

    def test_history_frame(self, countries):
        frame = countries.resolve("KZ").history_frame()
        assert list(frame.index) == [2020, 2021, 2022, 2023, 2024]
        assert math.isnan(frame.loc[2020, 'GDP Growth'])
        assert frame.loc[2024, 'GDP Growth'] == pytest.approx(2.00 / 1.92 - 1)

    def test_summary_text(self, countries):
        text = str(countries.resolve("KZ"))
        assert "Kazakhstan (KZ)" in text
        assert "Corporate Tax Rate: 20.0%" in text


def test_format_money():
    assert format_money(1234567.4, "KZT") == "KZT 1,234,567"
    assert format_money(-95e6, "USD") == "-USD 95,000,000"
    assert format_money(float("nan"), "EUR") == "EUR n/a"


def test_leading_average():
    assert leading_average([0.1, 0.2, 0.3]) == pytest.approx(0.2)
    assert leading_average([0.1, 0.3, 0.0, 0.9]) == pytest.approx(0.2)
    assert leading_average([0.0, 0.5]) == 0.0
    assert leading_average([]) == 0.0
