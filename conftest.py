"""
Shared pytest fixtures: temporary SQLite cache, fixed calendar date and a fake
HTTP session serving canned World Bank and Alpha Vantage payloads.
"""

import os
import sys
from datetime import date
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from country_data import CountryDataService, WB_INFLATION, WB_REAL_GDP
from data_cache import ReferenceDataCache
from settings import APIConfig, Settings
from stock_data import StockDataService
from valuation_engine import ValuationContext

TODAY = date(2025, 6, 15)

# Kazakhstan, 2020-2024
KZ_GDP = {2020: 1.70e11, 2021: 1.77e11, 2022: 1.83e11, 2023: 1.92e11, 2024: 2.00e11}
KZ_INFLATION = {2020: 8.1, 2021: 19.0, 2022: 20.9, 2023: 8.9, 2024: 7.0}

KSPI_OVERVIEW = {
    "Symbol": "KSPI",
    "Name": "Kaspi.kz JSC",
    "RevenueTTM": "4000000000",
    "EBITDA": "2000000000",
    "GrossProfitTTM": "3000000000",
    "MarketCapitalization": "17000000000",
    "EVToRevenue": "4.5",
    "EVToEBITDA": "9.0",
    "LatestQuarter": "2025-03-31",
}


def make_response(payload, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


def world_bank_payload(values: Dict[int, Optional[float]]) -> list:
    """World Bank shape: [metadata, [{date, value}, ...]] newest first"""
    entries = [{"indicator": {}, "country": {}, "date": str(year), "value": value}
               for year, value in sorted(values.items(), reverse=True)]
    return [{"page": 1, "pages": 1, "per_page": 50, "total": len(entries)}, entries]


@pytest.fixture
def today():
    return lambda: TODAY


@pytest.fixture
def cache(tmp_path):
    return ReferenceDataCache(str(tmp_path / "cache" / "cached_data.db"))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        world_bank=APIConfig(name='worldbank', rate_limit_per_minute=1000, rate_limit_per_day=1000,
                             base_url='https://wb.test/v2/country'),
        alpha_vantage=APIConfig(name='alphavantage', rate_limit_per_minute=1000, rate_limit_per_day=1000,
                                base_url='https://av.test/query', api_key='test-key'),
        cache_path=str(tmp_path / "cache" / "cached_data.db"),
        http_timeout=5.0,
        years_of_history=5,
    )


@pytest.fixture
def fake_session():
    """
    MagicMock session routing requests by URL.

    Tests change the canned data through session.routes, or replace
    session.get.side_effect entirely.
    """
    routes = {
        'gdp': dict(KZ_GDP),
        'inflation': dict(KZ_INFLATION),
        'overviews': {'KSPI': dict(KSPI_OVERVIEW)},
    }

    def get(url, params=None, timeout=None):
        if WB_REAL_GDP in url:
            return make_response(world_bank_payload(routes['gdp']))
        if WB_INFLATION in url:
            return make_response(world_bank_payload(routes['inflation']))
        if params and params.get('function') == 'OVERVIEW':
            return make_response(routes['overviews'].get(params['symbol'], {}))
        return make_response(None, status_code=404)

    session = MagicMock()
    session.get.side_effect = get
    session.routes = routes
    return session


@pytest.fixture
def countries(cache, fake_session, settings, today):
    return CountryDataService(cache, session=fake_session, settings=settings, today=today)


@pytest.fixture
def stocks(cache, fake_session, settings, today):
    return StockDataService(cache, session=fake_session, settings=settings, today=today)


@pytest.fixture
def context(cache, countries, stocks, today):
    return ValuationContext(cache=cache, countries=countries, stocks=stocks, today=today)


@pytest.fixture
def company_data():
    """ARTA input in the JSON shape of the valuation form"""
    return {
        "name": "ARTA",
        "country": "KZ",
        "dataFirstYear": 2024,
        "revenue": [900e6, 1150e6, 1400e6],
        "ebitda": [200e6, 260e6, 300e6],
        "freeCashFlow": [120e6, 180e6, 240e6],
        "cash": 30e6,
        "equity": 50e6,
        "equityRate": 0.24,
        "debt": 125e6,
        "debtRate": 0.35,
        "marketShare": 0.12,
        "isLeader": False,
        "comparableStock": "KSPI",
        "ventureRate": 0.58,
    }
