"""
Country Economic Data Module
Fetches and caches a country's GDP and inflation history from the World Bank
and combines it with static tax and base-rate tables into the profile used by
the WACC, CAPM and terminal value formulas.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

import numpy as np
import pandas as pd
import requests

import country_tables
from data_cache import COUNTRIES, COUNTRY_DATA_EXPIRATION_MONTHS, ReferenceDataCache, is_expired
from data_sources import DataSourceError, RateLimiter, build_session, fetch_json
from financial_math import cagr, to_percent
from settings import Settings, load_settings

logger = logging.getLogger(__name__)

WB_REAL_GDP = "NY.GDP.MKTP.KD"        # GDP, constant prices
WB_INFLATION = "NY.GDP.DEFL.KD.ZG"    # GDP deflator, annual %
WB_RESPONSE_VALUES_INDEX = 1          # [metadata, values]

MINIMUM_YEARS_OF_HISTORY = 3
DEFAULT_YEARS_OF_HISTORY = 5
MAXIMUM_YEARS_OF_HISTORY = 10


class CountryDataError(RuntimeError):
    """Raised when economic data for a country cannot be resolved"""


def format_money(value: float, currency: str = "USD") -> str:
    """Format an amount with its currency code and no decimals"""
    if value is None or not np.isfinite(value):
        return f"{currency} n/a"
    sign = "-" if value < 0 else ""
    return f"{sign}{currency} {abs(value):,.0f}"


@dataclass(frozen=True)
class CountryEconomicProfile:
    """Economic profile of one country over a window of years"""
    country_code: str
    country_name: str
    currency: str
    first_year: int
    last_year: int
    gdp: Tuple[float, ...]
    inflation: Tuple[float, ...]
    average_gdp_growth_rate: float
    average_inflation_rate: float
    corporate_tax_rate: float
    risk_free_rate: float
    market_return_rate: float

    def gdp_at(self, year: int) -> float:
        index = year - self.first_year
        if index < 0 or index >= len(self.gdp):
            return np.nan
        return self.gdp[index]

    def inflation_at(self, year: int) -> float:
        index = year - self.first_year
        if index < 0 or index >= len(self.inflation):
            return np.nan
        return self.inflation[index]

    def format_money(self, value: float) -> str:
        return format_money(value, self.currency)

    def to_payload(self) -> str:
        data = asdict(self)
        data['gdp'] = list(self.gdp)
        data['inflation'] = list(self.inflation)
        # JSON has no NaN; store undefined rates as null
        for key, value in data.items():
            if isinstance(value, float) and not np.isfinite(value):
                data[key] = None
        return json.dumps(data)

    @classmethod
    def from_payload(cls, payload: str) -> "CountryEconomicProfile":
        data = json.loads(payload)
        for key in ('average_gdp_growth_rate', 'average_inflation_rate'):
            if data.get(key) is None:
                data[key] = np.nan
        data['gdp'] = tuple(float(v) for v in data['gdp'])
        data['inflation'] = tuple(float(v) for v in data['inflation'])
        return cls(**data)

    def history_frame(self) -> pd.DataFrame:
        """GDP, YoY growth and inflation by year"""
        years = list(range(self.first_year, self.last_year + 1))
        frame = pd.DataFrame({'Year': years, 'GDP': list(self.gdp), 'Inflation': list(self.inflation)})
        frame['GDP Growth'] = frame['GDP'].replace(0, np.nan).pct_change(fill_method=None)
        return frame.set_index('Year')

    def __str__(self) -> str:
        lines = [f"{self.country_name} ({self.country_code})"]
        for year, row in self.history_frame().iterrows():
            growth = "" if pd.isna(row['GDP Growth']) else f"growth {to_percent(row['GDP Growth'])}%, "
            lines.append(f"{year} GDP: {format_money(row['GDP'], 'USD')} "
                         f"({growth}inflation {to_percent(row['Inflation'])}%)")
        lines.append(f"Average GDP growth rate: {to_percent(self.average_gdp_growth_rate)}%")
        lines.append(f"Average Inflation Rate: {to_percent(self.average_inflation_rate)}%")
        lines.append(f"Interest Rate: {to_percent(self.risk_free_rate)}%")
        lines.append(f"Corporate Tax Rate: {to_percent(self.corporate_tax_rate)}%")
        return "\n".join(lines)


def leading_average(values: List[float]) -> float:
    """Arithmetic mean of the values before the first zero (0.0 if the first value is zero)"""
    leading = []
    for value in values:
        if value == 0:
            break
        leading.append(value)
    if not leading:
        return 0.0
    return float(np.mean(leading))


class CountryDataService:
    """
    Resolves CountryEconomicProfile objects, cache first.

    A cached profile stays valid for 12 months after the year-end of its last
    data year; after that the World Bank is queried again and the cache
    overwritten.
    """

    def __init__(self, cache: ReferenceDataCache, session: Optional[requests.Session] = None,
                 settings: Optional[Settings] = None, today: Optional[Callable[[], date]] = None,
                 rate_limiter: Optional[RateLimiter] = None):
        self.cache = cache
        self.settings = settings or load_settings()
        self.session = session or build_session()
        self._today = today or date.today
        api = self.settings.world_bank
        self.rate_limiter = rate_limiter or RateLimiter(
            calls_per_minute=api.rate_limit_per_minute,
            calls_per_day=api.rate_limit_per_day,
        )

    # ---------- cache ----------

    def _cached_profile(self, code: str, years: int) -> Optional[CountryEconomicProfile]:
        payload = self.cache.get(COUNTRIES, code)
        if payload is None:
            return None
        try:
            profile = CountryEconomicProfile.from_payload(payload)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable cached country data for {code}: {e}")
            return None
        if is_expired(date(profile.last_year, 12, 31), COUNTRY_DATA_EXPIRATION_MONTHS, self._today()):
            logger.info(f"Cached country data for {code} ({profile.last_year}) expired")
            return None
        if profile.last_year - profile.first_year + 1 != years:
            logger.info(f"Cached country data for {code} covers {profile.first_year}-{profile.last_year}, "
                        f"{years} years requested")
            return None
        return profile

    # ---------- World Bank ----------

    def _fetch_series(self, code: str, indicator: str, first_year: int, last_year: int) -> List[float]:
        """Fetch one indicator as a list indexed by year - first_year (missing values are 0)"""
        url = f"{self.settings.world_bank.base_url}/{code}/indicator/{indicator}"
        params = {'date': f"{first_year}:{last_year}", 'format': 'json'}
        try:
            self.rate_limiter.acquire(self.settings.world_bank.name)
            document = fetch_json(self.session, url, params=params, timeout=self.settings.http_timeout)
        except DataSourceError as e:
            logger.error(f"✗ Failed to fetch {indicator} for {code} from World Bank: {e}")
            raise CountryDataError(str(e)) from e

        if (not isinstance(document, list) or len(document) <= WB_RESPONSE_VALUES_INDEX
                or not isinstance(document[WB_RESPONSE_VALUES_INDEX], list)):
            raise CountryDataError(f"Malformed World Bank response for {indicator} ({code}): {document!r:.200}")

        values = [0.0] * (last_year - first_year + 1)
        for entry in document[WB_RESPONSE_VALUES_INDEX]:
            try:
                year = int(entry['date'])
                value = entry.get('value')
                value = 0.0 if value is None else float(value)
            except (KeyError, TypeError, ValueError) as e:
                raise CountryDataError(f"Malformed World Bank entry for {indicator} ({code}): {entry!r}") from e
            index = year - first_year
            if 0 <= index < len(values):
                values[index] = value
        return values

    def _fetch_profile(self, code: str, years: int) -> CountryEconomicProfile:
        iso3, name, currency = country_tables.lookup_country(code)
        last_year = self._today().year - 1
        first_year = last_year - (years - 1)

        gdp = self._fetch_series(code, WB_REAL_GDP, first_year, last_year)
        inflation = [v / 100.0 for v in self._fetch_series(code, WB_INFLATION, first_year, last_year)]

        profile = CountryEconomicProfile(
            country_code=code,
            country_name=name,
            currency=currency,
            first_year=first_year,
            last_year=last_year,
            gdp=tuple(gdp),
            inflation=tuple(inflation),
            average_gdp_growth_rate=cagr(gdp[0], gdp[-1], years - 1),
            average_inflation_rate=leading_average(inflation),
            corporate_tax_rate=country_tables.corporate_tax_rate(iso3),
            risk_free_rate=country_tables.base_rate(iso3),
            market_return_rate=country_tables.market_return_rate(iso3),
        )
        logger.info(f"✓ Fetched economic data for {code} ({first_year}-{last_year}) from World Bank")
        return profile

    # ---------- public ----------

    def resolve(self, country_code: str, years_of_history: Optional[int] = None) -> CountryEconomicProfile:
        """
        Return the economic profile of a country.

        Args:
            country_code: ISO 3166 alpha-2 code
            years_of_history: Years of GDP/inflation history, clamped to 3..10

        Raises:
            CountryDataError: Unknown country code or World Bank data unavailable
        """
        if country_tables.lookup_country(country_code) is None:
            raise CountryDataError(f"Invalid country ISO Alpha-2 code: {country_code!r}")
        code = country_code.strip().upper()

        years = years_of_history or self.settings.years_of_history or DEFAULT_YEARS_OF_HISTORY
        years = int(min(max(years, MINIMUM_YEARS_OF_HISTORY), MAXIMUM_YEARS_OF_HISTORY))

        with self.cache.key_lock(COUNTRIES, code):
            profile = self._cached_profile(code, years)
            if profile is not None:
                logger.debug(f"Country data for {code} served from cache")
                return profile

            profile = self._fetch_profile(code, years)
            self.cache.put(COUNTRIES, code, profile.to_payload())
            return profile
