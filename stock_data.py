"""
Comparable Stock Data Module
Fetches public company fundamentals (EV/Revenue, EV/EBITDA, TTM figures) from
Alpha Vantage for the comparable multiples method, with a quarter-long cache
because the free tier allows only 25 requests per day.
"""

import json
import logging
import math
import sqlite3
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

import numpy as np
import requests

from data_cache import COMPANIES, COMPANY_DATA_EXPIRATION_MONTHS, ReferenceDataCache, is_expired
from data_sources import DataSourceError, RateLimiter, build_session, fetch_json
from settings import Settings, load_settings

logger = logging.getLogger(__name__)

COMPANY_DATE_FIELD = "LatestQuarter"
INFORMATION_FIELD = "Information"
ERROR_MESSAGE_FIELD = "Error Message"


class StockDataError(RuntimeError):
    """Raised when comparable stock data is unavailable"""


# ==================== INPUT NORMALIZATION HELPERS ====================

def to_num(x: Any) -> float:
    """Alpha Vantage sends numbers as strings and 'None'/'-' for gaps; those become NaN"""
    if x is None:
        return np.nan
    if isinstance(x, (int, float)):
        return float(x) if math.isfinite(float(x)) else np.nan
    if isinstance(x, str):
        t = x.strip().replace(",", "")
        try:
            return float(t)
        except ValueError:
            return np.nan
    return np.nan


def parse_quarter(value: Any) -> Optional[date]:
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


# ==================== PROFILE ====================

@dataclass(frozen=True)
class ComparableStockProfile:
    """Fundamentals of a listed comparable company"""
    ticker: str
    name: str
    revenue_ttm: float
    ebitda_ttm: float
    ev_to_revenue: float
    ev_to_ebitda: float
    latest_quarter: Optional[date]
    market_capitalization: float = np.nan
    gross_profit_ttm: float = np.nan

    @property
    def enterprise_value(self) -> float:
        return self.ebitda_ttm * self.ev_to_ebitda

    @classmethod
    def from_overview(cls, ticker: str, overview: Dict[str, Any]) -> "ComparableStockProfile":
        """Build a profile from an Alpha Vantage OVERVIEW document"""
        return cls(
            ticker=overview.get('Symbol') or ticker,
            name=overview.get('Name') or ticker,
            revenue_ttm=to_num(overview.get('RevenueTTM')),
            ebitda_ttm=to_num(overview.get('EBITDA')),
            ev_to_revenue=to_num(overview.get('EVToRevenue')),
            ev_to_ebitda=to_num(overview.get('EVToEBITDA')),
            latest_quarter=parse_quarter(overview.get(COMPANY_DATE_FIELD)),
            market_capitalization=to_num(overview.get('MarketCapitalization')),
            gross_profit_ttm=to_num(overview.get('GrossProfitTTM')),
        )

    def __str__(self) -> str:
        def money(v):
            return "n/a" if not np.isfinite(v) else f"${v:,.0f}"
        return (f"{self.name} ({self.ticker})\n"
                f"Revenue (TTM): {money(self.revenue_ttm)}\n"
                f"EBITDA (TTM): {money(self.ebitda_ttm)}\n"
                f"Gross Profit (TTM): {money(self.gross_profit_ttm)}\n"
                f"Market Capitalization: {money(self.market_capitalization)}\n"
                f"Enterprise Value: {money(self.enterprise_value)}\n"
                f"EV/Revenue: {self.ev_to_revenue}x\n"
                f"EV/EBITDA: {self.ev_to_ebitda}x\n")


@dataclass(frozen=True)
class StockLookup:
    """Result of a comparable lookup: a profile or the reason there is none"""
    ticker: str
    profile: Optional[ComparableStockProfile] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.profile is not None


# ==================== SERVICE ====================

class StockDataService:
    """Resolves ComparableStockProfile objects, cache first"""

    def __init__(self, cache: ReferenceDataCache, session: Optional[requests.Session] = None,
                 settings: Optional[Settings] = None, today: Optional[Callable[[], date]] = None,
                 rate_limiter: Optional[RateLimiter] = None):
        self.cache = cache
        self.settings = settings or load_settings()
        self.session = session or build_session()
        self._today = today or date.today
        api = self.settings.alpha_vantage
        self.rate_limiter = rate_limiter or RateLimiter(
            calls_per_minute=api.rate_limit_per_minute,
            calls_per_day=api.rate_limit_per_day,
        )

    def _cached_overview(self, ticker: str) -> Optional[Dict[str, Any]]:
        payload = self.cache.get(COMPANIES, ticker)
        if payload is None:
            return None
        try:
            overview = json.loads(payload)
        except ValueError:
            logger.warning(f"Discarding unreadable cached stock data for {ticker}")
            return None
        quarter = parse_quarter(overview.get(COMPANY_DATE_FIELD)) if isinstance(overview, dict) else None
        if quarter is None:
            return None
        if is_expired(quarter, COMPANY_DATA_EXPIRATION_MONTHS, self._today()):
            logger.info(f"Cached stock data for {ticker} (quarter {quarter}) expired")
            return None
        return overview

    def _fetch_overview(self, ticker: str) -> Dict[str, Any]:
        api = self.settings.alpha_vantage
        params = {'function': 'OVERVIEW', 'symbol': ticker, 'apikey': api.api_key}
        try:
            self.rate_limiter.acquire(api.name)
            overview = fetch_json(self.session, api.base_url, params=params, timeout=self.settings.http_timeout)
        except DataSourceError as e:
            logger.error(f"✗ Failed to fetch fundamental data for {ticker} from Alpha Vantage: {e}")
            raise StockDataError(str(e)) from e

        if not isinstance(overview, dict) or not overview:
            raise StockDataError(f"Empty object returned from {api.base_url} for {ticker}")
        if INFORMATION_FIELD in overview:
            raise StockDataError(str(overview[INFORMATION_FIELD]))
        if ERROR_MESSAGE_FIELD in overview:
            raise StockDataError(str(overview[ERROR_MESSAGE_FIELD]))

        logger.info(f"✓ Fetched fundamental data for {ticker} from Alpha Vantage")
        return overview

    def resolve(self, ticker: str) -> ComparableStockProfile:
        """
        Return the comparable profile of a listed company.

        Raises:
            StockDataError: Blank ticker, rate limit, empty or error payload,
                network or cache failure
        """
        if not ticker or not ticker.strip():
            raise StockDataError("Comparable stock ticker is empty")
        symbol = ticker.strip().upper()

        try:
            with self.cache.key_lock(COMPANIES, symbol):
                overview = self._cached_overview(symbol)
                if overview is not None:
                    logger.debug(f"Stock data for {symbol} served from cache")
                else:
                    overview = self._fetch_overview(symbol)
                    self.cache.put(COMPANIES, symbol, json.dumps(overview))
        except sqlite3.Error as e:
            logger.error(f"✗ Stock data cache unavailable for {symbol}: {e}")
            raise StockDataError(f"Cache error for {symbol}: {e}") from e

        return ComparableStockProfile.from_overview(symbol, overview)

    def lookup(self, ticker: str) -> StockLookup:
        """Like resolve() but reports unavailability as a value instead of raising"""
        try:
            return StockLookup(ticker=ticker, profile=self.resolve(ticker))
        except StockDataError as e:
            logger.warning(f"Comparable stock {ticker!r} unavailable: {e}")
            return StockLookup(ticker=ticker, error=str(e))
