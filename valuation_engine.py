"""
Valuation Engine Module
Values a private company at an exit year with three independent methods:
discounted cash flow, EBITDA multiple and comparable public company multiples.

Each method returns a MethodResult; blending the results and discounting them
to present value is done by valuation_report.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from company_data import Company
from country_data import CountryDataService, CountryEconomicProfile
from data_cache import ReferenceDataCache
from data_sources import build_session
from financial_math import aagr, cagr, capm, clamp, dcf, terminal_value, wacc
from settings import Settings, load_settings
from stock_data import StockDataService

logger = logging.getLogger(__name__)

# ==================== EBITDA MULTIPLE CONSTANTS ====================

DEFAULT_GROWTH_MULTIPLE = 4.0
FAST_GROWTH_MULTIPLE = 6.0
LEADER_GROWTH_MULTIPLE = 8.0
FAST_GROWTH_THRESHOLD = 0.5           # CAGR at or above this is fast growth

BASE_EBITDA_MULTIPLE = 2.0
MAX_GROWTH_MULTIPLE = 8.0
MAX_MARKET_MULTIPLE = 5.0
LEADERSHIP_BONUS_MULTIPLE = 5.0
COEFFICIENT_TO_MULTIPLE = 10.0

MIN_EBITDA_MULTIPLE = 1.5
MAX_EBITDA_MULTIPLE = 15.0

DCF = "dcf"
EBITDA = "ebitda"
MULTIPLES = "multiples"
METHODS = (DCF, EBITDA, MULTIPLES)


@dataclass(frozen=True)
class ValuationPolicy:
    """
    Edge-case conventions that historically differed between implementations.

    Attributes:
        terminal_growth_inclusive: growth == rate already makes terminal value NaN
        growth_metric: "cagr" or "aagr" for EBITDA growth
        multiple_model: "banded" (4x / 6x fast growth / 8x leader) or
            "additive" (base + growth term + market share term)
        multiples_divisor: "available" averages over the signals present,
            "fixed" always divides by two
        composite_strategy: "average" of positive methods or "weighted" blend
        beta: beta used by the CAPM fallback
    """
    terminal_growth_inclusive: bool = True
    growth_metric: str = "cagr"
    multiple_model: str = "banded"
    multiples_divisor: str = "available"
    composite_strategy: str = "average"
    min_multiple: float = MIN_EBITDA_MULTIPLE
    max_multiple: float = MAX_EBITDA_MULTIPLE
    beta: float = 1.0

    def __post_init__(self):
        choices = {
            'growth_metric': ("cagr", "aagr"),
            'multiple_model': ("banded", "additive"),
            'multiples_divisor': ("available", "fixed"),
            'composite_strategy': ("average", "weighted"),
        }
        for name, allowed in choices.items():
            if getattr(self, name) not in allowed:
                raise ValueError(f"{name} must be one of {allowed}, got {getattr(self, name)!r}")
        if self.min_multiple > self.max_multiple:
            raise ValueError("min_multiple must not exceed max_multiple")


@dataclass
class MethodResult:
    """Outcome of one valuation method"""
    method: str
    value: float
    available: bool = True
    details: Dict[str, Any] = field(default_factory=dict)
    note: Optional[str] = None

    @property
    def usable(self) -> bool:
        """True when the value can enter the composite"""
        return self.available and self.value is not None and math.isfinite(self.value) and self.value > 0


@dataclass
class ValuationContext:
    """Services shared by every valuation in the process"""
    cache: ReferenceDataCache
    countries: CountryDataService
    stocks: StockDataService
    today: Callable[[], date] = date.today


def build_context(settings: Optional[Settings] = None, cache: Optional[ReferenceDataCache] = None) -> ValuationContext:
    """Create the cache and data services once at process start"""
    settings = settings or load_settings()
    cache = cache or ReferenceDataCache(settings.cache_path)
    session = build_session()
    return ValuationContext(
        cache=cache,
        countries=CountryDataService(cache, session=session, settings=settings),
        stocks=StockDataService(cache, session=session, settings=settings),
    )


class ValuatorEngine:
    """Company valuation at an exit year"""

    def __init__(self, company: Company, context: ValuationContext, exit_year: Optional[int] = None,
                 policy: Optional[ValuationPolicy] = None):
        self.company = company
        self.context = context
        self.policy = policy or ValuationPolicy()
        if exit_year is None:
            exit_year = company.venture_exit_year or context.today().year
        self.exit_year = int(exit_year)
        self._country: Optional[CountryEconomicProfile] = None

    @property
    def country(self) -> CountryEconomicProfile:
        """Country profile, resolved once per engine"""
        if self._country is None:
            self._country = self.context.countries.resolve(self.company.country_code)
        return self._country

    # ==================== DISCOUNTED CASH FLOW ====================

    def discount_rate(self) -> Dict[str, Any]:
        """WACC, or CAPM when the capital structure leaves WACC undetermined"""
        company, country = self.company, self.country
        rate = wacc(company.debt, company.debt_rate, company.equity, company.equity_rate,
                    country.corporate_tax_rate)
        if rate == 0.0:
            # TODO: estimate beta from the comparable's unlevered beta instead of a fixed value
            rate = capm(country.risk_free_rate, self.policy.beta, country.market_return_rate)
            return {'rate': rate, 'source': 'CAPM'}
        return {'rate': rate, 'source': 'WACC'}

    def valuate_dcf(self) -> MethodResult:
        """
        Discounted free cash flow from the exit year on, plus terminal value,
        minus net financial position.

        Raises:
            CompanyDataError: exit year before the data starts or past the
                free cash flow series
        """
        company, country = self.company, self.country
        fcf = company.series_from('free_cash_flow', self.exit_year)

        discount = self.discount_rate()
        rate = discount['rate']
        growth_rate = country.average_gdp_growth_rate

        dcf_value = dcf(fcf, rate)
        tv = terminal_value(fcf[-1], rate, growth_rate, inclusive=self.policy.terminal_growth_inclusive)
        nfp = company.net_financial_position
        equity_value = dcf_value + tv - nfp

        if not math.isfinite(tv):
            logger.warning(f"Terminal value undefined for {company.name}: growth {growth_rate:.4f} vs rate {rate:.4f}")

        return MethodResult(
            method=DCF,
            value=equity_value,
            details={
                'rate': rate,
                'rate_source': discount['source'],
                'growth_rate': growth_rate,
                'corporate_tax': country.corporate_tax_rate,
                'dcf': dcf_value,
                'terminal_value': tv,
                'nfp': nfp,
                'cash_flows': list(fcf),
            },
        )

    # ==================== EBITDA MULTIPLE ====================

    def ebitda_growth(self, ebitda: List[float]) -> float:
        if self.policy.growth_metric == "aagr":
            return aagr(ebitda)
        return cagr(ebitda[0], ebitda[-1], len(ebitda) - 1)

    def ebitda_multiple(self, growth: float) -> Dict[str, Any]:
        """Multiple for the EBITDA method under the configured model"""
        company = self.company
        details: Dict[str, Any] = {'model': self.policy.multiple_model}

        if self.policy.multiple_model == "banded":
            if company.is_leader:
                multiple = LEADER_GROWTH_MULTIPLE
            elif not np.isnan(growth) and growth >= FAST_GROWTH_THRESHOLD:
                multiple = FAST_GROWTH_MULTIPLE
            else:
                multiple = DEFAULT_GROWTH_MULTIPLE
        else:
            inflation = self.country.average_inflation_rate
            net_growth = growth - inflation
            growth_term = 0.0 if np.isnan(net_growth) else min(net_growth * COEFFICIENT_TO_MULTIPLE, MAX_GROWTH_MULTIPLE)
            if company.is_leader:
                market_term = LEADERSHIP_BONUS_MULTIPLE
            else:
                market_term = min(company.market_share * COEFFICIENT_TO_MULTIPLE, MAX_MARKET_MULTIPLE)
            multiple = BASE_EBITDA_MULTIPLE + growth_term + market_term
            details.update({'inflation': inflation, 'net_growth': net_growth,
                            'growth_term': growth_term, 'market_term': market_term})

        details['multiple'] = clamp(multiple, self.policy.min_multiple, self.policy.max_multiple)
        return details

    def base_ebitda(self) -> Dict[str, Any]:
        """First strictly positive EBITDA at or after the exit year, else the first-year value"""
        ebitda = self.company.ebitda
        first_year = self.company.data_first_year
        for i, value in enumerate(ebitda):
            year = first_year + i
            if value > 0 and year >= self.exit_year:
                return {'value': value, 'year': year}
        return {'value': ebitda[0], 'year': first_year}

    def valuate_ebitda(self) -> MethodResult:
        company = self.company
        ebitda = company.ebitda
        if not ebitda:
            return MethodResult(method=EBITDA, value=0.0, available=False, note="EBITDA not provided")

        growth = self.ebitda_growth(ebitda)
        multiple = self.ebitda_multiple(growth)
        base = self.base_ebitda()
        nfp = company.net_financial_position
        equity_value = base['value'] * multiple['multiple'] - nfp

        return MethodResult(
            method=EBITDA,
            value=equity_value,
            details={
                'growth': growth,
                'growth_metric': self.policy.growth_metric,
                'growth_period': (company.data_first_year, company.data_first_year + len(ebitda) - 1),
                'base_ebitda': base['value'],
                'base_year': base['year'],
                'nfp': nfp,
                **multiple,
            },
        )

    # ==================== COMPARABLE MULTIPLES ====================

    def valuate_multiples(self) -> MethodResult:
        """
        EV/Revenue and EV/EBITDA of the comparable applied at the exit year.

        Comparable data is optional: any lookup failure yields an unavailable
        result with value 0 rather than an exception.
        """
        company = self.company
        year = self.exit_year
        if year < company.data_first_year:
            return MethodResult(method=MULTIPLES, value=0.0, available=False,
                                note=f"Exit year {year} precedes the first data year")

        lookup = self.context.stocks.lookup(company.comparable_stock)
        if not lookup.ok:
            return MethodResult(method=MULTIPLES, value=0.0, available=False,
                                details={'ticker': company.comparable_stock}, note=lookup.error)
        stock = lookup.profile

        signals: Dict[str, float] = {}
        if (company.has_value('revenue', year) and math.isfinite(stock.ev_to_revenue)
                and stock.ev_to_revenue > 0):
            signals['ev_revenue'] = company.value_at('revenue', year) * stock.ev_to_revenue
        if (company.has_value('ebitda', year) and company.value_at('ebitda', year) > 0
                and math.isfinite(stock.ev_to_ebitda) and stock.ev_to_ebitda > 0):
            signals['ev_ebitda'] = company.value_at('ebitda', year) * stock.ev_to_ebitda

        details = {
            'ticker': stock.ticker,
            'comparable': stock.name,
            'ev_to_revenue': stock.ev_to_revenue,
            'ev_to_ebitda': stock.ev_to_ebitda,
            'ev_revenue_valuation': signals.get('ev_revenue', 0.0),
            'ev_ebitda_valuation': signals.get('ev_ebitda', 0.0),
        }
        if not signals:
            return MethodResult(method=MULTIPLES, value=0.0, available=False, details=details,
                                note=f"No revenue or EBITDA for {year} to apply multiples to")

        divisor = len(signals) if self.policy.multiples_divisor == "available" else 2
        enterprise_value = sum(signals.values()) / divisor
        nfp = company.net_financial_position
        details.update({'enterprise_value': enterprise_value, 'nfp': nfp, 'signals': len(signals)})

        return MethodResult(method=MULTIPLES, value=enterprise_value - nfp, details=details)

    def valuate(self) -> Dict[str, MethodResult]:
        """Run all three methods"""
        return {
            DCF: self.valuate_dcf(),
            EBITDA: self.valuate_ebitda(),
            MULTIPLES: self.valuate_multiples(),
        }
