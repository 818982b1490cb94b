"""
Company Data Module
Private company record: identity, yearly financial series, capital structure
and the inputs the valuation methods need.

Series are indexed by year = data_first_year + i and may differ in length.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

import country_tables

SERIES_NAMES = ('revenue', 'ebitda', 'free_cash_flow')


class CompanyDataError(ValueError):
    """Raised for missing or malformed company input"""


class SeriesIndexError(IndexError):
    """Raised when a series is read at a year it does not cover"""


# ==================== INPUT PARSING HELPERS ====================

def _number(data: Dict[str, Any], key: str, default: Optional[float] = None) -> float:
    if key not in data or data[key] is None:
        if default is not None:
            return default
        raise CompanyDataError(f"{key} field missing")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise CompanyDataError(f"{key} must be a number, got {value!r}")
    try:
        number = float(value)
    except ValueError:
        raise CompanyDataError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise CompanyDataError(f"{key} must be finite, got {value!r}")
    return number


def _integer(data: Dict[str, Any], key: str, default: Optional[int] = None) -> int:
    number = _number(data, key, None if default is None else float(default))
    if number != int(number):
        raise CompanyDataError(f"{key} must be a whole year, got {data[key]!r}")
    return int(number)


def _series(data: Dict[str, Any], key: str) -> List[float]:
    if key not in data or data[key] is None:
        raise CompanyDataError(f"{key} field missing")
    values = data[key]
    if not isinstance(values, (list, tuple)):
        raise CompanyDataError(f"{key} must be an array of numbers")
    parsed = []
    for i, value in enumerate(values):
        parsed.append(_number({f"{key}[{i}]": value}, f"{key}[{i}]"))
    return parsed


def _bool(data: Dict[str, Any], key: str) -> bool:
    value = data[key]
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise CompanyDataError(f"{key} must be true or false, got {value!r}")


# ==================== COMPANY ====================

@dataclass
class Company:
    """Financial data of a private company to be valued"""
    name: str
    country_code: str
    data_first_year: int
    revenue: List[float] = field(default_factory=list)
    ebitda: List[float] = field(default_factory=list)
    free_cash_flow: List[float] = field(default_factory=list)
    cash: float = 0.0
    equity: float = 0.0
    equity_rate: float = 0.0
    debt: float = 0.0
    debt_rate: float = 0.0
    market_share: float = 0.0
    is_leader: bool = False
    comparable_stock: str = ""
    venture_exit_year: Optional[int] = None
    venture_rate: float = 0.0

    IDENTITY_FIELDS = ('name', 'country_code', 'data_first_year')

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise CompanyDataError("name field missing")
        if country_tables.lookup_country(self.country_code) is None:
            raise CompanyDataError(f"Invalid country ISO Alpha-2 code: {self.country_code!r}")
        self.country_code = self.country_code.strip().upper()
        self.revenue = list(self.revenue or [])
        self.ebitda = list(self.ebitda or [])
        self.free_cash_flow = list(self.free_cash_flow or [])
        self._identity_set = True

    def __setattr__(self, key, value):
        # identity is fixed once constructed
        if key in self.IDENTITY_FIELDS and self.__dict__.get('_identity_set'):
            raise CompanyDataError(f"{key} cannot be changed after construction")
        super().__setattr__(key, value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Company":
        """
        Parse the JSON shape posted by the valuation form.

        Raises:
            CompanyDataError: naming the first missing or malformed field
        """
        if not isinstance(data, dict):
            raise CompanyDataError("Company data must be a JSON object")
        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise CompanyDataError("name field missing")
        country = data.get('country')
        if not isinstance(country, str):
            raise CompanyDataError("country field missing")
        if 'marketShare' not in data and 'isLeader' not in data:
            raise CompanyDataError("marketShare or isLeader field missing")
        comparable = data.get('comparableStock')
        if not isinstance(comparable, str):
            raise CompanyDataError("comparableStock field missing")

        venture_exit_year = None
        if data.get('ventureExitYear') is not None:
            venture_exit_year = _integer(data, 'ventureExitYear')

        return cls(
            name=name.strip(),
            country_code=country,
            data_first_year=_integer(data, 'dataFirstYear'),
            revenue=_series(data, 'revenue'),
            ebitda=_series(data, 'ebitda'),
            free_cash_flow=_series(data, 'freeCashFlow'),
            cash=_number(data, 'cash'),
            equity=_number(data, 'equity'),
            equity_rate=_number(data, 'equityRate'),
            debt=_number(data, 'debt'),
            debt_rate=_number(data, 'debtRate'),
            market_share=_number(data, 'marketShare', 0.0),
            is_leader=_bool(data, 'isLeader') if 'isLeader' in data else False,
            comparable_stock=comparable.strip().upper(),
            venture_exit_year=venture_exit_year,
            venture_rate=_number(data, 'ventureRate', 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'country': self.country_code,
            'dataFirstYear': self.data_first_year,
            'revenue': list(self.revenue),
            'ebitda': list(self.ebitda),
            'freeCashFlow': list(self.free_cash_flow),
            'cash': self.cash,
            'equity': self.equity,
            'equityRate': self.equity_rate,
            'debt': self.debt,
            'debtRate': self.debt_rate,
            'marketShare': self.market_share,
            'isLeader': self.is_leader,
            'comparableStock': self.comparable_stock,
            'ventureExitYear': self.venture_exit_year,
            'ventureRate': self.venture_rate,
        }

    # ---------- series access ----------

    @property
    def net_financial_position(self) -> float:
        """Debt minus cash and equivalents"""
        return self.debt - self.cash

    def series(self, name: str) -> List[float]:
        if name not in SERIES_NAMES:
            raise KeyError(f"Unknown series {name!r}")
        return getattr(self, name)

    def has_value(self, name: str, year: int) -> bool:
        index = year - self.data_first_year
        return 0 <= index < len(self.series(name))

    def value_at(self, name: str, year: int) -> float:
        values = self.series(name)
        index = year - self.data_first_year
        if index < 0 or index >= len(values):
            last_year = self.data_first_year + len(values) - 1
            raise SeriesIndexError(f"{name} has no value for {year} (covers {self.data_first_year}-{last_year})")
        return values[index]

    def series_from(self, name: str, year: int) -> List[float]:
        """Values of a series from `year` to its end"""
        values = self.series(name)
        offset = year - self.data_first_year
        if offset < 0:
            raise CompanyDataError(f"Exit year {year} precedes the first data year {self.data_first_year}")
        if offset >= len(values):
            raise CompanyDataError(f"{name} has no values from {year} onwards")
        return values[offset:]

    @property
    def last_data_year(self) -> int:
        longest = max((len(self.series(n)) for n in SERIES_NAMES), default=0)
        return self.data_first_year + max(longest, 1) - 1

    def data_frame(self) -> pd.DataFrame:
        """Series as a year-indexed table; years a series does not cover are NaN"""
        years = list(range(self.data_first_year, self.last_data_year + 1))
        columns = {'Revenue': self.revenue, 'EBITDA': self.ebitda, 'Free CF': self.free_cash_flow}
        frame = pd.DataFrame(index=pd.Index(years, name='Year'))
        for label, values in columns.items():
            padded = list(values) + [np.nan] * (len(years) - len(values))
            frame[label] = padded
        return frame
