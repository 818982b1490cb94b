"""
Financial Math Module
Stateless formulas used by the valuation engine: growth rates, cost of capital,
discounted cash flow, terminal value and present value.

# RATE CONVENTION: all rates are decimals (0.12 means 12%).
"""

import math
from typing import Sequence

import numpy as np


# ==================== UTILITY FUNCTIONS ====================

def clamp(x: float, lo: float, hi: float) -> float:
    """
    Clamp a value between lower and upper bounds.

    Args:
        x: Value to clamp
        lo: Lower bound
        hi: Upper bound

    Returns:
        Clamped value
    """
    return float(min(max(x, lo), hi))


def _finite(*values: float) -> bool:
    return all(v is not None and math.isfinite(v) for v in values)


def to_percent(coefficient: float) -> float:
    """Convert a coefficient to a percent with two digits precision (0.123456 -> 12.35)."""
    if not _finite(coefficient):
        return np.nan
    return round(coefficient * 10000) / 100.0


# ==================== GROWTH RATES ====================

def cagr(begin: float, end: float, periods: float) -> float:
    """
    Compound annual growth rate.

    Args:
        begin: Beginning value
        end: Ending value
        periods: Number of periods between the two values

    Returns:
        CAGR as decimal, or np.nan when begin or periods is zero, an input is
        not finite, or end/begin is negative
    """
    if not _finite(begin, end, periods):
        return np.nan
    if begin == 0 or periods == 0:
        return np.nan
    ratio = end / begin
    if ratio < 0:
        return np.nan
    return float(ratio ** (1.0 / periods) - 1.0)


def aagr(values: Sequence[float]) -> float:
    """
    Arithmetic average of year-over-year growth rates.

    Each change is measured against the absolute previous value so that a
    series recovering from a loss still shows positive growth.

    Returns:
        AAGR as decimal, or np.nan for series shorter than two values or with a
        zero previous value
    """
    periods = len(values) - 1
    if periods < 1:
        return np.nan
    total = 0.0
    for previous, current in zip(values[:-1], values[1:]):
        if previous == 0:
            return np.nan
        total += (current - previous) / abs(previous)
    return total / periods


# ==================== COST OF CAPITAL ====================

def wacc(debt: float, debt_rate: float, equity: float, equity_rate: float,
         corporate_tax: float) -> float:
    """
    Weighted average cost of capital.

    Args:
        debt: Debt capital amount
        debt_rate: Cost of debt
        equity: Equity capital amount
        equity_rate: Cost of equity
        corporate_tax: Corporate income tax rate

    Returns:
        WACC, or 0.0 when there is neither debt nor equity (caller falls back
        to CAPM)
    """
    total = debt + equity
    if total == 0:
        return 0.0
    if debt == 0:
        return equity_rate
    if equity == 0:
        return debt_rate
    return (equity / total * equity_rate) + (debt / total * debt_rate * (1.0 - corporate_tax))


def capm(risk_free_rate: float, beta: float, market_return: float) -> float:
    """Cost of equity by the capital asset pricing model."""
    return risk_free_rate + beta * (market_return - risk_free_rate)


# ==================== DISCOUNTING ====================

def present_value(future_value: float, rate: float, periods: float) -> float:
    """Discount a future value back by `periods` compounding periods."""
    return future_value / ((1.0 + rate) ** periods)


def dcf(cash_flows: Sequence[float], rate: float) -> float:
    """
    Discounted cash flow of a series.

    The first cash flow arrives at the end of year one, so period t is
    discounted by (1 + rate) ** (t + 1).

    Args:
        cash_flows: Cash flow per period
        rate: Discount rate

    Returns:
        Sum of discounted cash flows (0.0 for an empty series)
    """
    if len(cash_flows) == 0:
        return 0.0
    flows = np.asarray(cash_flows, dtype=float)
    factors = np.power(1.0 + rate, np.arange(1, len(flows) + 1))
    return float(np.sum(flows / factors))


def terminal_value(last_cash_flow: float, rate: float, growth_rate: float,
                   inclusive: bool = True) -> float:
    """
    Gordon growth terminal value.

    Args:
        last_cash_flow: Cash flow of the final explicit period
        rate: Discount rate
        growth_rate: Perpetual growth rate
        inclusive: If True, growth equal to the rate is already undefined;
            if False only growth strictly above the rate is rejected (growth
            equal to the rate still has a zero denominator and yields NaN)

    Returns:
        Terminal value, or np.nan when the perpetuity is undefined
    """
    if not _finite(last_cash_flow, rate, growth_rate):
        return np.nan
    if growth_rate > rate or (inclusive and growth_rate >= rate):
        return np.nan
    if rate == growth_rate:
        return np.nan
    return (last_cash_flow * (1.0 + growth_rate)) / (rate - growth_rate)
