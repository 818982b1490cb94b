"""
Tests for the financial formulas
"""

import math

import numpy as np
import pytest

from financial_math import aagr, cagr, capm, clamp, dcf, present_value, terminal_value, to_percent, wacc


class TestGrowthRates:

    def test_cagr_doubling_over_one_period(self):
        assert cagr(100, 200, 1) == pytest.approx(1.0)

    def test_cagr_four_periods(self):
        assert cagr(1.70e11, 2.00e11, 4) == pytest.approx((2.0 / 1.7) ** 0.25 - 1)

    @pytest.mark.parametrize("begin, end, periods", [
        (0, 100, 3),              # zero begin
        (100, 200, 0),            # zero periods
        (100, -50, 2),            # sign change
        (-100, 50, 2),
        (np.nan, 100, 2),
        (100, np.inf, 2),
    ])
    def test_cagr_undefined(self, begin, end, periods):
        assert math.isnan(cagr(begin, end, periods))

    def test_cagr_both_negative(self):
        # ratio 0.5 is positive, so the rate is defined
        assert cagr(-200, -100, 1) == pytest.approx(-0.5)

    def test_aagr(self):
        assert aagr([100, 110, 121]) == pytest.approx(0.10)

    def test_aagr_recovery_from_loss(self):
        assert aagr([-100, 50]) == pytest.approx(1.5)

    def test_aagr_undefined(self):
        assert math.isnan(aagr([100]))
        assert math.isnan(aagr([100, 0, 50]))


class TestCostOfCapital:

    def test_wacc_blend(self):
        expected = 50 / 175 * 0.24 + 125 / 175 * 0.35 * (1 - 0.2)
        assert wacc(125e6, 0.35, 50e6, 0.24, 0.2) == pytest.approx(expected)

    def test_wacc_no_capital(self):
        assert wacc(0, 0.1, 0, 0.2, 0.25) == 0.0

    def test_wacc_equity_only(self):
        assert wacc(0, 0.1, 100, 0.2, 0.25) == 0.2

    def test_wacc_debt_only_ignores_tax_shield(self):
        assert wacc(100, 0.1, 0, 0.2, 0.25) == 0.1

    def test_capm(self):
        assert capm(0.05, 1.0, 0.12) == pytest.approx(0.12)
        assert capm(0.05, 1.5, 0.12) == pytest.approx(0.155)


class TestDiscounting:

    def test_dcf_end_of_year(self):
        assert dcf([110, 121], 0.10) == pytest.approx(200.0)

    def test_dcf_empty(self):
        assert dcf([], 0.10) == 0.0

    def test_present_value(self):
        assert present_value(121, 0.10, 2) == pytest.approx(100.0)
        assert present_value(100, 0.10, 0) == pytest.approx(100.0)

    def test_terminal_value(self):
        assert terminal_value(100, 0.10, 0.05) == pytest.approx(100 * 1.05 / 0.05)

    def test_terminal_value_growth_above_rate(self):
        assert math.isnan(terminal_value(100, 0.05, 0.10))
        assert math.isnan(terminal_value(100, 0.05, 0.10, inclusive=False))

    def test_terminal_value_growth_equal_to_rate(self):
        assert math.isnan(terminal_value(100, 0.05, 0.05, inclusive=True))
        assert math.isnan(terminal_value(100, 0.05, 0.05, inclusive=False))

    def test_terminal_value_nan_growth(self):
        assert math.isnan(terminal_value(100, 0.10, np.nan))


class TestUtilities:

    def test_to_percent(self):
        assert to_percent(0.123456) == 12.35
        assert to_percent(0.2) == 20.0
        assert math.isnan(to_percent(np.nan))

    def test_clamp(self):
        assert clamp(20, 1.5, 15) == 15
        assert clamp(1, 1.5, 15) == 1.5
        assert clamp(4, 1.5, 15) == 4
