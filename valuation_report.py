"""
Valuation Report Module
Blends the three method results into one exit valuation, discounts it to
present value when the exit lies in the future and renders the report as
plain text or HTML.
"""

import logging
import math
from dataclasses import dataclass, field
from html import escape
from typing import Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from company_data import Company
from country_data import CountryEconomicProfile
from financial_math import present_value, to_percent
from valuation_engine import (DCF, EBITDA, METHODS, MULTIPLES, MethodResult, ValuationContext,
                              ValuationPolicy, ValuatorEngine)

logger = logging.getLogger(__name__)

COMPOSITE_WEIGHTS = {DCF: 0.4, EBITDA: 0.3, MULTIPLES: 0.3}


def _qualifies(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def composite_valuation(values: Union[Mapping[str, float], Sequence[float]], strategy: str = "average") -> float:
    """
    Blend method values into one exit valuation.

    Args:
        values: Method values keyed by method name, or a sequence in
            DCF, EBITDA, multiples order
        strategy: "average" of the qualifying values, or "weighted" with
            0.4/0.3/0.3 renormalized over the qualifying values

    Returns:
        Composite value; NaN when no value is strictly positive and finite
    """
    if not isinstance(values, Mapping):
        values = dict(zip(METHODS, values))
    qualifying = {method: v for method, v in values.items() if _qualifies(v)}
    if not qualifying:
        return np.nan

    if strategy == "average":
        return float(np.mean(list(qualifying.values())))
    if strategy == "weighted":
        weights = {method: COMPOSITE_WEIGHTS.get(method, 0.0) for method in qualifying}
        total = sum(weights.values())
        if total == 0:
            return np.nan
        return sum(qualifying[m] * w for m, w in weights.items()) / total
    raise ValueError(f"Unknown composite strategy {strategy!r}")


@dataclass
class ValuationReport:
    """Numbers and rendered text of one valuation"""
    company: Company
    exit_year: int
    results: Dict[str, MethodResult]
    composite: float
    present_value: Optional[float] = None
    present_value_year: Optional[int] = None
    text: str = ""
    html: bool = False
    policy: ValuationPolicy = field(default_factory=ValuationPolicy)

    def __str__(self) -> str:
        return self.text


# ==================== RENDERING ====================

def company_table(company: Company, country: CountryEconomicProfile) -> pd.DataFrame:
    """Company series with money formatted in the country's currency"""
    frame = company.data_frame()
    return frame.apply(lambda column: column.map(lambda v: "" if pd.isna(v) else country.format_money(v)))


def _rate(value: float) -> str:
    return f"{to_percent(value)}%"


def _render_text(report: ValuationReport, country: CountryEconomicProfile) -> str:
    company = report.company
    money = country.format_money
    lines = ["=" * 80, f"{company.name} ({country.country_name})", "=" * 80,
             company_table(company, country).to_string(), ""]

    dcf_result = report.results[DCF]
    d = dcf_result.details
    lines += [" Discounted Cash Flow (FCF) Valuation",
              f"{d['rate_source']} = {_rate(d['rate'])}",
              f"GDP growth = {_rate(d['growth_rate'])}",
              f"DCF = {money(d['dcf'])}",
              f"Terminal Value = {money(d['terminal_value'])}",
              f"NFP = {money(d['nfp'])}",
              f"Valuation = {money(dcf_result.value)}",
              ""]

    ebitda_result = report.results[EBITDA]
    lines.append(" EBITDA Multiple Valuation")
    if ebitda_result.available:
        d = ebitda_result.details
        lines += [f"EBITDA: {money(d['base_ebitda'])} ({d['base_year']})",
                  f"Growth ({d['growth_metric'].upper()}): {_rate(d['growth'])}",
                  f"Multiple: {round(d['multiple'], 2)}x",
                  f"NFP: {money(d['nfp'])}",
                  f"Valuation: {money(ebitda_result.value)}"]
    else:
        lines.append(f"not available: {ebitda_result.note}")
    lines.append("")

    multiples_result = report.results[MULTIPLES]
    if multiples_result.available:
        d = multiples_result.details
        lines += [f" Multiples Valuation ({d['comparable']})",
                  f"EV/Revenue ({d['ev_to_revenue']}x): {money(d['ev_revenue_valuation'])}",
                  f"EV/EBITDA ({d['ev_to_ebitda']}x): {money(d['ev_ebitda_valuation'])}",
                  f"EV average: {money(d['enterprise_value'])}",
                  f"NFP: {money(d['nfp'])}",
                  f"Valuation: {money(multiples_result.value)}"]
    else:
        lines.append("Comparable Multiples - not available")
        if multiples_result.note:
            lines.append(multiples_result.note)
    lines.append("")

    lines.append(f"VALUATION AVERAGE ({report.exit_year}): {money(report.composite)}")
    if report.present_value is not None:
        lines.append(f"Present Value ({report.present_value_year}): {money(report.present_value)}")
    return "\n".join(lines)


def _render_html(report: ValuationReport, country: CountryEconomicProfile) -> str:
    company = report.company
    money = country.format_money
    parts = [f"<h5>{escape(company.name)} ({escape(country.country_name)})</h5>",
             company_table(company, country).to_html(classes="table table-sm", border=0, escape=True)]

    dcf_result = report.results[DCF]
    d = dcf_result.details
    parts.append(f"<h5>Discounted Cash Flow - {money(dcf_result.value)}</h5>")
    parts.append(f"<p>DCF: <b>{money(d['dcf'])}</b> <b>({d['rate_source']}: {_rate(d['rate'])})</b><br>"
                 f"Terminal Value: <b>{money(d['terminal_value'])}</b> "
                 f"<b>(GDP growth: {_rate(d['growth_rate'])})</b><br>"
                 f"Net Financial Position: <b>{money(d['nfp'])}</b><br></p>")

    ebitda_result = report.results[EBITDA]
    if ebitda_result.available:
        d = ebitda_result.details
        parts.append(f"<h5>EBITDA Multiple - {money(ebitda_result.value)}</h5>")
        parts.append(f"<p>EBITDA: <b>{money(d['base_ebitda'])}</b> ({d['base_year']})&nbsp;&nbsp;"
                     f"Multiple: <b>{round(d['multiple'], 2)}x</b><br>"
                     f"Growth: <b>{_rate(d['growth'])}</b><br>"
                     f"Net Financial Position: <b>{money(d['nfp'])}</b><br></p>")
    else:
        parts.append("<h5>EBITDA Multiple - not available</h5>")

    multiples_result = report.results[MULTIPLES]
    if multiples_result.available:
        d = multiples_result.details
        parts.append(f"<h5>Comparable Multiples - {money(multiples_result.value)}</h5>")
        parts.append(f"<p>Comparable: <b>{escape(str(d['comparable']))}</b> ({escape(str(d['ticker']))})<br>"
                     f"EV/Revenue (<b>{d['ev_to_revenue']}x</b>): <b>{money(d['ev_revenue_valuation'])}</b><br>"
                     f"EV/EBITDA (<b>{d['ev_to_ebitda']}x</b>): <b>{money(d['ev_ebitda_valuation'])}</b><br>"
                     f"Enterprise Value Average: <b>{money(d['enterprise_value'])}</b><br>"
                     f"Net Financial Position: <b>{money(d['nfp'])}</b><br></p>")
    else:
        parts.append("<h5>Comparable Multiples - not available</h5>")

    parts.append(f"<h5>Valuation Average ({report.exit_year}) - {money(report.composite)}</h5>")
    if report.present_value is not None:
        parts.append(f"<h5>Present Value ({report.present_value_year}) - {money(report.present_value)}</h5>")
    return "".join(parts)


# ==================== REPORT ====================

def generate_report(company: Company, exit_year: Optional[int], context: ValuationContext,
                    html: bool = False, policy: Optional[ValuationPolicy] = None) -> ValuationReport:
    """
    Valuate a company with all three methods and render the report.

    Args:
        company: Company to value
        exit_year: Year of the valuation; None uses the venture exit year or
            the current year
        context: Shared cache and data services
        html: Render HTML instead of plain text
        policy: Edge-case conventions, defaults to ValuationPolicy()

    Returns:
        ValuationReport with method results, composite and present value

    Raises:
        CompanyDataError: Exit year outside the free cash flow series
        CountryDataError: Country economic data unavailable
    """
    policy = policy or ValuationPolicy()
    engine = ValuatorEngine(company, context, exit_year=exit_year, policy=policy)
    logger.info(f"Valuating {company.name} ({company.country_code}) at {engine.exit_year}")

    results = engine.valuate()
    composite = composite_valuation({m: r.value for m, r in results.items() if r.available},
                                    policy.composite_strategy)

    report = ValuationReport(company=company, exit_year=engine.exit_year, results=results,
                             composite=composite, html=html, policy=policy)

    current_year = context.today().year
    if engine.exit_year > current_year:
        report.present_value = present_value(composite, company.venture_rate, engine.exit_year - current_year)
        report.present_value_year = current_year

    country = engine.country
    report.text = _render_html(report, country) if html else _render_text(report, country)
    logger.info(f"✓ Valuation of {company.name}: {country.format_money(composite)}")
    return report
