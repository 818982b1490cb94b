"""
Private Company Valuator
Command-line driver: loads a company JSON file, runs the three valuation
methods and prints the plain-text or HTML report.

Usage:
    python valuator.py data/arta.json --exit-year 2025
    python valuator.py data/arta.json --html > report.html
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from company_data import Company, CompanyDataError
from country_data import CountryDataError
from settings import configure_logging, load_settings
from valuation_engine import ValuationPolicy, build_context
from valuation_report import generate_report

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Private company valuation (DCF, EBITDA multiple, comparables)")
    parser.add_argument("company", help="Company data JSON file")
    parser.add_argument("--exit-year", type=int, default=None,
                        help="Valuation year (default: venture exit year or current year)")
    parser.add_argument("--html", action="store_true", help="Render the report as HTML")
    parser.add_argument("--growth-metric", choices=("cagr", "aagr"), default="cagr",
                        help="EBITDA growth measure")
    parser.add_argument("--multiple-model", choices=("banded", "additive"), default="banded",
                        help="EBITDA multiple model")
    parser.add_argument("--composite", choices=("average", "weighted"), default="average",
                        help="How method values are blended")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def load_company(path: str) -> Company:
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise CompanyDataError(f"{path} is not valid JSON: {e}") from e
    return Company.from_dict(data)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    policy = ValuationPolicy(
        growth_metric=args.growth_metric,
        multiple_model=args.multiple_model,
        composite_strategy=args.composite,
    )

    try:
        company = load_company(args.company)
        context = build_context(settings)
        report = generate_report(company, args.exit_year, context, html=args.html, policy=policy)
    except OSError as e:
        logger.error(f"✗ Cannot read {args.company}: {e}")
        return 1
    except (CompanyDataError, CountryDataError) as e:
        logger.error(f"✗ Valuation failed: {e}")
        return 1

    print(report.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
