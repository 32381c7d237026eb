"""Sales Core - financial analytics for travel agency sales.

This package turns raw sale records from the sales API into the figures a
sales dashboard displays. Every stage is a pure function of its inputs:

- **Normalize**: raw records -> sales frame (missing amounts as 0)
- **Filter**: currency, then period, then custom predicates
- **Sort / Rank**: table ordering and best/worst sale
- **Aggregate**: totals, margins, monthly and service breakdowns

Amounts in different currencies are never summed together.

Module Structure:
    sales_core.records: SaleRecord, ServiceLine, normalize_sales
    sales_core.payload: parse_sales_response for API payloads
    sales_core.analytics: filter, sort, aggregate, currency and ranking stages
    sales_core.formatters: currency/percentage formatting and console output
    sales_core.api: build_financial_report, build_currency_overview
    sales_core.config: AnalyticsConfig and vocabulary constants

Quick Start:
    >>> from datetime import datetime, timezone
    >>> from sales_core import build_financial_report, parse_sales_response
    >>>
    >>> page = parse_sales_response(response_json)
    >>> report = build_financial_report(
    ...     page.sales, "USD", period="month", now=datetime.now(timezone.utc), year=2024
    ... )
    >>> report.summary.average_profit_margin
    >>> [b.total_profit for b in report.monthly_breakdown]
"""

__version__ = "0.1.0"

from sales_core.api import (
    CurrencyOverview,
    FinancialReport,
    build_currency_overview,
    build_financial_report,
    summarize_upstream,
)
from sales_core.config import AnalyticsConfig, TieBreak
from sales_core.exceptions import ConfigError, DataQualityError, PayloadError, SalesAPIError
from sales_core.payload import SalesPage, parse_sales_response
from sales_core.records import SaleRecord, ServiceLine, normalize_sales

__all__ = [
    "AnalyticsConfig",
    "ConfigError",
    "CurrencyOverview",
    "DataQualityError",
    "FinancialReport",
    "PayloadError",
    "SaleRecord",
    "SalesAPIError",
    "SalesPage",
    "ServiceLine",
    "TieBreak",
    "__version__",
    "build_currency_overview",
    "build_financial_report",
    "normalize_sales",
    "parse_sales_response",
    "summarize_upstream",
]
