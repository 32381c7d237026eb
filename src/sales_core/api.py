"""Public API for building dashboard reports from sale records.

Each dashboard view (financial summary, sales overview, monthly
profitability chart, currency summary) calls the same functions here, so
every view shows the same numbers for the same inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from sales_core.analytics.aggregate import (
    MonthBucket,
    MonthlyHighlights,
    ProfitDistribution,
    ServiceBucket,
    SummaryStats,
    YearSummary,
    compute_monthly_breakdown,
    compute_monthly_highlights,
    compute_monthly_series,
    compute_profit_distribution,
    compute_service_breakdown,
    compute_status_breakdown,
    compute_summary,
    compute_year_summary,
)
from sales_core.analytics.currency import (
    CombinedTotals,
    CurrencyBucket,
    combine_currency_buckets,
    compute_currency_breakdown,
)
from sales_core.analytics.filters import Period, RowPredicate, apply_filters
from sales_core.analytics.sorting import sort_sales
from sales_core.config import AnalyticsConfig
from sales_core.records import SalesInput, normalize_sales

logger = logging.getLogger(__name__)


@dataclass
class FinancialReport:
    """Everything the financial summary view displays for one currency.

    Attributes:
        currency: Currency the report is denominated in.
        period: Period filter that was applied.
        sales: Filtered sales frame, sorted for table display.
        summary: Headline totals, margins and extremal sales.
        profit_distribution: Counts of profitable / breakeven / loss sales.
        status_breakdown: Counts per lifecycle status.
        monthly_series: One bucket per month with sales, oldest first.
        service_breakdown: Service buckets, highest profit first.
        monthly_breakdown: Twelve month buckets for ``year`` (empty when no
            year was requested).
        year_summary: Totals of ``monthly_breakdown``, or None.
        monthly_highlights: Best months and monthly trends of
            ``monthly_breakdown``, or None.
    """

    currency: str
    period: Period
    sales: pd.DataFrame
    summary: SummaryStats
    profit_distribution: ProfitDistribution
    status_breakdown: dict[str, int]
    monthly_series: list[MonthBucket]
    service_breakdown: list[ServiceBucket]
    monthly_breakdown: list[MonthBucket] = field(default_factory=list)
    year_summary: YearSummary | None = None
    monthly_highlights: MonthlyHighlights | None = None


@dataclass
class CurrencyOverview:
    """Per-currency totals plus the guarded cross-currency combination."""

    buckets: list[CurrencyBucket]
    combined: CombinedTotals


def build_financial_report(
    records: SalesInput,
    currency: str,
    *,
    period: Period | str = Period.ALL,
    now: datetime | pd.Timestamp | None = None,
    predicates: Sequence[RowPredicate] = (),
    year: int | None = None,
    sort_key: str = "createdAt",
    sort_order: str = "desc",
    config: AnalyticsConfig | None = None,
) -> FinancialReport:
    """Filter sales and compute every aggregate of the financial summary view.

    This function:
    - does NOT fetch data or perform any I/O,
    - does NOT mutate ``records``,
    - MAY log progress via the logging module.

    Args:
        records: Raw sale records or a sales frame, any currency mix.
        currency: Currency to report on. Other currencies are filtered out.
        period: Recency window (default Period.ALL).
        now: Reference instant, required when ``period`` is not ALL.
        predicates: Extra row predicates applied after currency and period.
        year: When given, also compute the 12-month breakdown, its totals and
            highlights for that year.
            The monthly breakdown is taken over the currency-filtered sales,
            not the period-filtered ones.
        sort_key: Key for ordering ``FinancialReport.sales``.
        sort_order: "desc" (default) or "asc".
        config: AnalyticsConfig (tie-break policy and timezone). Defaults to
            AnalyticsConfig.default().

    Returns:
        FinancialReport for ``currency``.

    Raises:
        ConfigError: If period, sort order or year are invalid, or ``now`` is
            missing for a windowed period.
    """
    config = config or AnalyticsConfig.default()
    period = Period.parse(period)
    df = normalize_sales(records)

    logger.info(
        "Building financial report for %s (period=%s) from %d sale(s)",
        currency,
        period.value,
        len(df),
    )

    filtered = apply_filters(df, currency, period, now, predicates)
    report = FinancialReport(
        currency=currency,
        period=period,
        sales=sort_sales(filtered, sort_key, sort_order, tie_break=config.tie_break),
        summary=compute_summary(filtered),
        profit_distribution=compute_profit_distribution(filtered),
        status_breakdown=compute_status_breakdown(filtered),
        monthly_series=compute_monthly_series(filtered, tz=config.timezone),
        service_breakdown=compute_service_breakdown(filtered),
    )

    if year is not None:
        in_currency = apply_filters(df, currency)
        report.monthly_breakdown = compute_monthly_breakdown(in_currency, year, tz=config.timezone)
        report.year_summary = compute_year_summary(report.monthly_breakdown)
        report.monthly_highlights = compute_monthly_highlights(report.monthly_breakdown)

    logger.info(
        "Financial report for %s: %d sale(s), profit %.2f",
        currency,
        report.summary.total_sales,
        report.summary.total_profit,
    )
    return report


def build_currency_overview(records: SalesInput) -> CurrencyOverview:
    """Compute per-currency totals and their guarded combination.

    Monetary totals are never summed across currencies: with more than one
    currency present, ``combined`` carries only the sale count.
    """
    buckets = compute_currency_breakdown(records)
    return CurrencyOverview(buckets=buckets, combined=combine_currency_buckets(buckets))


def summarize_upstream(summary: Sequence[CurrencyBucket]) -> CurrencyOverview:
    """Wrap an API-provided currency summary without recomputing it."""
    buckets = sorted(summary, key=lambda b: b.currency)
    return CurrencyOverview(buckets=buckets, combined=combine_currency_buckets(buckets))
