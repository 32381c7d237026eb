"""Analytics stages over the normalized sales frame.

- **filters**: currency, period and custom predicates (applied in that order)
- **sorting**: order sales by a stored or derived key
- **aggregate**: summary totals, distributions and breakdowns
- **currency**: per-currency buckets and the mixed-currency guard
- **ranking**: best and worst performing sale

Example:
    >>> from datetime import datetime, timezone
    >>> from sales_core.analytics import Period, apply_filters, compute_monthly_breakdown
    >>>
    >>> usd = apply_filters(sales, "USD", Period.MONTH, now=datetime.now(timezone.utc))
    >>> months = compute_monthly_breakdown(usd, year=2024)
"""

from sales_core.analytics.aggregate import (
    MonthBucket,
    MonthlyHighlights,
    ProfitDistribution,
    ServiceBucket,
    SummaryStats,
    YearSummary,
    available_years,
    compute_monthly_breakdown,
    compute_monthly_highlights,
    compute_monthly_series,
    compute_profit_distribution,
    compute_service_breakdown,
    compute_status_breakdown,
    compute_summary,
    compute_year_summary,
    profit_margin,
)
from sales_core.analytics.currency import (
    MIXED_CURRENCY,
    CombinedTotals,
    CurrencyBucket,
    combine_currency_buckets,
    compute_currency_breakdown,
)
from sales_core.analytics.filters import (
    Period,
    apply_filters,
    filter_by_currency,
    filter_by_date_range,
    filter_by_period,
    filter_by_predicate,
    filter_by_status,
    period_window_start,
)
from sales_core.analytics.ranking import Ranking, top_and_worst
from sales_core.analytics.sorting import sale_profit_margin, sort_sales

__all__ = [
    "MIXED_CURRENCY",
    "CombinedTotals",
    "CurrencyBucket",
    "MonthBucket",
    "MonthlyHighlights",
    "Period",
    "ProfitDistribution",
    "Ranking",
    "ServiceBucket",
    "SummaryStats",
    "YearSummary",
    "apply_filters",
    "available_years",
    "combine_currency_buckets",
    "compute_currency_breakdown",
    "compute_monthly_breakdown",
    "compute_monthly_highlights",
    "compute_monthly_series",
    "compute_profit_distribution",
    "compute_service_breakdown",
    "compute_status_breakdown",
    "compute_summary",
    "compute_year_summary",
    "filter_by_currency",
    "filter_by_date_range",
    "filter_by_period",
    "filter_by_predicate",
    "filter_by_status",
    "period_window_start",
    "profit_margin",
    "sale_profit_margin",
    "sort_sales",
    "top_and_worst",
]
