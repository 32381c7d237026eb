"""Aggregation stage: summary totals, distributions and breakdowns.

Every aggregate here operates on a single-currency set of sales (the output
of the filter stage). Combining monetary totals across currencies is handled
separately by sales_core.analytics.currency, which refuses to sum them.

Ratios are always guarded: a margin over zero revenue is 0, never NaN or
infinity.

Example:
    >>> from sales_core.analytics import apply_filters, compute_summary
    >>> sales = [
    ...     {"saleCurrency": "USD", "totalSalePrice": 1000, "totalCost": 600, "profit": 400},
    ...     {"saleCurrency": "ARS", "totalSalePrice": 500, "totalCost": 500, "profit": 0},
    ... ]
    >>> compute_summary(apply_filters(sales, "USD")).average_profit_margin
    40.0
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from sales_core.analytics.ranking import top_and_worst
from sales_core.config import MONTH_NAMES, SALE_STATUSES, UNKNOWN_SERVICE, UNKNOWN_STATUS
from sales_core.exceptions import ConfigError
from sales_core.records import SaleRecord, SalesInput, normalize_sales

logger = logging.getLogger(__name__)


def profit_margin(profit: float, revenue: float) -> float:
    """Profit as a percentage of revenue, 0 when revenue is not positive.

    Examples:
        >>> profit_margin(400, 1000)
        40.0
        >>> profit_margin(-50, 0)
        0.0
    """
    if revenue > 0:
        return float(profit / revenue * 100)
    return 0.0


@dataclass(frozen=True)
class SummaryStats:
    """Headline figures for a filtered set of sales.

    Attributes:
        total_sales: Number of sales.
        total_revenue: Sum of sale prices.
        total_cost: Sum of provider costs.
        total_profit: Sum of stored profits.
        average_profit_margin: total_profit / total_revenue * 100 (0 without revenue).
        top_performing_sale: Highest-profit sale, or None when empty.
        worst_performing_sale: Lowest-profit sale, or None when empty.
        average_sale_value: total_revenue / total_sales (0 when empty).
        average_profit: total_profit / total_sales (0 when empty).
        gross_profit_margin: (total_revenue - total_cost) / total_revenue * 100.
    """

    total_sales: int = 0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0
    average_profit_margin: float = 0.0
    top_performing_sale: SaleRecord | None = None
    worst_performing_sale: SaleRecord | None = None
    average_sale_value: float = 0.0
    average_profit: float = 0.0
    gross_profit_margin: float = 0.0


@dataclass(frozen=True)
class MonthBucket:
    """Totals for one calendar month."""

    year: int
    month: int
    total_sales: int = 0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0
    profit_margin: float = 0.0

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]


@dataclass(frozen=True)
class YearSummary:
    """Totals of the twelve month buckets of one year."""

    year: int
    total_sales: int
    total_revenue: float
    total_cost: float
    total_profit: float
    average_profit_margin: float


@dataclass(frozen=True)
class ServiceBucket:
    """Totals for all service lines sharing a service name."""

    name: str
    count: int = 0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0

    @property
    def profit_margin(self) -> float:
        return profit_margin(self.total_profit, self.total_revenue)


@dataclass(frozen=True)
class ProfitDistribution:
    """Number of sales by profit sign."""

    profitable: int = 0
    breakeven: int = 0
    loss: int = 0


def compute_summary(records: SalesInput) -> SummaryStats:
    """Compute the summary figures of a set of sales.

    Amounts are summed after normalization, so a sale with a missing amount
    contributes 0. An empty input yields all-zero figures and no extremal
    sales; this function never raises for data-quality reasons.

    Args:
        records: Raw sale records or a (filtered) sales frame.

    Returns:
        SummaryStats for the sales.
    """
    df = normalize_sales(records)
    if df.empty:
        return SummaryStats()

    total_sales = len(df)
    total_revenue = float(df["total_sale_price"].sum())
    total_cost = float(df["total_cost"].sum())
    total_profit = float(df["profit"].sum())
    ranking = top_and_worst(df)

    return SummaryStats(
        total_sales=total_sales,
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_profit=total_profit,
        average_profit_margin=profit_margin(total_profit, total_revenue),
        top_performing_sale=ranking.top,
        worst_performing_sale=ranking.worst,
        average_sale_value=total_revenue / total_sales,
        average_profit=total_profit / total_sales,
        gross_profit_margin=profit_margin(total_revenue - total_cost, total_revenue),
    )


def _validate_year(year: int) -> int:
    if isinstance(year, bool) or not isinstance(year, numbers.Integral) or year <= 0:
        raise ConfigError(f"Invalid year {year!r}. Must be a positive integer.")
    return int(year)


def _local_times(df: pd.DataFrame, tz: str | None) -> pd.Series:
    created = df["created_at"]
    if tz is None:
        return created
    return created.dt.tz_convert(tz)


def _monthly_frame(df: pd.DataFrame, tz: str | None) -> pd.DataFrame:
    """One row per dated sale with its calendar year/month and amounts."""
    local = _local_times(df, tz)
    dated = local.notna().to_numpy()
    return pd.DataFrame(
        {
            "year": local[dated].dt.year.astype(int).to_numpy(),
            "month": local[dated].dt.month.astype(int).to_numpy(),
            "total_revenue": df["total_sale_price"].to_numpy()[dated],
            "total_cost": df["total_cost"].to_numpy()[dated],
            "total_profit": df["profit"].to_numpy()[dated],
        }
    )


def _sum_by(frame: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    return frame.groupby(keys).agg(
        total_sales=("total_revenue", "size"),
        total_revenue=("total_revenue", "sum"),
        total_cost=("total_cost", "sum"),
        total_profit=("total_profit", "sum"),
    )


def compute_monthly_breakdown(
    records: SalesInput,
    year: int,
    tz: str | None = None,
) -> list[MonthBucket]:
    """Compute twelve month buckets (January to December) for one year.

    Months without sales are zero-filled. Sales outside ``year`` or with an
    unparsable ``createdAt`` are ignored.

    Args:
        records: Raw sale records or a (currency-filtered) sales frame.
        year: Calendar year to bucket.
        tz: Timezone used to decide a sale's calendar month (default UTC).

    Returns:
        List of exactly 12 MonthBucket objects ordered by month.

    Raises:
        ConfigError: If ``year`` is not a positive integer.
    """
    year = _validate_year(year)
    df = normalize_sales(records)
    monthly = _monthly_frame(df, tz)
    monthly = monthly[monthly["year"] == year]

    totals = _sum_by(monthly, ["month"]).reindex(range(1, 13), fill_value=0)

    buckets = []
    for month, row in totals.iterrows():
        revenue = float(row["total_revenue"])
        profit = float(row["total_profit"])
        buckets.append(
            MonthBucket(
                year=year,
                month=int(month),
                total_sales=int(row["total_sales"]),
                total_revenue=revenue,
                total_cost=float(row["total_cost"]),
                total_profit=profit,
                profit_margin=profit_margin(profit, revenue),
            )
        )

    logger.debug("Monthly breakdown for %d covers %d sale(s)", year, len(monthly))
    return buckets


def compute_year_summary(buckets: list[MonthBucket]) -> YearSummary:
    """Total a year's month buckets.

    Raises:
        ConfigError: If the buckets are empty or span more than one year.
    """
    years = {b.year for b in buckets}
    if len(years) != 1:
        raise ConfigError(f"Expected month buckets of exactly one year, got years {sorted(years)}")

    total_revenue = sum(b.total_revenue for b in buckets)
    total_profit = sum(b.total_profit for b in buckets)
    return YearSummary(
        year=years.pop(),
        total_sales=sum(b.total_sales for b in buckets),
        total_revenue=total_revenue,
        total_cost=sum(b.total_cost for b in buckets),
        total_profit=total_profit,
        average_profit_margin=profit_margin(total_profit, total_revenue),
    )


@dataclass(frozen=True)
class MonthlyHighlights:
    """Standout months of a monthly breakdown.

    Attributes:
        best_months: Months with sales, highest total profit first.
        highest_revenue: Month with the largest revenue.
        highest_margin: Month with the largest profit margin.
        most_active: Month with the most sales.
    """

    best_months: list[MonthBucket] = field(default_factory=list)
    highest_revenue: MonthBucket | None = None
    highest_margin: MonthBucket | None = None
    most_active: MonthBucket | None = None


def _first_max(buckets: list[MonthBucket], attr: str) -> MonthBucket:
    best = buckets[0]
    for bucket in buckets[1:]:
        if getattr(bucket, attr) > getattr(best, attr):
            best = bucket
    return best


def compute_monthly_highlights(buckets: list[MonthBucket], top_n: int = 3) -> MonthlyHighlights:
    """Pick the best and busiest months from a monthly breakdown.

    Best months only consider months that have sales. The single-month
    highlights scan every bucket in order and keep the earlier month on a
    tie, so a year without sales highlights its first month.

    Args:
        buckets: Month buckets, usually from compute_monthly_breakdown.
        top_n: Number of best months to keep.

    Returns:
        MonthlyHighlights; all fields empty when ``buckets`` is empty.

    Raises:
        ConfigError: If ``top_n`` is negative.
    """
    if top_n < 0:
        raise ConfigError(f"top_n must be non-negative, got {top_n}")
    buckets = list(buckets)
    if not buckets:
        return MonthlyHighlights()

    with_sales = [b for b in buckets if b.total_sales > 0]
    best = sorted(with_sales, key=lambda b: b.total_profit, reverse=True)[:top_n]
    return MonthlyHighlights(
        best_months=best,
        highest_revenue=_first_max(buckets, "total_revenue"),
        highest_margin=_first_max(buckets, "profit_margin"),
        most_active=_first_max(buckets, "total_sales"),
    )


def compute_monthly_series(records: SalesInput, tz: str | None = None) -> list[MonthBucket]:
    """Compute one bucket per (year, month) that has sales, oldest first.

    Unlike compute_monthly_breakdown, months without sales are omitted.
    """
    df = normalize_sales(records)
    monthly = _monthly_frame(df, tz)
    if monthly.empty:
        return []

    totals = _sum_by(monthly, ["year", "month"]).sort_index()
    return [
        MonthBucket(
            year=int(year),
            month=int(month),
            total_sales=int(row["total_sales"]),
            total_revenue=float(row["total_revenue"]),
            total_cost=float(row["total_cost"]),
            total_profit=float(row["total_profit"]),
            profit_margin=profit_margin(row["total_profit"], row["total_revenue"]),
        )
        for (year, month), row in totals.iterrows()
    ]


def available_years(records: SalesInput, tz: str | None = None) -> list[int]:
    """Distinct calendar years with at least one dated sale, newest first."""
    df = normalize_sales(records)
    local = _local_times(df, tz).dropna()
    return sorted({int(y) for y in local.dt.year}, reverse=True)


def compute_service_breakdown(records: SalesInput) -> list[ServiceBucket]:
    """Aggregate service lines by service name.

    Each service line adds 1 to its bucket's count, ``price * quantity`` to
    revenue, ``cost * quantity`` to cost and ``(price - cost) * quantity`` to
    profit. Missing prices count as 0 and missing quantities as 1. Lines
    without a name go to the "Unknown Service" bucket; a sale with no service
    lines contributes nothing.

    Args:
        records: Raw sale records or a (filtered) sales frame.

    Returns:
        ServiceBucket list ordered by total profit, highest first.
    """
    df = normalize_sales(records)
    lines = [line for services in df["services"] for line in (services or ())]
    if not lines:
        return []

    units = np.array([line.units for line in lines], dtype=float)
    price = np.array([line.unit_price for line in lines], dtype=float)
    cost = np.array([line.unit_cost for line in lines], dtype=float)
    frame = pd.DataFrame(
        {
            "name": [line.service_name or UNKNOWN_SERVICE for line in lines],
            "total_revenue": price * units,
            "total_cost": cost * units,
            "total_profit": (price - cost) * units,
        }
    )

    totals = frame.groupby("name", sort=False).agg(
        count=("name", "size"),
        total_revenue=("total_revenue", "sum"),
        total_cost=("total_cost", "sum"),
        total_profit=("total_profit", "sum"),
    )
    buckets = [
        ServiceBucket(
            name=str(name),
            count=int(row["count"]),
            total_revenue=float(row["total_revenue"]),
            total_cost=float(row["total_cost"]),
            total_profit=float(row["total_profit"]),
        )
        for name, row in totals.iterrows()
    ]
    buckets.sort(key=lambda b: b.total_profit, reverse=True)

    logger.debug("Service breakdown: %d line(s) in %d bucket(s)", len(lines), len(buckets))
    return buckets


def compute_profit_distribution(records: SalesInput) -> ProfitDistribution:
    """Count sales with positive, zero and negative (normalized) profit."""
    profit = normalize_sales(records)["profit"]
    return ProfitDistribution(
        profitable=int((profit > 0).sum()),
        breakeven=int((profit == 0).sum()),
        loss=int((profit < 0).sum()),
    )


def compute_status_breakdown(records: SalesInput) -> dict[str, int]:
    """Tally sales by lifecycle status.

    open, closed and cancelled are always present. Other statuses are added
    in order of first appearance; sales with no status count as "unknown".
    """
    counts = {status: 0 for status in SALE_STATUSES}
    for status in normalize_sales(records)["status"]:
        key = status if isinstance(status, str) and status else UNKNOWN_STATUS
        counts[key] = counts.get(key, 0) + 1
    return counts
