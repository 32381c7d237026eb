"""Per-currency breakdown and the mixed-currency guard.

Amounts in different currencies are never added together. A combined view
across currencies carries a summed sale count, but its monetary totals are
only filled in when a single currency is present; otherwise they are None
and the combined currency is the "mixed" sentinel.

Example:
    >>> from sales_core.analytics.currency import CurrencyBucket, combine_currency_buckets
    >>> combined = combine_currency_buckets([
    ...     CurrencyBucket("USD", count=2, total_revenue=100.0),
    ...     CurrencyBucket("ARS", count=1, total_revenue=9000.0),
    ... ])
    >>> combined.currency, combined.count, combined.total_revenue
    ('mixed', 3, None)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sales_core.analytics.aggregate import profit_margin
from sales_core.records import SalesInput, normalize_amount, normalize_sales

logger = logging.getLogger(__name__)

MIXED_CURRENCY = "mixed"


@dataclass(frozen=True)
class CurrencyBucket:
    """Totals of the sales denominated in one currency."""

    currency: str
    count: int = 0
    total_revenue: float = 0.0
    total_cost: float = 0.0
    total_profit: float = 0.0

    @property
    def profit_margin(self) -> float:
        return profit_margin(self.total_profit, self.total_revenue)

    @classmethod
    def from_summary(cls, data: Mapping[str, Any]) -> CurrencyBucket:
        """Build a bucket from one entry of the API's pre-aggregated summary.

        The API names revenue ``totalSales`` (or ``totalSalesInCurrency``)
        and the sale count ``count`` (or ``saleCount``).
        """
        return cls(
            currency=str(data.get("_id", data.get("currency"))),
            count=int(normalize_amount(data.get("count") or data.get("saleCount"))),
            total_revenue=normalize_amount(
                data.get("totalSales") or data.get("totalSalesInCurrency")
            ),
            total_cost=normalize_amount(data.get("totalCost") or data.get("totalCostInCurrency")),
            total_profit=normalize_amount(
                data.get("totalProfit") or data.get("totalProfitInCurrency")
            ),
        )


@dataclass(frozen=True)
class CombinedTotals:
    """Totals across currency buckets.

    Attributes:
        currency: The single currency code, or "mixed" when several are present.
        currencies: Currency codes that were combined.
        count: Total number of sales (always summed).
        comparable: True when monetary totals are meaningful (one currency).
        total_revenue: Revenue, or None when not comparable.
        total_cost: Cost, or None when not comparable.
        total_profit: Profit, or None when not comparable.
    """

    currency: str | None
    currencies: tuple[str, ...]
    count: int
    comparable: bool
    total_revenue: float | None
    total_cost: float | None
    total_profit: float | None

    @property
    def profit_margin(self) -> float | None:
        if not self.comparable:
            return None
        return profit_margin(self.total_profit, self.total_revenue)


def compute_currency_breakdown(records: SalesInput) -> list[CurrencyBucket]:
    """Compute one bucket per currency present, ordered by currency code.

    Sales without a currency are skipped.
    """
    df = normalize_sales(records)
    df = df[df["sale_currency"].notna()]
    if df.empty:
        return []

    totals = df.groupby("sale_currency").agg(
        count=("sale_currency", "size"),
        total_revenue=("total_sale_price", "sum"),
        total_cost=("total_cost", "sum"),
        total_profit=("profit", "sum"),
    )
    return [
        CurrencyBucket(
            currency=str(currency),
            count=int(row["count"]),
            total_revenue=float(row["total_revenue"]),
            total_cost=float(row["total_cost"]),
            total_profit=float(row["total_profit"]),
        )
        for currency, row in totals.sort_index().iterrows()
    ]


def combine_currency_buckets(buckets: Iterable[CurrencyBucket]) -> CombinedTotals:
    """Combine currency buckets without mixing currencies.

    Counts are always summed. Monetary totals are summed only when every
    bucket has the same currency; with more than one currency they are None
    and ``currency`` is "mixed".

    Args:
        buckets: Currency buckets, e.g. from compute_currency_breakdown or
            CurrencyBucket.from_summary.

    Returns:
        CombinedTotals.
    """
    buckets = list(buckets)
    currencies = tuple(sorted({b.currency for b in buckets}))
    count = sum(b.count for b in buckets)

    if len(currencies) > 1:
        logger.info("Not combining monetary totals across currencies %s", list(currencies))
        return CombinedTotals(
            currency=MIXED_CURRENCY,
            currencies=currencies,
            count=count,
            comparable=False,
            total_revenue=None,
            total_cost=None,
            total_profit=None,
        )

    return CombinedTotals(
        currency=currencies[0] if currencies else None,
        currencies=currencies,
        count=count,
        comparable=True,
        total_revenue=float(sum(b.total_revenue for b in buckets)),
        total_cost=float(sum(b.total_cost for b in buckets)),
        total_profit=float(sum(b.total_profit for b in buckets)),
    )
