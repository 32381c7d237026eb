"""Ranking stage: best and worst performing sale by profit."""

from __future__ import annotations

from dataclasses import dataclass

from sales_core.records import SaleRecord, SalesInput, normalize_sales


@dataclass(frozen=True)
class Ranking:
    """Extremal sales of a filtered set.

    Attributes:
        top: Sale with the highest profit, or None for an empty set.
        worst: Sale with the lowest profit, or None for an empty set.
    """

    top: SaleRecord | None
    worst: SaleRecord | None


def top_and_worst(records: SalesInput) -> Ranking:
    """Find the highest and lowest profit sales.

    A copy of the sales is sorted descending by normalized profit (ties keep
    their input order); ``top`` is the first sale and ``worst`` the last.
    With a single sale both fields hold that same record object.

    Args:
        records: Raw sale records or a sales frame.

    Returns:
        Ranking with the source SaleRecord objects.
    """
    df = normalize_sales(records)
    if df.empty:
        return Ranking(top=None, worst=None)

    profits = df["profit"].tolist()
    order = sorted(range(len(profits)), key=lambda i: profits[i], reverse=True)
    records_col = df["record"]
    return Ranking(top=records_col.iloc[order[0]], worst=records_col.iloc[order[-1]])
