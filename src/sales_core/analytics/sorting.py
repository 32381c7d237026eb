"""Sort stage: order sales by a stored or derived key.

Two tie-break policies are available (see sales_core.config.TieBreak):

- LEGACY mirrors the dashboard comparator, which has no equality branch:
  equal keys always compare as "less", so their final order depends on the
  sort algorithm. It is deterministic for a given input but not stable.
- STABLE keeps equal keys in their original relative order.
"""

from __future__ import annotations

import functools
import logging
import math
from typing import Any

import numpy as np
import pandas as pd

from sales_core.config import TieBreak
from sales_core.exceptions import ConfigError
from sales_core.records import SaleRecord, SalesInput, normalize_sales

logger = logging.getLogger(__name__)

SORT_ORDERS = ("asc", "desc")

# API field names accepted as sort keys, mapped to sales-frame columns
SORT_KEY_ALIASES = {
    "totalSalePrice": "total_sale_price",
    "totalCost": "total_cost",
    "profit": "profit",
    "profitMargin": "profit_margin",
    "createdAt": "created_at",
    "saleCurrency": "sale_currency",
}

# Unparsable dates sort as the oldest instant in STABLE mode
_OLDEST = pd.Timestamp.min.tz_localize("UTC")


def sale_profit_margin(df: pd.DataFrame) -> pd.Series:
    """Per-sale profit margin in percent; 0 where the sale price is not positive."""
    price = df["total_sale_price"].to_numpy(dtype=float)
    profit = df["profit"].to_numpy(dtype=float)
    margin = np.zeros(len(df), dtype=float)
    np.divide(profit, price, out=margin, where=price > 0)
    return pd.Series(margin * 100, index=df.index, name="profit_margin")


def sort_keys(df: pd.DataFrame, key: str) -> pd.Series:
    """Return the values ``key`` sorts on, one per row of ``df``.

    Derived keys (profit margin) are computed on the fly. Other keys are
    read from the frame column of that name; a key that is not a column is
    looked up on each sale record and defaults to 0 when absent or empty.
    Missing values of a text column sort as ``""``.
    """
    column = SORT_KEY_ALIASES.get(key, key)
    if column == "profit_margin":
        return sale_profit_margin(df)
    if column not in df.columns or column in ("services", "record"):
        return df["record"].map(lambda record: _record_value(record, key))

    values = df[column]
    if column == "created_at":
        return values
    if pd.api.types.is_numeric_dtype(values):
        return values.fillna(0)
    return values.where(values.notna(), "")


def _record_value(record: SaleRecord, key: str) -> Any:
    value = record.get(key)
    if value is None or value == "" or (isinstance(value, float) and math.isnan(value)):
        return 0
    return value


def _legacy_compare(order: str):
    def compare(a: Any, b: Any) -> int:
        if order == "asc":
            return 1 if a > b else -1
        return 1 if a < b else -1

    return compare


def _ordered_positions(values: list[Any], order: str, tie_break: TieBreak) -> list[int]:
    positions = list(range(len(values)))
    if tie_break is TieBreak.LEGACY:
        compare = _legacy_compare(order)
        positions.sort(key=functools.cmp_to_key(lambda i, j: compare(values[i], values[j])))
    else:
        # list.sort keeps equal elements in input order, reverse=True included
        positions.sort(key=lambda i: values[i], reverse=(order == "desc"))
    return positions


def sort_sales(
    records: SalesInput,
    key: str = "createdAt",
    order: str = "desc",
    tie_break: TieBreak | str = TieBreak.STABLE,
) -> pd.DataFrame:
    """Return a sorted copy of the sales.

    Keys whose values cannot be ordered against each other (int and str
    ids, embedded client documents) are compared by their text form.

    Args:
        records: Raw sale records or a sales frame.
        key: Sort key. One of totalSalePrice, totalCost, profit, profitMargin,
            createdAt (or their snake_case column names); any other name is
            looked up on the sale record and sorts as 0 when absent.
        order: "desc" (default) or "asc".
        tie_break: TieBreak policy for equal keys.

    Returns:
        New sales frame in sorted order.

    Raises:
        ConfigError: If ``order`` or ``tie_break`` is invalid.
    """
    if order not in SORT_ORDERS:
        raise ConfigError(f"Invalid sort order '{order}'. Must be 'asc' or 'desc'.")
    tie_break = TieBreak.parse(tie_break)

    df = normalize_sales(records)
    values = sort_keys(df, key).tolist()
    if SORT_KEY_ALIASES.get(key, key) == "created_at" and tie_break is TieBreak.STABLE:
        values = [_OLDEST if pd.isna(v) else v for v in values]

    try:
        positions = _ordered_positions(values, order, tie_break)
    except TypeError:
        logger.debug("Sort key %s has values of mixed types; comparing as text", key)
        positions = _ordered_positions([str(v) for v in values], order, tie_break)

    logger.debug("Sorted %d sale(s) by %s %s (%s)", len(df), key, order, tie_break.value)
    return df.iloc[positions]
