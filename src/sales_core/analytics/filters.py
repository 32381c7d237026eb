"""Filter stage: currency, period and custom predicates over a sales frame.

Filters are applied in a fixed order: currency, then period, then any
custom predicates. Resetting the period (the dashboard's "clear filter")
therefore never widens the currency selection.

Every function accepts raw records or a sales frame and returns a new frame;
the input is never modified.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime

import pandas as pd

from sales_core.exceptions import ConfigError
from sales_core.records import SalesInput, normalize_sales

logger = logging.getLogger(__name__)

RowPredicate = Callable[[pd.Series], bool]


class Period(str, enum.Enum):
    """Recency window applied by filter_by_period."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    @classmethod
    def parse(cls, value: Period | str) -> Period:
        """Return the Period for ``value``, raising ConfigError if unknown."""
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ConfigError(f"Invalid period '{value}'. Must be one of: {valid}.") from None


def to_utc_timestamp(moment: datetime | date | str | pd.Timestamp) -> pd.Timestamp:
    """Convert a reference instant to a tz-aware pandas Timestamp.

    Naive values are taken as UTC; aware values keep their timezone so that
    "start of today" is computed in the caller's local day.
    """
    ts = pd.Timestamp(moment)
    if pd.isna(ts):
        raise ConfigError(f"Invalid reference instant: {moment!r}")
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts


def period_window_start(period: Period | str, now: datetime | pd.Timestamp) -> pd.Timestamp | None:
    """Compute the inclusive start of a period window.

    Args:
        period: Period value (enum member or its string value).
        now: Reference instant. The window is ``[start, now)``.

    Returns:
        Window start as a tz-aware Timestamp, or None for Period.ALL.

    Raises:
        ConfigError: If ``period`` is not a valid Period.

    Examples:
        >>> from datetime import datetime, timezone
        >>> now = datetime(2024, 3, 31, 15, 30, tzinfo=timezone.utc)
        >>> period_window_start("month", now)
        Timestamp('2024-02-29 15:30:00+0000', tz='UTC')
    """
    period = Period.parse(period)
    if period is Period.ALL:
        return None

    ts = to_utc_timestamp(now)
    if period is Period.TODAY:
        return ts.normalize()
    if period is Period.WEEK:
        return ts - pd.Timedelta(days=7)
    if period is Period.MONTH:
        return ts - pd.DateOffset(months=1)
    if period is Period.QUARTER:
        return ts - pd.DateOffset(months=3)
    return ts - pd.DateOffset(years=1)


def filter_by_currency(records: SalesInput, currency: str) -> pd.DataFrame:
    """Keep the sales denominated exactly in ``currency``.

    Matching is case-sensitive. Sales without a currency are dropped; no
    default currency is substituted.
    """
    df = normalize_sales(records)
    mask = df["sale_currency"].eq(currency)

    missing = int(df["sale_currency"].isna().sum())
    if missing:
        logger.warning("Dropping %d sale(s) with no saleCurrency", missing)

    result = df[mask]
    logger.debug("Currency filter %s kept %d of %d sale(s)", currency, len(result), len(df))
    return result


def filter_by_period(
    records: SalesInput,
    period: Period | str,
    now: datetime | pd.Timestamp | None = None,
) -> pd.DataFrame:
    """Keep the sales created on or after the start of the period window.

    Sales with an unparsable ``createdAt`` never match a window. Period.ALL
    returns every sale unchanged.

    Args:
        records: Raw sale records or a sales frame.
        period: Period value.
        now: Reference instant. Required unless period is Period.ALL.

    Returns:
        Filtered sales frame.

    Raises:
        ConfigError: If ``period`` is invalid, or ``now`` is missing for a
            windowed period.
    """
    period = Period.parse(period)
    df = normalize_sales(records)
    if period is Period.ALL:
        return df

    if now is None:
        raise ConfigError(f"An explicit 'now' is required to filter by period '{period.value}'.")

    start = period_window_start(period, now)
    mask = df["created_at"] >= start
    result = df[mask]
    logger.debug(
        "Period filter %s (since %s) kept %d of %d sale(s)",
        period.value,
        start.isoformat(),
        len(result),
        len(df),
    )
    return result


def filter_by_status(records: SalesInput, statuses: str | Iterable[str]) -> pd.DataFrame:
    """Keep the sales whose lifecycle status is one of ``statuses``."""
    if isinstance(statuses, str):
        statuses = [statuses]
    df = normalize_sales(records)
    return df[df["status"].isin(list(statuses))]


def filter_by_date_range(
    records: SalesInput,
    start: date | str | None = None,
    end: date | str | None = None,
) -> pd.DataFrame:
    """Keep the sales created between two calendar days (both inclusive, UTC).

    Either bound may be omitted. Sales with an unparsable ``createdAt`` are
    excluded as soon as one bound is given.
    """
    df = normalize_sales(records)
    if start is None and end is None:
        return df

    mask = df["created_at"].notna()
    if start is not None:
        mask &= df["created_at"] >= to_utc_timestamp(start).normalize()
    if end is not None:
        mask &= df["created_at"] < to_utc_timestamp(end).normalize() + pd.Timedelta(days=1)
    return df[mask.astype(bool)]


def _predicate_row(row: pd.Series) -> pd.Series:
    """Frame row plus the sale's other API fields (frame columns win)."""
    extra = {k: v for k, v in row["record"].extra.items() if k not in row.index}
    if not extra:
        return row
    return pd.concat([row, pd.Series(extra, dtype=object)])


def filter_by_predicate(records: SalesInput, predicate: RowPredicate) -> pd.DataFrame:
    """Keep the sales for which ``predicate(row)`` is true.

    The predicate receives one sales-frame row (a Series) at a time. Fields
    of the API document that have no frame column (``destination``,
    ``passengers``...) are included in the row under their API name.

    Examples:
        >>> sales = [{"_id": "a", "destination": "Rome"}, {"_id": "b"}]
        >>> filter_by_predicate(sales, lambda row: row.get("destination") == "Rome")["id"].tolist()
        ['a']
    """
    df = normalize_sales(records)
    if df.empty:
        return df
    mask = df.apply(lambda row: bool(predicate(_predicate_row(row))), axis=1).astype(bool)
    return df[mask]


def apply_filters(
    records: SalesInput,
    currency: str,
    period: Period | str = Period.ALL,
    now: datetime | pd.Timestamp | None = None,
    predicates: Sequence[RowPredicate] = (),
) -> pd.DataFrame:
    """Run the full filter pipeline: currency, then period, then predicates.

    Args:
        records: Raw sale records or a sales frame.
        currency: Currency code to keep.
        period: Recency window (default Period.ALL).
        now: Reference instant, required for windowed periods.
        predicates: Extra row predicates, applied in order.

    Returns:
        Filtered sales frame.
    """
    df = filter_by_currency(records, currency)
    df = filter_by_period(df, period, now)
    for predicate in predicates:
        df = filter_by_predicate(df, predicate)
    return df
