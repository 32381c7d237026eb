"""Tests for the filter stage (currency, period, predicates)."""

from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

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
from sales_core.exceptions import ConfigError

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def dated_sales() -> list[dict]:
    """USD/ARS sales spread around NOW, plus one with a broken date."""
    return [
        {"_id": "today", "saleCurrency": "USD", "createdAt": "2024-03-15T00:00:00Z", "profit": 10},
        {"_id": "yesterday", "saleCurrency": "USD", "createdAt": "2024-03-14T23:59:00Z", "profit": 20},
        {"_id": "six-days", "saleCurrency": "ARS", "createdAt": "2024-03-09T12:00:00Z", "profit": 30},
        {"_id": "three-weeks", "saleCurrency": "USD", "createdAt": "2024-02-23T12:00:00Z", "profit": 40},
        {"_id": "two-months", "saleCurrency": "USD", "createdAt": "2024-01-15T12:00:00Z", "profit": 50},
        {"_id": "ten-months", "saleCurrency": "USD", "createdAt": "2023-05-15T12:00:00Z", "profit": 60},
        {"_id": "two-years", "saleCurrency": "USD", "createdAt": "2022-03-15T12:00:00Z", "profit": 70},
        {"_id": "broken", "saleCurrency": "USD", "createdAt": "31/31/2024", "profit": 80},
    ]


class TestFilterByCurrency:
    """Tests for filter_by_currency."""

    def test_keeps_only_matching_currency(self, dated_sales: list[dict]) -> None:
        """Only USD sales remain, including the one with a broken date."""
        df = filter_by_currency(dated_sales, "USD")

        assert set(df["sale_currency"]) == {"USD"}
        assert len(df) == 7
        assert "broken" in df["id"].tolist()

    def test_is_idempotent(self, dated_sales: list[dict]) -> None:
        """Applying the same currency filter twice changes nothing."""
        once = filter_by_currency(dated_sales, "USD")
        twice = filter_by_currency(once, "USD")

        assert twice["id"].tolist() == once["id"].tolist()

    def test_is_case_sensitive(self, dated_sales: list[dict]) -> None:
        """'usd' does not match 'USD'."""
        assert filter_by_currency(dated_sales, "usd").empty

    def test_drops_sales_without_currency(self) -> None:
        """No default currency is substituted for a sale that lacks one."""
        df = filter_by_currency([{"_id": "a"}, {"_id": "b", "saleCurrency": "USD"}], "USD")

        assert df["id"].tolist() == ["b"]

    def test_does_not_mutate_source(self, dated_sales: list[dict]) -> None:
        """Filtering leaves the source list untouched."""
        before = [dict(s) for s in dated_sales]
        filter_by_currency(dated_sales, "ARS")

        assert dated_sales == before


class TestPeriodWindow:
    """Tests for period_window_start."""

    def test_all_has_no_window(self) -> None:
        """Period.ALL has no start."""
        assert period_window_start(Period.ALL, NOW) is None

    @pytest.mark.parametrize(
        ("period", "expected"),
        [
            ("today", "2024-03-15 00:00"),
            ("week", "2024-03-08 12:00"),
            ("month", "2024-02-15 12:00"),
            ("quarter", "2023-12-15 12:00"),
            ("year", "2023-03-15 12:00"),
        ],
    )
    def test_window_starts(self, period: str, expected: str) -> None:
        """Each period maps to its fixed offset from now."""
        assert period_window_start(period, NOW) == pd.Timestamp(expected, tz="UTC")

    def test_month_offset_clamps_to_month_end(self) -> None:
        """March 31st minus one month is the last day of February."""
        now = datetime(2023, 3, 31, 9, 0, tzinfo=timezone.utc)

        assert period_window_start(Period.MONTH, now) == pd.Timestamp("2023-02-28 09:00", tz="UTC")

    def test_today_uses_now_timezone(self) -> None:
        """The start of 'today' is local midnight in now's timezone."""
        now = datetime(2024, 3, 15, 1, 0, tzinfo=timezone(timedelta(hours=-3)))

        start = period_window_start(Period.TODAY, now)

        assert start == pd.Timestamp("2024-03-15 03:00", tz="UTC")

    def test_naive_now_is_utc(self) -> None:
        """A naive now is interpreted as UTC."""
        start = period_window_start("week", datetime(2024, 3, 15, 12, 0))

        assert start == pd.Timestamp("2024-03-08 12:00", tz="UTC")

    def test_invalid_period_raises(self) -> None:
        """An unknown period value is a programmer error."""
        with pytest.raises(ConfigError):
            period_window_start("fortnight", NOW)


class TestFilterByPeriod:
    """Tests for filter_by_period."""

    def test_all_is_identity(self, dated_sales: list[dict]) -> None:
        """Period.ALL keeps every sale, even without now."""
        assert len(filter_by_period(dated_sales, Period.ALL)) == len(dated_sales)

    @pytest.mark.parametrize(
        ("period", "expected_ids"),
        [
            ("today", ["today"]),
            ("week", ["today", "yesterday", "six-days"]),
            ("month", ["today", "yesterday", "six-days", "three-weeks"]),
            ("quarter", ["today", "yesterday", "six-days", "three-weeks", "two-months"]),
            (
                "year",
                ["today", "yesterday", "six-days", "three-weeks", "two-months", "ten-months"],
            ),
        ],
    )
    def test_period_windows(self, dated_sales: list[dict], period: str, expected_ids: list[str]) -> None:
        """Each window keeps sales created at or after its start."""
        df = filter_by_period(dated_sales, period, NOW)

        assert df["id"].tolist() == expected_ids

    def test_unparsable_date_never_matches(self, dated_sales: list[dict]) -> None:
        """A sale with a broken createdAt is excluded from every window."""
        for period in ("today", "week", "month", "quarter", "year"):
            assert "broken" not in filter_by_period(dated_sales, period, NOW)["id"].tolist()

    def test_requires_now_for_windowed_period(self, dated_sales: list[dict]) -> None:
        """now is never read from the clock."""
        with pytest.raises(ConfigError):
            filter_by_period(dated_sales, Period.WEEK)

    def test_is_deterministic(self, dated_sales: list[dict]) -> None:
        """The same inputs give the same output."""
        first = filter_by_period(dated_sales, "month", NOW)
        second = filter_by_period(dated_sales, "month", NOW)

        pd.testing.assert_frame_equal(first, second)


class TestOtherFilters:
    """Tests for status, date-range and predicate filters."""

    def test_filter_by_status(self) -> None:
        """Status filter accepts a single status or several."""
        sales = [{"_id": "a", "status": "open"}, {"_id": "b", "status": "closed"}, {"_id": "c"}]

        assert filter_by_status(sales, "open")["id"].tolist() == ["a"]
        assert filter_by_status(sales, ["open", "closed"])["id"].tolist() == ["a", "b"]

    def test_filter_by_date_range_is_inclusive(self, dated_sales: list[dict]) -> None:
        """Both start and end days are included."""
        df = filter_by_date_range(dated_sales, start="2024-03-09", end="2024-03-14")

        assert df["id"].tolist() == ["yesterday", "six-days"]

    def test_filter_by_date_range_without_bounds(self, dated_sales: list[dict]) -> None:
        """No bounds keeps everything, including undated sales."""
        assert len(filter_by_date_range(dated_sales)) == len(dated_sales)

    def test_filter_by_predicate(self, dated_sales: list[dict]) -> None:
        """Custom predicates receive frame rows."""
        df = filter_by_predicate(dated_sales, lambda row: row["profit"] >= 60)

        assert df["id"].tolist() == ["ten-months", "two-years", "broken"]

    def test_filter_by_predicate_sees_other_fields(self) -> None:
        """Rows carry API fields that have no frame column."""
        sales = [
            {"_id": "a", "destination": "Rome"},
            {"_id": "b", "destination": "Lima"},
            {"_id": "c"},
        ]

        df = filter_by_predicate(sales, lambda row: row.get("destination") == "Rome")

        assert df["id"].tolist() == ["a"]
        assert "destination" not in df.columns

    def test_filter_by_predicate_on_empty_input(self) -> None:
        """An empty input stays empty without calling the predicate."""
        assert filter_by_predicate([], lambda row: True).empty


class TestApplyFilters:
    """Tests for the composed filter pipeline."""

    def test_currency_then_period_then_predicates(self, dated_sales: list[dict]) -> None:
        """ARS sales never come back whatever the period or predicate."""
        df = apply_filters(
            dated_sales,
            "USD",
            Period.WEEK,
            NOW,
            predicates=[lambda row: row["profit"] > 10],
        )

        assert df["id"].tolist() == ["yesterday"]

    def test_clearing_period_keeps_currency(self, dated_sales: list[dict]) -> None:
        """Resetting the period to ALL only widens the time dimension."""
        df = apply_filters(dated_sales, "USD", Period.ALL)

        assert len(df) == 7
        assert set(df["sale_currency"]) == {"USD"}
