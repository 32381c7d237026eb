"""Tests for the public report builders."""

from datetime import datetime, timezone

import pytest

from sales_core import (
    AnalyticsConfig,
    ConfigError,
    build_currency_overview,
    build_financial_report,
    parse_sales_response,
    summarize_upstream,
)
from sales_core.analytics.filters import Period

NOW = datetime(2024, 6, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def agency_sales() -> list[dict]:
    """A small sales history in two currencies."""
    return [
        {
            "_id": "u-jun",
            "saleCurrency": "USD",
            "createdAt": "2024-06-18T09:00:00Z",
            "totalSalePrice": 1000,
            "totalCost": 600,
            "profit": 400,
            "status": "open",
            "services": [
                {"serviceName": "Hotel", "priceClient": 700, "costProvider": 400},
                {"serviceName": "Flight", "priceClient": 300, "costProvider": 200},
            ],
        },
        {
            "_id": "u-jan",
            "saleCurrency": "USD",
            "createdAt": "2024-01-10T09:00:00Z",
            "totalSalePrice": 200,
            "totalCost": 250,
            "profit": -50,
            "status": "cancelled",
            "services": [{"serviceName": "Hotel", "priceClient": 200, "costProvider": 250}],
        },
        {
            "_id": "a-jun",
            "saleCurrency": "ARS",
            "createdAt": "2024-06-19T09:00:00Z",
            "totalSalePrice": 80000,
            "totalCost": 50000,
            "profit": 30000,
            "status": "closed",
        },
    ]


class TestBuildFinancialReport:
    """Tests for build_financial_report."""

    def test_all_time_report(self, agency_sales: list[dict]) -> None:
        """All-time USD report aggregates only USD sales."""
        report = build_financial_report(agency_sales, "USD")

        assert report.currency == "USD"
        assert report.period is Period.ALL
        assert report.summary.total_sales == 2
        assert report.summary.total_revenue == 1200
        assert report.summary.total_profit == 350
        assert report.summary.top_performing_sale.id == "u-jun"
        assert report.summary.worst_performing_sale.id == "u-jan"
        assert report.sales["id"].tolist() == ["u-jun", "u-jan"]
        assert report.status_breakdown == {"open": 1, "closed": 0, "cancelled": 1}
        assert report.profit_distribution.loss == 1
        assert [(b.year, b.month) for b in report.monthly_series] == [(2024, 1), (2024, 6)]
        assert [s.name for s in report.service_breakdown] == ["Hotel", "Flight"]
        assert report.monthly_breakdown == []
        assert report.year_summary is None
        assert report.monthly_highlights is None

    def test_period_window(self, agency_sales: list[dict]) -> None:
        """A monthly window drops the January sale."""
        report = build_financial_report(agency_sales, "USD", period="month", now=NOW)

        assert report.summary.total_sales == 1
        assert report.summary.average_profit_margin == pytest.approx(40.0)

    def test_year_breakdown_ignores_period(self, agency_sales: list[dict]) -> None:
        """The twelve-month view covers the whole year in the report currency."""
        report = build_financial_report(
            agency_sales, "USD", period="week", now=NOW, year=2024
        )

        assert report.summary.total_sales == 1
        assert len(report.monthly_breakdown) == 12
        assert report.monthly_breakdown[0].total_profit == -50
        assert report.monthly_breakdown[5].total_profit == 400
        assert report.year_summary.total_sales == 2
        assert report.year_summary.total_profit == 350
        assert [b.month for b in report.monthly_highlights.best_months] == [6, 1]
        assert report.monthly_highlights.most_active.month_name == "January"

    def test_sort_options(self, agency_sales: list[dict]) -> None:
        report = build_financial_report(
            agency_sales, "USD", sort_key="profit", sort_order="asc"
        )

        assert report.sales["id"].tolist() == ["u-jan", "u-jun"]

    def test_predicates(self, agency_sales: list[dict]) -> None:
        report = build_financial_report(
            agency_sales, "USD", predicates=[lambda row: row["status"] != "cancelled"]
        )

        assert report.sales["id"].tolist() == ["u-jun"]

    def test_does_not_mutate_records(self, agency_sales: list[dict]) -> None:
        before = [dict(s) for s in agency_sales]
        build_financial_report(agency_sales, "USD", year=2024)

        assert agency_sales == before

    def test_windowed_period_requires_now(self, agency_sales: list[dict]) -> None:
        with pytest.raises(ConfigError):
            build_financial_report(agency_sales, "USD", period="quarter")

    def test_invalid_period(self, agency_sales: list[dict]) -> None:
        with pytest.raises(ConfigError):
            build_financial_report(agency_sales, "USD", period="decade", now=NOW)

    def test_config_timezone_is_used_for_months(self) -> None:
        """Month bucketing follows the configured timezone."""
        sales = [{"saleCurrency": "USD", "createdAt": "2024-07-01T02:00:00Z", "profit": 5}]
        config = AnalyticsConfig(timezone="America/Argentina/Buenos_Aires")

        report = build_financial_report(sales, "USD", year=2024, config=config)

        assert report.monthly_breakdown[5].total_sales == 1
        assert report.monthly_breakdown[6].total_sales == 0


class TestCurrencyOverview:
    """Tests for build_currency_overview and summarize_upstream."""

    def test_overview_from_records(self, agency_sales: list[dict]) -> None:
        overview = build_currency_overview(agency_sales)

        assert [b.currency for b in overview.buckets] == ["ARS", "USD"]
        assert overview.combined.count == 3
        assert overview.combined.comparable is False

    def test_upstream_summary(self) -> None:
        """An API summary is used as-is, not recomputed."""
        page = parse_sales_response(
            {
                "success": True,
                "data": {
                    "sales": [],
                    "summary": [
                        {"_id": "USD", "count": 7, "totalSales": 7000, "totalCost": 5000, "totalProfit": 2000}
                    ],
                },
            }
        )

        overview = summarize_upstream(page.summary)

        assert overview.combined.comparable is True
        assert overview.combined.count == 7
        assert overview.combined.total_profit == 2000
