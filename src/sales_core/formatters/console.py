"""Console output formatting for financial reports."""

from __future__ import annotations

from collections.abc import Mapping

from sales_core.api import CurrencyOverview, FinancialReport
from sales_core.formatters.currency import format_currency, format_percentage


def format_report_for_console(
    report: FinancialReport,
    symbols: Mapping[str, str] | None = None,
) -> str:
    """Build a human-readable text version of a financial report.

    Args:
        report: FinancialReport from build_financial_report.
        symbols: Currency symbol mapping (defaults to the built-in symbols).

    Returns:
        Multi-line text for console output.
    """
    summary = report.summary
    if summary.total_sales == 0:
        return f"No {report.currency} sales for period '{report.period.value}'."

    def money(amount: float) -> str:
        return format_currency(amount, report.currency, symbols)

    lines = []
    lines.append(f"Financial Summary - {report.currency} ({report.period.value})")
    lines.append("=" * 60)
    lines.append(f"Sales:         {summary.total_sales}")
    lines.append(f"Revenue:       {money(summary.total_revenue)}")
    lines.append(f"Cost:          {money(summary.total_cost)}")
    lines.append(f"Profit:        {money(summary.total_profit)}")
    lines.append(f"Margin:        {format_percentage(summary.average_profit_margin)}")
    lines.append(f"Avg sale:      {money(summary.average_sale_value)}")
    lines.append("")

    dist = report.profit_distribution
    lines.append(
        f"Profitable: {dist.profitable}  Breakeven: {dist.breakeven}  Loss: {dist.loss}"
    )
    statuses = "  ".join(f"{k}: {v}" for k, v in report.status_breakdown.items())
    lines.append(f"Status: {statuses}")
    lines.append("")

    if report.monthly_series:
        lines.append("Monthly:")
        for bucket in report.monthly_series:
            lines.append(
                f"  {bucket.year}-{bucket.month:02d}: {bucket.total_sales} sale(s), "
                f"profit {money(bucket.total_profit)} ({format_percentage(bucket.profit_margin)})"
            )
        lines.append("")

    highlights = report.monthly_highlights
    if highlights is not None and highlights.best_months:
        lines.append("Best months:")
        for rank, bucket in enumerate(highlights.best_months, start=1):
            lines.append(f"  #{rank} {bucket.month_name}: {money(bucket.total_profit)}")
        lines.append(f"Highest revenue month: {highlights.highest_revenue.month_name}")
        lines.append(f"Highest margin month:  {highlights.highest_margin.month_name}")
        lines.append(f"Most active month:     {highlights.most_active.month_name}")
        lines.append("")

    if report.service_breakdown:
        lines.append("Services:")
        for service in report.service_breakdown:
            lines.append(
                f"  {service.name}: {service.count} x, profit {money(service.total_profit)} "
                f"({format_percentage(service.profit_margin)})"
            )

    return "\n".join(lines).rstrip()


def format_currency_overview(
    overview: CurrencyOverview,
    symbols: Mapping[str, str] | None = None,
) -> str:
    """Build a text table of per-currency totals.

    The combined row shows only the sale count when several currencies are
    present.
    """
    if not overview.buckets:
        return "No currency data available."

    lines = ["Sales by Currency", "-" * 60]
    for bucket in overview.buckets:
        lines.append(
            f"{bucket.currency}: {bucket.count} sale(s), "
            f"revenue {format_currency(bucket.total_revenue, bucket.currency, symbols)}, "
            f"profit {format_currency(bucket.total_profit, bucket.currency, symbols)} "
            f"({format_percentage(bucket.profit_margin)})"
        )

    combined = overview.combined
    if combined.comparable:
        lines.append(
            f"Total: {combined.count} sale(s), "
            f"profit {format_currency(combined.total_profit, combined.currency, symbols)}"
        )
    else:
        lines.append(
            f"Total: {combined.count} sale(s) (amounts not comparable across "
            f"{', '.join(combined.currencies)})"
        )
    return "\n".join(lines)
