"""Example: Financial Summary for one currency

This example shows how to turn a saved sales API response into the figures
the financial summary view displays: headline totals, the profit
distribution, service and monthly breakdowns, and a sorted sales table.

Prerequisites:
- Save a response of the sales list endpoint to data/sales_response.json
  (modify the path below as needed)
"""

import json
from datetime import datetime, timezone
from pathlib import Path

from sales_core import AnalyticsConfig, build_financial_report, parse_sales_response
from sales_core.formatters import format_currency, format_report_for_console

response_path = Path("data/sales_response.json")  # MODIFY AS NEEDED
currency = "USD"  # USD or ARS
period = "month"  # all, today, week, month, quarter, year

with response_path.open(encoding="utf-8") as f:
    page = parse_sales_response(json.load(f))

print(f"Loaded {len(page.sales)} sale(s) from {response_path}")

# Bucket months in the agency's local time; sort ties keep input order
config = AnalyticsConfig(timezone="America/Argentina/Buenos_Aires", tie_break="stable")

now = datetime.now(timezone.utc)
report = build_financial_report(
    page.sales,
    currency,
    period=period,
    now=now,
    year=now.year,
    sort_key="profit",
    sort_order="desc",
    config=config,
)

print()
print(format_report_for_console(report, config.currency_symbols))

# Top five sales by profit
print("\nTop sales by profit:")
for _, row in report.sales.head(5).iterrows():
    print(f"  {row['id']}: {format_currency(row['profit'], currency, config.currency_symbols)}")

# Twelve-month view for the current year (ignores the period filter)
print(f"\nMonthly profitability {now.year}:")
for bucket in report.monthly_breakdown:
    print(
        f"  {bucket.month_name:<10} {bucket.total_sales:>4} sale(s) "
        f"{format_currency(bucket.total_profit, currency, config.currency_symbols):>16}"
    )

if report.year_summary is not None:
    print(
        f"\nYear total: {report.year_summary.total_sales} sale(s), "
        f"margin {report.year_summary.average_profit_margin:.1f}%"
    )
