"""Example: Sales by Currency

This example compares the totals recomputed from sale records with the
pre-aggregated summary the sales API returns. Amounts in different
currencies are never added together; with USD and ARS present, the combined
row only carries the sale count.

Prerequisites:
- Save a response of the sales list endpoint to data/sales_response.json
  (modify the path below as needed)
"""

import json
from pathlib import Path

from sales_core import build_currency_overview, parse_sales_response, summarize_upstream
from sales_core.formatters import format_currency_overview

response_path = Path("data/sales_response.json")  # MODIFY AS NEEDED

with response_path.open(encoding="utf-8") as f:
    page = parse_sales_response(json.load(f))

print("Recomputed from this page of sales:")
print(format_currency_overview(build_currency_overview(page.sales)))

if page.summary:
    print("\nAs reported by the API (all pages):")
    print(format_currency_overview(summarize_upstream(page.summary)))
else:
    print("\nThe response carried no currency summary.")
