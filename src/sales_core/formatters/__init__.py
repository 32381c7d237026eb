"""Output formatting utilities."""

from sales_core.formatters.console import format_currency_overview, format_report_for_console
from sales_core.formatters.currency import (
    currency_symbol,
    format_currency,
    format_currency_compact,
    format_large_number,
    format_percentage,
    is_suspiciously_large,
)

__all__ = [
    "currency_symbol",
    "format_currency",
    "format_currency_compact",
    "format_currency_overview",
    "format_large_number",
    "format_percentage",
    "format_report_for_console",
    "is_suspiciously_large",
]
