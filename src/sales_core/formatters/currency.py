"""Currency and percentage formatting for dashboard figures.

Symbols are passed in explicitly (usually AnalyticsConfig.currency_symbols);
nothing here reads a global locale or language setting.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from sales_core.config import DEFAULT_CURRENCY_SYMBOLS
from sales_core.records import normalize_amount

_SUFFIXES = [(1e9, "B"), (1e6, "M"), (1e3, "K")]


def currency_symbol(currency: str | None, symbols: Mapping[str, str] | None = None) -> str:
    """Display symbol for a currency code; unknown codes fall back to USD's.

    Examples:
        >>> currency_symbol("ARS")
        'AR$'
        >>> currency_symbol("EUR")
        'U$'
    """
    symbols = symbols or DEFAULT_CURRENCY_SYMBOLS
    code = (currency or "").upper()
    return symbols.get(code) or symbols.get("USD", DEFAULT_CURRENCY_SYMBOLS["USD"])


def _sign(amount: float) -> str:
    return "-" if amount < 0 else ""


def format_currency(
    amount: Any,
    currency: str = "USD",
    symbols: Mapping[str, str] | None = None,
    decimals: int = 2,
) -> str:
    """Format an amount with thousands separators and a currency symbol.

    Missing or non-numeric amounts are formatted as 0.

    Examples:
        >>> format_currency(1234.5, "USD")
        'U$1,234.50'
        >>> format_currency(-80, "ARS")
        '-AR$80.00'
    """
    value = normalize_amount(amount)
    symbol = currency_symbol(currency, symbols)
    return f"{_sign(value)}{symbol}{abs(value):,.{decimals}f}"


def format_large_number(amount: Any, symbol: str = "U$", decimals: int = 1) -> str:
    """Format an amount with a K/M/B suffix.

    Examples:
        >>> format_large_number(1_500_000, "U$")
        'U$1.5M'
        >>> format_large_number(-2500, "AR$")
        '-AR$2.5K'
    """
    value = normalize_amount(amount)
    if math.isinf(value):
        return f"{_sign(value)}{symbol}inf"

    magnitude = abs(value)
    for threshold, suffix in _SUFFIXES:
        if magnitude >= threshold:
            return f"{_sign(value)}{symbol}{magnitude / threshold:.{decimals}f}{suffix}"
    return f"{_sign(value)}{symbol}{magnitude:.{decimals}f}"


def format_currency_compact(
    amount: Any,
    currency: str = "USD",
    symbols: Mapping[str, str] | None = None,
    decimals: int = 1,
) -> str:
    """Compact currency format, e.g. ``'AR$12.3K'``."""
    return format_large_number(amount, currency_symbol(currency, symbols), decimals)


def format_percentage(value: Any, decimals: int = 1) -> str:
    """Format a percentage value (0-100 scale).

    Examples:
        >>> format_percentage(40)
        '40.0%'
        >>> format_percentage(None)
        '0%'
    """
    number = normalize_amount(value, default=math.nan)
    if math.isnan(number):
        return "0%"
    return f"{number:.{decimals}f}%"


def is_suspiciously_large(value: Any, threshold: float = 1e6) -> bool:
    """Flag amounts whose magnitude exceeds ``threshold`` (likely data errors)."""
    return abs(normalize_amount(value)) > threshold
