"""Tests for AnalyticsConfig and the exception hierarchy."""

import pytest

from sales_core.config import DEFAULT_CURRENCY_SYMBOLS, AnalyticsConfig, TieBreak
from sales_core.exceptions import ConfigError, DataQualityError, PayloadError, SalesAPIError


def test_default_config() -> None:
    config = AnalyticsConfig.default()

    assert config.currencies == ("USD", "ARS")
    assert config.currency_symbols == DEFAULT_CURRENCY_SYMBOLS
    assert config.default_currency == "USD"
    assert config.tie_break is TieBreak.STABLE
    assert config.timezone is None


def test_tie_break_string_is_parsed() -> None:
    assert AnalyticsConfig(tie_break="legacy").tie_break is TieBreak.LEGACY


def test_from_dict_merges_symbols() -> None:
    """Partial symbol mappings extend the defaults."""
    config = AnalyticsConfig.from_dict(
        {"currency_symbols": {"ARS": "$"}, "timezone": "America/Argentina/Buenos_Aires"}
    )

    assert config.currency_symbols == {"USD": "U$", "ARS": "$"}
    assert config.timezone == "America/Argentina/Buenos_Aires"


def test_from_dict_accepts_currency_list() -> None:
    config = AnalyticsConfig.from_dict({"currencies": ["ARS"], "default_currency": "ARS"})

    assert config.currencies == ("ARS",)


@pytest.mark.parametrize(
    "data",
    [
        {"colour": "blue"},
        {"tie_break": "random"},
        {"currencies": []},
        {"default_currency": "EUR"},
    ],
)
def test_invalid_config_raises(data: dict) -> None:
    with pytest.raises(ConfigError):
        AnalyticsConfig.from_dict(data)


def test_config_error_is_value_error() -> None:
    """ConfigError can be caught as ValueError or as the package base error."""
    assert issubclass(ConfigError, ValueError)
    assert issubclass(ConfigError, SalesAPIError)
    assert issubclass(PayloadError, DataQualityError)
    assert issubclass(DataQualityError, SalesAPIError)
