"""Configuration for the sales analytics engine.

Module-level constants describe the closed vocabularies of the sales API
(currencies, statuses). AnalyticsConfig bundles the choices a caller can
inject: currency symbols for display, the sort tie-break policy and the
timezone used for calendar bucketing.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sales_core.exceptions import ConfigError

# Currency codes accepted by the sales API
CURRENCIES = ("USD", "ARS")

# Sale lifecycle statuses, always present in status breakdowns
SALE_STATUSES = ("open", "closed", "cancelled")

# Bucket name for service lines without a name
UNKNOWN_SERVICE = "Unknown Service"

# Tally key for sales without a status
UNKNOWN_STATUS = "unknown"

DEFAULT_CURRENCY_SYMBOLS = {
    "USD": "U$",
    "ARS": "AR$",
}

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class TieBreak(str, enum.Enum):
    """How the sort stage orders records with equal keys.

    LEGACY reproduces the dashboard comparator with no equality branch.
    STABLE keeps the original relative order of equal keys.
    """

    LEGACY = "legacy"
    STABLE = "stable"

    @classmethod
    def parse(cls, value: TieBreak | str) -> TieBreak:
        """Return the TieBreak for ``value``, raising ConfigError if unknown."""
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ConfigError(f"Invalid tie_break '{value}'. Must be one of: {valid}.") from None


@dataclass(frozen=True)
class AnalyticsConfig:
    """Injected settings for sorting, bucketing and display.

    Attributes:
        currencies: Currency codes the caller considers valid.
        currency_symbols: Mapping of currency code to display symbol.
        default_currency: Currency selected when a view has no explicit choice.
        tie_break: Default tie-break policy for the sort stage.
        timezone: IANA timezone name for month/year bucketing, or None for UTC.
    """

    currencies: tuple[str, ...] = CURRENCIES
    currency_symbols: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_CURRENCY_SYMBOLS)
    )
    default_currency: str = "USD"
    tie_break: TieBreak = TieBreak.STABLE
    timezone: str | None = None

    def __post_init__(self) -> None:
        if not self.currencies:
            raise ConfigError("At least one currency must be configured.")
        if self.default_currency not in self.currencies:
            raise ConfigError(
                f"default_currency '{self.default_currency}' is not one of {list(self.currencies)}."
            )
        object.__setattr__(self, "tie_break", TieBreak.parse(self.tie_break))

    @classmethod
    def default(cls) -> AnalyticsConfig:
        """Create the configuration used when callers pass none."""
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AnalyticsConfig:
        """Create an AnalyticsConfig from a plain mapping (e.g. parsed JSON).

        Args:
            data: Mapping with any of the dataclass field names as keys.

        Returns:
            AnalyticsConfig instance.

        Raises:
            ConfigError: If unknown keys are present or values are invalid.

        Examples:
            >>> AnalyticsConfig.from_dict({"tie_break": "legacy"}).tie_break
            <TieBreak.LEGACY: 'legacy'>
        """
        known = {"currencies", "currency_symbols", "default_currency", "tie_break", "timezone"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {unknown}")

        kwargs = dict(data)
        if "currencies" in kwargs:
            kwargs["currencies"] = tuple(kwargs["currencies"])
        if "currency_symbols" in kwargs:
            symbols = dict(DEFAULT_CURRENCY_SYMBOLS)
            symbols.update(kwargs["currency_symbols"])
            kwargs["currency_symbols"] = symbols
        return cls(**kwargs)
