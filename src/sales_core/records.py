"""Sale records and the normalized sales frame.

SaleRecord and ServiceLine hold a sale exactly as the sales API returned it.
normalize_sales turns any collection of records into the sales frame every
analytics stage works on: one row per sale, amounts coerced to float with
missing values as 0, and ``created_at`` parsed to UTC timestamps (NaT when
unparsable).

Example:
    >>> from sales_core.records import normalize_sales
    >>> frame = normalize_sales([{"_id": "s1", "saleCurrency": "USD", "profit": None}])
    >>> float(frame.loc[0, "profit"])
    0.0
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

import pandas as pd

from sales_core.exceptions import DataQualityError

logger = logging.getLogger(__name__)

AMOUNT_COLUMNS = ["total_sale_price", "total_cost", "profit"]

FRAME_COLUMNS = [
    "id",
    "created_at",
    "sale_currency",
    *AMOUNT_COLUMNS,
    "status",
    "services",
    "record",
]


def normalize_amount(value: Any, default: float = 0.0) -> float:
    """Coerce a raw amount to float.

    None, non-numeric values and NaN become ``default``.

    Examples:
        >>> normalize_amount("12.5")
        12.5
        >>> normalize_amount(None)
        0.0
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    return number


@dataclass(frozen=True)
class ServiceLine:
    """One service (hotel, flight, transfer...) sold as part of a sale."""

    service_name: str | None = None
    price_client: Any = None
    cost_provider: Any = None
    quantity: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServiceLine:
        return cls(
            service_name=data.get("serviceName", data.get("service_name")) or None,
            price_client=data.get("priceClient", data.get("price_client")),
            cost_provider=data.get("costProvider", data.get("cost_provider")),
            quantity=data.get("quantity"),
        )

    @property
    def unit_price(self) -> float:
        return normalize_amount(self.price_client)

    @property
    def unit_cost(self) -> float:
        return normalize_amount(self.cost_provider)

    @property
    def units(self) -> float:
        """Quantity sold; missing, invalid or zero quantities count as one unit."""
        return normalize_amount(self.quantity) or 1.0


# API and attribute names of the fields SaleRecord models explicitly
_RECORD_KEYS = {
    "_id": "id",
    "id": "id",
    "createdAt": "created_at",
    "created_at": "created_at",
    "saleCurrency": "sale_currency",
    "sale_currency": "sale_currency",
    "totalSalePrice": "total_sale_price",
    "total_sale_price": "total_sale_price",
    "totalCost": "total_cost",
    "total_cost": "total_cost",
    "profit": "profit",
    "status": "status",
    "clientId": "client",
    "client": "client",
    "services": "services",
}


@dataclass(frozen=True)
class SaleRecord:
    """A sale as returned by the sales API.

    Values are kept raw. Amounts may be missing or non-numeric and
    ``created_at`` may be unparsable; normalization happens when the record
    enters a sales frame, not here. The stored ``profit`` is trusted as-is
    and is never recomputed from price and cost.

    Attributes:
        id: Opaque sale identifier.
        created_at: Creation instant (ISO string or datetime).
        sale_currency: Currency code the amounts are denominated in.
        total_sale_price: Amount charged to the client.
        total_cost: Amount owed to providers.
        profit: Stored profit.
        status: Lifecycle status (open, closed, cancelled).
        client: Client reference (id or embedded client document).
        services: Service lines sold.
        extra: Every other field of the API document (passengers,
            destination, notes...), keyed by its API name.
    """

    id: Any = None
    created_at: Any = None
    sale_currency: str | None = None
    total_sale_price: Any = None
    total_cost: Any = None
    profit: Any = None
    status: str | None = None
    client: Any = None
    services: tuple[ServiceLine, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SaleRecord:
        """Build a SaleRecord from an API sale document (camelCase keys).

        Snake_case keys are accepted as well so records can round-trip
        through plain dictionaries.
        """
        services = data.get("services") or ()
        return cls(
            id=data.get("_id", data.get("id")),
            created_at=data.get("createdAt", data.get("created_at")),
            sale_currency=data.get("saleCurrency", data.get("sale_currency")),
            total_sale_price=data.get("totalSalePrice", data.get("total_sale_price")),
            total_cost=data.get("totalCost", data.get("total_cost")),
            profit=data.get("profit"),
            status=data.get("status"),
            client=data.get("clientId", data.get("client")),
            services=tuple(
                s if isinstance(s, ServiceLine) else ServiceLine.from_dict(s)
                for s in services
                if isinstance(s, (ServiceLine, Mapping))
            ),
            extra={k: v for k, v in data.items() if k not in _RECORD_KEYS},
        )

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a field by its API or attribute name.

        Known fields (``_id``, ``saleCurrency``, ``clientId``...) resolve to
        their attribute; any other name is read from ``extra``.

        Examples:
            >>> record = SaleRecord.from_dict({"_id": "s1", "passengers": 4})
            >>> record.get("_id"), record.get("passengers"), record.get("pax", 0)
            ('s1', 4, 0)
        """
        attr = _RECORD_KEYS.get(name)
        if attr is not None:
            return getattr(self, attr)
        return self.extra.get(name, default)


SalesInput = Union[pd.DataFrame, Iterable[Union[SaleRecord, Mapping[str, Any]]]]


def to_record(item: SaleRecord | Mapping[str, Any]) -> SaleRecord:
    if isinstance(item, SaleRecord):
        return item
    if isinstance(item, Mapping):
        return SaleRecord.from_dict(item)
    raise TypeError(f"Expected SaleRecord or mapping, got {type(item).__name__}")


def parse_timestamps(values: pd.Series) -> pd.Series:
    """Parse creation instants to tz-aware UTC timestamps.

    Naive values are taken as UTC. Anything unparsable becomes NaT.
    """
    parsed = [_parse_timestamp(v) for v in values]
    return pd.Series(
        pd.DatetimeIndex(parsed, tz="UTC") if parsed else pd.DatetimeIndex([], tz="UTC"),
        index=values.index,
        name=values.name,
    )


def _parse_timestamp(value: Any) -> pd.Timestamp:
    if value is None or value == "":
        return pd.NaT
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return pd.NaT
    if pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def normalize_sales(records: SalesInput) -> pd.DataFrame:
    """Build the normalized sales frame from raw records.

    This function:
    - accepts SaleRecord instances, API-shaped mappings, or an existing frame,
    - coerces amount columns to float with missing/invalid values as 0,
    - parses ``created_at`` to UTC (NaT when unparsable),
    - never drops a record.

    Args:
        records: Raw sale records, or a frame previously returned by this
            function (a copy is returned).

    Returns:
        DataFrame with columns FRAME_COLUMNS, one row per sale, in input order.

    Raises:
        DataQualityError: If a frame is passed that lacks required columns.
        TypeError: If an element is neither a SaleRecord nor a mapping.
    """
    if isinstance(records, pd.DataFrame):
        missing_cols = [col for col in FRAME_COLUMNS if col not in records.columns]
        if missing_cols:
            raise DataQualityError(
                f"Missing required columns in sales frame: {missing_cols}. Required: {FRAME_COLUMNS}"
            )
        return records.copy()

    items = [to_record(item) for item in records]

    df = pd.DataFrame(
        {
            "id": [r.id for r in items],
            "created_at": [r.created_at for r in items],
            "sale_currency": [r.sale_currency for r in items],
            "total_sale_price": [r.total_sale_price for r in items],
            "total_cost": [r.total_cost for r in items],
            "profit": [r.profit for r in items],
            "status": [r.status for r in items],
            "services": [r.services for r in items],
            "record": items,
        },
        columns=FRAME_COLUMNS,
    )

    for col in AMOUNT_COLUMNS:
        df[col] = df[col].map(normalize_amount).astype(float)

    df["created_at"] = parse_timestamps(df["created_at"])

    unparsable = int(df["created_at"].isna().sum())
    if unparsable:
        logger.warning("%d of %d sale(s) have a missing or unparsable createdAt", unparsable, len(df))

    logger.debug("Normalized %d sale record(s)", len(df))
    return df
