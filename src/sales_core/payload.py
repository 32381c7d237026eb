"""Read sales API responses into engine input.

The sales API answers list requests with::

    {
        "success": true,
        "data": {
            "sales": [...],
            "pagination": {...},
            "summary": [{"_id": "USD", "count": 3, "totalSales": ..., ...}]
        }
    }

This module only reads such a payload as data. Fetching it, following
pagination and retrying are the caller's concern.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sales_core.analytics.currency import CurrencyBucket
from sales_core.exceptions import PayloadError
from sales_core.records import SaleRecord

logger = logging.getLogger(__name__)


@dataclass
class SalesPage:
    """One page of sales from the API.

    Attributes:
        sales: Parsed sale records, in response order.
        pagination: Pagination metadata as returned (opaque to the engine).
        summary: Pre-aggregated per-currency totals, if the API sent them.
    """

    sales: list[SaleRecord]
    pagination: dict[str, Any] = field(default_factory=dict)
    summary: list[CurrencyBucket] = field(default_factory=list)


def parse_sales_response(payload: Mapping[str, Any]) -> SalesPage:
    """Parse a sales list response.

    Args:
        payload: Decoded JSON body of the response.

    Returns:
        SalesPage with SaleRecord objects and per-currency summary buckets.

    Raises:
        PayloadError: If ``success`` is false or ``data.sales`` is missing.
    """
    if not isinstance(payload, Mapping) or not payload.get("success"):
        message = payload.get("message") if isinstance(payload, Mapping) else None
        raise PayloadError(f"Sales API reported failure: {message or 'no success flag'}")

    data = payload.get("data")
    if not isinstance(data, Mapping) or not isinstance(data.get("sales"), list):
        raise PayloadError("Sales API response has no 'data.sales' list")

    sales = [SaleRecord.from_dict(item) for item in data["sales"] if isinstance(item, Mapping)]
    skipped = len(data["sales"]) - len(sales)
    if skipped:
        logger.warning("Skipped %d non-object entries in data.sales", skipped)

    summary = [
        CurrencyBucket.from_summary(entry)
        for entry in data.get("summary") or []
        if isinstance(entry, Mapping)
    ]

    logger.debug("Parsed %d sale(s) and %d currency summary row(s)", len(sales), len(summary))
    return SalesPage(
        sales=sales,
        pagination=dict(data.get("pagination") or {}),
        summary=summary,
    )
