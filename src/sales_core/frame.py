"""Tabular view of a sale collection.

The engine's aggregations run on a pandas DataFrame with one row per Sale.
Calendar columns are taken from the wall-clock fields of each timestamp, so
grouping by ``sale_date`` or ``hour`` never shifts a sale across midnight.

Columns:
    position: Index of the sale in the input sequence.
    sale_id, seller_id, item_id: Identifiers.
    quantity, amount_paid, profit: Numeric facts (profit from the item snapshot).
    sale_date: Wall-clock date as YYYY-MM-DD string.
    hour: Wall-clock hour (0-23).
    wall_time: Timestamp with tzinfo dropped, unconverted.
    instant: Sort key. Aware timestamps are normalized to UTC, naive ones are
        taken as-is.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

import pandas as pd

from sales_core.models import Sale, wall_clock

SALE_COLUMNS = [
    "position",
    "sale_id",
    "seller_id",
    "item_id",
    "quantity",
    "amount_paid",
    "profit",
    "sale_date",
    "hour",
    "wall_time",
    "instant",
]


def _instant(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def sales_to_frame(sales: Sequence[Sale]) -> pd.DataFrame:
    """Build the one-row-per-sale DataFrame.

    Args:
        sales: Sale records, in any order.

    Returns:
        DataFrame with SALE_COLUMNS. Empty input yields an empty frame with
        the same columns.
    """
    rows = [
        {
            "position": position,
            "sale_id": sale.id,
            "seller_id": sale.seller_id,
            "item_id": sale.item_id,
            "quantity": sale.quantity,
            "amount_paid": sale.amount_paid,
            "profit": sale.profit,
            "sale_date": sale.sale_date.isoformat(),
            "hour": sale.hour,
            "wall_time": wall_clock(sale.timestamp),
            "instant": _instant(sale.timestamp),
        }
        for position, sale in enumerate(sales)
    ]

    if not rows:
        return pd.DataFrame(columns=SALE_COLUMNS)

    df = pd.DataFrame(rows, columns=SALE_COLUMNS)
    df["wall_time"] = pd.to_datetime(df["wall_time"])
    df["instant"] = pd.to_datetime(df["instant"])
    return df
