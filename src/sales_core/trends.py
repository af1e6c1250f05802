"""Time-bucket aggregator: daily trends and hour-of-day distribution.

The two series differ in density:

- ``daily_trend`` is dense. It always returns one bucket per day of the
  trailing window, zero-filled, so charts get a fixed-length series.
- ``hourly_distribution`` is sparse. Hours without sales are dropped.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Sequence

import pandas as pd

from sales_core.frame import sales_to_frame
from sales_core.models import Bucket, Sale, wall_clock

logger = logging.getLogger(__name__)

_AGGREGATIONS = {
    "sales_count": ("sale_id", "count"),
    "revenue": ("amount_paid", "sum"),
    "profit": ("profit", "sum"),
}


def _aggregate_by(df: pd.DataFrame, column: str) -> pd.DataFrame:
    """Group the sales frame by one column into count/revenue/profit."""
    if df.empty:
        return pd.DataFrame(columns=list(_AGGREGATIONS)).rename_axis(column)
    return df.groupby(column).agg(**_AGGREGATIONS)


def _to_buckets(grouped: pd.DataFrame, key_format: Callable[[Any], str] = str) -> list[Bucket]:
    return [
        Bucket(
            key=key_format(key),
            sales_count=int(row["sales_count"]),
            revenue=round(float(row["revenue"]), 2),
            profit=round(float(row["profit"]), 2),
        )
        for key, row in grouped.iterrows()
    ]


def _today(now: date | datetime) -> date:
    if isinstance(now, datetime):
        return wall_clock(now).date()
    return now


def trailing_day_keys(now: date | datetime, days: int) -> list[str]:
    """Return ``days`` consecutive YYYY-MM-DD keys ending at the day of ``now``."""
    if days < 1:
        raise ValueError(f"Trend window must be at least 1 day (got {days})")
    dates = pd.date_range(end=pd.Timestamp(_today(now)), periods=days, freq="D")
    return [d.strftime("%Y-%m-%d") for d in dates]


def daily_trend(
    sales: Sequence[Sale],
    now: date | datetime,
    days: int = 30,
) -> list[Bucket]:
    """Aggregate sales per calendar day over a trailing window.

    Args:
        sales: Already-filtered sales.
        now: The current instant (or day). The window ends on this day.
        days: Window length (7 and 30 are the usual choices).

    Returns:
        Exactly ``days`` buckets, oldest first, including empty days.

    Raises:
        ValueError: If days < 1.
    """
    keys = trailing_day_keys(now, days)
    grouped = _aggregate_by(sales_to_frame(sales), "sale_date")
    grouped = grouped.reindex(keys, fill_value=0)

    logger.debug("Daily trend %s..%s over %d sales", keys[0], keys[-1], len(sales))
    return _to_buckets(grouped)


def hourly_distribution(sales: Sequence[Sale]) -> list[Bucket]:
    """Aggregate sales per wall-clock hour of day.

    Returns:
        Buckets keyed "00".."23" in hour order, only for hours with sales.
    """
    grouped = _aggregate_by(sales_to_frame(sales), "hour").sort_index()
    grouped = grouped[grouped["sales_count"] > 0]
    return _to_buckets(grouped, key_format=lambda hour: f"{int(hour):02d}")


def daily_history(sales: Sequence[Sale], last: int = 7) -> list[Bucket]:
    """Aggregate sales per day, only for days that have sales.

    Used for the overview chart: the most recent ``last`` active days,
    oldest first.
    """
    if last < 1:
        raise ValueError(f"History length must be at least 1 day (got {last})")
    grouped = _aggregate_by(sales_to_frame(sales), "sale_date").sort_index()
    return _to_buckets(grouped.tail(last))
