"""Filter applier: narrow a sale collection and order it by timestamp."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd

from sales_core.frame import sales_to_frame
from sales_core.models import Sale, SaleFilter

logger = logging.getLogger(__name__)


def apply_filter(sales: Sequence[Sale], sale_filter: Optional[SaleFilter] = None) -> list[Sale]:
    """Return the sales matching every constraint of the filter, ordered by time.

    All supplied constraints are ANDed:
    - seller_id / item_id: equality on the foreign key
    - start_date / end_date: sale date within the inclusive range
    - day: sale date equal to the given day

    Ordering is by timestamp, most recent first unless ``sort == "asc"``.
    The sort is stable, so sales with equal timestamps keep their input order.

    Args:
        sales: Sale records. Never modified.
        sale_filter: Constraints. None means no constraint, default ordering.

    Returns:
        New list of matching sales.

    Examples:
        >>> apply_filter(sales, SaleFilter(seller_id=3, sort="asc"))
    """
    sale_filter = sale_filter or SaleFilter()
    df = sales_to_frame(sales)
    if df.empty:
        return []

    mask = pd.Series(True, index=df.index)
    if sale_filter.seller_id is not None:
        mask &= df["seller_id"] == sale_filter.seller_id
    if sale_filter.item_id is not None:
        mask &= df["item_id"] == sale_filter.item_id

    # ISO date strings compare in calendar order
    if sale_filter.start_date is not None:
        mask &= df["sale_date"] >= sale_filter.start_date.isoformat()
    if sale_filter.end_date is not None:
        mask &= df["sale_date"] <= sale_filter.end_date.isoformat()
    if sale_filter.day is not None:
        mask &= df["sale_date"] == sale_filter.day.isoformat()

    selected = df[mask].sort_values(
        "instant",
        ascending=not sale_filter.descending,
        kind="stable",
    )

    logger.debug("Filter %s kept %d of %d sales", sale_filter, len(selected), len(df))
    return [sales[position] for position in selected["position"]]
