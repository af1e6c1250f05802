"""Ranking engine: Top-N orderings of sellers and items.

All rankings are stable descending sorts, so entries with equal keys keep
their input order and re-ranking a ranked list changes nothing. The "best"
selectors are the N=1 case of the same rankings: the first of several
equal entries wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import pandas as pd

from sales_core.frame import sales_to_frame
from sales_core.models import Item, Sale, Seller


@dataclass(frozen=True)
class ItemPerformance:
    """Sales of one catalog item over a sale collection."""

    item: Item
    sales_count: int = 0
    quantity_sold: int = 0
    revenue: float = 0.0
    profit: float = 0.0


@dataclass(frozen=True)
class SellerPerformance:
    """A seller's lifetime count next to its figures in a sale collection.

    Attributes:
        seller: The seller record.
        sales_count: Lifetime count from the store (the ranking key).
        filtered_sales: Number of sales of this seller in the collection.
        revenue: Revenue of those sales.
    """

    seller: Seller
    sales_count: int = 0
    filtered_sales: int = 0
    revenue: float = 0.0


def _check_top_n(top_n: Optional[int]) -> None:
    if top_n is not None and top_n < 1:
        raise ValueError(f"top_n must be at least 1 (got {top_n})")


def _ranked_positions(keys: list[float], top_n: Optional[int]) -> list[int]:
    """Positions of ``keys`` in stable descending order, truncated to top_n."""
    order = pd.Series(keys, dtype="float64").sort_values(ascending=False, kind="stable")
    positions = [int(p) for p in order.index]
    return positions if top_n is None else positions[:top_n]


def _totals_by(sales: Sequence[Sale], key: str) -> pd.DataFrame:
    df = sales_to_frame(sales)
    if df.empty:
        return pd.DataFrame(columns=["sales_count", "quantity_sold", "revenue", "profit"])
    return df.groupby(key).agg(
        sales_count=("sale_id", "count"),
        quantity_sold=("quantity", "sum"),
        revenue=("amount_paid", "sum"),
        profit=("profit", "sum"),
    )


def rank_sellers(sellers: Sequence[Seller], top_n: Optional[int] = None) -> list[Seller]:
    """Order sellers by lifetime sales count, highest first.

    Args:
        sellers: Seller records.
        top_n: Keep only the first N entries (5 in reports, 8 in charts).

    Returns:
        New list of sellers.
    """
    _check_top_n(top_n)
    positions = _ranked_positions([float(s.sales_count) for s in sellers], top_n)
    return [sellers[p] for p in positions]


def rank_items(
    items: Sequence[Item],
    sales: Sequence[Sale],
    top_n: Optional[int] = None,
) -> list[ItemPerformance]:
    """Order catalog items by revenue over the given sales, highest first.

    Every item appears, items without sales with zero figures. Profit is
    summed from each sale's item snapshot.

    Args:
        items: Catalog items.
        sales: Already-filtered sales.
        top_n: Keep only the first N entries.

    Returns:
        List of ItemPerformance.
    """
    _check_top_n(top_n)
    totals = _totals_by(sales, "item_id")

    performances = []
    for item in items:
        if item.id in totals.index:
            row = totals.loc[item.id]
            performances.append(
                ItemPerformance(
                    item=item,
                    sales_count=int(row["sales_count"]),
                    quantity_sold=int(row["quantity_sold"]),
                    revenue=round(float(row["revenue"]), 2),
                    profit=round(float(row["profit"]), 2),
                )
            )
        else:
            performances.append(ItemPerformance(item=item))

    positions = _ranked_positions([p.revenue for p in performances], top_n)
    return [performances[p] for p in positions]


def rank_sellers_by_revenue(
    sellers: Sequence[Seller],
    sales: Sequence[Sale],
    top_n: Optional[int] = None,
) -> list[SellerPerformance]:
    """Seller chart rows: lifetime count plus revenue within the given sales.

    Ordered by lifetime sales count, like ``rank_sellers``.
    """
    _check_top_n(top_n)
    totals = _totals_by(sales, "seller_id")

    performances = []
    for seller in sellers:
        filtered_sales, revenue = 0, 0.0
        if seller.id in totals.index:
            row = totals.loc[seller.id]
            filtered_sales = int(row["sales_count"])
            revenue = round(float(row["revenue"]), 2)
        performances.append(
            SellerPerformance(
                seller=seller,
                sales_count=seller.sales_count,
                filtered_sales=filtered_sales,
                revenue=revenue,
            )
        )

    positions = _ranked_positions([float(p.sales_count) for p in performances], top_n)
    return [performances[p] for p in positions]


def best_seller(sellers: Sequence[Seller]) -> Optional[Seller]:
    """Seller with the most sales; the first one on ties. None if empty."""
    ranked = rank_sellers(sellers, top_n=1)
    return ranked[0] if ranked else None


def best_item(items: Sequence[Item], sales: Sequence[Sale]) -> Optional[ItemPerformance]:
    """Item with the highest revenue; the first one on ties. None if empty."""
    ranked = rank_items(items, sales, top_n=1)
    return ranked[0] if ranked else None
