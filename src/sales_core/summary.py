"""Summary calculator: reduce a sale collection to aggregate totals."""

from __future__ import annotations

from typing import Sequence

from sales_core.frame import sales_to_frame
from sales_core.models import Sale, Summary

# Half a cent: totals rounded independently may differ by rounding only.
AGREEMENT_TOLERANCE = 0.005


def summarize(sales: Sequence[Sale]) -> Summary:
    """Compute totals over the given sales.

    Profit uses each sale's embedded item snapshot, not the live catalog.

    Args:
        sales: Sale records.

    Returns:
        Summary with totals rounded to cents. Empty input yields zeros.

    Examples:
        >>> summarize([]).total_revenue
        0.0
    """
    df = sales_to_frame(sales)
    if df.empty:
        return Summary()

    return Summary(
        total_sales=len(df),
        total_revenue=round(float(df["amount_paid"].sum()), 2),
        total_profit=round(float(df["profit"].sum()), 2),
    )


def summaries_agree(first: Summary, second: Summary) -> bool:
    """Check that a server-computed summary matches a locally computed one."""
    return (
        first.total_sales == second.total_sales
        and abs(first.total_revenue - second.total_revenue) <= AGREEMENT_TOLERANCE
        and abs(first.total_profit - second.total_profit) <= AGREEMENT_TOLERANCE
    )
