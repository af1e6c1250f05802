"""Insight generator: growth, peak hour, margins, goal progress and advice.

Every computation takes the current instant as an argument, so results are
deterministic for a fixed ``now``. Calendar comparisons use the wall-clock
time of each sale as recorded.

Weeks start on Sunday at 00:00. "This week" runs from the most recent Sunday
(today, when today is Sunday) up to ``now``; "last week" is the seven days
before that Sunday.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence

import pandas as pd

from sales_core.config import GOAL_SALES, AnalyticsConfig
from sales_core.formatters import format_brl, format_hour
from sales_core.frame import sales_to_frame
from sales_core.models import Item, Sale, Seller, Summary, wall_clock
from sales_core.rankings import ItemPerformance, best_item, best_seller
from sales_core.summary import summarize
from sales_core.trends import hourly_distribution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeeklyGrowth:
    """Revenue of the current calendar week against the previous one."""

    week_start: datetime
    this_week_revenue: float = 0.0
    last_week_revenue: float = 0.0
    growth_pct: float = 0.0


@dataclass(frozen=True)
class PeakHour:
    """Hour of day with the most sales."""

    hour: int = 0
    sales_count: int = 0

    @property
    def label(self) -> str:
        return format_hour(self.hour)


@dataclass(frozen=True)
class GoalProgress:
    """A seller's progress towards the sales goal, capped at 100%."""

    seller: Seller
    progress_pct: float


@dataclass(frozen=True)
class Recommendation:
    """Actionable notice.

    Attributes:
        kind: "declining_sales", "near_goal_sellers" or "upsell_opportunity".
        title: Short heading.
        message: Full sentence shown to the user.
    """

    kind: str
    title: str
    message: str


@dataclass(frozen=True)
class Insights:
    """Everything the insights view shows for one sale collection."""

    summary: Summary
    weekly_growth: WeeklyGrowth
    peak_hour: PeakHour
    goal_progress: list[GoalProgress] = field(default_factory=list)
    best_seller: Optional[Seller] = None
    best_item: Optional[ItemPerformance] = None
    recommendations: list[Recommendation] = field(default_factory=list)

    @property
    def average_ticket(self) -> float:
        return self.summary.average_ticket

    @property
    def margin_ratio(self) -> float:
        return self.summary.margin_ratio


def week_start(now: datetime) -> datetime:
    """Midnight of the most recent Sunday at or before ``now`` (wall clock)."""
    local = wall_clock(now)
    # Monday is 0, so Sunday is 6
    days_since_sunday = (local.weekday() + 1) % 7
    midnight = local.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=days_since_sunday)


def growth_pct(current: float, previous: float) -> float:
    """Percentage change from previous to current; 0 when previous is 0."""
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def weekly_growth(sales: Sequence[Sale], now: datetime) -> WeeklyGrowth:
    """Compare revenue of this calendar week with the previous one.

    Args:
        sales: Already-filtered sales.
        now: The current instant.

    Returns:
        WeeklyGrowth. growth_pct is 0 when last week had no revenue.
    """
    start = week_start(now)
    df = sales_to_frame(sales)
    if df.empty:
        return WeeklyGrowth(week_start=start)

    local_now = pd.Timestamp(wall_clock(now))
    this_start = pd.Timestamp(start)
    last_start = this_start - pd.Timedelta(days=7)

    this_week = df[(df["wall_time"] >= this_start) & (df["wall_time"] < local_now)]
    last_week = df[(df["wall_time"] >= last_start) & (df["wall_time"] < this_start)]

    this_revenue = round(float(this_week["amount_paid"].sum()), 2)
    last_revenue = round(float(last_week["amount_paid"].sum()), 2)

    return WeeklyGrowth(
        week_start=start,
        this_week_revenue=this_revenue,
        last_week_revenue=last_revenue,
        growth_pct=growth_pct(this_revenue, last_revenue),
    )


def peak_hour(sales: Sequence[Sale]) -> PeakHour:
    """Hour with the most sales; the earliest hour wins ties.

    With no sales the result is hour 0 with a count of 0.
    """
    peak = PeakHour()
    for bucket in hourly_distribution(sales):
        if bucket.sales_count > peak.sales_count:
            peak = PeakHour(hour=int(bucket.key), sales_count=bucket.sales_count)
    return peak


def goal_progress(sellers: Sequence[Seller], goal_sales: int) -> list[GoalProgress]:
    """Sellers ordered by progress towards the goal, closest first (stable)."""
    progress = [
        GoalProgress(seller=s, progress_pct=min(s.sales_count / goal_sales * 100, 100.0))
        for s in sellers
    ]
    return sorted(progress, key=lambda p: p.progress_pct, reverse=True)


def near_goal_sellers(
    sellers: Sequence[Seller],
    near_goal_min_sales: int,
    goal_sales: int = GOAL_SALES,
) -> list[Seller]:
    """Sellers in ``[near_goal_min_sales, goal_sales)``: close to the goal, not there yet.

    The goal is compared against ``sales_count`` directly, so a non-default
    ``goal_sales`` is honored even though ``Seller.met_goal`` is fixed at the
    store's goal.
    """
    return [s for s in sellers if near_goal_min_sales <= s.sales_count < goal_sales]


def recommendations(
    growth: WeeklyGrowth,
    sellers: Sequence[Seller],
    average_ticket: float,
    config: AnalyticsConfig,
) -> list[Recommendation]:
    """Evaluate the advice rules in their fixed order."""
    notices = []

    if growth.growth_pct < 0:
        notices.append(
            Recommendation(
                kind="declining_sales",
                title="Queda nas vendas",
                message=(
                    f"As vendas desta semana estão {abs(growth.growth_pct):.1f}% abaixo "
                    f"da semana passada. Considere estratégias de promoção."
                ),
            )
        )

    near_goal = near_goal_sellers(sellers, config.near_goal_min_sales, config.goal_sales)
    if len(near_goal) > 0:
        notices.append(
            Recommendation(
                kind="near_goal_sellers",
                title="Vendedores próximos da meta",
                message=(
                    f"{len(near_goal)} vendedores estão próximos de atingir a meta. "
                    f"Incentive-os para alcançar {config.goal_sales} vendas."
                ),
            )
        )

    if average_ticket < config.low_ticket_threshold:
        notices.append(
            Recommendation(
                kind="upsell_opportunity",
                title="Oportunidade de upsell",
                message=(
                    f"O ticket médio está baixo ({format_brl(average_ticket)}). "
                    f"Considere ofertas de combos ou produtos premium."
                ),
            )
        )

    return notices


def generate_insights(
    sales: Sequence[Sale],
    sellers: Sequence[Seller],
    items: Sequence[Item],
    now: datetime,
    config: Optional[AnalyticsConfig] = None,
) -> Insights:
    """Compute the insights bundle for a sale collection.

    This function:
    - does NOT fetch data or read the system clock,
    - does NOT modify its inputs,
    - MAY log a debug line with the headline figures.

    Args:
        sales: Already-filtered sales.
        sellers: All sellers (lifetime counts).
        items: Catalog items.
        now: The current instant.
        config: Thresholds. Defaults to AnalyticsConfig().

    Returns:
        Insights bundle.
    """
    config = config or AnalyticsConfig()

    summary = summarize(sales)
    growth = weekly_growth(sales, now)

    insights = Insights(
        summary=summary,
        weekly_growth=growth,
        peak_hour=peak_hour(sales),
        goal_progress=goal_progress(sellers, config.goal_sales),
        best_seller=best_seller(sellers),
        best_item=best_item(items, sales),
        recommendations=recommendations(growth, sellers, summary.average_ticket, config),
    )

    logger.debug(
        "Insights: growth=%.1f%% ticket=%.2f margin=%.1f%% recommendations=%d",
        growth.growth_pct,
        insights.average_ticket,
        insights.margin_ratio,
        len(insights.recommendations),
    )
    return insights
