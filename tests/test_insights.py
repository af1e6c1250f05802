"""Tests for the insight generator.

``now`` is fixed in every test. 2025-01-15 is a Wednesday, so the current
week starts on Sunday 2025-01-12 and the previous one on 2025-01-05.
"""

from datetime import datetime

import pytest

from sales_core.config import AnalyticsConfig
from sales_core.insights import (
    PeakHour,
    WeeklyGrowth,
    generate_insights,
    goal_progress,
    growth_pct,
    near_goal_sellers,
    peak_hour,
    recommendations,
    week_start,
    weekly_growth,
)
from tests.test_utils import BEIJINHO, BRIGADEIRO, make_sale, make_seller

NOW = datetime(2025, 1, 15, 16, 0, 0)
CONFIG = AnalyticsConfig()


class TestWeekStart:
    def test_midweek(self) -> None:
        assert week_start(NOW) == datetime(2025, 1, 12)

    def test_sunday_is_its_own_week_start(self) -> None:
        assert week_start(datetime(2025, 1, 12, 9, 30)) == datetime(2025, 1, 12)

    def test_saturday(self) -> None:
        assert week_start(datetime(2025, 1, 18, 23, 59)) == datetime(2025, 1, 12)


class TestWeeklyGrowth:
    def test_growth_guard_when_last_week_empty(self) -> None:
        """No revenue last week means 0% growth, even with revenue this week."""
        sales = [make_sale(1, "2025-01-13T10:00:00", amount_paid=100.0)]
        growth = weekly_growth(sales, NOW)
        assert growth.this_week_revenue == 100.0
        assert growth.last_week_revenue == 0.0
        assert growth.growth_pct == 0.0

    def test_decline(self) -> None:
        sales = [
            make_sale(1, "2025-01-06T10:00:00", amount_paid=200.0),
            make_sale(2, "2025-01-13T10:00:00", amount_paid=150.0),
        ]
        growth = weekly_growth(sales, NOW)
        assert growth.growth_pct == pytest.approx(-25.0)

    def test_week_boundaries(self) -> None:
        """Sunday 00:00 opens this week; sales after now are ignored."""
        sales = [
            make_sale(1, "2025-01-11T23:59:59", amount_paid=10.0),  # last week
            make_sale(2, "2025-01-12T00:00:00", amount_paid=20.0),  # this week
            make_sale(3, "2025-01-15T17:00:00", amount_paid=40.0),  # after now
            make_sale(4, "2025-01-04T23:00:00", amount_paid=80.0),  # two weeks ago
        ]
        growth = weekly_growth(sales, NOW)
        assert growth.this_week_revenue == 20.0
        assert growth.last_week_revenue == 10.0
        assert growth.growth_pct == pytest.approx(100.0)

    def test_growth_pct(self) -> None:
        assert growth_pct(150.0, 100.0) == pytest.approx(50.0)
        assert growth_pct(100.0, 0.0) == 0.0


def test_peak_hour_earliest_wins_ties() -> None:
    sales = [
        make_sale(1, "2025-01-15T15:00:00"),
        make_sale(2, "2025-01-15T10:00:00"),
        make_sale(3, "2025-01-14T15:30:00"),
        make_sale(4, "2025-01-14T10:30:00"),
    ]
    peak = peak_hour(sales)
    assert peak == PeakHour(hour=10, sales_count=2)
    assert peak.label == "10:00"


def test_peak_hour_empty() -> None:
    assert peak_hour([]) == PeakHour(hour=0, sales_count=0)


def test_goal_progress_capped_and_sorted() -> None:
    sellers = [make_seller(1, "Ana", 5), make_seller(2, "Bia", 40), make_seller(3, "Caio", 20)]
    progress = goal_progress(sellers, 25)
    assert [p.seller.name for p in progress] == ["Bia", "Caio", "Ana"]
    assert [p.progress_pct for p in progress] == [100.0, 80.0, 20.0]


def test_near_goal_counts_only_unmet_sellers() -> None:
    """A seller at 25 has met the goal; 24 is near it."""
    sellers = [make_seller(1, "Ana", 25), make_seller(2, "Bia", 24), make_seller(3, "Caio", 19)]
    assert [s.name for s in near_goal_sellers(sellers, 20)] == ["Bia"]


def test_near_goal_uses_configured_goal() -> None:
    """With a goal of 30, a seller at 27 is near it even though 27 >= 25."""
    sellers = [make_seller(1, "Ana", 27), make_seller(2, "Bia", 30), make_seller(3, "Caio", 24)]
    assert [s.name for s in near_goal_sellers(sellers, 25, goal_sales=30)] == ["Ana"]


class TestRecommendations:
    def test_declining_sales(self) -> None:
        growth = WeeklyGrowth(week_start=NOW, growth_pct=-12.34)
        notices = recommendations(growth, [], 20.0, CONFIG)
        assert [n.kind for n in notices] == ["declining_sales"]
        assert "12.3%" in notices[0].message

    def test_near_goal_sellers(self) -> None:
        growth = WeeklyGrowth(week_start=NOW)
        sellers = [make_seller(1, "Ana", 25), make_seller(2, "Bia", 24)]
        notices = recommendations(growth, sellers, 20.0, CONFIG)
        assert [n.kind for n in notices] == ["near_goal_sellers"]
        assert notices[0].message.startswith("1 vendedores")

    def test_near_goal_sellers_with_custom_goal(self) -> None:
        config = AnalyticsConfig(goal_sales=30, near_goal_min_sales=25)
        growth = WeeklyGrowth(week_start=NOW)
        notices = recommendations(growth, [make_seller(1, "Ana", 27)], 20.0, config)
        assert [n.kind for n in notices] == ["near_goal_sellers"]
        assert "alcançar 30 vendas" in notices[0].message

    def test_upsell_below_threshold(self) -> None:
        growth = WeeklyGrowth(week_start=NOW)
        notices = recommendations(growth, [], 9.99, CONFIG)
        assert [n.kind for n in notices] == ["upsell_opportunity"]
        assert "R$\u00a09,99" in notices[0].message
        assert recommendations(growth, [], 10.0, CONFIG) == []

    def test_rule_order(self) -> None:
        growth = WeeklyGrowth(week_start=NOW, growth_pct=-5.0)
        notices = recommendations(growth, [make_seller(1, "Ana", 22)], 5.0, CONFIG)
        assert [n.kind for n in notices] == [
            "declining_sales",
            "near_goal_sellers",
            "upsell_opportunity",
        ]


def test_generate_insights() -> None:
    sellers = [make_seller(1, "Ana", 22), make_seller(2, "Bia", 30)]
    sales = [
        make_sale(1, "2025-01-06T10:00:00", seller=sellers[0], item=BEIJINHO, quantity=5),
        make_sale(2, "2025-01-13T14:00:00", seller=sellers[1], item=BRIGADEIRO, quantity=2),
        make_sale(3, "2025-01-14T14:20:00", seller=sellers[1], item=BRIGADEIRO, quantity=1),
    ]

    insights = generate_insights(sales, sellers, [BRIGADEIRO, BEIJINHO], NOW)

    assert insights.summary.total_sales == 3
    assert insights.summary.total_revenue == 45.0
    assert insights.average_ticket == 15.0
    assert insights.weekly_growth.this_week_revenue == 15.0
    assert insights.weekly_growth.last_week_revenue == 30.0
    assert insights.weekly_growth.growth_pct == pytest.approx(-50.0)
    assert insights.peak_hour == PeakHour(hour=14, sales_count=2)
    assert insights.best_seller.name == "Bia"
    assert insights.best_item.item == BEIJINHO
    assert [n.kind for n in insights.recommendations] == ["declining_sales", "near_goal_sellers"]


def test_generate_insights_empty() -> None:
    insights = generate_insights([], [], [], NOW)
    assert insights.average_ticket == 0.0
    assert insights.margin_ratio == 0.0
    assert insights.weekly_growth.growth_pct == 0.0
    assert insights.best_seller is None
    assert insights.best_item is None
    # an empty collection has a zero ticket, which is below the upsell threshold
    assert [n.kind for n in insights.recommendations] == ["upsell_opportunity"]
