"""Tests for seller and item rankings."""

import pytest

from sales_core.rankings import (
    best_item,
    best_seller,
    rank_items,
    rank_sellers,
    rank_sellers_by_revenue,
)
from tests.test_utils import BEIJINHO, BRIGADEIRO, CAJUZINHO, make_sale, make_seller


@pytest.fixture
def sellers() -> list:
    return [
        make_seller(1, "Ana", 12),
        make_seller(2, "Bia", 30),
        make_seller(3, "Caio", 12),
        make_seller(4, "Duda", 25),
    ]


def test_rank_sellers_by_lifetime_count(sellers: list) -> None:
    """Highest count first; equal counts keep input order."""
    ranked = rank_sellers(sellers)
    assert [s.name for s in ranked] == ["Bia", "Duda", "Ana", "Caio"]


def test_rank_sellers_top_n(sellers: list) -> None:
    assert [s.name for s in rank_sellers(sellers, top_n=2)] == ["Bia", "Duda"]
    assert len(rank_sellers(sellers, top_n=10)) == 4


def test_rank_is_idempotent(sellers: list) -> None:
    once = rank_sellers(sellers)
    assert rank_sellers(once) == once


def test_invalid_top_n(sellers: list) -> None:
    with pytest.raises(ValueError):
        rank_sellers(sellers, top_n=0)


def test_rank_items_by_revenue() -> None:
    sales = [
        make_sale(1, "2025-01-15T10:00:00", item=BRIGADEIRO, quantity=2),  # 10.0
        make_sale(2, "2025-01-15T11:00:00", item=BEIJINHO, quantity=3),  # 18.0
        make_sale(3, "2025-01-15T12:00:00", item=BRIGADEIRO, quantity=1),  # 5.0
    ]

    ranked = rank_items([BRIGADEIRO, BEIJINHO, CAJUZINHO], sales)

    assert [p.item.name for p in ranked] == ["Beijinho", "Brigadeiro", "Cajuzinho"]
    assert ranked[0].revenue == 18.0
    assert ranked[0].profit == 10.5
    assert ranked[1].sales_count == 2
    assert ranked[1].quantity_sold == 3
    assert ranked[1].revenue == 15.0
    # items without sales are still listed with zero figures
    assert ranked[2].revenue == 0.0
    assert ranked[2].sales_count == 0


def test_rank_items_ties_keep_catalog_order() -> None:
    ranked = rank_items([BRIGADEIRO, BEIJINHO, CAJUZINHO], [])
    assert [p.item.id for p in ranked] == [1, 2, 3]


def test_rank_sellers_by_revenue_keeps_lifetime_order(sellers: list) -> None:
    """Revenue comes from the filtered sales, order from the lifetime count."""
    ana = sellers[0]
    sales = [
        make_sale(1, "2025-01-15T10:00:00", seller=ana, item=BEIJINHO),
        make_sale(2, "2025-01-15T11:00:00", seller=ana, item=BRIGADEIRO),
    ]

    rows = rank_sellers_by_revenue(sellers, sales, top_n=3)

    assert [r.seller.name for r in rows] == ["Bia", "Duda", "Ana"]
    assert rows[2].filtered_sales == 2
    assert rows[2].revenue == 11.0
    assert rows[2].sales_count == 12
    assert rows[0].filtered_sales == 0


def test_best_selectors(sellers: list) -> None:
    assert best_seller(sellers).name == "Bia"
    assert best_seller([]) is None
    assert best_item([], []) is None


def test_best_seller_tie_takes_first() -> None:
    tied = [make_seller(1, "Ana", 5), make_seller(2, "Bia", 5)]
    assert best_seller(tied).name == "Ana"


def test_best_item_without_sales_is_first_item() -> None:
    best = best_item([CAJUZINHO, BRIGADEIRO], [])
    assert best.item == CAJUZINHO
    assert best.revenue == 0.0
