from datetime import datetime, timedelta

import pytest

from shop_ledger.engine import slow_moving_products, top_products
from shop_ledger.records import NewSale

NOW = datetime(2026, 10, 18, 20, 0)


def make_sale(item: str, quantity: int, price: float, when: datetime = NOW) -> NewSale:
    return NewSale(item_name=item, quantity=quantity, price=price, date=when)


def test_top_products_aggregates_per_item_and_ranks_by_revenue() -> None:
    sales = [
        make_sale("Bread", 10, 50.0),  # 500
        make_sale("Milk", 2, 60.0),  # 120
        make_sale("Sugar", 1, 200.0),  # 200
        make_sale("Milk", 5, 60.0),  # +300 -> 420
    ]

    ranked = top_products(sales)

    assert [p.name for p in ranked] == ["Bread", "Milk", "Sugar"]
    milk = ranked[1]
    assert milk.quantity == 7
    assert milk.revenue == pytest.approx(420.0)


def test_top_products_limit_and_ties_keep_first_appearance() -> None:
    sales = [
        make_sale("A", 1, 100.0),
        make_sale("B", 1, 100.0),
        make_sale("C", 1, 300.0),
        make_sale("D", 1, 100.0),
    ]

    ranked = top_products(sales, limit=3)

    assert [p.name for p in ranked] == ["C", "A", "B"]


def test_top_products_revenue_never_exceeds_total() -> None:
    sales = [make_sale(f"Item {i % 8}", i + 1, 10.0 + i) for i in range(20)]

    ranked = top_products(sales)
    total = sum(s.total for s in sales)

    assert len(ranked) == 5
    assert sum(p.revenue for p in ranked) <= total + 1e-9
    revenues = [p.revenue for p in ranked]
    assert revenues == sorted(revenues, reverse=True)


def test_top_products_empty() -> None:
    assert top_products([]) == []


def test_slow_movers_exclude_items_sold_recently() -> None:
    sales = [
        make_sale("Soap", 1, 30.0, NOW - timedelta(days=45)),
        make_sale("Soap", 1, 30.0, NOW - timedelta(days=40)),
        make_sale("Milk", 1, 60.0, NOW - timedelta(days=60)),
        make_sale("Bread", 1, 50.0, NOW - timedelta(days=90)),
        make_sale("Bread", 1, 50.0, NOW - timedelta(days=1)),
    ]

    slow = slow_moving_products(sales, now=NOW)

    # Ordered by last sale, the most neglected first.
    assert [s.name for s in slow] == ["Milk", "Soap"]
    assert slow[1].last_sold == NOW - timedelta(days=40)


def test_slow_movers_cutoff_is_strict() -> None:
    """An item last sold exactly at the cut-off is not slow-moving."""
    sales = [
        make_sale("Tea", 1, 10.0, NOW - timedelta(days=30)),
        make_sale("Salt", 1, 10.0, NOW - timedelta(days=30, seconds=1)),
    ]

    assert [s.name for s in slow_moving_products(sales, now=NOW)] == ["Salt"]


def test_slow_movers_custom_threshold_and_empty() -> None:
    sales = [make_sale("Rice", 1, 10.0, NOW - timedelta(days=10))]

    assert slow_moving_products(sales, now=NOW) == []
    assert [s.name for s in slow_moving_products(sales, now=NOW, threshold_days=7)] == [
        "Rice"
    ]
    assert slow_moving_products([], now=NOW) == []
