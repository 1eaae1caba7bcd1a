from datetime import datetime

import pytest

from shop_ledger.engine import expense_category_distribution, peak_times, sales_heatmap
from shop_ledger.records import NewExpense, NewSale


def make_sale(when: datetime, price: float) -> NewSale:
    return NewSale(item_name="Bread", quantity=1, price=price, date=when)


def test_peak_times_finds_busiest_hour_and_days() -> None:
    sales = [
        make_sale(datetime(2026, 10, 18, 9, 15), 300.0),  # Sunday
        make_sale(datetime(2026, 10, 18, 9, 45), 200.0),  # Sunday
        make_sale(datetime(2026, 10, 12, 14, 0), 100.0),  # Monday
    ]

    peaks = peak_times(sales)

    assert peaks.busiest_hour == "9:00 - 10:00"
    assert peaks.busiest_day == "Sun"
    # Days without sales count as zero; the first of them wins.
    assert peaks.slowest_day == "Tue"


def test_peak_times_hourly_chart_covers_the_whole_day() -> None:
    sales = [make_sale(datetime(2026, 10, 18, 23, 30), 10.0)]

    chart = peak_times(sales).hourly_chart_data

    assert len(chart) == 24
    assert chart[0].name == "0:00"
    assert chart[23].name == "23:00"
    assert chart[23].sales == pytest.approx(10.0)
    assert peak_times(sales).busiest_hour == "23:00 - 24:00"


def test_peak_times_ties_resolve_to_lowest_index() -> None:
    sales = [
        make_sale(datetime(2026, 10, 13, 8, 0), 50.0),  # Tuesday
        make_sale(datetime(2026, 10, 14, 16, 0), 50.0),  # Wednesday
    ]

    peaks = peak_times(sales)

    assert peaks.busiest_hour == "8:00 - 9:00"
    assert peaks.busiest_day == "Tue"
    assert peaks.slowest_day == "Sun"


def test_peak_times_without_sales() -> None:
    peaks = peak_times([])

    assert peaks.busiest_hour == "N/A"
    assert peaks.busiest_day == "N/A"
    assert peaks.slowest_day == "N/A"
    assert len(peaks.hourly_chart_data) == 24
    assert all(p.sales == 0.0 for p in peaks.hourly_chart_data)


def test_expense_distribution_sums_per_category_largest_first() -> None:
    expenses = [
        NewExpense(name="Power", category="Utilities", amount=200.0, date=datetime(2026, 10, 1)),
        NewExpense(name="Rent Oct", category="Rent", amount=400.0, date=datetime(2026, 10, 1)),
        NewExpense(name="Rent fee", category="Rent", amount=200.0, date=datetime(2026, 10, 2)),
    ]

    distribution = expense_category_distribution(expenses)

    assert [(c.name, c.value) for c in distribution] == [("Rent", 600.0), ("Utilities", 200.0)]
    assert sum(c.value for c in distribution) == pytest.approx(800.0)


def test_expense_distribution_accepts_custom_categories() -> None:
    expenses = [
        NewExpense(name="Guard", category="Security", amount=50.0, date=datetime(2026, 10, 1))
    ]
    assert expense_category_distribution(expenses)[0].name == "Security"
    assert expense_category_distribution([]) == []


def test_sales_heatmap_is_keyed_by_iso_date() -> None:
    sales = [
        make_sale(datetime(2026, 10, 2, 9, 0), 20.0),
        make_sale(datetime(2026, 10, 1, 9, 0), 10.0),
        make_sale(datetime(2026, 10, 2, 18, 0), 5.0),
    ]

    heatmap = sales_heatmap(sales)

    assert heatmap == {"2026-10-01": 10.0, "2026-10-02": 25.0}
    assert sales_heatmap([]) == {}
