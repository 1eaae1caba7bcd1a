from datetime import date, datetime

import pytest

from shop_ledger.periods import determine_period
from shop_ledger.records import NewExpense, NewSale
from shop_ledger.reports import expense_report, sales_report

NOW = datetime(2026, 10, 18, 20, 0)


def make_sale(item: str, quantity: int, price: float, when: datetime) -> NewSale:
    return NewSale(item_name=item, quantity=quantity, price=price, date=when)


def test_weekly_sales_report() -> None:
    sales = [
        make_sale("Bread", 2, 50.0, datetime(2026, 10, 13, 9, 0)),
        make_sale("Milk", 5, 60.0, datetime(2026, 10, 12, 10, 0)),
        make_sale("Bread", 1, 50.0, datetime(2026, 10, 13, 17, 0)),
        make_sale("Sugar", 9, 10.0, datetime(2026, 10, 11, 10, 0)),  # last week
    ]
    period = determine_period("week", now=NOW)

    report = sales_report(sales, period)

    assert report.total_sales == 3
    assert report.total_revenue == pytest.approx(450.0)
    assert report.most_sold_item == "Milk"
    assert [(p.name, p.value) for p in report.chart_data] == [
        ("2026-10-12", 300.0),
        ("2026-10-13", 150.0),
    ]
    assert all(s.item_name != "Sugar" for s in report.sales)


def test_most_sold_item_ties_keep_first_appearance() -> None:
    sales = [
        make_sale("Tea", 3, 10.0, datetime(2026, 10, 18, 9, 0)),
        make_sale("Salt", 3, 90.0, datetime(2026, 10, 18, 10, 0)),
    ]

    report = sales_report(sales, determine_period("today", now=NOW))

    assert report.most_sold_item == "Tea"


def test_empty_sales_report() -> None:
    report = sales_report([], determine_period("month", now=NOW))

    assert report.total_sales == 0
    assert report.total_revenue == 0.0
    assert report.most_sold_item == "N/A"
    assert report.chart_data == []


def test_custom_period_report_includes_the_last_day() -> None:
    sales = [make_sale("Bread", 1, 50.0, datetime(2026, 9, 30, 23, 59, 59))]
    period = determine_period(None, now=NOW, from_date=date(2026, 9, 1), to_date=date(2026, 9, 30))

    assert sales_report(sales, period).total_sales == 1


def test_expense_report_by_category() -> None:
    expenses = [
        NewExpense(name="Rent", category="Rent", amount=600.0, date=datetime(2026, 10, 1)),
        NewExpense(name="Power", category="Utilities", amount=200.0, date=datetime(2026, 10, 5)),
        NewExpense(name="Fuel", category="Transport", amount=90.0, date=datetime(2026, 9, 30)),
    ]

    report = expense_report(expenses, determine_period("month", now=NOW))

    assert report.total_expenses == 2
    assert report.total_amount == pytest.approx(800.0)
    assert [c.name for c in report.categories] == ["Rent", "Utilities"]
