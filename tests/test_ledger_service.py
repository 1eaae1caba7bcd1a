from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from shop_ledger.config import AppConfig
from shop_ledger.db import DatabaseConfig, SalesFilter
from shop_ledger.engine import InsightsSettings
from shop_ledger.ledger_service import (
    add_customer,
    add_product,
    clear_all_sales,
    compute_expense_report,
    compute_insights,
    compute_sales_report,
    delete_product,
    delete_sale,
    edit_customer,
    edit_product,
    edit_sale,
    import_expenses,
    import_sales,
    list_low_stock_products,
    list_products,
    list_sales_for_period,
    load_product,
    load_sale,
    record_expense,
    record_sale,
    search_customers,
    search_sales,
)
from shop_ledger.periods import determine_period
from shop_ledger.records import NewCustomer, NewExpense, NewProduct, NewSale

NOW = datetime(2026, 10, 18, 20, 0)


def make_app_config(tmp_path, **kwargs) -> AppConfig:
    return AppConfig(
        shop_name="Test Shop",
        currency="KSh",
        database=DatabaseConfig(engine="sqlite", path=tmp_path / "shop.sqlite"),
        **kwargs,
    )


def make_sale(**overrides) -> NewSale:
    values = {
        "item_name": "Bread",
        "quantity": 2,
        "price": 50.0,
        "date": datetime(2026, 10, 18, 9, 0),
    }
    values.update(overrides)
    return NewSale(**values)


@pytest.mark.parametrize(
    "overrides",
    [
        {"item_name": ""},
        {"item_name": "   "},
        {"quantity": 0},
        {"quantity": -1},
        {"quantity": 1.5},
        {"quantity": True},
        {"price": -0.01},
        {"price": float("nan")},
        {"price": float("inf")},
        {"discount": float("nan")},
        {"product_id": "P1"},
        {"customer_id": 0},
        {"discount": -5.0},
        {"date": "2026-10-18"},
    ],
)
def test_record_sale_rejects_invalid_sales(tmp_path, overrides):
    app_config = make_app_config(tmp_path)

    with pytest.raises(ValueError):
        record_sale(app_config, make_sale(**overrides))

    assert search_sales(app_config) == []


def test_record_sale_accepts_free_items(tmp_path):
    """A price of zero is allowed (giveaways, samples)."""
    app_config = make_app_config(tmp_path)

    sale = record_sale(app_config, make_sale(price=0.0))

    assert sale.total == 0.0


def test_edit_sale_recomputes_total(tmp_path):
    app_config = make_app_config(tmp_path)
    sale = record_sale(app_config, make_sale())

    edited = edit_sale(app_config, replace(sale, quantity=4))

    assert edited.total == pytest.approx(200.0)
    assert load_sale(app_config, sale.id).total == pytest.approx(200.0)


def test_edit_sale_validates_the_new_state(tmp_path):
    app_config = make_app_config(tmp_path)
    sale = record_sale(app_config, make_sale())

    with pytest.raises(ValueError):
        edit_sale(app_config, replace(sale, quantity=0))

    assert load_sale(app_config, sale.id).quantity == 2


def test_import_is_all_or_nothing(tmp_path):
    app_config = make_app_config(tmp_path)
    rows = [make_sale(), make_sale(item_name=""), make_sale()]

    with pytest.raises(ValueError, match="Row 2"):
        import_sales(app_config, rows)

    assert search_sales(app_config) == []
    assert import_sales(app_config, [make_sale(), make_sale()]) == 2


def test_import_expenses_validates_rows(tmp_path):
    app_config = make_app_config(tmp_path)
    rows = [
        NewExpense(name="Rent", category="Rent", amount=600.0, date=NOW),
        NewExpense(name="Fuel", category="", amount=50.0, date=NOW),
    ]

    with pytest.raises(ValueError, match="Row 2"):
        import_expenses(app_config, rows)


def test_record_expense_rejects_negative_amounts(tmp_path):
    app_config = make_app_config(tmp_path)

    with pytest.raises(ValueError):
        record_expense(
            app_config, NewExpense(name="Refund", category="Rent", amount=-1.0, date=NOW)
        )


def test_delete_and_clear_sales(tmp_path):
    app_config = make_app_config(tmp_path)
    sale = record_sale(app_config, make_sale())
    record_sale(app_config, make_sale())

    assert delete_sale(app_config, sale.id) is True
    assert delete_sale(app_config, sale.id) is False
    assert clear_all_sales(app_config) == 1


def test_search_and_period_listing(tmp_path):
    app_config = make_app_config(tmp_path)
    record_sale(app_config, make_sale(item_name="Milk", date=datetime(2026, 10, 18, 8, 0)))
    record_sale(app_config, make_sale(date=datetime(2026, 10, 1, 8, 0)))

    assert [s.item_name for s in search_sales(app_config, SalesFilter(item_contains="mil"))] == [
        "Milk"
    ]

    week = list_sales_for_period(app_config, determine_period("week", now=NOW))
    assert [s.item_name for s in week] == ["Milk"]

    everything = determine_period(None, now=NOW, to_date=NOW.date())
    assert len(list_sales_for_period(app_config, everything)) == 2


def test_compute_insights_from_stored_records(tmp_path):
    app_config = make_app_config(tmp_path, insights=InsightsSettings(top_products_limit=1))
    record_sale(app_config, make_sale(item_name="Milk", quantity=1, price=500.0, date=NOW))
    record_sale(app_config, make_sale(date=NOW - timedelta(days=45)))
    record_expense(
        app_config, NewExpense(name="Rent", category="Rent", amount=100.0, date=NOW)
    )

    insights = compute_insights(app_config, now=NOW)

    assert [p.name for p in insights.top_products] == ["Milk"]
    assert [s.name for s in insights.slow_moving_products] == ["Bread"]
    assert insights.trends.daily.current == pytest.approx(500.0)
    assert insights.expense_categories[0].value == pytest.approx(100.0)


def test_compute_reports(tmp_path):
    app_config = make_app_config(tmp_path)
    record_sale(app_config, make_sale(date=datetime(2026, 10, 18, 9, 0)))
    record_expense(
        app_config,
        NewExpense(name="Rent", category="Rent", amount=600.0, date=datetime(2026, 10, 2)),
    )

    month = determine_period("month", now=NOW)
    sales = compute_sales_report(app_config, month)
    expenses = compute_expense_report(app_config, month)

    assert sales.total_revenue == pytest.approx(100.0)
    assert sales.most_sold_item == "Bread"
    assert expenses.total_amount == pytest.approx(600.0)


@pytest.mark.parametrize("amount", [float("nan"), float("inf")])
def test_record_expense_rejects_non_finite_amounts(tmp_path, amount):
    app_config = make_app_config(tmp_path)

    with pytest.raises(ValueError, match="finite"):
        record_expense(
            app_config, NewExpense(name="Fuel", category="Transport", amount=amount, date=NOW)
        )


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"price": -1.0},
        {"price": float("nan")},
        {"cost_price": -0.5},
        {"stock": -1},
        {"stock": 2.5},
        {"min_stock": -3},
    ],
)
def test_add_product_rejects_invalid_products(tmp_path, overrides):
    app_config = make_app_config(tmp_path)
    values = {"name": "Sugar 1kg", "price": 180.0, "cost_price": 150.0, "stock": 10}
    values.update(overrides)

    with pytest.raises(ValueError):
        add_product(app_config, NewProduct(**values))

    assert list_products(app_config) == []


def test_product_lifecycle_and_low_stock(tmp_path):
    app_config = make_app_config(tmp_path)
    sugar = add_product(app_config, NewProduct(name="Sugar 1kg", price=180.0, stock=20))
    add_product(app_config, NewProduct(name="Salt", price=40.0, stock=1, min_stock=2))

    assert [p.name for p in list_low_stock_products(app_config)] == ["Salt"]

    edited = edit_product(app_config, replace(sugar, stock=5))
    assert edited.is_low_stock
    assert load_product(app_config, sugar.id).stock == 5
    assert [p.name for p in list_low_stock_products(app_config)] == ["Salt", "Sugar 1kg"]

    assert delete_product(app_config, sugar.id) is True
    assert delete_product(app_config, sugar.id) is False
    assert [p.name for p in list_products(app_config)] == ["Salt"]


def test_customers_are_validated_and_searchable(tmp_path):
    app_config = make_app_config(tmp_path)

    with pytest.raises(ValueError, match="email"):
        add_customer(app_config, NewCustomer(name="Amina", email="amina.example.com"))

    amina = add_customer(app_config, NewCustomer(name="Amina", phone="0712345678"))
    add_customer(app_config, NewCustomer(name="Baraka", phone="0798765432"))

    assert [c.name for c in search_customers(app_config, "2345")] == ["Amina"]
    assert [c.name for c in search_customers(app_config, "bar")] == ["Baraka"]

    edited = edit_customer(app_config, replace(amina, visit_count=3))
    assert edited.visit_count == 3

    with pytest.raises(ValueError):
        edit_customer(app_config, replace(amina, visit_count=-1))


def test_sales_must_reference_existing_catalog_records(tmp_path):
    app_config = make_app_config(tmp_path)
    product = add_product(app_config, NewProduct(name="Bread", price=50.0, stock=30))
    customer = add_customer(app_config, NewCustomer(name="Amina"))

    sale = record_sale(
        app_config, make_sale(product_id=product.id, customer_id=customer.id)
    )
    assert (sale.product_id, sale.customer_id) == (product.id, customer.id)

    with pytest.raises(ValueError, match="Unknown product id: 99"):
        record_sale(app_config, make_sale(product_id=99))
    with pytest.raises(ValueError, match="Unknown customer id: 42"):
        edit_sale(app_config, replace(sale, customer_id=42))
    with pytest.raises(ValueError, match="Row 2: Unknown product id"):
        import_sales(app_config, [make_sale(), make_sale(product_id=7)])

    assert len(search_sales(app_config)) == 1
