import csv
from datetime import datetime, timezone

import pytest

from shop_ledger.io import (
    export_expenses_csv,
    export_sales_csv,
    read_expenses_csv,
    read_sales_csv,
)
from shop_ledger.records import NewExpense, Sale


def write(tmp_path, name: str, content: str):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_read_sales_csv_normalizes_headers_and_ignores_total(tmp_path):
    path = write(
        tmp_path,
        "sales.csv",
        "ItemName, Quantity ,PRICE,total,Date,paymentMethod,notes\n"
        "Bread,2,50,999,2026-10-18T09:00:00,M-Pesa,\n"
        "Milk,1,60.5,1,2026-10-17 18:30,,fresh\n",
    )

    sales = read_sales_csv(path)

    assert [s.item_name for s in sales] == ["Bread", "Milk"]
    assert sales[0].quantity == 2
    assert sales[0].total == pytest.approx(100.0)
    assert sales[0].payment_method == "M-Pesa"
    assert sales[0].notes is None
    assert sales[1].payment_method == "Cash"
    assert sales[1].notes == "fresh"
    assert sales[1].date == datetime(2026, 10, 17, 18, 30)


def test_read_sales_csv_converts_timezone_aware_dates(tmp_path):
    path = write(
        tmp_path,
        "sales.csv",
        "item_name,quantity,price,date\nTea,1,10,2026-03-01T09:00:00Z\n",
    )

    sale = read_sales_csv(path)[0]

    expected = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert sale.date == expected
    assert sale.date.tzinfo is None


def test_read_sales_csv_missing_columns(tmp_path):
    path = write(tmp_path, "sales.csv", "item_name,price,date\nTea,10,2026-03-01\n")

    with pytest.raises(ValueError, match="quantity"):
        read_sales_csv(path)


@pytest.mark.parametrize(
    "row",
    [
        "Tea,1.5,10,2026-03-01",
        "Tea,two,10,2026-03-01",
        "Tea,1,ten,2026-03-01",
        "Tea,1,10,not a date",
    ],
)
def test_read_sales_csv_rejects_bad_values(tmp_path, row):
    path = write(tmp_path, "sales.csv", f"item_name,quantity,price,date\n{row}\n")

    with pytest.raises(ValueError):
        read_sales_csv(path)


def test_read_sales_csv_parses_catalog_ids_as_integers(tmp_path):
    path = write(
        tmp_path,
        "sales.csv",
        "item_name,quantity,price,date,productId,customerId\n"
        "Bread,1,50,2026-03-01,3,\n"
        "Milk,1,60,2026-03-01,,12\n",
    )

    sales = read_sales_csv(path)

    assert (sales[0].product_id, sales[0].customer_id) == (3, None)
    assert (sales[1].product_id, sales[1].customer_id) == (None, 12)


@pytest.mark.parametrize("value", ["P-3", "2.5"])
def test_read_sales_csv_rejects_non_integer_catalog_ids(tmp_path, value):
    path = write(
        tmp_path,
        "sales.csv",
        f"item_name,quantity,price,date,product_id\nBread,1,50,2026-03-01,{value}\n",
    )

    with pytest.raises(ValueError, match="product_id"):
        read_sales_csv(path)


def test_read_expenses_csv(tmp_path):
    path = write(
        tmp_path,
        "expenses.csv",
        "name,category,amount,date,note,receiptPhoto\n"
        "Rent,Rent,600,2026-10-01,,\n"
        "Power,Utilities,200.25,2026-10-05 08:00,token,img.png\n",
    )

    expenses = read_expenses_csv(path)

    assert [e.category for e in expenses] == ["Rent", "Utilities"]
    assert expenses[1].amount == pytest.approx(200.25)
    assert expenses[1].note == "token"
    assert expenses[1].receipt_photo == "img.png"
    assert expenses[0].date == datetime(2026, 10, 1)


def test_export_sales_csv_quotes_every_field(tmp_path):
    sales = [
        Sale(
            id=7,
            item_name='Bread "large", sliced',
            quantity=2,
            price=50.0,
            date=datetime(2026, 10, 18, 9, 0),
            notes="line1",
        )
    ]
    target = tmp_path / "out.csv"

    text = export_sales_csv(sales, target)

    assert target.read_text(encoding="utf-8") == text
    header = text.splitlines()[0]
    assert header.startswith('"id","item_name","quantity","price","total"')

    rows = list(csv.DictReader(text.splitlines()))
    assert rows[0]["item_name"] == 'Bread "large", sliced'
    assert float(rows[0]["total"]) == pytest.approx(100.0)
    assert rows[0]["date"] == "2026-10-18T09:00:00"


def test_exported_sales_can_be_read_back(tmp_path):
    sales = [
        Sale(id=1, item_name="Milk", quantity=3, price=60.0, date=datetime(2026, 10, 18, 9, 0))
    ]
    target = tmp_path / "sales.csv"
    export_sales_csv(sales, target)

    loaded = read_sales_csv(target)

    assert loaded[0].item_name == "Milk"
    assert loaded[0].total == pytest.approx(180.0)


def test_export_expenses_csv_without_path_returns_text():
    text = export_expenses_csv(
        [NewExpense(name="Rent", category="Rent", amount=600.0, date=datetime(2026, 10, 1))]
    )

    lines = text.splitlines()
    assert lines[0] == '"id","name","category","amount","date","note"'
    assert '"Rent"' in lines[1]
