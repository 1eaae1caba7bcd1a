# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for ShopLedger.

This module reads sales and expenses from CSV files and writes them back
out, so that a shop can move its ledger between tools or keep spreadsheet
backups.

Expected input formats
----------------------

Column names are case-insensitive and surrounding spaces are ignored.
Underscores are optional, so ``itemName`` and ``item_name`` are equivalent.

1) Sales
   -----
       item_name, quantity, price, date
   optional:
       id, payment_method, notes, discount, product_id, customer_id, photo

   Any ``total`` column is ignored: the total is always recomputed as
   ``quantity * price``.

2) Expenses
   --------
       name, category, amount, date
   optional:
       id, note, receipt_photo

Dates are parsed strictly. Timezone-aware values (e.g. "2025-03-01T09:00Z")
are converted to local time. Invalid dates or numbers raise a ValueError
with a clear message.

Output
------
``export_sales_csv`` and ``export_expenses_csv`` write every field quoted,
one record per line, dates as local ISO-8601 text.
"""

import csv
import os
from collections.abc import Sequence
from datetime import datetime
from typing import Optional, Union

import pandas as pd

from .engine import local_naive
from .records import DEFAULT_PAYMENT_METHOD, NewExpense, NewSale, Sale

PathLike = Union[str, "os.PathLike[str]"]

SALE_EXPORT_COLUMNS = [
    "id",
    "item_name",
    "quantity",
    "price",
    "total",
    "payment_method",
    "date",
    "notes",
    "discount",
    "product_id",
    "customer_id",
]
EXPENSE_EXPORT_COLUMNS = ["id", "name", "category", "amount", "date", "note"]

_COLUMN_ALIASES = {
    "itemname": "item_name",
    "item": "item_name",
    "paymentmethod": "payment_method",
    "productid": "product_id",
    "customerid": "customer_id",
    "receiptphoto": "receipt_photo",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    renamed = {}
    for column in df.columns:
        key = str(column).lower().strip()
        renamed[column] = _COLUMN_ALIASES.get(key.replace("_", ""), key)
    return df.rename(columns=renamed)


def _require(df: pd.DataFrame, required: set[str], kind: str) -> None:
    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid {kind} CSV structure: missing column(s) "
            f"{', '.join(sorted(missing))}. Expected at least: "
            f"{', '.join(sorted(required))} (column names are case-insensitive)."
        )


def _parse_dates(series: pd.Series) -> list[datetime]:
    try:
        parsed = [pd.Timestamp(value) for value in series]
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid values in 'date' column.") from exc
    if any(pd.isna(ts) for ts in parsed):
        raise ValueError("Invalid values in 'date' column.")
    return [local_naive(ts.to_pydatetime()) for ts in parsed]


def _parse_numbers(df: pd.DataFrame, column: str) -> pd.Series:
    values = pd.to_numeric(df[column], errors="coerce")
    if values.isna().any():
        raise ValueError(f"Invalid numeric values in '{column}' column.")
    return values


def _optional_str(row: pd.Series, column: str) -> Optional[str]:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _optional_int(row: pd.Series, column: str) -> Optional[int]:
    value = _optional_float(row, column)
    if value is None:
        return None
    if not value.is_integer():
        raise ValueError(f"Invalid integer value in '{column}' column: {value!r}.")
    return int(value)


def _optional_float(row: pd.Series, column: str) -> Optional[float]:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid numeric value in '{column}' column: {value!r}.") from exc


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def read_sales_csv(path: PathLike) -> list[NewSale]:
    """
    Read sales from a CSV file.

    Parameters
    ----------
    path:
        Path to the CSV file.

    Returns
    -------
    list[NewSale]
        One record per CSV row, in file order. Totals are derived from
        quantity and price; any ``total`` column in the file is ignored.

    Raises
    ------
    ValueError
        If required columns are missing, a quantity is not an integer, or
        numeric/date parsing fails.
    """
    df = _normalize_columns(pd.read_csv(path, dtype=str, keep_default_na=True))
    _require(df, {"item_name", "quantity", "price", "date"}, "sales")

    quantities = _parse_numbers(df, "quantity")
    if not (quantities == quantities.round()).all():
        raise ValueError("Invalid values in 'quantity' column: quantities must be integers.")
    prices = _parse_numbers(df, "price")
    dates = _parse_dates(df["date"])

    sales: list[NewSale] = []
    for position, (_, row) in enumerate(df.iterrows()):
        sales.append(
            NewSale(
                item_name=_optional_str(row, "item_name") or "",
                quantity=int(quantities.iloc[position]),
                price=float(prices.iloc[position]),
                date=dates[position],
                payment_method=_optional_str(row, "payment_method") or DEFAULT_PAYMENT_METHOD,
                photo=_optional_str(row, "photo"),
                notes=_optional_str(row, "notes"),
                discount=_optional_float(row, "discount"),
                product_id=_optional_int(row, "product_id"),
                customer_id=_optional_int(row, "customer_id"),
            )
        )
    return sales


def read_expenses_csv(path: PathLike) -> list[NewExpense]:
    """
    Read expenses from a CSV file.

    Raises
    ------
    ValueError
        If required columns are missing or numeric/date parsing fails.
    """
    df = _normalize_columns(pd.read_csv(path, dtype=str, keep_default_na=True))
    _require(df, {"name", "category", "amount", "date"}, "expenses")

    amounts = _parse_numbers(df, "amount")
    dates = _parse_dates(df["date"])

    expenses: list[NewExpense] = []
    for position, (_, row) in enumerate(df.iterrows()):
        expenses.append(
            NewExpense(
                name=_optional_str(row, "name") or "",
                category=_optional_str(row, "category") or "",
                amount=float(amounts.iloc[position]),
                date=dates[position],
                note=_optional_str(row, "note"),
                receipt_photo=_optional_str(row, "receipt_photo"),
            )
        )
    return expenses


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def sales_to_frame(sales: Sequence[NewSale]) -> pd.DataFrame:
    """Tabular view of sales with the export column layout."""
    rows = [
        {
            "id": sale.id if isinstance(sale, Sale) else None,
            "item_name": sale.item_name,
            "quantity": sale.quantity,
            "price": sale.price,
            "total": sale.total,
            "payment_method": sale.payment_method,
            "date": sale.date.isoformat(),
            "notes": sale.notes,
            "discount": sale.discount,
            "product_id": sale.product_id,
            "customer_id": sale.customer_id,
        }
        for sale in sales
    ]
    return pd.DataFrame(rows, columns=SALE_EXPORT_COLUMNS)


def expenses_to_frame(expenses: Sequence[NewExpense]) -> pd.DataFrame:
    """Tabular view of expenses with the export column layout."""
    rows = [
        {
            "id": getattr(expense, "id", None),
            "name": expense.name,
            "category": expense.category,
            "amount": expense.amount,
            "date": expense.date.isoformat(),
            "note": expense.note,
        }
        for expense in expenses
    ]
    return pd.DataFrame(rows, columns=EXPENSE_EXPORT_COLUMNS)


def export_sales_csv(sales: Sequence[NewSale], path: Optional[PathLike] = None) -> str:
    """
    Serialize sales as CSV, every field quoted.

    When ``path`` is given the CSV is also written to that file.
    """
    text = sales_to_frame(sales).to_csv(index=False, quoting=csv.QUOTE_ALL)
    if path is not None:
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    return text


def export_expenses_csv(
    expenses: Sequence[NewExpense], path: Optional[PathLike] = None
) -> str:
    """Serialize expenses as CSV, every field quoted."""
    text = expenses_to_frame(expenses).to_csv(index=False, quoting=csv.QUOTE_ALL)
    if path is not None:
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    return text
