# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for ShopLedger.

This module provides all low-level accessors for the SQLite database that
stores the transactions of one shop. It is responsible for:

- Initializing the database schema.
- Inserting sales and expenses, one by one or in bulk (CSV imports).
- Replacing, deleting and bulk-clearing records.
- Loading records, optionally restricted to a date range, and searching them.
- Loading a consistent (sales, expenses) snapshot for the statistics engine.
- Maintaining the product and customer catalogs, and listing low-stock
  products.

One database file holds exactly one shop. Data is never merged across files.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

1) sales

   - id              INTEGER PRIMARY KEY AUTOINCREMENT
   - item_name       TEXT    NOT NULL
   - quantity        INTEGER NOT NULL
   - price           REAL    NOT NULL  -- unit price, stored as entered
   - total_cents     INTEGER NOT NULL  -- quantity * price, recomputed on write
   - payment_method  TEXT    NOT NULL
   - date            TEXT    NOT NULL  -- local ISO datetime
   - photo           TEXT
   - notes           TEXT
   - discount        REAL
   - product_id      INTEGER           -- products.id, optional
   - customer_id     INTEGER           -- customers.id, optional
   - created_at      TEXT    NOT NULL  -- UTC ISO datetime
   - updated_at      TEXT              -- UTC ISO datetime of last replacement

   ``total_cents`` is a convenience column for SQL-side sums and exports. It
   is always written from ``quantity * price`` and never read back: the
   ``Sale.total`` property is the only source of truth.

2) expenses

   - id              INTEGER PRIMARY KEY AUTOINCREMENT
   - name            TEXT    NOT NULL
   - category        TEXT    NOT NULL
   - amount          REAL    NOT NULL
   - date            TEXT    NOT NULL  -- local ISO datetime
   - note            TEXT
   - receipt_photo   TEXT
   - created_at      TEXT    NOT NULL
   - updated_at      TEXT

3) products

   - id              INTEGER PRIMARY KEY AUTOINCREMENT
   - name            TEXT    NOT NULL
   - price           REAL    NOT NULL  -- selling price
   - cost_price      REAL    NOT NULL
   - stock           INTEGER NOT NULL
   - min_stock       INTEGER NOT NULL  -- low-stock alert threshold
   - barcode         TEXT
   - category        TEXT
   - created_at      TEXT    NOT NULL
   - updated_at      TEXT

4) customers

   - id              INTEGER PRIMARY KEY AUTOINCREMENT
   - name            TEXT    NOT NULL
   - phone           TEXT
   - email           TEXT
   - total_spent     REAL    NOT NULL
   - visit_count     INTEGER NOT NULL
   - notes           TEXT
   - created_at      TEXT    NOT NULL
   - updated_at      TEXT

------------------------------------------------------------------------------
SQLite Notes
------------------------------------------------------------------------------

- Transaction dates are stored as naive local ISO-8601 text, so that
  lexicographic order equals chronological order.
- Prices and amounts are stored as REAL, exactly as entered. Only the
  derived ``total_cents`` column is rounded to cents.
- Record metadata timestamps (created_at, updated_at) are stored in UTC.
- Each public function opens its own connection and closes it before
  returning.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from .records import (
    Customer,
    Expense,
    NewCustomer,
    NewExpense,
    NewProduct,
    NewSale,
    Product,
    Sale,
)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for ShopLedger.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file of the shop.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class SalesFilter:
    """
    Filters used to search sales. Date bounds are inclusive.

    Attributes
    ----------
    start, end:
        Inclusive datetime bounds on the sale date.
    item_contains:
        Case-insensitive substring search on the item name.
    payment_method:
        Exact payment method match.
    limit, offset:
        Optional pagination.
    """

    start: datetime | None = None
    end: datetime | None = None
    item_contains: str | None = None
    payment_method: str | None = None
    limit: int | None = None
    offset: int = 0


@dataclass(frozen=True)
class ExpensesFilter:
    """Filters used to search expenses. Date bounds are inclusive."""

    start: datetime | None = None
    end: datetime | None = None
    name_contains: str | None = None
    category: str | None = None
    limit: int | None = None
    offset: int = 0


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_SALE_COLUMNS = (
    "id, item_name, quantity, price, payment_method, date, photo, notes, "
    "discount, product_id, customer_id, created_at, updated_at"
)
_EXPENSE_COLUMNS = (
    "id, name, category, amount, date, note, receipt_photo, created_at, updated_at"
)


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """Create the ledger tables (with their date indexes) and the catalog tables."""
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS sales (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            item_name       TEXT    NOT NULL,
            quantity        INTEGER NOT NULL,
            price           REAL    NOT NULL,
            total_cents     INTEGER NOT NULL,
            payment_method  TEXT    NOT NULL,
            date            TEXT    NOT NULL,
            photo           TEXT,
            notes           TEXT,
            discount        REAL,
            product_id      INTEGER,
            customer_id     INTEGER,
            created_at      TEXT    NOT NULL,
            updated_at      TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_sales_date ON sales (date);

        CREATE TABLE IF NOT EXISTS expenses (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            name            TEXT    NOT NULL,
            category        TEXT    NOT NULL,
            amount          REAL    NOT NULL,
            date            TEXT    NOT NULL,
            note            TEXT,
            receipt_photo   TEXT,
            created_at      TEXT    NOT NULL,
            updated_at      TEXT
        );

        CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses (date);

        CREATE TABLE IF NOT EXISTS products (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            name            TEXT    NOT NULL,
            price           REAL    NOT NULL,
            cost_price      REAL    NOT NULL,
            stock           INTEGER NOT NULL,
            min_stock       INTEGER NOT NULL,
            barcode         TEXT,
            category        TEXT,
            created_at      TEXT    NOT NULL,
            updated_at      TEXT
        );

        CREATE TABLE IF NOT EXISTS customers (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            name            TEXT    NOT NULL,
            phone           TEXT,
            email           TEXT,
            total_spent     REAL    NOT NULL,
            visit_count     INTEGER NOT NULL,
            notes           TEXT,
            created_at      TEXT    NOT NULL,
            updated_at      TEXT
        );
        """
    )
    conn.commit()


def _to_cents(amount: float) -> int:
    return int(round(amount * 100))


def _optional_float(value: float | None) -> float | None:
    return None if value is None else float(value)


def _to_iso_datetime(value: datetime) -> str:
    """Serialize a transaction date as naive local ISO text."""
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value.isoformat(timespec="microseconds")


def _parse_datetime(value: str | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromisoformat(value)


def _now_utc_iso() -> str:
    """Return the current UTC timestamp as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _sale_params(sale: NewSale) -> tuple:
    return (
        sale.item_name,
        int(sale.quantity),
        float(sale.price),
        _to_cents(sale.total),
        sale.payment_method,
        _to_iso_datetime(sale.date),
        sale.photo,
        sale.notes,
        _optional_float(sale.discount),
        sale.product_id,
        sale.customer_id,
    )


def _expense_params(expense: NewExpense) -> tuple:
    return (
        expense.name,
        expense.category,
        float(expense.amount),
        _to_iso_datetime(expense.date),
        expense.note,
        expense.receipt_photo,
    )


def _row_to_sale(row: tuple) -> Sale:
    (
        sale_id,
        item_name,
        quantity,
        price,
        payment_method,
        date_raw,
        photo,
        notes,
        discount,
        product_id,
        customer_id,
        created_at,
        updated_at,
    ) = row
    return Sale(
        id=int(sale_id),
        item_name=item_name,
        quantity=int(quantity),
        price=float(price),
        date=datetime.fromisoformat(date_raw),
        payment_method=payment_method,
        photo=photo,
        notes=notes,
        discount=_optional_float(discount),
        product_id=product_id,
        customer_id=customer_id,
        created_at=_parse_datetime(created_at),
        updated_at=_parse_datetime(updated_at),
    )


def _row_to_expense(row: tuple) -> Expense:
    (
        expense_id,
        name,
        category,
        amount,
        date_raw,
        note,
        receipt_photo,
        created_at,
        updated_at,
    ) = row
    return Expense(
        id=int(expense_id),
        name=name,
        category=category,
        amount=float(amount),
        date=datetime.fromisoformat(date_raw),
        note=note,
        receipt_photo=receipt_photo,
        created_at=_parse_datetime(created_at),
        updated_at=_parse_datetime(updated_at),
    )


def _date_clauses(
    start: datetime | None,
    end: datetime | None,
    clauses: list[str],
    params: list[object],
) -> None:
    if start is not None:
        clauses.append("date >= ?")
        params.append(_to_iso_datetime(start))
    if end is not None:
        clauses.append("date <= ?")
        params.append(_to_iso_datetime(end))


def _paginate(sql: str, params: list[object], limit: int | None, offset: int) -> str:
    if limit is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([int(limit), int(offset)])
    elif offset:
        sql += " LIMIT -1 OFFSET ?"
        params.append(int(offset))
    return sql


def _fetch_sales(conn: sqlite3.Connection, where: str, params: list[object]) -> list[Sale]:
    cur = conn.execute(f"SELECT {_SALE_COLUMNS} FROM sales {where}", params)
    return [_row_to_sale(row) for row in cur.fetchall()]


def _fetch_expenses(
    conn: sqlite3.Connection, where: str, params: list[object]
) -> list[Expense]:
    cur = conn.execute(f"SELECT {_EXPENSE_COLUMNS} FROM expenses {where}", params)
    return [_row_to_expense(row) for row in cur.fetchall()]


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Create the database file and schema if needed.

    This function is idempotent and safe to call before every operation.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def has_records(cfg: DatabaseConfig) -> bool:
    """Return True if the database contains at least one sale or expense."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            "SELECT EXISTS (SELECT 1 FROM sales) OR EXISTS (SELECT 1 FROM expenses);"
        )
        (flag,) = cur.fetchone()
    finally:
        conn.close()

    return bool(flag)


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


def get_sale_by_id(cfg: DatabaseConfig, sale_id: int) -> Sale | None:
    """Load a single sale by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        sales = _fetch_sales(conn, "WHERE id = ?", [sale_id])
    finally:
        conn.close()

    return sales[0] if sales else None


def insert_sale(cfg: DatabaseConfig, new_sale: NewSale) -> Sale:
    """
    Insert a new sale and return it with its assigned id.

    The stored total is recomputed from quantity and price.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO sales (
                item_name, quantity, price, total_cents, payment_method,
                date, photo, notes, discount, product_id, customer_id,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            (*_sale_params(new_sale), _now_utc_iso()),
        )
        sale_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    result = get_sale_by_id(cfg, sale_id)
    if result is None:
        msg = f"Sale #{sale_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def insert_sales(cfg: DatabaseConfig, new_sales: Iterable[NewSale]) -> int:
    """
    Insert many sales in a single transaction.

    Returns
    -------
    int
        Number of rows inserted.
    """
    init_database(cfg)

    created_at = _now_utc_iso()
    rows = [(*_sale_params(s), created_at) for s in new_sales]

    conn = _connect(cfg)
    try:
        conn.executemany(
            """
            INSERT INTO sales (
                item_name, quantity, price, total_cents, payment_method,
                date, photo, notes, discount, product_id, customer_id,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            rows,
        )
        conn.commit()
    finally:
        conn.close()

    return len(rows)


def update_sale(cfg: DatabaseConfig, sale: Sale) -> Sale:
    """
    Replace every business field of an existing sale.

    This is a full-record replacement: the caller supplies the complete next
    state. The stored total is recomputed from the new quantity and price.

    Raises
    ------
    ValueError
        If no sale with ``sale.id`` exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE sales
               SET item_name = ?,
                   quantity = ?,
                   price = ?,
                   total_cents = ?,
                   payment_method = ?,
                   date = ?,
                   photo = ?,
                   notes = ?,
                   discount = ?,
                   product_id = ?,
                   customer_id = ?,
                   updated_at = ?
             WHERE id = ?;
            """,
            (*_sale_params(sale), _now_utc_iso(), sale.id),
        )
        updated = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if updated == 0:
        raise ValueError(f"Sale #{sale.id} not found.")

    result = get_sale_by_id(cfg, sale.id)
    if result is None:
        msg = f"Sale #{sale.id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_sale(cfg: DatabaseConfig, sale_id: int) -> bool:
    """Delete a sale. Returns False if it did not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM sales WHERE id = ?;", (sale_id,))
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    return deleted > 0


def clear_sales(cfg: DatabaseConfig) -> int:
    """Delete every sale. Returns the number of rows removed."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM sales;")
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    return deleted


def load_sales(
    cfg: DatabaseConfig,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Sale]:
    """
    Load sales, newest first, optionally restricted to ``[start, end]``.
    """
    return search_sales(cfg, SalesFilter(start=start, end=end))


def search_sales(cfg: DatabaseConfig, filters: SalesFilter) -> list[Sale]:
    """
    Search sales using a SalesFilter. Results are ordered newest first.
    """
    init_database(cfg)

    clauses: list[str] = []
    params: list[object] = []
    _date_clauses(filters.start, filters.end, clauses, params)

    if filters.item_contains:
        clauses.append("LOWER(item_name) LIKE ?")
        params.append(f"%{filters.item_contains.lower()}%")
    if filters.payment_method:
        clauses.append("payment_method = ?")
        params.append(filters.payment_method)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    where = _paginate(f"{where} ORDER BY date DESC, id DESC", params, filters.limit, filters.offset)

    conn = _connect(cfg)
    try:
        return _fetch_sales(conn, where, params)
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def get_expense_by_id(cfg: DatabaseConfig, expense_id: int) -> Expense | None:
    """Load a single expense by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        expenses = _fetch_expenses(conn, "WHERE id = ?", [expense_id])
    finally:
        conn.close()

    return expenses[0] if expenses else None


def insert_expense(cfg: DatabaseConfig, new_expense: NewExpense) -> Expense:
    """Insert a new expense and return it with its assigned id."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO expenses (
                name, category, amount, date, note, receipt_photo,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            (*_expense_params(new_expense), _now_utc_iso()),
        )
        expense_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    result = get_expense_by_id(cfg, expense_id)
    if result is None:
        msg = f"Expense #{expense_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def insert_expenses(cfg: DatabaseConfig, new_expenses: Iterable[NewExpense]) -> int:
    """Insert many expenses in a single transaction. Returns the row count."""
    init_database(cfg)

    created_at = _now_utc_iso()
    rows = [(*_expense_params(e), created_at) for e in new_expenses]

    conn = _connect(cfg)
    try:
        conn.executemany(
            """
            INSERT INTO expenses (
                name, category, amount, date, note, receipt_photo,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            rows,
        )
        conn.commit()
    finally:
        conn.close()

    return len(rows)


def update_expense(cfg: DatabaseConfig, expense: Expense) -> Expense:
    """
    Replace every business field of an existing expense.

    Raises
    ------
    ValueError
        If no expense with ``expense.id`` exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE expenses
               SET name = ?,
                   category = ?,
                   amount = ?,
                   date = ?,
                   note = ?,
                   receipt_photo = ?,
                   updated_at = ?
             WHERE id = ?;
            """,
            (*_expense_params(expense), _now_utc_iso(), expense.id),
        )
        updated = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if updated == 0:
        raise ValueError(f"Expense #{expense.id} not found.")

    result = get_expense_by_id(cfg, expense.id)
    if result is None:
        msg = f"Expense #{expense.id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_expense(cfg: DatabaseConfig, expense_id: int) -> bool:
    """Delete an expense. Returns False if it did not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM expenses WHERE id = ?;", (expense_id,))
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    return deleted > 0


def clear_expenses(cfg: DatabaseConfig) -> int:
    """Delete every expense. Returns the number of rows removed."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM expenses;")
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    return deleted


def load_expenses(
    cfg: DatabaseConfig,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Expense]:
    """Load expenses, newest first, optionally restricted to ``[start, end]``."""
    return search_expenses(cfg, ExpensesFilter(start=start, end=end))


def search_expenses(cfg: DatabaseConfig, filters: ExpensesFilter) -> list[Expense]:
    """Search expenses using an ExpensesFilter. Results are ordered newest first."""
    init_database(cfg)

    clauses: list[str] = []
    params: list[object] = []
    _date_clauses(filters.start, filters.end, clauses, params)

    if filters.name_contains:
        clauses.append("LOWER(name) LIKE ?")
        params.append(f"%{filters.name_contains.lower()}%")
    if filters.category:
        clauses.append("category = ?")
        params.append(filters.category)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    where = _paginate(f"{where} ORDER BY date DESC, id DESC", params, filters.limit, filters.offset)

    conn = _connect(cfg)
    try:
        return _fetch_expenses(conn, where, params)
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


def load_snapshot(cfg: DatabaseConfig) -> tuple[list[Sale], list[Expense]]:
    """
    Load every sale and every expense within a single read transaction.

    The returned pair is consistent: no write can land between the two reads.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        conn.execute("BEGIN;")
        sales = _fetch_sales(conn, "ORDER BY date DESC, id DESC", [])
        expenses = _fetch_expenses(conn, "ORDER BY date DESC, id DESC", [])
        conn.commit()
    finally:
        conn.close()

    return sales, expenses


# ---------------------------------------------------------------------------
# Catalog: products
# ---------------------------------------------------------------------------

_PRODUCT_COLUMNS = (
    "id, name, price, cost_price, stock, min_stock, barcode, category, "
    "created_at, updated_at"
)


def _product_params(product: NewProduct) -> tuple:
    return (
        product.name,
        float(product.price),
        float(product.cost_price),
        int(product.stock),
        int(product.min_stock),
        product.barcode,
        product.category,
    )


def _row_to_product(row: tuple) -> Product:
    (
        product_id,
        name,
        price,
        cost_price,
        stock,
        min_stock,
        barcode,
        category,
        created_at,
        updated_at,
    ) = row
    return Product(
        id=int(product_id),
        name=name,
        price=float(price),
        cost_price=float(cost_price),
        stock=int(stock),
        min_stock=int(min_stock),
        barcode=barcode,
        category=category,
        created_at=_parse_datetime(created_at),
        updated_at=_parse_datetime(updated_at),
    )


def _fetch_products(
    conn: sqlite3.Connection, where: str, params: list[object]
) -> list[Product]:
    cur = conn.execute(f"SELECT {_PRODUCT_COLUMNS} FROM products {where}", params)
    return [_row_to_product(row) for row in cur.fetchall()]


def get_product_by_id(cfg: DatabaseConfig, product_id: int) -> Product | None:
    """Load a single product by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        products = _fetch_products(conn, "WHERE id = ?", [product_id])
    finally:
        conn.close()

    return products[0] if products else None


def insert_product(cfg: DatabaseConfig, new_product: NewProduct) -> Product:
    """Insert a new product and return it with its assigned id."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO products (
                name, price, cost_price, stock, min_stock, barcode, category,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            (*_product_params(new_product), _now_utc_iso()),
        )
        product_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    result = get_product_by_id(cfg, product_id)
    if result is None:
        msg = f"Product #{product_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_product(cfg: DatabaseConfig, product: Product) -> Product:
    """
    Replace every field of an existing product (full-record replacement).

    Raises
    ------
    ValueError
        If no product with ``product.id`` exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE products
               SET name = ?,
                   price = ?,
                   cost_price = ?,
                   stock = ?,
                   min_stock = ?,
                   barcode = ?,
                   category = ?,
                   updated_at = ?
             WHERE id = ?;
            """,
            (*_product_params(product), _now_utc_iso(), product.id),
        )
        updated = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if updated == 0:
        raise ValueError(f"Product #{product.id} not found.")

    result = get_product_by_id(cfg, product.id)
    if result is None:
        msg = f"Product #{product.id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_product(cfg: DatabaseConfig, product_id: int) -> bool:
    """Delete a product. Returns False if it did not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM products WHERE id = ?;", (product_id,))
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    return deleted > 0


def list_products(
    cfg: DatabaseConfig,
    name_contains: str | None = None,
    category: str | None = None,
) -> list[Product]:
    """List products by name, optionally filtered by name substring and category."""
    init_database(cfg)

    clauses: list[str] = []
    params: list[object] = []
    if name_contains:
        clauses.append("(LOWER(name) LIKE ? OR barcode = ?)")
        params.extend([f"%{name_contains.lower()}%", name_contains])
    if category:
        clauses.append("category = ?")
        params.append(category)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    conn = _connect(cfg)
    try:
        return _fetch_products(conn, f"{where} ORDER BY LOWER(name), id", params)
    finally:
        conn.close()


def list_low_stock_products(cfg: DatabaseConfig) -> list[Product]:
    """
    Products whose stock is at or below their alert threshold.

    The most urgent product (largest shortfall below its threshold) comes
    first.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        return _fetch_products(
            conn,
            "WHERE stock <= min_stock ORDER BY stock - min_stock, LOWER(name), id",
            [],
        )
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Catalog: customers
# ---------------------------------------------------------------------------

_CUSTOMER_COLUMNS = (
    "id, name, phone, email, total_spent, visit_count, notes, created_at, updated_at"
)


def _customer_params(customer: NewCustomer) -> tuple:
    return (
        customer.name,
        customer.phone,
        customer.email,
        float(customer.total_spent),
        int(customer.visit_count),
        customer.notes,
    )


def _row_to_customer(row: tuple) -> Customer:
    (
        customer_id,
        name,
        phone,
        email,
        total_spent,
        visit_count,
        notes,
        created_at,
        updated_at,
    ) = row
    return Customer(
        id=int(customer_id),
        name=name,
        phone=phone,
        email=email,
        total_spent=float(total_spent),
        visit_count=int(visit_count),
        notes=notes,
        created_at=_parse_datetime(created_at),
        updated_at=_parse_datetime(updated_at),
    )


def _fetch_customers(
    conn: sqlite3.Connection, where: str, params: list[object]
) -> list[Customer]:
    cur = conn.execute(f"SELECT {_CUSTOMER_COLUMNS} FROM customers {where}", params)
    return [_row_to_customer(row) for row in cur.fetchall()]


def get_customer_by_id(cfg: DatabaseConfig, customer_id: int) -> Customer | None:
    """Load a single customer by id, or None if it does not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        customers = _fetch_customers(conn, "WHERE id = ?", [customer_id])
    finally:
        conn.close()

    return customers[0] if customers else None


def insert_customer(cfg: DatabaseConfig, new_customer: NewCustomer) -> Customer:
    """Insert a new customer and return it with its assigned id."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            INSERT INTO customers (
                name, phone, email, total_spent, visit_count, notes,
                created_at, updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            (*_customer_params(new_customer), _now_utc_iso()),
        )
        customer_id = cur.lastrowid
        conn.commit()
    finally:
        conn.close()

    result = get_customer_by_id(cfg, customer_id)
    if result is None:
        msg = f"Customer #{customer_id} was just inserted but could not be reloaded."
        raise RuntimeError(msg)
    return result


def update_customer(cfg: DatabaseConfig, customer: Customer) -> Customer:
    """
    Replace every field of an existing customer (full-record replacement).

    Raises
    ------
    ValueError
        If no customer with ``customer.id`` exists.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute(
            """
            UPDATE customers
               SET name = ?,
                   phone = ?,
                   email = ?,
                   total_spent = ?,
                   visit_count = ?,
                   notes = ?,
                   updated_at = ?
             WHERE id = ?;
            """,
            (*_customer_params(customer), _now_utc_iso(), customer.id),
        )
        updated = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    if updated == 0:
        raise ValueError(f"Customer #{customer.id} not found.")

    result = get_customer_by_id(cfg, customer.id)
    if result is None:
        msg = f"Customer #{customer.id} was updated but could not be reloaded."
        raise RuntimeError(msg)
    return result


def delete_customer(cfg: DatabaseConfig, customer_id: int) -> bool:
    """Delete a customer. Returns False if it did not exist."""
    init_database(cfg)

    conn = _connect(cfg)
    try:
        cur = conn.execute("DELETE FROM customers WHERE id = ?;", (customer_id,))
        deleted = cur.rowcount
        conn.commit()
    finally:
        conn.close()

    return deleted > 0


def search_customers(cfg: DatabaseConfig, term: str | None = None) -> list[Customer]:
    """Customers by name; ``term`` matches the name (case-insensitive) or the phone."""
    init_database(cfg)

    where = ""
    params: list[object] = []
    if term:
        where = "WHERE LOWER(name) LIKE ? OR phone LIKE ?"
        params = [f"%{term.lower()}%", f"%{term}%"]

    conn = _connect(cfg)
    try:
        return _fetch_customers(conn, f"{where} ORDER BY LOWER(name), id", params)
    finally:
        conn.close()
