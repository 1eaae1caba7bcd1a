# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
High-level services for the shop ledger.

This module provides the application-facing API around the database layer
(`db.py`) and the statistics engine (`engine.py`). It is meant to be used by
the CLI and any other front-end, and offers:

- validated creation, full replacement, deletion and bulk clearing of sales
  and expenses,
- listing and searching of records,
- the product and customer catalogs (with the low-stock listing); sales may
  refer to catalog records by id, and those ids are checked on every write,
- consistent snapshot loading and insights / report computation.

Write rules
-----------
- Every sale written goes through ``validate_sale``: the item name must be
  non-empty, the quantity a positive integer and the price non-negative.
- A sale's total is never accepted from the caller: it is derived from
  quantity and price, and the stored total is recomputed on every write.
- Updates are full-record replacements. Callers build the complete next
  state (typically with ``dataclasses.replace``) and pass it here.
"""

import math
from collections.abc import Iterable
from datetime import datetime
from typing import Optional

import structlog

from .config import AppConfig
from .db import (
    DatabaseConfig,
    ExpensesFilter,
    SalesFilter,
)
from .db import clear_expenses as _db_clear_expenses
from .db import clear_sales as _db_clear_sales
from .db import delete_customer as _db_delete_customer
from .db import delete_expense as _db_delete_expense
from .db import delete_product as _db_delete_product
from .db import delete_sale as _db_delete_sale
from .db import get_customer_by_id as _db_get_customer_by_id
from .db import get_expense_by_id as _db_get_expense_by_id
from .db import get_product_by_id as _db_get_product_by_id
from .db import get_sale_by_id as _db_get_sale_by_id
from .db import insert_customer as _db_insert_customer
from .db import insert_expense as _db_insert_expense
from .db import insert_expenses as _db_insert_expenses
from .db import insert_product as _db_insert_product
from .db import insert_sale as _db_insert_sale
from .db import insert_sales as _db_insert_sales
from .db import list_low_stock_products as _db_list_low_stock_products
from .db import list_products as _db_list_products
from .db import load_expenses as _db_load_expenses
from .db import load_sales as _db_load_sales
from .db import load_snapshot as _db_load_snapshot
from .db import search_customers as _db_search_customers
from .db import search_expenses as _db_search_expenses
from .db import search_sales as _db_search_sales
from .db import update_customer as _db_update_customer
from .db import update_expense as _db_update_expense
from .db import update_product as _db_update_product
from .db import update_sale as _db_update_sale
from .engine import Insights, build_insights
from .periods import Period
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
from .reports import ExpenseReport, SalesReport, expense_report, sales_report

logger = structlog.get_logger(__name__)


def _get_db_config(app_config: AppConfig) -> DatabaseConfig:
    """Convenience helper to access the database configuration."""
    return app_config.database


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _check_money(label: str, value: object) -> None:
    """Money values must be finite, non-negative numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number, got {value!r}.")
    if not math.isfinite(value):
        raise ValueError(f"{label} must be a finite number, got {value!r}.")
    if value < 0:
        raise ValueError(f"{label} cannot be negative, got {value}.")


def _check_count(label: str, value: object, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {value!r}.")
    if value < minimum:
        raise ValueError(f"{label} must be at least {minimum}, got {value}.")


def _check_name(label: str, value: Optional[str]) -> None:
    if not value or not value.strip():
        raise ValueError(f"{label} cannot be empty.")


def validate_sale(sale: NewSale) -> None:
    """
    Check the business rules of a sale before it is written.

    Raises
    ------
    ValueError
        If the item name is empty, the quantity is not a positive integer,
        or the price (or discount) is negative or not a finite number.
    """
    _check_name("Sale item name", sale.item_name)
    if isinstance(sale.quantity, bool) or not isinstance(sale.quantity, int):
        raise ValueError(f"Sale quantity must be an integer, got {sale.quantity!r}.")
    if sale.quantity <= 0:
        raise ValueError(f"Sale quantity must be positive, got {sale.quantity}.")
    _check_money("Sale price", sale.price)
    if sale.discount is not None:
        _check_money("Sale discount", sale.discount)
    if not isinstance(sale.date, datetime):
        raise ValueError(f"Sale date must be a datetime, got {sale.date!r}.")
    if sale.product_id is not None:
        _check_count("Sale product id", sale.product_id, 1)
    if sale.customer_id is not None:
        _check_count("Sale customer id", sale.customer_id, 1)


def validate_expense(expense: NewExpense) -> None:
    """
    Check the business rules of an expense before it is written.

    Raises
    ------
    ValueError
        If the name or category is empty or the amount is negative or not a
        finite number.
    """
    _check_name("Expense name", expense.name)
    _check_name("Expense category", expense.category)
    _check_money("Expense amount", expense.amount)
    if not isinstance(expense.date, datetime):
        raise ValueError(f"Expense date must be a datetime, got {expense.date!r}.")


def validate_product(product: NewProduct) -> None:
    """
    Check the business rules of a catalog product.

    Raises
    ------
    ValueError
        If the name is empty, a price is negative or not finite, or the
        stock / alert threshold is not a non-negative integer.
    """
    _check_name("Product name", product.name)
    _check_money("Product price", product.price)
    _check_money("Product cost price", product.cost_price)
    _check_count("Product stock", product.stock, 0)
    _check_count("Product minimum stock", product.min_stock, 0)


def validate_customer(customer: NewCustomer) -> None:
    """Check the business rules of a customer (name, spend, visit count, email)."""
    _check_name("Customer name", customer.name)
    _check_money("Customer total spent", customer.total_spent)
    _check_count("Customer visit count", customer.visit_count, 0)
    if customer.email and "@" not in customer.email:
        raise ValueError(f"Invalid customer email address: {customer.email!r}.")


def _check_references(app_config: AppConfig, sales: Iterable[NewSale]) -> None:
    """
    Ensure the catalog ids carried by ``sales`` refer to existing records.

    Raises
    ------
    ValueError
        If a product or customer id is unknown.
    """
    cfg = _get_db_config(app_config)
    known_products: set[int] = set()
    known_customers: set[int] = set()
    for sale in sales:
        if sale.product_id is not None and sale.product_id not in known_products:
            if _db_get_product_by_id(cfg, sale.product_id) is None:
                raise ValueError(f"Unknown product id: {sale.product_id}.")
            known_products.add(sale.product_id)
        if sale.customer_id is not None and sale.customer_id not in known_customers:
            if _db_get_customer_by_id(cfg, sale.customer_id) is None:
                raise ValueError(f"Unknown customer id: {sale.customer_id}.")
            known_customers.add(sale.customer_id)


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


def record_sale(app_config: AppConfig, new_sale: NewSale) -> Sale:
    """Validate and store a new sale. Returns the stored sale with its id."""
    validate_sale(new_sale)
    _check_references(app_config, [new_sale])
    created = _db_insert_sale(_get_db_config(app_config), new_sale)
    logger.info(
        "sale_recorded",
        sale_id=created.id,
        item_name=created.item_name,
        total=created.total,
    )
    return created


def import_sales(app_config: AppConfig, new_sales: Iterable[NewSale]) -> int:
    """
    Validate and store many sales at once.

    Validation happens before any write: a single invalid sale aborts the
    whole import.
    """
    pending = list(new_sales)
    for index, sale in enumerate(pending, start=1):
        try:
            validate_sale(sale)
            _check_references(app_config, [sale])
        except ValueError as exc:
            raise ValueError(f"Row {index}: {exc}") from exc

    inserted = _db_insert_sales(_get_db_config(app_config), pending)
    logger.info("sales_imported", rows_inserted=inserted)
    return inserted


def load_sale(app_config: AppConfig, sale_id: int) -> Optional[Sale]:
    return _db_get_sale_by_id(_get_db_config(app_config), sale_id)


def edit_sale(app_config: AppConfig, sale: Sale) -> Sale:
    """
    Replace an existing sale with ``sale`` (full-record replacement).

    Raises
    ------
    ValueError
        If the sale is invalid or does not exist.
    """
    validate_sale(sale)
    _check_references(app_config, [sale])
    updated = _db_update_sale(_get_db_config(app_config), sale)
    logger.info("sale_updated", sale_id=updated.id, total=updated.total)
    return updated


def delete_sale(app_config: AppConfig, sale_id: int) -> bool:
    deleted = _db_delete_sale(_get_db_config(app_config), sale_id)
    if deleted:
        logger.info("sale_deleted", sale_id=sale_id)
    else:
        logger.warning("sale_not_found", sale_id=sale_id)
    return deleted


def clear_all_sales(app_config: AppConfig) -> int:
    removed = _db_clear_sales(_get_db_config(app_config))
    logger.info("sales_cleared", rows_deleted=removed)
    return removed


def search_sales(
    app_config: AppConfig,
    filters: Optional[SalesFilter] = None,
) -> list[Sale]:
    """Search sales (all sales when no filter is given), newest first."""
    return _db_search_sales(_get_db_config(app_config), filters or SalesFilter())


def list_sales_for_period(app_config: AppConfig, period: Period) -> list[Sale]:
    return _db_load_sales(_get_db_config(app_config), _period_start(period), period.end)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def record_expense(app_config: AppConfig, new_expense: NewExpense) -> Expense:
    """Validate and store a new expense. Returns the stored expense with its id."""
    validate_expense(new_expense)
    created = _db_insert_expense(_get_db_config(app_config), new_expense)
    logger.info(
        "expense_recorded",
        expense_id=created.id,
        category=created.category,
        amount=created.amount,
    )
    return created


def import_expenses(app_config: AppConfig, new_expenses: Iterable[NewExpense]) -> int:
    """Validate and store many expenses at once (all or nothing)."""
    pending = list(new_expenses)
    for index, expense in enumerate(pending, start=1):
        try:
            validate_expense(expense)
        except ValueError as exc:
            raise ValueError(f"Row {index}: {exc}") from exc

    inserted = _db_insert_expenses(_get_db_config(app_config), pending)
    logger.info("expenses_imported", rows_inserted=inserted)
    return inserted


def load_expense(app_config: AppConfig, expense_id: int) -> Optional[Expense]:
    return _db_get_expense_by_id(_get_db_config(app_config), expense_id)


def edit_expense(app_config: AppConfig, expense: Expense) -> Expense:
    """Replace an existing expense with ``expense`` (full-record replacement)."""
    validate_expense(expense)
    updated = _db_update_expense(_get_db_config(app_config), expense)
    logger.info("expense_updated", expense_id=updated.id, amount=updated.amount)
    return updated


def delete_expense(app_config: AppConfig, expense_id: int) -> bool:
    deleted = _db_delete_expense(_get_db_config(app_config), expense_id)
    if deleted:
        logger.info("expense_deleted", expense_id=expense_id)
    else:
        logger.warning("expense_not_found", expense_id=expense_id)
    return deleted


def clear_all_expenses(app_config: AppConfig) -> int:
    removed = _db_clear_expenses(_get_db_config(app_config))
    logger.info("expenses_cleared", rows_deleted=removed)
    return removed


def search_expenses(
    app_config: AppConfig,
    filters: Optional[ExpensesFilter] = None,
) -> list[Expense]:
    """Search expenses (all expenses when no filter is given), newest first."""
    return _db_search_expenses(_get_db_config(app_config), filters or ExpensesFilter())


def list_expenses_for_period(app_config: AppConfig, period: Period) -> list[Expense]:
    return _db_load_expenses(_get_db_config(app_config), _period_start(period), period.end)


# ---------------------------------------------------------------------------
# Catalog: products
# ---------------------------------------------------------------------------


def add_product(app_config: AppConfig, new_product: NewProduct) -> Product:
    """Validate and store a new catalog product."""
    validate_product(new_product)
    created = _db_insert_product(_get_db_config(app_config), new_product)
    logger.info("product_added", product_id=created.id, name=created.name)
    return created


def load_product(app_config: AppConfig, product_id: int) -> Optional[Product]:
    return _db_get_product_by_id(_get_db_config(app_config), product_id)


def edit_product(app_config: AppConfig, product: Product) -> Product:
    """Replace an existing product (full-record replacement)."""
    validate_product(product)
    updated = _db_update_product(_get_db_config(app_config), product)
    logger.info("product_updated", product_id=updated.id, stock=updated.stock)
    if updated.is_low_stock:
        logger.warning(
            "product_low_stock",
            product_id=updated.id,
            stock=updated.stock,
            min_stock=updated.min_stock,
        )
    return updated


def delete_product(app_config: AppConfig, product_id: int) -> bool:
    deleted = _db_delete_product(_get_db_config(app_config), product_id)
    if deleted:
        logger.info("product_deleted", product_id=product_id)
    else:
        logger.warning("product_not_found", product_id=product_id)
    return deleted


def list_products(
    app_config: AppConfig,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> list[Product]:
    """Catalog products by name; ``search`` matches the name or the exact barcode."""
    return _db_list_products(_get_db_config(app_config), search, category)


def list_low_stock_products(app_config: AppConfig) -> list[Product]:
    """Products at or below their minimum stock, most urgent first."""
    return _db_list_low_stock_products(_get_db_config(app_config))


# ---------------------------------------------------------------------------
# Catalog: customers
# ---------------------------------------------------------------------------


def add_customer(app_config: AppConfig, new_customer: NewCustomer) -> Customer:
    validate_customer(new_customer)
    created = _db_insert_customer(_get_db_config(app_config), new_customer)
    logger.info("customer_added", customer_id=created.id)
    return created


def load_customer(app_config: AppConfig, customer_id: int) -> Optional[Customer]:
    return _db_get_customer_by_id(_get_db_config(app_config), customer_id)


def edit_customer(app_config: AppConfig, customer: Customer) -> Customer:
    """Replace an existing customer (full-record replacement)."""
    validate_customer(customer)
    updated = _db_update_customer(_get_db_config(app_config), customer)
    logger.info("customer_updated", customer_id=updated.id)
    return updated


def delete_customer(app_config: AppConfig, customer_id: int) -> bool:
    deleted = _db_delete_customer(_get_db_config(app_config), customer_id)
    if deleted:
        logger.info("customer_deleted", customer_id=customer_id)
    else:
        logger.warning("customer_not_found", customer_id=customer_id)
    return deleted


def search_customers(app_config: AppConfig, term: Optional[str] = None) -> list[Customer]:
    """Customers by name; ``term`` matches the name or the phone number."""
    return _db_search_customers(_get_db_config(app_config), term)


# ---------------------------------------------------------------------------
# Insights and reports
# ---------------------------------------------------------------------------


def _period_start(period: Period) -> Optional[datetime]:
    # Open-ended custom periods start at datetime.min.
    return None if period.start == datetime.min else period.start


def load_snapshot(app_config: AppConfig) -> tuple[list[Sale], list[Expense]]:
    """Load a consistent (sales, expenses) pair for the engine."""
    sales, expenses = _db_load_snapshot(_get_db_config(app_config))
    logger.debug("snapshot_loaded", sales=len(sales), expenses=len(expenses))
    return sales, expenses


def compute_insights(app_config: AppConfig, now: Optional[datetime] = None) -> Insights:
    """
    Compute the insights bundle from the current state of the ledger.

    The bundle is recomputed from scratch on every call.
    """
    sales, expenses = load_snapshot(app_config)
    insights = build_insights(sales, expenses, now=now, settings=app_config.insights)
    logger.info(
        "insights_computed",
        sales=len(sales),
        expenses=len(expenses),
        health_score=insights.health.score,
    )
    return insights


def compute_sales_report(app_config: AppConfig, period: Period) -> SalesReport:
    return sales_report(list_sales_for_period(app_config, period), period)


def compute_expense_report(app_config: AppConfig, period: Period) -> ExpenseReport:
    return expense_report(list_expenses_for_period(app_config, period), period)
