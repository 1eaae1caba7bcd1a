# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Transaction records for ShopLedger.

This module defines the two record types handled by the ledger (sales and
expenses), the two catalog types (products and customers) a sale may refer
to, together with the "new record" variants used for inserts.

A sale's ``total`` is always derived from ``quantity * price``. It is
exposed as a read-only property and is never stored independently on the
object, so the two sources of truth cannot drift apart. The database layer
persists a ``total_cents`` column for convenience, recomputed from this
property on every write.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Stock Purchase",
    "Transport",
    "Utilities",
    "Rent",
    "Salaries",
    "Miscellaneous",
)
"""Default expense categories. Other category names are accepted as-is."""

DEFAULT_PAYMENT_METHOD = "Cash"
DEFAULT_MIN_STOCK = 5


@dataclass(frozen=True)
class NewSale:
    """
    Data required to record a new sale.

    Attributes
    ----------
    item_name:
        Name of the item sold (non-empty).
    quantity:
        Number of units sold (positive integer).
    price:
        Unit price (non-negative).
    date:
        Local date and time of the transaction.
    payment_method:
        Free-form payment method label ("Cash", "M-Pesa", "Card", ...).
    photo, notes, discount:
        Optional metadata. They do not take part in any computation.
    product_id, customer_id:
        Optional ids of a catalog product and customer. When set, they must
        refer to existing records.
    """

    item_name: str
    quantity: int
    price: float
    date: datetime
    payment_method: str = DEFAULT_PAYMENT_METHOD
    photo: Optional[str] = None
    notes: Optional[str] = None
    discount: Optional[float] = None
    product_id: Optional[int] = None
    customer_id: Optional[int] = None

    @property
    def total(self) -> float:
        return self.quantity * self.price


@dataclass(frozen=True)
class Sale(NewSale):
    """A sale stored in the ledger."""

    id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewExpense:
    """Data required to record a new expense."""

    name: str
    category: str
    amount: float
    date: datetime
    note: Optional[str] = None
    receipt_photo: Optional[str] = None


@dataclass(frozen=True)
class Expense(NewExpense):
    """An expense stored in the ledger."""

    id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewProduct:
    """
    Data required to add a product to the catalog.

    Attributes
    ----------
    name:
        Product name (non-empty).
    price:
        Selling price.
    cost_price:
        Purchase price, used for the unit margin.
    stock:
        Units currently on hand.
    min_stock:
        Alert threshold: the product is "low stock" once ``stock`` falls to
        this value or below.
    """

    name: str
    price: float
    cost_price: float = 0.0
    stock: int = 0
    min_stock: int = DEFAULT_MIN_STOCK
    barcode: Optional[str] = None
    category: Optional[str] = None

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    @property
    def unit_margin(self) -> float:
        return self.price - self.cost_price


@dataclass(frozen=True)
class Product(NewProduct):
    """A product stored in the catalog."""

    id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewCustomer:
    """Data required to add a customer."""

    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    total_spent: float = 0.0
    visit_count: int = 0
    notes: Optional[str] = None


@dataclass(frozen=True)
class Customer(NewCustomer):
    """A customer stored in the catalog."""

    id: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
