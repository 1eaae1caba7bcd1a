# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period reports for ShopLedger.

While ``engine.build_insights`` always looks at the whole history relative
to "now", the helpers in this module summarize the transactions of one
explicit reporting period (today, this week, this month or a custom range):

- ``sales_report``   : revenue, number of sales, most sold item and a
                       revenue-per-day series,
- ``expense_report`` : total spent, number of expenses and the category
                       breakdown for the period.

Both reuse the engine's range semantics (inclusive bounds, local time).
"""

from collections.abc import Sequence
from dataclasses import dataclass

import pandas as pd

from .engine import (
    NOT_AVAILABLE,
    CategoryTotal,
    amount_frame,
    daily_totals,
    expense_category_distribution,
)
from .periods import Period, filter_frame_by_period
from .records import NewExpense, NewSale


@dataclass(frozen=True)
class ChartPoint:
    name: str
    value: float


@dataclass(frozen=True)
class SalesReport:
    """
    Summary of the sales recorded within a reporting period.

    Attributes
    ----------
    period:
        The reporting period.
    sales:
        Sales within the period, in input order.
    total_revenue:
        Sum of the sale totals.
    total_sales:
        Number of sales.
    most_sold_item:
        Item with the highest summed quantity, or "N/A".
    chart_data:
        Revenue per calendar day (ISO date), chronological.
    """

    period: Period
    sales: list[NewSale]
    total_revenue: float
    total_sales: int
    most_sold_item: str
    chart_data: list[ChartPoint]


@dataclass(frozen=True)
class ExpenseReport:
    period: Period
    expenses: list[NewExpense]
    total_amount: float
    total_expenses: int
    categories: list[CategoryTotal]


def _in_period(records: Sequence, period: Period) -> list:
    records = list(records)
    selected = filter_frame_by_period(amount_frame(records), period)
    return [records[i] for i in selected.index]


def _most_sold_item(sales: Sequence[NewSale]) -> str:
    if not sales:
        return NOT_AVAILABLE
    frame = pd.DataFrame(
        {
            "name": [s.item_name for s in sales],
            "quantity": [int(s.quantity) for s in sales],
        }
    )
    quantities = frame.groupby("name", sort=False)["quantity"].sum()
    # idxmax keeps the first item reaching the maximum
    return str(quantities.idxmax())


def sales_report(sales: Sequence[NewSale], period: Period) -> SalesReport:
    """Summarize the sales that fall within ``period`` (bounds inclusive)."""
    selected = _in_period(sales, period)
    frame = amount_frame(selected)
    daily = daily_totals(frame)

    return SalesReport(
        period=period,
        sales=selected,
        total_revenue=float(frame["amount"].sum()),
        total_sales=len(selected),
        most_sold_item=_most_sold_item(selected),
        chart_data=[ChartPoint(name=day.isoformat(), value=float(v)) for day, v in daily.items()],
    )


def expense_report(expenses: Sequence[NewExpense], period: Period) -> ExpenseReport:
    """Summarize the expenses that fall within ``period`` (bounds inclusive)."""
    selected = _in_period(expenses, period)
    frame = amount_frame(selected)

    return ExpenseReport(
        period=period,
        expenses=selected,
        total_amount=float(frame["amount"].sum()),
        total_expenses=len(selected),
        categories=expense_category_distribution(selected),
    )
