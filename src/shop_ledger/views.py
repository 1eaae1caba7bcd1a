# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for ShopLedger.

This module turns the plain results of the statistics engine and of the
period reports into pandas DataFrames and console text. It is a pure
consumer: it never recomputes a statistic, it only formats (and, for the
expense breakdown, derives the share of each category for display).

The main helpers are:

- trends_table, products_table, slow_movers_table, categories_table:
  one DataFrame per insight section,
- render_insights: the full dashboard as console text,
- render_sales_report / render_expense_report: period reports,
- records_table: compact listing of sales or expenses,
- render_products / render_customers: catalog listings, with low-stock
  products flagged.
"""

from collections.abc import Sequence

import pandas as pd

from .engine import NO_DATA_STATUS, CategoryTotal, Insights, ProductStat, SlowMover, Trends
from .io import expenses_to_frame, sales_to_frame
from .records import Customer, NewExpense, NewSale, Product
from .reports import ExpenseReport, SalesReport


def _money(value: float, currency: str) -> str:
    return f"{currency} {value:,.2f}"


def _title(text: str) -> str:
    return f"{text}\n{'-' * len(text)}"


def trends_table(trends: Trends) -> pd.DataFrame:
    """One row per period: current, previous and percent change."""
    rows = [
        ("Today vs yesterday", trends.daily),
        ("This week vs last week", trends.weekly),
        ("This month vs last month", trends.monthly),
    ]
    return pd.DataFrame(
        [
            {
                "period": label,
                "current": comparison.current,
                "previous": comparison.previous,
                "change_pct": round(comparison.change, 1),
            }
            for label, comparison in rows
        ],
        columns=["period", "current", "previous", "change_pct"],
    )


def products_table(products: Sequence[ProductStat]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"item": p.name, "quantity": p.quantity, "revenue": p.revenue} for p in products],
        columns=["item", "quantity", "revenue"],
    )


def slow_movers_table(items: Sequence[SlowMover]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"item": s.name, "last_sold": s.last_sold.strftime("%Y-%m-%d %H:%M")} for s in items],
        columns=["item", "last_sold"],
    )


def categories_table(categories: Sequence[CategoryTotal]) -> pd.DataFrame:
    """Category totals with their share of all expenses (in percent)."""
    df = pd.DataFrame(
        [{"category": c.name, "amount": c.value} for c in categories],
        columns=["category", "amount"],
    )
    total = float(df["amount"].sum()) if not df.empty else 0.0
    df["share_pct"] = (df["amount"] / total * 100).round(1) if total > 0 else 0.0
    return df


def records_table(records: Sequence, kind: str) -> pd.DataFrame:
    """Compact listing of sales (``kind="sales"``) or expenses."""
    if kind == "sales":
        df = sales_to_frame(records)
        return df[["id", "date", "item_name", "quantity", "price", "total", "payment_method"]]
    df = expenses_to_frame(records)
    return df[["id", "date", "name", "category", "amount"]]


def _frame_text(df: pd.DataFrame, empty_message: str) -> str:
    if df.empty:
        return empty_message
    return df.to_string(index=False)


def render_insights(insights: Insights, currency: str, shop_name: str = "") -> str:
    """Render the insights bundle as a console dashboard."""
    health = insights.health
    forecast = insights.forecast
    peaks = insights.peak_times

    header = f"Business insights{f' - {shop_name}' if shop_name else ''}"
    lines = [
        _title(header),
        f"Generated at: {insights.generated_at:%Y-%m-%d %H:%M}",
        "",
        _title("Shop health"),
        f"Score: {health.score}/100 ({health.status})",
    ]
    if health.status != NO_DATA_STATUS:
        lines.append(
            f"Growth: {health.growth_score:.0f} | Profitability: {health.profit_score:.0f}"
            f" | Activity: {health.activity_score:.0f}"
        )

    lines += [
        "",
        _title("Trends"),
        trends_table(insights.trends).to_string(index=False),
        "",
        _title("Top products"),
        _frame_text(products_table(insights.top_products), "No sales recorded yet."),
        "",
        _title("Slow-moving products"),
        _frame_text(slow_movers_table(insights.slow_moving_products), "None."),
        "",
        _title("Peak times"),
        f"Busiest hour: {peaks.busiest_hour}",
        f"Busiest day:  {peaks.busiest_day}",
        f"Slowest day:  {peaks.slowest_day}",
        "",
        _title("Expenses by category"),
        _frame_text(categories_table(insights.expense_categories), "No expenses recorded yet."),
        "",
        _title("Forecast"),
        f"Next day:  {_money(forecast.next_day, currency)}",
        f"Next week: {_money(forecast.next_week, currency)}",
    ]
    return "\n".join(lines)


def render_sales_report(report: SalesReport, currency: str) -> str:
    period = report.period
    lines = [
        _title(f"Sales report: {period.label}"),
        f"Total revenue:  {_money(report.total_revenue, currency)}",
        f"Number of sales: {report.total_sales}",
        f"Most sold item: {report.most_sold_item}",
    ]
    if report.chart_data:
        daily = pd.DataFrame(
            [{"day": p.name, "revenue": p.value} for p in report.chart_data]
        )
        lines += ["", daily.to_string(index=False)]
    return "\n".join(lines)


def render_expense_report(report: ExpenseReport, currency: str) -> str:
    lines = [
        _title(f"Expense report: {report.period.label}"),
        f"Total spent:        {_money(report.total_amount, currency)}",
        f"Number of expenses: {report.total_expenses}",
    ]
    if report.categories:
        lines += ["", categories_table(report.categories).to_string(index=False)]
    return "\n".join(lines)


def render_records(records: Sequence, kind: str) -> str:
    """Listing of sales or expenses with a footer total."""
    if not records:
        return f"No {kind} found for the given criteria."

    df = records_table(records, kind)
    if kind == "sales":
        total = sum(r.total for r in records if isinstance(r, NewSale))
    else:
        total = sum(r.amount for r in records if isinstance(r, NewExpense))
    return f"{df.to_string(index=False)}\n\nTotal {kind}: {len(records)} | Total amount: {total:.2f}"


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


def products_catalog_table(products: Sequence[Product]) -> pd.DataFrame:
    """Product catalog rows, with a ``low`` marker for items to restock."""
    return pd.DataFrame(
        [
            {
                "id": p.id,
                "name": p.name,
                "category": p.category or "",
                "price": p.price,
                "cost_price": p.cost_price,
                "stock": p.stock,
                "min_stock": p.min_stock,
                "low": "LOW" if p.is_low_stock else "",
            }
            for p in products
        ],
        columns=["id", "name", "category", "price", "cost_price", "stock", "min_stock", "low"],
    )


def render_products(products: Sequence[Product], currency: str) -> str:
    if not products:
        return "No products found for the given criteria."

    stock_value = sum(p.stock * p.cost_price for p in products)
    low = sum(1 for p in products if p.is_low_stock)
    return (
        f"{products_catalog_table(products).to_string(index=False)}\n\n"
        f"Products: {len(products)} | Low stock: {low} | "
        f"Stock value at cost: {_money(stock_value, currency)}"
    )


def customers_table(customers: Sequence[Customer]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": c.id,
                "name": c.name,
                "phone": c.phone or "",
                "email": c.email or "",
                "total_spent": c.total_spent,
                "visits": c.visit_count,
            }
            for c in customers
        ],
        columns=["id", "name", "phone", "email", "total_spent", "visits"],
    )


def render_customers(customers: Sequence[Customer], currency: str) -> str:
    if not customers:
        return "No customers found for the given criteria."

    spent = sum(c.total_spent for c in customers)
    return (
        f"{customers_table(customers).to_string(index=False)}\n\n"
        f"Customers: {len(customers)} | Total spent: {_money(spent, currency)}"
    )
