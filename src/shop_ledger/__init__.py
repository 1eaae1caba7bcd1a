# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
ShopLedger
----------

A Python-based sales & expense ledger for small shops, with a statistics
engine that turns the raw records into business insights.

Main capabilities:
- recording, editing and deleting sales and expenses (SQLite, one database
  file per shop),
- CSV import & export of both ledgers,
- period boundaries (today, this week, this month, custom ranges),
- trends (today / week / month vs the previous period) and a daily chart,
- top-selling and slow-moving products,
- peak hours and days,
- expense distribution by category,
- a moving-average sales forecast,
- a 0-100 shop health score built from growth, profitability and activity,
- daily / weekly / monthly / custom sales and expense reports.

ShopLedger separates computation (engine, reports), storage (db),
configuration (TOML) and presentation (CLI / views).


Version: 0.1.0

Usage:
    python -m shop_ledger.cli --help
"""

__all__ = ["engine", "periods", "reports", "views", "io"]

__version__ = "0.1.0"
