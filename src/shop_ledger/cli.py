# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for ShopLedger.

This module wires together the main building blocks of ShopLedger:

- application configuration (shop, currency, database, insights settings),
- the ledger service (validated writes, searches, snapshots, catalogs),
- CSV import & export,
- the statistics engine and period reports,
- console views.

The CLI is intentionally thin: it does not implement any business or
statistical logic itself. It parses arguments, calls the service layer and
prints the results.


Commands
--------

    sales add|list|edit|delete|clear|import|export
    expenses add|list|edit|delete|clear|import|export
    products add|list|edit|delete|low-stock
    customers add|list|edit|delete
    insights [--as-of DATETIME] [--json]
    report [--period today|week|month] [--from-date] [--to-date] [--expenses]

Global options:

    --config PATH   Main TOML configuration file. Defaults to
                    'shop_ledger_config.toml' in the current directory, or
                    built-in defaults when that file does not exist.
    --verbose       Log debug information to stderr.
    --version       Print the installed version and exit.

Dates are given as ISO-8601 text. Transaction dates accept a time
(``2025-03-01T14:30``); when omitted they default to midnight. Report
bounds are calendar dates (``YYYY-MM-DD``).

Editing a record is a full replacement: the CLI loads the stored record,
applies the options given on the command line and writes the complete new
state back. A sale's total is never provided by the user.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import structlog

from . import __version__
from .config import AppConfig, load_app_config
from .db import ExpensesFilter, SalesFilter, has_records, init_database
from .engine import insights_to_dict
from .io import (
    export_expenses_csv,
    export_sales_csv,
    read_expenses_csv,
    read_sales_csv,
)
from .ledger_service import (
    add_customer,
    add_product,
    clear_all_expenses,
    clear_all_sales,
    compute_expense_report,
    compute_insights,
    compute_sales_report,
    delete_customer,
    delete_expense,
    delete_product,
    delete_sale,
    edit_customer,
    edit_expense,
    edit_product,
    edit_sale,
    import_expenses,
    import_sales,
    list_low_stock_products,
    list_products,
    load_customer,
    load_expense,
    load_product,
    load_sale,
    record_expense,
    record_sale,
    search_customers,
    search_expenses,
    search_sales,
)
from .periods import determine_period
from .records import (
    DEFAULT_MIN_STOCK,
    DEFAULT_PAYMENT_METHOD,
    EXPENSE_CATEGORIES,
    NewCustomer,
    NewExpense,
    NewProduct,
    NewSale,
)
from .views import (
    render_customers,
    render_expense_report,
    render_insights,
    render_products,
    render_records,
    render_sales_report,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _configure_logging(level_name: str) -> None:
    """Route structlog through the stdlib logging module, on stderr."""
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _add_date_range(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--from-date",
        dest="from_date",
        help="Start date (YYYY-MM-DD), inclusive.",
    )
    parser.add_argument(
        "--to-date",
        dest="to_date",
        help="End date (YYYY-MM-DD), inclusive.",
    )


def _add_sale_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--item", dest="item_name", required=required, help="Item name.")
    parser.add_argument(
        "--quantity", type=int, required=required, help="Number of units sold."
    )
    parser.add_argument("--price", type=float, required=required, help="Unit price.")
    parser.add_argument(
        "--date",
        dest="date",
        help="Sale date and time (ISO-8601). Defaults to now for new sales.",
    )
    parser.add_argument(
        "--payment-method",
        dest="payment_method",
        default=DEFAULT_PAYMENT_METHOD if required else None,
        help=f"Payment method (default: {DEFAULT_PAYMENT_METHOD}).",
    )
    parser.add_argument("--notes", help="Free-form notes.")
    parser.add_argument("--discount", type=float, help="Discount granted on the sale.")
    parser.add_argument(
        "--product-id", dest="product_id", type=int, help="Catalog product identifier."
    )
    parser.add_argument(
        "--customer-id", dest="customer_id", type=int, help="Catalog customer identifier."
    )


def _add_expense_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Expense label.")
    parser.add_argument(
        "--category",
        required=required,
        help=f"Expense category (e.g. {', '.join(EXPENSE_CATEGORIES)}).",
    )
    parser.add_argument("--amount", type=float, required=required, help="Amount spent.")
    parser.add_argument(
        "--date",
        dest="date",
        help="Expense date and time (ISO-8601). Defaults to now for new expenses.",
    )
    parser.add_argument("--note", help="Free-form note.")


def _add_record_commands(
    subparsers: argparse._SubParsersAction,
    kind: str,
) -> None:
    """Register the `sales` or `expenses` command group."""
    singular = "sale" if kind == "sales" else "expense"
    group = subparsers.add_parser(kind, help=f"Record and manage {kind}.")
    group_sub = group.add_subparsers(
        dest="record_command",
        metavar=f"{kind}-command",
        help=f"{kind.capitalize()} subcommands.",
    )

    add = group_sub.add_parser("add", help=f"Record a new {singular}.")
    edit = group_sub.add_parser(
        "edit",
        help=f"Replace a {singular}: stored values are kept for options not given.",
    )
    edit.add_argument("record_id", type=int, help=f"Identifier of the {singular}.")
    if kind == "sales":
        _add_sale_fields(add, required=True)
        _add_sale_fields(edit, required=False)
    else:
        _add_expense_fields(add, required=True)
        _add_expense_fields(edit, required=False)

    listing = group_sub.add_parser("list", help=f"List {kind}, newest first.")
    _add_date_range(listing)
    listing.add_argument(
        "--search",
        help=(
            "Case-insensitive substring to search in the item name."
            if kind == "sales"
            else "Case-insensitive substring to search in the expense name."
        ),
    )
    if kind == "sales":
        listing.add_argument(
            "--payment-method", dest="payment_method", help="Exact payment method."
        )
    else:
        listing.add_argument("--category", help="Exact expense category.")
    listing.add_argument("--limit", type=int, help="Maximum number of rows to display.")
    listing.add_argument("--offset", type=int, default=0, help="Rows to skip.")

    delete = group_sub.add_parser("delete", help=f"Delete a {singular}.")
    delete.add_argument("record_id", type=int, help=f"Identifier of the {singular}.")

    clear = group_sub.add_parser("clear", help=f"Delete every {singular}.")
    clear.add_argument(
        "--yes",
        action="store_true",
        help="Confirm the deletion. Nothing is deleted without it.",
    )

    imp = group_sub.add_parser("import", help=f"Import {kind} from a CSV file.")
    imp.add_argument("csv_path", metavar="CSV_PATH", help="CSV file to import.")

    export = group_sub.add_parser("export", help=f"Export {kind} to a CSV file.")
    export.add_argument("csv_path", metavar="CSV_PATH", help="Destination CSV file.")
    _add_date_range(export)


def _add_product_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Product name.")
    parser.add_argument("--price", type=float, required=required, help="Selling price.")
    parser.add_argument(
        "--cost-price",
        dest="cost_price",
        type=float,
        default=0.0 if required else None,
        help="Purchase cost per unit (default: 0).",
    )
    parser.add_argument(
        "--stock",
        type=int,
        default=0 if required else None,
        help="Units in stock (default: 0).",
    )
    parser.add_argument(
        "--min-stock",
        dest="min_stock",
        type=int,
        default=DEFAULT_MIN_STOCK if required else None,
        help=f"Restock threshold (default: {DEFAULT_MIN_STOCK}).",
    )
    parser.add_argument("--barcode", help="Barcode or SKU.")
    parser.add_argument("--category", help="Product category.")


def _add_customer_fields(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument("--name", required=required, help="Customer name.")
    parser.add_argument("--phone", help="Phone number.")
    parser.add_argument("--email", help="E-mail address.")
    parser.add_argument(
        "--total-spent",
        dest="total_spent",
        type=float,
        default=0.0 if required else None,
        help="Amount spent so far (default: 0).",
    )
    parser.add_argument(
        "--visit-count",
        dest="visit_count",
        type=int,
        default=0 if required else None,
        help="Number of visits so far (default: 0).",
    )
    parser.add_argument("--notes", help="Free-form notes.")


def _add_catalog_commands(
    subparsers: argparse._SubParsersAction,
    kind: str,
) -> None:
    """Register the `products` or `customers` command group."""
    singular = "product" if kind == "products" else "customer"
    add_fields = _add_product_fields if kind == "products" else _add_customer_fields

    group = subparsers.add_parser(kind, help=f"Manage the {singular} catalog.")
    group_sub = group.add_subparsers(
        dest="catalog_command",
        metavar=f"{kind}-command",
        help=f"{kind.capitalize()} subcommands.",
    )

    add = group_sub.add_parser("add", help=f"Add a new {singular}.")
    add_fields(add, required=True)

    edit = group_sub.add_parser(
        "edit",
        help=f"Replace a {singular}: stored values are kept for options not given.",
    )
    edit.add_argument("record_id", type=int, help=f"Identifier of the {singular}.")
    add_fields(edit, required=False)

    listing = group_sub.add_parser("list", help=f"List {kind} by name.")
    if kind == "products":
        listing.add_argument(
            "--search", help="Case-insensitive name substring, or an exact barcode."
        )
        listing.add_argument("--category", help="Exact product category.")
        group_sub.add_parser(
            "low-stock", help="List products at or below their minimum stock."
        )
    else:
        listing.add_argument(
            "--search", help="Case-insensitive name substring, or part of a phone number."
        )

    delete = group_sub.add_parser("delete", help=f"Delete a {singular}.")
    delete.add_argument("record_id", type=int, help=f"Identifier of the {singular}.")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="shop-ledger",
        description=(
            "ShopLedger - Sales & Expense Ledger with Business Insights for small "
            "shops. Records sales and expenses and derives trends, rankings, "
            "forecasts and a shop health score from them."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of shop_ledger and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the main TOML configuration file. If omitted, "
            "'shop_ledger_config.toml' in the current directory is used when "
            "present, otherwise built-in defaults."
        ),
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug information to stderr.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    _add_record_commands(subparsers, "sales")
    _add_record_commands(subparsers, "expenses")
    _add_catalog_commands(subparsers, "products")
    _add_catalog_commands(subparsers, "customers")

    insights = subparsers.add_parser(
        "insights", help="Compute trends, rankings, forecast and health score."
    )
    insights.add_argument(
        "--as-of",
        dest="as_of",
        help="Compute the insights as of this date and time (ISO-8601). Defaults to now.",
    )
    insights.add_argument(
        "--json",
        action="store_true",
        help="Print the insights bundle as JSON instead of console tables.",
    )

    report = subparsers.add_parser("report", help="Summarize a reporting period.")
    report.add_argument(
        "--period",
        choices=["today", "week", "month"],
        help="Named period. Defaults to the current week when no bounds are given.",
    )
    _add_date_range(report)
    report.add_argument(
        "--expenses",
        action="store_true",
        help="Report on expenses instead of sales.",
    )

    return ap


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an optional ISO-8601 date or datetime argument."""
    if value is None:
        return None

    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date/time format: {value!r}. Expected ISO-8601, e.g. 2025-03-01T14:30."
        raise SystemExit(msg) from exc


def _range_bounds(args: argparse.Namespace) -> tuple[Optional[datetime], Optional[datetime]]:
    start_day = _parse_optional_date(args.from_date)
    end_day = _parse_optional_date(args.to_date)
    start = datetime.combine(start_day, datetime.min.time()) if start_day else None
    end = datetime.combine(end_day, datetime.max.time()) if end_day else None
    return start, end


def _given(args: argparse.Namespace, *names: str) -> dict:
    """Options explicitly provided on the command line."""
    return {name: getattr(args, name) for name in names if getattr(args, name) is not None}


# ---------------------------------------------------------------------------
# Handlers: sales
# ---------------------------------------------------------------------------


def _handle_sales_add(args: argparse.Namespace, config: AppConfig) -> None:
    sale = record_sale(
        config,
        NewSale(
            item_name=args.item_name,
            quantity=args.quantity,
            price=args.price,
            date=_parse_optional_datetime(args.date) or datetime.now(),
            payment_method=args.payment_method,
            notes=args.notes,
            discount=args.discount,
            product_id=args.product_id,
            customer_id=args.customer_id,
        ),
    )
    print(
        f"Recorded sale #{sale.id}: {sale.quantity} x {sale.item_name} "
        f"@ {sale.price:.2f} = {config.currency} {sale.total:.2f}"
    )


def _handle_sales_edit(args: argparse.Namespace, config: AppConfig) -> None:
    current = load_sale(config, args.record_id)
    if current is None:
        raise SystemExit(f"Sale #{args.record_id} not found.")

    changes = _given(
        args,
        "item_name",
        "quantity",
        "price",
        "payment_method",
        "notes",
        "discount",
        "product_id",
        "customer_id",
    )
    if args.date is not None:
        changes["date"] = _parse_optional_datetime(args.date)

    sale = edit_sale(config, replace(current, **changes))
    print(
        f"Updated sale #{sale.id}: {sale.quantity} x {sale.item_name} "
        f"@ {sale.price:.2f} = {config.currency} {sale.total:.2f}"
    )


def _handle_sales_list(args: argparse.Namespace, config: AppConfig) -> None:
    start, end = _range_bounds(args)
    sales = search_sales(
        config,
        SalesFilter(
            start=start,
            end=end,
            item_contains=args.search,
            payment_method=args.payment_method,
            limit=args.limit,
            offset=args.offset,
        ),
    )
    print(render_records(sales, "sales"))


# ---------------------------------------------------------------------------
# Handlers: expenses
# ---------------------------------------------------------------------------


def _handle_expenses_add(args: argparse.Namespace, config: AppConfig) -> None:
    expense = record_expense(
        config,
        NewExpense(
            name=args.name,
            category=args.category,
            amount=args.amount,
            date=_parse_optional_datetime(args.date) or datetime.now(),
            note=args.note,
        ),
    )
    print(
        f"Recorded expense #{expense.id}: {expense.name} ({expense.category}) "
        f"= {config.currency} {expense.amount:.2f}"
    )


def _handle_expenses_edit(args: argparse.Namespace, config: AppConfig) -> None:
    current = load_expense(config, args.record_id)
    if current is None:
        raise SystemExit(f"Expense #{args.record_id} not found.")

    changes = _given(args, "name", "category", "amount", "note")
    if args.date is not None:
        changes["date"] = _parse_optional_datetime(args.date)

    expense = edit_expense(config, replace(current, **changes))
    print(
        f"Updated expense #{expense.id}: {expense.name} ({expense.category}) "
        f"= {config.currency} {expense.amount:.2f}"
    )


def _handle_expenses_list(args: argparse.Namespace, config: AppConfig) -> None:
    start, end = _range_bounds(args)
    expenses = search_expenses(
        config,
        ExpensesFilter(
            start=start,
            end=end,
            name_contains=args.search,
            category=args.category,
            limit=args.limit,
            offset=args.offset,
        ),
    )
    print(render_records(expenses, "expenses"))


# ---------------------------------------------------------------------------
# Handlers: shared record operations
# ---------------------------------------------------------------------------


def _handle_record_command(args: argparse.Namespace, config: AppConfig) -> None:
    """Dispatch function for the 'sales' and 'expenses' subcommands."""
    kind = args.command
    subcmd = getattr(args, "record_command", None)
    is_sales = kind == "sales"
    singular = "Sale" if is_sales else "Expense"

    if subcmd == "add":
        (_handle_sales_add if is_sales else _handle_expenses_add)(args, config)
    elif subcmd == "edit":
        (_handle_sales_edit if is_sales else _handle_expenses_edit)(args, config)
    elif subcmd == "list":
        (_handle_sales_list if is_sales else _handle_expenses_list)(args, config)
    elif subcmd == "delete":
        deleted = (delete_sale if is_sales else delete_expense)(config, args.record_id)
        if not deleted:
            raise SystemExit(f"{singular} #{args.record_id} not found.")
        print(f"{singular} #{args.record_id} deleted.")
    elif subcmd == "clear":
        if not args.yes:
            print(f"Refusing to delete every {singular.lower()} without --yes.")
            return
        removed = (clear_all_sales if is_sales else clear_all_expenses)(config)
        print(f"Deleted {removed} {kind}.")
    elif subcmd == "import":
        csv_path = Path(args.csv_path)
        if not csv_path.is_file():
            raise SystemExit(f"CSV file not found: {csv_path}")
        print(f"Importing {kind} from {csv_path}...")
        if is_sales:
            inserted = import_sales(config, read_sales_csv(csv_path))
        else:
            inserted = import_expenses(config, read_expenses_csv(csv_path))
        print(f"Imported {inserted} {kind}.")
    elif subcmd == "export":
        start, end = _range_bounds(args)
        csv_path = Path(args.csv_path)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        if is_sales:
            records = search_sales(config, SalesFilter(start=start, end=end))
            export_sales_csv(records, csv_path)
        else:
            records = search_expenses(config, ExpensesFilter(start=start, end=end))
            export_expenses_csv(records, csv_path)
        print(f"Wrote {csv_path} ({len(records)} rows)")
    else:
        print(
            f"No {kind} subcommand specified. Available subcommands are: "
            "'add', 'list', 'edit', 'delete', 'clear', 'import', 'export'."
        )


# ---------------------------------------------------------------------------
# Handlers: catalogs
# ---------------------------------------------------------------------------


_PRODUCT_FIELDS = ("name", "price", "cost_price", "stock", "min_stock", "barcode", "category")
_CUSTOMER_FIELDS = ("name", "phone", "email", "total_spent", "visit_count", "notes")


def _handle_products(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "catalog_command", None)

    if subcmd == "add":
        product = add_product(config, NewProduct(**_given(args, *_PRODUCT_FIELDS)))
        print(
            f"Added product #{product.id}: {product.name} "
            f"@ {config.currency} {product.price:.2f} ({product.stock} in stock)"
        )
    elif subcmd == "edit":
        current = load_product(config, args.record_id)
        if current is None:
            raise SystemExit(f"Product #{args.record_id} not found.")
        product = edit_product(config, replace(current, **_given(args, *_PRODUCT_FIELDS)))
        print(
            f"Updated product #{product.id}: {product.name} "
            f"@ {config.currency} {product.price:.2f} ({product.stock} in stock)"
        )
        if product.is_low_stock:
            print(f"Warning: {product.name} is low on stock (minimum {product.min_stock}).")
    elif subcmd == "list":
        products = list_products(config, search=args.search, category=args.category)
        print(render_products(products, config.currency))
    elif subcmd == "low-stock":
        products = list_low_stock_products(config)
        if not products:
            print("Every product is above its minimum stock.")
            return
        print(render_products(products, config.currency))
    elif subcmd == "delete":
        if not delete_product(config, args.record_id):
            raise SystemExit(f"Product #{args.record_id} not found.")
        print(f"Product #{args.record_id} deleted.")
    else:
        print(
            "No products subcommand specified. Available subcommands are: "
            "'add', 'list', 'edit', 'delete', 'low-stock'."
        )


def _handle_customers(args: argparse.Namespace, config: AppConfig) -> None:
    subcmd = getattr(args, "catalog_command", None)

    if subcmd == "add":
        customer = add_customer(config, NewCustomer(**_given(args, *_CUSTOMER_FIELDS)))
        print(f"Added customer #{customer.id}: {customer.name}")
    elif subcmd == "edit":
        current = load_customer(config, args.record_id)
        if current is None:
            raise SystemExit(f"Customer #{args.record_id} not found.")
        customer = edit_customer(config, replace(current, **_given(args, *_CUSTOMER_FIELDS)))
        print(f"Updated customer #{customer.id}: {customer.name}")
    elif subcmd == "list":
        print(render_customers(search_customers(config, args.search), config.currency))
    elif subcmd == "delete":
        if not delete_customer(config, args.record_id):
            raise SystemExit(f"Customer #{args.record_id} not found.")
        print(f"Customer #{args.record_id} deleted.")
    else:
        print(
            "No customers subcommand specified. Available subcommands are: "
            "'add', 'list', 'edit', 'delete'."
        )


# ---------------------------------------------------------------------------
# Handlers: insights and reports
# ---------------------------------------------------------------------------


def _handle_insights(args: argparse.Namespace, config: AppConfig) -> None:
    as_of = _parse_optional_datetime(args.as_of)
    insights = compute_insights(config, now=as_of)

    if args.json:
        print(json.dumps(insights_to_dict(insights), indent=2, ensure_ascii=False))
        return

    print(render_insights(insights, config.currency, config.shop_name))


def _handle_report(args: argparse.Namespace, config: AppConfig) -> None:
    try:
        period = determine_period(
            args.period,
            from_date=_parse_optional_date(args.from_date),
            to_date=_parse_optional_date(args.to_date),
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    if args.expenses:
        print(render_expense_report(compute_expense_report(config, period), config.currency))
    else:
        print(render_sales_report(compute_sales_report(config, period), config.currency))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ShopLedger CLI.

    This function parses command-line arguments, loads the application
    configuration, configures logging, initializes the shop database and
    dispatches to the requested command. Validation errors raised by the
    service layer are reported as a one-line message and a non-zero exit
    status.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"shop_ledger version {__version__}")
        return

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Error: {exc}") from exc

    _configure_logging("DEBUG" if args.verbose else config.log_level)
    logger.debug("config_loaded", database=str(config.database.path))

    init_database(config.database)
    quiet = getattr(args, "json", False)
    if args.command in {"insights", "report"} and not quiet and not has_records(config.database):
        print(
            "[INFO] The ledger is empty. Record sales with 'shop-ledger sales add' "
            "or import them with 'shop-ledger sales import <csv>'."
        )

    try:
        if args.command in {"sales", "expenses"}:
            _handle_record_command(args, config)
        elif args.command == "products":
            _handle_products(args, config)
        elif args.command == "customers":
            _handle_customers(args, config)
        elif args.command == "insights":
            _handle_insights(args, config)
        elif args.command == "report":
            _handle_report(args, config)
        else:
            parser.print_help()
    except (FileNotFoundError, ValueError) as exc:
        logger.debug("command_failed", command=args.command, error=str(exc))
        raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
    main()
