# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Statistics engine for ShopLedger.

This module turns two flat collections of transactions (sales and expenses)
into the business insights displayed by the dashboards and reports:

1. Range totals
   ------------
   ``total_in_range()`` sums the monetary value of every record whose date
   falls within an inclusive ``[start, end]`` window. Every trend, chart
   point, forecast input and health-score component goes through the same
   helper, so all metrics share the same boundary semantics.

2. Trends
   ------
   ``calculate_trends()`` compares today / this week / this month against
   the immediately preceding period and builds a 30-day daily series of
   sales and expenses for charting.

3. Products
   --------
   ``top_products()`` ranks items by revenue and ``slow_moving_products()``
   lists items with no sale in the trailing 30 days.

4. Activity and expenses
   ---------------------
   ``peak_times()`` buckets revenue by hour of day and day of week,
   ``expense_category_distribution()`` sums expenses per category and
   ``sales_heatmap()`` sums revenue per calendar day.

5. Forecast and health score
   -------------------------
   ``sales_forecast()`` projects the next day and week from a 7-day simple
   moving average. ``health_score()`` combines growth, profitability and
   activity into a single 0-100 score.

``build_insights()`` computes everything from one (sales, expenses) snapshot
and ``insights_to_dict()`` turns the result into plain JSON-serializable data.

Notes
-----
All functions are pure: they never mutate their inputs, hold no state
between calls and raise no exception for well-typed input. Empty collections
and short histories produce sentinel values (zeros, "N/A", "No Data",
empty lists). Input order is irrelevant; nothing assumes sorted records.

Dates are interpreted in local wall-clock time. Timezone-aware datetimes
are converted to the local timezone and made naive before bucketing.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional, Union

import pandas as pd

from .periods import (
    end_of_day,
    end_of_last_month,
    end_of_last_week,
    end_of_month,
    end_of_week,
    end_of_yesterday,
    start_of_day,
    start_of_last_month,
    start_of_last_week,
    start_of_month,
    start_of_week,
    start_of_yesterday,
)
from .records import NewExpense, NewSale

Record = Union[NewSale, NewExpense]

# ---------------------------------------------------------------------------
# Business constants
# ---------------------------------------------------------------------------

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
NOT_AVAILABLE = "N/A"

GROWTH_WEIGHT = 0.3
PROFIT_WEIGHT = 0.4
ACTIVITY_WEIGHT = 0.3

GROWTH_BASELINE = 50.0
PROFIT_MARGIN_FACTOR = 2.5
ACTIVITY_WINDOW_DAYS = 30
ACTIVITY_FACTOR = 120.0

NO_DATA_STATUS = "No Data"
HEALTH_STATUSES = (
    (80, "Excellent & Growing"),
    (60, "Good & Healthy"),
    (40, "Needs Attention"),
)
CRITICAL_STATUS = "Critical Condition"

FORECAST_DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class InsightsSettings:
    """
    Tunable constants of the engine.

    Overridden from the [insights] section of the configuration. Health-score
    weights and breakpoints are not tunable.
    """

    slow_moving_days: int = 30
    top_products_limit: int = 5
    forecast_window: int = 7
    trend_chart_days: int = 30


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrendComparison:
    """Current-period total against the immediately preceding period."""

    current: float
    previous: float
    change: float


@dataclass(frozen=True)
class DailyPoint:
    name: str
    sales: float
    expenses: float


@dataclass(frozen=True)
class Trends:
    daily: TrendComparison
    weekly: TrendComparison
    monthly: TrendComparison
    trend_chart_data: list[DailyPoint]


@dataclass(frozen=True)
class ProductStat:
    name: str
    quantity: int
    revenue: float


@dataclass(frozen=True)
class SlowMover:
    name: str
    last_sold: datetime


@dataclass(frozen=True)
class HourPoint:
    name: str
    sales: float


@dataclass(frozen=True)
class PeakTimes:
    busiest_hour: str
    busiest_day: str
    slowest_day: str
    hourly_chart_data: list[HourPoint]


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    value: float


@dataclass(frozen=True)
class Forecast:
    next_day: float
    next_week: float


@dataclass(frozen=True)
class HealthScore:
    """
    Composite shop health score.

    Attributes
    ----------
    score:
        Rounded weighted score in [0, 100].
    status:
        Stepped label derived from the score, or "No Data".
    growth_score, profit_score, activity_score:
        Individual components in [0, 100], before weighting.
    """

    score: int
    status: str
    growth_score: float = 0.0
    profit_score: float = 0.0
    activity_score: float = 0.0


@dataclass(frozen=True)
class Insights:
    """Bundle of every statistic computed from one (sales, expenses) snapshot."""

    generated_at: datetime
    trends: Trends
    top_products: list[ProductStat]
    slow_moving_products: list[SlowMover]
    peak_times: PeakTimes
    expense_categories: list[CategoryTotal]
    forecast: Forecast
    health: HealthScore
    heatmap: dict[str, float] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Frame helpers
# ---------------------------------------------------------------------------


def local_naive(value: datetime) -> datetime:
    """Return ``value`` as a naive local datetime."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _now(now: Optional[datetime]) -> datetime:
    return local_naive(now) if now is not None else datetime.now()


def _amount_of(item: Record) -> float:
    # Sales carry a derived 'total', expenses an 'amount'.
    if isinstance(item, NewSale):
        return float(item.total)
    return float(item.amount)


def amount_frame(items: Iterable[Record]) -> pd.DataFrame:
    """
    Build a two-column frame (date, amount) from sales or expenses.

    The 'date' column is datetime64[us] in local wall-clock time, so any
    date a Python datetime can hold fits in it.
    """
    dates: list[datetime] = []
    amounts: list[float] = []
    for item in items:
        dates.append(local_naive(item.date))
        amounts.append(_amount_of(item))

    return pd.DataFrame(
        {
            "date": pd.Series(dates, dtype="datetime64[us]"),
            "amount": pd.Series(amounts, dtype="float64"),
        }
    )


def _sum_between(frame: pd.DataFrame, start: datetime, end: datetime) -> float:
    """Sum 'amount' over rows with ``start <= date <= end``."""
    mask = (frame["date"] >= pd.Timestamp(local_naive(start))) & (
        frame["date"] <= pd.Timestamp(local_naive(end))
    )
    return float(frame.loc[mask, "amount"].sum())


def daily_totals(frame: pd.DataFrame) -> pd.Series:
    """Total amount per calendar day, in chronological order."""
    if frame.empty:
        return pd.Series(dtype="float64")
    return frame.groupby(frame["date"].dt.date)["amount"].sum().sort_index()


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    # Halves go up (85.5 -> 86), unlike round()'s banker's rounding.
    return int(math.floor(value + 0.5))


def _day_label(day: datetime) -> str:
    return f"{day:%b} {day.day}"


# ---------------------------------------------------------------------------
# Range total primitive
# ---------------------------------------------------------------------------


def total_in_range(items: Iterable[Record], start: datetime, end: datetime) -> float:
    """
    Sum the monetary value of every record dated within ``[start, end]``.

    Parameters
    ----------
    items:
        Sales (summing ``total``) or expenses (summing ``amount``).
    start, end:
        Inclusive boundaries.

    Returns
    -------
    float
        The total, 0.0 when no record falls in the window.
    """
    return _sum_between(amount_frame(items), start, end)


def percent_change(current: float, previous: float) -> float:
    """
    Percent change from ``previous`` to ``current``.

    Going from nothing to something counts as +100%; nothing to nothing is 0.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------


def _compare(
    frame: pd.DataFrame,
    current: tuple[datetime, datetime],
    previous: tuple[datetime, datetime],
) -> TrendComparison:
    current_total = _sum_between(frame, *current)
    previous_total = _sum_between(frame, *previous)
    return TrendComparison(
        current=current_total,
        previous=previous_total,
        change=percent_change(current_total, previous_total),
    )


def calculate_trends(
    sales: Sequence[NewSale],
    expenses: Sequence[NewExpense],
    now: Optional[datetime] = None,
    chart_days: int = 30,
) -> Trends:
    """
    Compare sales over day / week / month periods and build the daily chart.

    The chart holds ``chart_days`` points, oldest first, ending with today.
    Each point pairs the sales total and the expense total of that day.
    """
    now = _now(now)
    sales_frame = amount_frame(sales)
    expense_frame = amount_frame(expenses)

    daily = _compare(
        sales_frame,
        (start_of_day(now), end_of_day(now)),
        (start_of_yesterday(now), end_of_yesterday(now)),
    )
    weekly = _compare(
        sales_frame,
        (start_of_week(now), end_of_week(now)),
        (start_of_last_week(now), end_of_last_week(now)),
    )
    monthly = _compare(
        sales_frame,
        (start_of_month(now), end_of_month(now)),
        (start_of_last_month(now), end_of_last_month(now)),
    )

    today = start_of_day(now)
    chart: list[DailyPoint] = []
    for offset in range(chart_days - 1, -1, -1):
        day = today - timedelta(days=offset)
        chart.append(
            DailyPoint(
                name=_day_label(day),
                sales=_sum_between(sales_frame, day, end_of_day(day)),
                expenses=_sum_between(expense_frame, day, end_of_day(day)),
            )
        )

    return Trends(daily=daily, weekly=weekly, monthly=monthly, trend_chart_data=chart)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def top_products(sales: Sequence[NewSale], limit: int = 5) -> list[ProductStat]:
    """
    Best-selling items by revenue.

    Quantities and revenues are summed per item name. Ties keep the order in
    which the items first appear in ``sales``.
    """
    if not sales:
        return []

    frame = pd.DataFrame(
        {
            "name": [s.item_name for s in sales],
            "quantity": [int(s.quantity) for s in sales],
            "revenue": [float(s.total) for s in sales],
        }
    )
    grouped = frame.groupby("name", sort=False).agg(
        quantity=("quantity", "sum"),
        revenue=("revenue", "sum"),
    )
    ranked = grouped.sort_values("revenue", ascending=False, kind="stable").head(limit)

    return [
        ProductStat(name=str(row.Index), quantity=int(row.quantity), revenue=float(row.revenue))
        for row in ranked.itertuples()
    ]


def slow_moving_products(
    sales: Sequence[NewSale],
    now: Optional[datetime] = None,
    threshold_days: int = 30,
) -> list[SlowMover]:
    """
    Items whose most recent sale is older than ``threshold_days``.

    The cut-off is ``now - threshold_days`` (strict comparison). Results are
    sorted by last sale, the most neglected item first.
    """
    if not sales:
        return []

    now = _now(now)
    frame = pd.DataFrame(
        {
            "name": [s.item_name for s in sales],
            "date": pd.Series(
                [local_naive(s.date) for s in sales], dtype="datetime64[us]"
            ),
        }
    )
    last_sold = frame.groupby("name", sort=False)["date"].max()
    cutoff = pd.Timestamp(now - timedelta(days=threshold_days))
    stale = last_sold[last_sold < cutoff].sort_values(kind="stable")

    return [
        SlowMover(name=str(name), last_sold=ts.to_pydatetime()) for name, ts in stale.items()
    ]


# ---------------------------------------------------------------------------
# Peak times, expenses, heatmap
# ---------------------------------------------------------------------------


def peak_times(sales: Sequence[NewSale]) -> PeakTimes:
    """
    Revenue by hour of day (0-23) and day of week (0=Sunday .. 6=Saturday).

    Ties resolve to the lowest index. Without sales, every label is "N/A".
    """
    frame = amount_frame(sales)

    hourly = (
        frame.groupby(frame["date"].dt.hour)["amount"].sum().reindex(range(24), fill_value=0.0)
    )
    # pandas counts Monday as 0; shift so that Sunday is 0.
    weekday = (frame["date"].dt.dayofweek + 1) % 7
    by_day = frame.groupby(weekday)["amount"].sum().reindex(range(7), fill_value=0.0)

    chart = [HourPoint(name=f"{hour}:00", sales=float(value)) for hour, value in hourly.items()]

    if frame.empty:
        return PeakTimes(
            busiest_hour=NOT_AVAILABLE,
            busiest_day=NOT_AVAILABLE,
            slowest_day=NOT_AVAILABLE,
            hourly_chart_data=chart,
        )

    busiest_hour = int(hourly.idxmax())
    return PeakTimes(
        busiest_hour=f"{busiest_hour}:00 - {busiest_hour + 1}:00",
        busiest_day=DAY_NAMES[int(by_day.idxmax())],
        slowest_day=DAY_NAMES[int(by_day.idxmin())],
        hourly_chart_data=chart,
    )


def expense_category_distribution(expenses: Sequence[NewExpense]) -> list[CategoryTotal]:
    """Expense amounts summed per category, largest first."""
    if not expenses:
        return []

    frame = pd.DataFrame(
        {
            "category": [e.category for e in expenses],
            "amount": [float(e.amount) for e in expenses],
        }
    )
    totals = (
        frame.groupby("category", sort=False)["amount"]
        .sum()
        .sort_values(ascending=False, kind="stable")
    )
    return [CategoryTotal(name=str(name), value=float(value)) for name, value in totals.items()]


def sales_heatmap(sales: Sequence[NewSale]) -> dict[str, float]:
    """Revenue per calendar day, keyed by ISO date ("YYYY-MM-DD")."""
    daily = daily_totals(amount_frame(sales))
    return {day.isoformat(): float(value) for day, value in daily.items()}


# ---------------------------------------------------------------------------
# Forecast and health score
# ---------------------------------------------------------------------------


def sales_forecast(sales: Sequence[NewSale], window: int = 7) -> Forecast:
    """
    Naive constant-rate forecast from a simple moving average.

    Revenue is grouped by calendar day and the ``window`` most recent daily
    totals are averaged. With fewer distinct sale days than ``window`` the
    forecast is zero. No trend or seasonality adjustment is applied.
    """
    daily = daily_totals(amount_frame(sales))
    if len(daily) < window:
        return Forecast(next_day=0.0, next_week=0.0)

    average = float(daily.iloc[-window:].sum()) / window
    return Forecast(next_day=average, next_week=average * FORECAST_DAYS_PER_WEEK)


def _health_status(score: int) -> str:
    for threshold, label in HEALTH_STATUSES:
        if score >= threshold:
            return label
    return CRITICAL_STATUS


def health_score(
    sales: Sequence[NewSale],
    expenses: Sequence[NewExpense],
    now: Optional[datetime] = None,
) -> HealthScore:
    """
    Composite 0-100 score of growth (30%), profitability (40%) and activity (30%).

    Components
    ----------
    growth:
        This week vs last week percent change, as ``50 + change`` clamped
        to [0, 100]. A flat week scores 50.
    profitability:
        Lifetime margin ``(revenue - expenses) / revenue * 100`` times 2.5,
        clamped. A 40% margin saturates.
    activity:
        Distinct sale days among today and the 29 days before it, as
        ``days / 30 * 120``, clamped. 25 active days saturate.
    """
    if not sales:
        return HealthScore(score=0, status=NO_DATA_STATUS)

    now = _now(now)
    sales_frame = amount_frame(sales)
    expense_frame = amount_frame(expenses)

    growth = percent_change(
        _sum_between(sales_frame, start_of_week(now), end_of_week(now)),
        _sum_between(sales_frame, start_of_last_week(now), end_of_last_week(now)),
    )
    growth_score = _clamp(GROWTH_BASELINE + growth)

    total_revenue = float(sales_frame["amount"].sum())
    total_expenses = float(expense_frame["amount"].sum())
    margin = (total_revenue - total_expenses) / total_revenue * 100 if total_revenue > 0 else 0.0
    profit_score = _clamp(margin * PROFIT_MARGIN_FACTOR)

    window_start = start_of_day(now) - timedelta(days=ACTIVITY_WINDOW_DAYS - 1)
    window_end = end_of_day(now)
    recent = sales_frame.loc[
        (sales_frame["date"] >= pd.Timestamp(window_start))
        & (sales_frame["date"] <= pd.Timestamp(window_end)),
        "date",
    ]
    active_days = int(recent.dt.date.nunique())
    activity_score = _clamp(active_days / ACTIVITY_WINDOW_DAYS * ACTIVITY_FACTOR)

    score = _round_half_up(
        growth_score * GROWTH_WEIGHT
        + profit_score * PROFIT_WEIGHT
        + activity_score * ACTIVITY_WEIGHT
    )

    return HealthScore(
        score=score,
        status=_health_status(score),
        growth_score=growth_score,
        profit_score=profit_score,
        activity_score=activity_score,
    )


# ---------------------------------------------------------------------------
# Insights bundle
# ---------------------------------------------------------------------------


def build_insights(
    sales: Sequence[NewSale],
    expenses: Sequence[NewExpense],
    now: Optional[datetime] = None,
    settings: Optional[InsightsSettings] = None,
) -> Insights:
    """
    Compute every statistic from one consistent (sales, expenses) snapshot.

    Mixing snapshots taken at different times is a caller error the engine
    cannot detect.
    """
    now = _now(now)
    settings = settings or InsightsSettings()

    return Insights(
        generated_at=now,
        trends=calculate_trends(sales, expenses, now, chart_days=settings.trend_chart_days),
        top_products=top_products(sales, limit=settings.top_products_limit),
        slow_moving_products=slow_moving_products(
            sales, now, threshold_days=settings.slow_moving_days
        ),
        peak_times=peak_times(sales),
        expense_categories=expense_category_distribution(expenses),
        forecast=sales_forecast(sales, window=settings.forecast_window),
        health=health_score(sales, expenses, now),
        heatmap=sales_heatmap(sales),
    )


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def insights_to_dict(insights: Insights) -> dict[str, Any]:
    """Plain, JSON-serializable representation of an Insights bundle."""
    return _jsonable(asdict(insights))
