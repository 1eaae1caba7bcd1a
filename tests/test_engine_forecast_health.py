import json
from datetime import datetime, timedelta

import pytest

from shop_ledger.engine import (
    InsightsSettings,
    build_insights,
    health_score,
    insights_to_dict,
    sales_forecast,
)
from shop_ledger.records import NewExpense, NewSale

NOW = datetime(2026, 10, 18, 20, 0)


def make_sale(when: datetime, price: float, item: str = "Bread") -> NewSale:
    return NewSale(item_name=item, quantity=1, price=price, date=when)


def test_forecast_needs_a_full_window_of_sale_days() -> None:
    """Five sales on a single day are one daily total, not five."""
    sales = [make_sale(datetime(2026, 10, 18, 8 + i, 0), 100.0) for i in range(5)]

    forecast = sales_forecast(sales)

    assert forecast.next_day == 0.0
    assert forecast.next_week == 0.0


def test_forecast_averages_the_most_recent_days_regardless_of_input_order() -> None:
    recent = [make_sale(datetime(2026, 10, 10 + i, 12, 0), 100.0) for i in range(7)]
    old = make_sale(datetime(2026, 9, 1, 12, 0), 1000.0)
    sales = [recent[3], old, recent[6], recent[0], recent[5], recent[1], recent[4], recent[2]]

    forecast = sales_forecast(sales)

    assert forecast.next_day == pytest.approx(100.0)
    assert forecast.next_week == pytest.approx(700.0)


def test_forecast_sums_each_day_before_averaging() -> None:
    sales = [make_sale(datetime(2026, 10, 1 + i, 9, 0), 70.0) for i in range(7)]
    sales.append(make_sale(datetime(2026, 10, 7, 15, 0), 70.0))

    forecast = sales_forecast(sales)

    assert forecast.next_day == pytest.approx(80.0)
    assert forecast.next_week == pytest.approx(560.0)


def test_forecast_custom_window() -> None:
    sales = [make_sale(datetime(2026, 10, 1 + i, 9, 0), 10.0 * (i + 1)) for i in range(3)]

    assert sales_forecast(sales, window=3).next_day == pytest.approx(20.0)
    assert sales_forecast(sales, window=4).next_day == 0.0
    assert sales_forecast([]).next_week == 0.0


def test_health_score_without_sales_is_no_data() -> None:
    expenses = [
        NewExpense(name="Rent", category="Rent", amount=500.0, date=datetime(2026, 10, 1))
    ]

    health = health_score([], expenses, now=NOW)

    assert health.score == 0
    assert health.status == "No Data"


def test_health_score_of_a_steady_profitable_shop() -> None:
    """
    One sale of 100 every day from Sep 24 to Oct 18 (25 days):
    flat week-on-week (growth 50), 40% margin (profit 100), 25 active days
    (activity 100) -> 0.3 * 50 + 0.4 * 100 + 0.3 * 100 = 85.
    """
    start = datetime(2026, 9, 24, 11, 0)
    sales = [make_sale(start + timedelta(days=i), 100.0) for i in range(25)]
    expenses = [
        NewExpense(name="Stock", category="Stock Purchase", amount=1500.0, date=datetime(2026, 9, 24))
    ]

    health = health_score(sales, expenses, now=NOW)

    assert health.growth_score == pytest.approx(50.0)
    assert health.profit_score == pytest.approx(100.0)
    assert health.activity_score == pytest.approx(100.0)
    assert health.score == 85
    assert health.status == "Excellent & Growing"


def test_health_score_of_an_inactive_loss_making_shop() -> None:
    sales = [make_sale(datetime(2026, 8, 1, 10, 0), 100.0)]
    expenses = [
        NewExpense(name="Rent", category="Rent", amount=400.0, date=datetime(2026, 8, 1))
    ]

    health = health_score(sales, expenses, now=NOW)

    assert health.profit_score == 0.0
    assert health.activity_score == 0.0
    assert health.score == 15
    assert health.status == "Critical Condition"


def test_health_score_is_bounded() -> None:
    # Huge growth and no expenses: every component saturates at 100.
    sales = [make_sale(datetime(2026, 10, 18, 9, 0) - timedelta(days=i), 1000.0) for i in range(7)]

    health = health_score(sales, [], now=NOW)

    assert 0 <= health.score <= 100
    assert health.growth_score == 100.0
    assert health.profit_score == 100.0


def test_build_insights_with_empty_ledger_never_raises() -> None:
    insights = build_insights([], [], now=NOW)

    assert insights.generated_at == NOW
    assert insights.top_products == []
    assert insights.slow_moving_products == []
    assert insights.peak_times.busiest_hour == "N/A"
    assert insights.forecast.next_day == 0.0
    assert insights.health.status == "No Data"
    assert insights.heatmap == {}


def test_build_insights_honours_settings() -> None:
    sales = [make_sale(NOW - timedelta(days=i), 10.0, item=f"Item {i}") for i in range(10)]
    settings = InsightsSettings(
        slow_moving_days=5, top_products_limit=2, forecast_window=3, trend_chart_days=7
    )

    insights = build_insights(sales, [], now=NOW, settings=settings)

    assert len(insights.top_products) == 2
    assert len(insights.trends.trend_chart_data) == 7
    assert [s.name for s in insights.slow_moving_products] == [
        "Item 9",
        "Item 8",
        "Item 7",
        "Item 6",
    ]
    assert insights.forecast.next_day == pytest.approx(10.0)


def test_insights_to_dict_is_json_serializable() -> None:
    sales = [make_sale(NOW - timedelta(days=40), 25.0, item="Soap")]

    data = insights_to_dict(build_insights(sales, [], now=NOW))

    assert data["generated_at"] == NOW.isoformat()
    assert data["slow_moving_products"][0]["name"] == "Soap"
    assert isinstance(data["slow_moving_products"][0]["last_sold"], str)
    assert set(data) >= {"trends", "top_products", "peak_times", "forecast", "health"}
    json.dumps(data)


def test_build_insights_handles_dates_outside_the_nanosecond_range() -> None:
    """Very old or far-future dates must not overflow the date column."""
    sales = [
        make_sale(datetime(1600, 1, 1, 9, 0), 10.0, item="Antique"),
        make_sale(datetime(2300, 1, 1, 9, 0), 20.0, item="Future"),
        make_sale(NOW - timedelta(hours=2), 30.0),
    ]

    insights = build_insights(sales, [], now=NOW)

    assert insights.trends.daily.current == pytest.approx(30.0)
    assert [s.name for s in insights.slow_moving_products] == ["Antique"]
    assert insights.slow_moving_products[0].last_sold == datetime(1600, 1, 1, 9, 0)
