import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from fintrack import analytics
from fintrack.errors import ValidationError

FOOD = SimpleNamespace(name="Food", color="#EF4444")
RENT = SimpleNamespace(name="Rent", color="#3B82F6")
SALARY = SimpleNamespace(name="Salary", color="#10B981")


def tx(type, amount, on_date=datetime.date(2025, 1, 10), category=None):
    return SimpleNamespace(type=type, amount=Decimal(str(amount)), date=on_date, category=category)


def test_category_totals_skip_income_and_empty_categories():
    rows = analytics.aggregate_by_category([
        tx("expense", 50, category=FOOD),
        tx("expense", 30, category=FOOD),
        tx("income", 100, category=SALARY),
    ])
    assert rows == [{"name": "Food", "total": Decimal("80"), "color": "#EF4444"}]


def test_category_with_only_zero_expenses_is_kept():
    rows = analytics.aggregate_by_category([tx("expense", 0, category=RENT)])
    assert rows == [{"name": "Rent", "total": Decimal("0"), "color": "#3B82F6"}]


def test_category_totals_use_absolute_amounts_and_skip_uncategorized():
    rows = analytics.aggregate_by_category([
        tx("expense", -20, category=RENT),
        tx("expense", 5, category=RENT),
        tx("expense", 99),
    ])
    assert [(r["name"], r["total"]) for r in rows] == [("Rent", Decimal("25"))]


def test_income_vs_expense():
    totals = analytics.income_vs_expense([
        tx("income", 1000),
        tx("income", 250),
        tx("expense", -300),
        tx("expense", 200),
    ])
    assert totals == {"income": Decimal("1250"), "expense": Decimal("500")}


def test_monthly_series_is_chronological_across_years():
    series = analytics.aggregate_monthly([
        tx("expense", 40, datetime.date(2025, 1, 3)),
        tx("income", 900, datetime.date(2024, 12, 31)),
        tx("expense", 60, datetime.date(2024, 12, 1)),
        tx("income", 100, datetime.date(2025, 1, 31)),
    ])
    assert [(r["year"], r["month"]) for r in series] == [(2024, 12), (2025, 1)]
    assert [r["label"] for r in series] == ["Dec 24", "Jan 25"]
    assert series[0]["income"] == Decimal("900")
    assert series[0]["expense"] == Decimal("60")
    assert series[1]["income"] == Decimal("100")
    assert series[1]["expense"] == Decimal("40")


def test_monthly_series_orders_months_numerically():
    series = analytics.aggregate_monthly([
        tx("expense", 1, datetime.date(2025, 8, 1)),
        tx("expense", 1, datetime.date(2025, 4, 1)),
        tx("expense", 1, datetime.date(2025, 12, 1)),
    ])
    assert [r["label"] for r in series] == ["Apr 25", "Aug 25", "Dec 25"]


def test_insights_with_zero_income():
    insights = analytics.compute_insights([tx("expense", 300, category=FOOD)], 30)
    assert insights["savings_rate"] == 0
    assert insights["net_saved"] == Decimal("-300")
    assert insights["avg_daily_spend"] == Decimal("10")
    assert insights["top_category"] == {"name": "Food", "amount": Decimal("300")}


def test_insights_savings_rate_and_fixed_window_divisor():
    insights = analytics.compute_insights([
        tx("income", 2000, category=SALARY),
        tx("expense", 450, category=RENT),
        tx("expense", 50, category=FOOD),
    ], 90)
    assert insights["net_saved"] == Decimal("1500")
    assert insights["savings_rate"] == Decimal("0.75")
    assert insights["avg_daily_spend"] == Decimal("500") / 90
    assert insights["top_category"]["name"] == "Rent"


def test_insights_on_empty_list():
    insights = analytics.compute_insights([], 30)
    assert insights["top_category"] is None
    assert insights["savings_rate"] == 0
    assert insights["avg_daily_spend"] == 0


def test_top_category_tie_goes_to_name_order():
    txs = [tx("expense", 100, category=RENT), tx("expense", 100, category=FOOD)]
    assert analytics.top_category(txs)["name"] == "Food"


def test_lookback_start_uses_calendar_months():
    today = datetime.date(2025, 3, 31)
    assert analytics.lookback_start("1month", today) == datetime.date(2025, 2, 28)
    assert analytics.lookback_start("3months", today) == datetime.date(2024, 12, 31)
    assert analytics.lookback_start("1year", today) == datetime.date(2024, 3, 31)


def test_lookback_start_rejects_unknown_window():
    with pytest.raises(ValidationError):
        analytics.lookback_start("2weeks", datetime.date(2025, 3, 31))


def test_filter_by_lookback_excludes_old_and_future_dates():
    today = datetime.date(2025, 3, 15)
    kept = tx("expense", 1, datetime.date(2025, 2, 15))
    rows = analytics.filter_by_lookback([
        kept,
        tx("expense", 1, datetime.date(2025, 2, 14)),
        tx("expense", 1, datetime.date(2025, 3, 16)),
    ], "1month", today)
    assert rows == [kept]


def test_category_breakdown_percentages():
    rows = analytics.category_breakdown([
        tx("expense", 75, category=FOOD),
        tx("expense", 25, category=RENT),
    ])
    assert {r["name"]: r["percentage"] for r in rows} == {"Food": 75.0, "Rent": 25.0}


def test_dashboard_stats():
    stats = analytics.dashboard_stats([tx("income", 100), tx("expense", 40)])
    assert stats == {
        "total_income": Decimal("100"),
        "total_expenses": Decimal("40"),
        "net_income": Decimal("60"),
        "transaction_count": 2,
    }
