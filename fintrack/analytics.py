"""Aggregations over a user's transactions.

Everything here is a plain function over an in-memory list of transaction
objects (anything with ``type``, ``amount``, ``date`` and ``category``
attributes). Nothing is cached; callers recompute whenever the selection
changes.
"""
import calendar
from datetime import date
from decimal import Decimal

from .errors import ValidationError

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

# Fixed divisor for average daily spend, per lookback choice
LOOKBACK_WINDOWS = {
    "1month": 30,
    "3months": 90,
    "6months": 180,
    "1year": 365,
}

_LOOKBACK_MONTHS = {
    "1month": 1,
    "3months": 3,
    "6months": 6,
    "1year": 12,
}

ZERO = Decimal("0")


def _amount(tx) -> Decimal:
    value = tx.amount
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _months_back(today: date, months: int) -> date:
    month_index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def lookback_start(window: str, today: date) -> date:
    if window not in _LOOKBACK_MONTHS:
        raise ValidationError("Period must be one of: " + ", ".join(LOOKBACK_WINDOWS))
    return _months_back(today, _LOOKBACK_MONTHS[window])


def filter_by_lookback(transactions, window, today=None):
    if today is None:
        today = date.today()
    start = lookback_start(window, today)
    return [tx for tx in transactions if start <= tx.date <= today]


def aggregate_by_category(transactions):
    totals = {}
    for tx in transactions:
        if tx.type != "expense" or tx.category is None:
            continue
        name = tx.category.name
        if name not in totals:
            totals[name] = {"name": name, "total": ZERO, "color": tx.category.color}
        totals[name]["total"] += abs(_amount(tx))
    return list(totals.values())


def income_vs_expense(transactions):
    income = sum((_amount(tx) for tx in transactions if tx.type == "income"), ZERO)
    expense = sum((abs(_amount(tx)) for tx in transactions if tx.type == "expense"), ZERO)
    return {"income": income, "expense": expense}


def aggregate_monthly(transactions):
    """Income and expense per calendar month, oldest first.

    Buckets use the stored date's own year and month so a transaction on the
    1st never slides into the previous month.
    """
    buckets = {}
    for tx in transactions:
        key = (tx.date.year, tx.date.month)
        bucket = buckets.setdefault(key, {"income": ZERO, "expense": ZERO})
        if tx.type == "income":
            bucket["income"] += _amount(tx)
        else:
            bucket["expense"] += abs(_amount(tx))

    series = []
    for (year, month) in sorted(buckets):
        series.append({
            "year": year,
            "month": month,
            "label": f"{MONTH_NAMES[month - 1]} {str(year)[-2:]}",
            "income": buckets[(year, month)]["income"],
            "expense": buckets[(year, month)]["expense"],
        })
    return series


def top_category(transactions):
    """Highest-spend category as ``{name, amount}``; ties go to the name that sorts first."""
    totals = aggregate_by_category(transactions)
    if not totals:
        return None
    best = min(totals, key=lambda row: (-row["total"], row["name"]))
    return {"name": best["name"], "amount": best["total"]}


def compute_insights(transactions, window_days):
    totals = income_vs_expense(transactions)
    income, expense = totals["income"], totals["expense"]
    net_saved = income - expense
    savings_rate = net_saved / income if income != 0 else ZERO
    return {
        "top_category": top_category(transactions),
        "avg_daily_spend": expense / max(1, int(window_days)),
        "net_saved": net_saved,
        "savings_rate": savings_rate,
    }


def category_breakdown(transactions):
    rows = aggregate_by_category(transactions)
    total_expense = income_vs_expense(transactions)["expense"]
    for row in rows:
        if total_expense > 0:
            row["percentage"] = round(float(row["total"] / total_expense * 100), 1)
        else:
            row["percentage"] = 0.0
    return rows


def dashboard_stats(transactions):
    totals = income_vs_expense(transactions)
    return {
        "total_income": totals["income"],
        "total_expenses": totals["expense"],
        "net_income": totals["income"] - totals["expense"],
        "transaction_count": len(transactions),
    }
