"""Budget rollups.

A budget never stores how much has been spent against it. Every read sums
the matching expense transactions again, so the figure always reflects the
transaction table at request time.
"""
from datetime import date, timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy import func

from .errors import ValidationError
from .extensions import db
from .models import Transaction

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(CENT)
    return Decimal(str(value)).quantize(CENT)


def period_window_start(period: str, today: date) -> date:
    """First date (inclusive) that counts towards a budget of ``period``."""
    if period == "weekly":
        return today - timedelta(days=7)
    if period == "monthly":
        return today.replace(day=1)
    if period == "yearly":
        return date(today.year, 1, 1)
    raise ValidationError("Period must be weekly, monthly, or yearly")


def compute_spent(user_id, category_id, period, today=None, include_future=None) -> Decimal:
    if today is None:
        today = date.today()
    if include_future is None:
        include_future = current_app.config.get("BUDGET_INCLUDE_FUTURE", True)

    start = period_window_start(period, today)
    query = db.session.query(func.coalesce(func.sum(func.abs(Transaction.amount)), 0)).filter(
        Transaction.user_id == user_id,
        Transaction.category_id == category_id,
        Transaction.type == "expense",
        Transaction.date >= start,
    )
    if not include_future:
        query = query.filter(Transaction.date <= today)
    return to_decimal(query.scalar())


def budget_progress(amount, spent, warning_ratio=0.8):
    amount = to_decimal(amount)
    spent = to_decimal(spent)
    if amount > 0:
        percent_used = min(float(spent / amount * 100), 100.0)
    else:
        percent_used = 100.0
    if spent >= amount:
        status = "over"
    elif spent >= amount * Decimal(str(warning_ratio)):
        status = "near"
    else:
        status = "ok"
    return {
        "spent": float(spent),
        "remaining": float(amount - spent),
        "percent_used": round(percent_used, 1),
        "status": status,
    }


def serialize_budget(budget, today=None):
    """Budget payload with category display info and a fresh rollup."""
    spent = compute_spent(budget.user_id, budget.category_id, budget.period, today=today)
    payload = {
        "id": budget.id,
        "category_id": budget.category_id,
        "category": budget.category.to_dict() if budget.category else None,
        "amount": float(budget.amount),
        "period": budget.period,
        "created_at": budget.created_at.isoformat() if budget.created_at else None,
        "updated_at": budget.updated_at.isoformat() if budget.updated_at else None,
    }
    payload.update(budget_progress(budget.amount, spent, current_app.config.get("BUDGET_WARNING_RATIO", 0.8)))
    return payload
