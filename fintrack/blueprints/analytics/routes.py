from datetime import date

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from ... import analytics
from ..transactions.routes import user_transactions

analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


def money(value):
    return round(float(value), 2)


@analytics_bp.route("/")
@login_required
def overview():
    window = request.args.get("period", "1month")
    today = date.today()
    start = analytics.lookback_start(window, today)
    txs = analytics.filter_by_lookback(user_transactions(current_user.id), window, today)

    totals = analytics.income_vs_expense(txs)
    insights = analytics.compute_insights(txs, analytics.LOOKBACK_WINDOWS[window])
    top = insights["top_category"]

    return jsonify({
        "period": window,
        "start_date": start.isoformat(),
        "end_date": today.isoformat(),
        "transaction_count": len(txs),
        "category_data": [
            {"name": row["name"], "total": money(row["total"]), "color": row["color"]}
            for row in analytics.aggregate_by_category(txs)
        ],
        "income_vs_expense": {"income": money(totals["income"]), "expense": money(totals["expense"])},
        "monthly": [
            {
                "year": row["year"],
                "month": row["month"],
                "label": row["label"],
                "income": money(row["income"]),
                "expense": money(row["expense"]),
            }
            for row in analytics.aggregate_monthly(txs)
        ],
        "insights": {
            "top_category": {"name": top["name"], "amount": money(top["amount"])} if top else None,
            "avg_daily_spend": money(insights["avg_daily_spend"]),
            "net_saved": money(insights["net_saved"]),
            "savings_rate": round(float(insights["savings_rate"]), 4),
        },
    })


@analytics_bp.route("/dashboard")
@login_required
def dashboard():
    txs = user_transactions(current_user.id)
    stats = analytics.dashboard_stats(txs)
    return jsonify({
        "stats": {
            "total_income": money(stats["total_income"]),
            "total_expenses": money(stats["total_expenses"]),
            "net_income": money(stats["net_income"]),
            "transaction_count": stats["transaction_count"],
        },
        "recent_transactions": [t.to_dict() for t in txs[:3]],
        "monthly": [
            {"label": row["label"], "income": money(row["income"]), "expense": money(row["expense"])}
            for row in analytics.aggregate_monthly(txs)
        ],
    })
