import calendar
import csv
import logging
from io import StringIO
from datetime import date
from flask import Blueprint, request, jsonify, make_response
from flask_login import login_required, current_user
from sqlalchemy import func
from ...extensions import db
from ...errors import ValidationError
from ...models import Transaction, Category
from ...validation import clean_transaction_fields, parse_date
from ... import analytics
from ..transactions.routes import user_transactions

logger = logging.getLogger(__name__)

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")

EXPORT_HEADER = ["Description", "Amount", "Date", "Type", "Category", "Payment Method", "Tags", "Created At"]

# CSV column -> accepted header spellings
IMPORT_COLUMNS = {
    "description": ("description", "Description"),
    "amount": ("amount", "Amount"),
    "transaction_date": ("date", "Date", "transaction_date"),
    "type": ("type", "Type"),
    "category": ("category", "Category"),
    "payment_method": ("payment_method", "Payment Method"),
    "tags": ("tags", "Tags"),
}


def _pick(row, names):
    for name in names:
        value = row.get(name)
        if value not in (None, ""):
            return value.strip()
    return None


@reports_bp.route("/")
@login_required
def index():
    today = date.today()
    year = request.args.get("year", default=today.year, type=int)
    if not 1 <= year <= 9999:
        raise ValidationError("Year must be between 1 and 9999")
    month = request.args.get("month", type=int)
    if month is not None and not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")

    if month:
        start = date(year, month, 1)
        end = date(year, month, calendar.monthrange(year, month)[1])
    else:
        start, end = date(year, 1, 1), date(year, 12, 31)
    txs = user_transactions(current_user.id, start_date=start, end_date=end)

    totals = analytics.income_vs_expense(txs)
    net = totals["income"] - totals["expense"]
    return jsonify({
        "year": year,
        "month": month,
        "period": "monthly" if month else "yearly",
        "totals": {
            "income": float(totals["income"]),
            "expense": float(totals["expense"]),
            "net": float(net),
        },
        "transaction_count": len(txs),
        "categories": [
            {"name": row["name"], "color": row["color"], "total": float(row["total"]), "percentage": row["percentage"]}
            for row in analytics.category_breakdown(txs)
        ],
    })


@reports_bp.route("/export.csv")
@login_required
def export_csv():
    args = request.args
    query = Transaction.query.filter(Transaction.user_id == current_user.id).outerjoin(
        Category, Transaction.category_id == Category.id
    )
    start = parse_date(args.get("start_date"))
    end = parse_date(args.get("end_date"))
    if start:
        query = query.filter(Transaction.date >= start)
    if end:
        query = query.filter(Transaction.date <= end)
    if args.get("type") in ("income", "expense"):
        query = query.filter(Transaction.type == args["type"])
    if args.get("category") and args["category"] != "all":
        query = query.filter(func.lower(Category.name) == args["category"].lower())

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_HEADER)
    for tx in query.order_by(Transaction.date.desc(), Transaction.id.desc()).all():
        writer.writerow([
            tx.description,
            f"{tx.amount:.2f}",
            tx.date.isoformat(),
            tx.type,
            tx.category.name if tx.category else "Uncategorized",
            tx.payment_method or "",
            ",".join(tx.tags or []),
            tx.created_at.isoformat() if tx.created_at else "",
        ])
    response = make_response(output.getvalue())
    response.headers["Content-Disposition"] = f"attachment; filename=transactions_{date.today().isoformat()}.csv"
    response.headers["Content-Type"] = "text/csv"
    return response


@reports_bp.route("/import", methods=["POST"])
@login_required
def import_csv():
    upload = request.files.get("csvFile")
    if upload is None or not upload.filename:
        return jsonify({"error": "No CSV file uploaded"}), 400
    if not upload.filename.lower().endswith(".csv") and upload.mimetype != "text/csv":
        return jsonify({"error": "Only CSV files are allowed"}), 400

    try:
        text = upload.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        return jsonify({"error": "Failed to parse CSV file"}), 400

    categories = {
        (c.name.lower(), c.type): c.id for c in Category.visible_to(current_user.id).all()
    }

    imported, skipped = [], []
    for line_no, row in enumerate(csv.DictReader(StringIO(text)), start=2):
        data = {key: _pick(row, names) for key, names in IMPORT_COLUMNS.items()}
        data["type"] = "income" if (data["type"] or "").lower() == "income" else "expense"
        category = data.pop("category")
        if category:
            data["category_id"] = categories.get((category.lower(), data["type"]))
        try:
            fields = clean_transaction_fields(data)
        except ValidationError as err:
            skipped.append({"line": line_no, "error": err.message})
            continue
        tx = Transaction(user_id=current_user.id, **fields)
        db.session.add(tx)
        imported.append(tx)

    db.session.commit()
    logger.info("CSV import for user %s: %d imported, %d skipped", current_user.id, len(imported), len(skipped))
    return jsonify({
        "message": "CSV imported successfully",
        "importedCount": len(imported),
        "skipped": skipped,
        "transactions": [tx.to_dict() for tx in imported],
    })
