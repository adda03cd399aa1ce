from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from ...extensions import db
from ...errors import ValidationError
from ...models import Transaction, Category
from ...validation import clean_transaction_fields, parse_date

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


def user_transactions(user_id, start_date=None, end_date=None, tx_type=None, category_id=None):
    """The user's transactions, newest first, with optional filters."""
    query = Transaction.query.filter(Transaction.user_id == user_id)
    if start_date:
        query = query.filter(Transaction.date >= start_date)
    if end_date:
        query = query.filter(Transaction.date <= end_date)
    if tx_type:
        query = query.filter(Transaction.type == tx_type)
    if category_id:
        query = query.filter(Transaction.category_id == category_id)
    return query.order_by(Transaction.date.desc(), Transaction.created_at.desc(), Transaction.id.desc()).all()


def check_category(category_id, user_id):
    if category_id is None:
        return
    if not Category.visible_to(user_id).filter(Category.id == category_id).first():
        raise ValidationError("Category not found")


@transactions_bp.route("/")
@login_required
def list_transactions():
    args = request.args
    rows = user_transactions(
        current_user.id,
        start_date=parse_date(args.get("start_date")),
        end_date=parse_date(args.get("end_date")),
        tx_type=args.get("type") if args.get("type") in ("income", "expense") else None,
        category_id=args.get("category_id", type=int),
    )
    return jsonify([t.to_dict() for t in rows])


@transactions_bp.route("/<int:transaction_id>")
@login_required
def get_transaction(transaction_id):
    tx = Transaction.query.filter_by(id=transaction_id, user_id=current_user.id).first()
    if not tx:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify(tx.to_dict())


@transactions_bp.route("/", methods=["POST"])
@login_required
def create_transaction():
    data = request.get_json(silent=True) or {}
    fields = clean_transaction_fields(data)
    check_category(fields.get("category_id"), current_user.id)

    tx = Transaction(user_id=current_user.id, **fields)
    db.session.add(tx)
    db.session.commit()
    return jsonify(tx.to_dict()), 201


@transactions_bp.route("/<int:transaction_id>", methods=["PUT"])
@login_required
def update_transaction(transaction_id):
    tx = Transaction.query.filter_by(id=transaction_id, user_id=current_user.id).first()
    if not tx:
        return jsonify({"error": "Transaction not found"}), 404

    data = request.get_json(silent=True) or {}
    fields = clean_transaction_fields(data, partial=True)
    if "category_id" in fields:
        check_category(fields["category_id"], current_user.id)
    for key, value in fields.items():
        setattr(tx, key, value)
    db.session.commit()
    return jsonify(tx.to_dict())


@transactions_bp.route("/<int:transaction_id>", methods=["DELETE"])
@login_required
def delete_transaction(transaction_id):
    tx = Transaction.query.filter_by(id=transaction_id, user_id=current_user.id).first()
    if not tx:
        return jsonify({"error": "Transaction not found"}), 404
    db.session.delete(tx)
    db.session.commit()
    return jsonify({"message": "Transaction deleted successfully"})
