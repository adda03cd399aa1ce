import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from ...extensions import db
from ...errors import ValidationError
from ...models import Budget, Category
from ...rollup import serialize_budget
from ...validation import clean_budget_fields

logger = logging.getLogger(__name__)

budgets_bp = Blueprint("budgets", __name__, url_prefix="/api/budgets")


def find_budget(budget_id, user_id):
    """Budget owned by ``user_id``, or None. Other users' budgets are a miss too."""
    return Budget.query.filter_by(id=budget_id, user_id=user_id).first()


def ensure_unique(user_id, category_id, period, exclude_id=None):
    query = Budget.query.filter_by(user_id=user_id, category_id=category_id, period=period)
    if exclude_id is not None:
        query = query.filter(Budget.id != exclude_id)
    if query.first():
        logger.info("Rejected duplicate %s budget for user %s category %s", period, user_id, category_id)
        raise ValidationError(f"A {period} budget already exists for this category")


def commit_budget(budget):
    """Commit, turning a concurrent duplicate caught by the unique constraint into a 400."""
    period, user_id = budget.period, budget.user_id
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        logger.info("Unique constraint rejected %s budget for user %s", period, user_id)
        raise ValidationError(f"A {period} budget already exists for this category")


def ensure_category(category_id, user_id):
    if not Category.visible_to(user_id).filter(Category.id == category_id).first():
        raise ValidationError("Category not found")


@budgets_bp.route("/")
@login_required
def list_budgets():
    budgets = Budget.query.filter_by(user_id=current_user.id).order_by(Budget.created_at.desc(), Budget.id.desc()).all()
    return jsonify([serialize_budget(b) for b in budgets])


@budgets_bp.route("/<int:budget_id>")
@login_required
def get_budget(budget_id):
    budget = find_budget(budget_id, current_user.id)
    if not budget:
        return jsonify({"error": "Budget not found"}), 404
    return jsonify(serialize_budget(budget))


@budgets_bp.route("/", methods=["POST"])
@login_required
def create_budget():
    data = request.get_json(silent=True) or {}
    fields = clean_budget_fields(data)
    ensure_category(fields["category_id"], current_user.id)
    ensure_unique(current_user.id, fields["category_id"], fields["period"])

    budget = Budget(user_id=current_user.id, **fields)
    db.session.add(budget)
    commit_budget(budget)
    return jsonify(serialize_budget(budget)), 201


@budgets_bp.route("/<int:budget_id>", methods=["PUT"])
@login_required
def update_budget(budget_id):
    budget = find_budget(budget_id, current_user.id)
    if not budget:
        return jsonify({"error": "Budget not found"}), 404

    data = request.get_json(silent=True) or {}
    fields = clean_budget_fields(data, partial=True)
    if "category_id" in fields:
        ensure_category(fields["category_id"], current_user.id)
    ensure_unique(
        current_user.id,
        fields.get("category_id", budget.category_id),
        fields.get("period", budget.period),
        exclude_id=budget.id,
    )
    for key, value in fields.items():
        setattr(budget, key, value)
    commit_budget(budget)
    return jsonify(serialize_budget(budget))


@budgets_bp.route("/<int:budget_id>", methods=["DELETE"])
@login_required
def delete_budget(budget_id):
    budget = find_budget(budget_id, current_user.id)
    if not budget:
        return jsonify({"error": "Budget not found"}), 404
    db.session.delete(budget)
    db.session.commit()
    return jsonify({"message": "Budget deleted successfully"})


@budgets_bp.route("/category/<int:category_id>")
@login_required
def budgets_by_category(category_id):
    budgets = (
        Budget.query.filter_by(user_id=current_user.id, category_id=category_id)
        .order_by(Budget.created_at.desc(), Budget.id.desc())
        .all()
    )
    return jsonify([serialize_budget(b) for b in budgets])
