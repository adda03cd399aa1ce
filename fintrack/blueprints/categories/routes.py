from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from sqlalchemy import case
from ...extensions import db
from ...models import Category, CATEGORY_TYPES

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")

CATCH_ALL_NAMES = ("Other Expenses", "Other Income")


@categories_bp.route("/")
@login_required
def list_categories():
    ctype = request.args.get("type")
    query = Category.visible_to(current_user.id)
    catch_all_last = case((Category.name.in_(CATCH_ALL_NAMES), 1), else_=0)
    if ctype in CATEGORY_TYPES:
        query = query.filter(Category.type == ctype).order_by(catch_all_last, Category.name)
    else:
        query = query.order_by(Category.type, catch_all_last, Category.name)
    return jsonify([c.to_dict() for c in query.all()])


@categories_bp.route("/", methods=["POST"])
@login_required
def create_category():
    data = request.get_json(silent=True) or {}
    name = (data.get("name") or "").strip()
    color = data.get("color")
    icon = data.get("icon")
    ctype = data.get("type")
    if not all([name, color, icon, ctype]):
        return jsonify({"error": "Name, color, icon, and type are required"}), 400
    if ctype not in CATEGORY_TYPES:
        return jsonify({"error": "Type must be income or expense"}), 400

    # prevent duplicates against user's own and global categories
    exists = Category.visible_to(current_user.id).filter(
        db.func.lower(Category.name) == name.lower(), Category.type == ctype
    ).first()
    if exists:
        return jsonify({"error": "Category name already exists"}), 409

    cat = Category(user_id=current_user.id, name=name, color=color, icon=icon, type=ctype)
    db.session.add(cat)
    db.session.commit()
    return jsonify(cat.to_dict()), 201


@categories_bp.route("/<int:category_id>", methods=["PUT"])
@login_required
def update_category(category_id):
    # Only the user's own categories are editable; global ones are shared
    cat = Category.query.filter_by(id=category_id, user_id=current_user.id).first()
    if not cat:
        return jsonify({"error": "Category not found"}), 404

    data = request.get_json(silent=True) or {}
    if "type" in data and data["type"] not in CATEGORY_TYPES:
        return jsonify({"error": "Type must be income or expense"}), 400
    name = cat.name
    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            return jsonify({"error": "Category name is required"}), 400
    ctype = data.get("type") or cat.type
    if name != cat.name or ctype != cat.type:
        existing = Category.visible_to(current_user.id).filter(
            db.func.lower(Category.name) == name.lower(),
            Category.type == ctype,
            Category.id != cat.id,
        ).first()
        if existing:
            return jsonify({"error": "A category with this name already exists"}), 409
    cat.name = name

    for key in ("color", "icon", "type"):
        if data.get(key):
            setattr(cat, key, data[key])
    db.session.commit()
    return jsonify(cat.to_dict())
