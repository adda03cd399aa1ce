import logging
import re

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from ...extensions import db
from ...models import User

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def issue_token(user):
    return create_access_token(identity=str(user.id), additional_claims={"email": user.email})


@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    email = (data.get("email") or "").strip().lower() or None

    if not username:
        return jsonify({"error": "Username is required"}), 400
    if not password:
        return jsonify({"error": "Password is required"}), 400
    if len(password) < MIN_PASSWORD_LENGTH:
        return jsonify({"error": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"}), 400
    if email and not EMAIL_RE.match(email):
        return jsonify({"error": "Please provide a valid email address"}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({"error": "Username is already taken"}), 409
    if email and User.query.filter_by(email=email).first():
        return jsonify({"error": "User with this email already exists"}), 409

    user = User(
        username=username,
        email=email,
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info("Registered user %s", user.id)

    return jsonify({
        "message": "User registered successfully",
        "token": issue_token(user),
        "user": user.to_dict(),
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    if not username or not password:
        return jsonify({"error": "Username and password are required"}), 400

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        logger.info("Failed login for %r", username)
        return jsonify({"error": "Invalid username or password"}), 401

    return jsonify({
        "message": "Login successful",
        "token": issue_token(user),
        "user": user.to_dict(),
    })


@auth_bp.route("/profile")
@login_required
def profile():
    return jsonify({"user": current_user.to_dict()})


@auth_bp.route("/verify-token", methods=["POST"])
def verify_token():
    data = request.get_json(silent=True) or {}
    token = data.get("token")
    if not token:
        return jsonify({"error": "Token is required"}), 400
    try:
        claims = decode_token(token)
    except (JWTExtendedException, PyJWTError):
        return jsonify({"valid": False, "error": "Invalid or expired token"}), 401

    user = db.session.get(User, int(claims["sub"]))
    if not user:
        return jsonify({"valid": False, "error": "User no longer exists"}), 401
    return jsonify({"valid": True, "user": user.to_dict()})


@auth_bp.route("/update-password", methods=["PUT"])
@login_required
def update_password():
    data = request.get_json(silent=True) or {}
    current_password = data.get("currentPassword")
    new_password = data.get("newPassword")
    if not current_password or not new_password:
        return jsonify({"error": "Current password and new password are required"}), 400
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return jsonify({"error": f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"}), 400
    if not current_user.check_password(current_password):
        return jsonify({"error": "Current password is incorrect"}), 401

    current_user.set_password(new_password)
    db.session.commit()
    return jsonify({"message": "Password updated successfully"})


@auth_bp.route("/update-profile", methods=["PUT"])
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    fields = {k: data[k] for k in ("first_name", "last_name", "email", "username") if k in data}
    if not fields:
        return jsonify({"error": "No fields to update"}), 400

    if "email" in fields:
        email = fields["email"] = (fields["email"] or "").strip().lower() or None
        if email and email != current_user.email:
            if not EMAIL_RE.match(email):
                return jsonify({"error": "Please provide a valid email address"}), 400
            other = User.query.filter(User.email == email, User.id != current_user.id).first()
            if other:
                return jsonify({"error": "Email is already taken by another user"}), 409

    username = fields.get("username")
    if "username" in fields and not username:
        return jsonify({"error": "Username is required"}), 400
    if username and username != current_user.username:
        other = User.query.filter(User.username == username, User.id != current_user.id).first()
        if other:
            return jsonify({"error": "Username is already taken by another user"}), 409

    for key, value in fields.items():
        setattr(current_user, key, value)
    db.session.commit()
    return jsonify({"message": "Profile updated successfully", "user": current_user.to_dict()})
