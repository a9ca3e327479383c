from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user

from extensions import db, bcrypt
from models.user import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 8


def serialize_user(user):
    return {"id": user.id, "email": user.email, "name": user.name, "role": user.role}


def _form():
    """JSON object or form fields of the request; None when the JSON body is not an object
    or a field is not a string."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form
    if not isinstance(data, dict) or any(
            data.get(k) is not None and not isinstance(data.get(k), str) for k in ("email", "password", "name")):
        return None
    return data


@auth_bp.post("/register")
def register():
    data = _form()
    if data is None:
        return jsonify({"error": "email, password and name must be strings"}), 400
    email = (data.get("email") or "").strip().lower()
    pw = data.get("password") or ""
    if not email or "@" not in email:
        return jsonify({"error": "A valid email is required"}), 400
    if len(pw) < MIN_PASSWORD_LENGTH:
        return jsonify({"error": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({"error": "Email already registered"}), 400
    hashed_pw = bcrypt.generate_password_hash(pw).decode("utf-8")
    user = User(email=email, password=hashed_pw, name=(data.get("name") or "").strip() or None)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    return jsonify(serialize_user(user)), 201


@auth_bp.post("/login")
def login():
    data = _form()
    if data is None:
        return jsonify({"error": "email, password and name must be strings"}), 400
    email = (data.get("email") or "").strip().lower()
    pw = data.get("password") or ""
    user = User.query.filter_by(email=email).first()
    if user and bcrypt.check_password_hash(user.password, pw):
        login_user(user)
        return jsonify(serialize_user(user))
    return jsonify({"error": "Invalid email or password"}), 401


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(serialize_user(current_user))
