from datetime import date

from flask import Blueprint, request, jsonify, g

from models import db
from models.user import User
from security.password import check_new_password, hash_password, verify_password
from security.session import (
    clear_session_cookie,
    create_session,
    current_token,
    revoke_session,
    set_session_cookie,
)
from utils.audit import log_event
from utils.auth_context import login_required


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

PROFILE_FIELDS = ("first_name", "last_name", "room_number", "phone")


def _payload() -> dict:
    # Accept both JSON clients and plain HTML form posts
    return request.get_json(silent=True) or request.form.to_dict() or {}


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _user_json(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "birthday": user.birthday.isoformat() if user.birthday else None,
        "room_number": user.room_number,
        "phone": user.phone,
    }


@auth_bp.post("/register")
def register():
    data = _payload()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    confirm = data.get("confirm_password")

    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    problem = check_new_password(password, confirm)
    if problem:
        return jsonify(error=problem), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered"), 409

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=(data.get("first_name") or "").strip() or None,
        last_name=(data.get("last_name") or "").strip() or None,
    )
    db.session.add(user)
    db.session.commit()
    log_event("REGISTER_SUCCESS", user_id=user.id)

    return jsonify(message="Registered successfully", id=user.id), 201


@auth_bp.post("/login")
def login():
    data = _payload()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid email or password"), 401

    token = create_session(user.id)
    log_event("LOGIN_SUCCESS", user_id=user.id)

    resp = jsonify(message="Logged in", user=_user_json(user))
    set_session_cookie(resp, token)
    return resp, 200


@auth_bp.post("/logout")
def logout():
    token = current_token()
    revoked = revoke_session(token)
    if revoked and getattr(g, "user", None) is not None:
        log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    clear_session_cookie(resp)
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(_user_json(g.user)), 200


@auth_bp.patch("/me")
@login_required
def update_profile():
    data = _payload()
    user = g.user

    if "birthday" in data:
        raw = (data.get("birthday") or "").strip()
        try:
            user.birthday = date.fromisoformat(raw) if raw else None
        except ValueError:
            return jsonify(error="Invalid birthday. Use YYYY-MM-DD"), 400

    for field in PROFILE_FIELDS:
        if field in data:
            setattr(user, field, (data.get(field) or "").strip() or None)

    db.session.commit()
    log_event("PROFILE_UPDATE", user_id=user.id)
    return jsonify(message="Profile updated", user=_user_json(user)), 200
