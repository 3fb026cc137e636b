from flask import Blueprint, request, jsonify, current_app, g

from models import db
from models.user import User
from security.password import hash_password, needs_rehash, verify_password
from security.session import create_session, revoke_session, revoke_all_sessions
from security.csrf import issue_csrf_token, clear_csrf_token
from utils.audit import log_event
from utils.auth_context import login_required
from utils.request_data import text_field
from utils.roles import primary_role


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _find_account(identifier: str):
    # students may sign in with their student id or their username
    user = User.query.filter_by(username=identifier).first()
    if user is None:
        user = db.session.get(User, identifier)
    return user


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        identifier = text_field(data, "username")
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    password = data.get("password") or ""

    if not identifier or not password or not isinstance(password, str):
        return jsonify(error="username and password are required"), 400

    user = _find_account(identifier)
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"username": identifier})
        return jsonify(error="Invalid credentials"), 401

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        db.session.commit()

    # Rotate: revoke any existing sessions for this user
    revoked_count = revoke_all_sessions(user.id)

    raw_token = create_session(user.id)
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "ielts_session")
    max_age = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    resp = jsonify(message="Login OK", id=user.id, role=primary_role(user))
    resp.set_cookie(
        cookie_name,
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=max_age,
        path="/",
    )
    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=user.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(
        id=g.user.id,
        username=g.user.username,
        full_name=g.user.full_name,
        roles=sorted(g.user.role_names),
        role=primary_role(g.user),
    ), 200


@auth_bp.post("/logout")
@login_required
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "ielts_session")
    raw_token = request.cookies.get(cookie_name)

    revoke_session(raw_token)
    log_event("LOGOUT", user_id=g.user.id)

    resp = jsonify(message="Logged out")
    resp.delete_cookie(cookie_name, path="/")
    return clear_csrf_token(resp), 200
