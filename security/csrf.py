import secrets
from flask import request, jsonify, current_app

def _cookie_name():
    return current_app.config.get("CSRF_COOKIE_NAME", "csrf_token")

def _header_name():
    return current_app.config.get("CSRF_HEADER_NAME", "X-CSRF-Token")

def issue_csrf_token(resp):
    token = secrets.token_urlsafe(32)
    resp.set_cookie(
        _cookie_name(),
        token,
        httponly=False,  # must be readable by client JS
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return resp

def clear_csrf_token(resp):
    resp.delete_cookie(_cookie_name(), path="/")
    return resp

def require_csrf():
    cookie_token = request.cookies.get(_cookie_name())
    header_token = request.headers.get(_header_name())
    if not cookie_token or not header_token or not secrets.compare_digest(cookie_token, header_token):
        return jsonify(error="CSRF validation failed"), 403
    return None
