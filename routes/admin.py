from datetime import date

from flask import Blueprint, jsonify, g, request
from sqlalchemy import func

from allocation.types import BookingStatus
from models import db
from models.booking import Booking
from models.result import Result
from models.student import Student
from models.test_session import TestSession
from models.audit_log import AuditLog
from models.login_session import LoginSession
from models.user import User, Role
from security.password import hash_password
from security.rbac import require_roles
from utils.audit import log_event
from utils.ids import new_short_id
from utils.roles import ADMIN, STAFF_ROLES, primary_role

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _staff_dict(user):
    return {
        "id": user.id,
        "username": user.username,
        "role": primary_role(user),
        "created_by": user.created_by,
        "created_at": user.created_at.isoformat(),
    }


@admin_bp.get("/staff")
@require_roles(ADMIN)
def list_staff():
    users = (
        User.query
        .join(User.roles)
        .filter(Role.name.in_(STAFF_ROLES))
        .order_by(User.created_at.desc())
        .all()
    )
    # a user holding two staff roles appears once
    seen, out = set(), []
    for u in users:
        if u.id not in seen:
            seen.add(u.id)
            out.append(_staff_dict(u))
    return jsonify(out), 200


@admin_bp.post("/staff")
@require_roles(ADMIN)
def create_staff():
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    role_name = (data.get("role") or "").strip().upper()

    if not username or not password:
        return jsonify(error="username and password are required"), 400
    if role_name not in STAFF_ROLES:
        return jsonify(error="role must be one of: " + ", ".join(STAFF_ROLES)), 400
    if User.query.filter_by(username=username).first():
        return jsonify(error="Username already exists"), 409

    role = Role.query.filter_by(name=role_name).first()
    if not role:
        return jsonify(error="Unknown role"), 400

    user = User(
        id=new_short_id(),
        username=username,
        password_hash=hash_password(password),
        created_by=g.user.username,
    )
    user.roles.append(role)
    db.session.add(user)
    db.session.commit()

    log_event("ADMIN_STAFF_CREATE", user_id=g.user.id, entity="user", entity_id=user.id,
              metadata={"role": role_name})
    return jsonify(_staff_dict(user)), 201


@admin_bp.delete("/staff/<user_id>")
@require_roles(ADMIN)
def delete_staff(user_id: str):
    user = db.session.get(User, user_id)
    if not user or not user.role_names.intersection(STAFF_ROLES):
        return jsonify(error="Staff member not found"), 404
    if ADMIN in user.role_names:
        return jsonify(error="ADMIN accounts cannot be removed"), 403

    LoginSession.query.filter_by(user_id=user.id).delete()
    user.roles = []
    db.session.delete(user)
    db.session.commit()

    log_event("ADMIN_STAFF_DELETE", user_id=g.user.id, entity="user", entity_id=user_id)
    return jsonify(message="Staff member removed"), 200


@admin_bp.get("/audit-logs")
@require_roles(ADMIN)
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    user_id = request.args.get("user_id")

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action)
    if user_id:
        q = q.filter(AuditLog.user_id == user_id)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([r.to_dict() for r in rows]), 200


# ---------- STAFF: dashboard and report figures ----------
@admin_bp.get("/stats")
@require_roles(*STAFF_ROLES)
def dashboard_stats():
    live = TestSession.query.filter(TestSession.is_deleted.is_(False))
    upcoming = live.filter(TestSession.is_closed.is_(False), TestSession.test_date >= date.today())

    average = db.session.query(func.avg(Result.overall_score)).scalar()
    top = (
        Result.query
        .filter(Result.overall_score.isnot(None))
        .order_by(Result.overall_score.desc(), Result.published_at.asc())
        .first()
    )
    top_scorer = None
    if top:
        user = db.session.get(User, top.user_id)
        top_scorer = {
            "user_id": top.user_id,
            "name": user.full_name if user else None,
            "overall_score": top.overall_score,
        }

    return jsonify(
        total_students=Student.query.count(),
        scheduled_sessions=live.count(),
        upcoming_tests=upcoming.count(),
        total_registrations=Booking.query.filter_by(status=BookingStatus.CONFIRMED.value).count(),
        published_results=Result.query.count(),
        average_band=round(average, 1) if average is not None else 0.0,
        top_scorer=top_scorer,
    ), 200
