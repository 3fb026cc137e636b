from datetime import date

from flask import Blueprint, request, jsonify, current_app, g

from allocation.types import Balance, ModuleType
from models import db
from models.user import User, Role
from models.student import Student
from security.password import hash_password
from security.rbac import require_roles
from utils.audit import field_changes, log_event
from utils.ids import new_short_id
from utils.request_data import text_field
from utils.roles import STUDENT, RECORD_EDITORS, STAFF_ROLES

students_bp = Blueprint("students", __name__, url_prefix="/students")

GENDERS = ("Male", "Female", "Others")


def _parse_balance(data, base=None):
    """Build a Balance from a {module: count} mapping, keeping base values for missing keys."""
    counts = base.as_dict() if base else {}
    for module in ModuleType:
        if module.balance_key not in data:
            continue
        value = data[module.balance_key]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{module.balance_key} must be a non-negative integer")
        counts[module.balance_key] = value
    return Balance(**counts)


def _student_dict(student: Student):
    user = student.user
    expired = bool(student.expiry_date and student.expiry_date < date.today())
    return {
        "user_id": student.user_id,
        "username": user.username if user else None,
        "name": user.full_name if user else None,
        "phone": user.phone_number if user else None,
        "gender": student.gender,
        "batch_number": student.batch_number,
        "expiry_date": student.expiry_date.isoformat() if student.expiry_date else None,
        "is_expired": expired,
        "remaining_tests": student.balance().as_dict(),
        "created_by": student.created_by,
        "created_at": student.created_at.isoformat(),
    }


# ---------- MODERATOR/CO_ADMIN/ADMIN: enrol a student ----------
@students_bp.post("")
@require_roles(*RECORD_EDITORS)
def create_student():
    data = request.get_json(silent=True) or {}
    try:
        user_id = text_field(data, "user_id") or new_short_id()
        username = text_field(data, "username") or user_id
        name = text_field(data, "name")
        phone = text_field(data, "phone") or None
        gender = text_field(data, "gender") or None
        batch_number = text_field(data, "batch_number") or None
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    password = data.get("password") or ""

    if not name or not password or not isinstance(password, str):
        return jsonify(error="name and password are required"), 400
    if user_id.upper().startswith(current_app.config["GUEST_ID_PREFIX"]):
        return jsonify(error="user_id uses the reserved guest prefix"), 400
    if gender and gender not in GENDERS:
        return jsonify(error="gender must be one of: " + ", ".join(GENDERS)), 400

    expiry_date = None
    if data.get("expiry_date"):
        try:
            expiry_date = date.fromisoformat(data["expiry_date"])
        except (TypeError, ValueError):
            return jsonify(error="Invalid expiry_date. Use YYYY-MM-DD"), 400

    try:
        balance = _parse_balance(data.get("remaining_tests") or {})
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    if db.session.get(User, user_id) or User.query.filter_by(username=username).first():
        return jsonify(error="Student id or username already exists"), 409

    user = User(
        id=user_id,
        username=username,
        password_hash=hash_password(password),
        full_name=name,
        phone_number=phone,
        created_by=g.user.username,
    )
    student_role = Role.query.filter_by(name=STUDENT).first()
    if student_role:
        user.roles.append(student_role)

    student = Student(
        user=user,
        gender=gender,
        batch_number=batch_number,
        expiry_date=expiry_date,
        created_by=g.user.username,
    )
    student.set_balance(balance)

    db.session.add_all([user, student])
    db.session.commit()

    log_event("STUDENT_CREATE", user_id=g.user.id, entity="student", entity_id=user.id)
    return jsonify(_student_dict(student)), 201


@students_bp.get("")
@require_roles(*STAFF_ROLES)
def list_students():
    batch = request.args.get("batch_number")
    q = Student.query
    if batch:
        q = q.filter_by(batch_number=batch)
    rows = q.order_by(Student.created_at.desc()).all()
    return jsonify([_student_dict(s) for s in rows]), 200


# ---------- STUDENTS: dashboard ----------
@students_bp.get("/me")
@require_roles(STUDENT)
def my_profile():
    student = db.session.get(Student, g.user.id)
    if not student:
        return jsonify(error="Student profile not found"), 404
    return jsonify(_student_dict(student)), 200


# ---------- MODERATOR/CO_ADMIN/ADMIN: top up or correct balances ----------
@students_bp.post("/<user_id>/balance")
@require_roles(*RECORD_EDITORS)
def update_balance(user_id: str):
    data = request.get_json(silent=True) or {}

    student = db.session.get(Student, user_id)
    if not student:
        return jsonify(error="Student not found"), 404

    before = student.balance()
    try:
        balance = _parse_balance(data, base=before)
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    student.set_balance(balance)
    db.session.commit()

    log_event(
        "STUDENT_BALANCE_UPDATE",
        user_id=g.user.id,
        entity="student",
        entity_id=user_id,
        metadata={"before": before.as_dict(), "after": balance.as_dict()},
    )
    return jsonify(remaining_tests=balance.as_dict()), 200


# ---------- MODERATOR/CO_ADMIN/ADMIN: edit profile details ----------
@students_bp.patch("/<user_id>")
@require_roles(*RECORD_EDITORS)
def update_student(user_id: str):
    data = request.get_json(silent=True) or {}

    student = db.session.get(Student, user_id)
    if not student:
        return jsonify(error="Student not found"), 404

    try:
        fields = {k: text_field(data, k) for k in ("name", "phone", "gender", "batch_number") if k in data}
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    if "name" in fields and not fields["name"]:
        return jsonify(error="name cannot be empty"), 400
    if fields.get("gender") and fields["gender"] not in GENDERS:
        return jsonify(error="gender must be one of: " + ", ".join(GENDERS)), 400

    if "expiry_date" in data:
        # null or "" clears the expiry
        try:
            fields["expiry_date"] = date.fromisoformat(data["expiry_date"]) if data["expiry_date"] else None
        except (TypeError, ValueError):
            return jsonify(error="Invalid expiry_date. Use YYYY-MM-DD"), 400

    if not fields:
        return jsonify(error="Nothing to update"), 400

    before = _student_dict(student)
    user = student.user
    if "name" in fields:
        user.full_name = fields["name"]
    if "phone" in fields:
        user.phone_number = fields["phone"] or None
    if "gender" in fields:
        student.gender = fields["gender"] or None
    if "batch_number" in fields:
        student.batch_number = fields["batch_number"] or None
    if "expiry_date" in fields:
        student.expiry_date = fields["expiry_date"]
    db.session.commit()

    after = _student_dict(student)
    log_event("STUDENT_UPDATE", user_id=g.user.id, entity="student", entity_id=user_id,
              metadata=field_changes(before, after))
    return jsonify(after), 200
