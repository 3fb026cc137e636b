from datetime import date

from flask import Blueprint, request, jsonify, g
from sqlalchemy.exc import IntegrityError

from allocation.directory import reschedule, soft_delete, upcoming_sessions
from allocation.speaking import availability
from allocation.store import BookingStore, speaking_catalog
from allocation.types import ModuleType
from models import db
from models.test_session import TestSession
from security.rbac import require_roles
from utils.audit import field_changes, log_event
from utils.auth_context import login_required
from utils.ids import new_id
from utils.request_data import text_field
from utils.roles import SCHEDULE_MANAGERS, is_staff

sessions_bp = Blueprint("sessions", __name__, url_prefix="/sessions")


def _parse_date(value):
    # Expect ISO format like "2026-06-15"
    return date.fromisoformat(value)


def _valid_capacity(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _get_session_or_none(session_id: str):
    row = db.session.get(TestSession, session_id)
    if row is None or (row.is_deleted and not is_staff(g.user)):
        return None
    return row


# ---------- CO_ADMIN/ADMIN: create sessions ----------
@sessions_bp.post("")
@require_roles(*SCHEDULE_MANAGERS)
def create_session():
    data = request.get_json(silent=True) or {}
    try:
        test_time = text_field(data, "test_time")
        room_number = text_field(data, "room_number")
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    try:
        module_type = ModuleType(data.get("module_type"))
    except ValueError:
        return jsonify(error="module_type must be one of: " + ", ".join(m.value for m in ModuleType)), 400

    try:
        test_date = _parse_date(data.get("test_date") or "")
    except (TypeError, ValueError):
        return jsonify(error="Invalid test_date. Use YYYY-MM-DD"), 400

    max_capacity = data.get("max_capacity", 10)
    if not _valid_capacity(max_capacity):
        return jsonify(error="max_capacity must be a positive integer"), 400

    if not test_time or not room_number:
        return jsonify(error="test_time and room_number are required"), 400

    row = TestSession(
        id=new_id(),
        module_type=module_type.value,
        test_date=test_date,
        test_day=test_date.strftime("%A"),
        test_time=test_time,
        room_number=room_number,
        max_capacity=max_capacity,
        current_registrations=0,
        created_by=g.user.username,
    )
    db.session.add(row)
    db.session.commit()

    log_event("SESSION_CREATE", user_id=g.user.id, entity="test_session", entity_id=row.id)
    return jsonify(row.to_dict()), 201


# ---------- everyone: view sessions ----------
@sessions_bp.get("")
@login_required
def list_sessions():
    module_type = request.args.get("module_type")

    q = TestSession.query
    if module_type:
        q = q.filter_by(module_type=module_type)

    if not is_staff(g.user):
        # students only see sessions they could book today
        rows = {r.id: r for r in q.filter(TestSession.is_deleted.is_(False)).all()}
        open_ids = [s.id for s in upcoming_sessions((r.to_record() for r in rows.values()), date.today())]
        return jsonify([rows[i].to_dict() for i in open_ids]), 200

    if request.args.get("include_deleted") not in ("1", "true"):
        q = q.filter(TestSession.is_deleted.is_(False))
    rows = q.order_by(TestSession.test_date.asc(), TestSession.test_time.asc()).all()
    return jsonify([r.to_dict() for r in rows]), 200


@sessions_bp.get("/<session_id>")
@login_required
def get_session(session_id: str):
    row = _get_session_or_none(session_id)
    if not row:
        return jsonify(error="Session not found"), 404
    return jsonify(row.to_dict()), 200


@sessions_bp.get("/<session_id>/speaking-slots")
@login_required
def speaking_slots(session_id: str):
    row = _get_session_or_none(session_id)
    if not row:
        return jsonify(error="Session not found"), 404

    store = BookingStore()
    grid = availability(row.to_record(), store.load_bookings(row.id), speaking_catalog(), date.today())
    return jsonify(
        session_id=row.id,
        module_type=row.module_type,
        slots=[
            {"date": cell["date"].isoformat(), "time": cell["time"], "free_rooms": cell["free_rooms"]}
            for cell in grid
        ],
    ), 200


# ---------- CO_ADMIN/ADMIN: edit date, time, room or capacity ----------
@sessions_bp.patch("/<session_id>")
@require_roles(*SCHEDULE_MANAGERS)
def update_session(session_id: str):
    row = db.session.get(TestSession, session_id)
    if not row or row.is_deleted:
        return jsonify(error="Session not found"), 404

    data = request.get_json(silent=True) or {}
    changes = {}

    if "test_date" in data:
        try:
            changes["test_date"] = _parse_date(data["test_date"])
        except (TypeError, ValueError):
            return jsonify(error="Invalid test_date. Use YYYY-MM-DD"), 400
    for field, key in (("test_time", "test_time"), ("room_number", "room")):
        if field in data:
            value = data[field]
            if not isinstance(value, str) or not value.strip():
                return jsonify(error=f"{field} must be a non-empty string"), 400
            changes[key] = value.strip()
    if "max_capacity" in data:
        if not _valid_capacity(data["max_capacity"]):
            return jsonify(error="max_capacity must be a positive integer"), 400
        changes["max_capacity"] = data["max_capacity"]

    if not changes:
        return jsonify(error="Nothing to update"), 400

    before = row.to_dict()
    try:
        row.apply_record(reschedule(row.to_record(), **changes))
        db.session.commit()
    except ValueError as exc:
        db.session.rollback()
        return jsonify(error=str(exc)), 409
    except IntegrityError:
        # a booking landed between the read and the write
        db.session.rollback()
        return jsonify(error="max_capacity cannot be lower than current registrations"), 409

    log_event(
        "SESSION_UPDATE",
        user_id=g.user.id,
        entity="test_session",
        entity_id=row.id,
        metadata=field_changes(before, row.to_dict()),
    )
    return jsonify(row.to_dict()), 200


# ---------- CO_ADMIN/ADMIN: open, close, remove ----------
def _set_closed(session_id: str, closed: bool, action: str):
    row = db.session.get(TestSession, session_id)
    if not row or row.is_deleted:
        return jsonify(error="Session not found"), 404

    row.is_closed = closed
    db.session.commit()

    log_event(action, user_id=g.user.id, entity="test_session", entity_id=row.id)
    return jsonify(row.to_dict()), 200


@sessions_bp.post("/<session_id>/close")
@require_roles(*SCHEDULE_MANAGERS)
def close_session(session_id: str):
    return _set_closed(session_id, True, "SESSION_CLOSE")


@sessions_bp.post("/<session_id>/reopen")
@require_roles(*SCHEDULE_MANAGERS)
def reopen_session(session_id: str):
    return _set_closed(session_id, False, "SESSION_REOPEN")


@sessions_bp.delete("/<session_id>")
@require_roles(*SCHEDULE_MANAGERS)
def delete_session(session_id: str):
    row = db.session.get(TestSession, session_id)
    if not row or row.is_deleted:
        return jsonify(error="Session not found"), 404

    # bookings and results keep pointing at this row
    row.apply_record(soft_delete(row.to_record()))
    db.session.commit()

    log_event("SESSION_DELETE", user_id=g.user.id, entity="test_session", entity_id=row.id)
    return jsonify(message="Session removed"), 200
