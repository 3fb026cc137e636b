from datetime import date
from functools import partial

from flask import Blueprint, request, jsonify, current_app, g

from allocation import allocate, AllocationError, GuestSubject
from allocation.allocator import new_guest_id
from allocation.store import BookingStore, speaking_catalog
from models.booking import Booking
from security.rbac import require_roles
from utils.audit import booking_metadata, log_event
from utils.request_data import text_field
from utils.roles import STUDENT, RECORD_EDITORS, STAFF_ROLES

bookings_bp = Blueprint("bookings", __name__, url_prefix="/bookings")


def _speaking_choice(data):
    """Read the optional speaking date/time; raises ValueError on bad input."""
    raw_date = text_field(data, "speaking_date")
    speaking_time = text_field(data, "speaking_time") or None
    try:
        speaking_date = date.fromisoformat(raw_date) if raw_date else None
    except ValueError:
        raise ValueError("Invalid speaking_date. Use YYYY-MM-DD")
    return speaking_date, speaking_time


def _allocation_failed(exc: AllocationError, session_id, **metadata):
    log_event(
        "BOOKING_FAIL_" + exc.code,
        user_id=g.user.id,
        entity="test_session",
        entity_id=session_id,
        metadata=dict(metadata, reason=exc.message),
    )
    return jsonify(error=exc.message, code=exc.code), exc.status


def _book(subject, session_id, data):
    """Validate, allocate and persist one booking. Returns (booking row, None) or (None, response)."""
    try:
        speaking_date, speaking_time = _speaking_choice(data)
    except ValueError as exc:
        return None, (jsonify(error=str(exc)), 400)

    store = BookingStore()
    session = store.load_session(session_id)
    if session is None or session.is_deleted:
        return None, (jsonify(error="Session not found"), 404)

    try:
        allocation = allocate(
            subject,
            session,
            store.load_bookings(session_id),
            speaking_catalog(),
            speaking_date=speaking_date,
            speaking_time=speaking_time,
            guest_id=partial(new_guest_id, current_app.config["GUEST_ID_PREFIX"]),
        )
        row = store.save(allocation, created_by=g.user.username)
    except AllocationError as exc:
        return None, _allocation_failed(exc, session_id)
    return row, None


# ---------- STUDENTS: book a session for themselves ----------
@bookings_bp.post("")
@require_roles(STUDENT)
def create_booking():
    data = request.get_json(silent=True) or {}
    try:
        session_id = text_field(data, "session_id")
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    if not session_id:
        return jsonify(error="session_id required"), 400

    student = BookingStore().load_student(g.user.id)
    if student is None:
        return jsonify(error="Student profile not found"), 404

    row, failure = _book(student, session_id, data)
    if failure:
        return failure

    log_event("BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=row.id,
              metadata=booking_metadata(row))
    return jsonify(row.to_dict()), 201


# ---------- MODERATOR/CO_ADMIN/ADMIN: book a paid walk-in ----------
@bookings_bp.post("/guest")
@require_roles(*RECORD_EDITORS)
def create_guest_booking():
    data = request.get_json(silent=True) or {}
    try:
        session_id = text_field(data, "session_id")
        name = text_field(data, "name")
        phone = text_field(data, "phone")
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    if not session_id:
        return jsonify(error="session_id required"), 400
    if not name or not phone:
        return jsonify(error="Guest name and phone are required"), 400

    row, failure = _book(GuestSubject(name=name, phone=phone), session_id, data)
    if failure:
        return failure

    log_event("GUEST_BOOKING_CREATE", user_id=g.user.id, entity="booking", entity_id=row.id,
              metadata=booking_metadata(row))
    return jsonify(row.to_dict()), 201


# ---------- STUDENTS: view my bookings ----------
@bookings_bp.get("/me")
@require_roles(STUDENT)
def my_bookings():
    rows = (
        Booking.query
        .filter_by(subject_id=g.user.id)
        .order_by(Booking.created_at.desc())
        .all()
    )
    return jsonify([b.to_dict() for b in rows]), 200


# ---------- STAFF: list all bookings ----------
@bookings_bp.get("")
@require_roles(*STAFF_ROLES)
def list_all_bookings():
    session_id = request.args.get("session_id")
    status = request.args.get("status")  # Pending/Confirmed/Cancelled/Completed

    q = Booking.query
    if session_id:
        q = q.filter_by(session_id=session_id)
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(Booking.created_at.desc()).limit(500).all()
    return jsonify([b.to_dict() for b in rows]), 200
