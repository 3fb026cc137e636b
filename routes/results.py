from flask import Blueprint, request, jsonify, g

from models import db
from models.result import Result
from models.student import Student
from models.test_session import TestSession
from security.rbac import require_roles
from utils.audit import field_changes, log_event
from utils.ids import new_short_id
from utils.request_data import text_field
from utils.roles import STUDENT, RECORD_EDITORS, STAFF_ROLES
from utils.scoring import overall_band, validate_band

results_bp = Blueprint("results", __name__, url_prefix="/results")

SCORE_FIELDS = ("listening_score", "reading_score", "writing_score", "speaking_score")


# ---------- MODERATOR/CO_ADMIN/ADMIN: publish ----------
@results_bp.post("")
@require_roles(*RECORD_EDITORS)
def publish_result():
    data = request.get_json(silent=True) or {}
    try:
        user_id = text_field(data, "user_id")
        session_id = text_field(data, "session_id")
    except ValueError as exc:
        return jsonify(error=str(exc)), 400
    if not user_id or not session_id:
        return jsonify(error="user_id and session_id are required"), 400

    try:
        scores = {f: validate_band(data.get(f), f) for f in SCORE_FIELDS}
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    if not db.session.get(Student, user_id):
        return jsonify(error="Student not found"), 404
    # soft-deleted sessions still take results: the test already happened
    if not db.session.get(TestSession, session_id):
        return jsonify(error="Session not found"), 404

    row = Result(
        id=new_short_id(),
        user_id=user_id,
        session_id=session_id,
        overall_score=overall_band(*(scores[f] for f in SCORE_FIELDS)),
        published_by=g.user.username,
        **scores,
    )
    db.session.add(row)
    db.session.commit()

    log_event("RESULT_PUBLISH", user_id=g.user.id, entity="result", entity_id=row.id,
              metadata={"student": user_id, "overall": row.overall_score})
    return jsonify(row.to_dict()), 201


@results_bp.get("")
@require_roles(*STAFF_ROLES)
def list_results():
    user_id = request.args.get("user_id")
    q = Result.query
    if user_id:
        q = q.filter_by(user_id=user_id)
    rows = q.order_by(Result.published_at.desc()).limit(500).all()
    return jsonify([r.to_dict() for r in rows]), 200


@results_bp.get("/me")
@require_roles(STUDENT)
def my_results():
    rows = Result.query.filter_by(user_id=g.user.id).order_by(Result.published_at.desc()).all()
    return jsonify([r.to_dict() for r in rows]), 200


@results_bp.patch("/<result_id>")
@require_roles(*RECORD_EDITORS)
def update_result(result_id: str):
    """Correct one or more module scores; the overall band is recomputed."""
    row = db.session.get(Result, result_id)
    if not row:
        return jsonify(error="Result not found"), 404

    data = request.get_json(silent=True) or {}
    submitted = [f for f in SCORE_FIELDS if f in data]
    if not submitted:
        return jsonify(error="Nothing to update"), 400
    try:
        scores = {f: validate_band(data[f], f) for f in submitted}
    except ValueError as exc:
        return jsonify(error=str(exc)), 400

    before = row.to_dict()
    for field, value in scores.items():
        setattr(row, field, value)
    row.overall_score = overall_band(*(getattr(row, f) for f in SCORE_FIELDS))
    row.published_by = g.user.username
    db.session.commit()

    after = row.to_dict()
    log_event("RESULT_UPDATE", user_id=g.user.id, entity="result", entity_id=row.id,
              metadata=field_changes(before, after))
    return jsonify(after), 200


@results_bp.delete("/<result_id>")
@require_roles(*RECORD_EDITORS)
def delete_result(result_id: str):
    row = db.session.get(Result, result_id)
    if not row:
        return jsonify(error="Result not found"), 404

    db.session.delete(row)
    db.session.commit()

    log_event("RESULT_DELETE", user_id=g.user.id, entity="result", entity_id=result_id)
    return jsonify(message="Result removed"), 200
