import json
from flask import request
from models import db
from models.audit_log import AuditLog


def _client_ip():
    # first hop of X-Forwarded-For is the browser; the rest are proxies
    forwarded = request.headers.get("X-Forwarded-For", "")
    return forwarded.split(",")[0].strip() or request.remote_addr


def field_changes(before: dict, after: dict) -> dict:
    """{field: {"before": old, "after": new}} for every key whose value changed."""
    return {
        key: {"before": before.get(key), "after": value}
        for key, value in after.items()
        if before.get(key) != value
    }


def booking_metadata(booking) -> dict:
    """What an auditor needs to find a seat again without joining tables."""
    meta = {
        "session_id": booking.session_id,
        "module_type": booking.module_type,
        "subject_id": booking.subject_id,
    }
    if booking.speaking_room:
        meta["speaking"] = f"{booking.speaking_date.isoformat()} {booking.speaking_time} {booking.speaking_room}"
    if booking.is_guest:
        meta["guest_name"] = booking.guest_name
    return meta


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=_client_ip(),
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
