from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional

from .errors import CapacityExceeded, SessionNotBookable
from .types import SessionRecord


def is_bookable(session: SessionRecord) -> bool:
    return (
        not session.is_deleted
        and not session.is_closed
        and session.current_registrations < session.max_capacity
    )


def ensure_bookable(session: SessionRecord, today: Optional[date] = None) -> None:
    """Raise the error matching the first reason the session can't take a booking."""
    if session.is_deleted:
        raise SessionNotBookable("Session has been removed")
    if session.is_closed:
        raise SessionNotBookable("Session is closed for booking")
    if today is not None and session.test_date < today:
        raise SessionNotBookable("Session date has passed")
    if session.is_full:
        raise CapacityExceeded()


def increment_registration_count(session: SessionRecord) -> SessionRecord:
    # check and increment in one step; the store repeats this as a conditional UPDATE
    if session.current_registrations >= session.max_capacity:
        raise CapacityExceeded()
    return replace(session, current_registrations=session.current_registrations + 1)


def soft_delete(session: SessionRecord) -> SessionRecord:
    return replace(session, is_deleted=True)


def reschedule(session: SessionRecord, **changes) -> SessionRecord:
    """Move or resize a session. Capacity may not drop below the seats already taken."""
    updated = replace(session, **changes)
    if updated.current_registrations > updated.max_capacity:
        raise ValueError(
            f"max_capacity cannot be lower than current registrations ({updated.current_registrations})"
        )
    return updated


def active_sessions(sessions: Iterable[SessionRecord]) -> List[SessionRecord]:
    return [s for s in sessions if not s.is_deleted]


def upcoming_sessions(sessions: Iterable[SessionRecord], today: date) -> List[SessionRecord]:
    """Sessions a student may be offered: live, open and not in the past."""
    rows = [s for s in active_sessions(sessions) if not s.is_closed and s.test_date >= today]
    return sorted(rows, key=lambda s: (s.test_date, s.test_time))
