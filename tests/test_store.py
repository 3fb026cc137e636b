"""BookingStore against a real database: stale snapshots must not overbook."""
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from allocation import (
    allocate,
    CapacityExceeded,
    GuestSubject,
    InsufficientBalance,
    NoSpeakingSlot,
    PersistenceError,
)
from allocation.store import BookingStore, speaking_catalog
from models import db
from models.booking import Booking
from models.student import Student
from models.test_session import TestSession as SessionRow
from models.user import User

TEST_DATE = date.today() + timedelta(days=7)


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


def _add_session(session_id, module_type="Listening", max_capacity=1):
    db.session.add(SessionRow(
        id=session_id, module_type=module_type, test_date=TEST_DATE, test_time="9:30 AM",
        room_number="Hall 2", max_capacity=max_capacity, current_registrations=0,
    ))
    db.session.commit()


def _add_student(user_id, **counts):
    user = User(id=user_id, username=user_id, password_hash="x")
    student = Student(user=user)
    for key, value in counts.items():
        setattr(student, "remaining_" + key, value)
    db.session.add_all([user, student])
    db.session.commit()


def _snapshot_allocation(store, subject, session_id, **speaking):
    return allocate(subject, store.load_session(session_id), store.load_bookings(session_id),
                    speaking_catalog(), **speaking)


def test_save_applies_all_three_effects(ctx):
    _add_session("S1")
    _add_student("A", listening=2)
    store = BookingStore()

    row = store.save(_snapshot_allocation(store, store.load_student("A"), "S1"))

    assert db.session.get(Booking, row.id).status == "Confirmed"
    assert db.session.get(SessionRow, "S1").current_registrations == 1
    assert db.session.get(Student, "A").remaining_listening == 1


def test_stale_snapshot_cannot_overbook(ctx):
    _add_session("S1", max_capacity=1)
    _add_student("A", listening=1)
    _add_student("B", listening=1)
    store = BookingStore()

    # both clients read the session while it still had a free seat
    first = _snapshot_allocation(store, store.load_student("A"), "S1")
    second = _snapshot_allocation(store, store.load_student("B"), "S1")

    store.save(first)
    with pytest.raises(CapacityExceeded):
        store.save(second)

    assert db.session.get(SessionRow, "S1").current_registrations == 1
    assert db.session.get(Student, "B").remaining_listening == 1
    assert Booking.query.filter_by(session_id="S1").count() == 1


def test_stale_speaking_snapshot_cannot_share_a_room(app, ctx):
    app.config["SPEAKING_ROOMS"] = ["Room A"]
    _add_session("S1", module_type="Speaking", max_capacity=5)
    store = BookingStore()
    slot = {"speaking_date": TEST_DATE, "speaking_time": "10:40 AM"}

    first = _snapshot_allocation(store, GuestSubject(name="One", phone="1"), "S1", **slot)
    second = _snapshot_allocation(store, GuestSubject(name="Two", phone="2"), "S1", **slot)
    assert first.booking.speaking == second.booking.speaking

    store.save(first)
    with pytest.raises(NoSpeakingSlot):
        store.save(second)

    assert db.session.get(SessionRow, "S1").current_registrations == 1
    assert Booking.query.filter_by(session_id="S1").count() == 1


def test_spent_balance_rolls_back_the_seat(ctx):
    _add_session("S1")
    _add_session("S2")
    _add_student("A", listening=1)
    store = BookingStore()

    first = _snapshot_allocation(store, store.load_student("A"), "S1")
    second = _snapshot_allocation(store, store.load_student("A"), "S2")

    store.save(first)
    with pytest.raises(InsufficientBalance):
        store.save(second)

    assert db.session.get(SessionRow, "S2").current_registrations == 0
    assert db.session.get(Student, "A").remaining_listening == 0
    assert Booking.query.filter_by(session_id="S2").count() == 0


def test_guest_details_are_stored(ctx):
    _add_session("S1")
    store = BookingStore()

    row = store.save(_snapshot_allocation(store, GuestSubject(name="Walk In", phone="0171"), "S1"))

    assert row.is_guest
    assert row.guest_name == "Walk In"
    assert row.subject_id.startswith("GUEST-")


def test_unclassified_conflict_is_a_persistence_error(ctx):
    _add_session("S1")
    _add_session("S2")
    _add_student("A", listening=1)
    _add_student("B", listening=1)
    store = BookingStore()

    store.save(allocate(store.load_student("A"), store.load_session("S1"), [], speaking_catalog(),
                        new_id=lambda: "B-1"))
    db.session.expunge_all()
    # same primary key as the booking above
    clash = allocate(store.load_student("B"), store.load_session("S2"), [], speaking_catalog(),
                     new_id=lambda: "B-1")

    with pytest.raises(PersistenceError) as info:
        store.save(clash)

    assert info.value.status == 503
    assert info.value.code == "PERSISTENCE_FAILED"
    assert db.session.get(SessionRow, "S2").current_registrations == 0
    assert db.session.get(Student, "B").remaining_listening == 1
    assert Booking.query.count() == 1


def test_database_failure_rolls_back_and_logs(ctx, monkeypatch, caplog):
    _add_session("S1")
    _add_student("A", listening=1)
    store = BookingStore()
    allocation = _snapshot_allocation(store, store.load_student("A"), "S1")

    def _broken_insert(record, created_by=None):
        raise OperationalError("INSERT INTO bookings", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Booking, "from_record", _broken_insert)

    with pytest.raises(PersistenceError):
        store.save(allocation)

    assert "could not be persisted" in caplog.text
    assert db.session.get(SessionRow, "S1").current_registrations == 0
    assert db.session.get(Student, "A").remaining_listening == 1
    assert Booking.query.count() == 0
