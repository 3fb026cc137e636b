"""SQLAlchemy side of the allocation core.

Reads hand plain records to ``allocate``; ``save`` writes its result back
as one transaction. The capacity check and the balance check are repeated
inside that transaction as conditional UPDATEs, and the unique constraints
on ``bookings`` catch a second client taking the same seat or speaking
slot from a stale snapshot.
"""
from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db
from models.booking import Booking
from models.student import Student
from models.test_session import TestSession

from .directory import ensure_bookable
from .errors import (
    AllocationError,
    CapacityExceeded,
    DuplicateBooking,
    InsufficientBalance,
    NoSpeakingSlot,
    PersistenceError,
)
from .types import Allocation, ModuleType, SpeakingCatalog


class BookingStore:
    def __init__(self, session=None):
        self.session = session or db.session

    # ---------- reads ----------
    def get_session_row(self, session_id):
        return self.session.get(TestSession, session_id)

    def load_session(self, session_id):
        row = self.get_session_row(session_id)
        return row.to_record() if row else None

    def load_bookings(self, session_id):
        rows = self.session.query(Booking).filter_by(session_id=session_id).all()
        return [b.to_record() for b in rows]

    def load_student(self, student_id):
        row = self.session.get(Student, student_id)
        return row.to_subject() if row else None

    # ---------- write ----------
    def save(self, allocation: Allocation, created_by=None) -> Booking:
        booking = allocation.booking
        try:
            self._claim_seat(booking.session_id)
            if allocation.balance is not None:
                self._spend_balance(booking.subject_id, booking.module_type)

            row = Booking.from_record(booking, created_by=created_by)
            if allocation.guest is not None:
                row.guest_name = allocation.guest.name
                row.guest_phone = allocation.guest.phone
            self.session.add(row)
            self.session.commit()
        except AllocationError:
            self.session.rollback()
            raise
        except IntegrityError as exc:
            self.session.rollback()
            raise self._classify_conflict(exc) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            current_app.logger.exception("Booking %s could not be persisted", booking.id)
            raise PersistenceError() from exc
        return row

    def _claim_seat(self, session_id):
        result = self.session.execute(
            update(TestSession)
            .where(
                TestSession.id == session_id,
                TestSession.current_registrations < TestSession.max_capacity,
                TestSession.is_closed.is_(False),
                TestSession.is_deleted.is_(False),
            )
            .values(current_registrations=TestSession.current_registrations + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        # lost the race; report why from the current row
        self.session.rollback()
        row = self.get_session_row(session_id)
        if row is not None:
            ensure_bookable(row.to_record())
        raise CapacityExceeded()

    def _spend_balance(self, student_id, module_type):
        column = Student.balance_column(module_type)
        result = self.session.execute(
            update(Student)
            .where(Student.user_id == student_id, column > 0)
            .values({column: column - 1})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InsufficientBalance(f"No remaining {ModuleType(module_type).value} tests")

    @staticmethod
    def _classify_conflict(exc):
        text = str(getattr(exc, "orig", exc))
        if "uq_booking_speaking_slot" in text or "speaking_room" in text:
            return NoSpeakingSlot("That speaking slot was just taken. Pick another slot.")
        if "uq_booking_subject_once" in text or "subject_id" in text:
            return DuplicateBooking()
        if "registrations" in text:
            return CapacityExceeded()
        return PersistenceError()


def speaking_catalog():
    return SpeakingCatalog(
        times=current_app.config["SPEAKING_TIME_SLOTS"],
        rooms=current_app.config["SPEAKING_ROOMS"],
    )
