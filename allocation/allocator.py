"""The single write path that turns a booking intent into a consistent
(session, booking, balance) update.

``allocate`` is pure: it reads the values it is given and returns the new
values, or raises an ``AllocationError`` before producing anything.
Persisting the result is ``allocation.store.BookingStore.save``.
"""
import secrets
from datetime import date
from typing import Callable, Iterable, Optional, Union

from . import directory, ledger, speaking
from .errors import AccountExpired, DuplicateBooking, NoSpeakingSlot
from .types import (
    Allocation,
    BookingRecord,
    BookingStatus,
    GuestSubject,
    SessionRecord,
    SpeakingCatalog,
    SpeakingSlot,
    StudentSubject,
)

GUEST_ID_PREFIX = "GUEST-"


def new_booking_id() -> str:
    return secrets.token_hex(8)


def new_guest_id(prefix: str = GUEST_ID_PREFIX) -> str:
    return prefix + secrets.token_hex(4).upper()


def resolve_speaking_slot(session: SessionRecord, bookings: Iterable[BookingRecord],
                          catalog: SpeakingCatalog, speaking_date: Optional[date],
                          speaking_time: Optional[str],
                          today: Optional[date] = None) -> Optional[SpeakingSlot]:
    if not session.module_type.needs_speaking_slot:
        return None
    if speaking_date is None or not speaking_time:
        raise NoSpeakingSlot()
    if speaking_date not in speaking.candidate_dates(session):
        raise NoSpeakingSlot("Speaking date is not offered for this session")
    if today is not None and speaking_date < today:
        raise NoSpeakingSlot("Speaking date has passed")
    if speaking_time not in catalog.times:
        raise NoSpeakingSlot("Speaking time is not offered")

    room = speaking.find_free_room(session.id, speaking_date, speaking_time, bookings, catalog.rooms)
    if room is None:
        raise NoSpeakingSlot("No room is free at that speaking time. Pick another slot.")
    return SpeakingSlot(date=speaking_date, room=room, time=speaking_time)


def allocate(subject: Union[StudentSubject, GuestSubject],
             session: SessionRecord,
             bookings: Iterable[BookingRecord],
             catalog: SpeakingCatalog,
             speaking_date: Optional[date] = None,
             speaking_time: Optional[str] = None,
             today: Optional[date] = None,
             new_id: Callable[[], str] = new_booking_id,
             guest_id: Callable[[], str] = new_guest_id) -> Allocation:
    today = today or date.today()
    bookings = [b for b in bookings if b.session_id == session.id]

    directory.ensure_bookable(session, today)

    balance = None
    if isinstance(subject, StudentSubject):
        if subject.expiry_date is not None and subject.expiry_date < today:
            raise AccountExpired()
        balance = ledger.decrement(subject.balance, session.module_type)
        if any(b.subject_id == subject.student_id for b in bookings):
            raise DuplicateBooking()
        subject_id = subject.student_id
    else:
        subject_id = guest_id()

    slot = resolve_speaking_slot(session, bookings, catalog, speaking_date, speaking_time, today)
    updated_session = directory.increment_registration_count(session)

    booking = BookingRecord(
        id=new_id(),
        subject_id=subject_id,
        session_id=session.id,
        module_type=session.module_type,
        booking_date=today,
        status=BookingStatus.CONFIRMED,
        speaking=slot,
        is_guest=isinstance(subject, GuestSubject),
    )
    return Allocation(
        booking=booking,
        session=updated_session,
        balance=balance,
        guest=subject if isinstance(subject, GuestSubject) else None,
    )
