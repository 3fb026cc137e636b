from datetime import date, timedelta
from typing import Iterable, List, Optional, Set

from .types import BookingRecord, ModuleType, SessionRecord, SpeakingCatalog, SpeakingSlot


def candidate_dates(session: SessionRecord) -> List[date]:
    """Dates on which the speaking part of a session may be taken.

    Mock tests put the speaking interview on the day before or the day
    after the written papers. A Speaking session is taken on its own
    date. Other modules have no speaking part.
    """
    if session.module_type == ModuleType.MOCK:
        return [session.test_date - timedelta(days=1), session.test_date + timedelta(days=1)]
    if session.module_type == ModuleType.SPEAKING:
        return [session.test_date]
    return []


def occupied_slots(session_id: str, bookings: Iterable[BookingRecord]) -> Set[SpeakingSlot]:
    return {
        b.speaking
        for b in bookings
        if b.session_id == session_id and b.speaking is not None
    }


def find_free_room(session_id: str, day: date, time: str,
                   bookings: Iterable[BookingRecord], rooms: Iterable[str]) -> Optional[str]:
    taken = occupied_slots(session_id, bookings)
    for room in rooms:
        if SpeakingSlot(date=day, room=room, time=time) not in taken:
            return room
    return None


def availability(session: SessionRecord, bookings: Iterable[BookingRecord],
                 catalog: SpeakingCatalog, today: Optional[date] = None) -> List[dict]:
    """Free rooms for every (date, time) cell of the session's grid.

    Days before ``today`` are left out; their interviews can no longer be booked.
    """
    taken = occupied_slots(session.id, bookings)
    grid = []
    for day in candidate_dates(session):
        if today is not None and day < today:
            continue
        for time in catalog.times:
            free = [
                room for room in catalog.rooms
                if SpeakingSlot(date=day, room=room, time=time) not in taken
            ]
            grid.append({"date": day, "time": time, "free_rooms": free})
    return grid
