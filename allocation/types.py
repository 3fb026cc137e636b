from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class ModuleType(str, Enum):
    LISTENING = "Listening"
    READING = "Reading"
    WRITING = "Writing"
    SPEAKING = "Speaking"
    MOCK = "Mock"

    @property
    def balance_key(self) -> str:
        return self.value.lower()

    @property
    def needs_speaking_slot(self) -> bool:
        return self in (ModuleType.SPEAKING, ModuleType.MOCK)


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


def _require_text(value, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} is required")
    return value


def _require_date(value, name: str) -> date:
    if not isinstance(value, date):
        raise ValueError(f"{name} must be a date")
    return value


@dataclass(frozen=True)
class SessionRecord:
    """A scheduled, capacity-bounded test event."""

    id: str
    module_type: ModuleType
    test_date: date
    test_time: str
    room: str
    max_capacity: int
    current_registrations: int = 0
    is_closed: bool = False
    is_deleted: bool = False

    def __post_init__(self):
        _require_text(self.id, "session id")
        object.__setattr__(self, "module_type", ModuleType(self.module_type))
        _require_date(self.test_date, "test_date")
        if not isinstance(self.max_capacity, int) or self.max_capacity <= 0:
            raise ValueError("max_capacity must be a positive integer")
        if not isinstance(self.current_registrations, int) or self.current_registrations < 0:
            raise ValueError("current_registrations must be a non-negative integer")

    @property
    def is_full(self) -> bool:
        return self.current_registrations >= self.max_capacity

    @property
    def seats_left(self) -> int:
        return max(self.max_capacity - self.current_registrations, 0)


@dataclass(frozen=True)
class SpeakingSlot:
    date: date
    room: str
    time: str

    def __post_init__(self):
        _require_date(self.date, "speaking date")
        _require_text(self.room, "speaking room")
        _require_text(self.time, "speaking time")


@dataclass(frozen=True)
class BookingRecord:
    id: str
    subject_id: str
    session_id: str
    module_type: ModuleType
    booking_date: date
    status: BookingStatus = BookingStatus.CONFIRMED
    speaking: Optional[SpeakingSlot] = None
    is_guest: bool = False

    def __post_init__(self):
        _require_text(self.id, "booking id")
        _require_text(self.subject_id, "subject id")
        _require_text(self.session_id, "session id")
        object.__setattr__(self, "module_type", ModuleType(self.module_type))
        object.__setattr__(self, "status", BookingStatus(self.status))
        _require_date(self.booking_date, "booking_date")


@dataclass(frozen=True)
class Balance:
    """Remaining tests per module type for one student."""

    listening: int = 0
    reading: int = 0
    writing: int = 0
    speaking: int = 0
    mock: int = 0

    def __post_init__(self):
        for module in ModuleType:
            value = getattr(self, module.balance_key)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{module.balance_key} balance must be an integer")

    def get(self, module_type) -> int:
        return getattr(self, ModuleType(module_type).balance_key)

    def with_count(self, module_type, count: int) -> "Balance":
        return replace(self, **{ModuleType(module_type).balance_key: count})

    def as_dict(self) -> dict:
        return {m.balance_key: getattr(self, m.balance_key) for m in ModuleType}


@dataclass(frozen=True)
class StudentSubject:
    student_id: str
    balance: Balance
    expiry_date: Optional[date] = None

    def __post_init__(self):
        _require_text(self.student_id, "student id")
        if not isinstance(self.balance, Balance):
            raise ValueError("balance must be a Balance")


@dataclass(frozen=True)
class GuestSubject:
    """Walk-in candidate who paid at the desk; carries no balance."""

    name: str
    phone: str

    def __post_init__(self):
        _require_text(self.name, "guest name")
        _require_text(self.phone, "guest phone")


@dataclass(frozen=True)
class SpeakingCatalog:
    times: Tuple[str, ...]
    rooms: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "times", tuple(self.times))
        object.__setattr__(self, "rooms", tuple(self.rooms))
        if not self.times or not self.rooms:
            raise ValueError("speaking catalog needs at least one time and one room")


@dataclass(frozen=True)
class Allocation:
    """Everything a successful booking changes, to be persisted together."""

    booking: BookingRecord
    session: SessionRecord
    balance: Optional[Balance] = None
    guest: Optional[GuestSubject] = None
