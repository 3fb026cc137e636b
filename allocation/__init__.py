from .types import (
    ModuleType,
    BookingStatus,
    SessionRecord,
    SpeakingSlot,
    BookingRecord,
    Balance,
    StudentSubject,
    GuestSubject,
    Allocation,
    SpeakingCatalog,
)
from .errors import (
    AllocationError,
    SessionNotBookable,
    CapacityExceeded,
    InsufficientBalance,
    DuplicateBooking,
    NoSpeakingSlot,
    AccountExpired,
    PersistenceError,
)
from .allocator import allocate
