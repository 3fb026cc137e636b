"""Failures of a booking attempt.

Every error is raised before any effect is applied, so the caller can
report it and let the user correct the input. ``code`` names the failed
precondition; ``status`` is the HTTP status the API answers with.
"""


class AllocationError(Exception):
    code = "ALLOCATION_FAILED"
    status = 400
    default_message = "Booking failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SessionNotBookable(AllocationError):
    code = "SESSION_UNAVAILABLE"
    status = 409
    default_message = "Session is not open for booking"


class CapacityExceeded(SessionNotBookable):
    code = "SESSION_FULL"
    default_message = "Session full"


class InsufficientBalance(AllocationError):
    code = "NO_BALANCE"
    default_message = "No remaining balance for this module"


class DuplicateBooking(AllocationError):
    code = "ALREADY_BOOKED"
    status = 409
    default_message = "Already booked"


class NoSpeakingSlot(AllocationError):
    code = "SPEAKING_SLOT_REQUIRED"
    default_message = "Select a valid speaking slot"


class AccountExpired(AllocationError):
    code = "ACCOUNT_EXPIRED"
    status = 403
    default_message = "Account has expired. Contact administration to renew."


class PersistenceError(AllocationError):
    code = "PERSISTENCE_FAILED"
    status = 503
    default_message = "Booking could not be saved. Please try again."
