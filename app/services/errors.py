from __future__ import annotations

# Business-rule rejection reasons
OUTSIDE_WINDOW = "OUTSIDE_WINDOW"
CLOSED_DAY = "CLOSED_DAY"
UNKNOWN_TIMESLOT = "UNKNOWN_TIMESLOT"
DURATION_EXCEEDED = "DURATION_EXCEEDED"
INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
KART_LIMIT_EXCEEDED = "KART_LIMIT_EXCEEDED"

# Input error codes
NO_TIMESLOTS = "NO_TIMESLOTS"
MALFORMED_TIMESLOT = "MALFORMED_TIMESLOT"
DUPLICATE_TIMESLOT = "DUPLICATE_TIMESLOT"
NO_KARTS = "NO_KARTS"
UNKNOWN_KART = "UNKNOWN_KART"
INVALID_QUANTITY = "INVALID_QUANTITY"


class BookingError(Exception):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class BookingInputError(BookingError):
    """The request itself is malformed; nothing was checked against the calendar."""


class BookingRejected(BookingError):
    """A well-formed request that breaks a business rule."""

    @property
    def reason(self) -> str:
        return self.code


class NotFoundError(Exception):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: str):
        super().__init__("Booking", booking_id)


class KartNotFound(NotFoundError):
    def __init__(self, kart_id: str):
        super().__init__("Kart", kart_id)
