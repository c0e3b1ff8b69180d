"""
Typed outcomes of the booking core.

Every failure a caller can act on has its own class so the HTTP layer can
map it to a status code and message without parsing strings.
"""


class BookingError(Exception):
    kind = "error"
    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None, **context):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind}


class NotFound(BookingError):
    kind = "not_found"
    status_code = 404
    message = "Not found"


class ProgramNotFound(NotFound):
    message = "Program not found"


class SlotNotFound(NotFound):
    message = "Time slot not found"


class BookingNotFound(NotFound):
    message = "Booking not found"


class Conflict(BookingError):
    kind = "conflict"
    status_code = 409
    message = "Conflict"


class SlotFull(Conflict):
    message = "This time slot is full"


class DuplicateBooking(Conflict):
    message = "You have already booked this time slot"


class ValidationError(BookingError):
    kind = "validation"
    status_code = 400
    message = "Invalid request"


class InfrastructureError(BookingError):
    kind = "infrastructure"
    status_code = 500
    message = "Server error"
