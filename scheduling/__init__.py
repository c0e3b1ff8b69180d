from .errors import (
    BookingError,
    NotFound,
    ProgramNotFound,
    SlotNotFound,
    BookingNotFound,
    Conflict,
    SlotFull,
    DuplicateBooking,
    ValidationError,
    InfrastructureError,
)
from .generator import generate_for_program, generate_for_all_active_programs
from .booking import reserve, cancel
from .queries import available_dates, slots_for_date, bookings_for_user, schedule_summary
