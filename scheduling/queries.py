from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from models.booking import Booking
from models.category import Category
from models.program import Program
from models.slot import Slot
from scheduling.errors import InfrastructureError, ValidationError
from scheduling.templates import DAY_NAMES, active_templates
from utils.clock import horizon


def _time(t) -> str:
    return t.strftime("%H:%M:%S")


def available_dates(session, program_id: int, today: date | None = None) -> list[date]:
    """Dates in the booking horizon with at least one open spot, ascending."""
    first, last = horizon(today)
    try:
        rows = (
            session.query(Slot.date)
            .filter(
                Slot.program_id == program_id,
                Slot.date >= first,
                Slot.date <= last,
                Slot.is_cancelled.is_(False),
                Slot.spots_available > 0,
            )
            .distinct()
            .order_by(Slot.date.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise InfrastructureError() from exc
    return [r[0] for r in rows]


def slots_for_date(session, program_id: int, day: date | None) -> list[dict]:
    if day is None:
        raise ValidationError("Date is required")
    try:
        slots = (
            session.query(Slot)
            .filter(
                Slot.program_id == program_id,
                Slot.date == day,
                Slot.is_cancelled.is_(False),
            )
            .order_by(Slot.start_time.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise InfrastructureError() from exc

    return [
        {
            "slot_id": s.id,
            "start_time": _time(s.start_time),
            "end_time": _time(s.end_time),
            "remaining_capacity": s.spots_available,
            "is_available": s.is_available,
        }
        for s in slots
    ]


def bookings_for_user(session, user_id: int) -> list[dict]:
    """
    Every booking of the user, cancelled ones included, ordered by session
    date then start time (earliest first).
    """
    try:
        rows = (
            session.query(Booking, Slot, Program, Category)
            .join(Slot, Booking.time_slot_id == Slot.id)
            .join(Program, Slot.program_id == Program.id)
            .join(Category, Program.category_id == Category.id)
            .filter(Booking.user_id == user_id)
            .order_by(Slot.date.asc(), Slot.start_time.asc(), Booking.id.asc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise InfrastructureError() from exc

    out = []
    for b, s, p, c in rows:
        out.append({
            "id": b.id,
            "status": b.status,
            "created_at": b.created_at.isoformat(),
            "cancelled_at": b.cancelled_at.isoformat() if b.cancelled_at else None,
            "slot": {
                "slot_id": s.id,
                "date": s.date.isoformat(),
                "start_time": _time(s.start_time),
                "end_time": _time(s.end_time),
            },
            "program": {
                "id": p.id,
                "title": p.title,
                "location": p.location,
                "category_name": c.name,
            },
        })
    return out


def schedule_summary(session, program_id: int) -> list[dict]:
    try:
        templates = active_templates(session, program_id)
    except SQLAlchemyError as exc:
        raise InfrastructureError() from exc
    return [
        {
            "day_of_week": t.day_of_week,
            "day_name": DAY_NAMES[t.day_of_week] if 0 <= t.day_of_week <= 6 else None,
            "start_time": _time(t.start_time),
            "end_time": _time(t.end_time),
        }
        for t in templates
    ]
