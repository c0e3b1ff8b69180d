from datetime import date, datetime, time, timedelta
from typing import Iterator

from models.schedule import ScheduleTemplate

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def day_of_week(day: date) -> int:
    """Schedule weekday number for a date: 0 = Sunday ... 6 = Saturday."""
    return (day.weekday() + 1) % 7


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _as_time(minutes: int) -> time:
    return (datetime.min + timedelta(minutes=minutes)).time()


def validate_template(template: ScheduleTemplate) -> list[str]:
    """
    Returns a list of problems; empty means the template can be expanded.
    """
    problems = []
    if template.day_of_week is None or not 0 <= template.day_of_week <= 6:
        problems.append("day_of_week must be between 0 and 6")
    if not template.slot_duration or template.slot_duration <= 0:
        problems.append("slot_duration must be positive")
    if template.start_time is None or template.end_time is None:
        problems.append("start_time and end_time are required")
    elif template.end_time <= template.start_time:
        problems.append("end_time must be after start_time")
    if template.max_occupants is not None and template.max_occupants < 0:
        problems.append("max_occupants cannot be negative")
    return problems


def active_templates(session, program_id: int) -> list[ScheduleTemplate]:
    return (
        session.query(ScheduleTemplate)
        .filter(
            ScheduleTemplate.program_id == program_id,
            ScheduleTemplate.is_active.is_(True),
        )
        .order_by(ScheduleTemplate.day_of_week.asc(), ScheduleTemplate.start_time.asc())
        .all()
    )


def iter_slot_times(start_time: time, end_time: time, duration: int) -> Iterator[tuple[time, time]]:
    # Trailing minutes that cannot hold a full slot are dropped
    current = _minutes(start_time)
    end = _minutes(end_time)
    while current + duration <= end:
        yield _as_time(current), _as_time(current + duration)
        current += duration


def slot_capacity(max_occupants: int | None, program_capacity: int) -> int:
    if max_occupants and max_occupants > 0:
        return max_occupants
    return program_capacity
