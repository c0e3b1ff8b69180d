from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

DEFAULT_HORIZON_DAYS = 21


def _operating_tz(tz_name: str | None = None):
    if tz_name is None and has_app_context():
        tz_name = current_app.config.get("OPERATING_TIMEZONE")
    if not tz_name or tz_name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(tz_name)


def operating_today(tz_name: str | None = None) -> date:
    """Calendar date 'now' in the center's timezone (midnight-normalized)."""
    return datetime.now(_operating_tz(tz_name)).date()


def horizon_days() -> int:
    if has_app_context():
        return int(current_app.config.get("BOOKING_HORIZON_DAYS", DEFAULT_HORIZON_DAYS))
    return DEFAULT_HORIZON_DAYS


def horizon(today: date | None = None, days: int | None = None) -> tuple[date, date]:
    """Inclusive (first, last) dates kept populated with slots."""
    start = today or operating_today()
    span = horizon_days() if days is None else days
    return start, start + timedelta(days=span)
