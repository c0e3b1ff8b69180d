from datetime import date

from flask import Blueprint, request, jsonify

from models import db
from models.program import Program
from scheduling import (
    BookingError,
    ProgramNotFound,
    ValidationError,
    available_dates,
    bookings_for_user,
    cancel,
    generate_for_program,
    reserve,
    schedule_summary,
    slots_for_date,
)
from utils.audit import log_event
from utils.auth_context import current_user_id, login_required

booking_bp = Blueprint("booking", __name__)


def _payload() -> dict:
    return request.get_json(silent=True) or request.form.to_dict() or {}


def _parse_id(value, field: str):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")


def _parse_date(value: str | None):
    if not value:
        raise ValidationError("Date is required")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Invalid date. Use YYYY-MM-DD")


# ---------- booking page: program, open dates, weekly schedule ----------
@booking_bp.get("/book/<int:program_id>")
@login_required
def booking_page(program_id: int):
    program = db.session.get(Program, program_id)
    if not program or not program.is_active:
        raise ProgramNotFound(program_id=program_id)

    # Top up the rolling window before showing dates; never fails the page
    generate_for_program(db.session, program_id)

    return jsonify(
        program={
            "id": program.id,
            "title": program.title,
            "description": program.description,
            "category_name": program.category.name if program.category else None,
            "duration_mins": program.duration_mins,
            "location": program.location,
            "capacity": program.capacity,
            "image_url": program.image_url,
        },
        available_dates=[d.isoformat() for d in available_dates(db.session, program_id)],
        schedule=schedule_summary(db.session, program_id),
    ), 200


# ---------- public slot browsing for a date ----------
@booking_bp.get("/api/time-slots/<int:program_id>")
def time_slots(program_id: int):
    day = _parse_date(request.args.get("date"))
    return jsonify(date=day.isoformat(), slots=slots_for_date(db.session, program_id, day)), 200


# ---------- reserve a spot ----------
@booking_bp.post("/bookings")
@login_required
def create_booking():
    data = _payload()
    slot_id = _parse_id(data.get("time_slot_id"), "time_slot_id")
    program_id = _parse_id(data.get("program_id"), "program_id")
    if program_id is None:
        raise ValidationError("program_id required")

    user_id = current_user_id()
    try:
        booking = reserve(db.session, user_id, slot_id, program_id)
    except BookingError as exc:
        if exc.status_code < 500:
            log_event(
                "BOOKING_FAIL",
                user_id=user_id,
                entity="time_slot",
                entity_id=slot_id,
                metadata={"kind": exc.kind, "reason": exc.message},
            )
        raise

    log_event("BOOKING_CREATE", user_id=user_id, entity="booking", entity_id=booking.id, metadata={"time_slot_id": slot_id})
    return jsonify(
        id=booking.id,
        status=booking.status,
        time_slot_id=booking.time_slot_id,
        message="Booking confirmed",
    ), 201


# ---------- cancel own booking ----------
@booking_bp.post("/bookings/<int:booking_id>/cancel")
@login_required
def cancel_booking(booking_id: int):
    user_id = current_user_id()
    booking = cancel(db.session, user_id, booking_id)

    log_event("BOOKING_CANCEL", user_id=user_id, entity="booking", entity_id=booking.id)
    return jsonify(
        id=booking.id,
        status=booking.status,
        cancelled_at=booking.cancelled_at.isoformat() if booking.cancelled_at else None,
        message="Booking cancelled",
    ), 200


# ---------- my bookings, earliest session first ----------
@booking_bp.get("/bookings/me")
@login_required
def my_bookings():
    return jsonify(bookings=bookings_for_user(db.session, current_user_id())), 200
