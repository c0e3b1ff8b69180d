"""
Slot generation: expands weekly schedule templates into dated time slots.

The generator keeps the booking horizon (today .. today + 21 days) populated.
It is idempotent and best-effort: a date that fails is rolled back and
logged, the remaining dates and programs still get their slots.

Deduplication is per (program, date): once a date holds any slot for a
program, the generator leaves that date alone, even if another template for
the same weekday has not contributed its slots yet.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.program import Program
from models.schedule import ScheduleTemplate
from models.slot import Slot
from scheduling.templates import (
    active_templates,
    day_of_week,
    iter_slot_times,
    slot_capacity,
    validate_template,
)
from utils.audit import log_event
from utils.clock import horizon

logger = logging.getLogger(__name__)


def _populated_dates(session, program_id: int, first: date, last: date) -> set[date]:
    rows = (
        session.query(Slot.date)
        .filter(Slot.program_id == program_id, Slot.date >= first, Slot.date <= last)
        .distinct()
        .all()
    )
    return {r[0] for r in rows}


def _templates_by_weekday(templates):
    by_day = defaultdict(list)
    for t in templates:
        problems = validate_template(t)
        if problems:
            logger.warning("Skipping schedule %s: %s", t.id, "; ".join(problems))
            continue
        # Detach plain values so a rollback on one date cannot expire them
        by_day[t.day_of_week].append({
            "start_time": t.start_time,
            "end_time": t.end_time,
            "slot_duration": t.slot_duration,
            "max_occupants": t.max_occupants,
        })
    return by_day


def _build_day(program_id: int, day: date, templates: list[dict], default_capacity: int) -> list[Slot]:
    slots = []
    seen = set()
    for t in templates:
        capacity = slot_capacity(t["max_occupants"], default_capacity)
        for start, end in iter_slot_times(t["start_time"], t["end_time"], t["slot_duration"]):
            # overlapping templates on one weekday: the earlier template keeps the start time
            if start in seen:
                continue
            seen.add(start)
            slots.append(Slot(
                program_id=program_id,
                date=day,
                start_time=start,
                end_time=end,
                capacity=capacity,
                spots_available=capacity,
            ))
    return slots


def generate_for_program(session, program_id: int, today: date | None = None, horizon_days: int | None = None) -> int:
    """
    Make sure every date in the horizon that matches an active template of
    the program has its slots. Returns how many slots were created.

    Never raises on storage problems: reads of slots that already exist
    must keep working even when generation cannot.
    """
    try:
        program = session.get(Program, program_id)
        if program is None or not program.is_active:
            logger.info("Program %s missing or inactive, nothing to generate", program_id)
            return 0
        default_capacity = program.capacity

        by_day = _templates_by_weekday(active_templates(session, program_id))
        if not by_day:
            return 0

        first, last = horizon(today, horizon_days)
        populated = _populated_dates(session, program_id, first, last)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not load schedules for program %s", program_id)
        return 0

    created = 0
    day = first
    while day <= last:
        matching = by_day.get(day_of_week(day))
        if matching and day not in populated:
            slots = _build_day(program_id, day, matching, default_capacity)
            try:
                session.add_all(slots)
                session.commit()
                created += len(slots)
            except IntegrityError:
                # Another generator run filled this date first
                session.rollback()
                logger.info("Slots for program %s on %s already generated concurrently", program_id, day)
            except SQLAlchemyError:
                session.rollback()
                logger.exception("Slot generation failed for program %s on %s", program_id, day)
        day += timedelta(days=1)

    if created:
        logger.info("Generated %d slots for program %s", created, program_id)
        try:
            log_event(
                "SLOTS_GENERATED",
                entity="program",
                entity_id=program_id,
                metadata={"created": created},
                session=session,
            )
        except Exception:
            session.rollback()
            logger.exception("Could not record generation audit event for program %s", program_id)
    return created


def generate_for_all_active_programs(session, today: date | None = None) -> dict[int, int]:
    """
    Run generation for every active program that has an active schedule.
    Failures are logged per program and never propagate.
    """
    try:
        rows = (
            session.query(ScheduleTemplate.program_id)
            .join(Program, Program.id == ScheduleTemplate.program_id)
            .filter(ScheduleTemplate.is_active.is_(True), Program.is_active.is_(True))
            .distinct()
            .all()
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not list programs for slot generation")
        return {}

    results = {}
    failed = []
    for (program_id,) in rows:
        try:
            results[program_id] = generate_for_program(session, program_id, today=today)
        except Exception:
            session.rollback()
            failed.append(program_id)
            logger.exception("Slot generation crashed for program %s", program_id)

    if failed:
        logger.error("Slot generation failed for programs: %s", ", ".join(str(p) for p in failed))
    logger.info(
        "Slot generation finished: %d programs, %d slots created",
        len(results),
        sum(results.values()),
    )
    return results
