"""
Reserving and cancelling spots in time slots.

Capacity is enforced by the database, not by this process: the spot counter
is only ever changed by a conditional UPDATE, so concurrent workers cannot
oversell a slot, and the partial unique index on bookings keeps a user from
holding two active bookings for the same slot.
"""

import logging
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.booking import BOOKED, CANCELLED, Booking
from models.slot import Slot
from scheduling.errors import (
    BookingError,
    BookingNotFound,
    DuplicateBooking,
    InfrastructureError,
    SlotFull,
    SlotNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _active_booking(session, user_id: int, slot_id: int):
    return (
        session.query(Booking.id)
        .filter(
            Booking.user_id == user_id,
            Booking.time_slot_id == slot_id,
            Booking.status == BOOKED,
        )
        .first()
    )


def _take_spot(session, slot_id: int) -> bool:
    result = session.execute(
        update(Slot)
        .where(
            Slot.id == slot_id,
            Slot.is_cancelled.is_(False),
            Slot.spots_available > 0,
        )
        .values(spots_available=Slot.spots_available - 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _release_spot(session, slot_id: int) -> bool:
    # Never push the counter above the capacity the slot was created with
    result = session.execute(
        update(Slot)
        .where(Slot.id == slot_id, Slot.spots_available < Slot.capacity)
        .values(spots_available=Slot.spots_available + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def reserve(session, user_id: int, slot_id: int, program_id: int) -> Booking:
    """
    Book one spot of a slot for a user.

    Raises ValidationError, SlotNotFound, SlotFull or DuplicateBooking for
    expected outcomes and InfrastructureError when the database fails. On
    success exactly one booking row is added and the slot loses one spot.
    """
    if not slot_id:
        raise ValidationError("Please select a time slot")
    if user_id is None:
        raise ValidationError("A signed-in user is required")

    try:
        slot = (
            session.query(Slot)
            .filter(
                Slot.id == slot_id,
                Slot.program_id == program_id,
                Slot.is_cancelled.is_(False),
            )
            .first()
        )
        if slot is None:
            raise SlotNotFound(slot_id=slot_id, program_id=program_id)
        if slot.spots_available <= 0:
            raise SlotFull(slot_id=slot_id)
        if _active_booking(session, user_id, slot_id) is not None:
            raise DuplicateBooking(slot_id=slot_id)

        booking = Booking(user_id=user_id, time_slot_id=slot_id, status=BOOKED)
        session.add(booking)
        try:
            session.flush()
        except IntegrityError as exc:
            # Lost a double-submit race on the (user, slot) unique index
            session.rollback()
            if _active_booking(session, user_id, slot_id) is not None:
                raise DuplicateBooking(slot_id=slot_id) from exc
            raise InfrastructureError() from exc

        if not _take_spot(session, slot_id):
            session.rollback()
            raise SlotFull(slot_id=slot_id)

        session.commit()
    except BookingError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Reservation of slot %s by user %s failed", slot_id, user_id)
        raise InfrastructureError() from exc

    logger.info("User %s booked slot %s (booking %s)", user_id, slot_id, booking.id)
    return booking


def cancel(session, user_id: int, booking_id: int) -> Booking:
    """
    Cancel a user's active booking and give the spot back to the slot.

    An unknown booking, someone else's booking and an already cancelled
    booking all raise BookingNotFound; the slot is only credited once.
    """
    try:
        result = session.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.user_id == user_id,
                Booking.status == BOOKED,
            )
            .values(status=CANCELLED, cancelled_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise BookingNotFound(booking_id=booking_id)

        slot_id = session.query(Booking.time_slot_id).filter(Booking.id == booking_id).scalar()
        if not _release_spot(session, slot_id):
            logger.warning("Slot %s already at capacity, spot for booking %s not restored", slot_id, booking_id)

        session.commit()
    except BookingError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Cancellation of booking %s by user %s failed", booking_id, user_id)
        raise InfrastructureError() from exc

    booking = session.get(Booking, booking_id)
    logger.info("User %s cancelled booking %s", user_id, booking_id)
    return booking
