from datetime import time

import pytest
from sqlalchemy.exc import OperationalError

from models.booking import BOOKED, CANCELLED, Booking
from models.slot import Slot
from scheduling import (
    BookingNotFound,
    Conflict,
    DuplicateBooking,
    InfrastructureError,
    SlotFull,
    SlotNotFound,
    ValidationError,
    cancel,
    reserve,
)
from tests.conftest import MONDAY


@pytest.fixture
def make_slot(session, make_program):
    def _make(capacity=5, spots=None, is_cancelled=False, program=None, start=time(10, 0)):
        program = program or make_program(capacity=capacity)
        slot = Slot(
            program_id=program.id,
            date=MONDAY,
            start_time=start,
            end_time=time(start.hour, 45),
            capacity=capacity,
            spots_available=capacity if spots is None else spots,
            is_cancelled=is_cancelled,
        )
        session.add(slot)
        session.commit()
        return slot
    return _make


def _spots(session, slot_id):
    session.expire_all()
    return session.get(Slot, slot_id).spots_available


def test_reserve_takes_one_spot(session, make_slot, make_user):
    slot = make_slot(capacity=5)
    user = make_user()

    booking = reserve(session, user.id, slot.id, slot.program_id)

    assert booking.status == BOOKED
    assert booking.user_id == user.id
    assert booking.cancelled_at is None
    assert _spots(session, slot.id) == 4


def test_reserve_requires_a_slot(session, make_user):
    user = make_user()
    with pytest.raises(ValidationError):
        reserve(session, user.id, None, 1)


def test_reserve_unknown_slot(session, make_slot, make_user):
    slot = make_slot()
    user = make_user()
    with pytest.raises(SlotNotFound):
        reserve(session, user.id, slot.id + 100, slot.program_id)


def test_reserve_slot_under_other_program(session, make_slot, make_program, make_user):
    slot = make_slot()
    other = make_program(title="Sound Bath")
    user = make_user()
    with pytest.raises(SlotNotFound):
        reserve(session, user.id, slot.id, other.id)


def test_reserve_cancelled_slot(session, make_slot, make_user):
    slot = make_slot(is_cancelled=True)
    user = make_user()
    with pytest.raises(SlotNotFound):
        reserve(session, user.id, slot.id, slot.program_id)


def test_reserve_full_slot(session, make_slot, make_user):
    slot = make_slot(capacity=3, spots=0)
    user = make_user()

    with pytest.raises(SlotFull) as exc:
        reserve(session, user.id, slot.id, slot.program_id)

    assert isinstance(exc.value, Conflict)
    assert exc.value.status_code == 409
    assert Booking.query.count() == 0


def test_duplicate_booking_leaves_capacity_unchanged(session, make_slot, make_user):
    slot = make_slot(capacity=5)
    user = make_user()
    reserve(session, user.id, slot.id, slot.program_id)

    with pytest.raises(DuplicateBooking):
        reserve(session, user.id, slot.id, slot.program_id)

    assert _spots(session, slot.id) == 4
    assert Booking.query.filter_by(user_id=user.id, status=BOOKED).count() == 1


def test_last_spot_goes_to_first_user(session, make_slot, make_user):
    slot = make_slot(capacity=1)
    first, second = make_user(), make_user()

    reserve(session, first.id, slot.id, slot.program_id)
    with pytest.raises(SlotFull):
        reserve(session, second.id, slot.id, slot.program_id)

    assert _spots(session, slot.id) == 0


def test_cancel_restores_exactly_one_spot(session, make_slot, make_user):
    slot = make_slot(capacity=5)
    a, b = make_user(), make_user()
    reserve(session, a.id, slot.id, slot.program_id)
    booking = reserve(session, b.id, slot.id, slot.program_id)
    assert _spots(session, slot.id) == 3

    cancelled = cancel(session, b.id, booking.id)

    assert cancelled.status == CANCELLED
    assert cancelled.cancelled_at is not None
    assert _spots(session, slot.id) == 4


def test_second_cancel_is_not_found_and_does_not_credit(session, make_slot, make_user):
    slot = make_slot(capacity=5)
    user = make_user()
    booking = reserve(session, user.id, slot.id, slot.program_id)
    cancel(session, user.id, booking.id)

    with pytest.raises(BookingNotFound):
        cancel(session, user.id, booking.id)

    assert _spots(session, slot.id) == 5


def test_cannot_cancel_someone_elses_booking(session, make_slot, make_user):
    slot = make_slot()
    owner, stranger = make_user(), make_user()
    booking = reserve(session, owner.id, slot.id, slot.program_id)

    with pytest.raises(BookingNotFound):
        cancel(session, stranger.id, booking.id)

    assert session.get(Booking, booking.id).status == BOOKED


def test_cancel_unknown_booking(session, make_user):
    user = make_user()
    with pytest.raises(BookingNotFound):
        cancel(session, user.id, 12345)


def test_cancel_never_exceeds_capacity(session, make_slot, make_user):
    # counter already back at capacity (e.g. repaired by hand)
    slot = make_slot(capacity=2)
    user = make_user()
    booking = reserve(session, user.id, slot.id, slot.program_id)
    session.query(Slot).filter_by(id=slot.id).update({"spots_available": 2})
    session.commit()

    cancel(session, user.id, booking.id)

    assert _spots(session, slot.id) == 2


def test_rebook_after_cancel_keeps_history(session, make_slot, make_user):
    slot = make_slot(capacity=5)
    user = make_user()
    first = reserve(session, user.id, slot.id, slot.program_id)
    cancel(session, user.id, first.id)

    second = reserve(session, user.id, slot.id, slot.program_id)

    assert second.id != first.id
    statuses = sorted(b.status for b in Booking.query.filter_by(user_id=user.id).all())
    assert statuses == [BOOKED, CANCELLED]
    assert _spots(session, slot.id) == 4


def _fail_execute_on_call(monkeypatch, session, failing_call):
    """Make the n-th session.execute raise as if the database went away."""
    real_execute = session.execute
    calls = {"n": 0}

    def flaky_execute(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == failing_call:
            raise OperationalError("UPDATE", {}, Exception("database is locked"))
        return real_execute(*args, **kwargs)

    monkeypatch.setattr(session, "execute", flaky_execute)


def test_storage_failure_during_reserve_rolls_back(session, make_slot, make_user, monkeypatch):
    slot = make_slot(capacity=5)
    user = make_user()
    # the booking row is already flushed when the spot update fails
    _fail_execute_on_call(monkeypatch, session, 1)

    with pytest.raises(InfrastructureError) as exc:
        reserve(session, user.id, slot.id, slot.program_id)
    monkeypatch.undo()

    assert exc.value.status_code == 500
    assert _spots(session, slot.id) == 5
    assert Booking.query.count() == 0


def test_storage_failure_during_cancel_rolls_back(session, make_slot, make_user, monkeypatch):
    slot = make_slot(capacity=5)
    user = make_user()
    booking = reserve(session, user.id, slot.id, slot.program_id)
    # status update succeeds, crediting the spot back fails
    _fail_execute_on_call(monkeypatch, session, 2)

    with pytest.raises(InfrastructureError):
        cancel(session, user.id, booking.id)
    monkeypatch.undo()

    assert _spots(session, slot.id) == 4
    stored = session.get(Booking, booking.id)
    assert stored.status == BOOKED
    assert stored.cancelled_at is None
    assert Booking.query.count() == 1
