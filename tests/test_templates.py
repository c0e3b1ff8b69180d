from datetime import date, time

from models.schedule import ScheduleTemplate
from scheduling.templates import day_of_week, iter_slot_times, slot_capacity, validate_template


def test_day_of_week_counts_from_sunday():
    assert day_of_week(date(2026, 10, 18)) == 0  # Sunday
    assert day_of_week(date(2026, 10, 19)) == 1  # Monday
    assert day_of_week(date(2026, 10, 24)) == 6  # Saturday


def test_remainder_shorter_than_a_slot_is_dropped():
    slots = list(iter_slot_times(time(10, 0), time(11, 30), 45))
    assert slots == [(time(10, 0), time(10, 45)), (time(10, 45), time(11, 30))]

    slots = list(iter_slot_times(time(10, 0), time(11, 40), 45))
    assert slots[-1] == (time(10, 45), time(11, 30))
    assert len(slots) == 2


def test_range_shorter_than_duration_yields_nothing():
    assert list(iter_slot_times(time(10, 0), time(10, 30), 45)) == []


def test_slots_can_run_until_midnight():
    slots = list(iter_slot_times(time(22, 0), time(23, 59), 60))
    assert slots == [(time(22, 0), time(23, 0))]


def test_capacity_override_wins_over_program_default():
    assert slot_capacity(4, 10) == 4
    assert slot_capacity(0, 10) == 10
    assert slot_capacity(None, 10) == 10


def test_validate_template_reports_problems():
    good = ScheduleTemplate(day_of_week=1, start_time=time(10), end_time=time(12), slot_duration=30, max_occupants=0)
    assert validate_template(good) == []

    bad = ScheduleTemplate(day_of_week=7, start_time=time(12), end_time=time(10), slot_duration=0, max_occupants=-1)
    problems = validate_template(bad)
    assert len(problems) == 4
