from datetime import time

from models import db
from models.category import Category
from models.program import Program
from models.schedule import ScheduleTemplate

# (category, description, [(title, duration, location, capacity, [(weekday, start, end, max_occupants)])])
DEMO_CATALOG = [
    ("Art Therapy", "Creative expression for emotional wellbeing", [
        ("Watercolor Painting Class", 45, "Art Room 203", 10, [
            (1, time(10, 0), time(15, 0), 0),
            (3, time(10, 0), time(15, 0), 0),
        ]),
    ]),
    ("Music Therapy", "Healing through sound and rhythm", [
        ("Sound Bath", 40, "Meditation Room", 12, [
            (2, time(9, 0), time(12, 0), 0),
            (4, time(14, 0), time(17, 0), 8),
        ]),
    ]),
    ("Movement", "Gentle exercise for body and mind", [
        ("Chair Yoga", 60, "Studio B", 15, [
            (1, time(8, 0), time(11, 0), 0),
            (5, time(8, 0), time(11, 0), 0),
        ]),
    ]),
]

def seed_catalog() -> int:
    """Insert the demo categories, programs and schedules that are missing. Returns programs added."""
    added = 0
    for cat_name, cat_desc, programs in DEMO_CATALOG:
        category = Category.query.filter_by(name=cat_name).first()
        if not category:
            category = Category(name=cat_name, description=cat_desc)
            db.session.add(category)
            db.session.flush()

        for title, duration, location, capacity, schedules in programs:
            if Program.query.filter_by(title=title).first():
                continue
            program = Program(
                category_id=category.id,
                title=title,
                duration_mins=duration,
                location=location,
                capacity=capacity,
            )
            db.session.add(program)
            db.session.flush()
            for weekday, start, end, max_occupants in schedules:
                db.session.add(ScheduleTemplate(
                    program_id=program.id,
                    day_of_week=weekday,
                    start_time=start,
                    end_time=end,
                    slot_duration=duration,
                    max_occupants=max_occupants,
                ))
            added += 1
    db.session.commit()
    return added
