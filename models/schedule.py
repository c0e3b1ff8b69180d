from models.db import db

class ScheduleTemplate(db.Model):
    """Recurring weekly opening window of a program, expanded into time slots."""
    __tablename__ = "program_schedules"

    id = db.Column(db.Integer, primary_key=True)
    program_id = db.Column(db.Integer, db.ForeignKey("programs.id"), nullable=False, index=True)

    day_of_week = db.Column(db.Integer, nullable=False)  # 0 = Sunday ... 6 = Saturday
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    slot_duration = db.Column(db.Integer, nullable=False)  # minutes

    # 0 means use programs.capacity
    max_occupants = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    program = db.relationship("Program", back_populates="schedules")
