from datetime import datetime
from models.db import db

class Slot(db.Model):
    __tablename__ = "time_slots"

    id = db.Column(db.Integer, primary_key=True)

    program_id = db.Column(db.Integer, db.ForeignKey("programs.id"), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)

    # capacity is fixed at generation time, spots_available is the live counter
    capacity = db.Column(db.Integer, nullable=False)
    spots_available = db.Column(db.Integer, nullable=False)
    is_cancelled = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    program = db.relationship("Program")

    __table_args__ = (
        # The generator must never produce two slots with the same start on the same day
        db.UniqueConstraint("program_id", "date", "start_time", name="uq_program_date_start"),
        db.CheckConstraint(
            "spots_available >= 0 AND spots_available <= capacity",
            name="ck_slot_spots_in_range",
        ),
    )

    @property
    def is_available(self) -> bool:
        return not self.is_cancelled and self.spots_available > 0
