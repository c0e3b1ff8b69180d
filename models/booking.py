from datetime import datetime
from sqlalchemy import text
from models.db import db

BOOKED = "booked"
CANCELLED = "cancelled"

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    time_slot_id = db.Column(db.Integer, db.ForeignKey("time_slots.id"), nullable=False, index=True)

    status = db.Column(db.String(20), nullable=False, default=BOOKED)
    # status values: booked, cancelled

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    slot = db.relationship("Slot")

    __table_args__ = (
        # One active booking per user and slot; cancelled rows stay as history
        db.Index(
            "uq_booking_active_user_slot",
            "user_id",
            "time_slot_id",
            unique=True,
            sqlite_where=text("status = 'booked'"),
            postgresql_where=text("status = 'booked'"),
        ),
        db.CheckConstraint("status IN ('booked', 'cancelled')", name="ck_booking_status"),
    )
