from models.db import db

class Program(db.Model):
    __tablename__ = "programs"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)

    title = db.Column(db.String(160), nullable=False)
    description = db.Column(db.Text, nullable=True)
    duration_mins = db.Column(db.Integer, nullable=False, default=60)
    location = db.Column(db.String(160), nullable=True)
    image_url = db.Column(db.String(255), nullable=True)

    # default per-slot capacity, a schedule may override it
    capacity = db.Column(db.Integer, nullable=False, default=10)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    category = db.relationship("Category", back_populates="programs")
    schedules = db.relationship("ScheduleTemplate", back_populates="program")

    __table_args__ = (
        db.CheckConstraint("capacity >= 0", name="ck_program_capacity"),
    )
