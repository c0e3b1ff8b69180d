from datetime import date, time

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.category import Category
from models.program import Program
from models.schedule import ScheduleTemplate
from models.user import User
from security.password import hash_password

# 2026-10-19 is a Monday
MONDAY = date(2026, 10, 19)


@pytest.fixture
def app(tmp_path):
    # File database so worker threads get their own connections
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + str(tmp_path / "healspace-test.db")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def make_program(session):
    def _make(capacity=10, title="Watercolor Painting Class", is_active=True, schedules=()):
        category = Category.query.filter_by(name="Art Therapy").first()
        if category is None:
            category = Category(name="Art Therapy", description="Creative expression")
            session.add(category)
            session.flush()
        program = Program(
            category_id=category.id,
            title=title,
            duration_mins=45,
            location="Art Room 203",
            capacity=capacity,
            is_active=is_active,
        )
        session.add(program)
        session.flush()
        for s in schedules:
            session.add(ScheduleTemplate(program_id=program.id, **s))
        session.commit()
        return program
    return _make


@pytest.fixture
def weekly_template():
    def _make(start=time(10, 0), end=time(11, 30), duration=45, max_occupants=0, day=1, is_active=True):
        return {
            "day_of_week": day,
            "start_time": start,
            "end_time": end,
            "slot_duration": duration,
            "max_occupants": max_occupants,
            "is_active": is_active,
        }
    return _make


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(email=None, password="password123"):
        counter["n"] += 1
        user = User(
            email=email or f"guest{counter['n']}@example.com",
            password_hash=hash_password(password),
            first_name="Test",
            last_name="User",
        )
        session.add(user)
        session.commit()
        return user
    return _make


@pytest.fixture
def logged_in(client, make_user):
    user = make_user(email="test@example.com")
    resp = client.post("/auth/login", json={"email": "test@example.com", "password": "password123"})
    assert resp.status_code == 200
    return user
