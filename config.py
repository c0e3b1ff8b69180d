import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite file next to the app unless DATABASE_URL points at a real server
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "healspace.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Concurrent bookings on SQLite wait for the write lock instead of failing
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 15}} if SQLALCHEMY_DATABASE_URI.startswith("sqlite") else {}

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "healspace_session"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 30 minutes
    IDLE_TIMEOUT_SECONDS = 30 * 60

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE", "false")

    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Booking window and slot generation
    OPERATING_TIMEZONE = os.getenv("OPERATING_TIMEZONE", "UTC")
    BOOKING_HORIZON_DAYS = int(os.getenv("BOOKING_HORIZON_DAYS", "21"))
    GENERATE_SLOTS_ON_STARTUP = _env_flag("GENERATE_SLOTS_ON_STARTUP", "true")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}
    BCRYPT_ROUNDS = 4
    GENERATE_SLOTS_ON_STARTUP = False
    OPERATING_TIMEZONE = "UTC"
