import os

from allocation.allocator import GUEST_ID_PREFIX

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to app.py as ielts.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "ielts.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # create tables on startup instead of running migrations (tests, local demos)
    AUTO_CREATE_TABLES = os.getenv("AUTO_CREATE_TABLES", "false").lower() == "true"

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "ielts_session"
    CSRF_COOKIE_NAME = "csrf_token"
    CSRF_HEADER_NAME = "X-CSRF-Token"

    # 8 hours session lifetime
    SESSION_LIFETIME_SECONDS = 8 * 60 * 60

    # Idle timeout: 20 minutes
    IDLE_TIMEOUT_SECONDS = 20 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"

    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Speaking interview grid: published times and rooms, scanned in this order
    SPEAKING_TIME_SLOTS = [
        # morning
        "9:00 AM", "9:20 AM", "9:40 AM", "10:00 AM", "10:20 AM", "10:40 AM",
        "11:00 AM", "11:20 AM", "11:40 AM", "12:00 PM", "12:20 PM",
        # afternoon
        "2:00 PM", "2:20 PM", "2:40 PM", "3:00 PM", "3:20 PM", "3:40 PM",
        "4:00 PM", "4:20 PM", "4:40 PM",
        # evening
        "6:00 PM", "6:20 PM", "6:40 PM", "7:00 PM", "7:20 PM", "7:40 PM",
    ]
    SPEAKING_ROOMS = ["Speaking Room 1", "Speaking Room 2", "Speaking Room 3"]

    # Walk-in candidates get ids like GUEST-1A2B3C4D
    GUEST_ID_PREFIX = os.getenv("GUEST_ID_PREFIX", GUEST_ID_PREFIX)

    # Bootstrap ADMIN account, created at startup if set and no ADMIN exists yet
    INITIAL_ADMIN_USERNAME = os.getenv("INITIAL_ADMIN_USERNAME")
    INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD")

    # Basic app settings
    DEBUG = False
