"""
Shared fixtures: an app on in-memory SQLite, logged-in API clients and
small factories for sessions and students.
"""
from datetime import date, timedelta

import pytest

from app import create_app
from config import Config
from models import db

ADMIN_USERNAME = "HA.admin01"
ADMIN_PASSWORD = "admin-pass-123"


class IntegrationConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTO_CREATE_TABLES = True
    BCRYPT_ROUNDS = 4
    INITIAL_ADMIN_USERNAME = ADMIN_USERNAME
    INITIAL_ADMIN_PASSWORD = ADMIN_PASSWORD


class ApiClient:
    """Test client that sends the CSRF header the way the frontend does."""

    def __init__(self, client):
        self.client = client

    def _headers(self):
        cookie = self.client.get_cookie("csrf_token")
        return {"X-CSRF-Token": cookie.value} if cookie else {}

    def login(self, username, password):
        return self.client.post("/auth/login", json={"username": username, "password": password})

    def get(self, url, **kwargs):
        return self.client.get(url, **kwargs)

    def post(self, url, json=None):
        return self.client.post(url, json=json or {}, headers=self._headers())

    def patch(self, url, json=None):
        return self.client.patch(url, json=json or {}, headers=self._headers())

    def delete(self, url):
        return self.client.delete(url, headers=self._headers())


@pytest.fixture
def app():
    app = create_app(IntegrationConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return ApiClient(app.test_client())


@pytest.fixture
def api_client(app):
    """Factory for logged-in clients; each has its own cookie jar."""
    def _make(username, password):
        c = ApiClient(app.test_client())
        resp = c.login(username, password)
        assert resp.status_code == 200, resp.get_json()
        return c
    return _make


@pytest.fixture
def admin(api_client):
    return api_client(ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def future_date():
    return date.today() + timedelta(days=10)


@pytest.fixture
def make_session(admin, future_date):
    def _make(module_type="Listening", max_capacity=10, test_date=None, **extra):
        payload = {
            "module_type": module_type,
            "test_date": (test_date or future_date).isoformat(),
            "test_time": "9:30 AM",
            "room_number": "Hall 2",
            "max_capacity": max_capacity,
        }
        payload.update(extra)
        resp = admin.post("/sessions", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _make


@pytest.fixture
def make_student(admin, api_client):
    """Enrol a student and return (student json, logged-in client)."""
    def _make(user_id, remaining_tests=None, expiry_date=None):
        payload = {
            "user_id": user_id,
            "name": f"Student {user_id}",
            "phone": "01700000000",
            "gender": "Female",
            "batch_number": "B-12",
            "password": "pass-" + user_id,
            "remaining_tests": remaining_tests or {},
        }
        if expiry_date:
            payload["expiry_date"] = expiry_date.isoformat()
        resp = admin.post("/students", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json(), api_client(user_id, "pass-" + user_id)
    return _make
