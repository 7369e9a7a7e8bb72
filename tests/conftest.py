"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from models.user import User  # noqa: E402
from utils.mailer import MemoryOtpMailer  # noqa: E402


class BaseTestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_SCHEMA = True
    CORS_ORIGINS = ["http://localhost:5500"]
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    MAIL_BACKEND = "memory"
    REQUIRE_VERIFIED_EMAIL = False
    ADMIN_EMAIL = None
    ADMIN_PASSWORD = None


def build_app(**overrides) -> Flask:
    """Create an app from ``BaseTestConfig`` with attribute overrides."""

    class TestConfig(BaseTestConfig):
        pass

    for key, value in overrides.items():
        setattr(TestConfig, key, value)

    return create_app(TestConfig)


@pytest.fixture()
def app() -> Flask:
    """Create a Flask application instance for tests."""

    application = build_app()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def outbox(app: Flask) -> MemoryOtpMailer:
    """The in-memory mailer that collects verification codes."""

    return app.extensions["otp_mailer"]


@pytest.fixture()
def make_user(app: Flask):
    """Persist a user directly, bypassing the signup route."""

    def _make_user(
        email: str,
        password: str,
        *,
        fullname: str = "Test User",
        role: str = "user",
        verified: bool = False,
    ) -> int:
        with app.app_context():
            user = User(fullname=fullname, email=email, role=role, is_verified=verified)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make_user


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
