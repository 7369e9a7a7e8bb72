"""Tests for the Flask application factory."""
from __future__ import annotations

import pytest

from models import db
from models.user import User

from conftest import build_app


def test_health_endpoint_returns_ok(client):
    """The health endpoint should respond with an OK payload once bootstrapped."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_blueprints_registered(app):
    """Application factory should register expected blueprints."""
    assert {"auth", "admin"}.issubset(app.blueprints.keys())
    assert app.extensions["store"].ready is True


def test_missing_secret_key_is_fatal():
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        build_app(SECRET_KEY=None)


def test_smtp_backend_requires_credentials():
    with pytest.raises(RuntimeError, match="MAIL_PASSWORD"):
        build_app(
            MAIL_BACKEND="smtp",
            MAIL_SERVER="smtp.example.com",
            MAIL_USERNAME="mailer",
            MAIL_PASSWORD=None,
            MAIL_SENDER="noreply@example.com",
        )


def test_unknown_mail_backend_is_fatal():
    with pytest.raises(RuntimeError, match="MAIL_BACKEND"):
        build_app(MAIL_BACKEND="carrier-pigeon")


def test_admin_is_seeded_from_config():
    app = build_app(ADMIN_EMAIL="Root@X.com", ADMIN_PASSWORD="r00t", ADMIN_FULLNAME="Root")
    try:
        with app.app_context():
            admin = User.query.filter_by(email="root@x.com").one()
            assert admin.role == "admin"
            assert admin.is_verified is True

        client = app.test_client()
        response = client.post("/signin", json={"email": "root@x.com", "password": "r00t"})
        assert response.get_json()["role"] == "admin"
        assert client.get("/admin/secure-check").status_code == 200
    finally:
        with app.app_context():
            db.drop_all()


def test_store_not_ready_returns_503_until_bootstrap_succeeds(tmp_path):
    db_dir = tmp_path / "missing"
    app = build_app(SQLALCHEMY_DATABASE_URI=f"sqlite:///{db_dir / 'app.db'}")
    client = app.test_client()

    assert app.extensions["store"].ready is False

    response = client.post(
        "/signup",
        json={"fullname": "Ada", "email": "ada@x.com", "password": "s3cret"},
    )
    assert response.status_code == 503
    assert response.get_json()["error"] == "Service Unavailable"

    response = client.post("/signin", json={"email": "ada@x.com", "password": "s3cret"})
    assert response.status_code == 503

    assert client.get("/health").status_code == 503
    # Session-only endpoints do not need the store.
    assert client.get("/auth/me").get_json() == {"authenticated": False}

    db_dir.mkdir()

    assert client.get("/health").get_json() == {"status": "ok"}
    response = client.post(
        "/signup",
        json={"fullname": "Ada", "email": "ada@x.com", "password": "s3cret"},
    )
    assert response.status_code == 200
