"""Tests for the User model and the SQL credential store."""

import pytest

from models import db
from models.user import User
from storage import SqlUserStore
from utils.errors import ConflictError


def test_user_password_helpers(app):
    """Passwords are stored hashed and checked against the hash."""

    with app.app_context():
        user = User(fullname="Helper", email="helper@example.com")
        user.set_password("password123")
        db.session.add(user)
        db.session.commit()

        assert user.role == "user"
        assert user.is_verified is False
        assert user.password_hash != "password123"
        assert user.check_password("password123") is True
        assert user.check_password("password124") is False

        identity = user.to_identity()
        assert identity == {
            "id": user.id,
            "fullname": "Helper",
            "email": "helper@example.com",
            "role": "user",
        }


def test_same_password_gets_distinct_salts(app):
    with app.app_context():
        first = User(fullname="A", email="a@example.com")
        second = User(fullname="B", email="b@example.com")
        first.set_password("same")
        second.set_password("same")

        assert first.password_hash != second.password_hash


def test_unique_constraint_backs_up_the_existence_check(app):
    """A second insert that skipped the lookup still cannot create a row."""

    with app.app_context():
        store = SqlUserStore(db)
        store.insert("Ada", "ada@x.com", "s3cret")

        with pytest.raises(ConflictError):
            store.insert("Ada Twin", "ada@x.com", "other")

        assert User.query.filter_by(email="ada@x.com").count() == 1
        # The session is usable again after the rollback.
        assert store.find_by_email("ada@x.com").fullname == "Ada"


def test_mark_verified(app):
    with app.app_context():
        store = SqlUserStore(db)
        store.insert("Ada", "ada@x.com", "s3cret")

        assert store.mark_verified("ada@x.com") is True
        assert store.find_by_email("ada@x.com").is_verified is True
        assert store.mark_verified("nobody@x.com") is False


def test_ensure_admin_actions(app):
    with app.app_context():
        store = SqlUserStore(db)

        admin, action = store.ensure_admin("Root", "root@x.com", "first")
        assert action == "created"
        assert admin.role == "admin"
        assert admin.is_verified is True

        _, action = store.ensure_admin("Root", "root@x.com", "second")
        assert action == "unchanged"
        assert store.find_by_email("root@x.com").check_password("first")

        _, action = store.ensure_admin("Root", "root@x.com", "second", reset=True)
        assert action == "updated"
        assert store.find_by_email("root@x.com").check_password("second")
