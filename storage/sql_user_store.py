"""SQLAlchemy-backed credential store."""

from __future__ import annotations

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from utils.errors import ConflictError, StoreError
from utils.request_validation import mask_email

from .abstract_storage import AbstractUserStore


class SqlUserStore(AbstractUserStore):
    """Persist users through the Flask-SQLAlchemy session.

    Every database failure rolls the session back and surfaces as a
    ``StoreError`` so nothing internal reaches the client.
    """

    def __init__(self, db: SQLAlchemy):
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        try:
            return User.query.filter_by(email=email).first()
        except SQLAlchemyError as exc:
            self._fail("lookup", email, exc)

    def insert(self, fullname: str, email: str, password: str, role: str = "user") -> User:
        user = User(fullname=fullname, email=email, role=role)
        user.set_password(password)
        self.db.session.add(user)
        try:
            self.db.session.commit()
        except IntegrityError:
            self.db.session.rollback()
            # Lost a race with a concurrent signup for the same email.
            current_app.logger.info("Duplicate insert rejected for %s", mask_email(email))
            raise ConflictError("Email already registered")
        except SQLAlchemyError as exc:
            self._fail("insert", email, exc)
        return user

    def mark_verified(self, email: str) -> bool:
        user = self.find_by_email(email)
        if user is None:
            return False
        try:
            user.mark_verified()
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("verify", email, exc)
        return True

    def ensure_admin(
        self, fullname: str, email: str, password: str, *, reset: bool = False
    ) -> tuple[User, str]:
        admin = self.find_by_email(email)
        if admin is None:
            admin = User(fullname=fullname, email=email, role="admin", is_verified=True)
            admin.set_password(password)
            self.db.session.add(admin)
            action = "created"
        elif reset:
            admin.role = "admin"
            admin.is_verified = True
            admin.set_password(password)
            action = "updated"
        else:
            return admin, "unchanged"

        try:
            self.db.session.commit()
        except SQLAlchemyError as exc:
            self._fail("seed admin", email, exc)
        return admin, action

    def _fail(self, operation: str, email: str, exc: SQLAlchemyError):
        self.db.session.rollback()
        current_app.logger.error(
            "Credential store %s failed for %s", operation, mask_email(email), exc_info=exc
        )
        raise StoreError() from exc
