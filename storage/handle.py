"""Explicit handle on the credential store and its bootstrap state."""

from __future__ import annotations

from threading import Lock

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from utils.errors import ServiceUnavailableError
from utils.request_validation import normalize_email

from .abstract_storage import AbstractUserStore
from .sql_user_store import SqlUserStore

EXTENSION_KEY = "store"


class StoreHandle:
    """Owns the user repository and tracks whether bootstrap has completed.

    Until ``bootstrap`` succeeds the handle is *not ready*: ``users()``
    raises a 503 and bootstrap is attempted again on the next call.
    """

    def __init__(self, db: SQLAlchemy, users: AbstractUserStore | None = None):
        self.db = db
        self.ready = False
        self._users = users or SqlUserStore(db)
        self._lock = Lock()

    def init_app(self, app: Flask) -> None:
        app.extensions[EXTENSION_KEY] = self

    def bootstrap(self, app: Flask) -> bool:
        """Create the schema and seed the admin account.

        Must run inside an application context. Returns the readiness flag.
        """

        with self._lock:
            if self.ready:
                return True
            try:
                if app.config.get("AUTO_CREATE_SCHEMA", True):
                    self.db.create_all()
                self._seed_admin(app)
            except (SQLAlchemyError, HTTPException) as exc:
                self.db.session.rollback()
                app.logger.warning("Credential store bootstrap failed: %s", exc)
                return False
            self.ready = True
            app.logger.info("Credential store ready.")
            return True

    def users(self) -> AbstractUserStore:
        if not self.ready and not self.bootstrap(current_app._get_current_object()):
            raise ServiceUnavailableError()
        return self._users

    def _seed_admin(self, app: Flask) -> None:
        email = normalize_email(app.config.get("ADMIN_EMAIL"))
        password = app.config.get("ADMIN_PASSWORD")
        if not email or not password:
            app.logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin seed.")
            return
        fullname = app.config.get("ADMIN_FULLNAME") or "Site Admin"
        _, action = self._users.ensure_admin(fullname, email, password)
        app.logger.info("Admin account %s.", action)


def get_user_store() -> AbstractUserStore:
    """Return the ready credential store for the current app or raise 503."""

    handle: StoreHandle = current_app.extensions[EXTENSION_KEY]
    return handle.users()
