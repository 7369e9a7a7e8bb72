"""Server-side sessions addressed by a signed, opaque cookie."""

from __future__ import annotations

import copy
import hashlib
import secrets

from flask import Flask, Request, Response
from flask.sessions import SessionInterface, SessionMixin
from itsdangerous import BadSignature, Signer
from werkzeug.datastructures import CallbackDict

from storage.ttl_store import TTLStore

SESSION_ID_BYTES = 32


def _new_sid() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


class ServerSession(CallbackDict, SessionMixin):
    """Session data held in process memory; the client only sees ``sid``."""

    modified = False

    def __init__(self, initial=None, sid: str | None = None, new: bool = False):
        def on_update(self):
            self.modified = True

        super().__init__(initial, on_update)
        self.sid = sid or _new_sid()
        self.new = new
        self.previous_sid: str | None = None

    def regenerate(self) -> None:
        """Move the data to a fresh id and drop the old one on save."""

        if not self.new:
            self.previous_sid = self.sid
        self.sid = _new_sid()
        self.modified = True


class ServerSideSessionInterface(SessionInterface):
    """Keep session data in a ``TTLStore`` and sign only the id into the cookie.

    Entries live for ``PERMANENT_SESSION_LIFETIME`` from the last write. With
    ``SESSION_REFRESH_EACH_REQUEST`` off, reads never extend that window.
    """

    salt = "server-session-id"

    def __init__(self, store: TTLStore | None = None):
        self.store: TTLStore[str, dict] = store if store is not None else TTLStore()

    def _signer(self, app: Flask) -> Signer:
        return Signer(
            app.secret_key,
            salt=self.salt,
            key_derivation="hmac",
            digest_method=hashlib.sha256,
        )

    def open_session(self, app: Flask, request: Request) -> ServerSession | None:
        if not app.secret_key:
            return None

        cookie = request.cookies.get(self.get_cookie_name(app))
        if not cookie:
            return ServerSession(new=True)

        try:
            sid = self._signer(app).unsign(cookie).decode("utf-8")
        except BadSignature:
            return ServerSession(new=True)

        data = self.store.get(sid)
        if data is None:
            return ServerSession(new=True)
        return ServerSession(copy.deepcopy(data), sid=sid)

    def save_session(self, app: Flask, session: SessionMixin, response: Response) -> None:
        name = self.get_cookie_name(app)
        domain = self.get_cookie_domain(app)
        path = self.get_cookie_path(app)
        secure = self.get_cookie_secure(app)
        samesite = self.get_cookie_samesite(app)
        httponly = self.get_cookie_httponly(app)

        if not isinstance(session, ServerSession):
            return

        if session.previous_sid:
            self.store.delete(session.previous_sid)
            session.previous_sid = None

        if not session:
            if session.modified:
                self.store.delete(session.sid)
                response.delete_cookie(
                    name,
                    domain=domain,
                    path=path,
                    secure=secure,
                    samesite=samesite,
                    httponly=httponly,
                )
                response.vary.add("Cookie")
            return

        if not self.should_set_cookie(app, session):
            return

        lifetime = app.permanent_session_lifetime.total_seconds()
        self.store.purge_expired()
        self.store.set(session.sid, copy.deepcopy(dict(session)), lifetime)

        response.set_cookie(
            name,
            self._signer(app).sign(session.sid).decode("utf-8"),
            max_age=int(lifetime) if session.permanent else None,
            expires=self.get_expiration_time(app, session),
            httponly=httponly,
            domain=domain,
            path=path,
            secure=secure,
            samesite=samesite,
        )
        response.vary.add("Cookie")
