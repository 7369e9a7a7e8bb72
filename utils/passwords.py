"""Password hashing helpers built on werkzeug.security."""

from __future__ import annotations

from functools import lru_cache

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

DEFAULT_HASH_METHOD = "scrypt"


def _hash_method() -> str:
    try:
        return current_app.config.get("PASSWORD_HASH_METHOD") or DEFAULT_HASH_METHOD
    except RuntimeError:
        # outside an application context, e.g. in scripts
        return DEFAULT_HASH_METHOD


def hash_password(password: str) -> str:
    """Return a salted one-way hash of ``password``."""

    if not password:
        raise ValueError("Password must not be empty.")
    return generate_password_hash(password, method=_hash_method())


def verify_password(password_hash: str, password: str) -> bool:
    """Compare ``password`` against ``password_hash`` in constant time."""

    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


@lru_cache(maxsize=8)
def _dummy_hash(method: str) -> str:
    return generate_password_hash("not-a-real-password", method=method)


def burn_password_check(password: str) -> None:
    """Spend the same hashing work as a real check when no user matched."""

    check_password_hash(_dummy_hash(_hash_method()), password or "")
