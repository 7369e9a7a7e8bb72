"""Pending email verification codes."""

from __future__ import annotations

import hmac
import secrets

from .ttl_store import TTLEntry, TTLStore


class OtpStore:
    """Issue and consume single-use numeric codes keyed by email.

    A code is removed only when it is matched; a wrong guess leaves the
    pending entry in place until it expires or a new code replaces it.
    """

    def __init__(self, ttl_seconds: int = 600, length: int = 6, entries: TTLStore | None = None):
        self.ttl_seconds = ttl_seconds
        self.length = length
        self._entries: TTLStore[str, str] = entries if entries is not None else TTLStore()

    def issue(self, email: str) -> str:
        code = "".join(secrets.choice("0123456789") for _ in range(self.length))
        self._entries.set(email, code, self.ttl_seconds)
        return code

    def claim(self, email: str, submitted: str) -> TTLEntry[str] | None:
        """Remove and return the pending entry if ``submitted`` matches it."""

        candidate = (submitted or "").strip().encode()
        return self._entries.take_if(
            email, lambda code: hmac.compare_digest(code.encode(), candidate)
        )

    def consume(self, email: str, submitted: str) -> bool:
        """Return True and delete the entry if ``submitted`` matches."""

        return self.claim(email, submitted) is not None

    def restore(self, email: str, claimed: TTLEntry[str]) -> bool:
        """Give back a claimed code whose verification could not be recorded.

        The code keeps its original expiry and never replaces a newer one.
        """

        return self._entries.restore(email, claimed)

    def has_pending(self, email: str) -> bool:
        return self._entries.get(email) is not None
