"""Thread-safe in-memory key/value store with per-entry expiry."""

from __future__ import annotations

import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from threading import Lock
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass
class TTLEntry(Generic[V]):
    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLStore(Generic[K, V]):
    """A dict guarded by one lock whose entries vanish after their TTL.

    ``clock`` defaults to ``time.monotonic`` and can be replaced in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = Lock()
        self._entries: dict[K, TTLEntry[V]] = {}

    def set(self, key: K, value: V, ttl_seconds: float) -> None:
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            self._entries[key] = TTLEntry(value=value, expires_at=expires_at)

    def get(self, key: K) -> V | None:
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry else None

    def delete(self, key: K) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def pop_if(self, key: K, predicate: Callable[[V], bool]) -> bool:
        """Delete ``key`` only if its live value satisfies ``predicate``.

        The check and the delete happen under one lock acquisition, so of
        several concurrent callers at most one gets True.
        """

        return self.take_if(key, predicate) is not None

    def take_if(self, key: K, predicate: Callable[[V], bool]) -> TTLEntry[V] | None:
        """Like ``pop_if`` but hand back the removed entry."""

        with self._lock:
            entry = self._live_entry(key)
            if entry is None or not predicate(entry.value):
                return None
            del self._entries[key]
            return entry

    def restore(self, key: K, entry: TTLEntry[V]) -> bool:
        """Put a previously taken entry back with its original expiry.

        Nothing is restored if the entry has expired meanwhile or a newer
        value was set under ``key``.
        """

        with self._lock:
            if entry.is_expired(self._clock()) or self._live_entry(key) is not None:
                return False
            self._entries[key] = entry
            return True

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _live_entry(self, key: K) -> TTLEntry[V] | None:
        # caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry
