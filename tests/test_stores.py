"""Tests for the in-memory TTL map and the OTP store built on it."""

from __future__ import annotations

import threading

from storage import OtpStore, TTLStore


def test_entries_expire(clock):
    store: TTLStore[str, str] = TTLStore(clock=clock)
    store.set("a", "1", ttl_seconds=10)

    clock.advance(9)
    assert store.get("a") == "1"

    clock.advance(1)
    assert store.get("a") is None
    assert len(store) == 0


def test_pop_if_only_removes_on_match():
    store: TTLStore[str, str] = TTLStore()
    store.set("a", "1", ttl_seconds=60)

    assert store.pop_if("a", lambda value: value == "2") is False
    assert store.get("a") == "1"
    assert store.pop_if("a", lambda value: value == "1") is True
    assert store.get("a") is None
    assert store.pop_if("missing", lambda value: True) is False


def test_purge_expired(clock):
    store: TTLStore[str, int] = TTLStore(clock=clock)
    store.set("short", 1, ttl_seconds=1)
    store.set("long", 2, ttl_seconds=100)

    clock.advance(5)

    assert store.purge_expired() == 1
    assert len(store) == 1


def test_otp_issue_and_consume():
    otp = OtpStore(ttl_seconds=60, length=6)
    code = otp.issue("ada@x.com")

    assert len(code) == 6 and code.isdigit()
    assert otp.consume("ada@x.com", code) is True
    assert otp.consume("ada@x.com", code) is False
    assert otp.has_pending("ada@x.com") is False


def test_otp_mismatch_leaves_entry():
    otp = OtpStore()
    code = otp.issue("ada@x.com")
    wrong = "0" * len(code) if code != "0" * len(code) else "1" * len(code)

    assert otp.consume("ada@x.com", wrong) is False
    assert otp.has_pending("ada@x.com") is True
    assert otp.consume("ada@x.com", f" {code} ") is True


def test_otp_expires(clock):
    otp = OtpStore(ttl_seconds=600, entries=TTLStore(clock=clock))
    code = otp.issue("ada@x.com")

    clock.advance(601)

    assert otp.consume("ada@x.com", code) is False


def test_reissue_replaces_previous_code():
    otp = OtpStore(length=8)
    first = otp.issue("ada@x.com")
    second = otp.issue("ada@x.com")

    if first != second:
        assert otp.consume("ada@x.com", first) is False
    assert otp.consume("ada@x.com", second) is True


def test_concurrent_consume_succeeds_once():
    otp = OtpStore()
    code = otp.issue("ada@x.com")
    barrier = threading.Barrier(8)
    results: list[bool] = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        outcome = otp.consume("ada@x.com", code)
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert results.count(False) == 7


def test_restored_code_keeps_original_expiry(clock):
    otp = OtpStore(ttl_seconds=600, entries=TTLStore(clock=clock))
    code = otp.issue("ada@x.com")

    clock.advance(500)
    claimed = otp.claim("ada@x.com", code)
    assert claimed is not None
    assert otp.has_pending("ada@x.com") is False

    assert otp.restore("ada@x.com", claimed) is True
    clock.advance(99)
    assert otp.has_pending("ada@x.com") is True
    clock.advance(1)
    assert otp.consume("ada@x.com", code) is False


def test_restore_never_replaces_newer_code(clock):
    otp = OtpStore(length=8, entries=TTLStore(clock=clock))
    first = otp.issue("ada@x.com")
    claimed = otp.claim("ada@x.com", first)
    second = otp.issue("ada@x.com")

    assert otp.restore("ada@x.com", claimed) is False
    assert otp.consume("ada@x.com", second) is True

    clock.advance(601)
    assert otp.restore("ada@x.com", claimed) is False
    assert otp.has_pending("ada@x.com") is False
