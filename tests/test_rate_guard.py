"""Unit tests for core/rate_guard.py -- global fixed-window request guard.

FakeClock starts at t=1000, which sits inside the 60s window [960, 1020).
"""

import threading

import pytest

from core.messages import MessageKey
from core.rate_guard import FixedWindowRateGuard
from core.results import StatusCode


def test_defaults():
    guard = FixedWindowRateGuard()
    assert guard.limit == 10
    assert guard.window_seconds == 60


@pytest.mark.parametrize("limit,window", [(0, 60), (10, 0), (10, -1)])
def test_invalid_configuration_rejected(limit, window):
    with pytest.raises(ValueError):
        FixedWindowRateGuard(limit=limit, window_seconds=window)


def test_limit_then_reject(clock):
    guard = FixedWindowRateGuard(limit=3, window_seconds=60, clock=clock)
    assert [guard.try_acquire() for _ in range(4)] == [True, True, True, False]
    assert guard.remaining == 0


def test_check_returns_envelopes(clock):
    guard = FixedWindowRateGuard(limit=1, window_seconds=60, clock=clock)

    accepted = guard.check()
    assert accepted.success
    assert accepted.message is MessageKey.REQUEST_ACCEPTED

    rejected = guard.check()
    assert rejected.status is StatusCode.TOO_MANY_REQUESTS
    assert rejected.message is MessageKey.TOO_MANY_REQUESTS


def test_window_boundary_is_wall_clock_aligned(clock):
    guard = FixedWindowRateGuard(limit=1, window_seconds=60, clock=clock)
    assert guard.try_acquire()

    clock.now = 1019.9
    assert not guard.try_acquire()

    clock.now = 1020.0
    assert guard.try_acquire()


def test_rejected_requests_do_not_carry_over(clock):
    guard = FixedWindowRateGuard(limit=2, window_seconds=60, clock=clock)
    for _ in range(10):
        guard.try_acquire()
    clock.advance(60)
    assert guard.remaining == 2
    assert guard.try_acquire()
    assert guard.try_acquire()
    assert not guard.try_acquire()


def test_retry_after_counts_to_next_boundary(clock):
    guard = FixedWindowRateGuard(limit=1, window_seconds=60, clock=clock)
    assert guard.retry_after() == 20
    clock.now = 1019.5
    assert guard.retry_after() == 1


def test_concurrent_requests_never_exceed_limit(clock):
    guard = FixedWindowRateGuard(limit=50, window_seconds=3600, clock=clock)
    admitted = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            ok = guard.try_acquire()
            with lock:
                admitted.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert admitted.count(True) == 50
    assert admitted.count(False) == 150
