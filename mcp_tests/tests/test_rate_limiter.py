import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from core.errors import RateLimitExceeded
from core.rate_limiter import SlidingWindowRateLimiter, parse_retry_after


def test_nth_call_succeeds_iff_within_quota(clock):
    rl = SlidingWindowRateLimiter(max_calls=3, window_seconds=60)

    for _ in range(3):
        rl.check_limit()

    with pytest.raises(RateLimitExceeded) as exc:
        rl.check_limit()
    assert exc.value.wait_seconds >= 1


def test_remaining_requests_counts_down(clock):
    rl = SlidingWindowRateLimiter(max_calls=4, window_seconds=60)
    assert rl.get_remaining_requests() == 4

    rl.check_limit()
    rl.check_limit()
    assert rl.get_remaining_requests() == 2
    assert rl.get_remaining_requests() == 2


def test_rejected_call_does_not_consume_a_slot(clock):
    rl = SlidingWindowRateLimiter(max_calls=1, window_seconds=60)
    rl.check_limit()

    with pytest.raises(RateLimitExceeded):
        rl.check_limit()

    clock.advance(61)
    assert rl.get_remaining_requests() == 1


def test_window_slides_and_readmits(clock):
    rl = SlidingWindowRateLimiter(max_calls=5, window_seconds=60)
    start = clock.now

    for _ in range(5):
        rl.check_limit()

    with pytest.raises(RateLimitExceeded) as exc:
        rl.check_limit()
    assert 1 <= exc.value.wait_seconds <= 60

    clock.now = start + 60.5
    rl.check_limit()


def test_wait_seconds_rounds_up_to_oldest_expiry(clock):
    rl = SlidingWindowRateLimiter(max_calls=2, window_seconds=60)
    rl.check_limit()
    clock.advance(10)
    rl.check_limit()

    clock.advance(20.5)
    with pytest.raises(RateLimitExceeded) as exc:
        rl.check_limit()

    # oldest call at t0, now t0+30.5 -> 29.5s left
    assert exc.value.wait_seconds == 30
    assert exc.value.retry_after == 30


def test_boundary_timestamp_is_still_counted(clock):
    rl = SlidingWindowRateLimiter(max_calls=1, window_seconds=60)
    rl.check_limit()

    clock.advance(60)
    with pytest.raises(RateLimitExceeded) as exc:
        rl.check_limit()
    assert exc.value.wait_seconds == 1

    clock.advance(0.001)
    rl.check_limit()


def test_reset_time_is_now_when_idle(clock):
    rl = SlidingWindowRateLimiter(max_calls=2, window_seconds=60)

    before = datetime.now(timezone.utc)
    reset = rl.get_reset_time()
    after = datetime.now(timezone.utc)

    assert before <= reset <= after
    assert rl.seconds_until_reset() == 0.0


def test_reset_time_tracks_oldest_call(clock):
    rl = SlidingWindowRateLimiter(max_calls=2, window_seconds=60)
    rl.check_limit()
    clock.advance(10)
    rl.check_limit()

    assert rl.seconds_until_reset() == pytest.approx(50.0)

    delta = (rl.get_reset_time() - datetime.now(timezone.utc)).total_seconds()
    assert 49.0 < delta <= 50.0


@pytest.mark.parametrize("kwargs", [{"max_calls": 0}, {"max_calls": -1}, {"window_seconds": 0}])
def test_invalid_construction_raises(kwargs):
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(**kwargs)


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"Retry-After": "10"}, 10),
        ({"Retry-After": " 3 "}, 3),
        ({"Retry-After": "soon"}, None),
        ({"Retry-After": ""}, None),
        ({}, None),
    ],
)
def test_parse_retry_after(headers, expected):
    assert parse_retry_after(headers) == expected


def test_threads_never_over_admit():
    rl = SlidingWindowRateLimiter(max_calls=50, window_seconds=60)
    workers, attempts = 16, 20
    barrier = threading.Barrier(workers)

    def hammer(_):
        barrier.wait()
        admitted = 0
        for _ in range(attempts):
            try:
                rl.check_limit()
                admitted += 1
            except RateLimitExceeded:
                pass
        return admitted

    with ThreadPoolExecutor(max_workers=workers) as pool:
        total = sum(pool.map(hammer, range(workers)))

    assert total == 50
    assert rl.get_remaining_requests() == 0
