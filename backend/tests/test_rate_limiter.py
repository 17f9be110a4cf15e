from app.rate_limit import SlidingWindowRateLimiter

from fakes import FakeClock


def test_admits_up_to_limit_then_refuses() -> None:
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=FakeClock())

    admitted = [limiter.try_acquire() for _ in range(7)]

    assert admitted == [True] * 5 + [False] * 2
    assert limiter.remaining() == 0


def test_refused_calls_are_not_recorded() -> None:
    clock = FakeClock()
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)
    for _ in range(5):
        assert limiter.try_acquire()

    clock.advance(30)
    for _ in range(10):
        assert limiter.try_acquire() is False

    # Only the first five calls occupy the window.
    clock.advance(30.5)
    assert limiter.remaining() == 5


def test_window_slides_per_timestamp() -> None:
    clock = FakeClock(start=0.0)
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)
    for _ in range(5):
        assert limiter.try_acquire()
        clock.advance(10)

    # t=50: calls at 0, 10, 20, 30, 40
    assert limiter.remaining() == 0
    clock.advance(10)
    # t=60: the call at t=0 sits exactly on the floor and still counts
    assert limiter.try_acquire() is False
    clock.advance(0.5)
    assert limiter.remaining() == 1
    assert limiter.try_acquire() is True
    assert limiter.try_acquire() is False


def test_never_exceeds_budget_in_any_rolling_window() -> None:
    clock = FakeClock(start=0.0)
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)
    admitted_at: list[float] = []

    for step in range(600):
        for _ in range(step % 3):
            if limiter.try_acquire():
                admitted_at.append(clock())
        clock.advance(0.7)

    assert admitted_at
    for start in admitted_at:
        in_window = [ts for ts in admitted_at if start <= ts <= start + 60]
        assert len(in_window) <= 5


def test_remaining_does_not_drop_recorded_calls() -> None:
    clock = FakeClock(start=0.0)
    limiter = SlidingWindowRateLimiter(limit=5, window_seconds=60, clock=clock)
    for _ in range(3):
        assert limiter.try_acquire()

    clock.advance(61)
    assert limiter.remaining() == 5
    assert len(limiter._calls) == 3

    # Admission still prunes expired timestamps.
    assert limiter.try_acquire()
    assert len(limiter._calls) == 1
    assert limiter.remaining() == 4
