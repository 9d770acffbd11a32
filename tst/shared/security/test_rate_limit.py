import pytest

from src.shared.security.rate_limit import FixedWindowRateLimiter, RateLimiters


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_max_then_denies():
    limiter = FixedWindowRateLimiter(5, 900, clock=FakeClock())

    assert [limiter.allow("1.2.3.4") for _ in range(6)] == [True] * 5 + [False]


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)

    assert limiter.allow("ip")
    assert not limiter.allow("ip")

    clock.now += 60
    # Still inside the window: reset happens strictly after reset_at
    assert not limiter.allow("ip")

    clock.now += 0.001
    assert limiter.allow("ip")


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())

    assert limiter.allow("a")
    assert limiter.allow("b")
    assert not limiter.allow("a")


def test_denied_requests_do_not_extend_window():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)
    limiter.allow("ip")

    clock.now += 59
    assert not limiter.allow("ip")
    clock.now += 2
    assert limiter.allow("ip")


def test_retry_after_rounds_up():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)

    assert limiter.retry_after("ip") == 0
    limiter.allow("ip")
    clock.now += 10.5
    assert limiter.retry_after("ip") == 50
    clock.now += 49.0
    assert limiter.retry_after("ip") == 1


def test_reset():
    limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())
    limiter.allow("a")
    limiter.allow("b")

    limiter.reset("a")
    assert limiter.allow("a")
    assert not limiter.allow("b")

    limiter.reset()
    assert limiter.allow("b")


def test_rejects_non_positive_max():
    with pytest.raises(ValueError):
        FixedWindowRateLimiter(0, 60)


def test_from_config_defaults():
    limiters = RateLimiters.from_config()

    assert (limiters.waitlist.max_requests, limiters.waitlist.window_seconds) == (1, 60)
    assert (limiters.admin_login.max_requests, limiters.admin_login.window_seconds) == (5, 900)
    assert (limiters.admin_data.max_requests, limiters.admin_data.window_seconds) == (30, 60)


def test_each_instance_has_its_own_counters():
    first, second = RateLimiters.from_config(), RateLimiters.from_config()
    first.waitlist.allow("ip")

    assert second.waitlist.allow("ip")


def test_expired_records_are_pruned():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)
    for i in range(10000):
        limiter.allow(f"10.0.{i // 256}.{i % 256}")
    assert len(limiter) == 10000

    clock.now += 61
    assert limiter.allow("fresh")

    assert len(limiter) == 1


def test_pruning_keeps_open_windows():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 60, clock=clock)
    limiter.allow("old")
    clock.now += 30
    limiter.allow("recent")

    clock.now += 31
    limiter.allow("fresh")

    assert len(limiter) == 2
    assert not limiter.allow("recent")
