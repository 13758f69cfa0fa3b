"""
Unit tests for the fixed-window RateLimiter
"""

from datetime import timedelta

from src.app.services.rate_limiter import RateLimiter


def test_allows_up_to_limit_within_window(clock):
    limiter = RateLimiter(clock)

    results = [limiter.check("mfa:user-1", 5, 900) for _ in range(6)]

    assert [r.allowed for r in results] == [True] * 5 + [False]
    assert results[0].remaining == 4
    assert results[-1].remaining == 0
    assert results[-1].total_hits == 6


def test_reset_time_is_end_of_window(clock):
    limiter = RateLimiter(clock)
    clock.advance(seconds=100)

    status = limiter.check("login:1.2.3.4", 5, 900)

    # DEFAULT_NOW sits on a window boundary
    assert status.reset_time == clock.now() - timedelta(seconds=100) + timedelta(seconds=900)


def test_new_window_starts_fresh(clock):
    limiter = RateLimiter(clock)
    for _ in range(6):
        limiter.check("mfa:user-1", 5, 900)

    clock.advance(seconds=900)

    assert limiter.check("mfa:user-1", 5, 900).allowed is True


def test_keys_are_independent(clock):
    limiter = RateLimiter(clock)
    for _ in range(6):
        limiter.check("mfa:user-1", 5, 900)

    assert limiter.check("mfa:user-2", 5, 900).allowed is True


def test_reset_clears_key(clock):
    limiter = RateLimiter(clock)
    for _ in range(6):
        limiter.check("mfa:user-1", 5, 900)

    limiter.reset("mfa:user-1")

    assert limiter.check("mfa:user-1", 5, 900).total_hits == 1
