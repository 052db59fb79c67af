"""Unit tests for the in-memory sliding-window rate limiter."""

import threading
from unittest.mock import Mock

import pytest

from fileshare.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter


def _limiter_at(now: float) -> tuple[InMemorySlidingWindowRateLimiter, Mock]:
    clock = Mock(return_value=now)
    return InMemorySlidingWindowRateLimiter(clock=clock), clock


def test_admits_up_to_limit_then_rejects_with_retry_after() -> None:
    limiter, clock = _limiter_at(0.0)

    for t in (0.0, 100.0, 200.0):
        clock.return_value = t
        assert limiter.check("1.2.3.4", "route", 3, 1000).allowed is True

    clock.return_value = 300.0
    blocked = limiter.check("1.2.3.4", "route", 3, 1000)

    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 1


def test_oldest_timestamp_ageing_out_frees_capacity() -> None:
    limiter, clock = _limiter_at(0.0)
    for t in (0.0, 100.0, 200.0):
        clock.return_value = t
        limiter.check("c", "route", 3, 1000)

    clock.return_value = 1001.0
    result = limiter.check("c", "route", 3, 1000)

    assert result.allowed is True
    assert result.remaining == 0


def test_window_slides_rather_than_resetting() -> None:
    limiter, clock = _limiter_at(900.0)
    assert limiter.check("c", "route", 2, 1000).allowed is True
    clock.return_value = 1000.0
    assert limiter.check("c", "route", 2, 1000).allowed is True

    # A fixed window aligned on 1000 ms would have reset here
    clock.return_value = 1100.0
    assert limiter.check("c", "route", 2, 1000).allowed is False

    clock.return_value = 1901.0
    assert limiter.check("c", "route", 2, 1000).allowed is True


def test_rejected_requests_do_not_consume_budget() -> None:
    limiter, clock = _limiter_at(0.0)
    assert limiter.check("c", "route", 1, 1000).allowed is True

    for t in (100.0, 500.0, 900.0):
        clock.return_value = t
        assert limiter.check("c", "route", 1, 1000).allowed is False

    clock.return_value = 1000.5
    assert limiter.check("c", "route", 1, 1000).allowed is True


def test_retry_after_rounds_up_to_whole_seconds() -> None:
    limiter, clock = _limiter_at(0.0)
    limiter.check("c", "route", 1, 60_000)

    clock.return_value = 30_500.0
    blocked = limiter.check("c", "route", 1, 60_000)

    assert blocked.retry_after_seconds == 30


def test_isolated_by_client() -> None:
    limiter, _ = _limiter_at(0.0)

    assert limiter.check("10.0.0.1", "route", 1, 1000).allowed is True
    assert limiter.check("10.0.0.1", "route", 1, 1000).allowed is False

    assert limiter.check("10.0.0.2", "route", 1, 1000).allowed is True


def test_isolated_by_route() -> None:
    limiter, _ = _limiter_at(0.0)

    assert limiter.check("c", "files-shared-get", 1, 1000).allowed is True
    assert limiter.check("c", "files-public-download", 1, 1000).allowed is True
    assert len(limiter) == 2


def test_policy_change_applies_to_next_decision() -> None:
    limiter, clock = _limiter_at(0.0)
    for t in (0.0, 100.0):
        clock.return_value = t
        assert limiter.check("c", "route", 5, 1000).allowed is True

    clock.return_value = 200.0
    assert limiter.check("c", "route", 2, 1000).allowed is False

    # Shorter window: both earlier timestamps are now stale
    clock.return_value = 350.0
    assert limiter.check("c", "route", 2, 100).allowed is True


def test_empty_client_key_shares_unknown_bucket() -> None:
    limiter, _ = _limiter_at(0.0)

    assert limiter.check("", "route", 1, 1000).allowed is True
    assert limiter.check("unknown", "route", 1, 1000).allowed is False


def test_reset_forgets_all_buckets() -> None:
    limiter, _ = _limiter_at(0.0)
    limiter.check("c", "route", 1, 1000)

    limiter.reset()

    assert len(limiter) == 0
    assert limiter.check("c", "route", 1, 1000).allowed is True


@pytest.mark.parametrize(
    "args",
    [
        ("c", "", 1, 1000),
        ("c", "route", 0, 1000),
        ("c", "route", 1, 0),
        ("c", "route", 1, -5),
    ],
)
def test_invalid_policy_is_a_programmer_error(args: tuple) -> None:
    limiter = InMemorySlidingWindowRateLimiter()

    with pytest.raises(ValueError):
        limiter.check(*args)


def test_concurrent_checks_never_over_admit() -> None:
    limiter = InMemorySlidingWindowRateLimiter(clock=Mock(return_value=0.0))
    admitted: list[bool] = []
    admitted_lock = threading.Lock()

    def _worker() -> None:
        result = limiter.check("c", "route", 10, 60_000)
        with admitted_lock:
            admitted.append(result.allowed)

    threads = [threading.Thread(target=_worker) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert admitted.count(True) == 10
    assert admitted.count(False) == 40
