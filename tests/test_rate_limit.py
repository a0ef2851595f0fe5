"""Tests for the token bucket limiter."""

import threading

from link2json.services.rate_limit import TokenBucket


def test_burst_then_deny(limiter: TokenBucket) -> None:
    assert [limiter.allow() for _ in range(5)] == [True, True, True, False, False]


def test_refills_one_token_per_second(limiter: TokenBucket, clock) -> None:
    for _ in range(3):
        limiter.allow()
    assert not limiter.allow()

    clock.advance(1.0)
    assert limiter.allow()
    assert not limiter.allow()


def test_partial_refill_not_enough(limiter: TokenBucket, clock) -> None:
    for _ in range(3):
        limiter.allow()
    clock.advance(0.5)
    assert not limiter.allow()
    clock.advance(0.5)
    assert limiter.allow()


def test_refill_capped_at_burst(limiter: TokenBucket, clock) -> None:
    clock.advance(60)
    admitted = sum(limiter.allow() for _ in range(10))
    assert admitted == 3


def test_concurrent_callers_never_exceed_burst(clock) -> None:
    bucket = TokenBucket(rate=1.0, burst=3, clock=clock)
    results: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        allowed = bucket.allow()
        with lock:
            results.append(allowed)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 3
