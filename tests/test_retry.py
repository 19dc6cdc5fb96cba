"""Tests for the lookup retry policy."""

import asyncio
import random

import pytest

from recipe_nutrition.domain.errors import (
    FoodNotFoundError,
    LookupCancelledError,
    RateLimitedError,
    TransientLookupError,
)
from recipe_nutrition.services.retry import RetryPolicy, call_with_retry


class _Flaky:
    def __init__(self, failures: list[Exception]) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return "ok"


def _recording_sleep(delays: list[float]):  # type: ignore[no-untyped-def]
    async def sleep(delay: float) -> None:
        delays.append(delay)

    return sleep


def test_backoff_grows_and_is_capped() -> None:
    policy = RetryPolicy(initial_delay=1.0, max_delay=10.0, jitter=0.0)

    assert [policy.backoff(attempt) for attempt in range(5)] == [1.0, 2.0, 4.0, 8.0, 10.0]


def test_backoff_jitter_is_bounded() -> None:
    policy = RetryPolicy(initial_delay=1.0, max_delay=100.0, rng=random.Random(7))

    for attempt in range(4):
        base = 2**attempt
        assert base <= policy.backoff(attempt) <= base * 1.3


def test_retryable_errors() -> None:
    policy = RetryPolicy()

    assert policy.is_retryable(RateLimitedError("slow down"))
    assert policy.is_retryable(TransientLookupError("503", status_code=503))
    assert not policy.is_retryable(FoodNotFoundError("unobtainium"))
    assert not policy.is_retryable(ValueError("bad"))


def test_retries_transient_failures_then_succeeds() -> None:
    func = _Flaky([TransientLookupError("timeout"), RateLimitedError("429")])
    delays: list[float] = []
    policy = RetryPolicy(initial_delay=0.5, jitter=0.0)

    result = asyncio.run(call_with_retry(func, policy, sleep=_recording_sleep(delays)))

    assert result == "ok"
    assert func.calls == 3
    assert delays == [0.5, 1.0]


def test_gives_up_after_max_retries() -> None:
    func = _Flaky([TransientLookupError("down")] * 5)
    policy = RetryPolicy(max_retries=2, jitter=0.0)

    with pytest.raises(TransientLookupError):
        asyncio.run(call_with_retry(func, policy, sleep=_recording_sleep([])))

    assert func.calls == 3


def test_not_found_is_not_retried() -> None:
    func = _Flaky([FoodNotFoundError("unobtainium")])

    with pytest.raises(FoodNotFoundError):
        asyncio.run(call_with_retry(func, RetryPolicy(), sleep=_recording_sleep([])))

    assert func.calls == 1


def test_retry_after_is_honoured() -> None:
    func = _Flaky([RateLimitedError("429", retry_after=3.0)])
    delays: list[float] = []

    asyncio.run(call_with_retry(func, RetryPolicy(), sleep=_recording_sleep(delays)))

    assert delays == [3.0]


def test_cancel_stops_further_attempts() -> None:
    event = asyncio.Event()
    func = _Flaky([TransientLookupError("down")] * 3)

    async def cancel_during_sleep(delay: float) -> None:
        event.set()

    with pytest.raises(LookupCancelledError):
        asyncio.run(
            call_with_retry(
                func, RetryPolicy(), cancel_event=event, sleep=cancel_during_sleep
            )
        )

    assert func.calls == 1
