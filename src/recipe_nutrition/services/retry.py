"""Retry policy for nutrient lookups."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from recipe_nutrition.domain.errors import (
    LookupCancelledError,
    RateLimitedError,
    TransientLookupError,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff with jitter.

    ``backoff(attempt)`` is ``initial_delay * 2**attempt`` plus up to
    ``jitter`` of that, capped at ``max_delay`` seconds.
    """

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    jitter: float = 0.3
    rng: random.Random = field(default_factory=random.Random, compare=False, repr=False)

    def backoff(self, attempt: int) -> float:
        delay = self.initial_delay * (2**attempt)
        delay += self.rng.random() * self.jitter * delay
        return min(delay, self.max_delay)

    def is_retryable(self, exc: BaseException) -> bool:
        return isinstance(exc, RateLimitedError | TransientLookupError)

    def delay_for(self, exc: BaseException, attempt: int) -> float:
        """Delay before the next attempt, honouring a server Retry-After."""
        if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
            return min(max(exc.retry_after, 0.0), self.max_delay)
        return self.backoff(attempt)


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    action: str = "lookup",
    cancel_event: asyncio.Event | None = None,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Call func, retrying retryable failures according to policy.

    Setting ``cancel_event`` stops further attempts: the wrapper raises
    :class:`LookupCancelledError` instead of retrying.
    """
    attempt = 0
    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise LookupCancelledError(f"{action} cancelled")
        try:
            return await func()
        except Exception as exc:
            if not policy.is_retryable(exc) or attempt >= policy.max_retries:
                raise
            delay = policy.delay_for(exc, attempt)
            attempt += 1
            _logger.warning(
                "Lookup %s failed (attempt %s/%s), retrying in %.2fs: %s",
                action,
                attempt,
                policy.max_retries + 1,
                delay,
                exc,
            )
            await sleep(delay)
