"""Retry helper: bounded attempts with a fixed or doubling delay."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from visualify.models.config import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass
class RetryOutcome(Generic[T]):
    """Either the operation's value or the error from its last attempt."""
    value: Optional[T] = None
    error: Optional[BaseException] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def retry_delays(policy: RetryConfig) -> list[float]:
    """Delays slept between consecutive attempts (one fewer than max_attempts)."""
    delays = []
    delay = policy.delay_seconds
    for _ in range(policy.max_attempts - 1):
        delays.append(delay)
        if policy.exponential_backoff:
            delay *= 2
    return delays


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    policy: RetryConfig,
    sleep: SleepFn = asyncio.sleep,
    on_failure: Callable[[int, BaseException, bool], None] | None = None,
) -> RetryOutcome[T]:
    """Run ``operation(attempt)`` until it succeeds or attempts run out.

    ``on_failure(attempt, error, will_retry)`` is called after each failed attempt.
    """
    delays = retry_delays(policy)
    last_error: BaseException | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            value = await operation(attempt)
            return RetryOutcome(value=value, attempts=attempt)
        except Exception as e:
            last_error = e
            will_retry = attempt < policy.max_attempts
            if on_failure:
                on_failure(attempt, e, will_retry)
            if will_retry:
                delay = delays[attempt - 1]
                logger.debug("Attempt %d/%d failed (%s), retrying in %.1fs",
                             attempt, policy.max_attempts, e, delay)
                await sleep(delay)

    return RetryOutcome(error=last_error, attempts=policy.max_attempts)
