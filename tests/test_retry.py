"""Tests for the retry helper."""

from unittest.mock import AsyncMock

import pytest

from visualify.capture.retry import retry_async, retry_delays
from visualify.models.config import RetryConfig


class TestRetryDelays:

    def test_fixed_delay(self):
        policy = RetryConfig(max_attempts=5, delay_seconds=1.0)
        assert retry_delays(policy) == [1.0, 1.0, 1.0, 1.0]

    def test_exponential_backoff(self):
        policy = RetryConfig(max_attempts=4, delay_seconds=0.5, exponential_backoff=True)
        assert retry_delays(policy) == [0.5, 1.0, 2.0]

    def test_single_attempt_has_no_delay(self):
        assert retry_delays(RetryConfig(max_attempts=1)) == []


class TestRetryAsync:

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self):
        sleep = AsyncMock()
        operation = AsyncMock(return_value="ok")

        outcome = await retry_async(operation, RetryConfig(), sleep=sleep)

        assert outcome.ok
        assert outcome.value == "ok"
        assert outcome.attempts == 1
        operation.assert_awaited_once_with(1)
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self):
        sleep = AsyncMock()
        operation = AsyncMock(side_effect=[RuntimeError("a"), RuntimeError("b"), "done"])

        outcome = await retry_async(operation, RetryConfig(max_attempts=5), sleep=sleep)

        assert outcome.ok
        assert outcome.value == "done"
        assert outcome.attempts == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exhausted_returns_last_error(self):
        sleep = AsyncMock()
        errors = [RuntimeError(f"fail {i}") for i in range(3)]
        operation = AsyncMock(side_effect=errors)

        outcome = await retry_async(
            operation,
            RetryConfig(max_attempts=3, delay_seconds=2.0, exponential_backoff=True),
            sleep=sleep,
        )

        assert not outcome.ok
        assert outcome.error is errors[-1]
        assert outcome.attempts == 3
        assert [c.args[0] for c in sleep.await_args_list] == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_on_failure_reports_each_attempt(self):
        calls = []
        operation = AsyncMock(side_effect=[ValueError("x"), ValueError("y")])

        await retry_async(
            operation,
            RetryConfig(max_attempts=2),
            sleep=AsyncMock(),
            on_failure=lambda attempt, error, will_retry: calls.append((attempt, str(error), will_retry)),
        )

        assert calls == [(1, "x", True), (2, "y", False)]
