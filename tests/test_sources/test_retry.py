"""Tests for the retry / backoff executor."""

from __future__ import annotations

import time
from unittest.mock import AsyncMock, patch

import pytest

from article_search.sources.exceptions import (
    NetworkError,
    RateLimitExceeded,
    RequestTimeout,
    UpstreamClientError,
    UpstreamServerError,
)
from article_search.sources.retry import RetryAttempt, RetryPolicy, call_with_retry

SLEEP = "article_search.sources.retry.asyncio.sleep"


class TestRetryPolicy:
    def test_delays_double_from_base(self):
        policy = RetryPolicy(max_attempts=5, base_delay_s=1.0)
        assert [policy.delay_for(n) for n in range(2, 6)] == [1.0, 2.0, 4.0, 8.0]

    def test_first_attempt_has_no_delay(self):
        assert RetryPolicy(base_delay_s=3.0).delay_for(1) == 0.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_default_retry_on_excludes_rate_limit(self):
        policy = RetryPolicy()
        assert policy.is_retryable(UpstreamServerError("boom"))
        assert policy.is_retryable(RequestTimeout("slow"))
        assert policy.is_retryable(NetworkError("down"))
        assert not policy.is_retryable(RateLimitExceeded("429"))
        assert not policy.is_retryable(UpstreamClientError("400"))


class TestRetryAttempt:
    def test_advance_and_exhausted(self):
        attempt = RetryAttempt(policy=RetryPolicy(max_attempts=2, base_delay_s=0.5))
        assert attempt.attempt_number == 1
        assert not attempt.exhausted
        assert attempt.advance() == 0.5
        assert attempt.attempt_number == 2
        assert attempt.exhausted


class TestCallWithRetry:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_attempts", [1, 2, 3, 5])
    async def test_always_failing_makes_exactly_n_attempts(self, max_attempts):
        func = AsyncMock(side_effect=UpstreamServerError("503"))
        policy = RetryPolicy(max_attempts=max_attempts, base_delay_s=1.0)

        with patch(SLEEP, new=AsyncMock()) as sleep:
            with pytest.raises(UpstreamServerError):
                await call_with_retry(func, policy)

        assert func.await_count == max_attempts
        waits = [c.args[0] for c in sleep.await_args_list]
        assert waits == [1.0 * 2**i for i in range(max_attempts - 1)]
        assert sum(waits) == sum(2**i for i in range(max_attempts - 1))

    @pytest.mark.asyncio
    async def test_non_retryable_makes_one_attempt(self):
        func = AsyncMock(side_effect=UpstreamClientError("400", status_code=400))

        with patch(SLEEP, new=AsyncMock()) as sleep:
            with pytest.raises(UpstreamClientError):
                await call_with_retry(func, RetryPolicy(max_attempts=3))

        assert func.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        func = AsyncMock(side_effect=[NetworkError("reset"), RequestTimeout("slow"), "ok"])

        with patch(SLEEP, new=AsyncMock()) as sleep:
            result = await call_with_retry(func, RetryPolicy(max_attempts=3, base_delay_s=0.2))

        assert result == "ok"
        assert func.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.2, 0.4]

    @pytest.mark.asyncio
    async def test_last_error_is_reraised_unchanged(self):
        last = UpstreamServerError("third")
        func = AsyncMock(side_effect=[UpstreamServerError("first"), UpstreamServerError("second"), last])

        with patch(SLEEP, new=AsyncMock()):
            with pytest.raises(UpstreamServerError) as exc_info:
                await call_with_retry(func, RetryPolicy(max_attempts=3))

        assert exc_info.value is last

    @pytest.mark.asyncio
    async def test_custom_retry_on(self):
        func = AsyncMock(side_effect=[RateLimitExceeded("429"), "ok"])
        policy = RetryPolicy(max_attempts=2, retry_on=(RateLimitExceeded,))

        with patch(SLEEP, new=AsyncMock()):
            assert await call_with_retry(func, policy) == "ok"

    @pytest.mark.asyncio
    async def test_real_sleep_elapsed_time(self):
        func = AsyncMock(side_effect=UpstreamServerError("503"))
        policy = RetryPolicy(max_attempts=3, base_delay_s=0.05)

        start = time.monotonic()
        with pytest.raises(UpstreamServerError):
            await call_with_retry(func, policy)
        elapsed = time.monotonic() - start

        # 0.05 + 0.10
        assert elapsed >= 0.14
