"""Bounded retry with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from article_search.sources.exceptions import (
    NetworkError,
    RequestTimeout,
    UpstreamServerError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_ON: tuple[type[BaseException], ...] = (
    RequestTimeout,
    NetworkError,
    UpstreamServerError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try a call and how long to wait in between.

    ``max_attempts`` counts the first call. The wait before attempt ``n``
    (n >= 2) is ``base_delay_s * 2 ** (n - 2)``.
    """

    max_attempts: int = 3
    base_delay_s: float = 1.0
    retry_on: tuple[type[BaseException], ...] = DEFAULT_RETRY_ON

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must not be negative")

    def delay_for(self, attempt: int) -> float:
        if attempt < 2:
            return 0.0
        return self.base_delay_s * 2 ** (attempt - 2)

    def is_retryable(self, exc: BaseException) -> bool:
        return isinstance(exc, self.retry_on)


@dataclass
class RetryAttempt:
    """Attempt counter for a single logical request."""

    policy: RetryPolicy
    attempt_number: int = 1

    @property
    def exhausted(self) -> bool:
        return self.attempt_number >= self.policy.max_attempts

    def advance(self) -> float:
        """Move to the next attempt and return the delay to wait first."""
        self.attempt_number += 1
        return self.policy.delay_for(self.attempt_number)


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
) -> T:
    """Await ``func()`` until it succeeds, fails permanently or runs out of attempts.

    The last error is re-raised unchanged.
    """
    attempt = RetryAttempt(policy=policy)
    while True:
        try:
            return await func()
        except Exception as exc:
            if not policy.is_retryable(exc) or attempt.exhausted:
                raise
            delay = attempt.advance()
            logger.debug(
                "Attempt %d/%d failed (%s), retrying in %.2fs",
                attempt.attempt_number - 1,
                policy.max_attempts,
                exc,
                delay,
            )
            await asyncio.sleep(delay)
