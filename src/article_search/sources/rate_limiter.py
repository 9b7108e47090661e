"""Async token bucket rate limiter."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class TokenBucket:
    """Allow ``max_tokens`` requests per ``window_s`` seconds.

    Tokens refill continuously at ``max_tokens / window_s`` per second and
    never exceed ``max_tokens``. Callers are served one at a time in arrival
    order; a caller that has to wait holds the lock while it sleeps.
    """

    def __init__(
        self,
        max_tokens: int,
        window_s: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")
        if window_s <= 0:
            raise ValueError("window_s must be positive")
        self.max_tokens = max_tokens
        self.window_s = window_s
        self.refill_rate = max_tokens / window_s
        self._clock = clock
        self._tokens = float(max_tokens)
        self._last_refill = clock()
        self._lock = asyncio.Lock()

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last_refill)
        self._tokens = min(float(self.max_tokens), self._tokens + elapsed * self.refill_rate)
        self._last_refill = now

    async def acquire(self) -> float:
        """Take one token, sleeping until one is available. Returns seconds waited."""
        async with self._lock:
            self._refill()
            waited = 0.0
            if self._tokens < 1:
                waited = (1 - self._tokens) / self.refill_rate
                logger.debug("Rate limited, waiting %.2fs", waited)
                await asyncio.sleep(waited)
                self._refill()
            self._tokens = max(0.0, self._tokens - 1)
            return waited
