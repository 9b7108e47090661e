"""Shared HTTP transport for search sources."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from article_search.sources.base import SearchSource
from article_search.sources.exceptions import (
    NetworkError,
    RateLimitExceeded,
    RequestTimeout,
    UpstreamClientError,
    UpstreamServerError,
)
from article_search.sources.rate_limiter import TokenBucket
from article_search.sources.retry import DEFAULT_RETRY_ON, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Research-Assistant/1.0"
DEFAULT_TIMEOUT_S = 30.0


class HTTPSource(SearchSource):
    """SearchSource that talks to a provider over HTTP GET.

    Every request goes through the rate limiter (if any) once, then through
    the retry policy. Transport failures and non-2xx answers are raised as
    provider-labelled SearchSourceError subclasses.
    """

    label: str = "Upstream"
    retry_on: tuple[type[BaseException], ...] = DEFAULT_RETRY_ON

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        max_attempts: int = 3,
        base_delay_s: float = 1.0,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limiter: TokenBucket | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.retry_policy = RetryPolicy(
            max_attempts=max_attempts,
            base_delay_s=base_delay_s,
            retry_on=self.retry_on,
        )
        self.rate_limiter = rate_limiter
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent}

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()
        return await call_with_retry(lambda: self._send(url, params), self.retry_policy)

    async def _send(self, url: str, params: dict[str, Any] | None) -> httpx.Response:
        try:
            response = await self._client.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self.timeout_s,
                follow_redirects=True,
            )
        except httpx.TimeoutException as exc:
            raise RequestTimeout(
                f"{self.label} API request timeout", provider=self.label
            ) from exc
        except httpx.RequestError as exc:
            raise NetworkError(
                f"{self.label} API network error: {exc}", provider=self.label
            ) from exc

        self._raise_for_status(response)
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        status_code = response.status_code
        if 200 <= status_code < 300:
            return

        message = f"{self.label} API error: {status_code} - {response.reason_phrase}"
        if status_code == 429:
            raise RateLimitExceeded(
                f"{self.label} API rate limit exceeded. Please try again later.",
                provider=self.label,
                status_code=status_code,
            )
        if status_code >= 500:
            raise UpstreamServerError(message, provider=self.label, status_code=status_code)
        raise UpstreamClientError(message, provider=self.label, status_code=status_code)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
