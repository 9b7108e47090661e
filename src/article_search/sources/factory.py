"""Search source factory."""

from __future__ import annotations

import httpx

from article_search.config import AppConfig, SourceConfig
from article_search.sources.base import SearchSource
from article_search.sources.http import DEFAULT_USER_AGENT
from article_search.sources.rate_limiter import TokenBucket


def create_source(
    config: SourceConfig,
    user_agent: str = DEFAULT_USER_AGENT,
    client: httpx.AsyncClient | None = None,
) -> SearchSource:
    """Create a search source adapter from configuration."""
    rate_limiter = None
    if config.rate_limit is not None:
        rate_limiter = TokenBucket(config.rate_limit, config.rate_window_s)

    common = dict(
        base_url=config.base_url,
        timeout_s=config.timeout_s,
        max_attempts=config.max_attempts,
        base_delay_s=config.base_delay_s,
        user_agent=user_agent,
        rate_limiter=rate_limiter,
        client=client,
    )
    match config.name:
        case "arxiv":
            from article_search.sources.arxiv import ArxivSource

            return ArxivSource(**common)
        case "semantic-scholar":
            from article_search.sources.semantic_scholar import SemanticScholarSource

            return SemanticScholarSource(api_key=config.api_key, **common)
        case _:
            raise ValueError(f"Unknown search source: {config.name}")


def create_sources(
    config: AppConfig,
    client: httpx.AsyncClient | None = None,
) -> list[SearchSource]:
    """Create every enabled source, in configuration order."""
    return [
        create_source(source_config, user_agent=config.user_agent, client=client)
        for source_config in config.sources.values()
        if source_config.enabled
    ]
