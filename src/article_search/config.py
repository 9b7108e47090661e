"""Configuration loading for article-search."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from article_search.sources.arxiv import ARXIV_API_URL
from article_search.sources.http import DEFAULT_USER_AGENT
from article_search.sources.semantic_scholar import (
    DEFAULT_RATE_LIMIT,
    DEFAULT_RATE_WINDOW_S,
    SEMANTIC_SCHOLAR_API_URL,
)


class SourceConfig(BaseModel):
    name: str
    base_url: str
    api_key: str = ""
    enabled: bool = True
    timeout_s: float = 30.0
    max_attempts: int = 3
    base_delay_s: float = 1.0
    # None keeps the provider default; the Semantic Scholar bucket cannot be disabled
    rate_limit: int | None = Field(default=None, gt=0)
    rate_window_s: float = DEFAULT_RATE_WINDOW_S


class AppConfig(BaseModel):
    sources: dict[str, SourceConfig] = {}
    user_agent: str = DEFAULT_USER_AGENT
    default_max_results: int = 10
    log_level: str = "WARNING"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config(env_path: str | Path | None = None) -> AppConfig:
    """Load configuration from environment variables (.env file)."""
    if env_path:
        load_dotenv(env_path)
    else:
        load_dotenv()

    timeout_s = float(os.getenv("HTTP_TIMEOUT_S", "30"))
    max_attempts = int(os.getenv("HTTP_MAX_ATTEMPTS", "3"))
    base_delay_s = float(os.getenv("HTTP_RETRY_BASE_DELAY_S", "1.0"))

    sources = {
        "arxiv": SourceConfig(
            name="arxiv",
            base_url=os.getenv("ARXIV_API_URL", ARXIV_API_URL),
            enabled=_env_bool("ARXIV_ENABLED", True),
            timeout_s=timeout_s,
            max_attempts=max_attempts,
            base_delay_s=base_delay_s,
        ),
        "semantic-scholar": SourceConfig(
            name="semantic-scholar",
            base_url=os.getenv("SEMANTIC_SCHOLAR_API_URL", SEMANTIC_SCHOLAR_API_URL),
            api_key=os.getenv("SEMANTIC_SCHOLAR_API_KEY", ""),
            enabled=_env_bool("SEMANTIC_SCHOLAR_ENABLED", True),
            timeout_s=timeout_s,
            max_attempts=max_attempts,
            base_delay_s=base_delay_s,
            rate_limit=int(
                os.getenv("SEMANTIC_SCHOLAR_RATE_LIMIT", str(DEFAULT_RATE_LIMIT))
            ),
            rate_window_s=float(
                os.getenv("SEMANTIC_SCHOLAR_RATE_WINDOW_S", str(DEFAULT_RATE_WINDOW_S))
            ),
        ),
    }

    return AppConfig(
        sources=sources,
        user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
        default_max_results=int(os.getenv("DEFAULT_MAX_RESULTS", "10")),
        log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
    )
