"""Tests for source construction from configuration."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest
from pydantic import ValidationError

from article_search.config import AppConfig, SourceConfig
from article_search.models import Provider
from article_search.sources.arxiv import ArxivSource
from article_search.sources.factory import create_source, create_sources
from article_search.sources.semantic_scholar import SemanticScholarSource


def _config(**overrides) -> AppConfig:
    sources = {
        "arxiv": SourceConfig(name="arxiv", base_url="http://arxiv.test/api/query"),
        "semantic-scholar": SourceConfig(
            name="semantic-scholar",
            base_url="https://s2.test/graph/v1/",
            api_key="k",
            rate_limit=10,
            rate_window_s=60.0,
        ),
    }
    sources.update(overrides)
    return AppConfig(sources=sources, user_agent="Tester/0.1")


class TestCreateSource:
    def test_arxiv(self):
        source = create_source(
            SourceConfig(name="arxiv", base_url="http://arxiv.test/api/query", timeout_s=5.0),
            client=AsyncMock(spec=httpx.AsyncClient),
        )
        assert isinstance(source, ArxivSource)
        assert source.provider is Provider.ARXIV
        assert source.timeout_s == 5.0
        assert source.rate_limiter is None

    def test_semantic_scholar(self):
        cfg = _config()
        source = create_source(
            cfg.sources["semantic-scholar"],
            user_agent=cfg.user_agent,
            client=AsyncMock(spec=httpx.AsyncClient),
        )
        assert isinstance(source, SemanticScholarSource)
        assert source.base_url == "https://s2.test/graph/v1"
        assert source.api_key == "k"
        assert source.user_agent == "Tester/0.1"
        assert source.rate_limiter.max_tokens == 10
        assert source.rate_limiter.window_s == 60.0

    def test_zero_rate_limit_rejected(self):
        with pytest.raises(ValidationError):
            SourceConfig(name="semantic-scholar", base_url="http://x", rate_limit=0)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown search source"):
            create_source(SourceConfig(name="pubmed", base_url="http://x"))


class TestCreateSources:
    def test_skips_disabled(self):
        cfg = _config(arxiv=SourceConfig(name="arxiv", base_url="http://x", enabled=False))
        sources = create_sources(cfg, client=AsyncMock(spec=httpx.AsyncClient))
        assert [s.provider for s in sources] == [Provider.SEMANTIC_SCHOLAR]

    def test_sources_share_injected_client(self):
        client = AsyncMock(spec=httpx.AsyncClient)
        sources = create_sources(_config(), client=client)
        assert len(sources) == 2
        assert all(s._client is client for s in sources)
