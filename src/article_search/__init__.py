"""article-search: resilient arXiv and Semantic Scholar search clients."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import httpx

from article_search.export import export_bibtex, export_json, export_markdown
from article_search.models import (
    DateRange,
    ImportCandidate,
    NormalizedResult,
    Provider,
    SearchPage,
    SearchQuery,
    SortMode,
    UnifiedSearchResult,
)

if TYPE_CHECKING:
    from article_search.config import AppConfig


async def search(
    query: str,
    config: AppConfig | None = None,
    providers: list[Provider | str] | None = None,
    limit: int | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    sort: SortMode | str = SortMode.RELEVANCE,
) -> UnifiedSearchResult:
    """One-line convenience: unified search across the configured providers.

    Args:
        query: Search text, passed to every provider.
        config: Optional AppConfig. If None, loads from environment.
        providers: Providers to query ("arxiv", "semantic-scholar"). None = all enabled.
        limit: Maximum results to return. Defaults to config.default_max_results.
        date_from: Inclusive lower publication date bound.
        date_to: Inclusive upper publication date bound.
        sort: "relevance", "date" or "citations".
    """
    from article_search.config import load_config
    from article_search.skills.searcher import UnifiedSearcher
    from article_search.sources.factory import create_sources

    cfg = config or load_config()
    date_range = None
    if date_from is not None or date_to is not None:
        date_range = DateRange(date_from=date_from, date_to=date_to)
    # one client for every source, closed even if building a source fails
    async with httpx.AsyncClient(follow_redirects=True) as client:
        sources = create_sources(cfg, client=client)
        return await UnifiedSearcher(sources).search(
            query,
            providers=providers,
            limit=limit or cfg.default_max_results,
            date_range=date_range,
            sort=SortMode(sort),
        )


__all__ = [
    "DateRange",
    "ImportCandidate",
    "NormalizedResult",
    "Provider",
    "SearchPage",
    "SearchQuery",
    "SortMode",
    "UnifiedSearchResult",
    "search",
    "export_json",
    "export_bibtex",
    "export_markdown",
]
