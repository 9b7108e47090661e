"""Multi-source searcher skill: one query -> merged NormalizedResult list."""

from __future__ import annotations

import asyncio
import logging
import math
import time

from article_search.models import (
    MAX_LIMIT,
    ArxivSortBy,
    DateRange,
    NormalizedResult,
    Provider,
    ProviderError,
    SearchQuery,
    SortMode,
    SortOrder,
    UnifiedSearchResult,
)
from article_search.skills.result_organizer import ResultOrganizer
from article_search.sources.base import SearchSource

logger = logging.getLogger(__name__)


class UnifiedSearcher:
    """Fan one query out to several sources and merge what comes back.

    A failing source is reported in ``UnifiedSearchResult.errors`` and does
    not affect the others.
    """

    def __init__(
        self,
        sources: list[SearchSource],
        organizer: ResultOrganizer | None = None,
    ) -> None:
        self._sources = {s.provider: s for s in sources}
        self._organizer = organizer or ResultOrganizer()

    def _select(self, providers: list[Provider | str] | None) -> list[SearchSource]:
        if providers is None:
            return list(self._sources.values())

        selected: list[SearchSource] = []
        for name in providers:
            try:
                provider = Provider(name)
            except ValueError:
                logger.warning("Unknown provider '%s' ignored", name)
                continue
            source = self._sources.get(provider)
            if source is None:
                logger.warning("Provider '%s' is not configured", provider.value)
            elif source not in selected:
                selected.append(source)
        return selected

    async def search(
        self,
        query: str,
        providers: list[Provider | str] | None = None,
        limit: int = 10,
        date_range: DateRange | None = None,
        sort: SortMode = SortMode.RELEVANCE,
    ) -> UnifiedSearchResult:
        selected = self._select(providers)
        if not selected:
            return UnifiedSearchResult(query=query, date_range=date_range, sort=sort)

        per_source = min(MAX_LIMIT, math.ceil(limit / len(selected)))
        source_query = SearchQuery(
            query=query,
            limit=per_source,
            sort_by=ArxivSortBy.SUBMITTED_DATE if sort == SortMode.DATE else ArxivSortBy.RELEVANCE,
            sort_order=SortOrder.DESCENDING,
        )

        t0 = time.perf_counter()
        pages = await asyncio.gather(
            *(src.search(source_query) for src in selected),
            return_exceptions=True,
        )

        merged: list[NormalizedResult] = []
        errors: list[ProviderError] = []
        for src, page in zip(selected, pages):
            if isinstance(page, Exception):
                logger.warning("Source '%s' failed: %s", src.source_name, page)
                errors.append(ProviderError(provider=src.source_name, error=str(page)))
                continue
            if isinstance(page, BaseException):
                raise page
            merged.extend(
                self._organizer.filter_by_date(
                    page.entries, date_range, keep_undated=src.always_dated
                )
            )

        results, total = self._organizer.organize(merged, sort, limit)
        logger.info(
            "Unified search over %d sources completed in %.1fs (%d results, %d errors)",
            len(selected),
            time.perf_counter() - t0,
            len(results),
            len(errors),
        )
        return UnifiedSearchResult(
            query=query,
            results=results,
            total=total,
            providers=[src.provider for src in selected],
            errors=errors,
            date_range=date_range,
            sort=sort,
        )
