"""Semantic Scholar Graph API search source adapter."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from article_search.models import (
    MAX_LIMIT,
    NormalizedResult,
    Pagination,
    Provider,
    SearchPage,
    SearchQuery,
)
from article_search.sources.exceptions import (
    RateLimitExceeded,
    ResponseParseError,
    UpstreamClientError,
)
from article_search.sources.http import HTTPSource
from article_search.sources.rate_limiter import TokenBucket
from article_search.sources.retry import DEFAULT_RETRY_ON

logger = logging.getLogger(__name__)

SEMANTIC_SCHOLAR_API_URL = "https://api.semanticscholar.org/graph/v1"

# 100 requests per 5 minutes
DEFAULT_RATE_LIMIT = 100
DEFAULT_RATE_WINDOW_S = 300.0

DEFAULT_FIELDS = (
    "paperId",
    "title",
    "authors",
    "abstract",
    "year",
    "venue",
    "citationCount",
    "referenceCount",
    "influentialCitationCount",
    "isOpenAccess",
    "openAccessPdf",
    "fieldsOfStudy",
    "publicationDate",
    "externalIds",
    "url",
)

_EXTRA_FIELDS = (
    "citationCount",
    "referenceCount",
    "influentialCitationCount",
    "venue",
    "year",
    "fieldsOfStudy",
    "isOpenAccess",
    "externalIds",
    "url",
)


class SemanticScholarSource(HTTPSource):
    """Semantic Scholar adapter with a shared token bucket.

    Retries 429 answers in addition to timeouts, network failures and 5xx.
    """

    label = "Semantic Scholar"
    retry_on = DEFAULT_RETRY_ON + (RateLimitExceeded,)

    def __init__(
        self,
        base_url: str = SEMANTIC_SCHOLAR_API_URL,
        api_key: str = "",
        rate_limiter: TokenBucket | None = None,
        **kwargs: Any,
    ) -> None:
        if rate_limiter is None:
            rate_limiter = TokenBucket(DEFAULT_RATE_LIMIT, DEFAULT_RATE_WINDOW_S)
        super().__init__(base_url, rate_limiter=rate_limiter, **kwargs)
        self.api_key = api_key

    @property
    def provider(self) -> Provider:
        return Provider.SEMANTIC_SCHOLAR

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    @staticmethod
    def build_params(
        query: SearchQuery,
        fields: tuple[str, ...] = DEFAULT_FIELDS,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "query": query.query,
            "limit": min(query.limit, MAX_LIMIT),
            "offset": query.offset,
            "fields": ",".join(fields),
        }
        if query.year:
            params["year"] = query.year
        if query.venue:
            params["venue"] = query.venue
        if query.fields_of_study:
            params["fieldsOfStudy"] = ",".join(query.fields_of_study)
        return params

    async def search(self, query: SearchQuery) -> SearchPage:
        response = await self._get(
            f"{self.base_url}/paper/search", params=self.build_params(query)
        )
        return self.parse_search(self._json(response))

    async def get_by_id(self, item_id: str) -> NormalizedResult | None:
        """Look up a paper by its Semantic Scholar paperId."""
        return await self._lookup(item_id)

    async def get_by_external_id(self, external_id: str) -> NormalizedResult | None:
        """Look up a paper by a prefixed external id (``DOI:...``, ``ARXIV:...``)."""
        return await self._lookup(external_id)

    async def _lookup(
        self,
        paper_id: str,
        fields: tuple[str, ...] = DEFAULT_FIELDS,
    ) -> NormalizedResult | None:
        try:
            response = await self._get(
                f"{self.base_url}/paper/{paper_id}",
                params={"fields": ",".join(fields)},
            )
        except UpstreamClientError as exc:
            if exc.status_code == 404:
                logger.debug("Semantic Scholar has no paper %s", paper_id)
                return None
            raise
        data = self._json(response)
        if not isinstance(data, dict):
            raise ResponseParseError(
                "Failed to parse Semantic Scholar response: expected a paper object",
                provider=self.label,
            )
        return self.parse_paper(data)

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError(
                f"Failed to parse Semantic Scholar response: {exc}",
                provider=self.label,
            ) from exc

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse_search(cls, data: Any) -> SearchPage:
        """Parse a ``/paper/search`` body. Raises ResponseParseError."""
        if not isinstance(data, dict) or not isinstance(data.get("data") or [], list):
            raise ResponseParseError(
                "Failed to parse Semantic Scholar response: missing 'data' list",
                provider=cls.label,
            )
        papers = [cls.parse_paper(raw) for raw in data.get("data") or []]
        total = data.get("total") or 0
        return SearchPage(
            entries=papers,
            total_results=total,
            pagination=Pagination(
                total=total,
                offset=data.get("offset") or 0,
                limit=len(papers),
                next_offset=data.get("next"),
            ),
        )

    @classmethod
    def parse_paper(cls, raw: Any) -> NormalizedResult:
        if not isinstance(raw, dict):
            raise ResponseParseError(
                "Failed to parse Semantic Scholar response: paper is not an object",
                provider=cls.label,
            )
        paper_id = raw.get("paperId")
        title = raw.get("title")
        if not isinstance(paper_id, str) or not isinstance(title, str):
            raise ResponseParseError(
                "Failed to parse Semantic Scholar response: paper without paperId or title",
                provider=cls.label,
            )

        raw_authors = raw.get("authors") or []
        citation_count = raw.get("citationCount")
        if not isinstance(raw_authors, list) or not (
            citation_count is None or type(citation_count) is int
        ):
            raise ResponseParseError(
                f"Failed to parse Semantic Scholar response: paper {paper_id} has malformed authors or citationCount",
                provider=cls.label,
            )
        authors = [
            author["name"]
            for author in raw_authors
            if isinstance(author, dict) and author.get("name")
        ]

        pdf_url = None
        open_access_pdf = raw.get("openAccessPdf")
        if isinstance(open_access_pdf, dict) and open_access_pdf.get("url"):
            pdf_url = open_access_pdf["url"]

        fields = {key: raw[key] for key in _EXTRA_FIELDS if raw.get(key) is not None}
        external_ids = raw.get("externalIds") or {}
        if isinstance(external_ids, dict) and external_ids.get("DOI"):
            fields["doi"] = external_ids["DOI"]

        try:
            return NormalizedResult(
                external_id=paper_id,
                title=title,
                authors=authors,
                abstract=raw.get("abstract") or "",
                publication_date=raw.get("publicationDate"),
                pdf_url=pdf_url,
                source=Provider.SEMANTIC_SCHOLAR,
                provider_fields=fields,
            )
        except ValidationError as exc:
            raise ResponseParseError(
                f"Failed to parse Semantic Scholar response: paper {paper_id}: {exc}",
                provider=cls.label,
            ) from exc
