"""Core data models for the article search module.

All Pydantic models are defined here as the single source of truth.
Every other module imports from this file.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Provider(str, Enum):
    ARXIV = "arxiv"
    SEMANTIC_SCHOLAR = "semantic-scholar"


class ArxivSortBy(str, Enum):
    RELEVANCE = "relevance"
    LAST_UPDATED_DATE = "lastUpdatedDate"
    SUBMITTED_DATE = "submittedDate"


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class SortMode(str, Enum):
    RELEVANCE = "relevance"
    DATE = "date"
    CITATIONS = "citations"


# ---------------------------------------------------------------------------
# Provider requests
# ---------------------------------------------------------------------------

MAX_LIMIT = 100


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    limit: int = Field(default=10, ge=1, le=MAX_LIMIT)
    offset: int = Field(default=0, ge=0)
    sort_by: ArxivSortBy = ArxivSortBy.RELEVANCE
    sort_order: SortOrder = SortOrder.DESCENDING
    year: str | None = None
    venue: str | None = None
    fields_of_study: list[str] = []

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query must not be empty")
        return value


# ---------------------------------------------------------------------------
# Normalized results
# ---------------------------------------------------------------------------

class NormalizedResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    external_id: str
    title: str
    authors: list[str] = []
    abstract: str = ""
    publication_date: str | None = None
    pdf_url: str | None = None
    source: Provider
    provider_fields: dict[str, Any] = {}

    @property
    def citation_count(self) -> int | None:
        return self.provider_fields.get("citationCount")

    @property
    def doi(self) -> str | None:
        return self.provider_fields.get("doi")


class Pagination(BaseModel):
    total: int = 0
    offset: int = 0
    limit: int = 0
    next_offset: int | None = None


class SearchPage(BaseModel):
    entries: list[NormalizedResult] = []
    total_results: int = 0
    pagination: Pagination = Field(default_factory=Pagination)


# ---------------------------------------------------------------------------
# Unified search
# ---------------------------------------------------------------------------

class DateRange(BaseModel):
    date_from: date | None = None
    date_to: date | None = None

    @property
    def is_empty(self) -> bool:
        return self.date_from is None and self.date_to is None


class ProviderError(BaseModel):
    provider: str
    error: str


class UnifiedSearchResult(BaseModel):
    query: str
    results: list[NormalizedResult] = []
    total: int = 0
    providers: list[Provider] = []
    errors: list[ProviderError] = []
    date_range: DateRange | None = None
    sort: SortMode = SortMode.RELEVANCE
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


# ---------------------------------------------------------------------------
# Import payload
# ---------------------------------------------------------------------------

class ImportCandidate(BaseModel):
    """Fields the article store needs to import an external search hit."""

    source: Provider
    source_id: str
    title: str = Field(min_length=1)
    authors: list[str] = []
    abstract: str = ""
    pdf_url: str | None = None
    publication_date: str | None = None
    keywords: list[str] = []
    doi: str | None = None

    @classmethod
    def from_result(cls, result: NormalizedResult) -> ImportCandidate:
        fields = result.provider_fields
        if result.source is Provider.ARXIV:
            keywords = list(fields.get("categories") or [])
        else:
            keywords = list(fields.get("fieldsOfStudy") or [])
        return cls(
            source=result.source,
            source_id=result.external_id,
            title=result.title,
            authors=list(result.authors),
            abstract=result.abstract,
            pdf_url=result.pdf_url,
            publication_date=result.publication_date,
            keywords=keywords,
            doi=result.doi,
        )
