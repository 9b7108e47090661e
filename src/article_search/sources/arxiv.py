"""arXiv Atom feed search source adapter."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from typing import Any

from article_search.models import (
    NormalizedResult,
    Pagination,
    Provider,
    SearchPage,
    SearchQuery,
)
from article_search.sources.exceptions import ResponseParseError, UpstreamClientError
from article_search.sources.http import HTTPSource

logger = logging.getLogger(__name__)

ARXIV_API_URL = "http://export.arxiv.org/api/query"

_NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "opensearch": "http://a9.com/-/spec/opensearch/1.1/",
    "arxiv": "http://arxiv.org/schemas/atom",
}
_FEED_TAG = f"{{{_NS['atom']}}}feed"
_ABS_PREFIX = re.compile(r"^https?://arxiv\.org/abs/")
_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str | None) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def _child_text(element: ET.Element, path: str) -> str | None:
    child = element.find(path, _NS)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def _int_text(element: ET.Element, path: str) -> int:
    raw = _child_text(element, path)
    try:
        return int(raw) if raw is not None else 0
    except ValueError:
        return 0


class ArxivSource(HTTPSource):
    """arXiv export API adapter.

    Only timeouts, network failures and 5xx answers are retried.
    """

    label = "arXiv"
    always_dated = True

    def __init__(self, base_url: str = ARXIV_API_URL, **kwargs: Any) -> None:
        super().__init__(base_url, **kwargs)

    @property
    def provider(self) -> Provider:
        return Provider.ARXIV

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Accept"] = "application/atom+xml"
        return headers

    @staticmethod
    def build_params(query: SearchQuery) -> dict[str, Any]:
        """Translate a SearchQuery into export API parameters.

        The query text is passed through untouched so field prefixes
        (``ti:``, ``au:``, ``abs:``, ``cat:``) keep working.
        """
        return {
            "search_query": query.query,
            "start": query.offset,
            "max_results": query.limit,
            "sortBy": query.sort_by.value,
            "sortOrder": query.sort_order.value,
        }

    async def search(self, query: SearchQuery) -> SearchPage:
        if query.year or query.venue or query.fields_of_study:
            logger.debug("arXiv ignores year/venue/fieldsOfStudy filters")
        response = await self._get(self.base_url, params=self.build_params(query))
        return self.parse_feed(response.text)

    async def get_by_id(self, item_id: str) -> NormalizedResult | None:
        try:
            response = await self._get(self.base_url, params={"id_list": item_id})
        except UpstreamClientError as exc:
            if exc.status_code == 404:
                return None
            raise
        page = self.parse_feed(response.text)
        return page.entries[0] if page.entries else None

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @classmethod
    def parse_feed(cls, xml_text: str) -> SearchPage:
        """Parse an Atom feed into a SearchPage. Raises ResponseParseError."""
        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as exc:
            raise ResponseParseError(
                f"Failed to parse arXiv response: {exc}", provider=cls.label
            ) from exc
        if root.tag != _FEED_TAG:
            raise ResponseParseError(
                "Failed to parse arXiv response: Invalid arXiv response format",
                provider=cls.label,
            )

        total = _int_text(root, "opensearch:totalResults")
        start = _int_text(root, "opensearch:startIndex")
        per_page = _int_text(root, "opensearch:itemsPerPage")
        entries = [cls.parse_entry(entry) for entry in root.findall("atom:entry", _NS)]

        next_offset = start + len(entries)
        return SearchPage(
            entries=entries,
            total_results=total,
            pagination=Pagination(
                total=total,
                offset=start,
                limit=per_page,
                next_offset=next_offset if entries and next_offset < total else None,
            ),
        )

    @classmethod
    def parse_entry(cls, entry: ET.Element) -> NormalizedResult:
        raw_id = _child_text(entry, "atom:id")
        title = _collapse(_child_text(entry, "atom:title"))
        if not raw_id or not title:
            raise ResponseParseError(
                "Failed to parse arXiv response: entry without id or title",
                provider=cls.label,
            )
        arxiv_id = _ABS_PREFIX.sub("", raw_id)

        authors = [
            name
            for author in entry.findall("atom:author", _NS)
            if (name := _child_text(author, "atom:name"))
        ]
        categories = [
            term
            for category in entry.findall("atom:category", _NS)
            if (term := category.get("term"))
        ]

        pdf_url = None
        for link in entry.findall("atom:link", _NS):
            if link.get("type") == "application/pdf" or link.get("title") == "pdf":
                pdf_url = link.get("href")
                if pdf_url:
                    break
        if not pdf_url:
            pdf_url = f"http://arxiv.org/pdf/{arxiv_id}.pdf"

        fields: dict[str, Any] = {"categories": categories}
        published = _child_text(entry, "atom:published")
        updated = _child_text(entry, "atom:updated")
        publication_date = published or updated
        if publication_date is None:
            # Feed gave no date at all; stamp the fetch time and mark it.
            logger.warning("arXiv entry %s has no published/updated date", arxiv_id)
            publication_date = datetime.now(UTC).isoformat()
            fields["publication_date_estimated"] = True

        primary = entry.find("arxiv:primary_category", _NS)
        if primary is not None and primary.get("term"):
            fields["primary_category"] = primary.get("term")
        for key, path in (
            ("doi", "arxiv:doi"),
            ("journal_ref", "arxiv:journal_ref"),
            ("comment", "arxiv:comment"),
        ):
            value = _child_text(entry, path)
            if value:
                fields[key] = _collapse(value)
        if updated:
            fields["updated"] = updated

        return NormalizedResult(
            external_id=arxiv_id,
            title=title,
            authors=authors,
            abstract=_collapse(_child_text(entry, "atom:summary")),
            publication_date=publication_date,
            pdf_url=pdf_url,
            source=Provider.ARXIV,
            provider_fields=fields,
        )
