"""Tests for export utilities."""

from __future__ import annotations

import json

from article_search.export import export_bibtex, export_json, export_markdown
from article_search.models import (
    NormalizedResult,
    Provider,
    ProviderError,
    UnifiedSearchResult,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _make_result(results: list[NormalizedResult], errors: list[ProviderError] | None = None) -> UnifiedSearchResult:
    return UnifiedSearchResult(
        query="test",
        results=results,
        total=len(results),
        errors=errors or [],
    )


_EMPTY = _make_result([])

_ARXIV = NormalizedResult(
    external_id="2101.00001",
    title="Attention & Memory_Networks",
    authors=["Alice Smith", "Bob Jones"],
    publication_date="2021-01-01T12:30:00Z",
    pdf_url="http://arxiv.org/pdf/2101.00001.pdf",
    source=Provider.ARXIV,
    provider_fields={"categories": ["cs.LG"]},
)

_S2 = NormalizedResult(
    external_id="abc123",
    title="Graph Networks",
    authors=["Carol Lee", "Dave Wilson", "Eve Brown", "Frank Green"],
    publication_date="2019-06-01",
    source=Provider.SEMANTIC_SCHOLAR,
    provider_fields={"citationCount": 42, "venue": "NeurIPS", "doi": "10.1234/gn"},
)

_MULTI = _make_result([_ARXIV, _S2])


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

class TestExportJson:
    def test_valid_json(self):
        data = json.loads(export_json(_MULTI))
        assert data["query"] == "test"
        assert len(data["results"]) == 2
        assert data["results"][0]["source"] == "arxiv"

    def test_indent(self):
        assert "\n" in export_json(_EMPTY, indent=2)


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

class TestExportMarkdown:
    def test_header_only_when_empty(self):
        lines = export_markdown(_EMPTY).splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("| # | Title")

    def test_rows(self):
        lines = export_markdown(_MULTI).splitlines()
        assert len(lines) == 4
        assert "| 1 | Attention & Memory_Networks | Alice Smith, Bob Jones | 2021-01-01 | arxiv | - |" == lines[2]
        assert "Carol Lee et al." in lines[3]
        assert "| 42 |" in lines[3]

    def test_errors_listed(self):
        result = _make_result([_S2], errors=[ProviderError(provider="arxiv", error="arXiv API request timeout")])
        text = export_markdown(result)
        assert text.endswith("- arxiv failed: arXiv API request timeout")


# ---------------------------------------------------------------------------
# BibTeX
# ---------------------------------------------------------------------------

class TestExportBibtex:
    def test_empty(self):
        assert export_bibtex(_EMPTY) == ""

    def test_arxiv_preprint_is_misc(self):
        bib = export_bibtex(_make_result([_ARXIV]))
        assert bib.startswith("@misc{smith_2021_attention,")
        assert r"title = {{Attention \& Memory\_Networks}}" in bib
        assert "eprint = {2101.00001}" in bib
        assert "archivePrefix = {arXiv}" in bib
        assert "url = {http://arxiv.org/pdf/2101.00001.pdf}" in bib

    def test_semantic_scholar_article(self):
        bib = export_bibtex(_make_result([_S2]))
        assert bib.startswith("@article{lee_2019_graph,")
        assert "journal = {NeurIPS}" in bib
        assert "doi = {10.1234/gn}" in bib
        assert "author = {Carol Lee and Dave Wilson and Eve Brown and Frank Green}" in bib

    def test_key_collision(self):
        bib = export_bibtex(_make_result([_S2, _S2]))
        assert "@article{lee_2019_graph," in bib
        assert "@article{lee_2019_graph_a," in bib

    def test_unknown_author_and_year(self):
        item = NormalizedResult(external_id="x", title="123", source=Provider.SEMANTIC_SCHOLAR)
        bib = export_bibtex(_make_result([item]))
        assert bib.startswith("@article{unknown_nd_untitled,")
        assert "author = {Unknown}" in bib
