"""Export utilities for UnifiedSearchResult."""

from __future__ import annotations

import re
import string

from article_search.models import NormalizedResult, Provider, UnifiedSearchResult


def export_json(result: UnifiedSearchResult, indent: int = 2) -> str:
    """Serialize a search result to JSON string."""
    return result.model_dump_json(indent=indent)


def export_bibtex(result: UnifiedSearchResult) -> str:
    """Generate BibTeX entries for all results."""
    if not result.results:
        return ""
    seen_keys: set[str] = set()
    entries = []
    for item in result.results:
        key = _make_bibtex_key(item, seen_keys)
        entries.append(_format_bibtex_entry(item, key))
    return "\n\n".join(entries)


def export_markdown(result: UnifiedSearchResult) -> str:
    """Generate Markdown table of results, followed by failed providers."""
    header = "| # | Title | Authors | Date | Source | Citations |"
    sep = "|---|-------|---------|------|--------|-----------|"
    rows = []
    for i, item in enumerate(result.results, 1):
        authors = _format_authors_short(item.authors)
        published = (item.publication_date or "-")[:10]
        citations = "-" if item.citation_count is None else str(item.citation_count)
        rows.append(
            f"| {i} | {item.title} | {authors} | {published} | {item.source.value} | {citations} |"
        )
    lines = [header, sep] + rows
    if result.errors:
        lines.append("")
        lines.extend(f"- {e.provider} failed: {e.error}" for e in result.errors)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

_BIBTEX_SPECIAL = str.maketrans({
    "&": r"\&",
    "%": r"\%",
    "_": r"\_",
    "#": r"\#",
})


def _escape_bibtex(text: str) -> str:
    return text.translate(_BIBTEX_SPECIAL)


def _year(item: NormalizedResult) -> str | None:
    if item.publication_date and item.publication_date[:4].isdigit():
        return item.publication_date[:4]
    year = item.provider_fields.get("year")
    return str(year) if year else None


def _make_bibtex_key(item: NormalizedResult, seen: set[str]) -> str:
    """Generate a unique BibTeX key: lastname_year_firstword."""
    name = item.authors[0].split()[-1].lower() if item.authors else "unknown"
    year = _year(item) or "nd"
    words = re.findall(r"[a-zA-Z]+", item.title)
    first_word = words[0].lower() if words else "untitled"

    base = re.sub(r"[^a-z0-9_]", "", f"{name}_{year}_{first_word}")

    key = base
    suffix_idx = 0
    while key in seen:
        key = f"{base}_{string.ascii_lowercase[suffix_idx]}"
        suffix_idx += 1
    seen.add(key)
    return key


def _format_bibtex_entry(item: NormalizedResult, key: str) -> str:
    """Format a single result as @article, or @misc for arXiv preprints."""
    fields = item.provider_fields
    if item.source is Provider.ARXIV and not fields.get("journal_ref"):
        entry_type = "misc"
    else:
        entry_type = "article"
    lines = [f"@{entry_type}{{{key},"]

    if item.authors:
        lines.append(f"  author = {{{_escape_bibtex(' and '.join(item.authors))}}},")
    else:
        lines.append("  author = {Unknown},")

    lines.append(f"  title = {{{{{_escape_bibtex(item.title)}}}}},")

    year = _year(item)
    if year:
        lines.append(f"  year = {{{year}}},")

    venue = fields.get("venue") or fields.get("journal_ref")
    if venue:
        lines.append(f"  journal = {{{_escape_bibtex(venue)}}},")

    if item.source is Provider.ARXIV:
        lines.append(f"  eprint = {{{item.external_id}}},")
        lines.append("  archivePrefix = {arXiv},")

    if item.doi:
        lines.append(f"  doi = {{{item.doi}}},")

    if item.pdf_url:
        lines.append(f"  url = {{{item.pdf_url}}},")

    lines.append("}")
    return "\n".join(lines)


def _format_authors_short(authors: list[str]) -> str:
    if not authors:
        return "-"
    if len(authors) <= 3:
        return ", ".join(authors)
    return f"{authors[0]} et al."
