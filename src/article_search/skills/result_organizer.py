"""Result organizer skill: date filtering, ordering and truncation."""

from __future__ import annotations

from datetime import UTC, date, datetime

from article_search.models import DateRange, NormalizedResult, SortMode

_EPOCH_MIN = datetime.min.replace(tzinfo=UTC)


def parse_publication_date(value: str | None) -> datetime | None:
    """Parse an ISO date or timestamp. Naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class ResultOrganizer:
    """Filter, sort and cut merged provider results."""

    @staticmethod
    def filter_by_date(
        results: list[NormalizedResult],
        date_range: DateRange | None,
        keep_undated: bool = False,
    ) -> list[NormalizedResult]:
        """Keep results whose publication day lies within the inclusive range.

        Results with a missing or unparseable date are dropped unless
        ``keep_undated`` is set.
        """
        if date_range is None or date_range.is_empty:
            return list(results)

        kept = []
        for result in results:
            published = parse_publication_date(result.publication_date)
            if published is None:
                if keep_undated:
                    kept.append(result)
                continue
            if _in_range(published.date(), date_range):
                kept.append(result)
        return kept

    @staticmethod
    def sort(results: list[NormalizedResult], mode: SortMode) -> list[NormalizedResult]:
        if mode == SortMode.DATE:
            return sorted(
                results,
                key=lambda r: parse_publication_date(r.publication_date) or _EPOCH_MIN,
                reverse=True,
            )
        if mode == SortMode.CITATIONS and any(
            r.citation_count is not None for r in results
        ):
            return sorted(results, key=lambda r: -(r.citation_count or 0))
        return list(results)

    def organize(
        self,
        results: list[NormalizedResult],
        mode: SortMode,
        limit: int,
    ) -> tuple[list[NormalizedResult], int]:
        """Sort and truncate. Returns (kept results, count before truncation)."""
        ordered = self.sort(results, mode)
        return ordered[:limit], len(ordered)


def _in_range(day: date, date_range: DateRange) -> bool:
    if date_range.date_from is not None and day < date_range.date_from:
        return False
    if date_range.date_to is not None and day > date_range.date_to:
        return False
    return True
