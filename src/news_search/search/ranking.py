"""
Filtering and Ranking

Applies structured filters to scored results, orders them and caps the
result count.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .models import ScoredResult, SearchFilters

DEFAULT_MAX_RESULTS = 20

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

Predicate = Callable[[ScoredResult], bool]


def _predicates(filters: SearchFilters) -> List[Predicate]:
    predicates: List[Predicate] = []

    if filters.section:
        section = filters.section
        predicates.append(
            lambda r: r.record.section == section or r.article.section_key == section
        )

    if filters.date_range is not None:
        start, end = filters.date_range.start, filters.date_range.end
        predicates.append(
            lambda r: r.record.published_at is not None
            and start <= r.record.published_at <= end
        )

    if filters.author:
        needle = filters.author.lower()
        predicates.append(
            lambda r: bool(r.record.author_name)
            and needle in r.record.author_name.lower()
        )

    if filters.categories:
        wanted_categories = filters.categories
        predicates.append(
            lambda r: any(c in wanted_categories for c in r.record.categories or ())
        )

    if filters.tags:
        wanted_tags = filters.tags
        predicates.append(
            lambda r: any(t in wanted_tags for t in r.record.tags or ())
        )

    return predicates


def apply_filters(
    results: Sequence[ScoredResult],
    filters: Optional[SearchFilters],
) -> List[ScoredResult]:
    """
    Keep only the results that satisfy every active filter.
    """
    if filters is None:
        return list(results)

    predicates = _predicates(filters)
    return [r for r in results if all(p(r) for p in predicates)]


def _sort_key(result: ScoredResult):
    published = result.record.published_at or _EPOCH
    # Score desc, newest first, then build order.
    return (-result.score, -published.timestamp(), result.article.article_index)


def rank(
    results: Sequence[ScoredResult],
    limit: int = DEFAULT_MAX_RESULTS,
) -> List[ScoredResult]:
    """
    Order results by relevance and truncate to ``limit``.
    """
    return sorted(results, key=_sort_key)[:limit]
