"""
Search Engine

The public facade of the search core. A SearchEngine is constructed by the
caller with an injected CorpusProvider; there is no module-level instance.

Responsibilities
----------------
- Flatten the provider's corpus and build the inverted index
- Answer search, suggestion, facet and diagnostics queries
- Rebuild on refresh, swapping index and articles in one step

Failure Model
-------------
Search is best-effort. Every public operation catches failures at its
boundary, logs them and returns an empty result. A failed rebuild keeps the
previous snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Mapping, NamedTuple, Optional, Tuple, Union

from ..config import Settings, settings as default_settings
from ..core.errors import CorpusUnavailableError, best_effort
from ..corpus.models import ArticleRecord, parse_article
from ..corpus.provider import CorpusProvider, section_items
from .index import InvertedIndex
from .models import IndexedArticle, ScoredResult, SearchFilters, SearchStats
from .normalizer import build_search_text, normalize_query
from .ranking import apply_filters, rank
from .scoring import related_score, score_article
from .suggestions import generate_suggestions

logger = logging.getLogger("news_search.engine")

Clock = Callable[[], datetime]

TRENDING_PERIODS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
}


class _Snapshot(NamedTuple):
    articles: Tuple[IndexedArticle, ...]
    index: InvertedIndex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchEngine:
    """
    In-memory news search over a corpus supplied by a CorpusProvider.

    Build and refresh are expected to be driven by a single caller; queries
    read whichever snapshot is current when they start.

    Only ``search`` builds lazily. The synchronous lookups (suggestions,
    facets, stats, article lookups) read the current snapshot and answer
    empty until ``build()`` or a first search has completed.
    """

    def __init__(
        self,
        provider: CorpusProvider,
        *,
        settings: Optional[Settings] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        """
        Parameters
        ----------
        provider : CorpusProvider
            Source of the article corpus.

        settings : Optional[Settings]
            Configuration override. Defaults to the module-level settings.

        clock : Optional[Clock]
            Returns the current aware datetime. Used for recency scoring.
        """
        self._provider = provider
        self._settings = settings or default_settings
        self._clock = clock or _utcnow

        self._snapshot = _Snapshot((), InvertedIndex())
        self._built = False
        self._build_attempted = False
        self._building: Optional[asyncio.Future] = None

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def articles(self) -> Tuple[IndexedArticle, ...]:
        return self._snapshot.articles

    @property
    def index(self) -> InvertedIndex:
        return self._snapshot.index

    # ------------------------------------------------------------------
    # Build / Refresh
    # ------------------------------------------------------------------

    async def build(self) -> bool:
        """
        Fetch the corpus and replace the current index.

        Returns
        -------
        bool
            True when a new snapshot was installed. On failure the previous
            snapshot stays in place and the error is logged.
        """
        self._build_attempted = True
        try:
            corpus = await self._provider.get_corpus()
            snapshot = self._index_corpus(corpus)
        except Exception:
            logger.exception("Failed to build search index")
            return False

        self._snapshot = snapshot
        self._built = True

        logger.info(
            "Search index built: %d articles, %d tokens",
            len(snapshot.articles),
            len(snapshot.index),
        )
        return True

    async def refresh(self) -> bool:
        """
        Drop the provider's cached corpus and rebuild the index.
        """
        clear_cache = getattr(self._provider, "clear_cache", None)
        if callable(clear_cache):
            try:
                clear_cache()
            except Exception:
                logger.exception("Failed to clear corpus cache")
                return False

        ok = await self.build()
        if ok:
            logger.info("Search index refreshed")
        return ok

    def _flatten(self, corpus: Any) -> List[IndexedArticle]:
        if not isinstance(corpus, Mapping):
            raise CorpusUnavailableError(
                f"Corpus provider returned {type(corpus).__name__}, expected a mapping"
            )

        meta_key = self._settings.metadata_section_key
        articles: List[IndexedArticle] = []

        for section_key, section in corpus.items():
            if section_key == meta_key:
                continue

            items = section_items(section)
            if items is None:
                continue

            for i, raw in enumerate(items):
                record = parse_article(raw, f"{section_key}[{i}]")
                if record is None:
                    continue

                articles.append(
                    IndexedArticle(
                        record=record,
                        section_key=str(section_key),
                        search_text=build_search_text(record),
                        article_index=len(articles),
                    )
                )

        return articles

    def _index_corpus(self, corpus: Any) -> _Snapshot:
        articles = tuple(self._flatten(corpus))
        return _Snapshot(articles, InvertedIndex.build(articles))

    async def _ensure_built(self) -> None:
        # Searches arriving while the lazy build loads wait on the same build.
        if self._building is not None:
            await asyncio.shield(self._building)
            return

        if self._build_attempted:
            return

        self._building = asyncio.ensure_future(self.build())
        try:
            await asyncio.shield(self._building)
        finally:
            self._building = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @best_effort(default=[], operation="search")
    async def search(
        self,
        query: str,
        filters: Optional[Union[SearchFilters, Mapping[str, Any]]] = None,
    ) -> List[ScoredResult]:
        """
        Run a query and return ranked results.

        Parameters
        ----------
        query : str
            Free-text query. Below the minimum length the result is empty.

        filters : Optional[SearchFilters | Mapping]
            Structured filters, AND-combined.

        Returns
        -------
        List[ScoredResult]
            At most ``max_results`` results, best first.
        """
        normalized, tokens = normalize_query(query)
        if len(normalized) < self._settings.min_query_length:
            return []

        if isinstance(filters, Mapping):
            filters = SearchFilters.model_validate(filters)

        await self._ensure_built()
        snapshot = self._snapshot
        now = self._clock()

        scored: List[ScoredResult] = []
        for article_index in sorted(snapshot.index.candidates(tokens)):
            article = snapshot.articles[article_index]
            score = score_article(article.record, normalized, tokens, now)
            if score > 0:
                scored.append(ScoredResult(article=article, score=score))

        return rank(apply_filters(scored, filters), self._settings.max_results)

    @best_effort(default=[], operation="get_suggestions")
    def get_suggestions(self, partial_query: str) -> List[str]:
        """
        Autocomplete from the current index. Does not trigger a build.
        """
        snapshot = self._snapshot
        return generate_suggestions(
            snapshot.index,
            snapshot.articles,
            partial_query,
            limit=self._settings.max_suggestions,
            min_length=self._settings.min_query_length,
        )

    # ------------------------------------------------------------------
    # Facets / Diagnostics
    # ------------------------------------------------------------------

    @best_effort(default=[], operation="get_available_sections")
    def get_available_sections(self) -> List[str]:
        return sorted({a.record.section for a in self._snapshot.articles if a.record.section})

    @best_effort(default=[], operation="get_available_categories")
    def get_available_categories(self) -> List[str]:
        return sorted({
            category
            for a in self._snapshot.articles
            for category in a.record.categories or ()
        })

    @best_effort(default=[], operation="get_available_tags")
    def get_available_tags(self) -> List[str]:
        return sorted({
            tag
            for a in self._snapshot.articles
            for tag in a.record.tags or ()
        })

    @best_effort(default=SearchStats(), operation="get_stats")
    def get_stats(self) -> SearchStats:
        return SearchStats(
            total_articles=len(self._snapshot.articles),
            index_size=len(self._snapshot.index),
            sections=len(self.get_available_sections()),
            categories=len(self.get_available_categories()),
            tags=len(self.get_available_tags()),
        )

    # ------------------------------------------------------------------
    # Article Lookups
    # ------------------------------------------------------------------

    @best_effort(default=None, operation="get_article_by_slug")
    def get_article_by_slug(self, slug: str) -> Optional[IndexedArticle]:
        if not slug:
            return None

        for article in self._snapshot.articles:
            if article.record.slug == slug:
                return article
        return None

    @best_effort(default=[], operation="get_articles_by_section")
    def get_articles_by_section(self, section_key: str) -> List[IndexedArticle]:
        """
        Return the articles of one corpus section in corpus order, or an
        empty list when the section is missing or holds no items.
        """
        return [a for a in self._snapshot.articles if a.section_key == section_key]

    @best_effort(default=[], operation="get_related_articles")
    def get_related_articles(
        self,
        article: Union[ArticleRecord, IndexedArticle],
        limit: Optional[int] = None,
    ) -> List[ScoredResult]:
        """
        Rank other articles by shared section, categories, tags and author.
        """
        base = article.record if isinstance(article, IndexedArticle) else article
        limit = self._settings.max_related if limit is None else limit

        related = [
            ScoredResult(article=other, score=related_score(base, other.record))
            for other in self._snapshot.articles
            if not _same_article(base, other.record)
        ]
        return rank(related, limit)

    @best_effort(default=[], operation="get_trending_articles")
    def get_trending_articles(self, period: str = "24h") -> List[IndexedArticle]:
        """
        Return the curated trending section, or recent articles when the
        corpus has none: featured first, then newest.
        """
        articles = self._snapshot.articles
        trending_key = self._settings.trending_section_key

        curated = [a for a in articles if a.section_key == trending_key]
        if curated:
            return curated

        window = TRENDING_PERIODS.get(period, TRENDING_PERIODS["7d"])
        cutoff = self._clock() - window

        recent = [
            a for a in articles
            if a.record.published_at is not None and a.record.published_at >= cutoff
        ]
        recent.sort(key=lambda a: a.record.published_at, reverse=True)
        recent.sort(key=lambda a: not a.record.featured)
        return recent[: self._settings.max_trending]


def _same_article(base: ArticleRecord, other: ArticleRecord) -> bool:
    if base.id is not None:
        return other.id == base.id
    return other is base
