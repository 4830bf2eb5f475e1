"""
Interactive Search Session

Connects keystrokes from a presentation layer to the search engine: input is
debounced and results are pushed to a ResultsView. A response that arrives
after a newer view state has been rendered is discarded; showing the
placeholder or the loading indicator counts as a newer state.

The view is any object implementing ResultsView; no UI toolkit is assumed.
"""

from __future__ import annotations

import itertools
import logging
from typing import List, Optional, Protocol
from urllib.parse import quote

from ..config import Settings, settings as default_settings
from ..search.engine import SearchEngine
from ..search.models import ScoredResult
from .debounce import Debouncer

logger = logging.getLogger("news_search.session")

SEARCH_FAILED_MESSAGE = "Search failed. Please try again."
SEARCH_PAGE_URL = "/search.html?q={query}"
ARTICLE_PAGE_URL = "/article.html?slug={slug}"


class ResultsView(Protocol):
    """Rendering surface driven by the session controller."""

    def show_placeholder(self) -> None:
        ...

    def show_loading(self) -> None:
        ...

    def show_results(self, results: List[ScoredResult], query: str) -> None:
        ...

    def show_error(self, message: str) -> None:
        ...

    def navigate(self, url: str) -> None:
        ...


class SearchSessionController:
    """
    Debounced interactive search for one results area.
    """

    def __init__(
        self,
        engine: SearchEngine,
        view: ResultsView,
        *,
        settings: Optional[Settings] = None,
        debouncer: Optional[Debouncer] = None,
    ) -> None:
        self._engine = engine
        self._view = view
        self._settings = settings or default_settings
        self._debouncer = debouncer or Debouncer(self._settings.debounce_seconds)

        self._sequence = itertools.count(1)
        self._last_rendered = 0

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    @property
    def last_rendered(self) -> int:
        """Sequence number of the most recently rendered view state."""
        return self._last_rendered

    # ------------------------------------------------------------------
    # Input Events
    # ------------------------------------------------------------------

    def handle_input(self, query: str) -> None:
        """
        React to a change of the search box contents.

        Must be called from within a running event loop.
        """
        self._debouncer.cancel()
        # Placeholder and loading states are newer than any query in flight.
        self._last_rendered = next(self._sequence)

        if len((query or "").strip()) < self._settings.min_query_length:
            self._view.show_placeholder()
            return

        self._view.show_loading()
        self._debouncer.schedule(self._run_query, query)

    def handle_submit(self, query: str) -> None:
        query = (query or "").strip()
        if query:
            self._view.navigate(SEARCH_PAGE_URL.format(query=quote(query, safe="")))

    def select_result(self, slug: Optional[str]) -> None:
        if slug:
            self._view.navigate(ARTICLE_PAGE_URL.format(slug=quote(slug, safe="")))

    async def refresh(self) -> bool:
        return await self._engine.refresh()

    # ------------------------------------------------------------------
    # Query Execution
    # ------------------------------------------------------------------

    async def _run_query(self, query: str) -> None:
        sequence = next(self._sequence)

        try:
            results = await self._engine.search(query)
        except Exception:
            logger.exception("Interactive search failed for query #%d", sequence)
            if self._accept(sequence):
                self._view.show_error(SEARCH_FAILED_MESSAGE)
            return

        if self._accept(sequence):
            self._view.show_results(results, query)
        else:
            logger.debug("Discarding stale results for query #%d", sequence)

    def _accept(self, sequence: int) -> bool:
        if sequence <= self._last_rendered:
            return False
        self._last_rendered = sequence
        return True
