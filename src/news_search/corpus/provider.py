"""
Corpus Providers

The search core never loads data itself: it asks a CorpusProvider for the
current corpus. A corpus is a mapping from section key to either a list of
article objects or an object with an ``items`` list. One reserved key
(``meta`` by default) carries metadata only.

Providers
---------
- StaticCorpusProvider : in-memory corpus, for embedding and tests
- JsonFileCorpusProvider : JSON file on disk with retry, caching and
  structural validation
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

from ..config import Settings, settings as default_settings
from ..core.errors import CorpusUnavailableError, CorpusValidationError

logger = logging.getLogger("news_search.corpus")

REQUIRED_ARTICLE_FIELDS = ("id", "title", "slug", "summary", "publishedAt", "author", "section")
REQUIRED_AUTHOR_FIELDS = ("id", "name")


@runtime_checkable
class CorpusProvider(Protocol):
    """Supplies the current article corpus."""

    async def get_corpus(self) -> Mapping[str, Any]:
        ...


def section_items(section: Any) -> Optional[list]:
    """
    Return the article list held by one corpus section, or None.
    """
    if isinstance(section, list):
        return section
    if isinstance(section, Mapping) and isinstance(section.get("items"), list):
        return section["items"]
    return None


# ---------------------------------------------------------------------
# In-Memory Provider
# ---------------------------------------------------------------------

class StaticCorpusProvider:
    """
    Serve a corpus held in memory.

    ``set_corpus`` swaps the data; the engine picks it up on its next refresh.
    """

    def __init__(self, corpus: Optional[Mapping[str, Any]] = None) -> None:
        self._corpus: Mapping[str, Any] = corpus or {}

    def set_corpus(self, corpus: Mapping[str, Any]) -> None:
        self._corpus = corpus

    async def get_corpus(self) -> Mapping[str, Any]:
        return self._corpus


# ---------------------------------------------------------------------
# JSON File Provider
# ---------------------------------------------------------------------

class JsonFileCorpusProvider:
    """
    Load a corpus from a JSON file.

    Reads happen off the event loop. Failed reads are retried; concurrent
    callers share one in-flight load; the parsed document is cached until
    ``clear_cache`` is called.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Parameters
        ----------
        path : Optional[str]
            JSON corpus file. Defaults to settings.corpus_path.

        settings : Optional[Settings]
            Configuration override. Defaults to the module-level settings.
        """
        self._settings = settings or default_settings
        self._path = Path(path or self._settings.corpus_path)

        self._cache: Optional[Dict[str, Any]] = None
        self._loading: Optional[asyncio.Future] = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_cached(self) -> bool:
        return self._cache is not None

    def clear_cache(self) -> None:
        self._cache = None

    async def get_corpus(self) -> Mapping[str, Any]:
        """
        Return the cached corpus, loading it on first use.

        Raises
        ------
        CorpusUnavailableError
            If the file cannot be read or decoded after all retries.

        CorpusValidationError
            If the decoded document has an invalid structure.
        """
        if self._cache is not None:
            return self._cache

        if self._loading is not None:
            return await asyncio.shield(self._loading)

        self._loading = asyncio.ensure_future(self._load())
        try:
            data = await asyncio.shield(self._loading)
        finally:
            self._loading = None

        self._cache = data
        return data

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    async def _load(self) -> Dict[str, Any]:
        data = await self._read_with_retry()
        self._validate(data)
        return data

    async def _read_with_retry(self) -> Any:
        attempts = max(1, self._settings.retry_attempts)

        for attempt in range(1, attempts + 1):
            try:
                return await asyncio.to_thread(self._read)
            except (OSError, ValueError) as exc:
                if attempt >= attempts:
                    raise CorpusUnavailableError(
                        f"Unable to load corpus from {self._path}: {type(exc).__name__}"
                    ) from exc

                logger.warning(
                    "Corpus load attempt %d failed, retrying in %.1fs",
                    attempt,
                    self._settings.retry_delay,
                )
                await asyncio.sleep(self._settings.retry_delay)

    def _read(self) -> Any:
        with self._path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def _validate(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise CorpusValidationError("Invalid corpus format: expected object")

        meta_key = self._settings.metadata_section_key
        if meta_key not in data:
            logger.warning("Missing %s information in corpus", meta_key)

        for key in self._settings.required_section_keys:
            if key not in data:
                raise CorpusValidationError(f"Missing required section: {key}")

        for section_key, section in data.items():
            if section_key == meta_key:
                continue

            items = section_items(section)
            if items is None:
                continue

            for i, article in enumerate(items):
                _warn_missing_fields(article, f"{section_key}[{i}]")


def _warn_missing_fields(article: Any, context: str) -> None:
    if not isinstance(article, Mapping):
        logger.warning("Article entry at %s is not an object", context)
        return

    for field in REQUIRED_ARTICLE_FIELDS:
        if not article.get(field):
            logger.warning("Missing required field '%s' in %s", field, context)

    author = article.get("author")
    if isinstance(author, Mapping):
        for field in REQUIRED_AUTHOR_FIELDS:
            if not author.get(field):
                logger.warning("Missing author field '%s' in %s", field, context)

    images = article.get("images")
    lead = images.get("lead") if isinstance(images, Mapping) else None
    if lead and (not isinstance(lead, Mapping) or lead.get("sources") is None):
        logger.warning("Missing image sources in %s", context)
