"""
Corpus Data Models

This module defines the article record supplied by the data collaborator.

Records are read-only to the search core. Any field may be missing: the core
indexes whatever is present rather than rejecting the record.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("news_search.corpus")


class Author(BaseModel):
    """
    Article author as supplied by the corpus.
    """

    id: Optional[Union[int, str]] = None
    name: str = ""

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ArticleRecord(BaseModel):
    """
    A single news article.

    Unknown keys (images, reading time, ...) are kept so presentation code
    receives the record exactly as the corpus supplied it.
    """

    id: Optional[Union[int, str]] = None
    slug: Optional[str] = None
    title: str = ""
    summary: str = ""
    content: Optional[str] = None
    section: str = ""
    categories: Optional[Tuple[str, ...]] = None
    tags: Optional[Tuple[str, ...]] = None
    author: Optional[Author] = None
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")
    featured: bool = False

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
    )

    @field_validator("title", "summary", "section", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("published_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are read as UTC so date arithmetic stays comparable.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def author_name(self) -> str:
        return self.author.name if self.author else ""


# ---------------------------------------------------------------------
# Lenient Parsing
# ---------------------------------------------------------------------

def parse_article(raw: Any, context: str = "article") -> Optional[ArticleRecord]:
    """
    Build an ArticleRecord from a raw corpus entry without aborting on bad data.

    Fields that fail validation are dropped and the record is rebuilt from the
    remaining ones, so a malformed article is still indexed.

    Parameters
    ----------
    raw : Any
        An ArticleRecord or a mapping decoded from the corpus.

    context : str
        Location of the entry, used in log messages (e.g. "latest[3]").

    Returns
    -------
    Optional[ArticleRecord]
        The parsed record, or None when the entry is not an object at all.
    """
    if isinstance(raw, ArticleRecord):
        return raw

    if not isinstance(raw, Mapping):
        logger.warning("Skipping non-object article entry at %s", context)
        return None

    data = dict(raw)
    try:
        return ArticleRecord.model_validate(data)
    except ValidationError as exc:
        invalid = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.warning(
            "Malformed article at %s; ignoring fields: %s",
            context,
            ", ".join(sorted(invalid)),
        )

    cleaned = {k: v for k, v in data.items() if k not in invalid}
    return ArticleRecord.model_validate(cleaned)
