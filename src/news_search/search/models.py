"""
Search Data Models

Derived, core-owned structures: indexed articles, scored results, filters
and diagnostics. Each one is created per build or per query and never
persisted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..corpus.models import ArticleRecord


class IndexedArticle(BaseModel):
    """
    An ArticleRecord prepared for search.

    ``article_index`` is the article's position in the indexed collection and
    is the join key used by postings. It is only valid for the build that
    produced it.
    """

    record: ArticleRecord
    section_key: str
    search_text: str
    article_index: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class ScoredResult(BaseModel):
    """
    One ranked search hit.
    """

    article: IndexedArticle
    score: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True)

    @property
    def record(self) -> ArticleRecord:
        return self.article.record


class DateRange(BaseModel):
    """
    Inclusive publish-date window.
    """

    start: datetime
    end: datetime

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("date range end precedes start")
        return self


class SearchFilters(BaseModel):
    """
    Optional structured predicates, combined with AND.

    ``categories`` and ``tags`` match when the article carries any one of the
    listed values.
    """

    section: Optional[str] = None
    date_range: Optional[DateRange] = None
    author: Optional[str] = None
    categories: FrozenSet[str] = Field(default_factory=frozenset)
    tags: FrozenSet[str] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("section", "author", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value:
            return None
        return value


class SearchStats(BaseModel):
    """
    Index diagnostics.
    """

    total_articles: int = 0
    index_size: int = 0
    sections: int = 0
    categories: int = 0
    tags: int = 0
