"""
Relevance Scoring

Weighted field scoring of a candidate article against a query, plus the
attribute-overlap score used for related articles.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

from ..corpus.models import ArticleRecord

# ---------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------

TITLE_WEIGHT = 10
SUMMARY_WEIGHT = 5
CONTENT_WEIGHT = 2
TAGS_WEIGHT = 3
CATEGORIES_WEIGHT = 3
SECTION_WEIGHT = 1
AUTHOR_WEIGHT = 1

PHRASE_BONUS = 10
WHOLE_WORD_BONUS = 3
PARTIAL_WORD_BONUS = 1
MAX_POSITION_BONUS = 5
POSITION_BUCKET = 100

LAST_DAY_BONUS = 2
LAST_WEEK_BONUS = 1
FEATURED_BONUS = 1

RELATED_SECTION_BONUS = 10
RELATED_CATEGORY_BONUS = 5
RELATED_TAG_BONUS = 3
RELATED_AUTHOR_BONUS = 2
RELATED_RECENCY_BONUS = 1


@lru_cache(maxsize=1024)
def _word_pattern(token: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(token)}\b")


def text_score(text: str, query: str, tokens: Sequence[str]) -> int:
    """
    Score one lower-cased field value against a normalized query.

    - +10 when the whole query occurs in the field
    - per token: 3 per whole-word occurrence, or 1 if it only occurs inside
      a longer word
    - up to +5 for a whole-query match near the start of the field
    """
    if not text:
        return 0

    score = 0
    phrase_offset = text.find(query) if query else -1

    if phrase_offset != -1:
        score += PHRASE_BONUS

    for token in tokens:
        if token not in text:
            continue

        whole_words = len(_word_pattern(token).findall(text))
        if whole_words:
            score += WHOLE_WORD_BONUS * whole_words
        else:
            score += PARTIAL_WORD_BONUS

    if phrase_offset != -1:
        score += max(0, MAX_POSITION_BONUS - phrase_offset // POSITION_BUCKET)

    return score


def _weighted_fields(record: ArticleRecord) -> List[Tuple[str, int]]:
    fields: List[Tuple[str, int]] = [
        (record.title.lower(), TITLE_WEIGHT),
        (record.summary.lower(), SUMMARY_WEIGHT),
    ]

    if record.content:
        fields.append((record.content.lower(), CONTENT_WEIGHT))
    if record.tags:
        fields.append((" ".join(record.tags).lower(), TAGS_WEIGHT))
    if record.categories:
        fields.append((" ".join(record.categories).lower(), CATEGORIES_WEIGHT))

    fields.append((record.section.lower(), SECTION_WEIGHT))

    if record.author_name:
        fields.append((record.author_name.lower(), AUTHOR_WEIGHT))

    return fields


def recency_bonus(published_at: Optional[datetime], now: datetime) -> int:
    if published_at is None:
        return 0

    age = now - published_at
    if age < timedelta(days=1):
        return LAST_DAY_BONUS
    if age < timedelta(days=7):
        return LAST_WEEK_BONUS
    return 0


def score_article(
    record: ArticleRecord,
    query: str,
    tokens: Sequence[str],
    now: datetime,
) -> float:
    """
    Compute the relevance of one article for a query.

    A result of 0 means the article is not a match.
    """
    score = sum(
        text_score(text, query, tokens) * weight
        for text, weight in _weighted_fields(record)
    )

    score += recency_bonus(record.published_at, now)

    if record.featured:
        score += FEATURED_BONUS

    return float(score)


# ---------------------------------------------------------------------
# Related Articles
# ---------------------------------------------------------------------

def _shared(left: Optional[Iterable[str]], right: Optional[Iterable[str]]) -> int:
    if not left or not right:
        return 0
    other = set(right)
    return sum(1 for value in left if value in other)


def related_score(base: ArticleRecord, other: ArticleRecord) -> float:
    """
    Score how closely ``other`` relates to ``base`` by shared attributes.
    """
    score = 0

    if base.section and other.section == base.section:
        score += RELATED_SECTION_BONUS

    score += RELATED_CATEGORY_BONUS * _shared(base.categories, other.categories)
    score += RELATED_TAG_BONUS * _shared(base.tags, other.tags)

    if (
        base.author is not None
        and other.author is not None
        and base.author.id is not None
        and base.author.id == other.author.id
    ):
        score += RELATED_AUTHOR_BONUS

    if base.published_at is not None and other.published_at is not None:
        if abs(base.published_at - other.published_at) < timedelta(days=7):
            score += RELATED_RECENCY_BONUS

    return float(score)
