"""
Text Normalization

Turns article records into flat, lower-cased search text and splits user
queries into tokens. Search text exists only for indexing and scoring; it is
never shown to a user.
"""

from __future__ import annotations

import re
from typing import List, Tuple

from ..corpus.models import ArticleRecord

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def build_search_text(record: ArticleRecord) -> str:
    """
    Concatenate the searchable fields of a record into one normalized string.

    Field order is fixed: title, summary, content, section, categories, tags,
    author name. Missing fields contribute an empty string.
    """
    parts = [
        record.title,
        record.summary,
        record.content or "",
        record.section,
        " ".join(record.categories or ()),
        " ".join(record.tags or ()),
        record.author_name,
    ]

    text = " ".join(parts).lower()
    text = _NON_WORD.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_query(query: str) -> Tuple[str, List[str]]:
    """
    Lower-case and trim a query and split it on whitespace.

    Returns
    -------
    Tuple[str, List[str]]
        The normalized query and its tokens. Both are empty for a blank query.
    """
    normalized = (query or "").lower().strip()
    return normalized, normalized.split()
