"""
Autocomplete suggestions drawn from index tokens and article titles.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from .index import InvertedIndex
from .models import IndexedArticle

DEFAULT_MAX_SUGGESTIONS = 8
MIN_TITLE_WORD_LENGTH = 4
TITLE_PHRASE_WORDS = 3


def title_phrases(title: str, partial: str) -> List[str]:
    """
    Phrases of up to three words starting at each title word that contains
    ``partial`` and is longer than three characters.
    """
    words = title.lower().split(" ")
    phrases: List[str] = []

    for i, word in enumerate(words):
        if partial in word and len(word) >= MIN_TITLE_WORD_LENGTH:
            phrase = " ".join(words[i:i + TITLE_PHRASE_WORDS])
            if len(phrase) > len(partial):
                phrases.append(phrase)

    return phrases


def generate_suggestions(
    index: InvertedIndex,
    articles: Sequence[IndexedArticle],
    partial: str,
    limit: int = DEFAULT_MAX_SUGGESTIONS,
    min_length: int = 2,
) -> List[str]:
    """
    Suggest completions for a partial query, shortest first.

    Index tokens come first in build order, then title phrases in corpus
    order. The first ``limit`` distinct suggestions are kept and then sorted
    by length.
    """
    normalized = (partial or "").lower().strip()
    if len(normalized) < min_length:
        return []

    # dict as an insertion-ordered set
    suggestions: Dict[str, None] = {}

    for token in sorted(index.tokens_with_prefix(normalized), key=index.ordinal):
        suggestions[token] = None

    for article in articles:
        title = article.record.title
        if normalized not in title.lower():
            continue
        for phrase in title_phrases(title, normalized):
            suggestions[phrase] = None

    return sorted(list(suggestions)[:limit], key=len)
