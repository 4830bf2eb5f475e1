"""
Inverted Index

Maps every token of the normalized search text to the articles it appears
in, and selects candidate articles for a query.

Candidate selection is deliberately over-inclusive (exact, bidirectional
prefix and bidirectional substring matches); scoring restores precision.

Lookup Structure
----------------
- ``_postings`` keeps token keys in build order
- ``_sorted_tokens`` answers prefix queries as a bisect range
- "key is a prefix/substring of the query token" is answered by looking up
  the query token's own slices
- "key contains the query token" is the only full key scan
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Sequence, Set, Tuple

from .models import IndexedArticle

MIN_TOKEN_LENGTH = 2
SUBSTRING_MIN_QUERY_TOKEN_LENGTH = 4


@dataclass(frozen=True)
class Posting:
    """Occurrence of one token in one article."""

    article_index: int
    token: str
    positions: Tuple[int, ...]


def find_positions(text: str, token: str) -> List[int]:
    """
    Return every non-overlapping start offset of ``token`` in ``text``.
    """
    positions: List[int] = []
    if not token:
        return positions

    offset = text.find(token)
    while offset != -1:
        positions.append(offset)
        offset = text.find(token, offset + len(token))

    return positions


class InvertedIndex:
    """
    Token -> postings mapping built from one snapshot of indexed articles.

    Instances are immutable once built; a corpus change requires a new build.
    """

    def __init__(self, min_token_length: int = MIN_TOKEN_LENGTH) -> None:
        self._min_token_length = min_token_length
        self._postings: Dict[str, List[Posting]] = {}
        self._sorted_tokens: List[str] = []
        self._ordinal: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        articles: Sequence[IndexedArticle],
        min_token_length: int = MIN_TOKEN_LENGTH,
    ) -> "InvertedIndex":
        """
        Build an index over ``articles``.

        Every token occurrence of at least ``min_token_length`` characters
        appends one posting to its token's entry. Shorter tokens are skipped.
        """
        index = cls(min_token_length)
        postings = index._postings

        for article in articles:
            text = article.search_text
            positions_cache: Dict[str, Tuple[int, ...]] = {}

            for token in text.split():
                if len(token) < min_token_length:
                    continue

                positions = positions_cache.get(token)
                if positions is None:
                    positions = tuple(find_positions(text, token))
                    positions_cache[token] = positions

                postings.setdefault(token, []).append(
                    Posting(article.article_index, token, positions)
                )

        index._ordinal = {token: i for i, token in enumerate(postings)}
        index._sorted_tokens = sorted(postings)
        return index

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._postings)

    def __contains__(self, token: object) -> bool:
        return token in self._postings

    def __iter__(self) -> Iterator[str]:
        return iter(self._postings)

    def postings(self, token: str) -> Tuple[Posting, ...]:
        return tuple(self._postings.get(token, ()))

    def ordinal(self, token: str) -> int:
        """Build-order position of a token key."""
        return self._ordinal[token]

    # ------------------------------------------------------------------
    # Token Lookups
    # ------------------------------------------------------------------

    def tokens_with_prefix(self, prefix: str) -> List[str]:
        """
        Return index keys starting with ``prefix``, in sorted order.
        """
        if not prefix:
            return list(self._sorted_tokens)

        matches: List[str] = []
        start = bisect_left(self._sorted_tokens, prefix)
        for token in self._sorted_tokens[start:]:
            if not token.startswith(prefix):
                break
            matches.append(token)

        return matches

    def tokens_prefixing(self, token: str) -> List[str]:
        """
        Return index keys that are a prefix of ``token`` (``token`` included).
        """
        return [
            token[:end]
            for end in range(self._min_token_length, len(token) + 1)
            if token[:end] in self._postings
        ]

    def tokens_within(self, token: str) -> Set[str]:
        """
        Return index keys that occur as a substring of ``token``.
        """
        n = len(token)
        # Slicing is quadratic in the token length; fall back to a key scan
        # once that exceeds the vocabulary size.
        if n * n > len(self._postings):
            return {key for key in self._postings if key in token}

        return {
            token[start:end]
            for start in range(n)
            for end in range(start + self._min_token_length, n + 1)
            if token[start:end] in self._postings
        }

    def tokens_containing(self, token: str) -> FrozenSet[str]:
        """
        Return index keys that contain ``token`` as a substring.
        """
        return frozenset(key for key in self._postings if token in key)

    # ------------------------------------------------------------------
    # Candidate Selection
    # ------------------------------------------------------------------

    def article_indices(self, tokens: Iterable[str]) -> Set[int]:
        return {
            posting.article_index
            for token in tokens
            for posting in self._postings.get(token, ())
        }

    def candidates(self, query_tokens: Iterable[str]) -> Set[int]:
        """
        Select the article indices that could match the query tokens.

        For each token: exact key, keys it prefixes or that prefix it and,
        for tokens longer than 3 characters, keys it contains or that
        contain it.
        """
        matched: Set[str] = set()

        for token in query_tokens:
            if token in self._postings:
                matched.add(token)

            matched.update(self.tokens_with_prefix(token))
            matched.update(self.tokens_prefixing(token))

            if len(token) >= SUBSTRING_MIN_QUERY_TOKEN_LENGTH:
                matched.update(self.tokens_containing(token))
                matched.update(self.tokens_within(token))

        return self.article_indices(matched)
