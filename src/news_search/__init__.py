"""
News Search

In-process search core for a news-article corpus: inverted index, fuzzy
multi-term queries, weighted relevance ranking, autocomplete suggestions and
a debounced interactive session.
"""

from .corpus.models import ArticleRecord, Author
from .corpus.provider import CorpusProvider, JsonFileCorpusProvider, StaticCorpusProvider
from .search.engine import SearchEngine
from .search.models import DateRange, IndexedArticle, ScoredResult, SearchFilters, SearchStats
from .session.controller import ResultsView, SearchSessionController

__all__ = [
    "ArticleRecord",
    "Author",
    "CorpusProvider",
    "JsonFileCorpusProvider",
    "StaticCorpusProvider",
    "SearchEngine",
    "DateRange",
    "IndexedArticle",
    "ScoredResult",
    "SearchFilters",
    "SearchStats",
    "ResultsView",
    "SearchSessionController",
]
