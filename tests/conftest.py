from datetime import datetime, timedelta, timezone

import pytest

from news_search.config import Settings
from news_search.corpus.models import ArticleRecord
from news_search.corpus.provider import StaticCorpusProvider
from news_search.search.engine import SearchEngine
from news_search.search.models import IndexedArticle
from news_search.search.normalizer import build_search_text

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def make_article(article_id, title, **fields):
    """Raw corpus entry with sensible defaults."""
    published = fields.pop("published", NOW - timedelta(days=30))
    raw = {
        "id": article_id,
        "slug": f"article-{article_id}",
        "title": title,
        "summary": "",
        "section": "news",
        "author": {"id": "a-1", "name": "Jane Doe"},
        "publishedAt": published.isoformat(),
        "featured": False,
    }
    raw.update(fields)
    return raw


def make_indexed(raw, article_index, section_key="latest"):
    record = ArticleRecord.model_validate(raw)
    return IndexedArticle(
        record=record,
        section_key=section_key,
        search_text=build_search_text(record),
        article_index=article_index,
    )


@pytest.fixture
def test_settings():
    return Settings(retry_attempts=2, retry_delay=0, debounce_seconds=0.01)


@pytest.fixture
def corpus():
    return {
        "meta": {"generated": "2026-10-17T12:00:00Z"},
        "hero": {
            "items": [
                make_article(
                    1,
                    "Markets rally after rate cut",
                    section="business",
                    summary="Stocks climbed as the central bank eased policy.",
                    categories=["Economy"],
                    tags=["markets", "rates"],
                    published=NOW,
                    featured=True,
                ),
            ]
        },
        "latest": {
            "items": [
                make_article(
                    2,
                    "Tech giants report earnings",
                    section="tech",
                    summary="Quarterly results beat expectations.",
                    categories=["Technology", "Economy"],
                    tags=["earnings"],
                    published=NOW - timedelta(days=2),
                ),
                make_article(
                    3,
                    "New chip factory opens",
                    section="tech",
                    summary="The plant will employ hundreds.",
                    categories=["Technology"],
                    tags=["chips"],
                    author={"id": "a-2", "name": "Sam Lee"},
                ),
            ]
        },
        "sports": {
            "items": [
                make_article(
                    4,
                    "Swimmers shine at olympics",
                    section="sports",
                    tags=["olympics", "swimming"],
                    published=NOW - timedelta(days=1, hours=1),
                ),
                make_article(
                    5,
                    "Olympics torch relay begins",
                    section="sports",
                    tags=["olympics"],
                    published=NOW - timedelta(days=3),
                ),
            ]
        },
    }


@pytest.fixture
def provider(corpus):
    return StaticCorpusProvider(corpus)


@pytest.fixture
def engine(provider, test_settings):
    return SearchEngine(provider, settings=test_settings, clock=lambda: NOW)
