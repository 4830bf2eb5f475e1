import asyncio
import json
import logging
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from news_search.core.errors import CorpusUnavailableError, CorpusValidationError
from news_search.corpus.models import ArticleRecord, parse_article
from news_search.corpus.provider import (
    CorpusProvider,
    JsonFileCorpusProvider,
    StaticCorpusProvider,
    section_items,
)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def corpus_file(tmp_path, corpus):
    return write_json(tmp_path / "news.json", corpus)


def test_providers_satisfy_protocol(corpus_file, test_settings):
    assert isinstance(StaticCorpusProvider({}), CorpusProvider)
    assert isinstance(JsonFileCorpusProvider(str(corpus_file), test_settings), CorpusProvider)


def test_section_items_shapes():
    assert section_items([1, 2]) == [1, 2]
    assert section_items({"items": [1]}) == [1]
    assert section_items({"title": "no items"}) is None
    assert section_items("text") is None


@pytest.mark.asyncio
async def test_static_provider_returns_corpus(corpus):
    provider = StaticCorpusProvider(corpus)
    assert await provider.get_corpus() is corpus


class TestJsonFileCorpusProvider:

    @pytest.mark.asyncio
    async def test_loads_and_caches(self, corpus_file, corpus, test_settings):
        provider = JsonFileCorpusProvider(str(corpus_file), test_settings)

        data = await provider.get_corpus()
        assert data == corpus
        assert provider.is_cached

        write_json(corpus_file, {**corpus, "extra": {"items": []}})
        assert await provider.get_corpus() == corpus

        provider.clear_cache()
        assert "extra" in await provider.get_corpus()

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_one_read(self, corpus_file, corpus, test_settings):
        provider = JsonFileCorpusProvider(str(corpus_file), test_settings)
        provider._read = MagicMock(return_value=corpus)

        first, second = await asyncio.gather(provider.get_corpus(), provider.get_corpus())

        assert first == second == corpus
        provider._read.assert_called_once()

    @pytest.mark.asyncio
    async def test_retries_then_gives_up(self, tmp_path, test_settings):
        provider = JsonFileCorpusProvider(str(tmp_path / "missing.json"), test_settings)
        provider._read = MagicMock(side_effect=FileNotFoundError("missing"))

        with pytest.raises(CorpusUnavailableError):
            await provider.get_corpus()

        assert provider._read.call_count == test_settings.retry_attempts
        assert not provider.is_cached

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failure(self, corpus, test_settings):
        provider = JsonFileCorpusProvider("unused.json", test_settings)
        provider._read = MagicMock(side_effect=[OSError("busy"), corpus])

        assert await provider.get_corpus() == corpus

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path, test_settings):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        provider = JsonFileCorpusProvider(str(path), test_settings)

        with pytest.raises(CorpusUnavailableError):
            await provider.get_corpus()

    @pytest.mark.asyncio
    async def test_rejects_non_object(self, tmp_path, test_settings):
        provider = JsonFileCorpusProvider(str(write_json(tmp_path / "list.json", [])), test_settings)

        with pytest.raises(CorpusValidationError):
            await provider.get_corpus()

    @pytest.mark.asyncio
    async def test_requires_configured_sections(self, tmp_path, corpus, test_settings):
        del corpus["latest"]
        provider = JsonFileCorpusProvider(str(write_json(tmp_path / "c.json", corpus)), test_settings)

        with pytest.raises(CorpusValidationError, match="latest"):
            await provider.get_corpus()

    @pytest.mark.asyncio
    async def test_warns_about_missing_fields(self, tmp_path, test_settings, caplog):
        data = {"hero": {"items": [{"title": "No slug", "author": {"name": "X"}}]}, "latest": []}
        provider = JsonFileCorpusProvider(str(write_json(tmp_path / "c.json", data)), test_settings)

        with caplog.at_level(logging.WARNING, logger="news_search.corpus"):
            await provider.get_corpus()

        messages = caplog.text
        assert "Missing meta information" in messages
        assert "Missing required field 'slug' in hero[0]" in messages
        assert "Missing author field 'id' in hero[0]" in messages

    @pytest.mark.asyncio
    async def test_warns_about_lead_image_without_sources(self, tmp_path, test_settings, caplog):
        with_sources = {"title": "A", "images": {"lead": {"sources": [{"url": "a.jpg"}]}}}
        without_sources = {"title": "B", "images": {"lead": {"alt": "B"}}}
        no_images = {"title": "C"}
        data = {"hero": [with_sources, without_sources, no_images], "latest": []}
        provider = JsonFileCorpusProvider(str(write_json(tmp_path / "c.json", data)), test_settings)

        with caplog.at_level(logging.WARNING, logger="news_search.corpus"):
            await provider.get_corpus()

        assert "Missing image sources in hero[1]" in caplog.text
        assert "Missing image sources in hero[0]" not in caplog.text
        assert "Missing image sources in hero[2]" not in caplog.text


# ---------------------------------------------------------------------
# Record Parsing
# ---------------------------------------------------------------------

def test_parse_article_drops_invalid_fields(caplog):
    raw = {"id": 3, "title": "Ok", "publishedAt": "yesterday-ish", "featured": "maybe"}

    with caplog.at_level(logging.WARNING, logger="news_search.corpus"):
        record = parse_article(raw, "latest[0]")

    assert record.title == "Ok"
    assert record.published_at is None
    assert record.featured is False
    assert "latest[0]" in caplog.text


def test_parse_article_accepts_nulls_and_naive_dates():
    record = parse_article({"title": None, "publishedAt": "2026-10-01T08:00:00"})

    assert record.title == ""
    assert record.published_at.tzinfo is not None


def test_parse_article_keeps_unknown_fields():
    record = parse_article({"title": "T", "images": {"lead": "x.jpg"}})
    assert record.model_extra == {"images": {"lead": "x.jpg"}}


def test_parse_article_skips_non_objects():
    assert parse_article("nope") is None


def test_records_are_immutable():
    record = ArticleRecord(title="T")
    with pytest.raises(ValidationError):
        record.title = "changed"
