from datetime import timedelta

import pytest

from news_search.corpus.models import ArticleRecord
from news_search.search.scoring import (
    recency_bonus,
    related_score,
    score_article,
    text_score,
)

from conftest import NOW, make_article


class TestTextScore:
    """Per-field scoring."""

    def test_phrase_words_and_position(self):
        # phrase 10 + "rate" 3 + "cut" 3 + position 5
        assert text_score("markets rally after rate cut", "rate cut", ["rate", "cut"]) == 21

    def test_position_bonus_decays_every_hundred_chars(self):
        text = "x" * 250 + " rate cut"
        # offset 251 -> 5 - 2
        assert text_score(text, "rate cut", ["rate", "cut"]) == 10 + 3 + 3 + 3

    def test_position_bonus_floors_at_zero(self):
        text = "x" * 900 + " cut"
        assert text_score(text, "cut", ["cut"]) == 10 + 3

    def test_counts_every_whole_word_occurrence(self):
        assert text_score("cut cut cut", "cut", ["cut"]) == 10 + 9 + 5

    def test_partial_word_scores_one(self):
        assert text_score("corporate news", "rat zz", ["rat", "zz"]) == 1

    def test_absent_tokens_score_nothing(self):
        assert text_score("stocks climbed", "rate cut", ["rate", "cut"]) == 0

    def test_empty_text(self):
        assert text_score("", "rate", ["rate"]) == 0

    def test_regex_characters_in_token(self):
        """Tokens are matched literally, not as patterns."""
        assert text_score("c++ guide", "c++", ["c++"]) == 10 + 1 + 5


class TestScoreArticle:

    def test_title_weight_and_bonuses(self):
        record = ArticleRecord.model_validate(
            make_article(
                1,
                "Markets rally after rate cut",
                section="business",
                published=NOW,
                featured=True,
            )
        )
        # title 21 * 10, published today +2, featured +1
        assert score_article(record, "rate cut", ["rate", "cut"], NOW) == 213.0

    def test_field_weights(self):
        record = ArticleRecord.model_validate(
            make_article(
                2,
                "Nothing here",
                summary="olympics",
                content="olympics",
                tags=["olympics"],
                categories=["olympics"],
                section="olympics",
                author={"id": "x", "name": "olympics"},
            )
        )
        per_field = text_score("olympics", "olympics", ["olympics"])
        assert per_field == 18
        # summary 5 + content 2 + tags 3 + categories 3 + section 1 + author 1
        assert score_article(record, "olympics", ["olympics"], NOW) == per_field * 15

    def test_non_match_scores_zero(self):
        record = ArticleRecord.model_validate(make_article(3, "Chip factory opens"))
        assert score_article(record, "xyzzy", ["xyzzy"], NOW) == 0

    def test_missing_fields_do_not_raise(self):
        assert score_article(ArticleRecord(), "rate", ["rate"], NOW) == 0


@pytest.mark.parametrize(
    "age, expected",
    [
        (timedelta(hours=2), 2),
        (timedelta(days=3), 1),
        (timedelta(days=8), 0),
        (-timedelta(hours=5), 2),
    ],
)
def test_recency_bonus(age, expected):
    assert recency_bonus(NOW - age, NOW) == expected


def test_recency_bonus_without_date():
    assert recency_bonus(None, NOW) == 0


class TestRelatedScore:

    def test_shared_section_and_tag_beats_unrelated(self):
        base = ArticleRecord.model_validate(
            make_article(1, "Swimmers shine", section="sports", tags=["olympics", "swimming"])
        )
        sibling = ArticleRecord.model_validate(
            make_article(2, "Torch relay", section="sports", tags=["olympics"],
                         author={"id": "a-9", "name": "Other"})
        )
        unrelated = ArticleRecord.model_validate(
            make_article(3, "Chip factory", section="tech", tags=["chips"],
                         author={"id": "a-9", "name": "Other"},
                         published=NOW - timedelta(days=90))
        )

        # section 10 + tag 3 + published within a week 1
        assert related_score(base, sibling) == 14
        assert related_score(base, unrelated) == 0

    def test_shared_categories_and_author(self):
        base = ArticleRecord.model_validate(
            make_article(1, "A", section="tech", categories=["Economy", "Technology"])
        )
        other = ArticleRecord.model_validate(
            make_article(2, "B", section="business", categories=["Technology", "Economy"])
        )
        # two categories 10 + same author 2 + same publish date 1
        assert related_score(base, other) == 13
