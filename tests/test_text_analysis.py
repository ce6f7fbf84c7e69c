"""Tests for tokenization helpers and word-frequency analysis."""

from __future__ import annotations

from datetime import date, datetime

from talk_analytics.pipeline.text_analysis import (
    extract_technical_terms,
    filter_tokens,
    iter_message_texts,
    month_key,
    normalize_text,
    tokenize,
)
from talk_analytics.pipeline.word_frequency import (
    FrequencyConfig,
    analyze_frequencies,
    categorize_term,
)
from talk_analytics.schemas import Conversation, Message


def _conversation(session_id: str, *contents: str) -> Conversation:
    return Conversation(
        session_id=session_id,
        project_path="/work/app",
        started_at=datetime(2024, 4, 1, 10, 0),
        messages=[Message(role="user", content=content) for content in contents],
    )


class TestTextHelpers:
    def test_normalize_strips_urls_emails_and_code(self):
        text = "See https://example.com/x or mail dev@example.com\n```\nprint(1)\n```  use `npm i` **now**"
        assert normalize_text(text) == "See or mail use now"

    def test_tokenize_and_filter(self):
        tokens = tokenize("How do I (really) fix the 404 error in React?")
        assert "(really)" not in tokens
        assert filter_tokens(tokens) == ["really", "fix", "error", "react"]

    def test_filter_drops_short_long_and_symbol_tokens(self):
        assert filter_tokens(["a", "x" * 51, "---", "42", "ok"]) == ["ok"]
        assert filter_tokens(["的", "数据库"]) == ["数据库"]

    def test_extract_technical_terms_is_ordered_and_distinct(self):
        terms = extract_technical_terms("Python API with Docker; python again and a REST api")
        assert terms == ["python", "docker", "api", "rest"]

    def test_iter_message_texts_skips_blank_messages(self):
        conversation = _conversation("s1", "hello there", "   ")
        assert list(iter_message_texts([conversation])) == [("s1", "hello there")]


class TestAnalyzeFrequencies:
    def test_tfidf_keeps_distinctive_terms(self):
        conversations = [
            _conversation("a", "docker containers crash often. docker restart helps"),
            _conversation("b", "docker compose file"),
            _conversation("c", "python script"),
            _conversation("d", "python notebook"),
        ]
        word_cloud = analyze_frequencies(conversations)

        texts = [word.text for word in word_cloud.words]
        assert texts[0] == "docker"
        assert "python" not in texts
        docker = word_cloud.words[0]
        assert docker.category == "tool"
        assert docker.value == 2
        assert word_cloud.total_tokens == 14
        assert 0 < word_cloud.vocabulary_richness() <= 1
        assert word_cloud.concepts == []

    def test_repeated_phrases_carry_context(self):
        conversations = [
            _conversation("a", "My unit tests fail again"),
            _conversation("b", "unit tests fail on CI"),
        ]
        word_cloud = analyze_frequencies(conversations)
        phrases = {phrase.text: phrase for phrase in word_cloud.phrases}
        assert phrases["unit tests"].frequency == 2
        assert phrases["unit tests fail"].frequency == 2
        assert phrases["unit tests"].contexts[0] == "My unit tests fail again"

    def test_max_words_truncates(self):
        conversations = [
            _conversation("a", "alpha alpha alpha beta beta beta gamma gamma gamma"),
            _conversation("b", "unrelated words"),
        ]
        word_cloud = analyze_frequencies(conversations, FrequencyConfig(max_words=2))
        assert len(word_cloud.words) == 2

    def test_empty_input(self):
        word_cloud = analyze_frequencies([])
        assert word_cloud.words == []
        assert word_cloud.total_tokens == 0
        assert word_cloud.vocabulary_richness() == 0.0


def test_categorize_term():
    assert categorize_term("python") == "language"
    assert categorize_term("django") == "framework"
    assert categorize_term("docker") == "tool"
    assert categorize_term("graphql") == "concept"
    assert categorize_term("banana") is None


def test_month_key():
    assert month_key(datetime(2024, 2, 29, 23, 59)) == date(2024, 2, 1)
