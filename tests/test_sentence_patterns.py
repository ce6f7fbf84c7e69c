"""Tests for heuristic sentence-pattern analysis."""

from __future__ import annotations

from datetime import datetime

from talk_analytics.pipeline.sentence_patterns import (
    SentencePatternAnalyzer,
    collect_tags,
    detect_intent,
    detect_sentiment,
    extract_context,
    normalize_sentence,
    split_into_sentences,
)
from talk_analytics.schemas import Conversation, Message


def _conversation(session_id: str, project_path: str, *contents: str) -> Conversation:
    messages = [Message(role="user", content=content) for content in contents]
    messages.append(Message(role="assistant", content="Sure. Here is how you deploy this app?"))
    return Conversation(
        session_id=session_id,
        project_path=project_path,
        started_at=datetime(2024, 3, 4, 14, 0),
        messages=messages,
    )


def _sample_conversations() -> list[Conversation]:
    return [
        _conversation("a", "/w/shop", "How do I deploy this app? Thanks so much for the help!"),
        _conversation("b", "/w/shop", "How do I deploy this app?"),
        _conversation("c", "/w/api", "The build failed again"),
    ]


class TestSplitting:
    def test_splits_after_sentence_punctuation(self):
        assert split_into_sentences("First line here. Second one!  \n Third?") == [
            "First line here.",
            "Second one!",
            "Third?",
        ]

    def test_drops_code_and_letterless_parts(self):
        assert split_into_sentences("Run `ls` now. ```x = 1``` Done!") == ["Run now.", "Done!"]
        assert split_into_sentences("Done. 42. Next step") == ["Done.", "Next step"]
        assert split_into_sentences("   ") == []

    def test_normalize_sentence(self):
        assert normalize_sentence("How do I   deploy, this app?") == "how do i deploy this app"


class TestClassification:
    def test_intent_precedence(self):
        assert detect_intent("Why can't this compile?") == "issue"
        assert detect_intent("Is this right") == "question"
        assert detect_intent("Please refactor this module") == "request"
        assert detect_intent("Explain the difference between threads") == "learning"
        assert detect_intent("Let's sketch the roadmap") == "planning"
        assert detect_intent("The sky looks blue") == "statement"

    def test_sentiment_counts_cue_words(self):
        assert detect_sentiment("Thanks, this is great") == "positive"
        assert detect_sentiment("I am stuck and frustrated") == "negative"
        assert detect_sentiment("Great idea but I am stuck") == "neutral"

    def test_tags(self):
        assert collect_tags("Please refactor this module", "request") == ["actionable", "engineering"]
        assert collect_tags("The sky looks blue", "statement") == ["statement"]


def test_extract_context_ellipsizes_long_messages():
    full_text = "x" * 100 + " target sentence " + "y" * 100
    context = extract_context(full_text, "target sentence")
    assert context is not None
    assert context.startswith("…")
    assert context.endswith("…")
    assert "target sentence" in context
    assert extract_context("short text", "missing") is None


class TestAnalyze:
    def test_aggregates_user_sentences(self):
        summary = SentencePatternAnalyzer().analyze(_sample_conversations())

        assert summary.total_sentences == 4
        assert summary.unique_sentences == 3
        assert summary.average_sentences_per_conversation == 4 / 3

        top = summary.top_sentences[0]
        assert top.sentence == "How do I deploy this app?"
        assert top.normalized == "how do i deploy this app"
        assert top.frequency == 2
        assert top.conversation_count == 2
        assert top.intent == "question"
        assert top.tags == ["curiosity"]
        assert len(top.sample_contexts) == 2

        assert [stat.sentence for stat in summary.top_questions] == ["How do I deploy this app?"]
        assert [stat.sentence for stat in summary.troubleshooting_sentences] == ["The build failed again"]
        thanks = next(stat for stat in summary.top_sentences if stat.sentence.startswith("Thanks"))
        assert thanks.sentiment == "positive"

    def test_intent_breakdown_covers_every_intent(self):
        summary = SentencePatternAnalyzer().analyze(_sample_conversations())
        breakdown = {item.intent: item for item in summary.intent_breakdown}

        assert list(breakdown) == ["issue", "question", "request", "learning", "planning", "statement"]
        assert sum(item.count for item in summary.intent_breakdown) == summary.total_sentences
        assert breakdown["question"].percentage == 50.0
        assert breakdown["issue"].count == 1
        assert breakdown["request"].count == 0

    def test_empty_input(self):
        summary = SentencePatternAnalyzer().analyze([])
        assert summary.total_sentences == 0
        assert summary.average_sentence_length == 0.0
        assert summary.top_sentences == []
        assert all(item.percentage == 0.0 for item in summary.intent_breakdown)


def test_collect_sentence_prompts_prefixes_project():
    prompts = SentencePatternAnalyzer().collect_sentence_prompts(_sample_conversations())
    assert prompts[0] == "[shop] How do I deploy this app?"
    assert prompts[-1] == "[api] The build failed again"
    assert len(SentencePatternAnalyzer().collect_sentence_prompts(_sample_conversations(), limit=2)) == 2
