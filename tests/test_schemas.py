"""Tests for conversation input schemas."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from talk_analytics.schemas import Conversation, Message


def _conversation(*messages: Message, **overrides) -> Conversation:
    values = {
        "session_id": "abcdef123456",
        "project_path": "/home/dev/projects/shop-api",
        "started_at": datetime(2024, 3, 1, 9, 30),
        "messages": list(messages),
    }
    values.update(overrides)
    return Conversation(**values)


class TestConversation:
    def test_requires_session_id_and_start(self):
        with pytest.raises(ValidationError):
            Conversation(project_path="/tmp/x")

    def test_project_name_uses_last_path_segment(self):
        assert _conversation().project_name == "shop-api"
        assert _conversation(project_path="C:\\work\\billing\\").project_name == "billing"
        assert _conversation(project_path="").project_name == "unknown"

    def test_updated_at_falls_back_to_start(self):
        conversation = _conversation()
        assert conversation.updated_at == conversation.started_at

        ended = datetime(2024, 3, 2, 8, 0)
        assert _conversation(ended_at=ended).updated_at == ended

    def test_title_rules(self):
        short = _conversation(Message(role="user", content="Fix the login bug"))
        assert short.title == "Fix the login bug"

        long_sentence = "Please help me wire up the payment webhook. " + "It keeps failing " * 10
        assert _conversation(Message(role="user", content=long_sentence)).title == (
            "Please help me wire up the payment webhook"
        )

        run_on = "word " * 40
        assert _conversation(Message(role="user", content=run_on)).title == run_on[:50] + "..."

        assert _conversation(Message(role="assistant", content="hi")).title == "Conversation abcdef12"

    def test_counts_and_code_detection(self):
        conversation = _conversation(
            Message(role="user", content="How do I sort a list"),
            Message(role="assistant", content="Use ```sorted(items)```"),
        )
        assert conversation.message_count == 2
        assert len(conversation.user_messages()) == 1
        assert conversation.word_count() == 8
        assert conversation.has_code_blocks() is True

    def test_searchable_content_is_lowercased(self):
        conversation = _conversation(Message(role="user", content="Deploy with Docker"))
        content = conversation.searchable_content()
        assert "deploy with docker" in content
        assert "shop-api" in content
        assert content == content.lower()
        assert "Deploy with Docker" in conversation.searchable_text()
