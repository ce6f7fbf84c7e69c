"""Tests for the messages endpoint client."""

from __future__ import annotations

import json

import httpx
import pytest

from talk_analytics.models import MessagesJsonClient, extract_text_payload


def _client(handler, **overrides) -> MessagesJsonClient:
    values = {
        "endpoint": "https://llm.example/v1/messages",
        "api_key": "secret",
        "model": "test-model",
        "max_tokens": 256,
        "backoff_seconds": 0.0,
        "transport": httpx.MockTransport(handler),
    }
    values.update(overrides)
    return MessagesJsonClient(**values)


def _text_reply(payload: dict) -> httpx.Response:
    return httpx.Response(200, json={"content": [{"type": "text", "text": json.dumps(payload)}]})


class TestExtractTextPayload:
    def test_first_text_block_wins(self):
        payload = {
            "content": [
                {"type": "thinking", "text": "ignored"},
                {"type": "text", "text": "first"},
                {"type": "text", "text": "second"},
            ]
        }
        assert extract_text_payload(payload) == "first"

    def test_plain_string_content(self):
        assert extract_text_payload({"content": '{"a": 1}'}) == '{"a": 1}'

    def test_rejects_missing_text(self):
        with pytest.raises(ValueError, match="missing text content"):
            extract_text_payload({"content": [{"type": "tool_use"}]})
        with pytest.raises(ValueError, match="Unexpected messages response type"):
            extract_text_payload(["content"])


class TestMessagesJsonClient:
    def test_sends_expected_request(self):
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return _text_reply({"total_sentences": 3})

        client = _client(handler)
        try:
            result = client.complete_json(system_prompt="sys", user_prompt="user")
        finally:
            client.close()

        assert result == {"total_sentences": 3}
        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://llm.example/v1/messages"
        assert request.headers["x-api-key"] == "secret"
        assert request.headers["content-type"] == "application/json"
        body = json.loads(request.content)
        assert body == {
            "model": "test-model",
            "max_tokens": 256,
            "messages": [
                {"role": "system", "content": "sys"},
                {"role": "user", "content": "user"},
            ],
        }

    def test_single_attempt_by_default(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            return httpx.Response(503, json={"error": "busy"})

        client = _client(handler)
        with pytest.raises(httpx.HTTPStatusError):
            client.complete_json(system_prompt="sys", user_prompt="user")
        assert calls["count"] == 1

    def test_retries_retryable_status(self):
        responses = [httpx.Response(429), _text_reply({"ok": True})]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        client = _client(handler, max_retries=2)
        assert client.complete_json(system_prompt="sys", user_prompt="user") == {"ok": True}
        assert responses == []

    def test_does_not_retry_client_errors(self):
        calls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["count"] += 1
            return httpx.Response(401)

        client = _client(handler, max_retries=3)
        with pytest.raises(httpx.HTTPStatusError):
            client.complete_json(system_prompt="sys", user_prompt="user")
        assert calls["count"] == 1

    def test_rejects_non_object_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"content": [{"type": "text", "text": "[1, 2]"}]})

        client = _client(handler)
        with pytest.raises(ValueError, match="Expected JSON object"):
            client.complete_json(system_prompt="sys", user_prompt="user")

    def test_rejects_invalid_json_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"content": "not json"})

        client = _client(handler)
        with pytest.raises(json.JSONDecodeError):
            client.complete_json(system_prompt="sys", user_prompt="user")
