"""Client for Anthropic-style `/v1/messages` endpoints."""

from __future__ import annotations

import json
from typing import Protocol

import httpx
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential, wait_random


class LLMJsonClient(Protocol):
    """Protocol for clients that return structured JSON."""

    def complete_json(self, *, system_prompt: str, user_prompt: str) -> dict:
        """Generate a JSON object for the given prompts."""


def extract_text_payload(payload: object) -> str:
    """Return the first text block of a messages response.

    Accepts `{"content": [{"type": "text", "text": ...}]}` as well as a plain string
    `content` field.
    """

    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected messages response type: {type(payload).__name__}")

    content = payload.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str) and text:
                    return text
    raise ValueError("Messages response missing text content block.")


class MessagesJsonClient:
    """Thin JSON-focused client around a messages endpoint."""

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        timeout_seconds: float = 60.0,
        max_retries: int = 1,
        backoff_seconds: float = 1.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._model = model
        self._max_tokens = max_tokens
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._http = httpx.Client(
            timeout=timeout_seconds,
            headers={
                "x-api-key": api_key,
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""

        self._http.close()

    def _is_retryable_error(self, exc: BaseException) -> bool:
        """Return whether a request exception should trigger retry/backoff."""

        if isinstance(exc, httpx.HTTPStatusError):
            return exc.response.status_code == 429 or exc.response.status_code >= 500
        return isinstance(exc, (httpx.TimeoutException, httpx.RequestError))

    def build_payload(self, *, system_prompt: str, user_prompt: str) -> dict:
        """Build the request body sent to the endpoint."""

        return {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }

    def complete_json(self, *, system_prompt: str, user_prompt: str) -> dict:
        """Send one prompt pair and decode the text reply as a JSON object."""

        response: httpx.Response | None = None
        max_attempts = max(1, self._max_retries)
        wait_strategy = wait_exponential(
            multiplier=self._backoff_seconds,
            min=self._backoff_seconds,
            max=max(self._backoff_seconds, self._backoff_seconds * 8),
        ) + wait_random(0.0, 0.25)
        retryer = Retrying(
            retry=retry_if_exception(self._is_retryable_error),
            wait=wait_strategy,
            stop=stop_after_attempt(max_attempts),
            reraise=True,
        )
        for attempt in retryer:
            with attempt:
                response = self._http.post(
                    self._endpoint,
                    json=self.build_payload(system_prompt=system_prompt, user_prompt=user_prompt),
                )
                response.raise_for_status()

        if response is None:
            raise ValueError("Messages response missing after retries.")

        text = extract_text_payload(response.json())
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected JSON object in reply, got {type(parsed).__name__}.")
        return parsed
