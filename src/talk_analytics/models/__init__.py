"""Model client abstractions."""

from talk_analytics.models.messages_client import (
    LLMJsonClient,
    MessagesJsonClient,
    extract_text_payload,
)

__all__ = [
    "LLMJsonClient",
    "MessagesJsonClient",
    "extract_text_payload",
]
