"""Core input schemas for the analytics pipeline."""

import re
from datetime import datetime

from pydantic import BaseModel, Field

_SENTENCE_BREAK = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")


class Message(BaseModel):
    """A single message in a conversation."""

    role: str
    content: str = ""
    timestamp: datetime | None = None


class Conversation(BaseModel):
    """An already-parsed conversation record."""

    session_id: str
    project_path: str = ""
    started_at: datetime
    ended_at: datetime | None = None
    messages: list[Message] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)

    @property
    def updated_at(self) -> datetime:
        return self.ended_at or self.started_at

    @property
    def project_name(self) -> str:
        segments = [part for part in re.split(r"[\\/]", self.project_path) if part]
        return segments[-1] if segments else "unknown"

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def user_messages(self) -> list[Message]:
        """Return messages authored by the user."""

        return [message for message in self.messages if message.role == "user"]

    @property
    def title(self) -> str:
        """Short title derived from the first user message."""

        user_messages = self.user_messages()
        if not user_messages:
            return f"Conversation {self.session_id[:8]}"

        content = user_messages[0].content
        if len(content) <= 50:
            return content

        first_sentence = _SENTENCE_BREAK.split(content, maxsplit=1)[0]
        if len(first_sentence) <= 80:
            return first_sentence.strip()
        return content[:50] + "..."

    def word_count(self) -> int:
        """Whitespace-delimited word count over all messages."""

        return sum(len(_WHITESPACE.split(message.content)) for message in self.messages)

    def has_code_blocks(self) -> bool:
        return any("```" in message.content for message in self.messages)

    def searchable_text(self) -> str:
        """Title, project name and message bodies joined by spaces."""

        parts = [self.title, self.project_name, *(message.content for message in self.messages)]
        return " ".join(parts)

    def searchable_content(self) -> str:
        return self.searchable_text().lower()
