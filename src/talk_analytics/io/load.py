"""Loaders for normalized conversation datasets."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

from talk_analytics.schemas import Conversation


class ConversationDatasetError(ValueError):
    """Raised when a conversation dataset fails schema or integrity checks."""


def _parse_line(file_path: Path, line_number: int, stripped: str) -> Conversation:
    try:
        payload = json.loads(stripped)
    except json.JSONDecodeError as exc:
        raise ConversationDatasetError(
            f"Invalid JSON on line {line_number} of {file_path}: {exc.msg}"
        ) from exc

    if not isinstance(payload, dict):
        raise ConversationDatasetError(
            f"Expected object on line {line_number} of {file_path}, "
            f"got {type(payload).__name__}."
        )

    try:
        return Conversation.model_validate(payload)
    except Exception as exc:
        raise ConversationDatasetError(
            f"Conversation schema validation failed on line {line_number} of "
            f"{file_path}: {exc}"
        ) from exc


def iter_conversations_jsonl(path: str | Path) -> Iterator[Conversation]:
    """Stream validated conversations from a JSONL file, one per non-empty line.

    Session IDs must be unique within the file.
    """

    file_path = Path(path)
    if not file_path.exists():
        raise ConversationDatasetError(f"Conversation file does not exist: {file_path}")

    seen_session_ids: set[str] = set()
    with file_path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            stripped = line.strip()
            if not stripped:
                continue

            conversation = _parse_line(file_path, line_number, stripped)
            if conversation.session_id in seen_session_ids:
                raise ConversationDatasetError(
                    f"Duplicate session_id '{conversation.session_id}' "
                    f"found on line {line_number} of {file_path}."
                )
            seen_session_ids.add(conversation.session_id)
            yield conversation


def load_conversations_jsonl(path: str | Path) -> list[Conversation]:
    """Load and validate conversation records from a JSONL file."""

    conversations = list(iter_conversations_jsonl(path))
    if not conversations:
        raise ConversationDatasetError(f"No conversations found in file: {path}")
    return conversations

