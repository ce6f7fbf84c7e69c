"""I/O utilities for reading inputs and writing analytics artifacts."""

from talk_analytics.io.history import parse_history_timestamp, read_history_events
from talk_analytics.io.load import (
    ConversationDatasetError,
    iter_conversations_jsonl,
    load_conversations_jsonl,
)
from talk_analytics.io.save import save_json, save_report, write_text_atomic

__all__ = [
    "ConversationDatasetError",
    "iter_conversations_jsonl",
    "load_conversations_jsonl",
    "parse_history_timestamp",
    "read_history_events",
    "save_json",
    "save_report",
    "write_text_atomic",
]
