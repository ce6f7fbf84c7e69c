"""Prompt builders for the analytics pipeline."""

from talk_analytics.prompts.sentence_prompts import (
    SENTENCE_INSIGHT_SYSTEM_PROMPT,
    build_sentence_insight_user_prompt,
)

__all__ = [
    "SENTENCE_INSIGHT_SYSTEM_PROMPT",
    "build_sentence_insight_user_prompt",
]
