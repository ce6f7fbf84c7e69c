"""Prompts for refining sentence-pattern summaries with a remote model."""

from __future__ import annotations

SENTENCE_INSIGHT_SYSTEM_PROMPT = """You are an analytics assistant who summarizes developer conversations.
Analyze the provided sentences and return JSON with exactly these keys:
{
  "total_sentences": <integer>,
  "unique_sentences": <integer>,
  "average_sentence_length": <number>,
  "average_sentences_per_conversation": <number>,
  "intent_breakdown": [{"intent": <intent>, "count": <integer>, "percentage": <number>}],
  "top_sentences": [<sentence entry>],
  "top_questions": [<sentence entry>],
  "troubleshooting_sentences": [<sentence entry>]
}

A sentence entry has exactly these keys:
{
  "sentence": "<original sentence>",
  "normalized": "<lowercase sentence without punctuation>",
  "frequency": <integer>,
  "intent": <intent>,
  "sentiment": "positive" | "neutral" | "negative",
  "average_length": <number>,
  "tags": ["<at most 5 short tags>"],
  "conversation_count": <integer>,
  "sample_contexts": ["<at most 3 short excerpts>"]
}

<intent> is one of "issue", "question", "request", "learning", "planning", "statement".

Requirements:
- Always respond with valid JSON and no prose.
- Keep sentences verbatim; do not invent new ones.
"""


def build_sentence_insight_user_prompt(*, sentences: list[str], fallback_json: str) -> str:
    """Build user prompt listing numbered sentences plus the heuristic summary to refine."""

    lines = [f"{index}. {sentence}" for index, sentence in enumerate(sentences, start=1)]
    sentence_block = "\n".join(lines)
    return (
        f"Here are up to {len(sentences)} recent user sentences (one per line):\n"
        f"{sentence_block}\n\n"
        "Here is a fallback analytics summary you may refine or improve:\n"
        f"{fallback_json}\n"
    )
