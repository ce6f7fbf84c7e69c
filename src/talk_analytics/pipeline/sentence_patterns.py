"""Heuristic sentence-level intent and sentiment analysis of user messages."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from talk_analytics.report import (
    INTENT_ORDER,
    SentenceAnalysisSummary,
    SentenceIntent,
    SentenceIntentBreakdown,
    SentencePatternStat,
    SentenceSentiment,
)
from talk_analytics.schemas import Conversation

MIN_SENTENCE_LENGTH = 6
CONTEXT_RADIUS = 80
MAX_CONTEXTS = 3
TOP_LIMIT = 5

_CODE_FENCE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]+`")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"([.!?。！？])\s+")
_HAS_LETTER = re.compile(r"[a-zA-Z\u4e00-\u9fa5]")
_NON_WORD = re.compile(r"[^a-z0-9\u4e00-\u9fa5\s]")

_ISSUE = re.compile(r"(error|exception|bug|crash|fail(ed)?|not working|stack trace|cannot|can't)")
_QUESTION_START = re.compile(r"^(how|what|why|can|could|would|is|are|do|does|should|any chance)\b")
_REQUEST = re.compile(r"(please|could you|can you|help me|show me|walk me|i need you to)")
_LEARNING = re.compile(r"(learn|explain|understand|difference|concept|meaning)")
_PLANNING = re.compile(r"(plan|roadmap|strategy|next step|approach|timeline)")
_ENGINEERING = re.compile(r"refactor|optimiz(e|ation)|performance")

POSITIVE_WORDS = ("thank", "thanks", "appreciate", "love", "great", "awesome", "nice")
NEGATIVE_WORDS = ("hate", "frustrated", "can't", "cannot", "stuck", "annoyed", "wtf", "bad")
INTENT_TAGS: dict[str, str] = {
    "issue": "troubleshooting",
    "question": "curiosity",
    "request": "actionable",
    "learning": "learning",
    "planning": "planning",
    "statement": "statement",
}


@dataclass(frozen=True, slots=True)
class SentenceSample:
    """One sentence taken from a user message."""

    conversation_id: str
    project_name: str
    full_text: str
    sentence: str
    normalized: str


@dataclass
class _Accumulator:
    display_sentence: str
    count: int = 0
    total_length: int = 0
    intents: Counter = field(default_factory=Counter)
    sentiments: Counter = field(default_factory=Counter)
    tags: dict[str, None] = field(default_factory=dict)
    conversation_ids: set[str] = field(default_factory=set)
    contexts: list[str] = field(default_factory=list)


def split_into_sentences(text: str) -> list[str]:
    """Strip code, collapse whitespace and split after sentence-ending punctuation."""

    cleaned = _CODE_FENCE.sub(" ", text)
    cleaned = _INLINE_CODE.sub(" ", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned.replace("\r\n", "\n")).strip()
    if not cleaned:
        return []
    marked = _SENTENCE_END.sub(r"\1|", cleaned)
    return [part.strip() for part in marked.split("|") if part.strip() and _HAS_LETTER.search(part)]


def normalize_sentence(sentence: str) -> str:
    return _WHITESPACE.sub(" ", _NON_WORD.sub("", sentence.lower())).strip()


def detect_intent(sentence: str) -> SentenceIntent:
    lower = sentence.lower()
    if _ISSUE.search(lower):
        return "issue"
    if "?" in lower or _QUESTION_START.search(lower):
        return "question"
    if _REQUEST.search(lower):
        return "request"
    if _LEARNING.search(lower):
        return "learning"
    if _PLANNING.search(lower):
        return "planning"
    return "statement"


def detect_sentiment(sentence: str) -> SentenceSentiment:
    lower = sentence.lower()
    positive = sum(1 for word in POSITIVE_WORDS if word in lower)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lower)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def collect_tags(sentence: str, intent: SentenceIntent) -> list[str]:
    tags = [INTENT_TAGS[intent]]
    if _ENGINEERING.search(sentence.lower()):
        tags.append("engineering")
    return tags


def extract_context(full_text: str, sentence: str) -> str | None:
    """Return the sentence with up to 80 characters either side, ellipsized when cut."""

    index = full_text.lower().find(sentence.lower().strip())
    if index == -1:
        return None
    start = max(0, index - CONTEXT_RADIUS)
    end = min(len(full_text), index + len(sentence) + CONTEXT_RADIUS)
    snippet = full_text[start:end].strip()
    prefix = "…" if start > 0 else ""
    suffix = "…" if end < len(full_text) else ""
    return f"{prefix}{snippet}{suffix}"


def _majority(counts: Counter, fallback: str) -> str:
    # Counter preserves insertion order, so the first-seen value wins ties.
    best = fallback
    best_count = -1
    for value, count in counts.items():
        if count > best_count:
            best = value
            best_count = count
    return best


class SentencePatternAnalyzer:
    """Aggregates user sentences into frequency, intent and sentiment statistics."""

    def extract_samples(self, conversations: list[Conversation]) -> list[SentenceSample]:
        samples: list[SentenceSample] = []
        for conversation in conversations:
            project_name = conversation.project_name
            for message in conversation.user_messages():
                content = message.content
                if not content.strip():
                    continue
                for sentence in split_into_sentences(content):
                    if len(sentence) < MIN_SENTENCE_LENGTH:
                        continue
                    normalized = normalize_sentence(sentence)
                    if not normalized:
                        continue
                    samples.append(
                        SentenceSample(
                            conversation_id=conversation.session_id,
                            project_name=project_name,
                            full_text=content,
                            sentence=sentence,
                            normalized=normalized,
                        )
                    )
        return samples

    def collect_sentence_prompts(self, conversations: list[Conversation], limit: int = 500) -> list[str]:
        """Return up to `limit` raw sentences, each prefixed with `[project]`."""

        return [
            f"[{sample.project_name}] {sample.sentence}" if sample.project_name else sample.sentence
            for sample in self.extract_samples(conversations)[:limit]
        ]

    def analyze(self, conversations: list[Conversation]) -> SentenceAnalysisSummary:
        accumulators: dict[str, _Accumulator] = {}
        intent_counts: Counter[str] = Counter()
        total_sentences = 0
        total_length = 0

        for sample in self.extract_samples(conversations):
            intent = detect_intent(sample.sentence)
            sentiment = detect_sentiment(sample.sentence)
            total_sentences += 1
            total_length += len(sample.sentence)
            intent_counts[intent] += 1

            acc = accumulators.get(sample.normalized)
            if acc is None:
                acc = _Accumulator(display_sentence=sample.sentence)
                accumulators[sample.normalized] = acc
            acc.count += 1
            acc.total_length += len(sample.sentence)
            acc.intents[intent] += 1
            acc.sentiments[sentiment] += 1
            for tag in collect_tags(sample.sentence, intent):
                acc.tags.setdefault(tag, None)
            acc.conversation_ids.add(sample.conversation_id)
            context = extract_context(sample.full_text, sample.sentence)
            if context and context not in acc.contexts and len(acc.contexts) < MAX_CONTEXTS:
                acc.contexts.append(context)

        stats = [self._to_stat(normalized, acc) for normalized, acc in accumulators.items()]
        ranked = sorted(stats, key=lambda stat: stat.frequency, reverse=True)

        return SentenceAnalysisSummary(
            total_sentences=total_sentences,
            unique_sentences=len(accumulators),
            average_sentence_length=total_length / total_sentences if total_sentences else 0.0,
            average_sentences_per_conversation=(
                total_sentences / len(conversations) if conversations else 0.0
            ),
            intent_breakdown=[
                SentenceIntentBreakdown(
                    intent=intent,
                    count=intent_counts.get(intent, 0),
                    percentage=(intent_counts.get(intent, 0) / total_sentences * 100)
                    if total_sentences
                    else 0.0,
                )
                for intent in INTENT_ORDER
            ],
            top_sentences=ranked[:TOP_LIMIT],
            top_questions=[stat for stat in ranked if stat.intent == "question"][:TOP_LIMIT],
            troubleshooting_sentences=[stat for stat in ranked if stat.intent == "issue"][:TOP_LIMIT],
        )

    @staticmethod
    def _to_stat(normalized: str, acc: _Accumulator) -> SentencePatternStat:
        return SentencePatternStat(
            sentence=acc.display_sentence,
            normalized=normalized,
            frequency=acc.count,
            intent=_majority(acc.intents, "statement"),
            sentiment=_majority(acc.sentiments, "neutral"),
            average_length=acc.total_length / acc.count if acc.count else len(acc.display_sentence),
            tags=list(acc.tags),
            conversation_count=len(acc.conversation_ids),
            sample_contexts=acc.contexts,
        )
