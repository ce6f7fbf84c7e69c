"""Optional remote refinement of the heuristic sentence summary."""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

from talk_analytics.config import SUPPORTED_LLM_MODES, Settings
from talk_analytics.io import save_json
from talk_analytics.models import LLMJsonClient, MessagesJsonClient
from talk_analytics.pipeline.sentence_patterns import SentencePatternAnalyzer
from talk_analytics.prompts import (
    SENTENCE_INSIGHT_SYSTEM_PROMPT,
    build_sentence_insight_user_prompt,
)
from talk_analytics.report import (
    INTENT_ORDER,
    SENTIMENTS,
    SentenceAnalysisSummary,
    SentenceIntent,
    SentenceIntentBreakdown,
    SentencePatternStat,
    SentenceSentiment,
)
from talk_analytics.schemas import Conversation

logger = logging.getLogger(__name__)

MAX_TAGS = 5
MAX_CONTEXTS = 3
_STAT_LIST_FIELDS = ("top_sentences", "top_questions", "troubleshooting_sentences")


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def _number(value: object, default: float) -> float:
    return float(value) if _is_number(value) else default


def ensure_intent(value: object) -> SentenceIntent:
    normalized = str(value or "").lower()
    for intent in INTENT_ORDER:
        if intent == normalized:
            return intent
    return "statement"


def ensure_sentiment(value: object) -> SentenceSentiment:
    normalized = str(value or "").lower()
    for sentiment in SENTIMENTS:
        if sentiment == normalized:
            return sentiment
    return "neutral"


def _normalize_stat(entry: object) -> SentencePatternStat | None:
    if not isinstance(entry, dict):
        return None
    sentence = entry.get("sentence")
    if not isinstance(sentence, str) or not sentence:
        return None

    frequency = int(_number(entry.get("frequency"), 0))
    tags = entry.get("tags")
    contexts = entry.get("sample_contexts")
    normalized = entry.get("normalized")
    return SentencePatternStat(
        sentence=sentence,
        normalized=normalized if isinstance(normalized, str) and normalized else sentence.lower(),
        frequency=frequency,
        intent=ensure_intent(entry.get("intent")),
        sentiment=ensure_sentiment(entry.get("sentiment")),
        average_length=_number(entry.get("average_length"), float(len(sentence))),
        tags=[str(tag) for tag in tags[:MAX_TAGS]] if isinstance(tags, list) else [],
        conversation_count=int(_number(entry.get("conversation_count"), frequency)),
        sample_contexts=[str(ctx) for ctx in contexts[:MAX_CONTEXTS]] if isinstance(contexts, list) else [],
    )


def _normalize_stats(entries: object) -> list[SentencePatternStat]:
    if not isinstance(entries, list):
        return []
    stats = [_normalize_stat(entry) for entry in entries]
    return [stat for stat in stats if stat is not None]


def _normalize_breakdown(entries: object) -> list[SentenceIntentBreakdown]:
    if not isinstance(entries, list):
        return []
    return [
        SentenceIntentBreakdown(
            intent=ensure_intent(item.get("intent")),
            count=int(_number(item.get("count"), 0)),
            percentage=_number(item.get("percentage"), 0.0),
        )
        for item in entries
        if isinstance(item, dict)
    ]


def normalize_summary_payload(payload: object) -> SentenceAnalysisSummary | None:
    """Coerce an untrusted summary mapping into a summary model.

    Each top-level field is checked on its own; a field with the wrong shape becomes
    its empty value so that `merge_with_fallback` substitutes the heuristic one.
    """

    if not isinstance(payload, dict):
        return None

    return SentenceAnalysisSummary(
        total_sentences=int(_number(payload.get("total_sentences"), 0)),
        unique_sentences=int(_number(payload.get("unique_sentences"), 0)),
        average_sentence_length=_number(payload.get("average_sentence_length"), 0.0),
        average_sentences_per_conversation=_number(
            payload.get("average_sentences_per_conversation"), 0.0
        ),
        intent_breakdown=_normalize_breakdown(payload.get("intent_breakdown")),
        **{name: _normalize_stats(payload.get(name)) for name in _STAT_LIST_FIELDS},
    )


def merge_with_fallback(
    candidate: SentenceAnalysisSummary | None,
    fallback: SentenceAnalysisSummary,
) -> SentenceAnalysisSummary:
    """Prefer non-empty candidate fields and fill the rest from `fallback`."""

    if candidate is None:
        return fallback

    merged: dict[str, Any] = {}
    for name in SentenceAnalysisSummary.model_fields:
        value = getattr(candidate, name)
        merged[name] = value if value else getattr(fallback, name)
    return SentenceAnalysisSummary(**merged)


class SentenceInsightEnhancer:
    """Refines a heuristic `SentenceAnalysisSummary` from a fixture or a remote model.

    Every failure path returns the heuristic summary unchanged.
    """

    def __init__(
        self,
        *,
        mode: str = "auto",
        client: LLMJsonClient | None = None,
        settings: Settings | None = None,
        max_sentences: int = 500,
        fixture_path: Path | None = None,
        cache_path: Path | None = None,
    ) -> None:
        normalized_mode = mode.strip().lower()
        self.mode = normalized_mode if normalized_mode in SUPPORTED_LLM_MODES else "auto"
        self._client = client
        self._settings = settings
        self.max_sentences = max_sentences
        self.fixture_path = fixture_path
        self.cache_path = cache_path

    @classmethod
    def from_settings(cls, settings: Settings) -> SentenceInsightEnhancer:
        return cls(
            mode=settings.analytics_llm_mode,
            settings=settings,
            max_sentences=settings.analytics_llm_max_sentences,
            fixture_path=settings.analytics_llm_fixture,
            cache_path=settings.analytics_llm_cache_path,
        )

    def is_enabled(self) -> bool:
        """Return whether a remote call can be made."""

        if self._client is not None:
            return True
        if self._settings is None:
            return False
        return bool(self._settings.resolved_llm_endpoint() and self._settings.resolved_llm_api_key())

    def _create_client(self) -> MessagesJsonClient:
        settings = self._settings
        if settings is None:
            raise ValueError("Settings are required to create a messages client.")
        return MessagesJsonClient(
            endpoint=settings.resolved_llm_endpoint(),
            api_key=settings.resolved_llm_api_key() or "",
            model=settings.analytics_llm_model,
            max_tokens=settings.analytics_llm_max_tokens,
            timeout_seconds=settings.analytics_llm_timeout_seconds,
            max_retries=settings.client_max_retries,
            backoff_seconds=settings.client_backoff_seconds,
        )

    def load_fixture_summary(self) -> SentenceAnalysisSummary | None:
        if self.fixture_path is None or not self.fixture_path.exists():
            logger.warning("Mock sentence insights enabled but fixture not found: %s", self.fixture_path)
            return None
        try:
            payload = json.loads(self.fixture_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Failed to load sentence insight fixture %s.", self.fixture_path, exc_info=True)
            return None
        try:
            summary = normalize_summary_payload(payload)
        except (ValueError, OverflowError):
            logger.warning("Sentence insight fixture %s has unusable values.", self.fixture_path, exc_info=True)
            return None
        if summary is None:
            logger.warning("Sentence insight fixture %s is not a JSON object.", self.fixture_path)
        return summary

    def _write_cache(self, summary: SentenceAnalysisSummary) -> None:
        if self.cache_path is None:
            return
        try:
            save_json(self.cache_path, summary)
        except OSError:
            logger.warning("Failed to write sentence insight cache %s.", self.cache_path, exc_info=True)

    def _request_summary(
        self,
        sentences: list[str],
        fallback: SentenceAnalysisSummary,
    ) -> SentenceAnalysisSummary | None:
        user_prompt = build_sentence_insight_user_prompt(
            sentences=sentences,
            fallback_json=fallback.model_dump_json(indent=2),
        )
        created_client: MessagesJsonClient | None = None
        client: LLMJsonClient
        if self._client is not None:
            client = self._client
        else:
            created_client = self._create_client()
            client = created_client

        try:
            payload = client.complete_json(
                system_prompt=SENTENCE_INSIGHT_SYSTEM_PROMPT,
                user_prompt=user_prompt,
            )
        finally:
            if created_client is not None:
                created_client.close()
        return normalize_summary_payload(payload)

    def enhance_analysis(
        self,
        conversations: list[Conversation],
        analyzer: SentencePatternAnalyzer,
        fallback: SentenceAnalysisSummary,
    ) -> SentenceAnalysisSummary:
        if self.mode == "mock":
            return merge_with_fallback(self.load_fixture_summary(), fallback)

        if not self.is_enabled():
            if self.mode == "live":
                logger.warning("Live sentence insights requested but endpoint or API key is missing.")
            return fallback

        sentences = analyzer.collect_sentence_prompts(conversations, self.max_sentences)
        if not sentences:
            return fallback

        try:
            summary = self._request_summary(sentences, fallback)
        except Exception:
            logger.warning("Sentence insight request failed; using heuristic summary.", exc_info=True)
            return fallback

        if summary is None:
            logger.warning("Sentence insight reply was not a JSON object; using heuristic summary.")
            return fallback

        self._write_cache(summary)
        logger.info("Refined sentence summary from %d sentences.", len(sentences))
        return merge_with_fallback(summary, fallback)
