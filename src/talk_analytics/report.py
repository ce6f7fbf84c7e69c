"""Immutable output models for the analytics report."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SentenceIntent = Literal["question", "request", "issue", "learning", "planning", "statement"]
SentenceSentiment = Literal["positive", "neutral", "negative"]
ClusterType = Literal["tech_stack", "task_type", "topic", "timeline"]
WordCloudMode = Literal["word", "phrase", "concept"]
PrivacyLevel = Literal["transparent", "balanced", "high_privacy"]
AchievementRarity = Literal["common", "rare", "epic", "legendary"]
AchievementCategory = Literal["activity", "consistency", "exploration", "mastery", "social"]
Importance = Literal["low", "medium", "high"]

INTENT_ORDER: tuple[SentenceIntent, ...] = (
    "issue",
    "question",
    "request",
    "learning",
    "planning",
    "statement",
)
SENTIMENTS: tuple[SentenceSentiment, ...] = ("positive", "neutral", "negative")


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class WordEntry(_FrozenModel):
    """Word frequency entry; `weight` is the TF-IDF score, `value` its rounded size."""

    text: str
    value: int
    weight: float
    category: str | None = None


class PhraseEntry(_FrozenModel):
    text: str
    frequency: int
    contexts: list[str] = Field(default_factory=list, max_length=3)


class ConceptEntry(_FrozenModel):
    """Aggregated concept with the terms and conversations that produced it."""

    concept: str
    related_terms: list[str] = Field(default_factory=list)
    occurrences: int
    conversation_ids: list[str] = Field(default_factory=list)


class WordCloudData(_FrozenModel):
    """Word, phrase and concept views over the analyzed text."""

    words: list[WordEntry] = Field(default_factory=list)
    phrases: list[PhraseEntry] = Field(default_factory=list)
    concepts: list[ConceptEntry] = Field(default_factory=list)
    mode: WordCloudMode = "word"
    total_tokens: int = 0
    unique_tokens: int = 0

    def top_entries(self, limit: int) -> list[WordEntry] | list[PhraseEntry] | list[ConceptEntry]:
        """Return the first `limit` entries of the active mode."""

        if self.mode == "phrase":
            return self.phrases[:limit]
        if self.mode == "concept":
            return self.concepts[:limit]
        return self.words[:limit]

    def words_by_category(self, category: str) -> list[WordEntry]:
        return [word for word in self.words if word.category == category]

    def vocabulary_richness(self) -> float:
        if self.total_tokens == 0:
            return 0.0
        return self.unique_tokens / self.total_tokens


class ConversationReference(_FrozenModel):
    session_id: str
    project_name: str
    timestamp: datetime
    relevance_score: float = Field(default=1.0, ge=0.0, le=1.0)


class SemanticCluster(_FrozenModel):
    """A group of conversations sharing a technology, task type or topic."""

    id: str
    type: ClusterType
    label: str
    keywords: list[str] = Field(default_factory=list)
    conversations: list[ConversationReference] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.conversations)

    def top_keywords(self, limit: int = 10) -> list[str]:
        return self.keywords[:limit]

    def date_range(self) -> tuple[datetime, datetime] | None:
        if not self.conversations:
            return None
        timestamps = [reference.timestamp for reference in self.conversations]
        return min(timestamps), max(timestamps)

    def average_relevance(self) -> float:
        if not self.conversations:
            return 0.0
        return sum(ref.relevance_score for ref in self.conversations) / len(self.conversations)


class ClusterCollection(_FrozenModel):
    clusters: list[SemanticCluster] = Field(default_factory=list)
    type: ClusterType
    total_conversations: int = 0

    def cluster_by_id(self, cluster_id: str) -> SemanticCluster | None:
        return next((cluster for cluster in self.clusters if cluster.id == cluster_id), None)

    def largest(self, limit: int = 5) -> list[SemanticCluster]:
        """Return clusters ordered by size descending; ties keep insertion order."""

        return sorted(self.clusters, key=lambda cluster: cluster.size, reverse=True)[:limit]

    def distribution(self) -> dict[str, int]:
        return {cluster.label: cluster.size for cluster in self.clusters}

    def coverage(self) -> float:
        """Clustered conversation references divided by total conversations."""

        if self.total_conversations <= 0:
            return 0.0
        return sum(cluster.size for cluster in self.clusters) / self.total_conversations


class TimelineDataPoint(_FrozenModel):
    date: date
    keywords: list[str] = Field(default_factory=list)
    tech_stack: list[str] = Field(default_factory=list)
    conversation_count: int = 0
    message_count: int = 0


class ProjectCount(_FrozenModel):
    name: str
    count: int


class ActiveDay(_FrozenModel):
    date: date
    count: int


class ActiveHour(_FrozenModel):
    hour: int = Field(ge=0, le=23)
    count: int


class AnalyticsStatistics(_FrozenModel):
    total_conversations: int = 0
    total_messages: int = 0
    total_words: int = 0
    average_messages_per_conversation: float = 0.0
    average_words_per_message: float = 0.0
    date_range_start: datetime | None = None
    date_range_end: datetime | None = None
    top_projects: list[ProjectCount] = Field(default_factory=list)
    most_active_day: ActiveDay | None = None
    most_active_hour: ActiveHour | None = None


class AnalyticsInsight(_FrozenModel):
    type: Literal["observation", "recommendation", "trend"]
    title: str
    description: str
    importance: Importance
    evidence: list[str] = Field(default_factory=list)


class ContentSelection(_FrozenModel):
    """Conversation selection rules applied before any stage runs."""

    include_conversation_ids: list[str] | None = None
    exclude_conversation_ids: list[str] = Field(default_factory=list)
    include_projects: list[str] | None = None
    exclude_projects: list[str] = Field(default_factory=list)
    date_range_start: datetime | None = None
    date_range_end: datetime | None = None


class PrivacySettings(_FrozenModel):
    level: PrivacyLevel = "high_privacy"
    content_selection: ContentSelection = Field(default_factory=ContentSelection)
    watermark: str = "Generated with talk-analytics"

    @classmethod
    def for_level(cls, level: PrivacyLevel, **overrides: Any) -> PrivacySettings:
        """Build settings for a privacy level with optional selection overrides."""

        selection = ContentSelection(**overrides)
        return cls(level=level, content_selection=selection)


class HeatmapCell(_FrozenModel):
    date: date
    count: int = Field(ge=0)
    level: int = Field(ge=0, le=4)
    day_of_week: int = Field(ge=1, le=7)
    week_number: int


class StreakInfo(_FrozenModel):
    current_streak: int = 0
    longest_streak: int = 0
    current_streak_start: date | None = None
    current_streak_end: date | None = None
    longest_streak_start: date | None = None
    longest_streak_end: date | None = None
    is_active_streak: bool = False


class HeatmapStats(_FrozenModel):
    active_days: int = 0
    max_day_count: int = 0
    max_day_date: date | None = None
    avg_per_active_day: float = 0.0
    most_productive_day_of_week: int = Field(default=1, ge=1, le=7)
    total_conversations: int = 0


class HeatmapData(_FrozenModel):
    cells: list[HeatmapCell] = Field(default_factory=list)
    streak: StreakInfo = Field(default_factory=StreakInfo)
    stats: HeatmapStats = Field(default_factory=HeatmapStats)
    start_date: date
    end_date: date


class Achievement(_FrozenModel):
    id: str
    name: str
    icon: str
    description: str
    criteria: str
    rarity: AchievementRarity
    category: AchievementCategory
    unlocked: bool = False
    progress: float = Field(default=0.0, ge=0.0, le=1.0)


class AchievementResult(_FrozenModel):
    achievements: list[Achievement] = Field(default_factory=list)
    newly_unlocked: list[Achievement] = Field(default_factory=list)
    total_unlocked: int = 0
    total_available: int = 0
    completion_percentage: float = 0.0


class SentencePatternStat(_FrozenModel):
    """Aggregated statistics for one normalized sentence."""

    sentence: str
    normalized: str
    frequency: int = 0
    intent: SentenceIntent = "statement"
    sentiment: SentenceSentiment = "neutral"
    average_length: float = 0.0
    tags: list[str] = Field(default_factory=list)
    conversation_count: int = 0
    sample_contexts: list[str] = Field(default_factory=list, max_length=3)


class SentenceIntentBreakdown(_FrozenModel):
    intent: SentenceIntent
    count: int = 0
    percentage: float = 0.0


class SentenceAnalysisSummary(_FrozenModel):
    total_sentences: int = 0
    unique_sentences: int = 0
    average_sentence_length: float = 0.0
    average_sentences_per_conversation: float = 0.0
    intent_breakdown: list[SentenceIntentBreakdown] = Field(default_factory=list)
    top_sentences: list[SentencePatternStat] = Field(default_factory=list)
    top_questions: list[SentencePatternStat] = Field(default_factory=list)
    troubleshooting_sentences: list[SentencePatternStat] = Field(default_factory=list)


class HourlyActivityEvent(_FrozenModel):
    timestamp: datetime
    source: Literal["history", "conversation"]
    label: str
    project: str | None = None


class HourlyActivityBucket(_FrozenModel):
    hour: int = Field(ge=0, le=23)
    count: int = 0
    label: str


class HourlyFocusWindow(_FrozenModel):
    start_hour: int
    end_hour: int
    span_hours: int
    average_count: float
    label: str


class DominantDay(_FrozenModel):
    day_index: int = Field(ge=0, le=6)
    label: str
    count: int


class HourlyActivityRecommendation(_FrozenModel):
    icon: str
    title: str
    description: str
    tone: Literal["positive", "warning", "neutral"]


class HourlyActivitySummary(_FrozenModel):
    timezone: str
    total_events: int
    buckets: list[HourlyActivityBucket]
    weekday_matrix: list[list[int]]
    peak_hour: HourlyActivityBucket | None = None
    quiet_hour: HourlyActivityBucket | None = None
    focus_window: HourlyFocusWindow | None = None
    night_share: float = 0.0
    early_share: float = 0.0
    weekend_share: float = 0.0
    dominant_day: DominantDay | None = None
    recommendations: list[HourlyActivityRecommendation] = Field(default_factory=list)
    samples: list[HourlyActivityEvent] = Field(default_factory=list)
    source_breakdown: dict[str, int] = Field(default_factory=dict)
    trend_statement: str = ""


class DeveloperPersona(_FrozenModel):
    id: str
    name: str
    emoji: str
    description: str
    traits: list[str] = Field(default_factory=list)
    score: float = 0.0
    mbti: str
    mbti_description: str


class AnalyticsReport(_FrozenModel):
    """Composite engagement report. Later stages build a new instance instead of mutating."""

    word_cloud: WordCloudData
    tech_stack_clusters: ClusterCollection
    task_type_clusters: ClusterCollection
    topic_clusters: ClusterCollection
    timeline: list[TimelineDataPoint] = Field(default_factory=list)
    statistics: AnalyticsStatistics
    insights: list[AnalyticsInsight] = Field(default_factory=list)
    privacy_settings: PrivacySettings
    generated_at: datetime
    version: str = "1.0.0"
    heatmap: HeatmapData | None = None
    achievements: AchievementResult | None = None
    persona: DeveloperPersona | None = None
    sentence_patterns: SentenceAnalysisSummary | None = None
    hourly_activity: HourlyActivitySummary | None = None

    def summary_text(self) -> str:
        """Plain-text overview of totals, top clusters and insight count."""

        stats = self.statistics
        top_topics = ", ".join(cluster.label for cluster in self.topic_clusters.largest(3))
        top_tech = ", ".join(cluster.label for cluster in self.tech_stack_clusters.largest(3))
        start = stats.date_range_start.date().isoformat() if stats.date_range_start else "n/a"
        end = stats.date_range_end.date().isoformat() if stats.date_range_end else "n/a"
        return (
            f"Analyzed {stats.total_conversations} conversations with {stats.total_messages} "
            f"messages and {stats.total_words} words.\n"
            f"Date range: {start} to {end}.\n\n"
            f"Top Topics: {top_topics}\n"
            f"Top Technologies: {top_tech}\n\n"
            f"{len(self.insights)} insights generated."
        )

    def insights_by_importance(self, importance: Importance) -> list[AnalyticsInsight]:
        return [insight for insight in self.insights if insight.importance == importance]

    def key_insights(self) -> list[AnalyticsInsight]:
        return self.insights_by_importance("high")

    def timeline_for_range(self, start: date, end: date) -> list[TimelineDataPoint]:
        return [point for point in self.timeline if start <= point.date <= end]

    def most_used_technologies(self, limit: int = 10) -> list[tuple[str, int]]:
        """Count how many timeline months mention each technology."""

        counts: Counter[str] = Counter()
        for point in self.timeline:
            counts.update(point.tech_stack)
        return counts.most_common(limit)

    def learning_trajectory(self) -> list[dict[str, Any]]:
        """Group timeline keywords by `YYYY-MM`, at most ten topics per month."""

        monthly: dict[str, list[str]] = {}
        for point in self.timeline:
            topics = monthly.setdefault(point.date.strftime("%Y-%m"), [])
            for keyword in point.keywords:
                if keyword not in topics:
                    topics.append(keyword)
        return [
            {"period": period, "topics": topics[:10]}
            for period, topics in sorted(monthly.items())
        ]

    def to_dict(self) -> dict[str, Any]:
        """Render report as a JSON-serializable dictionary."""

        payload = self.model_dump(mode="json")
        payload["privacy_level"] = self.privacy_settings.level
        payload["vocabulary_richness"] = self.word_cloud.vocabulary_richness()
        payload["learning_trajectory"] = self.learning_trajectory()
        payload["top_technologies"] = [
            {"tech": tech, "count": count} for tech, count in self.most_used_technologies(10)
        ]
        return payload
