"""Report orchestration: privacy filter, analysis stages and report assembly."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime

from talk_analytics.config import Settings
from talk_analytics.pipeline.achievements import check_achievements
from talk_analytics.pipeline.clustering import (
    cluster_by_task_type,
    cluster_by_tech_stack,
    cluster_by_topic,
    detect_technologies,
)
from talk_analytics.pipeline.concepts import ConceptConfig, extract_concepts
from talk_analytics.pipeline.heatmap import generate_heatmap
from talk_analytics.pipeline.hourly_activity import HourlyActivityAnalyzer
from talk_analytics.pipeline.persona import PersonaClassifier, classify_persona
from talk_analytics.pipeline.sentence_insights import SentenceInsightEnhancer
from talk_analytics.pipeline.sentence_patterns import SentencePatternAnalyzer
from talk_analytics.pipeline.text_analysis import extract_technical_terms, month_key
from talk_analytics.pipeline.word_frequency import FrequencyConfig, analyze_frequencies
from talk_analytics.report import (
    AchievementResult,
    ActiveDay,
    ActiveHour,
    AnalyticsInsight,
    AnalyticsReport,
    AnalyticsStatistics,
    ClusterCollection,
    DeveloperPersona,
    HeatmapData,
    HourlyActivitySummary,
    PrivacySettings,
    ProjectCount,
    SentenceAnalysisSummary,
    TimelineDataPoint,
    WordCloudData,
)
from talk_analytics.schemas import Conversation

logger = logging.getLogger(__name__)

TIMELINE_KEYWORD_LIMIT = 10
TIMELINE_TECH_LIMIT = 10
TOP_PROJECT_LIMIT = 5
MIN_TIMELINE_MONTHS_FOR_TREND = 3
VOCABULARY_RICHNESS_THRESHOLD = 0.3


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are read as UTC."""

    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def filter_conversations(
    conversations: list[Conversation],
    privacy_settings: PrivacySettings,
) -> list[Conversation]:
    """Apply include/exclude ID and project lists plus an inclusive start-time range."""

    selection = privacy_settings.content_selection
    filtered = list(conversations)
    if selection.include_conversation_ids is not None:
        include_ids = set(selection.include_conversation_ids)
        filtered = [conv for conv in filtered if conv.session_id in include_ids]
    if selection.exclude_conversation_ids:
        exclude_ids = set(selection.exclude_conversation_ids)
        filtered = [conv for conv in filtered if conv.session_id not in exclude_ids]
    if selection.include_projects is not None:
        include_projects = set(selection.include_projects)
        filtered = [conv for conv in filtered if conv.project_name in include_projects]
    if selection.exclude_projects:
        exclude_projects = set(selection.exclude_projects)
        filtered = [conv for conv in filtered if conv.project_name not in exclude_projects]
    if selection.date_range_start is not None:
        start = _as_utc(selection.date_range_start)
        filtered = [conv for conv in filtered if _as_utc(conv.started_at) >= start]
    if selection.date_range_end is not None:
        end = _as_utc(selection.date_range_end)
        filtered = [conv for conv in filtered if _as_utc(conv.started_at) <= end]
    return filtered


def build_timeline(conversations: list[Conversation]) -> list[TimelineDataPoint]:
    """Group conversations by start month, oldest month first."""

    by_month: dict[date, list[Conversation]] = {}
    for conversation in conversations:
        by_month.setdefault(month_key(conversation.started_at), []).append(conversation)

    timeline: list[TimelineDataPoint] = []
    for month, members in sorted(by_month.items()):
        combined = " ".join(
            message.content for member in members for message in member.messages if message.content
        )
        tech_stack: dict[str, None] = {}
        for member in members:
            detection = detect_technologies(member.searchable_content())
            for tech in detection.languages + detection.frameworks + detection.tools:
                tech_stack.setdefault(tech, None)
        timeline.append(
            TimelineDataPoint(
                date=month,
                keywords=extract_technical_terms(combined)[:TIMELINE_KEYWORD_LIMIT],
                tech_stack=list(tech_stack)[:TIMELINE_TECH_LIMIT],
                conversation_count=len(members),
                message_count=sum(member.message_count for member in members),
            )
        )
    return timeline


def _first_max(counts: Counter) -> tuple[object, int] | None:
    best: tuple[object, int] | None = None
    for key, count in counts.items():
        if best is None or count > best[1]:
            best = (key, count)
    return best


def calculate_statistics(conversations: list[Conversation]) -> AnalyticsStatistics:
    total_messages = sum(conv.message_count for conv in conversations)
    total_words = sum(conv.word_count() for conv in conversations)

    project_counts: Counter[str] = Counter(conv.project_name for conv in conversations)
    top_projects = sorted(project_counts.items(), key=lambda item: item[1], reverse=True)

    day_counts: Counter[date] = Counter(conv.started_at.date() for conv in conversations)
    hour_counts: Counter[int] = Counter(conv.started_at.hour for conv in conversations)
    busiest_day = _first_max(day_counts)
    busiest_hour = _first_max(hour_counts)
    starts = [conv.started_at for conv in conversations]

    return AnalyticsStatistics(
        total_conversations=len(conversations),
        total_messages=total_messages,
        total_words=total_words,
        average_messages_per_conversation=total_messages / len(conversations) if conversations else 0.0,
        average_words_per_message=total_words / total_messages if total_messages else 0.0,
        date_range_start=min(starts, key=_as_utc) if starts else None,
        date_range_end=max(starts, key=_as_utc) if starts else None,
        top_projects=[
            ProjectCount(name=name, count=count) for name, count in top_projects[:TOP_PROJECT_LIMIT]
        ],
        most_active_day=ActiveDay(date=busiest_day[0], count=busiest_day[1]) if busiest_day else None,
        most_active_hour=ActiveHour(hour=busiest_hour[0], count=busiest_hour[1]) if busiest_hour else None,
    )


def generate_insights(
    conversations: list[Conversation],
    word_cloud: WordCloudData,
    tech_clusters: ClusterCollection,
    timeline: list[TimelineDataPoint],
) -> list[AnalyticsInsight]:
    insights: list[AnalyticsInsight] = []

    largest = tech_clusters.largest(1)
    if largest:
        top = largest[0]
        insights.append(
            AnalyticsInsight(
                type="observation",
                title="Primary Technology Focus",
                description=(
                    f"Your most discussed technology is {top.label} with {top.size} conversations."
                ),
                importance="high",
                evidence=[top.label],
            )
        )

    if len(timeline) >= MIN_TIMELINE_MONTHS_FOR_TREND:
        earliest = set(timeline[0].tech_stack)
        new_tech = [tech for tech in timeline[-1].tech_stack if tech not in earliest]
        if new_tech:
            insights.append(
                AnalyticsInsight(
                    type="trend",
                    title="Technology Evolution",
                    description=f"You've recently started exploring: {', '.join(new_tech[:3])}",
                    importance="medium",
                    evidence=new_tech,
                )
            )

    richness = word_cloud.vocabulary_richness()
    if richness > VOCABULARY_RICHNESS_THRESHOLD:
        insights.append(
            AnalyticsInsight(
                type="observation",
                title="Diverse Vocabulary",
                description=f"You use a rich vocabulary with {richness * 100:.1f}% unique words.",
                importance="low",
                evidence=[f"Vocabulary richness: {richness:.3f}"],
            )
        )

    if timeline:
        months = len(timeline)
        insights.append(
            AnalyticsInsight(
                type="observation",
                title="Activity Pattern",
                description=f"You average {len(conversations) / months:.1f} conversations per month.",
                importance="low",
                evidence=[f"{len(conversations)} conversations over {months} months"],
            )
        )

    return insights


@dataclass(frozen=True)
class ReportParts:
    """Stage outputs gathered before the report is assembled."""

    word_cloud: WordCloudData
    tech_stack_clusters: ClusterCollection
    task_type_clusters: ClusterCollection
    topic_clusters: ClusterCollection
    timeline: list[TimelineDataPoint]
    statistics: AnalyticsStatistics
    insights: list[AnalyticsInsight]
    privacy_settings: PrivacySettings
    version: str
    heatmap: HeatmapData | None = None
    sentence_patterns: SentenceAnalysisSummary | None = None
    hourly_activity: HourlyActivitySummary | None = None
    achievements: AchievementResult | None = None
    persona: DeveloperPersona | None = None

    def build(self) -> AnalyticsReport:
        return AnalyticsReport(
            word_cloud=self.word_cloud,
            tech_stack_clusters=self.tech_stack_clusters,
            task_type_clusters=self.task_type_clusters,
            topic_clusters=self.topic_clusters,
            timeline=self.timeline,
            statistics=self.statistics,
            insights=self.insights,
            privacy_settings=self.privacy_settings,
            generated_at=datetime.now(UTC),
            version=self.version,
            heatmap=self.heatmap,
            achievements=self.achievements,
            persona=self.persona,
            sentence_patterns=self.sentence_patterns,
            hourly_activity=self.hourly_activity,
        )


class AnalyticsPipeline:
    """Runs every analysis stage over one conversation list and assembles the report."""

    def __init__(
        self,
        *,
        frequency_config: FrequencyConfig | None = None,
        concept_config: ConceptConfig | None = None,
        hourly_analyzer: HourlyActivityAnalyzer | None = None,
        sentence_analyzer: SentencePatternAnalyzer | None = None,
        sentence_enhancer: SentenceInsightEnhancer | None = None,
        persona_classifier: PersonaClassifier = classify_persona,
        heatmap_days: int = 365,
        heatmap_end_date: date | None = None,
        report_version: str = "1.0.0",
    ) -> None:
        self.frequency_config = frequency_config or FrequencyConfig()
        self.concept_config = concept_config or ConceptConfig()
        self.hourly_analyzer = hourly_analyzer or HourlyActivityAnalyzer()
        self.sentence_analyzer = sentence_analyzer or SentencePatternAnalyzer()
        self.sentence_enhancer = sentence_enhancer or SentenceInsightEnhancer()
        self.persona_classifier = persona_classifier
        self.heatmap_days = heatmap_days
        self.heatmap_end_date = heatmap_end_date
        self.report_version = report_version

    @classmethod
    def from_settings(cls, settings: Settings) -> AnalyticsPipeline:
        """Wire every stage from runtime settings."""

        return cls(
            frequency_config=FrequencyConfig(
                min_frequency=settings.word_min_frequency,
                max_words=settings.word_max_words,
            ),
            concept_config=ConceptConfig(
                min_occurrences=settings.concept_min_occurrences,
                max_concepts=settings.concept_max_concepts,
                spacy_model=settings.concept_spacy_model,
            ),
            hourly_analyzer=HourlyActivityAnalyzer.from_settings(settings),
            sentence_enhancer=SentenceInsightEnhancer.from_settings(settings),
            heatmap_days=settings.heatmap_days,
            report_version=settings.report_version,
        )

    def build_word_cloud(self, conversations: list[Conversation]) -> WordCloudData:
        word_cloud = analyze_frequencies(conversations, self.frequency_config)
        concepts = extract_concepts(conversations, self.concept_config)
        return word_cloud.model_copy(update={"concepts": concepts})

    def generate_report(
        self,
        conversations: list[Conversation],
        privacy_settings: PrivacySettings | None = None,
    ) -> AnalyticsReport:
        """Generate a complete report for the selected conversations.

        Optional inputs (history log, remote model) degrade to reduced data; only
        programming errors such as a missing conversation list raise.
        """

        if conversations is None:
            raise TypeError("conversations must be a list, got None.")
        settings = privacy_settings or PrivacySettings.for_level("high_privacy")

        selected = filter_conversations(conversations, settings)
        logger.info(
            "Generating report for %d of %d conversations (privacy=%s).",
            len(selected),
            len(conversations),
            settings.level,
        )

        word_cloud = self.build_word_cloud(selected)
        tech_clusters = cluster_by_tech_stack(selected)
        task_clusters = cluster_by_task_type(selected)
        topic_clusters = cluster_by_topic(selected, word_cloud.concepts)
        timeline = build_timeline(selected)
        statistics = calculate_statistics(selected)
        hourly_activity = self.hourly_analyzer.analyze(selected)
        insights = generate_insights(selected, word_cloud, tech_clusters, timeline)
        heatmap = generate_heatmap(selected, end_date=self.heatmap_end_date, days=self.heatmap_days)

        heuristic_sentences = self.sentence_analyzer.analyze(selected)
        sentence_patterns = self.sentence_enhancer.enhance_analysis(
            selected,
            self.sentence_analyzer,
            heuristic_sentences,
        )

        parts = ReportParts(
            word_cloud=word_cloud,
            tech_stack_clusters=tech_clusters,
            task_type_clusters=task_clusters,
            topic_clusters=topic_clusters,
            timeline=timeline,
            statistics=statistics,
            insights=insights,
            privacy_settings=settings,
            version=self.report_version,
            heatmap=heatmap,
            sentence_patterns=sentence_patterns,
            hourly_activity=hourly_activity,
        )
        provisional = parts.build()

        achievements = check_achievements(selected, provisional, heatmap)
        persona = self.persona_classifier(selected, provisional, heatmap)
        logger.info(
            "Report ready: %d/%d achievements unlocked, persona=%s.",
            achievements.total_unlocked,
            achievements.total_available,
            persona.id,
        )
        return replace(parts, achievements=achievements, persona=persona).build()
