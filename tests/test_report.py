"""Tests for report model helpers."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from talk_analytics.report import (
    AnalyticsInsight,
    AnalyticsReport,
    AnalyticsStatistics,
    ClusterCollection,
    ConversationReference,
    PhraseEntry,
    PrivacySettings,
    SemanticCluster,
    TimelineDataPoint,
    WordCloudData,
    WordEntry,
)


def _reference(session_id: str, day: int = 1) -> ConversationReference:
    return ConversationReference(
        session_id=session_id,
        project_name="shop",
        timestamp=datetime(2024, 1, day, 12, 0),
    )


def _cluster(cluster_id: str, size: int) -> SemanticCluster:
    return SemanticCluster(
        id=cluster_id,
        type="tech_stack",
        label=f"Language: {cluster_id}",
        conversations=[_reference(f"{cluster_id}-{index}", index + 1) for index in range(size)],
    )


def _report(**overrides) -> AnalyticsReport:
    values = {
        "word_cloud": WordCloudData(),
        "tech_stack_clusters": ClusterCollection(type="tech_stack"),
        "task_type_clusters": ClusterCollection(type="task_type"),
        "topic_clusters": ClusterCollection(type="topic"),
        "statistics": AnalyticsStatistics(),
        "privacy_settings": PrivacySettings(),
        "generated_at": datetime(2024, 6, 10, tzinfo=UTC),
    }
    values.update(overrides)
    return AnalyticsReport(**values)


class TestClusterCollection:
    def test_largest_keeps_insertion_order_for_ties(self):
        collection = ClusterCollection(
            type="tech_stack",
            clusters=[_cluster("a", 1), _cluster("b", 3), _cluster("c", 1), _cluster("d", 3)],
            total_conversations=10,
        )
        assert [cluster.id for cluster in collection.largest(3)] == ["b", "d", "a"]
        assert collection.coverage() == 0.8
        assert collection.distribution()["Language: b"] == 3
        assert collection.cluster_by_id("c").size == 1
        assert collection.cluster_by_id("zzz") is None

    def test_coverage_without_conversations(self):
        assert ClusterCollection(type="topic").coverage() == 0.0

    def test_cluster_helpers(self):
        cluster = _cluster("a", 3)
        assert cluster.date_range() == (datetime(2024, 1, 1, 12, 0), datetime(2024, 1, 3, 12, 0))
        assert cluster.average_relevance() == 1.0
        assert _cluster("empty", 0).date_range() is None


def test_models_are_frozen():
    entry = WordEntry(text="docker", value=2, weight=0.4)
    with pytest.raises(ValidationError):
        entry.value = 3


def test_phrase_contexts_are_capped():
    with pytest.raises(ValidationError):
        PhraseEntry(text="unit tests", frequency=2, contexts=["a", "b", "c", "d"])


def test_word_cloud_top_entries_follow_mode():
    cloud = WordCloudData(
        words=[WordEntry(text="docker", value=2, weight=0.4, category="tool")],
        phrases=[PhraseEntry(text="unit tests", frequency=2)],
        mode="phrase",
    )
    assert cloud.top_entries(5) == cloud.phrases
    assert cloud.words_by_category("tool")[0].text == "docker"


def test_privacy_for_level():
    settings = PrivacySettings.for_level("balanced", exclude_projects=["secret"])
    assert settings.level == "balanced"
    assert settings.content_selection.exclude_projects == ["secret"]
    assert settings.content_selection.include_projects is None


class TestAnalyticsReport:
    def test_summary_text(self):
        report = _report(
            tech_stack_clusters=ClusterCollection(type="tech_stack", clusters=[_cluster("Python", 2)]),
            statistics=AnalyticsStatistics(
                total_conversations=2,
                total_messages=4,
                total_words=40,
                date_range_start=datetime(2024, 1, 1, 9),
                date_range_end=datetime(2024, 1, 3, 9),
            ),
            insights=[
                AnalyticsInsight(type="observation", title="t", description="d", importance="high")
            ],
        )
        text = report.summary_text()
        assert text.startswith("Analyzed 2 conversations with 4 messages and 40 words.")
        assert "Date range: 2024-01-01 to 2024-01-03." in text
        assert "Top Technologies: Language: Python" in text
        assert text.endswith("1 insights generated.")
        assert len(report.key_insights()) == 1

    def test_timeline_helpers(self):
        report = _report(
            timeline=[
                TimelineDataPoint(date=date(2024, 1, 1), keywords=["python", "api"], tech_stack=["Python"]),
                TimelineDataPoint(date=date(2024, 2, 1), keywords=["rust"], tech_stack=["Python", "Rust"]),
            ]
        )
        assert report.most_used_technologies() == [("Python", 2), ("Rust", 1)]
        assert report.learning_trajectory() == [
            {"period": "2024-01", "topics": ["python", "api"]},
            {"period": "2024-02", "topics": ["rust"]},
        ]
        assert len(report.timeline_for_range(date(2024, 2, 1), date(2024, 12, 31))) == 1

    def test_to_dict_adds_derived_fields(self):
        payload = _report().to_dict()
        assert payload["privacy_level"] == "high_privacy"
        assert payload["vocabulary_richness"] == 0.0
        assert payload["learning_trajectory"] == []
        assert payload["top_technologies"] == []
        assert payload["heatmap"] is None
        assert payload["generated_at"].startswith("2024-06-10")
