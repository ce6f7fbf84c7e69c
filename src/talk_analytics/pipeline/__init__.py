"""Pipeline stage implementations."""

from talk_analytics.pipeline.achievements import (
    ACHIEVEMENT_RULES,
    AchievementRule,
    check_achievements,
)
from talk_analytics.pipeline.clustering import (
    cluster_by_task_type,
    cluster_by_tech_stack,
    cluster_by_topic,
    detect_technologies,
)
from talk_analytics.pipeline.concepts import (
    ConceptConfig,
    ConceptExtractionError,
    categorize_concepts,
    extract_concepts,
)
from talk_analytics.pipeline.heatmap import HeatmapError, generate_heatmap
from talk_analytics.pipeline.hourly_activity import HourlyActivityAnalyzer
from talk_analytics.pipeline.persona import PERSONAS, classify_persona
from talk_analytics.pipeline.run_pipeline import (
    AnalyticsPipeline,
    ReportParts,
    build_timeline,
    calculate_statistics,
    filter_conversations,
    generate_insights,
)
from talk_analytics.pipeline.sentence_insights import (
    SentenceInsightEnhancer,
    merge_with_fallback,
    normalize_summary_payload,
)
from talk_analytics.pipeline.sentence_patterns import SentencePatternAnalyzer
from talk_analytics.pipeline.word_frequency import FrequencyConfig, analyze_frequencies

__all__ = [
    "ACHIEVEMENT_RULES",
    "AchievementRule",
    "AnalyticsPipeline",
    "ConceptConfig",
    "ConceptExtractionError",
    "FrequencyConfig",
    "HeatmapError",
    "HourlyActivityAnalyzer",
    "PERSONAS",
    "ReportParts",
    "SentenceInsightEnhancer",
    "SentencePatternAnalyzer",
    "analyze_frequencies",
    "build_timeline",
    "calculate_statistics",
    "categorize_concepts",
    "check_achievements",
    "classify_persona",
    "cluster_by_task_type",
    "cluster_by_tech_stack",
    "cluster_by_topic",
    "detect_technologies",
    "extract_concepts",
    "filter_conversations",
    "generate_heatmap",
    "generate_insights",
    "merge_with_fallback",
    "normalize_summary_payload",
]
