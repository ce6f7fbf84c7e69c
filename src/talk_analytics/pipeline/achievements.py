"""Rule-based achievement badges."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from talk_analytics.report import (
    Achievement,
    AchievementCategory,
    AchievementRarity,
    AchievementResult,
    AnalyticsReport,
    HeatmapData,
)
from talk_analytics.schemas import Conversation

Metric = Callable[[list[Conversation], AnalyticsReport, HeatmapData], float]

RARITY_COLORS: dict[str, str] = {
    "common": "#10b981",
    "rare": "#3b82f6",
    "epic": "#a855f7",
    "legendary": "#f59e0b",
}
CATEGORY_ICONS: dict[str, str] = {
    "activity": "📊",
    "consistency": "🎯",
    "exploration": "🧭",
    "mastery": "🎓",
    "social": "👥",
}


@dataclass(frozen=True, slots=True)
class AchievementRule:
    """Static badge metadata plus the metric that drives its progress."""

    id: str
    name: str
    icon: str
    description: str
    criteria: str
    rarity: AchievementRarity
    category: AchievementCategory
    threshold: float
    metric: Metric

    def evaluate(
        self,
        conversations: list[Conversation],
        report: AnalyticsReport,
        heatmap: HeatmapData,
    ) -> Achievement:
        value = self.metric(conversations, report, heatmap)
        return Achievement(
            id=self.id,
            name=self.name,
            icon=self.icon,
            description=self.description,
            criteria=self.criteria,
            rarity=self.rarity,
            category=self.category,
            unlocked=value >= self.threshold,
            progress=min(max(value / self.threshold, 0.0), 1.0),
        )


def _conversation_count(conversations: list[Conversation], *_: object) -> float:
    return len(conversations)


def _max_messages(conversations: list[Conversation], *_: object) -> float:
    return max((conv.message_count for conv in conversations), default=0)


def _technology_count(_: list[Conversation], report: AnalyticsReport, *__: object) -> float:
    return len(report.tech_stack_clusters.clusters)


def _current_streak(_: list[Conversation], __: AnalyticsReport, heatmap: HeatmapData) -> float:
    return heatmap.streak.current_streak


def _longest_streak(_: list[Conversation], __: AnalyticsReport, heatmap: HeatmapData) -> float:
    return heatmap.streak.longest_streak


def _active_days(_: list[Conversation], __: AnalyticsReport, heatmap: HeatmapData) -> float:
    return heatmap.stats.active_days


def _max_day_count(_: list[Conversation], __: AnalyticsReport, heatmap: HeatmapData) -> float:
    return heatmap.stats.max_day_count


ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule(
        id="century_club",
        name="Century Club",
        icon="🏆",
        description="Reached 100 conversations with Claude",
        criteria="Have 100+ conversations",
        rarity="legendary",
        category="activity",
        threshold=100,
        metric=_conversation_count,
    ),
    AchievementRule(
        id="week_warrior",
        name="Week Warrior",
        icon="🔥",
        description="Maintained a 7-day conversation streak",
        criteria="Talk to Claude for 7 consecutive days",
        rarity="epic",
        category="consistency",
        threshold=7,
        metric=_current_streak,
    ),
    AchievementRule(
        id="full_stack",
        name="Full-Stack Explorer",
        icon="🌟",
        description="Explored 10+ different technologies",
        criteria="Discuss 10+ different tech stacks",
        rarity="rare",
        category="exploration",
        threshold=10,
        metric=_technology_count,
    ),
    AchievementRule(
        id="knowledge_seeker",
        name="Knowledge Seeker",
        icon="📚",
        description="Had 50+ learning conversations",
        criteria="Reach 50 conversations",
        rarity="rare",
        category="activity",
        threshold=50,
        metric=_conversation_count,
    ),
    AchievementRule(
        id="chatty",
        name="Deep Diver",
        icon="💬",
        description="Had a conversation with 50+ messages",
        criteria="Single conversation with 50+ messages",
        rarity="rare",
        category="activity",
        threshold=50,
        metric=_max_messages,
    ),
    AchievementRule(
        id="marathon",
        name="Marathon Runner",
        icon="🏃",
        description="Achieved a 14-day conversation streak",
        criteria="Maintain 14-day streak",
        rarity="legendary",
        category="consistency",
        threshold=14,
        metric=_longest_streak,
    ),
    AchievementRule(
        id="tech_enthusiast",
        name="Tech Enthusiast",
        icon="💻",
        description="Explored 5+ different technologies",
        criteria="Discuss 5+ tech stacks",
        rarity="common",
        category="exploration",
        threshold=5,
        metric=_technology_count,
    ),
    AchievementRule(
        id="consistent",
        name="Consistent Learner",
        icon="📅",
        description="Active on 30+ different days",
        criteria="Be active on 30+ days",
        rarity="rare",
        category="consistency",
        threshold=30,
        metric=_active_days,
    ),
    AchievementRule(
        id="first_steps",
        name="First Steps",
        icon="👣",
        description="Started your journey with Claude",
        criteria="Have your first conversation",
        rarity="common",
        category="activity",
        threshold=1,
        metric=_conversation_count,
    ),
    AchievementRule(
        id="productive_day",
        name="Productive Day",
        icon="⚡",
        description="Had 5+ conversations in a single day",
        criteria="5+ conversations in one day",
        rarity="common",
        category="activity",
        threshold=5,
        metric=_max_day_count,
    ),
)


def check_achievements(
    conversations: list[Conversation],
    report: AnalyticsReport,
    heatmap: HeatmapData,
    rules: tuple[AchievementRule, ...] = ACHIEVEMENT_RULES,
) -> AchievementResult:
    """Evaluate every rule against the current snapshots.

    Nothing is persisted between runs, so every unlocked badge is reported as newly
    unlocked.
    """

    achievements = [rule.evaluate(conversations, report, heatmap) for rule in rules]
    unlocked = [achievement for achievement in achievements if achievement.unlocked]
    total = len(achievements)
    return AchievementResult(
        achievements=achievements,
        newly_unlocked=list(unlocked),
        total_unlocked=len(unlocked),
        total_available=total,
        completion_percentage=(len(unlocked) / total * 100) if total else 0.0,
    )


def rarity_color(rarity: str) -> str:
    return RARITY_COLORS.get(rarity, RARITY_COLORS["common"])


def category_icon(category: str) -> str:
    return CATEGORY_ICONS.get(category, CATEGORY_ICONS["activity"])


def format_progress(progress: float) -> str:
    return f"{round(progress * 100)}%"
