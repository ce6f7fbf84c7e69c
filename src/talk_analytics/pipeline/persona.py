"""Developer persona classification from activity and technology signals."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from talk_analytics.report import AnalyticsReport, DeveloperPersona, HeatmapData
from talk_analytics.schemas import Conversation

PersonaClassifier = Callable[[list[Conversation], AnalyticsReport, HeatmapData], DeveloperPersona]

# Used when no hourly activity profile is available.
DEFAULT_NIGHT_SHARE = 0.2
DEFAULT_EARLY_SHARE = 0.1
CONSISTENCY_WINDOW_DAYS = 90
MAX_TECH_CLUSTERS = 100


@dataclass(frozen=True, slots=True)
class ActivityPattern:
    peak_day_of_week: int
    weekend_ratio: float
    night_share: float
    early_share: float


@dataclass(frozen=True, slots=True)
class LearningPattern:
    breadth: int
    depth: float
    consistency: float
    exploration_rate: float


PERSONAS: tuple[DeveloperPersona, ...] = (
    DeveloperPersona(
        id="night_owl_full_stack",
        name="Night Owl Full-Stack",
        emoji="🦉",
        description="You code when the world sleeps, exploring everything from frontend to backend",
        traits=[
            "Most active after 10 PM",
            "Explores multiple technologies",
            "Weekend coding sessions",
            "Full-stack curiosity",
        ],
        mbti="ENTP",
        mbti_description=(
            "The Innovator: you thrive on exploring new possibilities and debating technical approaches"
        ),
    ),
    DeveloperPersona(
        id="early_bird_architect",
        name="Early Bird Architect",
        emoji="🌅",
        description="You start early, plan carefully, and build with intention",
        traits=[
            "Peak productivity before noon",
            "Deep focus on architecture",
            "Weekday routine",
            "Quality over quantity",
        ],
        mbti="INTJ",
        mbti_description="The Architect: you excel at strategic planning and building robust systems",
    ),
    DeveloperPersona(
        id="weekend_warrior",
        name="Weekend Warrior",
        emoji="⚔️",
        description="You save your coding adventures for the weekend",
        traits=[
            "Saturday/Sunday focus",
            "Long coding sessions",
            "Side project enthusiast",
            "Work-life balance champion",
        ],
        mbti="ENFP",
        mbti_description="The Champion: you pursue passion projects with infectious enthusiasm",
    ),
    DeveloperPersona(
        id="consistent_learner",
        name="Consistent Learner",
        emoji="📚",
        description="Every day is a learning day. Your consistency is impressive",
        traits=[
            "Daily conversation habit",
            "Long streaks",
            "Steady progress",
            "Learning mindset",
        ],
        mbti="ISFJ",
        mbti_description="The Defender: you learn methodically and build knowledge brick by brick",
    ),
    DeveloperPersona(
        id="tech_explorer",
        name="Tech Explorer",
        emoji="🧭",
        description="You love discovering new technologies and frameworks",
        traits=[
            "High technology variety",
            "Frequent tech switching",
            "Curiosity-driven",
            "Broad knowledge base",
        ],
        mbti="ENTP",
        mbti_description="The Visionary: you see connections across technologies and love the new",
    ),
    DeveloperPersona(
        id="deep_specialist",
        name="Deep Specialist",
        emoji="🎯",
        description="You dive deep into specific technologies, mastering them thoroughly",
        traits=[
            "Focused technology stack",
            "Many conversations per tech",
            "Expert-level depth",
            "Specialized knowledge",
        ],
        mbti="ISTJ",
        mbti_description="The Logistician: you master details and build deep expertise through focus",
    ),
    DeveloperPersona(
        id="sprint_coder",
        name="Sprint Coder",
        emoji="⚡",
        description="You work in intense bursts, crushing multiple conversations in a day",
        traits=[
            "High-intensity days",
            "Burst productivity",
            "Fast iteration",
            "Sprint mentality",
        ],
        mbti="ESTP",
        mbti_description="The Entrepreneur: you take action fast and ship quickly",
    ),
    DeveloperPersona(
        id="steady_builder",
        name="Steady Builder",
        emoji="🏗️",
        description="You build consistently, making steady progress day by day",
        traits=[
            "Regular cadence",
            "Moderate daily volume",
            "Sustainable pace",
            "Long-term mindset",
        ],
        mbti="ISFJ",
        mbti_description=(
            "The Protector: you build sustainable systems through reliable, steady effort"
        ),
    ),
)


def analyze_activity_pattern(report: AnalyticsReport, heatmap: HeatmapData) -> ActivityPattern:
    """Weekend ratio counts active heatmap days; hour shares come from the hourly profile."""

    weekend_days = sum(1 for cell in heatmap.cells if cell.count > 0 and cell.day_of_week >= 6)
    weekday_days = sum(1 for cell in heatmap.cells if cell.count > 0 and cell.day_of_week < 6)
    active = weekend_days + weekday_days
    hourly = report.hourly_activity
    return ActivityPattern(
        peak_day_of_week=heatmap.stats.most_productive_day_of_week,
        weekend_ratio=weekend_days / active if active else 0.0,
        night_share=hourly.night_share if hourly is not None else DEFAULT_NIGHT_SHARE,
        early_share=hourly.early_share if hourly is not None else DEFAULT_EARLY_SHARE,
    )


def analyze_learning_pattern(
    conversations: list[Conversation],
    report: AnalyticsReport,
    heatmap: HeatmapData,
) -> LearningPattern:
    tech_count = len(report.tech_stack_clusters.largest(MAX_TECH_CLUSTERS))
    conversation_count = len(conversations)
    return LearningPattern(
        breadth=tech_count,
        depth=conversation_count / (tech_count or 1),
        consistency=min(heatmap.stats.active_days / CONSISTENCY_WINDOW_DAYS, 1.0),
        exploration_rate=tech_count / conversation_count if conversation_count else 0.0,
    )


def score_persona(
    persona_id: str,
    activity: ActivityPattern,
    learning: LearningPattern,
    heatmap: HeatmapData,
) -> float:
    streak = heatmap.streak
    stats = heatmap.stats
    if persona_id == "night_owl_full_stack":
        return (
            activity.night_share * 3
            + (2 if learning.breadth > 8 else 0)
            + (1 if activity.weekend_ratio > 0.3 else 0)
        )
    if persona_id == "early_bird_architect":
        return (
            activity.early_share * 3
            + (2 if learning.depth > 3 else 0)
            + (1 if activity.peak_day_of_week <= 5 else 0)
        )
    if persona_id == "weekend_warrior":
        return activity.weekend_ratio * 5 + (1 if streak.longest_streak > 7 else 0)
    if persona_id == "consistent_learner":
        return learning.consistency * 4 + (2 if streak.current_streak > 5 else 0)
    if persona_id == "tech_explorer":
        return learning.exploration_rate * 5 + (2 if learning.breadth > 10 else 0)
    if persona_id == "deep_specialist":
        return (4 if learning.depth > 5 else 0) + (2 if learning.breadth < 5 else 0)
    if persona_id == "sprint_coder":
        return (3 if stats.max_day_count >= 5 else 0) + (2 if stats.active_days < 30 else 0)
    if persona_id == "steady_builder":
        moderate = 2 <= stats.avg_per_active_day <= 4
        return learning.consistency * 3 + (2 if moderate else 0)
    return 0.0


def classify_persona(
    conversations: list[Conversation],
    report: AnalyticsReport,
    heatmap: HeatmapData,
) -> DeveloperPersona:
    """Score every persona and return the best match; the earlier persona wins ties."""

    activity = analyze_activity_pattern(report, heatmap)
    learning = analyze_learning_pattern(conversations, report, heatmap)

    scored = [
        persona.model_copy(
            update={"score": float(score_persona(persona.id, activity, learning, heatmap))}
        )
        for persona in PERSONAS
    ]
    return max(scored, key=lambda persona: persona.score)
