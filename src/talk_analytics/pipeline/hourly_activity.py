"""Hour-of-day and weekday activity profile from conversations and the history log."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import numpy as np

from talk_analytics.config import Settings
from talk_analytics.io import read_history_events
from talk_analytics.report import (
    DominantDay,
    HourlyActivityBucket,
    HourlyActivityEvent,
    HourlyActivityRecommendation,
    HourlyActivitySummary,
    HourlyFocusWindow,
)
from talk_analytics.schemas import Conversation

logger = logging.getLogger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
FOCUS_SPAN_HOURS = 3
SAMPLE_LIMIT = 8
MAX_RECOMMENDATIONS = 4
MIN_RECOMMENDATIONS = 3
NIGHT_OWL_SHARE = 0.35
EARLY_BIRD_SHARE = 0.25
WEEKEND_SHARE = 0.2
LOCAL_TIMEZONE_LABEL = "Local Time"


def format_hour(hour: int) -> str:
    """Render an hour of day on a 12-hour clock, e.g. `9 AM` or `12 PM`."""

    suffix = "AM" if hour % 24 < 12 else "PM"
    display = hour % 12 or 12
    return f"{display} {suffix}"


def is_night_hour(hour: int) -> bool:
    return hour >= 22 or hour < 6


def is_early_hour(hour: int) -> bool:
    return 5 <= hour < 9


def conversation_events(conversations: list[Conversation]) -> list[HourlyActivityEvent]:
    return [
        HourlyActivityEvent(
            timestamp=conversation.started_at,
            source="conversation",
            label=f"Conversation • {conversation.project_name}",
            project=conversation.project_name,
        )
        for conversation in conversations
    ]


def _resolve_timezone(name: str) -> tzinfo | None:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using local time.", name)
        return None


def focus_window(hour_counts: np.ndarray, span: int = FOCUS_SPAN_HOURS) -> HourlyFocusWindow | None:
    """Densest circular `span`-hour window; the earliest start wins ties."""

    window_sums = sum(np.roll(hour_counts, -offset) for offset in range(span))
    start = int(np.argmax(window_sums))
    best = int(window_sums[start])
    if best <= 0:
        return None
    end = (start + span) % 24
    return HourlyFocusWindow(
        start_hour=start,
        end_hour=end,
        span_hours=span,
        average_count=best / span,
        label=f"{format_hour(start)} - {format_hour(end)}",
    )


def dominant_day(matrix: np.ndarray) -> DominantDay | None:
    totals = matrix.sum(axis=1)
    index = int(np.argmax(totals))
    count = int(totals[index])
    if count == 0:
        return None
    return DominantDay(day_index=index, label=WEEKDAY_LABELS[index], count=count)


def build_recommendations(
    *,
    night_share: float,
    early_share: float,
    weekend_share: float,
    peak_hour: HourlyActivityBucket | None,
    window: HourlyFocusWindow | None,
    day: DominantDay | None,
) -> list[HourlyActivityRecommendation]:
    recommendations: list[HourlyActivityRecommendation] = []

    if window is not None:
        recommendations.append(
            HourlyActivityRecommendation(
                icon="🎯",
                title="Protect your prime window",
                description=(
                    f"Your {window.label} block captures the densest activity. "
                    "Guard it for deep work or showcase posts."
                ),
                tone="positive",
            )
        )

    if night_share > NIGHT_OWL_SHARE:
        recommendations.append(
            HourlyActivityRecommendation(
                icon="🌙",
                title="Night-owl surge",
                description=(
                    "Over a third of your activity happens after 10 PM. Great for stealth mode, "
                    "but consider syncing with teammates during daylight."
                ),
                tone="warning",
            )
        )
    elif early_share > EARLY_BIRD_SHARE:
        recommendations.append(
            HourlyActivityRecommendation(
                icon="🌅",
                title="Sunrise builder",
                description=(
                    "You log meaningful sessions before 9 AM. "
                    "Keep teeing up decisions early while inboxes stay quiet."
                ),
                tone="positive",
            )
        )

    if weekend_share > WEEKEND_SHARE:
        recommendations.append(
            HourlyActivityRecommendation(
                icon="📆",
                title="Weekend warrior",
                description=(
                    "Weekends carry a big share of your check-ins. Highlight that hustle, "
                    "but remember to broadcast wins on weekday peaks for visibility."
                ),
                tone="warning",
            )
        )

    if day is not None and peak_hour is not None:
        recommendations.append(
            HourlyActivityRecommendation(
                icon="📣",
                title="Broadcast timing",
                description=(
                    f"Your loudest spike lands {day.label} around {peak_hour.label}. "
                    "Mirror big launches there for max reach."
                ),
                tone="neutral",
            )
        )

    if len(recommendations) < MIN_RECOMMENDATIONS:
        recommendations.append(
            HourlyActivityRecommendation(
                icon="⚙️",
                title="Maintain rhythm",
                description=(
                    "Hourly activity is evenly spread. "
                    "Keep instrumenting logs so we can surface sharper pulses over time."
                ),
                tone="neutral",
            )
        )

    return recommendations[:MAX_RECOMMENDATIONS]


def trend_statement(peak_hour: HourlyActivityBucket | None, day: DominantDay | None) -> str:
    if peak_hour is None:
        return "Activity is warming up. Log a few more sessions to unlock hourly insights."
    day_text = f"{day.label}s" if day is not None else "weekdays"
    return f"Peak energy hits around {peak_hour.label} on {day_text}."


class HourlyActivityAnalyzer:
    """Builds an hourly activity profile; returns None when there are no events."""

    def __init__(
        self,
        *,
        history_path: Path | None = None,
        lookback_days: int = 120,
        max_history_records: int = 20000,
        timezone: str = "",
        now: datetime | None = None,
    ) -> None:
        self.history_path = history_path
        self.lookback_days = lookback_days
        self.max_history_records = max_history_records
        self._tz = _resolve_timezone(timezone)
        self.timezone_label = timezone if self._tz is not None else self._local_timezone_label()
        self._now = now

    @classmethod
    def from_settings(cls, settings: Settings) -> HourlyActivityAnalyzer:
        return cls(
            history_path=settings.resolved_history_path(),
            lookback_days=settings.hourly_lookback_days,
            max_history_records=settings.hourly_max_history_records,
            timezone=settings.hourly_timezone,
        )

    @staticmethod
    def _local_timezone_label() -> str:
        return datetime.now().astimezone().tzname() or LOCAL_TIMEZONE_LABEL

    def _localize(self, timestamp: datetime) -> datetime:
        return timestamp.astimezone(self._tz)

    def load_history_events(self) -> list[HourlyActivityEvent]:
        return read_history_events(
            self.history_path,
            lookback_days=self.lookback_days,
            max_records=self.max_history_records,
            now=self._now,
        )

    def analyze(self, conversations: list[Conversation]) -> HourlyActivitySummary | None:
        events = conversation_events(conversations) + self.load_history_events()
        if not events:
            logger.info("No conversation or history events; skipping hourly activity.")
            return None
        return self.build_summary(events)

    def build_summary(self, events: list[HourlyActivityEvent]) -> HourlyActivitySummary:
        total = len(events)
        matrix = np.zeros((7, 24), dtype=np.int64)
        source_breakdown: Counter[str] = Counter()
        night = early = weekend = 0

        for event in events:
            local = self._localize(event.timestamp)
            hour = local.hour
            weekday = local.weekday()
            matrix[weekday, hour] += 1
            source_breakdown[event.source] += 1
            night += is_night_hour(hour)
            early += is_early_hour(hour)
            weekend += weekday >= 5

        hour_counts = matrix.sum(axis=0)
        buckets = [
            HourlyActivityBucket(hour=hour, count=int(count), label=format_hour(hour))
            for hour, count in enumerate(hour_counts)
        ]
        peak_hour = buckets[int(np.argmax(hour_counts))]
        quiet_hour = buckets[int(np.argmin(hour_counts))]
        window = focus_window(hour_counts)
        day = dominant_day(matrix)
        night_share = night / total
        early_share = early / total
        weekend_share = weekend / total

        samples = sorted(
            events, key=lambda event: self._localize(event.timestamp), reverse=True
        )[:SAMPLE_LIMIT]
        return HourlyActivitySummary(
            timezone=self.timezone_label,
            total_events=total,
            buckets=buckets,
            weekday_matrix=matrix.tolist(),
            peak_hour=peak_hour,
            quiet_hour=quiet_hour,
            focus_window=window,
            night_share=night_share,
            early_share=early_share,
            weekend_share=weekend_share,
            dominant_day=day,
            recommendations=build_recommendations(
                night_share=night_share,
                early_share=early_share,
                weekend_share=weekend_share,
                peak_hour=peak_hour,
                window=window,
                day=day,
            ),
            samples=samples,
            source_breakdown=dict(source_breakdown),
            trend_statement=trend_statement(peak_hour, day),
        )
