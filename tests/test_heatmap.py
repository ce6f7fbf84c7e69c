"""Tests for the activity heatmap and streak detection."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest

from talk_analytics.pipeline.heatmap import (
    HeatmapError,
    activity_level,
    day_of_week_name,
    generate_heatmap,
    month_name,
)
from talk_analytics.schemas import Conversation

END = date(2024, 6, 10)


def _conversations_on(days: list[date]) -> list[Conversation]:
    return [
        Conversation(
            session_id=f"conv-{index}",
            started_at=datetime.combine(day, time(10, 0)),
        )
        for index, day in enumerate(days)
    ]


class TestGenerateHeatmap:
    def test_five_day_streak_ending_today(self):
        days = [END - timedelta(days=offset) for offset in range(5) for _ in range(2)]
        heatmap = generate_heatmap(_conversations_on(days), end_date=END)

        assert len(heatmap.cells) == 365
        assert heatmap.cells[-1].date == END
        assert heatmap.start_date == END - timedelta(days=364)
        assert sum(cell.count for cell in heatmap.cells) == 10
        assert heatmap.streak.current_streak == 5
        assert heatmap.streak.longest_streak == 5
        assert heatmap.streak.is_active_streak is True
        assert heatmap.streak.current_streak_start == END - timedelta(days=4)
        assert heatmap.streak.current_streak_end == END
        assert heatmap.stats.active_days == 5
        assert heatmap.stats.max_day_count == 2
        assert heatmap.stats.avg_per_active_day == 2.0
        assert heatmap.cells[-1].level == 4

    def test_streak_ending_yesterday_is_current_but_inactive(self):
        heatmap = generate_heatmap(_conversations_on([END - timedelta(days=1)]), end_date=END)
        assert heatmap.streak.current_streak == 1
        assert heatmap.streak.is_active_streak is False

    def test_old_activity_has_no_current_streak(self):
        days = [END - timedelta(days=offset) for offset in (2, 3, 4, 10)]
        heatmap = generate_heatmap(_conversations_on(days), end_date=END)
        assert heatmap.streak.current_streak == 0
        assert heatmap.streak.longest_streak == 3
        assert heatmap.streak.longest_streak_start == END - timedelta(days=4)
        assert heatmap.streak.longest_streak_end == END - timedelta(days=2)
        assert heatmap.streak.longest_streak >= heatmap.streak.current_streak

    def test_conversations_outside_window_are_ignored(self):
        days = [END - timedelta(days=30), END + timedelta(days=1), END]
        heatmap = generate_heatmap(_conversations_on(days), end_date=END, days=7)
        assert len(heatmap.cells) == 7
        assert heatmap.stats.total_conversations == 1

    def test_empty_input(self):
        heatmap = generate_heatmap([], end_date=END, days=30)
        assert len(heatmap.cells) == 30
        assert all(cell.count == 0 and cell.level == 0 for cell in heatmap.cells)
        assert heatmap.streak.current_streak == 0
        assert heatmap.streak.longest_streak == 0
        assert heatmap.stats.max_day_date is None
        assert heatmap.stats.most_productive_day_of_week == 1

    def test_rejects_non_positive_days(self):
        with pytest.raises(HeatmapError, match="days must be positive"):
            generate_heatmap([], end_date=END, days=0)

    def test_cells_carry_iso_weekday(self):
        heatmap = generate_heatmap([], end_date=END, days=7)
        # 2024-06-10 is a Monday.
        assert heatmap.cells[-1].day_of_week == 1
        assert heatmap.cells[0].day_of_week == 2


def test_activity_level_thresholds():
    assert activity_level(0, 10) == 0
    assert activity_level(2, 10) == 1
    assert activity_level(3, 10) == 2
    assert activity_level(6, 10) == 3
    assert activity_level(8, 10) == 4


def test_name_helpers():
    assert day_of_week_name(7) == "Sun"
    assert day_of_week_name(9) == "Mon"
    assert month_name(12) == "Dec"
    assert month_name(0) == "Jan"
