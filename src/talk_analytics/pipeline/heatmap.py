"""Daily activity heatmap with streak detection."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from talk_analytics.report import HeatmapCell, HeatmapData, HeatmapStats, StreakInfo
from talk_analytics.schemas import Conversation

DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class HeatmapError(ValueError):
    """Raised when heatmap parameters are invalid."""


@dataclass(frozen=True, slots=True)
class _Run:
    start: date
    end: date
    length: int


def activity_level(count: int, max_count: int) -> int:
    """Map a day count to 0..4 by its ratio to the busiest day."""

    if count == 0:
        return 0
    ratio = count / max(max_count, 1)
    if ratio > 0.75:
        return 4
    if ratio > 0.50:
        return 3
    if ratio > 0.25:
        return 2
    return 1


def _day_of(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def _build_cells(counts: Counter[date], start: date, days: int) -> list[HeatmapCell]:
    max_count = max(counts.values(), default=0)
    cells: list[HeatmapCell] = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        count = counts.get(day, 0)
        _, iso_week, iso_weekday = day.isocalendar()
        cells.append(
            HeatmapCell(
                date=day,
                count=count,
                level=activity_level(count, max_count),
                day_of_week=iso_weekday,
                week_number=iso_week,
            )
        )
    return cells


def _find_runs(cells: list[HeatmapCell]) -> list[_Run]:
    runs: list[_Run] = []
    run_start: date | None = None
    length = 0
    previous: date | None = None
    for cell in cells:
        if cell.count > 0:
            if run_start is None:
                run_start = cell.date
                length = 0
            length += 1
        elif run_start is not None and previous is not None:
            runs.append(_Run(start=run_start, end=previous, length=length))
            run_start = None
        previous = cell.date

    if run_start is not None and previous is not None:
        runs.append(_Run(start=run_start, end=previous, length=length))
    return runs


def calculate_streaks(cells: list[HeatmapCell], end_date: date) -> StreakInfo:
    """Compute longest and current streaks.

    The current streak is the last run of active days, counted only when it ends on
    `end_date` or the day before; it is active only when it ends on `end_date`.
    """

    runs = _find_runs(cells)
    longest: _Run | None = None
    for run in runs:
        if longest is None or run.length > longest.length:
            longest = run

    current: _Run | None = None
    if runs and runs[-1].end in (end_date, end_date - timedelta(days=1)):
        current = runs[-1]

    return StreakInfo(
        current_streak=current.length if current else 0,
        longest_streak=longest.length if longest else 0,
        current_streak_start=current.start if current else None,
        current_streak_end=current.end if current else None,
        longest_streak_start=longest.start if longest else None,
        longest_streak_end=longest.end if longest else None,
        is_active_streak=current is not None and current.end == end_date,
    )


def calculate_stats(cells: list[HeatmapCell]) -> HeatmapStats:
    active = [cell for cell in cells if cell.count > 0]
    total = sum(cell.count for cell in cells)

    max_day_count = 0
    max_day_date: date | None = None
    weekday_totals: dict[int, int] = {}
    for cell in cells:
        if cell.count > max_day_count:
            max_day_count = cell.count
            max_day_date = cell.date
        if cell.count > 0:
            weekday_totals[cell.day_of_week] = weekday_totals.get(cell.day_of_week, 0) + cell.count

    most_productive = 1
    best_total = 0
    for weekday, weekday_total in weekday_totals.items():
        if weekday_total > best_total:
            best_total = weekday_total
            most_productive = weekday

    return HeatmapStats(
        active_days=len(active),
        max_day_count=max_day_count,
        max_day_date=max_day_date,
        avg_per_active_day=total / len(active) if active else 0.0,
        most_productive_day_of_week=most_productive,
        total_conversations=total,
    )


def generate_heatmap(
    conversations: list[Conversation],
    end_date: date | datetime | None = None,
    days: int = 365,
) -> HeatmapData:
    """Build a dense one-cell-per-day heatmap ending at `end_date` (default today).

    Conversations are bucketed by the calendar date of `updated_at`; those outside the
    inclusive `[end_date - days + 1, end_date]` window are ignored.
    """

    if days <= 0:
        raise HeatmapError(f"days must be positive, got {days}.")

    end = _day_of(end_date) if end_date is not None else date.today()
    start = end - timedelta(days=days - 1)

    counts: Counter[date] = Counter()
    for conversation in conversations:
        day = conversation.updated_at.date()
        if start <= day <= end:
            counts[day] += 1

    cells = _build_cells(counts, start, days)
    return HeatmapData(
        cells=cells,
        streak=calculate_streaks(cells, end),
        stats=calculate_stats(cells),
        start_date=start,
        end_date=end,
    )


def day_of_week_name(day_of_week: int) -> str:
    """Short name for an ISO weekday (1 = Monday); unknown values map to Monday."""

    if 1 <= day_of_week <= 7:
        return DAY_NAMES[day_of_week - 1]
    return DAY_NAMES[0]


def month_name(month: int) -> str:
    """Short name for a calendar month (1 = January); unknown values map to January."""

    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return MONTH_NAMES[0]
