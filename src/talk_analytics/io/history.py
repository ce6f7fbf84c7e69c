"""Bounded streaming reader for the assistant's `history.jsonl` activity log."""

from __future__ import annotations

import json
import logging
from collections import deque
from datetime import UTC, datetime, timedelta
from pathlib import Path

from talk_analytics.report import HourlyActivityEvent

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LABEL = "Claude activity"
MIN_LOOKBACK_DAYS = 7
MIN_HISTORY_RECORDS = 5000


def parse_history_timestamp(raw: object) -> datetime | None:
    """Parse epoch milliseconds (number or numeric string) or an ISO-8601 string.

    Returns an aware datetime, or None when the value cannot be interpreted.
    """

    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int | float):
        millis = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            millis = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                return None
            return parsed if parsed.tzinfo else parsed.astimezone()
    else:
        return None

    try:
        return datetime.fromtimestamp(millis / 1000.0, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _event_from_line(line: str, cutoff: datetime) -> HourlyActivityEvent | None:
    payload = json.loads(line)
    if not isinstance(payload, dict):
        return None

    raw_timestamp = payload.get("timestamp")
    if raw_timestamp is None:
        raw_timestamp = payload.get("ts")
    timestamp = parse_history_timestamp(raw_timestamp)
    if timestamp is None or timestamp < cutoff:
        return None

    display = payload.get("display")
    label = display.split("\n", 1)[0].strip() if isinstance(display, str) else ""
    project = payload.get("project")
    return HourlyActivityEvent(
        timestamp=timestamp,
        source="history",
        label=label or DEFAULT_HISTORY_LABEL,
        project=project if isinstance(project, str) else None,
    )


def read_history_events(
    path: str | Path | None,
    *,
    lookback_days: int = 120,
    max_records: int = 20000,
    now: datetime | None = None,
) -> list[HourlyActivityEvent]:
    """Stream history events newer than the lookback cutoff.

    At most `max_records` events are retained; once the buffer is full the oldest
    buffered record is evicted. Malformed lines are skipped individually, and a read
    failure returns whatever was collected before it.
    """

    if path is None:
        return []
    history_path = Path(path)
    if not history_path.exists():
        return []

    effective_lookback = max(MIN_LOOKBACK_DAYS, lookback_days)
    capacity = max(MIN_HISTORY_RECORDS, max_records)
    reference = now or datetime.now(UTC)
    cutoff = reference - timedelta(days=effective_lookback)

    events: deque[HourlyActivityEvent] = deque(maxlen=capacity)
    skipped = 0
    try:
        with history_path.open("rb") as handle:
            for line_number, raw in enumerate(handle, start=1):
                if not raw.strip():
                    continue
                try:
                    event = _event_from_line(raw.decode("utf-8").strip(), cutoff)
                except (json.JSONDecodeError, ValueError, TypeError):
                    skipped += 1
                    logger.debug("Skipping malformed history line %d in %s", line_number, history_path)
                    continue
                if event is not None:
                    events.append(event)
    except OSError:
        logger.warning("Failed to read history log: %s", history_path, exc_info=True)

    if skipped:
        logger.debug("Skipped %d malformed history lines in %s", skipped, history_path)
    return list(events)
