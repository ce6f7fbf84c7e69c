"""Tests for the bounded history log reader."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path

from talk_analytics.io import parse_history_timestamp, read_history_events

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def _millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _write_history(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestParseHistoryTimestamp:
    def test_epoch_millis_number_and_string(self):
        expected = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)
        assert parse_history_timestamp(_millis(expected)) == expected
        assert parse_history_timestamp(str(_millis(expected))) == expected

    def test_iso_string(self):
        parsed = parse_history_timestamp("2024-05-01T08:30:00Z")
        assert parsed == datetime(2024, 5, 1, 8, 30, tzinfo=UTC)

    def test_rejects_unusable_values(self):
        assert parse_history_timestamp(None) is None
        assert parse_history_timestamp(True) is None
        assert parse_history_timestamp("") is None
        assert parse_history_timestamp("yesterday") is None
        assert parse_history_timestamp({"ts": 1}) is None


class TestReadHistoryEvents:
    def test_missing_path_returns_empty(self, tmp_path: Path):
        assert read_history_events(None) == []
        assert read_history_events(tmp_path / "history.jsonl") == []

    def test_reads_labels_and_projects(self, tmp_path: Path):
        recent = NOW - timedelta(days=1)
        path = _write_history(
            tmp_path / "history.jsonl",
            [
                json.dumps({"timestamp": _millis(recent), "display": "fix tests\nmore", "project": "/w/api"}),
                json.dumps({"ts": str(_millis(recent)), "display": 42}),
            ],
        )
        events = read_history_events(path, now=NOW)
        assert [event.label for event in events] == ["fix tests", "Claude activity"]
        assert events[0].project == "/w/api"
        assert events[1].project is None
        assert all(event.source == "history" for event in events)

    def test_skips_old_and_malformed_lines(self, tmp_path: Path, caplog):
        recent = NOW - timedelta(days=2)
        stale = NOW - timedelta(days=400)
        path = _write_history(
            tmp_path / "history.jsonl",
            [
                "{broken",
                json.dumps({"timestamp": _millis(stale)}),
                json.dumps(["not", "an", "object"]),
                json.dumps({"display": "no timestamp"}),
                json.dumps({"timestamp": _millis(recent)}),
            ],
        )
        with caplog.at_level(logging.DEBUG, logger="talk_analytics.io.history"):
            events = read_history_events(path, now=NOW)
        assert len(events) == 1
        assert "malformed history line 1" in caplog.text

    def test_lookback_has_a_floor_of_seven_days(self, tmp_path: Path):
        five_days_ago = NOW - timedelta(days=5)
        path = _write_history(
            tmp_path / "history.jsonl",
            [json.dumps({"timestamp": _millis(five_days_ago)})],
        )
        assert len(read_history_events(path, lookback_days=1, now=NOW)) == 1

    def test_buffer_evicts_oldest_records(self, tmp_path: Path):
        start = NOW - timedelta(days=1)
        lines = [
            json.dumps({"timestamp": _millis(start + timedelta(seconds=index)), "display": str(index)})
            for index in range(5003)
        ]
        path = _write_history(tmp_path / "history.jsonl", lines)
        events = read_history_events(path, max_records=10, now=NOW)
        assert len(events) == 5000
        assert events[0].label == "3"
        assert events[-1].label == "5002"

    def test_invalid_utf8_line_is_skipped(self, tmp_path: Path):
        recent = NOW - timedelta(days=1)
        path = tmp_path / "history.jsonl"
        path.write_bytes(
            json.dumps({"timestamp": _millis(recent), "display": "before"}).encode("utf-8")
            + b"\n{\"display\": \"caf\xe9\", \"timestamp\": " + str(_millis(recent)).encode("ascii") + b"}\n"
            + json.dumps({"timestamp": _millis(recent), "display": "after"}).encode("utf-8")
            + b"\n"
        )
        events = read_history_events(path, now=NOW)
        assert [event.label for event in events] == ["before", "after"]

    def test_read_error_keeps_earlier_events(self, tmp_path: Path, monkeypatch, caplog):
        recent = NOW - timedelta(days=1)
        path = _write_history(tmp_path / "history.jsonl", ["{}"])
        first = json.dumps({"timestamp": _millis(recent), "display": "kept"}).encode("utf-8") + b"\n"

        class _BrokenHandle:
            def __enter__(self):
                return self

            def __exit__(self, *exc_info):
                return False

            def __iter__(self):
                yield first
                raise OSError("disk went away")

        monkeypatch.setattr(Path, "open", lambda self, *args, **kwargs: _BrokenHandle())
        with caplog.at_level(logging.WARNING, logger="talk_analytics.io.history"):
            events = read_history_events(path, now=NOW)

        assert [event.label for event in events] == ["kept"]
        assert "Failed to read history log" in caplog.text
