"""
tests/test_activity_log.py -- Unit tests for ActivityLog and AlertBoard.

Covers:
  - Log is capped at 50 entries and keeps the most recent ones in order
  - Chronological and newest-first views over the same entries
  - Entry ids are 9-character lowercase alphanumerics; timestamps are HH:MM:SS
  - clear() empties the log
  - AlertBoard holds at most one alert; clear_errors() leaves success alerts
"""

from __future__ import annotations

import re

import pytest

from core.activity_log import ActivityLog
from core.alerts import AlertBoard
from core.models import AlertType, LogType


class TestActivityLog:
    def test_cap_keeps_most_recent_fifty_in_order(self):
        log = ActivityLog()
        for i in range(60):
            log.append(f"event {i}")
        messages = [e.message for e in log.all()]
        assert len(messages) == 50
        assert messages == [f"event {i}" for i in range(10, 60)]

    def test_newest_first_is_reverse_of_all(self):
        log = ActivityLog()
        for i in range(3):
            log.append(f"event {i}")
        assert [e.message for e in log.newest_first()] == ["event 2", "event 1", "event 0"]
        assert log.newest_first() == list(reversed(log.all()))

    def test_append_returns_entry_with_id_and_timestamp(self):
        entry = ActivityLog().append("hello", LogType.warning)
        assert re.fullmatch(r"[a-z0-9]{9}", entry.id)
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", entry.timestamp)
        assert entry.type is LogType.warning

    def test_default_type_is_info(self):
        assert ActivityLog().append("hello").type is LogType.info

    def test_string_type_is_coerced(self):
        assert ActivityLog().append("done", "success").type is LogType.success

    def test_clear(self):
        log = ActivityLog()
        log.append("x")
        log.clear()
        assert len(log) == 0
        assert log.all() == []

    def test_custom_capacity(self):
        log = ActivityLog(capacity=2)
        for i in range(5):
            log.append(str(i))
        assert [e.message for e in log.all()] == ["3", "4"]

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            ActivityLog(capacity=0)

    def test_entries_mirrored_to_python_logger(self, caplog):
        with caplog.at_level("INFO", logger="flapper.activity"):
            ActivityLog().append("Successfully applied mitigation: Disable SMBv1", LogType.success)
        assert "Successfully applied mitigation: Disable SMBv1" in caplog.text


class TestAlertBoard:
    def test_starts_empty(self):
        assert AlertBoard().current is None

    def test_new_alert_replaces_previous(self):
        board = AlertBoard()
        board.error("first")
        board.show(AlertType.success, "second")
        assert board.current.type is AlertType.success
        assert board.current.message == "second"

    def test_dismiss(self):
        board = AlertBoard()
        board.error("boom")
        board.dismiss()
        assert board.current is None

    def test_clear_errors_only_drops_errors(self):
        board = AlertBoard()
        board.show(AlertType.success, "ok")
        board.clear_errors()
        assert board.current is not None
        board.error("bad")
        board.clear_errors()
        assert board.current is None
