"""
Tests for the crash reporter.
"""

import json

from furfolio_core.services import CrashReporter
from furfolio_core.services.crash_reporter import TYPE_DATA_CORRUPTION, TYPE_ERROR


class TestCrashReporter:
    """Test cases for CrashReporter."""

    def test_log_crash(self):
        reporter = CrashReporter()

        report = reporter.log_crash("App closed unexpectedly", device_info="iPad")

        assert report.type == "Crash"
        assert report.device_info == "iPad"
        assert not report.is_resolved
        assert report.summary == "Crash: App closed unexpectedly (Unresolved)"
        assert len(reporter) == 1

    def test_default_device_info(self):
        report = CrashReporter().log_crash("boom")

        assert "Python" in report.device_info

    def test_log_exception_keeps_traceback(self):
        reporter = CrashReporter()
        try:
            raise KeyError("owner_id")
        except KeyError as e:
            report = reporter.log_exception(e)

        assert report.type == TYPE_ERROR
        assert report.message == "'owner_id'"
        assert "KeyError" in report.stack_trace
        assert "Traceback" in report.stack_trace

    def test_capacity(self):
        reporter = CrashReporter(capacity=3)
        for i in range(5):
            reporter.log_crash(f"crash {i}")

        assert [r.message for r in reporter.all()] == ["crash 2", "crash 3", "crash 4"]
        assert [r.message for r in reporter.recent(2)] == ["crash 3", "crash 4"]

    def test_mark_resolved(self):
        reporter = CrashReporter()
        first = reporter.log_crash("first", report_type=TYPE_DATA_CORRUPTION)
        reporter.log_crash("second")

        assert reporter.mark_resolved(first.id) is True
        assert reporter.mark_resolved("missing") is False
        assert [r.message for r in reporter.unresolved()] == ["second"]
        assert first.summary == "Data Corruption: first (Resolved)"

    def test_export_and_clear(self):
        reporter = CrashReporter()
        assert reporter.export_json() == "[]"

        reporter.log_crash("boom", device_info="test")
        data = json.loads(reporter.export_json())
        assert data[0]["message"] == "boom"
        assert data[0]["is_resolved"] is False

        reporter.clear()
        assert len(reporter) == 0
