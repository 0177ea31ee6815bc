"""
Tests for the bounded audit logs and the model audit mixin.
"""

import json
import threading

import pytest

from furfolio_core.audit import (
    DEFAULT_AUDIT_CAPACITY,
    AuditEntry,
    AuditLog,
    configure_audit_logs,
    default_audit_capacity,
    get_audit_log,
    list_audit_logs,
    reset_audit_logs,
)
from furfolio_core.models import InventoryItem

from .conftest import InventoryItemFactory


class TestAuditLog:
    """Test cases for AuditLog."""

    def test_record_entry(self):
        """Test recording a text entry."""
        log = AuditLog("test")

        entry = log.record("Added item", user="maria", subject_id="abc", source="ui")

        assert isinstance(entry, AuditEntry)
        assert entry.user == "maria"
        assert entry.subject_id == "abc"
        assert entry.context == {"source": "ui"}
        assert len(log) == 1

    def test_capacity_evicts_oldest(self):
        """Test the oldest entry is dropped past capacity."""
        log = AuditLog("test", capacity=3)

        for i in range(5):
            log.record(f"entry {i}")

        assert len(log) == 3
        assert [e.entry for e in log.entries()] == ["entry 2", "entry 3", "entry 4"]

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            AuditLog("test", capacity=0)

    def test_recent_returns_newest_in_order(self):
        """Test recent() returns the newest entries oldest first."""
        log = AuditLog("test")
        for i in range(5):
            log.record(f"entry {i}")

        assert [e.entry for e in log.recent(2)] == ["entry 3", "entry 4"]
        assert len(log.recent(50)) == 5
        assert log.recent(0) == []
        assert log.recent(-1) == []

    def test_export_json_empty(self):
        """Test an empty log exports as an empty array."""
        assert AuditLog("test").export_json() == "[]"

    def test_export_json(self):
        log = AuditLog("test")
        log.record("Used 1 unit(s)", user="sam")

        data = json.loads(log.export_json())

        assert data[0]["entry"] == "Used 1 unit(s)"
        assert data[0]["user"] == "sam"
        assert "timestamp" in data[0]

    def test_entry_round_trip(self):
        entry = AuditEntry(entry="Checked in", user="kim")

        restored = AuditEntry.from_dict(entry.to_dict())

        assert restored == entry

    def test_display(self):
        entry = AuditEntry(entry="Checked in", user="kim")

        assert entry.display.endswith("] Checked in by kim")

    def test_concurrent_appends(self):
        """Test the log stays bounded under concurrent writers."""
        log = AuditLog("test", capacity=50)

        def writer():
            for i in range(100):
                log.record(f"entry {i}")

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(log) == 50


class TestAuditRegistry:
    """Test the process-wide registry."""

    def test_get_audit_log_returns_same_instance(self):
        first = get_audit_log("registry_test", capacity=5)
        second = get_audit_log("registry_test", capacity=500)

        assert first is second
        assert second.capacity == 5

    def test_list_and_reset(self):
        get_audit_log("b_log")
        get_audit_log("a_log")

        assert list_audit_logs() == ["a_log", "b_log"]

        reset_audit_logs()

        assert list_audit_logs() == []

    def test_configured_default_capacity(self):
        """Test logs created after configuring use the new default."""
        existing = get_audit_log("before")

        configure_audit_logs(25)

        assert default_audit_capacity() == 25
        assert get_audit_log("after").capacity == 25
        assert get_audit_log("explicit", capacity=4).capacity == 4
        assert existing.capacity == DEFAULT_AUDIT_CAPACITY

    def test_configure_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            configure_audit_logs(0)

        assert default_audit_capacity() == DEFAULT_AUDIT_CAPACITY

    def test_reset_restores_default_capacity(self):
        configure_audit_logs(10)

        reset_audit_logs()

        assert default_audit_capacity() == DEFAULT_AUDIT_CAPACITY


class TestAuditableMixin:
    """Test per-record history on models."""

    def test_entries_filtered_by_record(self):
        """Test each record only sees its own entries."""
        first = InventoryItemFactory.build()
        second = InventoryItemFactory.build()

        first.add_audit("first change")
        second.add_audit("second change")
        first.add_audit("another change")

        assert [e.entry for e in first.audit_entries()] == [
            "first change",
            "another change",
        ]
        assert len(InventoryItem.audit_log()) == 3

    def test_recent_audit_entries(self):
        item = InventoryItemFactory.build()
        for i in range(5):
            item.add_audit(f"change {i}")

        assert [e.entry for e in item.recent_audit_entries()] == [
            "change 2",
            "change 3",
            "change 4",
        ]
        assert item.recent_audit_entries(0) == []

    def test_export_audit_json_empty(self):
        assert InventoryItemFactory.build().export_audit_json() == "[]"
