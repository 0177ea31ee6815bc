"""
Tests for user settings persistence.
"""

import json

import pytest

from furfolio_core.exceptions import ConfigurationException
from furfolio_core.services import (
    InMemorySettingsStore,
    JSONFileSettingsStore,
    SettingsManager,
)
from furfolio_core.utils.config import RemoteConfig


@pytest.fixture
def store():
    return InMemorySettingsStore()


@pytest.fixture
def settings(store):
    return SettingsManager(store=store, remote_config=RemoteConfig({}))


class TestSettingsDefaults:
    """Test cases for default values."""

    def test_defaults(self, settings):
        assert settings.dark_mode_lock is False
        assert settings.font_size_scale == 1.0
        assert settings.default_reminder_offset == 60
        assert settings.loyalty_threshold == 5
        assert settings.reward_thresholds == [100.0, 250.0, 500.0]
        assert settings.loyalty_points_per_tier == [1, 2, 3]

    def test_remote_defaults(self, store):
        remote = RemoteConfig({"loyalty_threshold": 8, "default_reminder_offset": 30})

        settings = SettingsManager(store=store, remote_config=remote)

        assert settings.loyalty_threshold == 8
        assert settings.default_reminder_offset == 30

    def test_remote_defaults_from_environment(self, monkeypatch):
        monkeypatch.setenv("FURFOLIO_REMOTE_LOYALTY_THRESHOLD", "9")

        settings = SettingsManager()

        assert settings.loyalty_threshold == 9
        assert settings.default_reminder_offset == 60

    def test_stored_zero_falls_back(self):
        store = InMemorySettingsStore(
            {"settings.loyalty_threshold": 0, "settings.font_size_scale": 0.0}
        )

        settings = SettingsManager(store=store, remote_config=RemoteConfig({}))

        assert settings.loyalty_threshold == 5
        assert settings.font_size_scale == 1.0

    def test_wrong_type_falls_back(self):
        store = InMemorySettingsStore(
            {
                "settings.default_reminder_offset": "soon",
                "settings.reward_thresholds": ["a", "b"],
            }
        )

        settings = SettingsManager(store=store, remote_config=RemoteConfig({}))

        assert settings.default_reminder_offset == 60
        assert settings.reward_thresholds == [100.0, 250.0, 500.0]


class TestSettingsUpdates:
    """Test cases for setters and reset."""

    def test_setters_persist_with_prefix(self, settings, store):
        settings.dark_mode_lock = True
        settings.loyalty_threshold = 10
        settings.reward_thresholds = [50, 150]

        assert store.get("settings.dark_mode_lock") is True
        assert store.get("settings.loyalty_threshold") == 10
        assert settings.reward_thresholds == [50.0, 150.0]

    def test_reset_to_defaults(self, settings, store):
        settings.font_size_scale = 1.4
        settings.loyalty_points_per_tier = [2, 4, 6]

        settings.reset_to_defaults()

        assert store.get("settings.font_size_scale") is None
        assert settings.font_size_scale == 1.0
        assert settings.loyalty_points_per_tier == [1, 2, 3]

    def test_as_dict(self, settings):
        settings.default_reminder_offset = 120

        values = settings.as_dict()

        assert values["default_reminder_offset"] == 120
        assert set(values) == {
            "dark_mode_lock",
            "font_size_scale",
            "default_reminder_offset",
            "loyalty_threshold",
            "reward_thresholds",
            "loyalty_points_per_tier",
        }


class TestJSONFileSettingsStore:
    """Test cases for the file-backed store."""

    def test_missing_file_starts_empty(self, tmp_path):
        store = JSONFileSettingsStore(tmp_path / "settings.json")

        assert store.get("settings.loyalty_threshold") is None

    def test_values_survive_reload(self, tmp_path):
        path = tmp_path / "nested" / "settings.json"
        settings = SettingsManager(
            store=JSONFileSettingsStore(path), remote_config=RemoteConfig({})
        )
        settings.loyalty_threshold = 7

        reloaded = SettingsManager(
            store=JSONFileSettingsStore(path), remote_config=RemoteConfig({})
        )

        assert reloaded.loyalty_threshold == 7
        assert json.loads(path.read_text())["settings.loyalty_threshold"] == 7

    def test_delete(self, tmp_path):
        path = tmp_path / "settings.json"
        store = JSONFileSettingsStore(path)
        store.set("settings.dark_mode_lock", True)

        store.delete("settings.dark_mode_lock")
        store.delete("settings.unknown")

        assert json.loads(path.read_text()) == {}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationException):
            JSONFileSettingsStore(path)

    def test_non_object_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigurationException) as exc_info:
            JSONFileSettingsStore(path)

        assert "JSON object" in exc_info.value.message
