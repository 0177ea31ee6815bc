"""
User settings persistence.

``SettingsManager`` exposes typed properties over a key/value store. Numeric
settings stored as zero (or with the wrong type) read back as their
defaults; the reminder offset and loyalty threshold defaults come from
remote configuration.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from ..exceptions import ConfigurationException
from ..utils.config import RemoteConfig, RemoteConfigKey

logger = logging.getLogger(__name__)

KEY_PREFIX = "settings."
DARK_MODE_LOCK = "dark_mode_lock"
FONT_SIZE_SCALE = "font_size_scale"
DEFAULT_REMINDER_OFFSET = "default_reminder_offset"
LOYALTY_THRESHOLD = "loyalty_threshold"
REWARD_THRESHOLDS = "reward_thresholds"
LOYALTY_POINTS_PER_TIER = "loyalty_points_per_tier"

SETTING_NAMES = (
    DARK_MODE_LOCK,
    FONT_SIZE_SCALE,
    DEFAULT_REMINDER_OFFSET,
    LOYALTY_THRESHOLD,
    REWARD_THRESHOLDS,
    LOYALTY_POINTS_PER_TIER,
)

DEFAULT_FONT_SIZE_SCALE = 1.0
DEFAULT_REWARD_THRESHOLDS = [100.0, 250.0, 500.0]
DEFAULT_LOYALTY_POINTS_PER_TIER = [1, 2, 3]


class SettingsStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemorySettingsStore:
    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JSONFileSettingsStore:
    """
    Settings persisted as one JSON object in a file.

    The file is read once on creation and rewritten on every change. A
    missing file starts empty.

    Raises:
        ConfigurationException: If the file exists but is not a JSON object
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._values: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationException(
                f"Settings file is corrupt: {e}", config_key=str(self.path)
            )
        if not isinstance(data, dict):
            raise ConfigurationException(
                "Settings file must contain a JSON object", config_key=str(self.path)
            )
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2), encoding="utf-8")

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value
            self._save()

    def delete(self, key: str) -> None:
        with self._lock:
            if key in self._values:
                del self._values[key]
                self._save()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SettingsManager:
    """
    Typed access to the user's settings.

    Args:
        store: Backing store, in-memory by default
        remote_config: Source of the reminder offset and loyalty threshold
            defaults, read from ``FURFOLIO_REMOTE_*`` variables when omitted
    """

    def __init__(
        self,
        store: Optional[SettingsStore] = None,
        remote_config: Optional[RemoteConfig] = None,
    ):
        self.store = store if store is not None else InMemorySettingsStore()
        self.remote_config = (
            remote_config if remote_config is not None else RemoteConfig()
        )
        logger.info(f"Loaded settings: {self.as_dict()}")

    def _get(self, name: str, default: Any = None) -> Any:
        return self.store.get(KEY_PREFIX + name, default)

    def _set(self, name: str, value: Any) -> None:
        self.store.set(KEY_PREFIX + name, value)
        logger.info(f"{name} updated to {value}")

    def _non_zero_or_default(self, name: str, default: Union[int, float]) -> Any:
        value = self._get(name)
        if not _is_number(value) or value == 0:
            return default
        return value

    def _list_or_default(self, name: str, default: List[Any]) -> List[Any]:
        value = self._get(name)
        if not isinstance(value, list) or not all(_is_number(v) for v in value):
            return list(default)
        return list(value)

    @property
    def dark_mode_lock(self) -> bool:
        return bool(self._get(DARK_MODE_LOCK, False))

    @dark_mode_lock.setter
    def dark_mode_lock(self, value: bool) -> None:
        self._set(DARK_MODE_LOCK, bool(value))

    @property
    def font_size_scale(self) -> float:
        return float(self._non_zero_or_default(FONT_SIZE_SCALE, DEFAULT_FONT_SIZE_SCALE))

    @font_size_scale.setter
    def font_size_scale(self, value: float) -> None:
        self._set(FONT_SIZE_SCALE, float(value))

    @property
    def default_reminder_offset(self) -> int:
        """Minutes before an appointment that its reminder fires."""
        default = self.remote_config.get_int(RemoteConfigKey.DEFAULT_REMINDER_OFFSET)
        return int(self._non_zero_or_default(DEFAULT_REMINDER_OFFSET, default))

    @default_reminder_offset.setter
    def default_reminder_offset(self, value: int) -> None:
        self._set(DEFAULT_REMINDER_OFFSET, int(value))

    @property
    def loyalty_threshold(self) -> int:
        default = self.remote_config.get_int(RemoteConfigKey.LOYALTY_THRESHOLD)
        return int(self._non_zero_or_default(LOYALTY_THRESHOLD, default))

    @loyalty_threshold.setter
    def loyalty_threshold(self, value: int) -> None:
        self._set(LOYALTY_THRESHOLD, int(value))

    @property
    def reward_thresholds(self) -> List[float]:
        return [float(v) for v in self._list_or_default(REWARD_THRESHOLDS, DEFAULT_REWARD_THRESHOLDS)]

    @reward_thresholds.setter
    def reward_thresholds(self, value: List[float]) -> None:
        self._set(REWARD_THRESHOLDS, [float(v) for v in value])

    @property
    def loyalty_points_per_tier(self) -> List[int]:
        values = self._list_or_default(LOYALTY_POINTS_PER_TIER, DEFAULT_LOYALTY_POINTS_PER_TIER)
        return [int(v) for v in values]

    @loyalty_points_per_tier.setter
    def loyalty_points_per_tier(self, value: List[int]) -> None:
        self._set(LOYALTY_POINTS_PER_TIER, [int(v) for v in value])

    def reset_to_defaults(self) -> None:
        for name in SETTING_NAMES:
            self.store.delete(KEY_PREFIX + name)
        logger.info("Settings reset to defaults")

    def as_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in SETTING_NAMES}
