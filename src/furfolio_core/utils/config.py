"""
Configuration management utilities.

This module provides environment variable handling with type conversion,
the package-level configuration object, logging configuration utilities,
and the remote configuration / feature flag layer that can override locally
stored settings.
"""

import json
import logging
import logging.config
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..exceptions import ConfigurationException, EnvironmentException

logger = logging.getLogger(__name__)

TRUTHY_VALUES = ("true", "1", "yes", "on", "enabled")


class ConfigError(ConfigurationException):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, config_key=config_key)
        self.error_code = "CONFIG_ERROR"


class LogLevel(Enum):
    """Enumeration for log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentConfig:
    """Utility class for handling environment variables with type conversion."""

    @staticmethod
    def get_str(
        key: str, default: Optional[str] = None, required: bool = False
    ) -> Optional[str]:
        """
        Get a string environment variable.

        Args:
            key: Environment variable key
            default: Default value if not found
            required: Whether the variable is required

        Returns:
            String value or default

        Raises:
            ConfigError: If required variable is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise ConfigError(f"Required environment variable '{key}' is not set", key)

        return value

    @staticmethod
    def get_int(
        key: str, default: Optional[int] = None, required: bool = False
    ) -> Optional[int]:
        """
        Get an integer environment variable.

        Raises:
            ConfigError: If required variable is missing or not an integer
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(
                    f"Required environment variable '{key}' is not set", key
                )
            return default

        try:
            return int(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be an integer, got: {value}", key
            )

    @staticmethod
    def get_float(
        key: str, default: Optional[float] = None, required: bool = False
    ) -> Optional[float]:
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(
                    f"Required environment variable '{key}' is not set", key
                )
            return default

        try:
            return float(value)
        except ValueError:
            raise ConfigError(
                f"Environment variable '{key}' must be a float, got: {value}", key
            )

    @staticmethod
    def get_bool(
        key: str, default: Optional[bool] = None, required: bool = False
    ) -> Optional[bool]:
        """
        Get a boolean environment variable.

        Any of ``true``, ``1``, ``yes``, ``on`` or ``enabled`` (case-insensitive)
        is treated as True; every other value is False.
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(
                    f"Required environment variable '{key}' is not set", key
                )
            return default

        return value.lower() in TRUTHY_VALUES

    @staticmethod
    def get_list(
        key: str,
        separator: str = ",",
        default: Optional[List[str]] = None,
        required: bool = False,
    ) -> Optional[List[str]]:
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(
                    f"Required environment variable '{key}' is not set", key
                )
            return default or []

        return [item.strip() for item in value.split(separator) if item.strip()]

    @staticmethod
    def get_json(
        key: str, default: Optional[Dict[str, Any]] = None, required: bool = False
    ) -> Optional[Dict[str, Any]]:
        """
        Get a JSON object environment variable.

        Raises:
            ConfigError: If required variable is missing, invalid JSON,
                or not a JSON object
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigError(
                    f"Required environment variable '{key}' is not set", key
                )
            return default

        try:
            result = json.loads(value)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Environment variable '{key}' contains invalid JSON: {e}", key
            )
        if not isinstance(result, dict):
            raise ConfigError(f"Environment variable '{key}' must be a JSON object", key)
        return result


@dataclass
class FurfolioConfig:
    """Process-level configuration for the package."""

    database_url: str = "sqlite+aiosqlite:///furfolio.db"
    log_level: LogLevel = LogLevel.INFO
    settings_path: Optional[str] = None
    remote_config_path: Optional[str] = None
    audit_capacity: int = 100
    echo_sql: bool = False

    @classmethod
    def from_environment(cls, prefix: str = "FURFOLIO_") -> "FurfolioConfig":
        """
        Build configuration from ``FURFOLIO_*`` environment variables.

        Raises:
            EnvironmentException: If the log level or audit capacity is invalid
            ConfigError: If a numeric variable is not a number
        """
        level_name = (
            EnvironmentConfig.get_str(f"{prefix}LOG_LEVEL", LogLevel.INFO.value) or ""
        ).upper()
        try:
            log_level = LogLevel(level_name)
        except ValueError:
            raise EnvironmentException(
                f"Unsupported log level '{level_name}'",
                env_var=f"{prefix}LOG_LEVEL",
                env_value=level_name,
            )

        audit_capacity = EnvironmentConfig.get_int(f"{prefix}AUDIT_CAPACITY", 100)
        if audit_capacity is None or audit_capacity < 1:
            raise EnvironmentException(
                "Audit capacity must be a positive integer",
                env_var=f"{prefix}AUDIT_CAPACITY",
                env_value=str(audit_capacity),
            )

        return cls(
            database_url=EnvironmentConfig.get_str(
                f"{prefix}DATABASE_URL", cls.database_url
            )
            or cls.database_url,
            log_level=log_level,
            settings_path=EnvironmentConfig.get_str(f"{prefix}SETTINGS_PATH"),
            remote_config_path=EnvironmentConfig.get_str(
                f"{prefix}REMOTE_CONFIG_PATH"
            ),
            audit_capacity=audit_capacity,
            echo_sql=bool(EnvironmentConfig.get_bool(f"{prefix}ECHO_SQL", False)),
        )


class LoggingConfigurator:
    """Utility class for configuring logging."""

    DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @staticmethod
    def configure_basic_logging(
        level: Union[str, LogLevel] = LogLevel.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> None:
        """
        Configure basic logging for the application.

        Args:
            level: Logging level
            format_string: Custom format string
            log_file: Optional log file path
        """
        if isinstance(level, LogLevel):
            level = level.value

        basic_config_args: Dict[str, Any] = {
            "level": level,
            "format": format_string or LoggingConfigurator.DEFAULT_FORMAT,
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
        if log_file:
            basic_config_args["filename"] = log_file
            basic_config_args["filemode"] = "a"

        logging.basicConfig(**basic_config_args)

    @staticmethod
    def configure_structured_logging(
        config_dict: Optional[Dict[str, Any]] = None,
        config_file: Optional[str] = None,
        level: Union[str, LogLevel] = LogLevel.INFO,
    ) -> None:
        """
        Configure structured logging using a dictionary or file.

        Without either, a console configuration for the ``furfolio_core``
        logger hierarchy is installed at ``level``.
        """
        if isinstance(level, LogLevel):
            level = level.value

        if config_file and Path(config_file).exists():
            logging.config.fileConfig(config_file)
        elif config_dict:
            logging.config.dictConfig(config_dict)
        else:
            default_config = {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "standard": {"format": LoggingConfigurator.DEFAULT_FORMAT},
                    "detailed": {
                        "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s - %(message)s"
                    },
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "standard",
                        "stream": "ext://sys.stdout",
                    }
                },
                "loggers": {
                    "furfolio_core": {
                        "level": level,
                        "handlers": ["console"],
                        "propagate": False,
                    }
                },
                "root": {"level": "WARNING", "handlers": ["console"]},
            }
            logging.config.dictConfig(default_config)


class RemoteConfigKey(str, Enum):
    """Keys the remote configuration source may override."""

    LOYALTY_THRESHOLD = "loyalty_threshold"
    DEFAULT_REMINDER_OFFSET = "default_reminder_offset"
    ENABLE_INVENTORY_ALERTS = "enable_inventory_alerts"
    ENABLE_PDF_EXPORT = "enable_pdf_export"
    SUPPORT_EMAIL = "support_email"

    @property
    def default(self) -> Union[bool, int, str]:
        """Static fallback used when no valid override is present."""
        return REMOTE_CONFIG_DEFAULTS[self]


REMOTE_CONFIG_DEFAULTS: Dict[RemoteConfigKey, Union[bool, int, str]] = {
    RemoteConfigKey.LOYALTY_THRESHOLD: 5,
    RemoteConfigKey.DEFAULT_REMINDER_OFFSET: 60,
    RemoteConfigKey.ENABLE_INVENTORY_ALERTS: True,
    RemoteConfigKey.ENABLE_PDF_EXPORT: True,
    RemoteConfigKey.SUPPORT_EMAIL: "support@furfolio.app",
}


class RemoteConfig:
    """
    Typed remote configuration values with static fallback defaults.

    Overrides come from a dictionary, a JSON file, or ``FURFOLIO_REMOTE_<KEY>``
    environment variables. An override is only used when it has the type of
    the key's default; anything else falls back to the default. Unknown keys
    are ignored.

    Example:
        >>> remote = RemoteConfig({"loyalty_threshold": 8})
        >>> remote.get_int(RemoteConfigKey.LOYALTY_THRESHOLD)
        8
    """

    ENV_PREFIX = "FURFOLIO_REMOTE_"

    def __init__(self, source: Optional[Union[str, Path, Dict[str, Any]]] = None):
        self._overrides: Dict[RemoteConfigKey, Any] = {}

        if isinstance(source, (str, Path)):
            self._load_from_file(Path(source))
        elif isinstance(source, dict):
            self._load_from_dict(source)
        else:
            self._load_from_environment()

    def _load_from_file(self, file_path: Path) -> None:
        try:
            config = json.loads(file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning(f"Remote config file {file_path} not found, using defaults")
            return
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in remote config file: {e}", str(file_path))

        if not isinstance(config, dict):
            raise ConfigError("Remote config file must contain a JSON object", str(file_path))
        self._load_from_dict(config)

    def _load_from_dict(self, config: Dict[str, Any]) -> None:
        for name, value in config.items():
            try:
                key = RemoteConfigKey(name)
            except ValueError:
                logger.debug(f"Ignoring unknown remote config key '{name}'")
                continue
            self._overrides[key] = value

    def _load_from_environment(self) -> None:
        for key in RemoteConfigKey:
            raw = os.getenv(f"{self.ENV_PREFIX}{key.value.upper()}")
            if raw is None:
                continue
            default = key.default
            if isinstance(default, bool):
                self._overrides[key] = raw.lower() in TRUTHY_VALUES
            elif isinstance(default, int):
                try:
                    self._overrides[key] = int(raw)
                except ValueError:
                    logger.warning(
                        f"Remote config override {key.value}={raw!r} is not an integer"
                    )
            else:
                self._overrides[key] = raw

    def get_value(self, key: RemoteConfigKey) -> Union[bool, int, str]:
        """Return the override for ``key`` when it has the right type."""
        default = key.default
        if key not in self._overrides:
            return default

        value = self._overrides[key]
        if isinstance(default, bool):
            valid = isinstance(value, bool)
        elif isinstance(default, int):
            valid = isinstance(value, int) and not isinstance(value, bool)
        else:
            valid = isinstance(value, str)

        if not valid:
            logger.warning(
                f"Remote config override for {key.value} has wrong type "
                f"{type(value).__name__}, using default"
            )
            return default
        return value

    def get_bool(self, key: RemoteConfigKey) -> bool:
        return bool(self.get_value(key))

    def get_int(self, key: RemoteConfigKey) -> int:
        return int(self.get_value(key))

    def get_str(self, key: RemoteConfigKey) -> str:
        return str(self.get_value(key))

    def has_override(self, key: RemoteConfigKey) -> bool:
        return key in self._overrides

    def set_override(self, key: RemoteConfigKey, value: Any) -> None:
        self._overrides[key] = value
        logger.info(f"Remote config override set: {key.value}")

    def clear_overrides(self) -> None:
        self._overrides.clear()


@dataclass
class FeatureFlag:
    """Represents a feature flag configuration."""

    name: str
    enabled: bool
    description: str = ""
    conditions: Dict[str, Any] = field(default_factory=dict)

    def is_enabled_for(self, attributes: Optional[Dict[str, Any]] = None) -> bool:
        """
        Check if the feature is enabled for a user or business.

        Every condition present in ``attributes`` must match exactly.
        """
        if not self.enabled:
            return False

        if self.conditions and attributes:
            for condition_key, condition_value in self.conditions.items():
                if (
                    condition_key in attributes
                    and attributes[condition_key] != condition_value
                ):
                    return False

        return True


class FeatureFlagManager:
    """Manager for boolean feature flags."""

    def __init__(self, config_source: Optional[Union[str, Dict[str, Any]]] = None):
        """
        Initialize the feature flag manager.

        Args:
            config_source: Path to a JSON file or dictionary of flags; when
                omitted flags are read from ``FEATURE_FLAG_*`` variables
        """
        self._flags: Dict[str, FeatureFlag] = {}

        if isinstance(config_source, str):
            self._load_from_file(config_source)
        elif isinstance(config_source, dict):
            self._load_from_dict(config_source)
        else:
            self._load_from_environment()

    def _load_from_file(self, file_path: str) -> None:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
            self._load_from_dict(config)
        except FileNotFoundError:
            self._load_from_environment()
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in feature flag config file: {e}", file_path)

    def _load_from_dict(self, config: Dict[str, Any]) -> None:
        for flag_name, flag_config in config.items():
            if isinstance(flag_config, bool):
                self._flags[flag_name] = FeatureFlag(name=flag_name, enabled=flag_config)
            elif isinstance(flag_config, dict):
                self._flags[flag_name] = FeatureFlag(
                    name=flag_name,
                    enabled=flag_config.get("enabled", False),
                    description=flag_config.get("description", ""),
                    conditions=flag_config.get("conditions", {}),
                )

    def _load_from_environment(self) -> None:
        for key, value in os.environ.items():
            if key.startswith("FEATURE_FLAG_"):
                flag_name = key[len("FEATURE_FLAG_"):].lower()
                self._flags[flag_name] = FeatureFlag(
                    name=flag_name, enabled=value.lower() in TRUTHY_VALUES
                )

    def is_enabled(
        self, flag_name: str, attributes: Optional[Dict[str, Any]] = None
    ) -> bool:
        if flag_name not in self._flags:
            return False
        return self._flags[flag_name].is_enabled_for(attributes)

    def get_flag(self, flag_name: str) -> Optional[FeatureFlag]:
        return self._flags.get(flag_name)

    def add_flag(self, flag: FeatureFlag) -> None:
        self._flags[flag.name] = flag

    def remove_flag(self, flag_name: str) -> bool:
        return self._flags.pop(flag_name, None) is not None

    def list_flags(self) -> List[FeatureFlag]:
        return list(self._flags.values())


# Global feature flag manager instance
_feature_flag_manager: Optional[FeatureFlagManager] = None


def get_feature_flag_manager() -> FeatureFlagManager:
    """Get the global feature flag manager instance."""
    global _feature_flag_manager
    if _feature_flag_manager is None:
        _feature_flag_manager = FeatureFlagManager()
    return _feature_flag_manager


def set_feature_flag_manager(manager: Optional[FeatureFlagManager]) -> None:
    """Replace the global feature flag manager (``None`` resets it)."""
    global _feature_flag_manager
    _feature_flag_manager = manager


def is_feature_enabled(
    flag_name: str, attributes: Optional[Dict[str, Any]] = None
) -> bool:
    """Check a flag on the global feature flag manager."""
    return get_feature_flag_manager().is_enabled(flag_name, attributes)
