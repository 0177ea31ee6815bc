"""
Utility functions and helpers for the furfolio-core package.

This module contains configuration, datetime and validation utilities
used across the models, schemas and services.
"""

from .config import (
    ConfigError,
    EnvironmentConfig,
    FeatureFlag,
    FeatureFlagManager,
    FurfolioConfig,
    LoggingConfigurator,
    LogLevel,
    RemoteConfig,
    RemoteConfigKey,
    get_feature_flag_manager,
    is_feature_enabled,
    set_feature_flag_manager,
)
from .datetime_utils import (
    add_months,
    add_years,
    calculate_dog_age,
    days_between,
    end_of_day,
    ensure_utc,
    format_age,
    format_report_datetime,
    format_short_date,
    get_current_utc,
    is_same_day,
    is_within_days,
    start_of_day,
)
from .validation import (
    ValidationError,
    ValidationResult,
    normalize_tokens,
    sanitize_optional,
    sanitize_string,
    validate_email,
    validate_money,
    validate_phone,
    validate_sku,
)

__all__ = [
    # Config utilities
    "ConfigError",
    "EnvironmentConfig",
    "FeatureFlag",
    "FeatureFlagManager",
    "FurfolioConfig",
    "LoggingConfigurator",
    "LogLevel",
    "RemoteConfig",
    "RemoteConfigKey",
    "get_feature_flag_manager",
    "is_feature_enabled",
    "set_feature_flag_manager",
    # Datetime utilities
    "add_months",
    "add_years",
    "calculate_dog_age",
    "days_between",
    "end_of_day",
    "ensure_utc",
    "format_age",
    "format_report_datetime",
    "format_short_date",
    "get_current_utc",
    "is_same_day",
    "is_within_days",
    "start_of_day",
    # Validation utilities
    "ValidationError",
    "ValidationResult",
    "normalize_tokens",
    "sanitize_optional",
    "sanitize_string",
    "validate_email",
    "validate_money",
    "validate_phone",
    "validate_sku",
]
