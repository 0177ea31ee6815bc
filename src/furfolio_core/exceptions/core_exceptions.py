"""
Core exceptions for the furfolio-core package.

This module defines the exception hierarchy used throughout the grooming
business platform. Every exception maps onto one of the flat, UI-facing
``AppErrorKind`` values so that a single handler can turn any failure into a
user alert without knowing where it came from.
"""

import logging
import time
import traceback
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse, urlunparse


class AppErrorKind(str, Enum):
    """UI-facing error categories."""

    DATA_LOAD_FAILED = "data_load_failed"
    SAVE_FAILED = "save_failed"
    INVALID_INPUT = "invalid_input"
    DUPLICATE_ENTRY = "duplicate_entry"
    NETWORK_UNAVAILABLE = "network_unavailable"
    PERMISSION_DENIED = "permission_denied"
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    ROUTE_ERROR = "route_error"
    DATA_ENCRYPTION_FAILED = "data_encryption_failed"
    UNKNOWN = "unknown"

    @property
    def user_message(self) -> str:
        """Default message shown to the user for this kind of error."""
        return _USER_MESSAGES[self]

    @property
    def recovery_suggestion(self) -> Optional[str]:
        return _RECOVERY_SUGGESTIONS.get(self)

    @property
    def is_recoverable(self) -> bool:
        return self in _RECOVERABLE_KINDS


_USER_MESSAGES = {
    AppErrorKind.DATA_LOAD_FAILED: "Failed to load data.",
    AppErrorKind.SAVE_FAILED: "Could not save your changes.",
    AppErrorKind.INVALID_INPUT: "Invalid input.",
    AppErrorKind.DUPLICATE_ENTRY: "This item already exists.",
    AppErrorKind.NETWORK_UNAVAILABLE: "No internet connection. Please try again later.",
    AppErrorKind.PERMISSION_DENIED: "Permission denied.",
    AppErrorKind.UNAUTHORIZED_ACCESS: "Unauthorized access.",
    AppErrorKind.ROUTE_ERROR: "Route optimization failed.",
    AppErrorKind.DATA_ENCRYPTION_FAILED: "Data encryption failed.",
    AppErrorKind.UNKNOWN: "An unexpected error occurred.",
}

_RECOVERY_SUGGESTIONS = {
    AppErrorKind.NETWORK_UNAVAILABLE: "Check your internet connection and try again.",
    AppErrorKind.PERMISSION_DENIED: "Grant the required permission in Settings.",
    AppErrorKind.INVALID_INPUT: "Please check your input and try again.",
}

_RECOVERABLE_KINDS = frozenset(
    {
        AppErrorKind.INVALID_INPUT,
        AppErrorKind.NETWORK_UNAVAILABLE,
        AppErrorKind.PERMISSION_DENIED,
        AppErrorKind.UNAUTHORIZED_ACCESS,
    }
)


class FurfolioException(Exception):
    """
    Base exception class for all furfolio-core package exceptions.

    Provides a consistent interface for error handling across the package.
    Subclasses set ``kind`` to the UI-facing category they belong to.
    """

    kind: AppErrorKind = AppErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    @property
    def user_message(self) -> str:
        """Message suitable for display in an alert."""
        return self.kind.user_message

    @property
    def recovery_suggestion(self) -> Optional[str]:
        return self.kind.recovery_suggestion

    @property
    def is_recoverable(self) -> bool:
        return self.kind.is_recoverable

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
            "timestamp": time.time(),
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """Return ``to_dict()`` plus module, class and traceback information."""
        debug_info = self.to_dict()
        formatted = "".join(
            traceback.format_exception(type(self), self, self.__traceback__)
        )
        debug_info.update(
            {
                "traceback": formatted if self.__traceback__ is not None else None,
                "module": self.__class__.__module__,
                "class_name": self.__class__.__name__,
            }
        )
        return debug_info

    def log_error(
        self, logger: Optional[logging.Logger] = None, level: int = logging.ERROR
    ) -> None:
        """
        Log the exception with appropriate level and context.

        Args:
            logger: Logger instance to use (creates default if None)
            level: Logging level to use
        """
        if logger is None:
            logger = logging.getLogger(__name__)

        log_data = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "kind": self.kind.value,
            "message": self.message,
            "details": self.details,
        }

        logger.log(
            level,
            f"Exception occurred: {self.message}",
            extra={"exception_data": log_data},
        )

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


class DatabaseException(FurfolioException):
    """Base exception for database-related errors."""

    kind = AppErrorKind.DATA_LOAD_FAILED

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, error_code, details)
        self.original_error = original_error

        if original_error and "original_error" not in self.details:
            self.details["original_error"] = str(original_error)


class DataLoadException(DatabaseException):
    """Raised when records cannot be fetched from the data store."""

    kind = AppErrorKind.DATA_LOAD_FAILED

    def __init__(
        self,
        message: str = "Failed to load data",
        model_name: Optional[str] = None,
        record_id: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if model_name:
            details["model"] = model_name
        if record_id is not None:
            details["record_id"] = str(record_id)

        super().__init__(
            message=message,
            error_code="DATA_LOAD_ERROR",
            details=details,
            original_error=original_error,
        )


class DataSaveException(DatabaseException):
    """Raised when pending changes cannot be written to the data store."""

    kind = AppErrorKind.SAVE_FAILED

    def __init__(
        self,
        message: str = "Failed to save changes",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code="DATA_SAVE_ERROR",
            details=details,
            original_error=original_error,
        )


class TransactionException(DatabaseException):
    """Exception raised when database transaction fails."""

    kind = AppErrorKind.SAVE_FAILED

    def __init__(
        self,
        message: str = "Database transaction failed",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize transaction exception.

        Args:
            message: Error message
            operation: Description of the failed operation
            original_error: Original exception
        """
        details = {}
        if operation:
            details["operation"] = operation

        super().__init__(
            message=message,
            error_code="DATABASE_TRANSACTION_ERROR",
            details=details,
            original_error=original_error,
        )


class ValidationException(FurfolioException):
    """Base exception for data validation errors."""

    kind = AppErrorKind.INVALID_INPUT

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize validation exception.

        Args:
            message: Error message
            field: Field that failed validation
            value: Value that failed validation
            validation_errors: Detailed validation errors
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        if validation_errors:
            details["validation_errors"] = validation_errors

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class SchemaValidationException(ValidationException):
    """Exception raised when Pydantic schema validation fails."""

    def __init__(
        self,
        message: str = "Schema validation failed",
        schema_name: Optional[str] = None,
        validation_errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, validation_errors=validation_errors)
        self.error_code = "SCHEMA_VALIDATION_ERROR"
        if schema_name:
            self.details["schema_name"] = schema_name

    @classmethod
    def from_pydantic(
        cls, error: Any, schema_name: Optional[str] = None
    ) -> "SchemaValidationException":
        """
        Build an exception from a ``pydantic.ValidationError``.

        Args:
            error: The pydantic validation error
            schema_name: Name of the schema, defaults to the error's title

        Returns:
            SchemaValidationException with formatted field errors
        """
        return cls(
            message="Schema validation failed",
            schema_name=schema_name or getattr(error, "title", None),
            validation_errors=format_validation_errors(error.errors()),
        )


class BusinessRuleException(ValidationException):
    """Exception raised when business rule validation fails."""

    def __init__(
        self,
        message: str = "Business rule validation failed",
        rule_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize business rule exception.

        Args:
            message: Error message
            rule_name: Name of the business rule that failed
            context: Additional context about the failure
        """
        super().__init__(message=message)
        self.error_code = "BUSINESS_RULE_ERROR"
        if rule_name:
            self.details["rule_name"] = rule_name
        if context:
            self.details["context"] = context


class DuplicateEntryException(ValidationException):
    """Raised when a record with the same unique value already exists."""

    kind = AppErrorKind.DUPLICATE_ENTRY

    def __init__(
        self,
        message: str = "This item already exists",
        entity: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message=message)
        self.error_code = "DUPLICATE_ENTRY"
        if entity:
            self.details["entity"] = entity
        if original_error is not None:
            self.details["original_error"] = str(original_error)


class ConfigurationException(FurfolioException):
    """Base exception for configuration-related errors."""

    kind = AppErrorKind.UNKNOWN

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        """
        Initialize configuration exception.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            config_value: Configuration value (will be sanitized)
        """
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value:
            details["config_value"] = self._sanitize_config_value(
                config_key, config_value
            )

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )

    @staticmethod
    def _sanitize_config_value(key: Optional[str], value: str) -> str:
        """Sanitize configuration values to avoid exposing secrets."""
        if not key:
            return "[REDACTED]"

        sensitive_keys = ["password", "secret", "key", "token", "credential"]
        if any(sensitive in key.lower() for sensitive in sensitive_keys):
            return "[REDACTED]"

        return value


class DatabaseConfigException(ConfigurationException):
    """Exception raised when database configuration is invalid."""

    def __init__(
        self,
        message: str = "Database configuration error",
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        super().__init__(message, config_key, config_value)
        self.error_code = "DATABASE_CONFIG_ERROR"

    @staticmethod
    def sanitize_url(url: str) -> str:
        """Remove credentials from a database URL for logging."""
        try:
            parsed = urlparse(url)
            if not parsed.hostname:
                return url
            netloc = parsed.hostname
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
        except (ValueError, AttributeError) as e:
            return f"[URL_PARSE_ERROR: {e}]"


class EnvironmentException(ConfigurationException):
    """Exception raised when environment configuration is invalid."""

    def __init__(
        self,
        message: str = "Environment configuration error",
        env_var: Optional[str] = None,
        env_value: Optional[str] = None,
    ):
        super().__init__(message, env_var, env_value)
        self.error_code = "ENVIRONMENT_ERROR"


class PermissionDeniedException(FurfolioException):
    """Raised when a system permission (notifications, location) is missing."""

    kind = AppErrorKind.PERMISSION_DENIED

    def __init__(self, permission: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Permission denied: {permission}",
            error_code="PERMISSION_DENIED",
            details={"permission": permission},
        )
        self.permission = permission

    @property
    def user_message(self) -> str:
        return f"Permission denied. ({self.permission})"


class UnauthorizedAccessException(FurfolioException):
    """Raised when the acting user's role does not allow an operation."""

    kind = AppErrorKind.UNAUTHORIZED_ACCESS

    def __init__(self, role: str, message: Optional[str] = None):
        super().__init__(
            message=message or f"Unauthorized access for role {role}",
            error_code="UNAUTHORIZED_ACCESS",
            details={"role": role},
        )
        self.role = role

    @property
    def user_message(self) -> str:
        return f"Unauthorized access. (Role: {self.role})"


class NetworkUnavailableException(FurfolioException):
    kind = AppErrorKind.NETWORK_UNAVAILABLE

    def __init__(self, message: str = "Network unavailable"):
        super().__init__(message=message, error_code="NETWORK_UNAVAILABLE")


class RouteException(FurfolioException):
    """Raised when route optimization for mobile grooming fails."""

    kind = AppErrorKind.ROUTE_ERROR

    def __init__(self, reason: str):
        super().__init__(
            message=f"Route optimization failed: {reason}",
            error_code="ROUTE_ERROR",
            details={"reason": reason},
        )


class DataEncryptionException(FurfolioException):
    kind = AppErrorKind.DATA_ENCRYPTION_FAILED

    def __init__(self, reason: str):
        super().__init__(
            message=f"Data encryption failed: {reason}",
            error_code="DATA_ENCRYPTION_ERROR",
            details={"reason": reason},
        )


class NotificationException(FurfolioException):
    """Raised when a notification backend fails to deliver."""

    kind = AppErrorKind.UNKNOWN

    def __init__(
        self,
        message: str = "Notification delivery failed",
        notification_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if notification_id:
            details["notification_id"] = notification_id
        if original_error is not None:
            details["original_error"] = str(original_error)
        super().__init__(
            message=message, error_code="NOTIFICATION_ERROR", details=details
        )
        self.original_error = original_error


class UnknownAppException(FurfolioException):
    """Wraps an arbitrary exception that has no dedicated category."""

    kind = AppErrorKind.UNKNOWN

    def __init__(self, original_error: Exception):
        super().__init__(
            message=str(original_error) or original_error.__class__.__name__,
            error_code="UNKNOWN_ERROR",
            details={"original_type": original_error.__class__.__name__},
        )
        self.original_error = original_error

    @property
    def user_message(self) -> str:
        text = str(self.original_error)
        if text:
            return f"An unexpected error occurred: {text}"
        return AppErrorKind.UNKNOWN.user_message


# Utility functions for exception handling and error formatting


def wrap_exception(exception: Exception) -> FurfolioException:
    """
    Return ``exception`` as a FurfolioException.

    Package exceptions are returned unchanged; anything else is wrapped in
    an UnknownAppException.
    """
    if isinstance(exception, FurfolioException):
        return exception
    return UnknownAppException(exception)


def format_validation_errors(errors: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Format Pydantic validation errors into a user-friendly structure.

    Args:
        errors: List of Pydantic validation errors

    Returns:
        Dictionary mapping field names to lists of error messages
    """
    formatted_errors: Dict[str, List[str]] = {}

    for error in errors:
        field_path = ".".join(str(loc) for loc in error.get("loc", []))
        if not field_path:
            field_path = "root"

        message = error.get("msg", "Validation error")
        error_type = error.get("type", "unknown")

        if error_type == "value_error":
            formatted_message = message
        elif error_type == "missing":
            formatted_message = "This field is required"
        else:
            formatted_message = f"{message} (type: {error_type})"

        formatted_errors.setdefault(field_path, []).append(formatted_message)

    return formatted_errors


def create_error_response(
    exception: FurfolioException,
    include_debug: bool = False,
    include_traceback: bool = False,
) -> Dict[str, Any]:
    """
    Create a standardized error response from an exception.

    Args:
        exception: The exception to format
        include_debug: Whether to include debug information
        include_traceback: Whether to include traceback information

    Returns:
        Standardized error response dictionary
    """
    response: Dict[str, Any] = {
        "success": False,
        "error": {
            "type": exception.__class__.__name__,
            "code": exception.error_code,
            "kind": exception.kind.value,
            "message": exception.message,
            "user_message": exception.user_message,
            "recoverable": exception.is_recoverable,
        },
    }

    if exception.details:
        response["error"]["details"] = exception.details

    if include_debug:
        debug_info = exception.get_debug_info()
        response["debug"] = {
            "timestamp": debug_info["timestamp"],
            "module": debug_info["module"],
            "class_name": debug_info["class_name"],
        }

        if include_traceback and debug_info.get("traceback"):
            response["debug"]["traceback"] = debug_info["traceback"]

    return response


def log_exception_context(
    exception: Exception,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with additional context information.

    Args:
        exception: The exception to log
        context: Additional context information
        logger: Logger instance to use
        level: Logging level
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if isinstance(exception, FurfolioException):
        log_data = exception.to_dict()
        log_data["context"] = context
        logger.log(
            level,
            f"Exception with context: {exception.message}",
            extra={"exception_data": log_data},
        )
    else:
        logger.log(
            level,
            f"Unhandled exception: {str(exception)}",
            extra={
                "exception_type": exception.__class__.__name__,
                "exception_message": str(exception),
                "context": context,
            },
        )
