"""
Custom exceptions for the furfolio-core package.

This module defines the exception hierarchy and the UI-facing error kinds
used throughout the grooming business platform.
"""

from .core_exceptions import (
    AppErrorKind,
    BusinessRuleException,
    ConfigurationException,
    DatabaseConfigException,
    DatabaseException,
    DataEncryptionException,
    DataLoadException,
    DataSaveException,
    DuplicateEntryException,
    EnvironmentException,
    FurfolioException,
    NetworkUnavailableException,
    NotificationException,
    PermissionDeniedException,
    RouteException,
    SchemaValidationException,
    TransactionException,
    UnauthorizedAccessException,
    UnknownAppException,
    ValidationException,
    create_error_response,
    format_validation_errors,
    log_exception_context,
    wrap_exception,
)

__all__ = [
    # Error kinds
    "AppErrorKind",
    # Exception classes
    "FurfolioException",
    "DatabaseException",
    "DataLoadException",
    "DataSaveException",
    "TransactionException",
    "ValidationException",
    "SchemaValidationException",
    "BusinessRuleException",
    "DuplicateEntryException",
    "ConfigurationException",
    "DatabaseConfigException",
    "EnvironmentException",
    "PermissionDeniedException",
    "UnauthorizedAccessException",
    "NetworkUnavailableException",
    "RouteException",
    "DataEncryptionException",
    "NotificationException",
    "UnknownAppException",
    # Utility functions
    "wrap_exception",
    "format_validation_errors",
    "create_error_response",
    "log_exception_context",
]
