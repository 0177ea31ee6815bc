"""
Database connection, session management, and data access utilities.

This module provides async SQLAlchemy engine configuration, session
management and the ``DataStore`` used by the services.
"""

from .connection import DatabaseConfig, check_connection, close_engine, create_engine
from .data_store import DataStore
from .session import (
    SessionManager,
    get_session,
    get_session_manager,
    get_transaction,
    initialize_session_manager,
)

__all__ = [
    # Connection utilities
    "DatabaseConfig",
    "create_engine",
    "check_connection",
    "close_engine",
    # Session management
    "SessionManager",
    "initialize_session_manager",
    "get_session_manager",
    "get_session",
    "get_transaction",
    # Data access
    "DataStore",
]
