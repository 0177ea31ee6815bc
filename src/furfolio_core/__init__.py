"""
Furfolio Core Package

The business core of Furfolio, a management platform for dog-grooming
businesses. It provides:

- SQLAlchemy models for owners, dogs, appointments, charges, inventory,
  tasks, staff, users, health records and loyalty programs
- Pydantic schemas for input validation and JSON export
- Async database engine, session and data store utilities
- Bounded in-memory audit logs attached to the models and services
- Services for inventory reorders, reports, client retention,
  notifications, settings, crash reports and error alerts

Quick Start:
    >>> from furfolio_core.database import create_engine, SessionManager, DataStore
    >>> from furfolio_core.services import InventoryManager
    >>> from furfolio_core.schemas import InventoryItemCreate

    >>> engine = create_engine("sqlite+aiosqlite:///:memory:")
    >>> manager = SessionManager(engine)
    >>> await manager.create_tables()
    >>> async with manager.get_transaction() as session:
    ...     inventory = InventoryManager(DataStore(session))
    ...     item = await inventory.add_item(
    ...         InventoryItemCreate(name="Oatmeal Shampoo", stock_level=6)
    ...     )
    ...     await inventory.use_stock(item.id, quantity=2)

Requirements:
    - Python 3.11+
    - SQLAlchemy 2.0+
    - Pydantic 2.5+
"""

__version__ = "0.1.0"
__author__ = "Furfolio Team"
__license__ = "MIT"

from . import audit, database, exceptions, models, schemas, services, utils

# Convenience imports for common usage patterns
from .database import DataStore, SessionManager, create_engine, get_session, get_transaction
from .exceptions import (
    AppErrorKind,
    DatabaseException,
    FurfolioException,
    ValidationException,
)
from .models import Appointment, Dog, InventoryItem, Owner, Task
from .runtime import FurfolioRuntime, configure

__all__ = [
    # Version and metadata
    "__version__",
    "__author__",
    "__license__",
    # Core modules
    "audit",
    "database",
    "exceptions",
    "models",
    "schemas",
    "services",
    "utils",
    # Convenience imports
    "create_engine",
    "SessionManager",
    "DataStore",
    "get_session",
    "get_transaction",
    "AppErrorKind",
    "FurfolioException",
    "ValidationException",
    "DatabaseException",
    "Owner",
    "Dog",
    "Appointment",
    "InventoryItem",
    "Task",
    "FurfolioRuntime",
    "configure",
]
