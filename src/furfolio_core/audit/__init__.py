"""
In-memory audit logging.

Provides the generic bounded audit log, the process-wide registry of named
logs, and the mixin that gives models their per-record history.
"""

from .audit_log import (
    DEFAULT_AUDIT_CAPACITY,
    DEFAULT_RECENT_LIMIT,
    AuditEntry,
    AuditLog,
    configure_audit_logs,
    default_audit_capacity,
    entries_to_json,
    get_audit_log,
    list_audit_logs,
    reset_audit_logs,
)
from .mixins import AuditableMixin

__all__ = [
    "DEFAULT_AUDIT_CAPACITY",
    "DEFAULT_RECENT_LIMIT",
    "AuditEntry",
    "AuditLog",
    "AuditableMixin",
    "configure_audit_logs",
    "default_audit_capacity",
    "entries_to_json",
    "get_audit_log",
    "list_audit_logs",
    "reset_audit_logs",
]
