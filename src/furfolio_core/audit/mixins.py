"""Audit support for SQLAlchemy models."""

from typing import Any, List, Optional

from .audit_log import (
    AuditEntry,
    AuditLog,
    entries_to_json,
    get_audit_log,
)


class AuditableMixin:
    """
    Give a model a shared, bounded audit log.

    All instances of a model write to one registered log named by
    ``__audit_log_name__``; entries carry the instance id as ``subject_id``
    so each record can read back its own history. ``__audit_capacity__``
    left as None uses the configured default capacity.
    """

    __audit_log_name__: Optional[str] = None
    __audit_capacity__: Optional[int] = None

    @classmethod
    def audit_log(cls) -> AuditLog[AuditEntry]:
        name = cls.__audit_log_name__ or cls.__name__.lower()
        return get_audit_log(name, cls.__audit_capacity__)

    def _audit_subject(self) -> Optional[str]:
        record_id = getattr(self, "id", None)
        return str(record_id) if record_id is not None else None

    def add_audit(self, text: str, user: Optional[str] = None, **context: Any) -> AuditEntry:
        return self.audit_log().record(
            text, user=user, subject_id=self._audit_subject(), **context
        )

    def audit_entries(self) -> List[AuditEntry]:
        subject = self._audit_subject()
        return self.audit_log().filter(lambda entry: entry.subject_id == subject)

    def recent_audit_entries(self, limit: int = 3) -> List[AuditEntry]:
        if limit <= 0:
            return []
        return self.audit_entries()[-limit:]

    def export_audit_json(self) -> str:
        return entries_to_json(self.audit_entries())
