"""
Bounded in-memory audit logs.

Every auditable part of the system (inventory items, tasks, staff, the
inventory manager, the error handler, ...) keeps a short history of what
happened to it. All of them share the structure implemented here: an
append-only, capacity-capped FIFO of entries guarded by a lock, that can
return its most recent entries and export itself as JSON. Logs live only in
process memory.

Example:
    >>> log = AuditLog("inventory", capacity=2)
    >>> _ = log.record("Received 5 unit(s)", user="maria")
    >>> _ = log.record("Used 1 unit(s)")
    >>> _ = log.record("Used 2 unit(s)")
    >>> [e.entry for e in log.recent()]
    ['Used 1 unit(s)', 'Used 2 unit(s)']
"""

import json
import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import (
    Any,
    Callable,
    Deque,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    TypeVar,
)

from ..utils.datetime_utils import REPORT_DATETIME_FORMAT, get_current_utc

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_CAPACITY = 100
DEFAULT_RECENT_LIMIT = 20


class SupportsToDict(Protocol):
    def to_dict(self) -> Dict[str, Any]: ...


E = TypeVar("E", bound=SupportsToDict)


@dataclass
class AuditEntry:
    """A single audit record."""

    entry: str
    user: Optional[str] = None
    subject_id: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=get_current_utc)

    @property
    def display(self) -> str:
        """Human readable ``[2024-05-01 09:30] entry by user`` line."""
        text = f"[{self.timestamp.strftime(REPORT_DATETIME_FORMAT)}] {self.entry}"
        if self.user:
            text += f" by {self.user}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "entry": self.entry,
            "user": self.user,
            "subject_id": self.subject_id,
            "context": self.context,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEntry":
        data = dict(data)
        if isinstance(data.get("timestamp"), str):
            data["timestamp"] = datetime.fromisoformat(data["timestamp"])
        data.setdefault("context", {})
        return cls(**data)


class AuditLog(Generic[E]):
    """
    Thread-safe bounded FIFO of audit entries.

    When an append pushes the log past ``capacity`` the oldest entry is
    dropped, so ``len(log) <= capacity`` always holds.

    Args:
        name: Name used in log messages
        capacity: Maximum number of entries kept

    Raises:
        ValueError: If capacity is smaller than one
    """

    def __init__(self, name: str, capacity: int = DEFAULT_AUDIT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Audit log capacity must be at least 1, got {capacity}")
        self.name = name
        self._capacity = capacity
        self._entries: Deque[E] = deque(maxlen=capacity)
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, entry: E) -> E:
        """Append ``entry``, evicting the oldest entry when full."""
        with self._lock:
            if len(self._entries) == self._capacity:
                logger.debug(f"Audit log '{self.name}' full, dropping oldest entry")
            self._entries.append(entry)
        return entry

    def record(
        self,
        text: str,
        user: Optional[str] = None,
        subject_id: Optional[str] = None,
        **context: Any,
    ) -> AuditEntry:
        """Build an ``AuditEntry`` from the arguments and add it."""
        entry = AuditEntry(
            entry=text, user=user, subject_id=subject_id, context=context
        )
        self.add(entry)  # type: ignore[arg-type]
        return entry

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[E]:
        """
        Return the newest ``limit`` entries, oldest first.

        A non-positive limit returns an empty list.
        """
        if limit <= 0:
            return []
        with self._lock:
            entries = list(self._entries)
        return entries[-limit:]

    def entries(self) -> List[E]:
        with self._lock:
            return list(self._entries)

    def filter(self, predicate: Callable[[E], bool]) -> List[E]:
        with self._lock:
            return [entry for entry in self._entries if predicate(entry)]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def export_json(self, indent: Optional[int] = 2) -> str:
        """Export every entry as a JSON array, ``"[]"`` when empty."""
        return entries_to_json(self.entries(), indent=indent)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"<AuditLog(name={self.name!r}, size={len(self)}, capacity={self._capacity})>"


def entries_to_json(entries: List[Any], indent: Optional[int] = 2) -> str:
    """Serialize entries exposing ``to_dict()`` as a JSON array."""
    if not entries:
        return "[]"
    return json.dumps([entry.to_dict() for entry in entries], indent=indent, default=str)


_registry: Dict[str, AuditLog[Any]] = {}
_registry_lock = threading.Lock()
_default_capacity: int = DEFAULT_AUDIT_CAPACITY


def configure_audit_logs(capacity: int) -> None:
    """
    Set the capacity of logs created without an explicit one.

    Logs that already exist keep their capacity.

    Raises:
        ValueError: If capacity is smaller than one
    """
    global _default_capacity
    if capacity < 1:
        raise ValueError(f"Audit log capacity must be at least 1, got {capacity}")
    with _registry_lock:
        _default_capacity = capacity
    logger.info(f"Default audit log capacity set to {capacity}")


def default_audit_capacity() -> int:
    return _default_capacity


def get_audit_log(name: str, capacity: Optional[int] = None) -> AuditLog[Any]:
    """
    Return the process-wide audit log called ``name``.

    The log is created on first use with ``capacity``, or the configured
    default when it is None; later calls return the existing log whatever
    capacity they pass.
    """
    with _registry_lock:
        log = _registry.get(name)
        if log is None:
            log = AuditLog(name, capacity if capacity is not None else _default_capacity)
            _registry[name] = log
        return log


def list_audit_logs() -> List[str]:
    with _registry_lock:
        return sorted(_registry)


def reset_audit_logs() -> None:
    """Forget every registered audit log and restore the default capacity."""
    global _default_capacity
    with _registry_lock:
        _registry.clear()
        _default_capacity = DEFAULT_AUDIT_CAPACITY
