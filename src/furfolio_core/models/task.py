"""
Task model for the furfolio-core package.

Tasks are to-dos for the business: reorders raised by the inventory manager,
follow-up calls, compliance chores. They can recur and carry an escalation
score used to order the task list.
"""

import enum
from datetime import datetime, timedelta
from typing import Any, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..audit import AuditableMixin
from ..utils.datetime_utils import (
    add_months,
    add_years,
    days_between,
    ensure_utc,
    get_current_utc,
)
from .base import BaseModel

DUE_SOON_DAYS = 2


class TaskPriority(enum.Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def criticality_score(self) -> int:
        """0 for NONE up to 4 for CRITICAL."""
        return list(TaskPriority).index(self)


class RecurrenceRule(enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"


class TaskBadge(enum.Enum):
    URGENT = "urgent"
    OVERDUE = "overdue"
    RECURRING = "recurring"
    COMPLIANCE = "compliance"
    AUTOMATION = "automation"
    CLIENT = "client"
    ESCALATION = "escalation"


class Task(AuditableMixin, BaseModel):
    """Business task with due date, priority and optional recurrence."""

    __tablename__ = "tasks"
    __audit_log_name__ = "task"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("completed", False)
        kwargs.setdefault("priority", TaskPriority.NONE)
        kwargs.setdefault("is_recurring", False)
        kwargs.setdefault("is_archived", False)
        kwargs.setdefault("tags", [])
        kwargs.setdefault("badge_tokens", [])
        super().__init__(**kwargs)

    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    reminder_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority), nullable=False, default=TaskPriority.NONE
    )
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_rule: Mapped[Optional[RecurrenceRule]] = mapped_column(
        Enum(RecurrenceRule), nullable=True
    )
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    badge_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_modified_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (Index("idx_task_open_title", "completed", "title"),)

    @property
    def is_overdue(self) -> bool:
        if self.completed or self.due_date is None:
            return False
        return ensure_utc(self.due_date) < get_current_utc()

    @property
    def days_open(self) -> int:
        end = self.completed_at or get_current_utc()
        return days_between(self.created_at, end)

    @property
    def days_until_due(self) -> Optional[int]:
        if self.due_date is None:
            return None
        return days_between(get_current_utc(), self.due_date)

    @property
    def is_due_soon(self) -> bool:
        days = self.days_until_due
        return days is not None and 0 <= days <= DUE_SOON_DAYS and not self.completed

    @property
    def escalation_score(self) -> int:
        score = self.priority.criticality_score
        if self.is_overdue:
            score += 2
        if self.has_badge(TaskBadge.ESCALATION):
            score += 1
        if self.is_due_soon:
            score += 1
        return score

    @property
    def next_recurrence(self) -> Optional[datetime]:
        """Next due date for recurring tasks, None when it cannot be computed."""
        if not self.is_recurring or self.due_date is None:
            return None
        due = ensure_utc(self.due_date)
        if self.recurrence_rule == RecurrenceRule.DAILY:
            return due + timedelta(days=1)
        if self.recurrence_rule == RecurrenceRule.WEEKLY:
            return due + timedelta(weeks=1)
        if self.recurrence_rule == RecurrenceRule.MONTHLY:
            return add_months(due, 1)
        if self.recurrence_rule == RecurrenceRule.YEARLY:
            return add_years(due, 1)
        return None

    @property
    def badges(self) -> List[TaskBadge]:
        return self._tokens_as("badge_tokens", TaskBadge)

    def add_badge(self, badge: TaskBadge) -> bool:
        return self._add_token("badge_tokens", badge.value)

    def remove_badge(self, badge: TaskBadge) -> bool:
        return self._remove_token("badge_tokens", badge.value)

    def has_badge(self, badge: TaskBadge) -> bool:
        return self._has_token("badge_tokens", badge.value)

    def mark_completed(self, user: Optional[str] = None) -> None:
        self.completed = True
        self.completed_at = get_current_utc()
        self.last_modified_by = user
        self.remove_badge(TaskBadge.OVERDUE)
        self.add_audit("Marked completed", user=user)

    def mark_incomplete(self, user: Optional[str] = None) -> None:
        self.completed = False
        self.completed_at = None
        self.last_modified_by = user
        self.add_audit("Marked incomplete", user=user)

    def archive(self, user: Optional[str] = None) -> None:
        self.is_archived = True
        self.last_modified_by = user
        self.add_audit("Archived", user=user)

    def unarchive(self, user: Optional[str] = None) -> None:
        self.is_archived = False
        self.last_modified_by = user
        self.add_audit("Unarchived", user=user)

    def escalate(self, user: Optional[str] = None) -> None:
        """Raise priority one step (up to CRITICAL) and add the escalation badge."""
        members = list(TaskPriority)
        index = members.index(self.priority)
        self.priority = members[min(index + 1, len(members) - 1)]
        self.add_badge(TaskBadge.ESCALATION)
        self.last_modified_by = user
        self.add_audit(f"Escalated to {self.priority.value}", user=user)

    def export_json(self) -> str:
        from ..schemas.task import TaskExport

        return TaskExport.model_validate(self).model_dump_json(indent=2)

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', completed={self.completed})>"
