"""Task Pydantic schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.task import RecurrenceRule, TaskPriority


class TaskCreate(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    details: Optional[str] = None
    due_date: Optional[datetime] = None
    reminder_time: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.NONE
    is_recurring: bool = False
    recurrence_rule: Optional[RecurrenceRule] = None
    tags: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None

    @model_validator(mode="after")
    def check_recurrence(self) -> "TaskCreate":
        if self.is_recurring and self.recurrence_rule is None:
            raise ValueError("Recurring tasks need a recurrence rule")
        if self.reminder_time and self.due_date and self.reminder_time > self.due_date:
            raise ValueError("Reminder time must be before the due date")
        return self


class TaskExport(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    title: str
    details: Optional[str] = None
    due_date: Optional[datetime] = None
    completed: bool
    completed_at: Optional[datetime] = None
    priority: TaskPriority
    is_recurring: bool
    recurrence_rule: Optional[RecurrenceRule] = None
    tags: List[str] = Field(default_factory=list)
    badge_tokens: List[str] = Field(default_factory=list)
    is_archived: bool
    is_overdue: bool
    escalation_score: int
    created_at: datetime
    created_by: Optional[str] = None
