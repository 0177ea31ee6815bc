"""
Staff shift model for the furfolio-core package.

A scheduled block of work for one staff member, with clock-in and
clock-out times recorded against it.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..audit import AuditableMixin
from ..exceptions import BusinessRuleException, ValidationException
from ..utils.datetime_utils import ensure_utc, get_current_utc
from .base import BaseModel
from .staff import StaffRole

if TYPE_CHECKING:
    from .staff import StaffMember

SHIFT_AUDIT_CAPACITY = 100


def _hours(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 3600


class StaffShift(AuditableMixin, BaseModel):
    __tablename__ = "staff_shifts"
    __audit_log_name__ = "staff_shift"
    __audit_capacity__ = SHIFT_AUDIT_CAPACITY

    def __init__(self, **kwargs: Any) -> None:
        start, end = kwargs.get("start_time"), kwargs.get("end_time")
        if start is not None and end is not None and ensure_utc(end) <= ensure_utc(start):
            raise ValidationException(
                "Shift must end after it starts", field="end_time", value=end
            )
        super().__init__(**kwargs)

    staff_member_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    role: Mapped[Optional[StaffRole]] = mapped_column(Enum(StaffRole), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    clocked_in_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    clocked_out_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    staff_member: Mapped["StaffMember"] = relationship("StaffMember", lazy="selectin")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_shift_times"),
    )

    @property
    def scheduled_hours(self) -> float:
        return _hours(self.start_time, self.end_time)

    @property
    def worked_hours(self) -> float:
        """Hours between clock-in and clock-out, or until now while in progress."""
        if self.clocked_in_at is None:
            return 0.0
        end = self.clocked_out_at or get_current_utc()
        return _hours(self.clocked_in_at, end)

    @property
    def is_in_progress(self) -> bool:
        return self.clocked_in_at is not None and self.clocked_out_at is None

    @property
    def is_overtime(self) -> bool:
        return self.worked_hours > self.scheduled_hours

    def overlaps(self, other: "StaffShift") -> bool:
        return ensure_utc(self.start_time) < ensure_utc(other.end_time) and ensure_utc(
            other.start_time
        ) < ensure_utc(self.end_time)

    def clock_in(self, user: Optional[str] = None) -> None:
        """
        Record the start of work.

        Raises:
            BusinessRuleException: If the shift was already clocked in
        """
        if self.clocked_in_at is not None:
            raise BusinessRuleException(
                "Shift is already clocked in", rule_name="single_clock_in"
            )
        self.clocked_in_at = get_current_utc()
        self.add_audit("Clocked in", user=user)

    def clock_out(self, user: Optional[str] = None) -> None:
        """
        Record the end of work.

        Raises:
            BusinessRuleException: If the shift is not in progress
        """
        if not self.is_in_progress:
            raise BusinessRuleException(
                "Shift is not in progress", rule_name="clock_out_after_clock_in"
            )
        self.clocked_out_at = get_current_utc()
        self.add_audit(f"Clocked out after {self.worked_hours:.2f} hour(s)", user=user)
