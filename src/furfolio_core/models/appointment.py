"""
Appointment model for the furfolio-core package.

This module contains the Appointment SQLAlchemy model for grooming sessions,
with service types, status tracking and schedule helpers.
"""

import enum
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..audit import AuditableMixin
from ..utils.datetime_utils import ensure_utc, get_current_utc
from .base import BaseModel

if TYPE_CHECKING:
    from .dog import Dog
    from .owner import Owner


class ServiceType(enum.Enum):
    """Grooming services offered."""

    FULL_GROOM = "full_groom"
    BASIC_BATH = "basic_bath"
    NAIL_TRIM = "nail_trim"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return _SERVICE_DISPLAY_NAMES[self]

    @property
    def estimated_duration_minutes(self) -> int:
        return _SERVICE_DURATIONS[self]


_SERVICE_DISPLAY_NAMES = {
    ServiceType.FULL_GROOM: "Full Groom",
    ServiceType.BASIC_BATH: "Basic Bath",
    ServiceType.NAIL_TRIM: "Nail Trim",
    ServiceType.CUSTOM: "Custom",
}

_SERVICE_DURATIONS = {
    ServiceType.FULL_GROOM: 90,
    ServiceType.BASIC_BATH: 45,
    ServiceType.NAIL_TRIM: 20,
    ServiceType.CUSTOM: 60,
}


class AppointmentStatus(enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def display_name(self) -> str:
        return {
            AppointmentStatus.SCHEDULED: "Scheduled",
            AppointmentStatus.IN_PROGRESS: "In Progress",
            AppointmentStatus.COMPLETED: "Completed",
            AppointmentStatus.CANCELLED: "Cancelled",
            AppointmentStatus.NO_SHOW: "No Show",
        }[self]


class Appointment(AuditableMixin, BaseModel):
    """
    Grooming appointment for one dog.

    ``duration_minutes`` defaults to the service's estimated duration.
    """

    __tablename__ = "appointments"
    __audit_log_name__ = "appointment"

    def __init__(self, **kwargs: Any) -> None:
        service = kwargs.setdefault("service_type", ServiceType.FULL_GROOM)
        kwargs.setdefault("duration_minutes", service.estimated_duration_minutes)
        kwargs.setdefault("status", AppointmentStatus.SCHEDULED)
        kwargs.setdefault("tags", [])
        super().__init__(**kwargs)

    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("owners.id", ondelete="SET NULL"), nullable=True, index=True
    )
    dog_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("dogs.id", ondelete="SET NULL"), nullable=True, index=True
    )
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    service_type: Mapped[ServiceType] = mapped_column(
        Enum(ServiceType), nullable=False, default=ServiceType.FULL_GROOM
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(AppointmentStatus),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        index=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_modified_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    owner: Mapped[Optional["Owner"]] = relationship(
        "Owner", back_populates="appointments", lazy="selectin"
    )
    dog: Mapped[Optional["Dog"]] = relationship(
        "Dog", back_populates="appointments", lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="check_appointment_duration"),
        Index("idx_appointment_owner_date", "owner_id", "scheduled_at"),
    )

    @property
    def end_time(self) -> datetime:
        return ensure_utc(self.scheduled_at) + timedelta(minutes=self.duration_minutes)

    @property
    def is_past(self) -> bool:
        return self.end_time < get_current_utc()

    @property
    def is_upcoming(self) -> bool:
        return (
            ensure_utc(self.scheduled_at) > get_current_utc()
            and self.status == AppointmentStatus.SCHEDULED
        )

    @property
    def is_active(self) -> bool:
        return self.status in (AppointmentStatus.SCHEDULED, AppointmentStatus.IN_PROGRESS)

    def change_status(self, status: AppointmentStatus, user: Optional[str] = None) -> None:
        previous = self.status
        self.status = status
        self.last_modified_by = user
        self.add_audit(
            f"Status changed from {previous.display_name} to {status.display_name}",
            user=user,
        )

    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, service={self.service_type.value}, "
            f"status={self.status.value})>"
        )
