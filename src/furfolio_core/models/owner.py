"""
Owner model for the furfolio-core package.

This module contains the Owner SQLAlchemy model: the client who brings dogs
in for grooming, with spend and retention analytics derived from their
appointments and charges.
"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..audit import AuditableMixin
from ..utils.datetime_utils import days_between, ensure_utc, get_current_utc
from .base import BaseModel
from .loyalty import LoyaltyTier

if TYPE_CHECKING:
    from .appointment import Appointment
    from .charge import Charge
    from .dog import Dog
    from .loyalty import LoyaltyProgram


RETENTION_RISK_DAYS = 60


class OwnerBadge(enum.Enum):
    LOYAL = "loyal"
    FRIENDLY = "friendly"
    AT_RISK = "at_risk"
    BIG_SPENDER = "big_spender"
    NEW_CLIENT = "new_client"
    MULTI_PET = "multi_pet"
    FEEDBACK_CHAMPION = "feedback_champion"
    PLATINUM = "platinum"


def tier_for_spend(total: Decimal) -> LoyaltyTier:
    if total < 500:
        return LoyaltyTier.BRONZE
    if total < 2000:
        return LoyaltyTier.SILVER
    if total < 5000:
        return LoyaltyTier.GOLD
    return LoyaltyTier.PLATINUM


class Owner(AuditableMixin, BaseModel):
    """
    Dog owner (client) model.

    Spend, visit and retention figures are computed from the loaded
    ``appointments`` and ``charges`` collections; nothing derived is stored.
    """

    __tablename__ = "owners"
    __audit_log_name__ = "owner"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("badge_tokens", [])
        kwargs.setdefault("date_added", get_current_utc())
        kwargs.setdefault("dogs", [])
        kwargs.setdefault("appointments", [])
        kwargs.setdefault("charges", [])
        super().__init__(**kwargs)

    owner_name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    date_added: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=get_current_utc
    )
    badge_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    dogs: Mapped[List["Dog"]] = relationship(
        "Dog", back_populates="owner", cascade="all, delete-orphan", lazy="selectin"
    )
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", back_populates="owner", lazy="selectin"
    )
    charges: Mapped[List["Charge"]] = relationship(
        "Charge", back_populates="owner", lazy="selectin"
    )
    loyalty_program: Mapped[Optional["LoyaltyProgram"]] = relationship(
        "LoyaltyProgram", back_populates="owner", uselist=False, lazy="selectin"
    )

    __table_args__ = (Index("idx_owner_email", "email"),)

    @property
    def display_name(self) -> str:
        name = (self.owner_name or "").strip()
        return name or "Unnamed Owner"

    @property
    def total_spent(self) -> Decimal:
        return sum((Decimal(charge.amount) for charge in self.charges), Decimal("0"))

    def spend_for_year(self, year: int) -> Decimal:
        return sum(
            (
                Decimal(charge.amount)
                for charge in self.charges
                if ensure_utc(charge.date).year == year
            ),
            Decimal("0"),
        )

    @property
    def dog_count(self) -> int:
        return len(self.dogs)

    @property
    def has_active_dogs(self) -> bool:
        return any(dog.is_active for dog in self.dogs)

    @property
    def completed_appointments(self) -> int:
        from .appointment import AppointmentStatus

        return sum(
            1
            for appointment in self.appointments
            if appointment.status == AppointmentStatus.COMPLETED
        )

    @property
    def last_appointment_date(self) -> Optional[datetime]:
        dates = [ensure_utc(a.scheduled_at) for a in self.appointments]
        return max(dates) if dates else None

    def days_since_last_appointment(self, now: Optional[datetime] = None) -> Optional[int]:
        last = self.last_appointment_date
        if last is None:
            return None
        return days_between(last, now or get_current_utc())

    @property
    def is_retention_risk(self) -> bool:
        """No visits at all, or the last one was over 60 days ago."""
        days = self.days_since_last_appointment()
        return days is None or days > RETENTION_RISK_DAYS

    @property
    def loyalty_tier(self) -> LoyaltyTier:
        return tier_for_spend(self.total_spent)

    @property
    def average_appointment_interval(self) -> Optional[float]:
        """Mean days between consecutive appointments, None with fewer than two."""
        dates = sorted(ensure_utc(a.scheduled_at) for a in self.appointments)
        if len(dates) < 2:
            return None
        gaps = [
            (later - earlier).total_seconds() / 86400
            for earlier, later in zip(dates, dates[1:])
        ]
        return sum(gaps) / len(gaps)

    @property
    def badges(self) -> List[OwnerBadge]:
        return self._tokens_as("badge_tokens", OwnerBadge)

    def add_badge(self, badge: OwnerBadge) -> bool:
        return self._add_token("badge_tokens", badge.value)

    def remove_badge(self, badge: OwnerBadge) -> bool:
        return self._remove_token("badge_tokens", badge.value)

    def has_badge(self, badge: OwnerBadge) -> bool:
        return self._has_token("badge_tokens", badge.value)

    def __repr__(self) -> str:
        return f"<Owner(id={self.id}, name='{self.display_name}')>"
