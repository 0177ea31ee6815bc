"""
Health record models for the furfolio-core package.

This module contains the VaccinationRecord and HealthObservation models.
Groomers need current vaccinations on file before accepting a dog, and
record observations (weight, temperature, behavior) made during sessions.
"""

import enum
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..audit import AuditableMixin
from ..utils.datetime_utils import days_between, ensure_utc, get_current_utc
from .base import BaseModel

if TYPE_CHECKING:
    from .dog import Dog

DUE_SOON_DAYS = 30


class VaccineType(enum.Enum):
    RABIES = "rabies"
    DISTEMPER = "distemper"
    PARVO = "parvo"
    HEPATITIS = "hepatitis"
    BORDETELLA = "bordetella"
    LEPTOSPIROSIS = "leptospirosis"
    LYME = "lyme"
    INFLUENZA = "influenza"
    OTHER = "other"

    @property
    def is_core(self) -> bool:
        return self in CORE_VACCINES


CORE_VACCINES = frozenset(
    {VaccineType.RABIES, VaccineType.PARVO, VaccineType.DISTEMPER, VaccineType.HEPATITIS}
)


class VaccinationBadge(enum.Enum):
    OVERDUE = "overdue"
    EXPIRING_SOON = "expiring_soon"
    ANNUAL = "annual"
    CORE = "core"
    COMPLIANCE = "compliance"
    ADVERSE_REACTION = "adverse_reaction"
    IMPORTED = "imported"
    VERIFIED = "verified"


class ObservationType(enum.Enum):
    WEIGHT = "weight"
    TEMPERATURE = "temperature"
    BEHAVIOR = "behavior"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class VaccinationRecord(AuditableMixin, BaseModel):
    """
    A vaccination given to a dog.

    ``risk_score`` weighs expiry, core status, reactions and verification so
    the most pressing records sort first.
    """

    __tablename__ = "vaccination_records"
    __audit_log_name__ = "vaccination_record"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("is_verified", False)
        kwargs.setdefault("tags", [])
        kwargs.setdefault("badge_tokens", [])
        super().__init__(**kwargs)

    dog_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vaccine_type: Mapped[VaccineType] = mapped_column(Enum(VaccineType), nullable=False)
    date_administered: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    expiration_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    lot_number: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    clinic: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    veterinarian: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reminder_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    badge_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    dog: Mapped["Dog"] = relationship(
        "Dog", back_populates="vaccination_records", lazy="selectin"
    )

    @property
    def is_expired(self) -> bool:
        return get_current_utc() > ensure_utc(self.expiration_date)

    @property
    def is_due_soon(self) -> bool:
        if self.is_expired:
            return False
        horizon = get_current_utc() + timedelta(days=DUE_SOON_DAYS)
        return ensure_utc(self.expiration_date) <= horizon

    @property
    def days_until_expiration(self) -> int:
        return days_between(get_current_utc(), self.expiration_date)

    @property
    def days_since_administered(self) -> int:
        return days_between(self.date_administered, get_current_utc())

    @property
    def is_core_vaccine(self) -> bool:
        return self.vaccine_type.is_core

    @property
    def is_adverse_reaction(self) -> bool:
        if self.has_badge(VaccinationBadge.ADVERSE_REACTION):
            return True
        return "reaction" in (self.notes or "").lower()

    @property
    def is_imported(self) -> bool:
        if self.has_badge(VaccinationBadge.IMPORTED):
            return True
        return any("import" in tag.lower() for tag in self.tags or [])

    @property
    def risk_score(self) -> int:
        score = 0
        if self.is_expired:
            score += 3
        if self.is_due_soon:
            score += 1
        if self.is_core_vaccine:
            score += 1
        if self.is_adverse_reaction:
            score += 2
        if not self.is_verified:
            score += 1
        if self.has_badge(VaccinationBadge.IMPORTED):
            score += 1
        return score

    @property
    def badges(self) -> List[VaccinationBadge]:
        return self._tokens_as("badge_tokens", VaccinationBadge)

    def add_badge(self, badge: VaccinationBadge) -> bool:
        return self._add_token("badge_tokens", badge.value)

    def remove_badge(self, badge: VaccinationBadge) -> bool:
        return self._remove_token("badge_tokens", badge.value)

    def has_badge(self, badge: VaccinationBadge) -> bool:
        return self._has_token("badge_tokens", badge.value)

    def verify(self, user: Optional[str] = None) -> None:
        self.is_verified = True
        self.add_badge(VaccinationBadge.VERIFIED)
        self.add_audit("Verified", user=user)

    @staticmethod
    def filter_overdue(records: Iterable["VaccinationRecord"]) -> List["VaccinationRecord"]:
        return [record for record in records if record.is_expired]

    @staticmethod
    def filter_expiring_soon(
        records: Iterable["VaccinationRecord"],
    ) -> List["VaccinationRecord"]:
        return [record for record in records if record.is_due_soon]

    @staticmethod
    def filter_adverse_reactions(
        records: Iterable["VaccinationRecord"],
    ) -> List["VaccinationRecord"]:
        return [record for record in records if record.is_adverse_reaction]

    def export_json(self) -> str:
        from ..schemas.health import VaccinationRecordExport

        return VaccinationRecordExport.model_validate(self).model_dump_json(indent=2)

    def __repr__(self) -> str:
        return (
            f"<VaccinationRecord(id={self.id}, vaccine={self.vaccine_type.value}, "
            f"expires={self.expiration_date})>"
        )


class HealthObservation(AuditableMixin, BaseModel):
    """Observation recorded about a dog, e.g. weight at check-in."""

    __tablename__ = "health_observations"
    __audit_log_name__ = "health_observation"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("observed_at", get_current_utc())
        kwargs.setdefault("observation_type", ObservationType.OTHER)
        super().__init__(**kwargs)

    dog_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False
    )
    observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    observation_type: Mapped[ObservationType] = mapped_column(
        Enum(ObservationType), nullable=False
    )
    value: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    dog: Mapped["Dog"] = relationship(
        "Dog", back_populates="health_observations", lazy="selectin"
    )

    __table_args__ = (Index("idx_observation_dog_date", "dog_id", "observed_at"),)

    @property
    def type_description(self) -> str:
        return self.observation_type.display_name

    @property
    def formatted_date(self) -> str:
        return ensure_utc(self.observed_at).strftime("%b %d, %Y")

    def update_value(self, value: str, user: Optional[str] = None) -> None:
        previous = self.value
        self.value = value
        self.add_audit(f"Value changed from {previous} to {value}", user=user)
