"""
Dog model for the furfolio-core package.

This module contains the Dog SQLAlchemy model with grooming-relevant profile
data and links to the dog's owner, appointments and health records.
"""

import enum
import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..utils.datetime_utils import calculate_dog_age, format_age
from .base import BaseModel

if TYPE_CHECKING:
    from .appointment import Appointment
    from .health import HealthObservation, VaccinationRecord
    from .owner import Owner


SENIOR_AGE_YEARS = 8


class DogTag(enum.Enum):
    ANXIOUS = "anxious"
    AGGRESSIVE = "aggressive"
    SENIOR = "senior"
    PUPPY = "puppy"
    SPECIAL_NEEDS = "special_needs"
    ALLERGY = "allergy"
    VIP = "vip"


class Dog(BaseModel):
    """Dog profile owned by an Owner."""

    __tablename__ = "dogs"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("tag_tokens", [])
        kwargs.setdefault("appointments", [])
        kwargs.setdefault("vaccination_records", [])
        kwargs.setdefault("health_observations", [])
        super().__init__(**kwargs)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    breed: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    weight_kg: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    coat_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    temperament: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tag_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    owner: Mapped["Owner"] = relationship("Owner", back_populates="dogs", lazy="selectin")
    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", back_populates="dog", lazy="selectin"
    )
    vaccination_records: Mapped[List["VaccinationRecord"]] = relationship(
        "VaccinationRecord",
        back_populates="dog",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    health_observations: Mapped[List["HealthObservation"]] = relationship(
        "HealthObservation",
        back_populates="dog",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "weight_kg IS NULL OR weight_kg > 0", name="check_dog_weight_positive"
        ),
    )

    @property
    def breed_display(self) -> str:
        return (self.breed or "").strip() or "Mixed/Unknown"

    @property
    def age_years(self) -> Optional[int]:
        if self.birth_date is None:
            return None
        return calculate_dog_age(self.birth_date)["years"]

    @property
    def age_display(self) -> str:
        if self.birth_date is None:
            return "Unknown age"
        return format_age(calculate_dog_age(self.birth_date))

    @property
    def is_senior(self) -> bool:
        age = self.age_years
        return age is not None and age >= SENIOR_AGE_YEARS

    @property
    def has_overdue_vaccinations(self) -> bool:
        return any(record.is_expired for record in self.vaccination_records)

    @property
    def tags(self) -> List[DogTag]:
        return self._tokens_as("tag_tokens", DogTag)

    def add_tag(self, tag: DogTag) -> bool:
        return self._add_token("tag_tokens", tag.value)

    def remove_tag(self, tag: DogTag) -> bool:
        return self._remove_token("tag_tokens", tag.value)

    def __repr__(self) -> str:
        return f"<Dog(id={self.id}, name='{self.name}', breed='{self.breed_display}')>"
