"""
Health record Pydantic schemas.

Validation for vaccination records and health observations, plus the
vaccination export used by ``VaccinationRecord.export_json``.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.health import ObservationType, VaccineType
from ..utils.validation import normalize_tokens


class VaccinationRecordCreate(BaseModel):
    """Schema for recording a vaccination."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    dog_id: UUID
    vaccine_type: VaccineType
    date_administered: datetime
    expiration_date: datetime
    lot_number: Optional[str] = Field(None, max_length=64)
    manufacturer: Optional[str] = Field(None, max_length=100)
    clinic: Optional[str] = Field(None, max_length=200)
    veterinarian: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    reminder_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tokens(v)

    @model_validator(mode="after")
    def check_dates(self) -> "VaccinationRecordCreate":
        if self.expiration_date <= self.date_administered:
            raise ValueError("Expiration date must be after the administration date")
        return self


class VaccinationRecordExport(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    dog_id: UUID
    vaccine_type: VaccineType
    date_administered: datetime
    expiration_date: datetime
    lot_number: Optional[str] = None
    manufacturer: Optional[str] = None
    clinic: Optional[str] = None
    veterinarian: Optional[str] = None
    is_verified: bool
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    badge_tokens: List[str] = Field(default_factory=list)
    is_expired: bool
    is_due_soon: bool
    risk_score: int


class HealthObservationCreate(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    dog_id: UUID
    observation_type: ObservationType
    value: str = Field(..., min_length=1, max_length=200)
    observed_at: Optional[datetime] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_numeric_value(self) -> "HealthObservationCreate":
        if self.observation_type in (ObservationType.WEIGHT, ObservationType.TEMPERATURE):
            try:
                float(self.value)
            except ValueError:
                raise ValueError(
                    f"{self.observation_type.display_name} must be a number"
                )
        return self
