"""
Appointment and charge Pydantic schemas for input validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.appointment import ServiceType
from ..models.charge import ChargeType, PaymentMethod
from ..utils.validation import normalize_tokens, validate_money


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    owner_id: Optional[UUID] = None
    dog_id: Optional[UUID] = None
    scheduled_at: datetime
    service_type: ServiceType = ServiceType.FULL_GROOM
    duration_minutes: Optional[int] = Field(None, gt=0, le=600)
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tokens(v)

    @model_validator(mode="after")
    def default_duration(self) -> "AppointmentCreate":
        if self.duration_minutes is None:
            self.duration_minutes = self.service_type.estimated_duration_minutes
        return self


class ChargeCreate(BaseModel):
    """Schema for recording a charge."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    date: datetime
    amount: Decimal
    charge_type: ChargeType = ChargeType.FULL_GROOM
    notes: Optional[str] = None
    is_paid: bool = False
    payment_method: PaymentMethod = PaymentMethod.UNPAID
    owner_id: Optional[UUID] = None
    dog_id: Optional[UUID] = None
    appointment_id: Optional[UUID] = None

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: object) -> Decimal:
        result = validate_money(v)  # type: ignore[arg-type]
        if not result.is_valid:
            raise ValueError(result.first_error)
        return result.value  # type: ignore[return-value]

    @model_validator(mode="after")
    def check_payment(self) -> "ChargeCreate":
        if self.is_paid and self.payment_method == PaymentMethod.UNPAID:
            raise ValueError("A paid charge needs a payment method")
        return self
