"""
Owner and dog Pydantic schemas for input validation and serialization.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.dog import DogTag
from ..utils.datetime_utils import get_current_utc
from ..utils.validation import sanitize_optional, validate_email, validate_phone


class OwnerCreate(BaseModel):
    """Schema for creating a new owner."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    owner_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        result = validate_email(v)
        if not result.is_valid:
            raise ValueError(result.first_error)
        return result.value

    @field_validator("phone")
    @classmethod
    def validate_phone_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        result = validate_phone(v)
        if not result.is_valid:
            raise ValueError(result.first_error)
        return result.value

    @field_validator("address", "notes")
    @classmethod
    def clean_text(cls, v: Optional[str]) -> Optional[str]:
        return sanitize_optional(v)


class DogCreate(BaseModel):
    """Schema for adding a dog to an owner."""

    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    owner_id: UUID
    name: str = Field(..., min_length=1, max_length=100)
    breed: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = None
    weight_kg: Optional[Decimal] = Field(None, gt=0, le=120)
    coat_type: Optional[str] = Field(None, max_length=50)
    temperament: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    tag_tokens: List[DogTag] = Field(default_factory=list)

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: Optional[date]) -> Optional[date]:
        if v is not None and v > get_current_utc().date():
            raise ValueError("Birth date cannot be in the future")
        return v

    def to_model_kwargs(self) -> dict:
        data = self.model_dump()
        data["tag_tokens"] = [tag.value for tag in self.tag_tokens]
        return data
