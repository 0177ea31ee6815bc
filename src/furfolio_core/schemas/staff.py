"""Staff member Pydantic schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.staff import StaffRole
from ..utils.validation import validate_email, validate_phone


class StaffMemberCreate(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    role: StaffRole = StaffRole.GROOMER
    email: Optional[str] = None
    phone: Optional[str] = None
    mfa_enabled: bool = False

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


class StaffMemberExport(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    name: str
    role: StaffRole
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    is_archived: bool
    date_joined: datetime
    last_active_at: Optional[datetime] = None
    mfa_enabled: bool
    badge_tokens: List[str] = Field(default_factory=list)
    quick_status: str
    risk_score: int
