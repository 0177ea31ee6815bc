"""
Staff member model for the furfolio-core package.

Groomers, receptionists and other employees, with tenure and a simple
account-hygiene risk score.
"""

import enum
from datetime import datetime, timedelta
from typing import Any, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from ..audit import AuditableMixin
from ..utils.datetime_utils import add_months, ensure_utc, get_current_utc
from .base import BaseModel

RECENTLY_ACTIVE_DAYS = 14
PASSWORD_MAX_AGE_MONTHS = 12


class StaffRole(enum.Enum):
    OWNER = "owner"
    GROOMER = "groomer"
    ADMIN = "admin"
    RECEPTIONIST = "receptionist"
    ASSISTANT = "assistant"
    OTHER = "other"


class StaffBadge(enum.Enum):
    CERTIFIED = "certified"
    BILINGUAL = "bilingual"
    REMOTE = "remote"
    FIRST_AID = "first_aid"
    MENTOR = "mentor"
    AT_RISK = "at_risk"
    LONG_TERM = "long_term"
    RECENTLY_JOINED = "recently_joined"


class StaffMember(AuditableMixin, BaseModel):
    __tablename__ = "staff_members"
    __audit_log_name__ = "staff_member"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("role", StaffRole.GROOMER)
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("is_archived", False)
        kwargs.setdefault("mfa_enabled", False)
        kwargs.setdefault("date_joined", get_current_utc())
        kwargs.setdefault("badge_tokens", [])
        super().__init__(**kwargs)

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    role: Mapped[StaffRole] = mapped_column(Enum(StaffRole), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    date_joined: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=get_current_utc
    )
    last_active_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_password_change: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    mfa_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    compliance_training_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    badge_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    @property
    def is_owner(self) -> bool:
        return self.role == StaffRole.OWNER

    @property
    def is_groomer(self) -> bool:
        return self.role == StaffRole.GROOMER

    @property
    def years_at_company(self) -> float:
        elapsed = get_current_utc() - ensure_utc(self.date_joined)
        return elapsed.total_seconds() / (365.25 * 86400)

    @property
    def is_recently_active(self) -> bool:
        if self.last_active_at is None:
            return False
        cutoff = get_current_utc() - timedelta(days=RECENTLY_ACTIVE_DAYS)
        return ensure_utc(self.last_active_at) >= cutoff

    @property
    def quick_status(self) -> str:
        if not self.is_active:
            return "Inactive"
        if self.is_archived:
            return "Archived"
        return "Active" if self.is_recently_active else "Idle"

    @property
    def risk_score(self) -> int:
        """One point per account-hygiene problem."""
        now = get_current_utc()
        score = 0
        if not self.mfa_enabled:
            score += 1
        if self.last_password_change is None or ensure_utc(
            self.last_password_change
        ) < add_months(now, -PASSWORD_MAX_AGE_MONTHS):
            score += 1
        if not self.is_active or self.is_archived:
            score += 1
        if self.compliance_training_date is not None and ensure_utc(
            self.compliance_training_date
        ) < add_months(now, -12):
            score += 1
        if not self.is_recently_active:
            score += 1
        if self.has_badge(StaffBadge.AT_RISK):
            score += 1
        return score

    @property
    def badges(self) -> List[StaffBadge]:
        return self._tokens_as("badge_tokens", StaffBadge)

    def add_badge(self, badge: StaffBadge) -> bool:
        return self._add_token("badge_tokens", badge.value)

    def has_badge(self, badge: StaffBadge) -> bool:
        return self._has_token("badge_tokens", badge.value)

    def record_activity(self) -> None:
        self.last_active_at = get_current_utc()

    def deactivate(self, user: Optional[str] = None) -> None:
        self.is_active = False
        self.add_audit("Deactivated", user=user)

    def archive(self, user: Optional[str] = None) -> None:
        self.is_archived = True
        self.add_audit("Archived", user=user)

    def export_json(self) -> str:
        from ..schemas.staff import StaffMemberExport

        return StaffMemberExport.model_validate(self).model_dump_json(indent=2)
