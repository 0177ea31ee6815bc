"""
User model for the furfolio-core package.

This module contains the User SQLAlchemy model for application accounts,
with account state transitions, login streak tracking and a risk score.
"""

import enum
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..audit import AuditableMixin
from ..utils.datetime_utils import add_months, days_between, ensure_utc, get_current_utc
from .base import BaseModel

POWER_USER_STREAK = 30
PASSWORD_MAX_AGE_MONTHS = 12


class UserRole(enum.Enum):
    """Enumeration of account roles."""

    OWNER = "owner"
    ADMIN = "admin"
    GROOMER = "groomer"
    RECEPTIONIST = "receptionist"
    STAFF = "staff"
    CUSTOM = "custom"


class UserBadge(enum.Enum):
    MFA = "mfa"
    TRUSTED = "trusted"
    ONBOARDING = "onboarding"
    COMPLIANCE = "compliance"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"
    POWER_USER = "power_user"
    MULTI_BUSINESS = "multi_business"
    RISK = "risk"


class User(AuditableMixin, BaseModel):
    """
    Application account.

    An account is usable (``is_enabled``) only while it is active and neither
    suspended nor archived. Every state transition is written to the user
    audit log.
    """

    __tablename__ = "users"
    __audit_log_name__ = "user"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("role", UserRole.STAFF)
        kwargs.setdefault("is_active", True)
        kwargs.setdefault("is_archived", False)
        kwargs.setdefault("is_suspended", False)
        kwargs.setdefault("mfa_enabled", False)
        kwargs.setdefault("verified", False)
        kwargs.setdefault("login_streak", 0)
        kwargs.setdefault("tags", [])
        kwargs.setdefault("badge_tokens", [])
        super().__init__(**kwargs)

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_suspended: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    mfa_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    password_last_changed: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    compliance_accepted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    login_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    badge_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (Index("idx_user_role_active", "role", "is_active"),)

    @property
    def is_enabled(self) -> bool:
        return self.is_active and not self.is_suspended and not self.is_archived

    @property
    def days_since_last_login(self) -> Optional[int]:
        if self.last_login_at is None:
            return None
        return days_between(self.last_login_at, get_current_utc())

    @property
    def is_password_stale(self) -> bool:
        if self.password_last_changed is None:
            return False
        cutoff = add_months(get_current_utc(), -PASSWORD_MAX_AGE_MONTHS)
        return ensure_utc(self.password_last_changed) < cutoff

    @property
    def risk_score(self) -> int:
        score = 0
        if not self.mfa_enabled:
            score += 1
        if not self.verified:
            score += 1
        if self.is_suspended or self.is_archived:
            score += 2
        if self.is_password_stale:
            score += 1
        if self.has_badge(UserBadge.RISK):
            score += 1
        return score

    @property
    def is_power_user(self) -> bool:
        return self.has_badge(UserBadge.POWER_USER) or self.login_streak > POWER_USER_STREAK

    @property
    def is_trusted(self) -> bool:
        if self.is_suspended or self.is_archived:
            return False
        return self.has_badge(UserBadge.TRUSTED) or (self.verified and self.mfa_enabled)

    @property
    def is_compliant(self) -> bool:
        return self.compliance_accepted_at is not None or self.has_badge(
            UserBadge.COMPLIANCE
        )

    @property
    def badges(self) -> List[UserBadge]:
        return self._tokens_as("badge_tokens", UserBadge)

    def add_badge(self, badge: UserBadge) -> bool:
        return self._add_token("badge_tokens", badge.value)

    def remove_badge(self, badge: UserBadge) -> bool:
        return self._remove_token("badge_tokens", badge.value)

    def has_badge(self, badge: UserBadge) -> bool:
        return self._has_token("badge_tokens", badge.value)

    # State transitions

    def enable(self, by: Optional[str] = None) -> None:
        """Reactivate the account, lifting any suspension."""
        self.is_active = True
        self.is_suspended = False
        self.remove_badge(UserBadge.SUSPENDED)
        self.add_audit("Enabled", user=by)

    def disable(self, by: Optional[str] = None) -> None:
        self.is_active = False
        self.add_audit("Disabled", user=by)

    def suspend(self, by: Optional[str] = None, reason: Optional[str] = None) -> None:
        self.is_suspended = True
        self.add_badge(UserBadge.SUSPENDED)
        text = "Suspended" if not reason else f"Suspended: {reason}"
        self.add_audit(text, user=by)

    def unsuspend(self, by: Optional[str] = None) -> None:
        self.is_suspended = False
        self.remove_badge(UserBadge.SUSPENDED)
        self.add_audit("Unsuspended", user=by)

    def archive(self, by: Optional[str] = None) -> None:
        self.is_archived = True
        self.add_badge(UserBadge.ARCHIVED)
        self.add_audit("Archived", user=by)

    def unarchive(self, by: Optional[str] = None) -> None:
        self.is_archived = False
        self.remove_badge(UserBadge.ARCHIVED)
        self.add_audit("Unarchived", user=by)

    def record_login(self, now: Optional[datetime] = None) -> int:
        """
        Register a login and update the daily streak.

        A login the calendar day after the previous one extends the streak,
        a same-day login leaves it unchanged, anything else restarts it at 1.

        Returns:
            The updated login streak
        """
        now = ensure_utc(now or get_current_utc())
        if self.last_login_at is None:
            self.login_streak = 1
        else:
            gap = (now.date() - ensure_utc(self.last_login_at).date()).days
            if gap == 1:
                self.login_streak = (self.login_streak or 0) + 1
            elif gap == 0:
                self.login_streak = max(self.login_streak or 0, 1)
            else:
                self.login_streak = 1
        self.last_login_at = now
        self.add_audit("Logged in", user=self.username)
        return self.login_streak

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role={self.role.value})>"
