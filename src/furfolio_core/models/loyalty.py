"""
Loyalty program model for the furfolio-core package.

Each owner can belong to the loyalty program. Points are earned per visit
and redeemed in fixed blocks for rewards that expire after a set period.
"""

import enum
import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..audit import AuditableMixin
from ..exceptions import ValidationException
from ..utils.datetime_utils import days_between, ensure_utc, get_current_utc
from .base import BaseModel

if TYPE_CHECKING:
    from .owner import Owner


class LoyaltyTier(enum.Enum):
    """Loyalty tiers, lowest first."""

    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"


class RewardType(enum.Enum):
    FREE_BATH = "free_bath"
    DISCOUNT = "discount"
    FREE_NAIL_TRIM = "free_nail_trim"
    CUSTOM = "custom"

    @property
    def display_name(self) -> str:
        return {
            RewardType.FREE_BATH: "Free Bath",
            RewardType.DISCOUNT: "Discount",
            RewardType.FREE_NAIL_TRIM: "Free Nail Trim",
            RewardType.CUSTOM: "Custom Reward",
        }[self]


class LoyaltyBadge(enum.Enum):
    HIGH_ENGAGER = "high_engager"
    AT_RISK = "at_risk"
    NEW_MEMBER = "new_member"
    PLATINUM = "platinum"
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"


POINTS_PER_REWARD = 50
REWARD_EXPIRY_DAYS = 180
EXPIRING_SOON_DAYS = 30


def tier_for_points(points: int) -> LoyaltyTier:
    if points < 100:
        return LoyaltyTier.BRONZE
    if points < 250:
        return LoyaltyTier.SILVER
    if points < 500:
        return LoyaltyTier.GOLD
    return LoyaltyTier.PLATINUM


class LoyaltyProgram(AuditableMixin, BaseModel):
    """
    Loyalty membership for a single owner.

    Redeemed rewards are kept as a JSON list of
    ``{"type", "date", "expiry_date", "notes"}`` dictionaries.
    """

    __tablename__ = "loyalty_programs"
    __audit_log_name__ = "loyalty_program"

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("points", 0)
        kwargs.setdefault("visit_count", 0)
        kwargs.setdefault("rewards_redeemed", [])
        kwargs.setdefault("badge_tokens", [])
        super().__init__(**kwargs)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("owners.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rewards_redeemed: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    last_reward_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    badge_tokens: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    owner: Mapped["Owner"] = relationship(
        "Owner", back_populates="loyalty_program", lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint("points >= 0", name="check_loyalty_points_non_negative"),
    )

    @property
    def tier(self) -> LoyaltyTier:
        return tier_for_points(self.points or 0)

    @property
    def is_eligible_for_reward(self) -> bool:
        return (self.points or 0) >= POINTS_PER_REWARD

    @property
    def reward_progress(self) -> float:
        """Fraction of the way to the next reward, between 0.0 and 1.0."""
        return ((self.points or 0) % POINTS_PER_REWARD) / POINTS_PER_REWARD

    @property
    def days_since_last_reward(self) -> Optional[int]:
        if self.last_reward_date is None:
            return None
        return days_between(self.last_reward_date, get_current_utc())

    @property
    def summary(self) -> str:
        if self.is_eligible_for_reward:
            return f"Eligible for reward! ({self.points} pts)"
        remaining = POINTS_PER_REWARD - (self.points or 0) % POINTS_PER_REWARD
        return f"{self.points} pts, {remaining} more to next reward"

    @property
    def badges(self) -> List[LoyaltyBadge]:
        return self._tokens_as("badge_tokens", LoyaltyBadge)

    def add_badge(self, badge: LoyaltyBadge) -> bool:
        return self._add_token("badge_tokens", badge.value)

    def expiring_soon_rewards(self, within_days: int = EXPIRING_SOON_DAYS) -> List[Dict[str, Any]]:
        """Redeemed rewards whose expiry falls within ``within_days`` from now."""
        now = get_current_utc()
        horizon = now + timedelta(days=within_days)
        result = []
        for reward in self.rewards_redeemed or []:
            expiry = ensure_utc(datetime.fromisoformat(reward["expiry_date"]))
            if now <= expiry <= horizon:
                result.append(reward)
        return result

    def add_points(
        self, points: int, for_visit: bool = False, user: Optional[str] = None
    ) -> int:
        """
        Add loyalty points and optionally count a visit.

        Args:
            points: Points to add, must not be negative
            for_visit: Whether this award also counts as a visit
            user: Who awarded the points

        Returns:
            The new point balance

        Raises:
            ValidationException: If points is negative
        """
        if points < 0:
            raise ValidationException(
                "Loyalty points cannot be negative", field="points", value=points
            )
        self.points = (self.points or 0) + points
        if for_visit:
            self.visit_count = (self.visit_count or 0) + 1
        self.add_audit(f"Added {points} point(s). Balance: {self.points}", user=user)
        return self.points

    def redeem_reward(
        self,
        reward_type: RewardType,
        notes: Optional[str] = None,
        user: Optional[str] = None,
    ) -> bool:
        """Spend one reward's worth of points; False when not eligible."""
        if not self.is_eligible_for_reward:
            return False

        now = get_current_utc()
        self.points -= POINTS_PER_REWARD
        self.rewards_redeemed = list(self.rewards_redeemed or []) + [
            {
                "type": reward_type.value,
                "date": now.isoformat(),
                "expiry_date": (now + timedelta(days=REWARD_EXPIRY_DAYS)).isoformat(),
                "notes": notes,
            }
        ]
        self.last_reward_date = now
        self.add_audit(f"Redeemed reward: {reward_type.display_name}", user=user)
        return True

    def export_json(self) -> str:
        from ..schemas.loyalty import LoyaltyProgramExport

        return LoyaltyProgramExport.model_validate(self).model_dump_json(indent=2)
