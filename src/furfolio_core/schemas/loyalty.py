"""Loyalty program Pydantic schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.loyalty import LoyaltyTier


class LoyaltyProgramExport(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    owner_id: UUID
    points: int
    visit_count: int
    tier: LoyaltyTier
    is_eligible_for_reward: bool
    reward_progress: float
    rewards_redeemed: List[Dict[str, Any]] = Field(default_factory=list)
    last_reward_date: Optional[datetime] = None
    badge_tokens: List[str] = Field(default_factory=list)
