"""Notification request schema."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationRequest(BaseModel):
    """Validated input for scheduling a local notification."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=120)
    body: str = Field("", max_length=1000)
    deliver_at: datetime
    sound: Optional[str] = "default"
    category: Optional[str] = Field(None, max_length=64)
    notification_id: Optional[str] = Field(None, max_length=128)
    user_id: Optional[str] = None
