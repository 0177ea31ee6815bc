"""
Client retention analysis.

Tags each owner by how recently they booked and raises alerts for clients
who are new, drifting away or already inactive.
"""

import enum
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional

from ..models.owner import RETENTION_RISK_DAYS, Owner
from ..utils.datetime_utils import days_between, ensure_utc, get_current_utc

logger = logging.getLogger(__name__)

INACTIVE_DAYS = 180
NEW_CLIENT_DAYS = 14


class RetentionTag(enum.Enum):
    NEW_CLIENT = "new_client"
    ACTIVE = "active"
    RETENTION_RISK = "retention_risk"
    INACTIVE = "inactive"

    @property
    def label(self) -> str:
        return {
            RetentionTag.NEW_CLIENT: "New Client",
            RetentionTag.ACTIVE: "Active",
            RetentionTag.RETENTION_RISK: "Retention Risk",
            RetentionTag.INACTIVE: "Inactive",
        }[self]


def retention_tag(owner: Owner, now: Optional[datetime] = None) -> RetentionTag:
    """
    Classify an owner by booking recency.

    Owners without appointments are measured from the date they were added.

    Args:
        owner: Owner with appointments loaded
        now: Reference time, defaults to the current UTC time

    Returns:
        NEW_CLIENT for owners added in the last 14 days with no bookings,
        INACTIVE past 180 days, RETENTION_RISK past 60 days or with no
        bookings, ACTIVE otherwise
    """
    now = ensure_utc(now) if now is not None else get_current_utc()
    last_appointment = owner.last_appointment_date
    days_since_added = days_between(owner.date_added, now)

    if last_appointment is None and days_since_added <= NEW_CLIENT_DAYS:
        return RetentionTag.NEW_CLIENT

    reference = last_appointment or owner.date_added
    idle_days = days_between(reference, now)
    if idle_days > INACTIVE_DAYS:
        return RetentionTag.INACTIVE
    if last_appointment is None or idle_days > RETENTION_RISK_DAYS:
        return RetentionTag.RETENTION_RISK
    return RetentionTag.ACTIVE


def retention_stats(
    owners: Iterable[Owner], now: Optional[datetime] = None
) -> Dict[RetentionTag, int]:
    """Count owners per tag; every tag appears, with zero when unused."""
    stats = {tag: 0 for tag in RetentionTag}
    for owner in owners:
        stats[retention_tag(owner, now)] += 1
    return stats


@dataclass
class RetentionAlert:
    owner_id: uuid.UUID
    tag: RetentionTag
    message: str
    last_appointment: Optional[datetime] = None
    created_at: datetime = field(default_factory=get_current_utc)


def _alert_message(owner: Owner, tag: RetentionTag) -> Optional[str]:
    name = owner.owner_name
    if tag == RetentionTag.RETENTION_RISK:
        return (
            f"{name} is at risk of churn "
            f"(no appointment in over {RETENTION_RISK_DAYS} days)."
        )
    if tag == RetentionTag.INACTIVE:
        return f"{name} is now inactive (no appointment in over {INACTIVE_DAYS} days)."
    if tag == RetentionTag.NEW_CLIENT:
        return f"{name} is a new client, engage and welcome!"
    return None


def generate_retention_alerts(
    owners: Iterable[Owner],
    handler: Optional[Callable[[RetentionAlert], None]] = None,
    now: Optional[datetime] = None,
) -> List[RetentionAlert]:
    """
    Build alerts for owners that need attention.

    Active owners produce no alert. ``handler`` is called once per alert.
    """
    alerts = []
    for owner in owners:
        tag = retention_tag(owner, now)
        message = _alert_message(owner, tag)
        if message is None:
            continue
        alert = RetentionAlert(
            owner_id=owner.id,
            tag=tag,
            message=message,
            last_appointment=owner.last_appointment_date,
        )
        alerts.append(alert)
        if handler is not None:
            handler(alert)
    logger.info(f"Generated {len(alerts)} retention alert(s)")
    return alerts
