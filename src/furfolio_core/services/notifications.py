"""
Local notification scheduling.

``NotificationService`` keeps pending reminders in memory and hands due
ones to a pluggable backend. Every authorization change, schedule, cancel
and delivery failure is written to the "notification_service" audit log.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from ..audit import AuditLog, get_audit_log
from ..exceptions import (
    NotificationException,
    PermissionDeniedException,
    SchemaValidationException,
    ValidationException,
)
from ..schemas.notification import NotificationRequest
from ..utils.datetime_utils import ensure_utc, get_current_utc

logger = logging.getLogger(__name__)

NOTIFICATION_AUDIT_LOG = "notification_service"
NOTIFICATION_AUDIT_CAPACITY = 100


@dataclass
class ScheduledNotification:
    id: str
    title: str
    body: str
    deliver_at: datetime
    sound: Optional[str] = "default"
    category: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime = field(default_factory=get_current_utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "deliver_at": self.deliver_at.isoformat(),
            "sound": self.sound,
            "category": self.category,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class NotificationAuditEvent:
    """
    Audit record for notification activity.

    ``type`` is one of ``requestAuth``, ``schedule``, ``cancel``,
    ``deliver`` or ``error``.
    """

    type: str
    notification_id: Optional[str] = None
    user_id: Optional[str] = None
    status: Optional[str] = None
    detail: Optional[str] = None
    timestamp: datetime = field(default_factory=get_current_utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "notification_id": self.notification_id,
            "user_id": self.user_id,
            "status": self.status,
            "detail": self.detail,
            "timestamp": self.timestamp.isoformat(),
        }


class NotificationBackend(Protocol):
    def deliver(self, notification: ScheduledNotification) -> None: ...


class LoggingNotificationBackend:
    """Backend that only logs deliveries and remembers what it delivered."""

    def __init__(self) -> None:
        self.delivered: List[ScheduledNotification] = []

    def deliver(self, notification: ScheduledNotification) -> None:
        self.delivered.append(notification)
        logger.info(
            f"Delivered notification {notification.id}: {notification.title}"
        )


class NotificationService:
    """
    Schedule, cancel and dispatch local notifications.

    Args:
        backend: Delivery backend, defaults to ``LoggingNotificationBackend``
        user_id: Account the notifications belong to
        audit_log: Audit log override, defaults to the shared
            "notification_service" log
    """

    def __init__(
        self,
        backend: Optional[NotificationBackend] = None,
        user_id: Optional[str] = None,
        audit_log: Optional[AuditLog[NotificationAuditEvent]] = None,
    ):
        self.backend = backend if backend is not None else LoggingNotificationBackend()
        self.user_id = user_id
        self.audit_log = (
            audit_log
            if audit_log is not None
            else get_audit_log(NOTIFICATION_AUDIT_LOG, NOTIFICATION_AUDIT_CAPACITY)
        )
        self.authorized: Optional[bool] = None
        self.last_error: Optional[Exception] = None
        self._pending: Dict[str, ScheduledNotification] = {}

    def _audit(
        self,
        event_type: str,
        notification_id: Optional[str] = None,
        status: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> NotificationAuditEvent:
        event = NotificationAuditEvent(
            type=event_type,
            notification_id=notification_id,
            user_id=self.user_id,
            status=status,
            detail=detail,
        )
        self.audit_log.add(event)
        return event

    def request_authorization(self, granted: Optional[bool]) -> bool:
        """
        Record the outcome of a notification permission prompt.

        Args:
            granted: Whether the user allowed notifications; None counts as
                denied

        Returns:
            The resulting authorization state
        """
        self.authorized = bool(granted)
        status = "granted" if self.authorized else "denied"
        self._audit("requestAuth", status=status)
        if self.authorized:
            self.last_error = None
            logger.info("Notification authorization granted")
        else:
            self.last_error = PermissionDeniedException("notifications")
            logger.warning("Notification authorization denied by user")
        return self.authorized

    def schedule_notification(
        self,
        title: str,
        body: str,
        at: datetime,
        sound: Optional[str] = "default",
        category: Optional[str] = None,
        notification_id: Optional[str] = None,
    ) -> ScheduledNotification:
        """
        Schedule a notification for delivery at ``at``.

        Scheduling again with an existing ``notification_id`` replaces the
        pending notification.

        Raises:
            PermissionDeniedException: If notifications are not authorized
            ValidationException: If the title is empty or ``at`` is in the past
        """
        if not self.authorized:
            raise PermissionDeniedException("notifications")

        try:
            request = NotificationRequest(
                title=title,
                body=body,
                deliver_at=at,
                sound=sound,
                category=category,
                notification_id=notification_id,
                user_id=self.user_id,
            )
        except PydanticValidationError as e:
            raise SchemaValidationException.from_pydantic(e, "NotificationRequest")

        deliver_at = ensure_utc(request.deliver_at)
        if deliver_at < get_current_utc():
            raise ValidationException(
                "Notification time must be in the future",
                field="deliver_at",
                value=deliver_at.isoformat(),
            )

        notification = ScheduledNotification(
            id=request.notification_id or str(uuid.uuid4()),
            title=request.title,
            body=request.body,
            deliver_at=deliver_at,
            sound=request.sound,
            category=request.category,
            user_id=self.user_id,
        )
        if notification.id in self._pending:
            logger.info(f"Replacing pending notification {notification.id}")
        self._pending[notification.id] = notification

        self._audit("schedule", notification.id, status="scheduled")
        logger.info(
            f"Scheduled notification {notification.id} for {deliver_at.isoformat()}"
        )
        return notification

    def notify_now(
        self, title: str, body: str = "", category: Optional[str] = None
    ) -> Optional[ScheduledNotification]:
        """
        Deliver a notification immediately.

        Nothing is delivered while notifications are not authorized; the
        permission error is kept in ``last_error`` instead of being raised so
        callers such as the low-stock hook carry on.

        Returns:
            The delivered notification, or None when it was not delivered
        """
        if not self.authorized:
            self.last_error = PermissionDeniedException("notifications")
            self._audit("error", status="unauthorized", detail=title)
            logger.warning(f"Notification '{title}' dropped, notifications not authorized")
            return None

        notification = ScheduledNotification(
            id=str(uuid.uuid4()),
            title=title,
            body=body,
            deliver_at=get_current_utc(),
            category=category,
            user_id=self.user_id,
        )
        if self._deliver(notification):
            return notification
        return None

    def _deliver(self, notification: ScheduledNotification) -> bool:
        try:
            self.backend.deliver(notification)
        except Exception as e:
            self.last_error = NotificationException(
                f"Failed to deliver notification: {e}",
                notification_id=notification.id,
                original_error=e,
            )
            self._audit("error", notification.id, status="failed", detail=str(e))
            logger.error(
                f"Failed to deliver notification {notification.id}: {e}",
                extra={"exception_data": {"notification_id": notification.id}},
            )
            return False
        self._audit("deliver", notification.id, status="delivered")
        return True

    def cancel(self, notification_id: str) -> bool:
        removed = self._pending.pop(notification_id, None)
        if removed is None:
            return False
        self._audit("cancel", notification_id, status="cancelled")
        logger.info(f"Cancelled notification {notification_id}")
        return True

    def cancel_all(self) -> int:
        count = len(self._pending)
        self._pending.clear()
        self._audit("cancel", status="cancelled_all", detail=f"{count} pending")
        logger.info(f"Cancelled {count} pending notification(s)")
        return count

    def pending(self) -> List[ScheduledNotification]:
        """Pending notifications, soonest first."""
        return sorted(self._pending.values(), key=lambda n: n.deliver_at)

    def dispatch_due(self, now: Optional[datetime] = None) -> List[ScheduledNotification]:
        """
        Deliver and remove every notification due at or before ``now``.

        Notifications whose delivery fails are removed as well; the failure
        is kept in ``last_error``.

        Returns:
            The notifications that were delivered
        """
        current = ensure_utc(now) if now is not None else get_current_utc()
        delivered = []
        for notification in self.pending():
            if notification.deliver_at > current:
                break
            del self._pending[notification.id]
            if self._deliver(notification):
                delivered.append(notification)
        return delivered
