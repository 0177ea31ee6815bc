"""
Central error handling.

``ErrorHandlingService.handle`` turns any exception into an ``Alert`` for the
user, records a crash report, and writes the event to the "error_handling"
audit log.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, NamedTuple, Optional

from ..audit import AuditLog, get_audit_log
from ..exceptions import (
    AppErrorKind,
    FurfolioException,
    PermissionDeniedException,
    wrap_exception,
)
from ..utils.datetime_utils import get_current_utc
from .crash_reporter import CrashReporter

logger = logging.getLogger(__name__)

ERROR_AUDIT_LOG = "error_handling"
ERROR_AUDIT_CAPACITY = 100
ERROR_OCCURRED_EVENT = "error_occurred"


class AlertRole(enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DESTRUCTIVE = "destructive"


@dataclass
class Alert:
    title: str
    message: str
    role: AlertRole
    error_kind: AppErrorKind
    recovery_suggestion: Optional[str] = None
    primary_action: Optional[str] = None


@dataclass
class ErrorAuditEntry:
    event: str
    error_type: str
    context: Dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=get_current_utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "error_type": self.error_type,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


class AlertTemplate(NamedTuple):
    title: str
    role: AlertRole
    event: str
    message: Optional[str] = None
    primary_action: Optional[str] = None


_CRITICAL = AlertTemplate("An Error Occurred", AlertRole.ERROR, "alert_critical")

ALERT_TEMPLATES: Dict[AppErrorKind, AlertTemplate] = {
    AppErrorKind.DATA_LOAD_FAILED: _CRITICAL,
    AppErrorKind.SAVE_FAILED: _CRITICAL,
    AppErrorKind.DATA_ENCRYPTION_FAILED: _CRITICAL,
    AppErrorKind.UNKNOWN: _CRITICAL,
    AppErrorKind.INVALID_INPUT: AlertTemplate(
        "Invalid Input", AlertRole.WARNING, "alert_invalid_input"
    ),
    AppErrorKind.PERMISSION_DENIED: AlertTemplate(
        "Permission Denied",
        AlertRole.WARNING,
        "alert_permission_denied",
        primary_action="Settings",
    ),
    AppErrorKind.NETWORK_UNAVAILABLE: AlertTemplate(
        "Network Unavailable",
        AlertRole.INFO,
        "alert_network_unavailable",
        message="Please check your internet connection and try again.",
    ),
    AppErrorKind.ROUTE_ERROR: AlertTemplate(
        "Route Error", AlertRole.ERROR, "alert_route_error"
    ),
    AppErrorKind.UNAUTHORIZED_ACCESS: AlertTemplate(
        "Access Denied",
        AlertRole.DESTRUCTIVE,
        "alert_unauthorized_access",
        message="You do not have the required permissions for this action.",
    ),
    AppErrorKind.DUPLICATE_ENTRY: AlertTemplate(
        "Alert", AlertRole.INFO, "alert_generic_error"
    ),
}


def _alert_message(error: FurfolioException, template: AlertTemplate) -> str:
    if template.message:
        return template.message
    if isinstance(error, PermissionDeniedException):
        return (
            f"Furfolio does not have permission for {error.permission}. "
            f"Please grant permission in your device's Settings app."
        )
    if error.kind == AppErrorKind.INVALID_INPUT:
        return error.message or "Please check the highlighted fields and try again."
    return error.user_message


def build_alert(error: FurfolioException) -> Alert:
    template = ALERT_TEMPLATES[error.kind]
    return Alert(
        title=template.title,
        message=_alert_message(error, template),
        role=template.role,
        error_kind=error.kind,
        recovery_suggestion=error.recovery_suggestion,
        primary_action=template.primary_action,
    )


class ErrorHandlingService:
    """
    Single funnel for errors raised anywhere in the package.

    Args:
        crash_reporter: Store for crash reports, a private one by default
        alert_presenter: Optional callback that displays the alert
        audit_log: Audit log override, defaults to the shared
            "error_handling" log
    """

    def __init__(
        self,
        crash_reporter: Optional[CrashReporter] = None,
        alert_presenter: Optional[Callable[[Alert], None]] = None,
        audit_log: Optional[AuditLog[ErrorAuditEntry]] = None,
    ):
        self.crash_reporter = (
            crash_reporter if crash_reporter is not None else CrashReporter()
        )
        self.alert_presenter = alert_presenter
        self.audit_log = (
            audit_log
            if audit_log is not None
            else get_audit_log(ERROR_AUDIT_LOG, ERROR_AUDIT_CAPACITY)
        )

    def _audit(
        self, event: str, error: FurfolioException, context: Dict[str, str]
    ) -> None:
        self.audit_log.add(
            ErrorAuditEntry(
                event=event, error_type=error.__class__.__name__, context=dict(context)
            )
        )

    def handle(
        self, error: Exception, context: Optional[Dict[str, Any]] = None
    ) -> Alert:
        """
        Log, record and present ``error``.

        Args:
            error: Any exception; non-package exceptions are wrapped
            context: Extra string context for the audit trail

        Returns:
            The alert shown to the user
        """
        app_error = wrap_exception(error)
        audit_context = {key: str(value) for key, value in (context or {}).items()}
        audit_context.setdefault("kind", app_error.kind.value)

        app_error.log_error(logger)
        self.crash_reporter.log_exception(error)
        self._audit(ERROR_OCCURRED_EVENT, app_error, audit_context)

        alert = build_alert(app_error)
        self._audit(ALERT_TEMPLATES[app_error.kind].event, app_error, audit_context)

        if self.alert_presenter is not None:
            self.alert_presenter(alert)
        return alert
