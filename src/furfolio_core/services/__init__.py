"""
Business services for the grooming platform.

Inventory management, reports, client retention, notifications, settings,
crash reporting and central error handling.
"""

from .crash_reporter import CrashReport, CrashReporter
from .error_handling import (
    ALERT_TEMPLATES,
    Alert,
    AlertRole,
    ErrorAuditEntry,
    ErrorHandlingService,
    build_alert,
)
from .inventory import (
    InventoryManager,
    RestockSuggestion,
    has_open_task,
    reorder_task_title,
    should_reorder,
)
from .notifications import (
    LoggingNotificationBackend,
    NotificationAuditEvent,
    NotificationBackend,
    NotificationService,
    ScheduledNotification,
)
from .reports import (
    ReportType,
    export_appointments_csv,
    export_revenue_csv,
    export_summary_pdf,
    format_amount,
    generate_appointment_report,
    generate_loyalty_report,
    generate_report,
    generate_revenue_report,
)
from .retention import (
    RetentionAlert,
    RetentionTag,
    generate_retention_alerts,
    retention_stats,
    retention_tag,
)
from .settings import (
    InMemorySettingsStore,
    JSONFileSettingsStore,
    SettingsManager,
    SettingsStore,
)

__all__ = [
    # Inventory
    "InventoryManager",
    "RestockSuggestion",
    "has_open_task",
    "reorder_task_title",
    "should_reorder",
    # Reports
    "ReportType",
    "format_amount",
    "generate_report",
    "generate_revenue_report",
    "generate_appointment_report",
    "generate_loyalty_report",
    "export_revenue_csv",
    "export_appointments_csv",
    "export_summary_pdf",
    # Retention
    "RetentionTag",
    "RetentionAlert",
    "retention_tag",
    "retention_stats",
    "generate_retention_alerts",
    # Notifications
    "NotificationService",
    "NotificationBackend",
    "LoggingNotificationBackend",
    "NotificationAuditEvent",
    "ScheduledNotification",
    # Settings
    "SettingsManager",
    "SettingsStore",
    "InMemorySettingsStore",
    "JSONFileSettingsStore",
    # Errors
    "CrashReport",
    "CrashReporter",
    "Alert",
    "AlertRole",
    "ALERT_TEMPLATES",
    "ErrorAuditEntry",
    "ErrorHandlingService",
    "build_alert",
]
