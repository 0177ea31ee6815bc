"""
Crash and error report store.

Serious errors are kept in a bounded in-memory log so support staff can
review and resolve them.
"""

import logging
import platform
import traceback
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..audit import AuditLog
from ..utils.datetime_utils import get_current_utc

logger = logging.getLogger(__name__)

CRASH_REPORT_CAPACITY = 200

TYPE_CRASH = "Crash"
TYPE_FATAL_ERROR = "Fatal Error"
TYPE_DATA_CORRUPTION = "Data Corruption"
TYPE_ERROR = "Error"


def default_device_info() -> str:
    return f"{platform.system()} {platform.release()} / Python {platform.python_version()}"


@dataclass
class CrashReport:
    type: str
    message: str
    stack_trace: Optional[str] = None
    device_info: Optional[str] = None
    is_resolved: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    date: datetime = field(default_factory=get_current_utc)

    @property
    def summary(self) -> str:
        status = "Resolved" if self.is_resolved else "Unresolved"
        return f"{self.type}: {self.message} ({status})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "type": self.type,
            "message": self.message,
            "stack_trace": self.stack_trace,
            "device_info": self.device_info,
            "is_resolved": self.is_resolved,
        }


class CrashReporter:
    """
    Bounded store of crash reports.

    Args:
        capacity: Maximum number of reports kept; the oldest is dropped first
    """

    def __init__(self, capacity: int = CRASH_REPORT_CAPACITY):
        self._log: AuditLog[CrashReport] = AuditLog("crash_reports", capacity)

    def log_crash(
        self,
        message: str,
        report_type: str = TYPE_CRASH,
        stack_trace: Optional[str] = None,
        device_info: Optional[str] = None,
    ) -> CrashReport:
        report = CrashReport(
            type=report_type,
            message=message,
            stack_trace=stack_trace,
            device_info=device_info or default_device_info(),
        )
        self._log.add(report)
        logger.error(f"{report_type} recorded: {message}")
        return report

    def log_exception(
        self, exception: BaseException, report_type: str = TYPE_ERROR
    ) -> CrashReport:
        """Record ``exception`` with its formatted traceback."""
        stack_trace = "".join(
            traceback.format_exception(
                type(exception), exception, exception.__traceback__
            )
        )
        message = str(exception) or exception.__class__.__name__
        return self.log_crash(message, report_type=report_type, stack_trace=stack_trace)

    def recent(self, limit: int = 20) -> List[CrashReport]:
        return self._log.recent(limit)

    def all(self) -> List[CrashReport]:
        return self._log.entries()

    def unresolved(self) -> List[CrashReport]:
        return self._log.filter(lambda report: not report.is_resolved)

    def mark_resolved(self, report_id: str) -> bool:
        """
        Mark a report as resolved.

        Returns:
            False when no stored report has ``report_id``
        """
        for report in self._log.entries():
            if report.id == report_id:
                report.is_resolved = True
                logger.info(f"Crash report {report_id} marked resolved")
                return True
        return False

    def clear(self) -> None:
        self._log.clear()

    def export_json(self) -> str:
        return self._log.export_json()

    def __len__(self) -> int:
        return len(self._log)
