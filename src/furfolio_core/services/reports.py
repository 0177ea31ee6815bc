"""
Business reports.

Plain-text revenue, appointment and loyalty reports, CSV exports of charges
and appointments, and a one-document PDF summary rendered with reportlab.
"""

import csv
import enum
import io
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from ..exceptions import BusinessRuleException
from ..models.appointment import Appointment
from ..models.charge import Charge
from ..models.loyalty import LoyaltyProgram
from ..models.owner import Owner
from ..utils.config import RemoteConfig, RemoteConfigKey
from ..utils.datetime_utils import ensure_utc, format_report_datetime
from .retention import retention_stats

logger = logging.getLogger(__name__)

PDF_MARGIN = 40
PDF_TITLE_FONT = ("Helvetica-Bold", 22)
PDF_BODY_FONT = ("Helvetica", 14)
PDF_TITLE_HEIGHT = 50
PDF_SPACING = 10
PDF_LINE_SPACING = 6
PDF_CREATOR = "Furfolio"

REVENUE_CSV_HEADER = ["Date", "Amount", "Type", "Owner", "Dog", "Notes"]
APPOINTMENT_CSV_HEADER = ["Date", "Service", "Owner", "Dog", "Status", "Notes"]


class ReportType(enum.Enum):
    REVENUE = "revenue"
    APPOINTMENT = "appointment"
    LOYALTY = "loyalty"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def format_amount(amount: Decimal) -> str:
    """``$1,234.50`` style currency string."""
    return f"${Decimal(amount):,.2f}"


def _in_range(
    moment: datetime, start: Optional[datetime], end: Optional[datetime]
) -> bool:
    moment = ensure_utc(moment)
    if start is not None and moment < ensure_utc(start):
        return False
    if end is not None and moment > ensure_utc(end):
        return False
    return True


def filter_charges(
    charges: Iterable[Charge],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Charge]:
    """Charges dated within ``[start, end]``, oldest first."""
    selected = [c for c in charges if _in_range(c.date, start, end)]
    return sorted(selected, key=lambda c: ensure_utc(c.date))


def filter_appointments(
    appointments: Iterable[Appointment],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Appointment]:
    selected = [a for a in appointments if _in_range(a.scheduled_at, start, end)]
    return sorted(selected, key=lambda a: ensure_utc(a.scheduled_at))


def _date_range_line(start: Optional[datetime], end: Optional[datetime]) -> str:
    return f"From: {format_report_datetime(start)} To: {format_report_datetime(end)}"


def _name_or(value: Optional[object], attr: str, default: str) -> str:
    if value is None:
        return default
    return getattr(value, attr, None) or default


def generate_revenue_report(
    charges: Iterable[Charge],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> str:
    selected = filter_charges(charges, start, end)
    total = sum((Decimal(c.amount) for c in selected), Decimal("0"))

    lines = [
        "Revenue Report",
        _date_range_line(start, end),
        f"Total Revenue: {format_amount(total)}",
        "",
        "Details:",
    ]
    for charge in selected:
        lines.append(
            f"{format_report_datetime(charge.date)} : {format_amount(charge.amount)} "
            f"({charge.charge_type.display_name}) - {charge.notes or ''}"
        )
    return "\n".join(lines) + "\n"


def generate_appointment_report(
    appointments: Iterable[Appointment],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> str:
    selected = filter_appointments(appointments, start, end)

    lines = [
        "Appointment Report",
        _date_range_line(start, end),
        f"Total Appointments: {len(selected)}",
        "",
        "Details:",
    ]
    for appointment in selected:
        dog_name = _name_or(appointment.dog, "name", "Unknown")
        owner_name = _name_or(appointment.owner, "owner_name", "Unknown")
        lines.append(
            f"{format_report_datetime(appointment.scheduled_at)} : "
            f"{appointment.service_type.display_name} - {dog_name} "
            f"(Owner: {owner_name}) [{appointment.status.display_name}]"
        )
    return "\n".join(lines) + "\n"


def generate_loyalty_report(
    loyalties: Sequence[LoyaltyProgram],
    owners: Iterable[Owner] = (),
    now: Optional[datetime] = None,
) -> str:
    eligible = [program for program in loyalties if program.is_eligible_for_reward]

    lines = [
        "Loyalty & Retention Report",
        f"Total Loyalty Members: {len(loyalties)}",
        f"Eligible for Reward: {len(eligible)}",
        "",
        "Retention Breakdown:",
    ]
    for tag, count in retention_stats(owners, now).items():
        lines.append(f"- {tag.label}: {count}")
    return "\n".join(lines) + "\n"


def generate_report(
    report_type: ReportType,
    charges: Iterable[Charge] = (),
    appointments: Iterable[Appointment] = (),
    loyalties: Sequence[LoyaltyProgram] = (),
    owners: Iterable[Owner] = (),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> str:
    """
    Build the plain-text report for ``report_type``.

    The date range applies to revenue and appointment reports only.
    """
    logger.info(f"Generating {report_type.display_name} report")
    if report_type == ReportType.REVENUE:
        return generate_revenue_report(charges, start, end)
    if report_type == ReportType.APPOINTMENT:
        return generate_appointment_report(appointments, start, end)
    return generate_loyalty_report(loyalties, owners)


def _write_csv(header: List[str], rows: Iterable[List[str]]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(header) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def export_revenue_csv(
    charges: Iterable[Charge],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> str:
    """
    Export charges as CSV.

    The header row is unquoted; every data field is quoted, with embedded
    quotes doubled.
    """
    rows = [
        [
            format_report_datetime(charge.date),
            format_amount(charge.amount),
            charge.charge_type.display_name,
            _name_or(charge.owner, "owner_name", ""),
            _name_or(charge.dog, "name", ""),
            charge.notes or "",
        ]
        for charge in filter_charges(charges, start, end)
    ]
    return _write_csv(REVENUE_CSV_HEADER, rows)


def export_appointments_csv(
    appointments: Iterable[Appointment],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> str:
    rows = [
        [
            format_report_datetime(appointment.scheduled_at),
            appointment.service_type.display_name,
            _name_or(appointment.owner, "owner_name", ""),
            _name_or(appointment.dog, "name", ""),
            appointment.status.display_name,
            appointment.notes or "",
        ]
        for appointment in filter_appointments(appointments, start, end)
    ]
    return _write_csv(APPOINTMENT_CSV_HEADER, rows)


def _wrap_body(body: str, width: float) -> List[str]:
    font_name, font_size = PDF_BODY_FONT
    lines: List[str] = []
    for paragraph in body.splitlines():
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(simpleSplit(paragraph, font_name, font_size, width))
    return lines


def export_summary_pdf(
    title: str, body: str, remote_config: Optional[RemoteConfig] = None
) -> bytes:
    """
    Render ``title`` and ``body`` onto US-letter pages.

    Body text wraps to the printable width and continues on a new page
    when the current one is full.

    Args:
        title: Page title
        body: Report text
        remote_config: Source of the ``enable_pdf_export`` flag, read from
            the environment when omitted

    Returns:
        The PDF document bytes

    Raises:
        BusinessRuleException: If PDF export is switched off
    """
    remote = remote_config if remote_config is not None else RemoteConfig()
    if not remote.get_bool(RemoteConfigKey.ENABLE_PDF_EXPORT):
        logger.warning("PDF export requested while it is disabled")
        raise BusinessRuleException(
            "PDF export is disabled",
            rule_name=RemoteConfigKey.ENABLE_PDF_EXPORT.value,
        )

    page_width, page_height = letter
    text_width = page_width - 2 * PDF_MARGIN
    body_font, body_size = PDF_BODY_FONT
    line_height = body_size + PDF_LINE_SPACING

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.setTitle(title)
    pdf.setAuthor(PDF_CREATOR)
    pdf.setCreator(PDF_CREATOR)

    title_font, title_size = PDF_TITLE_FONT
    pdf.setFont(title_font, title_size)
    pdf.drawString(PDF_MARGIN, page_height - PDF_MARGIN - title_size, title)

    y = page_height - PDF_MARGIN - PDF_TITLE_HEIGHT - PDF_SPACING - body_size
    pdf.setFont(body_font, body_size)
    pages = 1
    for line in _wrap_body(body, text_width):
        if y < PDF_MARGIN:
            pdf.showPage()
            pdf.setFont(body_font, body_size)
            y = page_height - PDF_MARGIN - body_size
            pages += 1
        pdf.drawString(PDF_MARGIN, y, line)
        y -= line_height

    pdf.showPage()
    pdf.save()
    logger.info(f"Exported PDF summary '{title}' ({pages} page(s))")
    return buffer.getvalue()


__all__ = [
    "ReportType",
    "format_amount",
    "filter_charges",
    "filter_appointments",
    "generate_report",
    "generate_revenue_report",
    "generate_appointment_report",
    "generate_loyalty_report",
    "export_revenue_csv",
    "export_appointments_csv",
    "export_summary_pdf",
]
