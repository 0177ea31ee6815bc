"""
Tests for report generation and exports.
"""

import csv
import io
import re
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from furfolio_core.exceptions import BusinessRuleException
from furfolio_core.models import AppointmentStatus, ChargeType, LoyaltyProgram, ServiceType
from furfolio_core.services import (
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
from furfolio_core.utils.config import RemoteConfig
from furfolio_core.utils.datetime_utils import UTC

from .conftest import AppointmentFactory, ChargeFactory, DogFactory, OwnerFactory

MAY_1 = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


@pytest.fixture
def owner():
    return OwnerFactory.build(owner_name="Dana Smith")


@pytest.fixture
def dog(owner):
    return DogFactory.build(owner=owner, name="Biscuit")


@pytest.fixture
def charges(owner, dog):
    return [
        ChargeFactory.build(
            owner=owner,
            dog=dog,
            date=MAY_1 + timedelta(days=2),
            amount=Decimal("40.00"),
            charge_type=ChargeType.BASIC_BATH,
            notes="Blueberry facial",
        ),
        ChargeFactory.build(
            owner=owner,
            dog=dog,
            date=MAY_1,
            amount=Decimal("1200.50"),
            charge_type=ChargeType.FULL_GROOM,
        ),
        ChargeFactory.build(
            owner=owner,
            date=MAY_1 + timedelta(days=40),
            amount=Decimal("15.00"),
            charge_type=ChargeType.PRODUCT,
        ),
    ]


class TestFormatting:
    def test_format_amount(self):
        assert format_amount(Decimal("1234.5")) == "$1,234.50"
        assert format_amount(Decimal("0")) == "$0.00"

    def test_report_type_display_name(self):
        assert ReportType.REVENUE.display_name == "Revenue"


class TestRevenueReport:
    """Test cases for the revenue report."""

    def test_full_report(self, charges):
        report = generate_revenue_report(charges)

        assert report == (
            "Revenue Report\n"
            "From: N/A To: N/A\n"
            "Total Revenue: $1,255.50\n"
            "\n"
            "Details:\n"
            "2024-05-01 09:30 : $1,200.50 (Full Groom) - \n"
            "2024-05-03 09:30 : $40.00 (Basic Bath) - Blueberry facial\n"
            "2024-06-10 09:30 : $15.00 (Product) - \n"
        )

    def test_date_range_is_inclusive(self, charges):
        report = generate_revenue_report(
            charges, start=MAY_1, end=MAY_1 + timedelta(days=2)
        )

        assert "From: 2024-05-01 09:30 To: 2024-05-03 09:30" in report
        assert "Total Revenue: $1,240.50" in report
        assert "Product" not in report

    def test_empty_report(self):
        report = generate_revenue_report([])

        assert "Total Revenue: $0.00" in report
        assert report.endswith("Details:\n")


class TestAppointmentReport:
    def test_report_lines(self, owner, dog):
        appointments = [
            AppointmentFactory.build(
                owner=owner,
                dog=dog,
                scheduled_at=MAY_1,
                service_type=ServiceType.NAIL_TRIM,
                status=AppointmentStatus.COMPLETED,
            ),
            AppointmentFactory.build(
                scheduled_at=MAY_1 - timedelta(days=1),
                status=AppointmentStatus.NO_SHOW,
            ),
        ]

        report = generate_appointment_report(appointments)
        lines = report.splitlines()

        assert lines[0] == "Appointment Report"
        assert lines[2] == "Total Appointments: 2"
        assert lines[5] == "2024-04-30 09:30 : Full Groom - Unknown (Owner: Unknown) [No Show]"
        assert lines[6] == "2024-05-01 09:30 : Nail Trim - Biscuit (Owner: Dana Smith) [Completed]"

    def test_range_filter(self, owner):
        appointments = [
            AppointmentFactory.build(owner=owner, scheduled_at=MAY_1),
            AppointmentFactory.build(owner=owner, scheduled_at=MAY_1 + timedelta(days=30)),
        ]

        report = generate_appointment_report(
            appointments, start=MAY_1 - timedelta(days=1), end=MAY_1 + timedelta(days=1)
        )

        assert "Total Appointments: 1" in report


class TestLoyaltyReport:
    def test_loyalty_report(self):
        now = datetime(2024, 6, 1, tzinfo=UTC)
        new_owner = OwnerFactory.build(date_added=now - timedelta(days=3))
        active_owner = OwnerFactory.build(date_added=now - timedelta(days=400))
        AppointmentFactory.build(owner=active_owner, scheduled_at=now - timedelta(days=10))
        loyalties = [
            LoyaltyProgram(owner_id=new_owner.id, points=10),
            LoyaltyProgram(owner_id=active_owner.id, points=75),
        ]

        report = generate_loyalty_report(loyalties, [new_owner, active_owner], now)

        assert report == (
            "Loyalty & Retention Report\n"
            "Total Loyalty Members: 2\n"
            "Eligible for Reward: 1\n"
            "\n"
            "Retention Breakdown:\n"
            "- New Client: 1\n"
            "- Active: 1\n"
            "- Retention Risk: 0\n"
            "- Inactive: 0\n"
        )


class TestGenerateReport:
    def test_dispatch(self, charges):
        assert generate_report(ReportType.REVENUE, charges=charges).startswith(
            "Revenue Report"
        )
        assert generate_report(ReportType.APPOINTMENT).startswith("Appointment Report")
        assert generate_report(ReportType.LOYALTY).startswith(
            "Loyalty & Retention Report"
        )


class TestCsvExports:
    """Test cases for CSV exports."""

    def test_revenue_csv(self, charges):
        output = export_revenue_csv(charges)
        lines = output.splitlines()

        assert lines[0] == "Date,Amount,Type,Owner,Dog,Notes"
        assert lines[1] == (
            '"2024-05-01 09:30","$1,200.50","Full Groom","Dana Smith","Biscuit",""'
        )
        assert lines[3] == '"2024-06-10 09:30","$15.00","Product","Dana Smith","",""'

    def test_embedded_quotes_are_doubled(self, owner):
        charge = ChargeFactory.build(
            owner=owner, date=MAY_1, notes='Asked for "teddy bear" cut'
        )

        output = export_revenue_csv([charge])

        assert '"Asked for ""teddy bear"" cut"' in output
        rows = list(csv.reader(io.StringIO(output)))
        assert rows[1][5] == 'Asked for "teddy bear" cut'

    def test_appointments_csv(self, owner, dog):
        appointment = AppointmentFactory.build(
            owner=owner, dog=dog, scheduled_at=MAY_1, notes="Nervous, go slow"
        )

        output = export_appointments_csv([appointment])

        assert output == (
            "Date,Service,Owner,Dog,Status,Notes\n"
            '"2024-05-01 09:30","Full Groom","Dana Smith","Biscuit","Completed",'
            '"Nervous, go slow"\n'
        )

    def test_empty_export_has_header(self):
        assert export_appointments_csv([]) == "Date,Service,Owner,Dog,Status,Notes\n"


class TestPdfExport:
    def test_pdf_bytes(self):
        data = export_summary_pdf("Revenue Report", "Total Revenue: $1,255.50")

        assert data.startswith(b"%PDF")
        assert len(data) > 500

    def test_long_body_spans_pages(self):
        body = "\n".join(f"Line {i}: " + "grooming " * 20 for i in range(80))

        data = export_summary_pdf("Long Report", body)

        assert len(re.findall(rb"/Type /Page[^s]", data)) >= 2

    def test_disabled_pdf_export(self):
        remote = RemoteConfig({"enable_pdf_export": False})

        with pytest.raises(BusinessRuleException) as exc_info:
            export_summary_pdf("Revenue Report", "Total Revenue: $0.00", remote)

        assert exc_info.value.details["rule_name"] == "enable_pdf_export"

    def test_pdf_export_flag_from_environment(self, monkeypatch):
        monkeypatch.setenv("FURFOLIO_REMOTE_ENABLE_PDF_EXPORT", "off")

        with pytest.raises(BusinessRuleException):
            export_summary_pdf("Revenue Report", "Total Revenue: $0.00")
