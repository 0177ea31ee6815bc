"""
Tests for the datetime and validation utilities.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from furfolio_core.utils import (
    add_months,
    add_years,
    calculate_dog_age,
    days_between,
    end_of_day,
    ensure_utc,
    format_age,
    format_report_datetime,
    format_short_date,
    is_same_day,
    is_within_days,
    normalize_tokens,
    sanitize_optional,
    sanitize_string,
    start_of_day,
    validate_email,
    validate_money,
    validate_phone,
    validate_sku,
)
from furfolio_core.utils.datetime_utils import UTC


class TestDatetimeUtils:
    """Test cases for datetime helpers."""

    def test_ensure_utc_naive(self):
        """Test naive datetimes are treated as UTC."""
        result = ensure_utc(datetime(2024, 5, 1, 9, 30))

        assert result.tzinfo is not None
        assert result.hour == 9

    def test_ensure_utc_converts(self):
        eastern = timezone(timedelta(hours=-5))

        result = ensure_utc(datetime(2024, 5, 1, 9, 30, tzinfo=eastern))

        assert result.hour == 14

    def test_days_between(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)

        assert days_between(start, start + timedelta(days=3, hours=5)) == 3
        assert days_between(start + timedelta(days=2), start) == -2

    @pytest.mark.parametrize(
        "start, months, expected",
        [
            (datetime(2024, 1, 31), 1, datetime(2024, 2, 29)),
            (datetime(2023, 1, 31), 1, datetime(2023, 2, 28)),
            (datetime(2024, 11, 15), 3, datetime(2025, 2, 15)),
            (datetime(2024, 3, 31), -1, datetime(2024, 2, 29)),
        ],
    )
    def test_add_months(self, start, months, expected):
        assert add_months(start, months) == expected

    def test_add_years_leap_day(self):
        assert add_years(datetime(2024, 2, 29), 1) == datetime(2025, 2, 28)

    def test_day_boundaries(self):
        moment = datetime(2024, 5, 1, 13, 45, tzinfo=UTC)

        assert start_of_day(moment) == datetime(2024, 5, 1, tzinfo=UTC)
        assert end_of_day(moment).hour == 23
        assert is_same_day(start_of_day(moment), end_of_day(moment))

    def test_is_within_days(self):
        reference = datetime(2024, 5, 1, tzinfo=UTC)

        assert is_within_days(reference + timedelta(days=3), 7, reference)
        assert not is_within_days(reference + timedelta(days=8), 7, reference)
        assert not is_within_days(reference - timedelta(days=1), 7, reference)

    def test_report_formats(self):
        assert format_report_datetime(datetime(2024, 5, 1, 9, 5)) == "2024-05-01 09:05"
        assert format_report_datetime(None) == "N/A"
        assert format_short_date(date(2024, 5, 1)) == "2024-05-01"
        assert format_short_date(None) == "N/A"

    def test_calculate_dog_age(self):
        age = calculate_dog_age(date(2020, 3, 15), date(2024, 5, 10))

        assert age == {"years": 4, "months": 1, "days": 25}

    def test_future_birth_date(self):
        with pytest.raises(ValueError):
            calculate_dog_age(date(2030, 1, 1), date(2024, 1, 1))

    def test_format_age(self):
        assert format_age({"years": 3, "months": 1, "days": 4}) == "3 years, 1 month"
        assert format_age({"years": 0, "months": 0, "days": 9}) == "9 days"
        assert format_age({"years": 0, "months": 0, "days": 0}) == "0 days"


class TestValidationUtils:
    """Test cases for validation helpers."""

    def test_sanitize_string(self):
        assert sanitize_string("  Fluffy \n  Paws ") == "Fluffy Paws"
        assert sanitize_string("Long name here", max_length=9) == "Long name"

    def test_sanitize_optional(self):
        assert sanitize_optional(None) is None
        assert sanitize_optional("   ") is None

    def test_validate_email(self):
        result = validate_email("  Groomer@Example.com ")

        assert result.is_valid
        assert result.value == "groomer@example.com"

    def test_validate_email_invalid(self):
        result = validate_email("groomer@")

        assert not result.is_valid
        assert result.first_error == "Invalid email format"

    def test_validate_phone(self):
        assert validate_phone("555.123.4567").value == "(555) 123-4567"
        assert validate_phone("+44123456789", country="international").value == "+44123456789"
        assert not validate_phone("").is_valid

    def test_validate_sku(self):
        assert validate_sku(" sh-001 ").value == "SH-001"
        assert validate_sku("").first_error == "SKU is required"

    def test_validate_money(self):
        assert validate_money("10.005").value == Decimal("10.00")
        assert validate_money(12).value == Decimal("12.00")
        assert validate_money("abc").first_error == "amount must be a valid number"
        assert validate_money("NaN").first_error == "amount must be a valid number"
        assert validate_money(-1, field="price").first_error == "price cannot be negative"

    def test_normalize_tokens(self):
        assert normalize_tokens([" vip", "vip ", "", "anxious"]) == ["vip", "anxious"]
