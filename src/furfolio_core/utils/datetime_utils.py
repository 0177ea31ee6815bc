"""
DateTime utilities for grooming business operations.

This module provides timezone-aware datetime handling, calendar arithmetic
used by recurring tasks and loyalty rewards, day-boundary helpers for report
filtering, and dog age calculation.
"""

import calendar
from datetime import date, datetime, time, timedelta
from typing import Dict, Optional
from zoneinfo import ZoneInfo

UTC = ZoneInfo("UTC")

REPORT_DATETIME_FORMAT = "%Y-%m-%d %H:%M"
SHORT_DATE_FORMAT = "%Y-%m-%d"


def get_current_utc() -> datetime:
    """Get the current UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Return ``dt`` as an aware UTC datetime.

    Naive datetimes are assumed to already be in UTC. SQLite hands back
    naive values for timezone-aware columns, so every comparison between a
    stored timestamp and "now" goes through this function.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end`` (negative when ``end`` is earlier)."""
    delta = ensure_utc(end) - ensure_utc(start)
    return int(delta.total_seconds() // 86400)


def add_months(dt: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the target month's length.

    Args:
        dt: Starting datetime
        months: Number of months to add (may be negative)

    Returns:
        Datetime ``months`` calendar months later

    Example:
        >>> add_months(datetime(2024, 1, 31), 1)
        datetime.datetime(2024, 2, 29, 0, 0)
    """
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def add_years(dt: datetime, years: int) -> datetime:
    return add_months(dt, years * 12)


def start_of_day(dt: datetime) -> datetime:
    return datetime.combine(dt.date(), time.min, tzinfo=dt.tzinfo)


def end_of_day(dt: datetime) -> datetime:
    return datetime.combine(dt.date(), time.max, tzinfo=dt.tzinfo)


def is_same_day(first: datetime, second: datetime) -> bool:
    return ensure_utc(first).date() == ensure_utc(second).date()


def is_within_days(
    dt: datetime, days: int, reference: Optional[datetime] = None
) -> bool:
    """True when ``dt`` falls between ``reference`` and ``days`` days after it."""
    reference = ensure_utc(reference or get_current_utc())
    dt = ensure_utc(dt)
    return reference <= dt <= reference + timedelta(days=days)


def format_report_datetime(dt: Optional[datetime]) -> str:
    """Format a timestamp for report lines, ``N/A`` when missing."""
    if dt is None:
        return "N/A"
    return dt.strftime(REPORT_DATETIME_FORMAT)


def format_short_date(value: Optional[date]) -> str:
    if value is None:
        return "N/A"
    return value.strftime(SHORT_DATE_FORMAT)


def calculate_dog_age(
    birth_date: date, reference_date: Optional[date] = None
) -> Dict[str, int]:
    """
    Calculate a dog's age in years, months, and days.

    Args:
        birth_date: The dog's birth date
        reference_date: The date to calculate age from (defaults to today)

    Returns:
        Dictionary with 'years', 'months', and 'days' keys

    Raises:
        ValueError: If the birth date is after the reference date
    """
    if reference_date is None:
        reference_date = get_current_utc().date()

    if birth_date > reference_date:
        raise ValueError("Birth date cannot be in the future")

    years = reference_date.year - birth_date.year
    months = reference_date.month - birth_date.month
    days = reference_date.day - birth_date.day

    if days < 0:
        months -= 1
        previous = reference_date.replace(day=1) - timedelta(days=1)
        days += calendar.monthrange(previous.year, previous.month)[1]

    if months < 0:
        years -= 1
        months += 12

    return {"years": years, "months": months, "days": days}


def format_age(age: Dict[str, int]) -> str:
    """Format an age dictionary as ``"3 years, 2 months"``."""
    parts = []
    if age["years"] > 0:
        parts.append(f"{age['years']} year{'s' if age['years'] != 1 else ''}")
    if age["months"] > 0:
        parts.append(f"{age['months']} month{'s' if age['months'] != 1 else ''}")
    if age["days"] > 0 and age["years"] == 0:
        parts.append(f"{age['days']} day{'s' if age['days'] != 1 else ''}")
    return ", ".join(parts) if parts else "0 days"
