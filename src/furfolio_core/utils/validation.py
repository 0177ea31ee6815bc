"""
Validation and data processing utilities.

This module provides the sanitizing and format checks shared by the
Pydantic schemas and the services: string normalization, email, phone,
SKU and money validation, and token list cleanup.
"""

import re
import unicodedata
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union

T = TypeVar("T")


class ValidationError(Exception):
    """Validation error with structured error information."""

    def __init__(
        self, message: str, field: Optional[str] = None, code: Optional[str] = None
    ):
        self.message = message
        self.field = field
        self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "field": self.field, "code": self.code}


class ValidationResult(Generic[T]):
    """Result of a validation operation."""

    def __init__(
        self, value: Optional[T] = None, errors: Optional[List[ValidationError]] = None
    ):
        self.value = value
        self.errors = errors or []
        self.is_valid = len(self.errors) == 0

    def add_error(self, error: ValidationError) -> None:
        self.errors.append(error)
        self.is_valid = False

    @property
    def first_error(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

PHONE_PATTERNS = {
    "us": re.compile(
        r"^\+?1?[-.\s]?\(?([0-9]{3})\)?[-.\s]?([0-9]{3})[-.\s]?([0-9]{4})$"
    ),
    "international": re.compile(r"^\+?[1-9]\d{1,14}$"),
}

SKU_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9\-_.]{0,63}$")


def sanitize_string(value: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize a string by normalizing unicode and trimming whitespace.

    Args:
        value: The string to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string with runs of whitespace collapsed to one space
    """
    normalized = unicodedata.normalize("NFKC", value)
    sanitized = re.sub(r"\s+", " ", normalized.strip())

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length].rstrip()

    return sanitized


def sanitize_optional(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """Sanitize a string, mapping blank results to ``None``."""
    if value is None:
        return None
    sanitized = sanitize_string(value, max_length)
    return sanitized or None


def validate_email(email: str) -> ValidationResult[str]:
    """
    Validate an email address.

    Args:
        email: The email to validate

    Returns:
        ValidationResult with the lower-cased email or errors
    """
    result = ValidationResult[str]()

    if not email:
        result.add_error(ValidationError("Email is required", "email", "required"))
        return result

    sanitized_email = sanitize_string(email).lower()

    if not EMAIL_PATTERN.match(sanitized_email):
        result.add_error(
            ValidationError("Invalid email format", "email", "invalid_format")
        )
        return result

    if len(sanitized_email) > 254:
        result.add_error(ValidationError("Email is too long", "email", "too_long"))
        return result

    result.value = sanitized_email
    return result


def validate_phone(phone: str, country: str = "us") -> ValidationResult[str]:
    """
    Validate and format a phone number.

    US numbers are normalized to ``(555) 123-4567``; other countries are
    returned unchanged once they match the pattern.
    """
    result = ValidationResult[str]()

    if not phone:
        result.add_error(
            ValidationError("Phone number is required", "phone", "required")
        )
        return result

    digits_only = re.sub(r"\D", "", phone)
    pattern = PHONE_PATTERNS.get(country, PHONE_PATTERNS["us"])

    if not pattern.match(phone.strip()):
        result.add_error(
            ValidationError("Invalid phone number format", "phone", "invalid_format")
        )
        return result

    if country == "us":
        if len(digits_only) == 11 and digits_only[0] == "1":
            digits_only = digits_only[1:]
        result.value = f"({digits_only[:3]}) {digits_only[3:6]}-{digits_only[6:]}"
    else:
        result.value = phone.strip()

    return result


def validate_sku(sku: str) -> ValidationResult[str]:
    result = ValidationResult[str]()
    cleaned = sanitize_string(sku or "").upper()
    if not cleaned:
        result.add_error(ValidationError("SKU is required", "sku", "required"))
    elif not SKU_PATTERN.match(cleaned):
        result.add_error(ValidationError("Invalid SKU format", "sku", "invalid_format"))
    else:
        result.value = cleaned
    return result


def validate_money(
    amount: Union[str, float, int, Decimal], field: str = "amount"
) -> ValidationResult[Decimal]:
    """
    Validate a non-negative currency amount, rounded to cents.

    Args:
        amount: The amount to validate
        field: Field name reported in errors

    Returns:
        ValidationResult with the amount as a two-place Decimal or errors
    """
    result = ValidationResult[Decimal]()

    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        result.add_error(
            ValidationError(f"{field} must be a valid number", field, "invalid_number")
        )
        return result

    if not value.is_finite():
        result.add_error(
            ValidationError(f"{field} must be a valid number", field, "invalid_number")
        )
    elif value < 0:
        result.add_error(
            ValidationError(f"{field} cannot be negative", field, "too_low")
        )
    else:
        result.value = value.quantize(Decimal("0.01"))
    return result


def normalize_tokens(tokens: Iterable[str]) -> List[str]:
    """Strip, drop blanks and de-duplicate tokens while keeping their order."""
    seen: List[str] = []
    for token in tokens:
        cleaned = sanitize_string(str(token))
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen
