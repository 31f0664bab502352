"""
Contact form validation service.

Two passes over the parsed request body:
  1. Presence  — every required field must be present and non-blank.
  2. Format    — name/email/phone/message shape rules.

The presence pass short-circuits: format rules only run once every
required field is there. Each pass raises its own exception carrying the
list the router needs to build the 400 response.

Public API:
  validate_submission(data: Mapping) -> ValidatedSubmission
"""

import re
from typing import Any, Mapping

from app.models.contact import (
    DEFAULT_PREFERRED_CONTACT,
    DEFAULT_SERVICE,
    ValidatedSubmission,
)

REQUIRED_FIELDS = ["name", "email", "phone", "suburb", "message"]

MIN_NAME_LENGTH = 2
MIN_MESSAGE_LENGTH = 10
MIN_PHONE_LENGTH = 10

# Always used with fullmatch: "$" would also accept a trailing newline.
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_RE = re.compile(r"[0-9\-+()]{%d,}" % MIN_PHONE_LENGTH)
_WHITESPACE_RE = re.compile(r"\s")

NAME_TOO_SHORT = f"Name must be at least {MIN_NAME_LENGTH} characters"
INVALID_EMAIL = "Invalid email format"
INVALID_PHONE = "Invalid phone number format"
MESSAGE_TOO_SHORT = f"Message must be at least {MIN_MESSAGE_LENGTH} characters"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class MissingFieldsError(Exception):
    """Raised when one or more required fields are missing or blank."""
    def __init__(self, missing_fields: list[str]):
        self.missing_fields = missing_fields
        self.error_code = "missing_fields"
        self.message = f"Please provide: {', '.join(missing_fields)}"
        super().__init__(self.message)


class SubmissionValidationError(Exception):
    """Raised when required fields are present but fail format rules."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        self.error_code = "validation_failed"
        self.message = ", ".join(errors)
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _as_text(value: Any) -> str:
    """Coerce a raw field value to text; None becomes an empty string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _optional_text(data: Mapping[str, Any], field: str, default: str) -> str:
    """Raw text of an optional field, or the default when absent or blank."""
    value = _as_text(data.get(field))
    return value if value.strip() else default


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email) is not None


def is_valid_phone(phone: str) -> bool:
    """Whitespace is ignored; what remains must be ASCII digits, +, -, ( or )."""
    return PHONE_RE.fullmatch(_WHITESPACE_RE.sub("", phone)) is not None


# ---------------------------------------------------------------------------
# Validation passes
# ---------------------------------------------------------------------------

def find_missing_fields(data: Mapping[str, Any]) -> list[str]:
    """Return required field names that are absent or blank, in declaration order."""
    return [
        field for field in REQUIRED_FIELDS
        if not _as_text(data.get(field)).strip()
    ]


def find_format_errors(data: Mapping[str, Any]) -> list[str]:
    """
    Return human-readable format errors for a submission.

    Assumes the presence pass already succeeded.
    """
    errors: list[str] = []

    if len(_as_text(data.get("name")).strip()) < MIN_NAME_LENGTH:
        errors.append(NAME_TOO_SHORT)

    if not is_valid_email(_as_text(data.get("email"))):
        errors.append(INVALID_EMAIL)

    if not is_valid_phone(_as_text(data.get("phone"))):
        errors.append(INVALID_PHONE)

    if len(_as_text(data.get("message")).strip()) < MIN_MESSAGE_LENGTH:
        errors.append(MESSAGE_TOO_SHORT)

    return errors


def validate_submission(data: Mapping[str, Any]) -> ValidatedSubmission:
    """
    Run both validation passes and build a ValidatedSubmission.

    Optional fields that are absent or blank take their defaults
    ("General Inquiry" / "Email").

    Raises:
        MissingFieldsError: a required field is missing or blank.
        SubmissionValidationError: a format rule failed.
    """
    missing = find_missing_fields(data)
    if missing:
        raise MissingFieldsError(missing)

    errors = find_format_errors(data)
    if errors:
        raise SubmissionValidationError(errors)

    return ValidatedSubmission(
        name=_as_text(data["name"]),
        email=_as_text(data["email"]),
        phone=_as_text(data["phone"]),
        suburb=_as_text(data["suburb"]),
        message=_as_text(data["message"]),
        service=_optional_text(data, "service", DEFAULT_SERVICE),
        preferred_contact=_optional_text(data, "preferredContact", DEFAULT_PREFERRED_CONTACT),
    )
