from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from app.core.sanitizer import trim_text
from app.schemas.contact import ContactSubmission

DEFAULT_MAX_MESSAGE_LENGTH = 2000
MIN_NAME_LENGTH = 2
MIN_MESSAGE_LENGTH = 10
OPTIONAL_FIELDS = ("subject", "phone", "company")

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", re.IGNORECASE)


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_PATTERN.match(email))


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    # Non-object JSON (list, string, number, null) carries no fields.
    return raw if isinstance(raw, Mapping) else {}


def validate_contact_data(
    raw: Any, max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH
) -> ValidationResult:
    """Check required fields of an untrusted payload, collecting every error."""
    data = _as_mapping(raw)
    errors: List[str] = []

    name = data.get("name")
    if not isinstance(name, str) or len(trim_text(name)) < MIN_NAME_LENGTH:
        errors.append("Name is required and must be at least 2 characters")

    email = data.get("email")
    if not isinstance(email, str) or not is_valid_email(email):
        errors.append("Valid email address is required")

    message = data.get("message")
    if not isinstance(message, str) or len(trim_text(message)) < MIN_MESSAGE_LENGTH:
        errors.append("Message is required and must be at least 10 characters")

    if isinstance(message, str) and len(message) > max_message_length:
        errors.append(f"Message must be less than {max_message_length} characters")

    return ValidationResult(is_valid=not errors, errors=errors)


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and trim_text(value):
        return value
    return None


def to_submission(raw: Any) -> ContactSubmission:
    """Convert a payload that already passed ``validate_contact_data``.

    Optional fields that are missing, blank or not strings are dropped.
    """
    data = _as_mapping(raw)
    return ContactSubmission(
        name=data["name"],
        email=data["email"],
        message=data["message"],
        **{key: _optional_text(data.get(key)) for key in OPTIONAL_FIELDS},
    )
