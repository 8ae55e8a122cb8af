"""Contact-form triage: validation, priority and reference ids."""

from __future__ import annotations

import random
import re
import string
import time
from dataclasses import dataclass
from enum import StrEnum

from examcell.state_store.exceptions import ValidationError

REQUIRED_FIELDS = ("name", "email", "user_type", "subject", "message")
MIN_MESSAGE_LENGTH = 10

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REFERENCE_PREFIX = "EC"
REFERENCE_SUFFIX_LENGTH = 5
_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


class ContactPriority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_SUBJECTS: dict[ContactPriority, frozenset[str]] = {
    ContactPriority.HIGH: frozenset({"complaint", "technical", "examination"}),
    ContactPriority.MEDIUM: frozenset({"results", "bonafide", "admission"}),
}

RESPONSE_TIMES: dict[ContactPriority, str] = {
    ContactPriority.HIGH: "24 hours",
    ContactPriority.MEDIUM: "2-3 business days",
    ContactPriority.LOW: "3-5 business days",
}

# Wire names of the required fields, for error messages
_FIELD_LABELS = {"user_type": "userType"}


@dataclass(frozen=True)
class ContactForm:
    name: str
    email: str
    user_type: str
    subject: str
    message: str


def validate_contact_form(
    name: str | None,
    email: str | None,
    user_type: str | None,
    subject: str | None,
    message: str | None,
) -> ContactForm:
    """Check a contact-form submission and return it trimmed.

    Raises:
        ValidationError: On missing fields, a malformed email or a short message.
    """
    values = {
        "name": name,
        "email": email,
        "user_type": user_type,
        "subject": subject,
        "message": message,
    }
    missing = [
        _FIELD_LABELS.get(key, key) for key in REQUIRED_FIELDS if not (values[key] or "").strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    form = ContactForm(**{key: str(value).strip() for key, value in values.items()})
    if not EMAIL_PATTERN.match(form.email):
        raise ValidationError("Invalid email address")
    if len(form.message) < MIN_MESSAGE_LENGTH:
        raise ValidationError(f"Message must be at least {MIN_MESSAGE_LENGTH} characters long")
    return form


def priority_for(subject: str) -> ContactPriority:
    """Classify a contact subject. Unlisted subjects are low priority."""
    key = subject.strip().lower()
    for priority, subjects in PRIORITY_SUBJECTS.items():
        if key in subjects:
            return priority
    return ContactPriority.LOW


def response_time_for(subject: str) -> str:
    return RESPONSE_TIMES[priority_for(subject)]


def generate_reference_id(now_ms: int | None = None) -> str:
    """Reference id of the form ``EC-<epoch millis>-<5 uppercase chars>``."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(random.choices(_REFERENCE_ALPHABET, k=REFERENCE_SUFFIX_LENGTH))
    return f"{REFERENCE_PREFIX}-{now_ms}-{suffix}"
