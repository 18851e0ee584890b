"""Canonicalization and field rules for users and records."""
from __future__ import annotations

import re
from typing import Any

from minicrud.core.errors import NotFoundError, ValidationError

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
NAME_MAX_LENGTH = 60
EMAIL_MAX_LENGTH = 120


def canonical_email(value: str | None) -> str:
    """Trim and lowercase; comparisons and storage both use this form."""
    return str(value or "").strip().lower()


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value))


def _text(value: Any, label: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be text")
    return value


def clean_name(value: Any, *, max_length: int | None = NAME_MAX_LENGTH) -> str:
    name = _text(value, "Name").strip()
    if not name:
        raise ValidationError("Name is required")
    if max_length is not None and len(name) > max_length:
        raise ValidationError(f"Name must be at most {max_length} characters")
    return name


def clean_email(value: Any, *, max_length: int | None = EMAIL_MAX_LENGTH) -> str:
    email = canonical_email(_text(value, "Email"))
    if not email:
        raise ValidationError("Email is required")
    if max_length is not None and len(email) > max_length:
        raise ValidationError(f"Email must be at most {max_length} characters")
    if not is_valid_email(email):
        raise ValidationError("Invalid email")
    return email


def parse_index(value: Any) -> int:
    """Coerce a positional index coming from the wire.

    Anything that is not a whole number cannot name a position, so it is
    reported the same way as an out-of-range index.
    """
    if isinstance(value, bool):
        raise NotFoundError()
    if isinstance(value, int):
        return value
    if isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
        return int(value.strip())
    raise NotFoundError()
