# Overview: Field-level input validation and sanitizing shared by the services.

"""
Validators return an error message (str) or None so callers can collect every
field problem into a single ValidationError. Helpers that coerce a value raise
ValueError, which the caller turns into a field error.
"""

from __future__ import annotations

import re
from typing import Any

from markupsafe import escape

from .errors import ValidationError, field_error

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[A-Za-z]{2,}$")
PHONE_RE = re.compile(r"^\+?[0-9]{10,15}$")
PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&]).+$")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 150
PASSWORD_MIN_LENGTH = 9
# Largest value a 32-bit INTEGER column holds
MAX_QUANTITY = 2**31 - 1


def sanitize_text(value: Any) -> str | None:
    """Trim and HTML-escape free text before it is stored."""
    if value is None:
        return None
    return str(escape(str(value).strip()))


def normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


def check_name(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "Name is required"
    length = len(value.strip())
    if length < NAME_MIN_LENGTH or length > NAME_MAX_LENGTH:
        return f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
    return None


def check_email(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "Email is required"
    if not EMAIL_RE.match(value.strip()):
        return "Invalid email format"
    return None


def check_phone(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return "Phone number is required"
    if not PHONE_RE.match(value.strip()):
        return "Phone number must be 10 to 15 digits with an optional leading +"
    return None


def check_password(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return "Password is required"
    if len(value) < PASSWORD_MIN_LENGTH or not PASSWORD_RE.match(value):
        return (
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long and include "
            "uppercase, lowercase, a number, and a special character (@$!%*?&)"
        )
    return None


def require_fields(data: dict, fields) -> list[dict]:
    """Return a field error for every name in `fields` that is missing or blank."""
    errors = []
    for name in fields:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(field_error(name, f"{name} is required"))
    return errors


def coerce_positive_int(value: Any) -> int:
    """
    Accept ints and digit strings from 1 to MAX_QUANTITY.

    Rejects bools, floats with a fractional part, and anything non-numeric.
    """
    if isinstance(value, bool):
        raise ValueError("must be a positive integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError("must be a positive integer")
        result = int(value)
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        result = int(value.strip())
    else:
        raise ValueError("must be a positive integer")
    if result <= 0:
        raise ValueError("must be greater than 0")
    if result > MAX_QUANTITY:
        raise ValueError(f"must not exceed {MAX_QUANTITY}")
    return result


def raise_if_errors(errors: list[dict], message: str = "Validation failed") -> None:
    if errors:
        raise ValidationError(message, errors)


def require_json_object(payload: Any) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object", [])
    return payload
