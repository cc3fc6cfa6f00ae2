from __future__ import annotations

from datetime import date

from ..core.enums import PunchType
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_email(value: str, field_name: str = "email") -> str:
    value = require_non_empty(value, field_name)
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValidationError(f"{field_name} is not a valid email address")
    return value.lower()


def require_punch_type(value: str) -> PunchType:
    try:
        return PunchType(value)
    except ValueError:
        raise ValidationError("Invalid punch type") from None


def require_iso_date(value: str, field_name: str) -> date:
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date") from None
