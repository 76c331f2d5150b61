"""
Payload coercion helpers shared by the routes and services.

Every helper raises ValidationError with a field-specific message; callers
never see a bare ValueError from user input.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError
from .money import quantize
from backoffice.time_utils import parse_iso_date, parse_iso_datetime, parse_iso_time


# Maximum price: 9,999,999.99
# Keeps amounts inside Numeric(10, 2)
MAX_AMOUNT = Decimal("9999999.99")


def require_fields(payload: dict, *fields: str) -> None:
    missing = [f for f in fields if payload.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required")


def coerce_int(value: Any, field: str, *, minimum: int | None = None) -> int:
    """Strict integer: rejects bools, floats, decimals and scientific notation."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or "e" in stripped.lower() or "." in stripped:
            raise ValidationError(f"{field} must be an integer")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    else:
        raise ValidationError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return result


def coerce_optional_int(value: Any, field: str) -> int | None:
    if value is None or value == "":
        return None
    return coerce_int(value, field)


def coerce_amount(value: Any, field: str, *, positive: bool = True) -> Decimal:
    """Decimal amount with two places; positive=True rejects zero and negatives."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = quantize(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number")

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if positive and amount <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    if not positive and amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds maximum of {MAX_AMOUNT}")
    return amount


def coerce_date(value: Any, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_iso_date(value) if isinstance(value, str) else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)")
    return parsed


def coerce_time(value: Any, field: str) -> time:
    if isinstance(value, time):
        return value.replace(microsecond=0)
    try:
        parsed = parse_iso_time(value) if isinstance(value, str) else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be a time (HH:MM or HH:MM:SS)")
    return parsed


def coerce_datetime(value: Any, field: str) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        parsed = parse_iso_datetime(value) if isinstance(value, str) else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be an ISO-8601 datetime")
    return parsed


def coerce_choice(value: Any, field: str, choices: tuple[str, ...]) -> str:
    if not isinstance(value, str) or value.strip().upper() not in choices:
        raise ValidationError(f"{field} must be one of {', '.join(choices)}")
    return value.strip().upper()
