"""Guards shared by carts, orders and their line items.

Each guard raises a ``ValidationError`` keyed by the offending field and
returns the normalised value otherwise.
"""

import math
from datetime import UTC, datetime

from protean.exceptions import ValidationError


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def require_text(value, field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError({field: [f"{_label(field)} cannot be empty"]})
    return str(value).strip()


def require_positive_quantity(quantity, field: str = "quantity") -> int:
    """Accept whole numbers only; ``2.5`` is rejected, not truncated."""
    try:
        number = float(quantity)
    except (TypeError, ValueError) as exc:
        raise ValidationError({field: [f"{_label(field)} must be a whole number"]}) from exc
    if isinstance(quantity, bool) or not number.is_integer():
        raise ValidationError({field: [f"{_label(field)} must be a whole number"]})
    if number <= 0:
        raise ValidationError({field: ["Quantity must be greater than zero"]})
    return int(number)


def require_non_negative_amount(amount, field: str) -> float:
    try:
        number = float(amount)
    except (TypeError, ValueError) as exc:
        raise ValidationError({field: [f"{_label(field)} must be a number"]}) from exc
    if not math.isfinite(number):
        raise ValidationError({field: [f"{_label(field)} must be a finite number"]})
    if number < 0:
        raise ValidationError({field: [f"{_label(field)} cannot be negative"]})
    return number


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes read back from storage as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
