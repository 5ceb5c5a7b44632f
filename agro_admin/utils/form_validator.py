"""Validate form drafts and normalize numeric input before transport."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

REQUIRED_MESSAGE = "This field is required"
NUMBER_MESSAGE = "Enter a valid number"
NEGATIVE_MESSAGE = "Value cannot be negative"

# Secrets are sent exactly as typed
UNSTRIPPED_FIELDS = ("password",)


def is_blank(value: Any) -> bool:
    """Empty strings, whitespace and None count as missing; 0 does not."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def normalize_decimal(value: Any) -> Decimal:
    """Parse user numeric input, accepting a comma as the decimal separator.

    "12,50" -> Decimal("12.50"); spaces used as thousand separators are dropped.
    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace("\u00a0", "").replace(" ", "").replace(",", ".")
        if not text:
            raise ValueError("Empty number")
        try:
            number = Decimal(text)
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {value!r}") from e
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return number


class NegativeValueError(ValueError):
    """A parsed number below zero where only amounts are allowed."""


def normalize_amount(value: Any) -> Decimal:
    """Like normalize_decimal, but prices and stock levels cannot go below zero."""
    number = normalize_decimal(value)
    if number < 0:
        raise NegativeValueError(f"Negative value: {value!r}")
    return number


def validate_draft(
    draft: Mapping[str, Any],
    *,
    required: Iterable[str] = (),
    numeric: Iterable[str] = (),
) -> tuple[dict[str, Any], dict[str, str]]:
    """Check required and numeric fields of a form draft.

    Returns:
        Tuple of (cleaned copy of the draft, field -> error message). Numeric
        fields in the cleaned copy are Decimals; blank optional numerics become None.
    """
    cleaned = dict(draft)
    errors: dict[str, str] = {}

    for field in required:
        if is_blank(draft.get(field)):
            errors[field] = REQUIRED_MESSAGE

    for field in numeric:
        if field in errors or field not in draft:
            continue
        raw = draft.get(field)
        if is_blank(raw):
            cleaned[field] = None
            continue
        try:
            cleaned[field] = normalize_amount(raw)
        except NegativeValueError:
            errors[field] = NEGATIVE_MESSAGE
        except ValueError:
            errors[field] = NUMBER_MESSAGE

    for field, value in cleaned.items():
        if isinstance(value, str) and field not in UNSTRIPPED_FIELDS:
            cleaned[field] = value.strip()

    return cleaned, errors
