"""
Date key helpers. Per-date documents are keyed by "yyyy-MM-dd" strings.
"""

import re
from datetime import date
from typing import Optional

from ..core.errors import FieldViolation, ValidationError

_DATE_KEY = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def today_key() -> str:
    """Date key for the current local day."""
    return date.today().isoformat()


def parse_date_key(value: str, field: str = "date", earliest: Optional[date] = None,
                   latest: Optional[date] = None) -> str:
    """
    Validate a "yyyy-MM-dd" date key.

    Args:
        value: Raw date string
        field: Field name reported in violations
        earliest: Optional lower bound (inclusive)
        latest: Optional upper bound (inclusive)

    Returns:
        str: The normalized date key

    Raises:
        ValidationError: If the value is not a date or is out of bounds
    """
    parsed = None
    if isinstance(value, str) and _DATE_KEY.fullmatch(value):
        try:
            parsed = date.fromisoformat(value)
        except ValueError:
            parsed = None
    if parsed is None:
        raise ValidationError([FieldViolation(
            field=field, constraint="type", message="Expected a date in yyyy-MM-dd format"
        )])

    if earliest and parsed < earliest:
        raise ValidationError([FieldViolation(
            field=field, constraint="min", message="Date is too early", bound=earliest.isoformat()
        )])
    if latest and parsed > latest:
        raise ValidationError([FieldViolation(
            field=field, constraint="max", message="Date is in the future", bound=latest.isoformat()
        )])
    return parsed.isoformat()
