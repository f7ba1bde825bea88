"""Failure kinds shared by the store, the record boundary and the aggregations.

Each kind has a strict helper that raises and, where a safe default exists, a
lenient one that recovers.
"""
import logging
import math
import re
from datetime import date, datetime

LOG = logging.getLogger(__name__)

_YEAR_MONTH = re.compile(r"([0-9]{4})-([0-9]{2})")
_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class ValidationFailed(ValueError):
    """User input rejected at save time."""


class DecodeFailed(ValueError):
    """Stored collection could not be decoded."""


class ParseFailed(ValueError):
    """A stored number or date could not be parsed."""


def to_number(value) -> float:
    if isinstance(value, bool):
        raise ParseFailed(f"Not a number: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except (TypeError, ValueError) as exc:
            raise ParseFailed(f"Not a number: {value!r}") from exc
    if not math.isfinite(number):
        raise ParseFailed(f"Not a finite number: {value!r}")
    return number


def safe_number(value) -> float:
    try:
        return to_number(value)
    except ParseFailed:
        LOG.debug("Counting unparseable number %r as 0", value)
        return 0.0


def parse_date(value) -> date:
    """Strict ``YYYY-MM-DD``. Timestamps and out-of-range parts are rejected."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise ParseFailed(f"Not a calendar date: {value!r}")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ParseFailed(f"Not a calendar date: {value!r}") from exc


def parse_year_month(value):
    """``"2024-03"`` -> ``(2024, 3)``; raises ValidationFailed otherwise."""
    match = _YEAR_MONTH.fullmatch(value) if isinstance(value, str) else None
    if not match:
        raise ValidationFailed(f"Month must look like YYYY-MM, got {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationFailed(f"Month out of range: {value!r}")
    return year, month
