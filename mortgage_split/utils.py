"""Utility functions for the mortgage split engine.

This module provides helpers for parsing user input into Python data types,
for rounding money to cents and for calendar arithmetic (adding months and
counting months between dates). It uses Python's ``datetime`` and
``calendar`` modules for date math.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
import calendar
from typing import Optional, Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_cents(value: Union[Decimal, int, str]) -> Decimal:
    """Round a money amount to cents, halves away from zero."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Return ``value`` limited to ``[low, high]``; ``low`` wins if they cross."""
    return max(low, min(value, high))


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    Raises
    ------
    ValueError
        If the string is not a valid ISO date.
    """
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid date (expected YYYY-MM-DD): {value}") from exc


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    """Like ``parse_iso_date`` but blank or ``None`` gives ``None``."""
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips commas, a leading ``$`` and surrounding whitespace.
    It raises ``ValueError`` if conversion fails or the result is NaN or
    infinite.
    """
    try:
        cleaned = str(value).strip().replace(",", "").lstrip("$")
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a money string with optional ``k``/``m`` suffixes.

    ``"300k"`` is 300000 and ``"1.2m"`` is 1200000.
    """
    text = str(value).strip().lower().replace(",", "").lstrip("$")
    factor = Decimal("1")
    if text.endswith("k"):
        factor = Decimal("1000")
        text = text[:-1]
    elif text.endswith("m"):
        factor = Decimal("1000000")
        text = text[:-1]
    return decimal_from_str(text) * factor


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calendar_months_between(start: date, end: date) -> int:
    """Number of calendar month boundaries from ``start`` to ``end``.

    The day of the month is ignored, so Jan 31 to Feb 1 counts as one. The
    result is negative when ``end`` is before ``start``.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)
