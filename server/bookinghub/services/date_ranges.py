"""Date interval helpers shared by assignment and payment logic."""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from ..core.exceptions import ValidationError


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """
    Inclusive interval intersection.

    ``[a_start, a_end]`` and ``[b_start, b_end]`` overlap when they share at
    least one day, so ranges that merely touch (one ends the day the other
    starts) do overlap.
    """
    return a_start <= b_end and a_end >= b_start


def billable_days(start: date, end: date) -> int:
    """Whole days charged for a stay, rounding any partial day up."""
    return max(math.ceil((end - start) / timedelta(days=1)), 0)


def calculate_amount(unit_price: Decimal, start: date, end: date) -> Decimal:
    return Decimal(unit_price) * billable_days(start, end)


def parse_iso_date(value: Optional[str], field: str) -> date:
    """Parse a ``YYYY-MM-DD`` string, raising a field-level ValidationError."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            error=f"Invalid date for {field}",
            details=[{"path": field, "message": "Must be a date in YYYY-MM-DD format"}],
        ) from e
