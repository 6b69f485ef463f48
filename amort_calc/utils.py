"""Utility functions for the amortization calculator.

This module provides helpers for parsing user input into Python data types and
for handling dates, including adding months and parsing ``YYYY-MM-DD`` and
``dd/mm/yyyy`` strings. It uses Python's ``datetime`` module to calculate
month offsets.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal, InvalidOperation


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string. ``YYYY-MM`` is accepted as the 1st of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = [int(p) for p in value.strip().split("-")]
        if len(parts) == 2:
            parts.append(1)
        if len(parts) != 3:
            raise ValueError
        return date(parts[0], parts[1], parts[2])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def parse_br_date(value: str) -> date:
    """Parse a ``dd/mm/yyyy`` string."""
    try:
        day, month, year = (int(p) for p in value.strip().split("/"))
        return date(year, month, day)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Shift ``dt`` by ``months`` calendar months, keeping its day where possible.

    Days past the end of the target month fall back to its last day, so the
    schedule of a loan started on the 31st stays in step month after month.
    """
    years, month_index = divmod(dt.month - 1 + months, 12)
    last_day = calendar.monthrange(dt.year + years, month_index + 1)[1]
    return dt.replace(year=dt.year + years, month=month_index + 1, day=min(dt.day, last_day))


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas used as thousands separators. It raises
    ``ValueError`` if conversion fails.
    """
    try:
        cleaned = str(value).strip().replace(",", "")
        result = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result
