"""Monthly correction-index lookup.

The correction table is a plain mapping of ``"YYYY-MM"`` keys to monthly
fractions (already divided by 100). Where it comes from is the caller's
concern; see :mod:`amort_calc.tr_history` for the TR file loader.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from .data_models import CorrectionValue


def month_key(dt: date) -> str:
    """Return the ``YYYY-MM`` key of the month containing ``dt``."""
    return f"{dt.year:04d}-{dt.month:02d}"


def as_decimal(value: CorrectionValue) -> Decimal:
    """Convert a table value to ``Decimal`` without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def resolve_correction(
    key: Optional[str],
    table: Optional[Mapping[str, CorrectionValue]],
    fallback_average: Decimal,
) -> Decimal:
    """Return the correction fraction to apply in one month.

    * Without a table correction is disabled and the fraction is zero.
    * Without a month key (the loan has no start date) the projected
      ``fallback_average`` is used for every month.
    * A key present in the table uses that entry exactly.
    * A key missing from the table lies beyond the known history, so the
      projected ``fallback_average`` is used.
    """
    if table is None:
        return Decimal("0")
    if key is None:
        return as_decimal(fallback_average)
    value = table.get(key)
    if value is None:
        return as_decimal(fallback_average)
    return as_decimal(value)
