"""Grouping of scheduled extra payments by month index."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Optional

from .data_models import ExtraPayment


def resolve_month_index(payment: ExtraPayment, start_date: Optional[date]) -> Optional[int]:
    """Return the 1-based month index targeted by ``payment``.

    An explicit ``month`` wins over ``date``. A date is counted in calendar
    months from ``start_date`` (same month as the start is month 1); without a
    start date it cannot be resolved and ``None`` is returned.
    """
    if payment.month is not None:
        return payment.month
    if payment.date is None or start_date is None:
        return None
    diff = (payment.date.year - start_date.year) * 12 + (payment.date.month - start_date.month)
    return diff + 1


def aggregate_extras(
    payments: Iterable[ExtraPayment], start_date: Optional[date], term: int
) -> Dict[int, Decimal]:
    """Sum scheduled extra payments per month index.

    Payments with a non-positive amount, an unresolvable date or a month
    outside ``1..term`` are ignored. The recurring monthly extra is not part
    of the mapping; the engine adds it when it consumes each month.
    """
    mapping: Dict[int, Decimal] = {}
    for payment in payments:
        if payment.amount is None or payment.amount <= 0:
            continue
        month = resolve_month_index(payment, start_date)
        if month is None or month < 1 or month > term:
            continue
        mapping[month] = mapping.get(month, Decimal("0")) + payment.amount
    return mapping
