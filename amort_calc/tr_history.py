"""Loading of the TR (Taxa Referencial) history file.

The history is a text file with one line per publication period::

    01/01/2024;01/02/2024;0,0605

holding the period start date, end date and the TR in percent with a decimal
comma. Every calendar month touched by a period is mapped to the value
divided by 100, producing the ``"YYYY-MM" -> fraction`` table consumed by the
engine. Malformed lines are skipped; a file that cannot be read disables
correction instead of failing the calculation.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from .correction import month_key
from .utils import add_months, parse_br_date

logger = logging.getLogger(__name__)

# Number of most recent months averaged to project the TR of future months.
DEFAULT_AVERAGE_WINDOW = 12


def parse_tr_history(text: str) -> Dict[str, Decimal]:
    """Parse the TR history text into a month-key table."""
    table: Dict[str, Decimal] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split(";")
        if len(parts) < 3:
            logger.debug("Skipping TR line %d: expected 3 fields, got %d", lineno, len(parts))
            continue
        try:
            first = parse_br_date(parts[0])
            last = parse_br_date(parts[1])
            value = Decimal(parts[2].strip().replace(",", "."))
        except (ValueError, InvalidOperation):
            logger.debug("Skipping unparseable TR line %d: %r", lineno, line)
            continue
        if not value.is_finite():
            continue
        fraction = value / Decimal(100)
        current = first.replace(day=1)
        end = last.replace(day=1)
        while current <= end:
            table[month_key(current)] = fraction
            current = add_months(current, 1)
    return table


def load_tr_history(path: Union[str, Path]) -> Optional[Dict[str, Decimal]]:
    """Read and parse a TR history file; return ``None`` if it cannot be read."""
    path = Path(path)
    try:
        # Undecodable bytes (Latin-1 exports) only spoil the lines they sit on.
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("TR history %s is unavailable, correction disabled: %s", path, exc)
        return None
    table = parse_tr_history(text)
    logger.info("Loaded %d TR months from %s", len(table), path)
    return table


def projected_average(table: Dict[str, Decimal], window: int = DEFAULT_AVERAGE_WINDOW) -> Decimal:
    """Return the mean of the ``window`` most recent entries of ``table``.

    Used as the projected correction for months past the known history.
    An empty table projects zero.
    """
    if not table or window <= 0:
        return Decimal("0")
    recent = [table[k] for k in sorted(table)[-window:]]
    return sum(recent, Decimal("0")) / Decimal(len(recent))


def resolve_tr_inputs(
    path: Optional[Union[str, Path]], window: int = DEFAULT_AVERAGE_WINDOW
) -> Tuple[Optional[Dict[str, Decimal]], Decimal]:
    """Return the correction table and projected average for a history file.

    ``(None, 0)`` is returned when no path is given or the file yields no
    months, which leaves correction disabled.
    """
    if path is None:
        return None, Decimal("0")
    table = load_tr_history(path)
    if not table:
        return None, Decimal("0")
    return table, projected_average(table, window)
