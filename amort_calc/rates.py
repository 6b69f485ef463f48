"""Rate conversion and rounding helpers.

All functions are pure and operate on ``Decimal`` values.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, getcontext

getcontext().prec = 28  # increase precision for financial calculations

TWO_PLACES = Decimal("0.01")
TWELVE_PLACES = Decimal("1e-12")


def round2(value: Decimal) -> Decimal:
    """Round a monetary value to cents, half away from zero."""
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round12(value: Decimal) -> Decimal:
    return value.quantize(TWELVE_PLACES, rounding=ROUND_HALF_UP)


def monthly_from_annual(annual_percent: Decimal) -> Decimal:
    """Return the effective monthly rate equivalent to an annual percentage.

    The conversion is compound, not nominal:

        monthly = (1 + annual / 100) ** (1 / 12) - 1

    so ``Decimal("12.6825")`` (12.6825 % a year) yields roughly ``0.01``.
    A zero annual rate yields zero.
    """
    annual = Decimal(annual_percent or 0) / Decimal(100)
    if annual == 0:
        return Decimal("0")
    return (1 + annual) ** (Decimal(1) / Decimal(12)) - 1


def annuity_payment(principal: Decimal, rate: Decimal, term: int) -> Decimal:
    """Return the PRICE base installment (PAJ) before correction and fees.

    PAJ = P * i * (1 + i) ** n / ((1 + i) ** n - 1)

    A zero ``rate`` splits the principal evenly over ``term`` months. The
    engine rounds the value to cents itself, so it is returned unrounded.
    """
    if term <= 0:
        raise ValueError("Term must be positive")
    if rate == 0:
        return principal / Decimal(term)
    growth = (1 + rate) ** term
    return principal * (rate * growth) / (growth - 1)
