"""Data models for the amortization calculator.

This module defines dataclasses representing the entities used by the
calculator: scheduled extra payments, the static loan parameters, individual
installment records and the final schedule. Records and results are frozen so
that rendering or export code can consume them without being able to alter a
computed schedule.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Mapping, Optional, Tuple, Union

# Label used for records of a loan without a start date.
NO_DATE_LABEL = "-"

# Number of months the engine may run past the nominal term when monetary
# correction keeps the balance above zero.
DEFAULT_SAFETY_MARGIN = 100

CorrectionValue = Union[Decimal, int, float, str]


class AmortizationSystem(str, Enum):
    """Supported amortization regimes."""

    SAC = "sac"  # constant amortization
    PRICE = "price"  # constant installment (French/annuity)


class CorrectionPolicy(str, Enum):
    """How monetary correction reaches the PRICE base installment (PAJ).

    The outstanding balance is corrected under every policy. The policies only
    differ in what happens to the installment:

    ``COMPOUND_INSTALLMENT``
        The PAJ is rounded and re-corrected month after month, so rounding
        compounds together with the index.
    ``ORIGINAL_INSTALLMENT``
        A cumulative correction factor is tracked and each month's PAJ is
        derived from the original, uncorrected PAJ times that factor.
    ``BALANCE_ONLY``
        The PAJ never changes; correction only grows the balance.
    """

    COMPOUND_INSTALLMENT = "compound"
    ORIGINAL_INSTALLMENT = "original"
    BALANCE_ONLY = "balance-only"


@dataclass
class ExtraPayment:
    """An extra principal payment scheduled for one month.

    Attributes
    ----------
    amount: Decimal
        Amount applied to the principal. Non-positive amounts are ignored.
    month: Optional[int]
        1-based month index relative to the start of the loan.
    date: Optional[date]
        Calendar date of the payment. Only used when ``month`` is not given;
        it is resolved against the loan start date.
    """

    amount: Decimal
    month: Optional[int] = None
    date: Optional[date] = None


@dataclass
class LoanParameters:
    """Static parameters of a loan, gathered from the caller.

    ``rate`` is the periodic (monthly) rate as a fraction, e.g.
    ``Decimal("0.01")`` for 1 % a month. Use
    :func:`amort_calc.rates.monthly_from_annual` to convert a nominal annual
    percentage first.

    ``correction_table`` maps ``"YYYY-MM"`` keys to monthly correction
    fractions. ``None`` disables correction entirely; an empty mapping keeps it
    enabled and makes every month use ``projected_correction``.
    """

    principal: Decimal
    rate: Decimal
    term: int
    system: AmortizationSystem
    fee: Decimal = Decimal("0")
    start_date: Optional[date] = None
    extras: List[ExtraPayment] = field(default_factory=list)
    monthly_extra: Decimal = Decimal("0")
    correction_table: Optional[Mapping[str, CorrectionValue]] = None
    projected_correction: Decimal = Decimal("0")
    correction_policy: CorrectionPolicy = CorrectionPolicy.COMPOUND_INSTALLMENT
    safety_margin: int = DEFAULT_SAFETY_MARGIN


@dataclass(frozen=True)
class InstallmentRecord:
    """One month of the schedule.

    ``installment`` always equals ``amortization + interest + fee``; ``extra``
    is paid on top of it. ``balance`` is the outstanding balance at the end of
    the month and ``correction`` the fraction applied to the balance at its
    start.
    """

    month: int
    date: Optional[date]
    label: str
    installment: Decimal
    amortization: Decimal
    interest: Decimal
    fee: Decimal
    extra: Decimal
    balance: Decimal
    correction: Decimal

    @property
    def total_paid(self) -> Decimal:
        return self.installment + self.extra


@dataclass(frozen=True)
class ScheduleResult:
    """The computed schedule and its aggregate totals."""

    records: Tuple[InstallmentRecord, ...]
    total_interest: Decimal
    total_paid: Decimal
    months_executed: int

    @property
    def total_amortization(self) -> Decimal:
        return sum((r.amortization for r in self.records), Decimal("0"))

    @property
    def total_extra(self) -> Decimal:
        return sum((r.extra for r in self.records), Decimal("0"))

    @property
    def total_fees(self) -> Decimal:
        return sum((r.fee for r in self.records), Decimal("0"))

    @property
    def final_balance(self) -> Decimal:
        return self.records[-1].balance if self.records else Decimal("0")
