"""Core calculation engine for the amortization calculator.

This module builds month-by-month schedules for constant-amortization (SAC)
and constant-installment (PRICE) loans. It supports monetary correction of
the outstanding balance by an external index (TR), scheduled and recurring
extra payments and a fixed monthly fee. Every monetary value is rounded to
cents as soon as it is computed, the way a bank statement is, so a schedule
drifts slightly from the closed-form annuity values.
"""

from __future__ import annotations

import logging
from decimal import Decimal, DecimalException, InvalidOperation
from typing import Dict, List, Optional

from .correction import as_decimal, month_key, resolve_correction
from .data_models import (
    NO_DATE_LABEL,
    AmortizationSystem,
    CorrectionPolicy,
    ExtraPayment,
    InstallmentRecord,
    LoanParameters,
    ScheduleResult,
)
from .errors import DomainError, ValidationError
from .extras import aggregate_extras
from .rates import annuity_payment, round2, round12
from .utils import add_months

logger = logging.getLogger(__name__)

# Balances at or below this are considered fully paid.
BALANCE_EPSILON = Decimal("0.01")

# Largest rounding drift a single month can add to the balance.
HALF_CENT = Decimal("0.005")

ZERO = Decimal("0.00")


class _CompoundInstallment:
    """Re-corrects the rounded PAJ of the previous month."""

    def __init__(self, base: Decimal) -> None:
        self.current = base

    def apply(self, correction: Decimal) -> Decimal:
        if correction != 0:
            self.current = round2(self.current * (1 + correction))
        return self.current


class _OriginalInstallment:
    """Derives each month's PAJ from the original PAJ and the accumulated factor."""

    def __init__(self, base: Decimal) -> None:
        self.base = base
        self.factor = Decimal("1")
        self.current = base

    def apply(self, correction: Decimal) -> Decimal:
        if correction != 0:
            self.factor = round12(self.factor * (1 + correction))
            self.current = round2(self.base * self.factor)
        return self.current


class _FixedInstallment:
    """Keeps the original PAJ; correction only grows the balance."""

    def __init__(self, base: Decimal) -> None:
        self.current = base

    def apply(self, correction: Decimal) -> Decimal:
        return self.current


_INSTALLMENT_INDEXERS = {
    CorrectionPolicy.COMPOUND_INSTALLMENT: _CompoundInstallment,
    CorrectionPolicy.ORIGINAL_INSTALLMENT: _OriginalInstallment,
    CorrectionPolicy.BALANCE_ONLY: _FixedInstallment,
}


def _to_decimal(value, name: str) -> Decimal:
    try:
        result = as_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number; got {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"{name} must be finite; got {value!r}")
    return result


def _ensure_finite(value: Decimal, name: str, month: int) -> Decimal:
    if not value.is_finite():
        raise DomainError(f"{name} became non-finite in month {month}")
    return value


def validate_parameters(params: LoanParameters) -> LoanParameters:
    """Check ``params`` and return a copy with normalized numeric fields.

    Raises
    ------
    ValidationError
        If the principal or term is not positive, the rate is not finite,
        the fee, recurring extra or safety margin is negative, an extra
        payment amount is not a finite number, or the amortization system
        or correction policy is unknown.
    """
    principal = _to_decimal(params.principal, "Principal")
    if principal <= 0:
        raise ValidationError("Principal must be positive")
    if isinstance(params.term, bool) or not isinstance(params.term, int) or params.term <= 0:
        raise ValidationError(f"Term must be a positive number of months; got {params.term!r}")
    rate = _to_decimal(params.rate, "Periodic rate")
    fee = _to_decimal(params.fee, "Fee")
    if fee < 0:
        raise ValidationError("Fee cannot be negative")
    monthly_extra = _to_decimal(params.monthly_extra, "Monthly extra")
    if monthly_extra < 0:
        raise ValidationError("Monthly extra cannot be negative")
    projected = _to_decimal(params.projected_correction, "Projected correction")
    extras: List[ExtraPayment] = []
    for payment in params.extras or []:
        amount = payment.amount
        if amount is not None:
            amount = _to_decimal(amount, "Extra payment amount")
        extras.append(ExtraPayment(amount=amount, month=payment.month, date=payment.date))
    if not isinstance(params.safety_margin, int) or params.safety_margin < 0:
        raise ValidationError("Safety margin must be a non-negative number of months")
    try:
        system = AmortizationSystem(params.system)
    except ValueError as exc:
        raise ValidationError(f"Unsupported amortization system: {params.system!r}") from exc
    try:
        policy = CorrectionPolicy(params.correction_policy)
    except ValueError as exc:
        raise ValidationError(f"Unsupported correction policy: {params.correction_policy!r}") from exc
    return LoanParameters(
        principal=principal,
        rate=rate,
        term=params.term,
        system=system,
        fee=fee,
        start_date=params.start_date,
        extras=extras,
        monthly_extra=monthly_extra,
        correction_table=params.correction_table,
        projected_correction=projected,
        correction_policy=policy,
        safety_margin=params.safety_margin,
    )


def compute_schedule(params: LoanParameters) -> ScheduleResult:
    """Compute the amortization schedule for a loan.

    Parameters
    ----------
    params: LoanParameters
        The loan parameters, including the already-resolved correction table
        and the projected correction used for months it does not cover.

    Returns
    -------
    ScheduleResult
        One record per month executed, ending with a zero balance. When
        correction keeps the balance alive past ``term + safety_margin``
        months, a final record settles the remainder in a single payment.

    Raises
    ------
    ValidationError
        If the parameters are invalid.
    DomainError
        If a computed value becomes non-finite.
    """
    params = validate_parameters(params)
    try:
        return _run_schedule(params)
    except DecimalException as exc:
        raise DomainError(f"Arithmetic failure while computing schedule: {exc!r}") from exc


def _run_schedule(params: LoanParameters) -> ScheduleResult:
    principal = params.principal
    rate = params.rate
    term = params.term
    fee = round2(params.fee)
    is_price = params.system is AmortizationSystem.PRICE

    # SAC amortizes a constant, never corrected amount.
    constant_amortization = round2(principal / Decimal(term))
    indexer = None
    if is_price:
        base_installment = _ensure_finite(round2(annuity_payment(principal, rate, term)), "Installment", 0)
        indexer = _INSTALLMENT_INDEXERS[params.correction_policy](base_installment)

    extras_by_month: Dict[int, Decimal] = aggregate_extras(params.extras, params.start_date, term)
    drift_tolerance = max(BALANCE_EPSILON, HALF_CENT * term)
    cap = term + params.safety_margin

    logger.debug(
        "Computing %s schedule: principal=%s rate=%s term=%d cap=%d correction=%s",
        params.system.value,
        principal,
        rate,
        term,
        cap,
        "off" if params.correction_table is None else params.correction_policy.value,
    )

    records: List[InstallmentRecord] = []
    balance = principal
    total_interest = ZERO
    total_paid = ZERO

    for month in range(1, cap + 1):
        current_date = add_months(params.start_date, month - 1) if params.start_date else None
        key: Optional[str] = month_key(current_date) if current_date else None
        correction = resolve_correction(key, params.correction_table, params.projected_correction)

        # Correction compounds the base the month's interest is charged on.
        if correction != 0:
            balance = _ensure_finite(round2(balance * (1 + correction)), "Balance", month)

        interest = _ensure_finite(round2(balance * rate), "Interest", month)

        if is_price:
            corrected_installment = _ensure_finite(indexer.apply(correction), "Installment", month)
            target = corrected_installment - interest
            if target <= 0:
                # Installment does not cover interest yet: interest-only month.
                amortization = ZERO
                installment = interest + fee
            else:
                amortization = min(target, balance)
                installment = corrected_installment + fee
            if balance <= amortization:
                amortization = balance
                installment = balance + interest + fee
        else:
            amortization = min(constant_amortization, balance)
            installment = amortization + interest + fee

        extra_target = extras_by_month.get(month, ZERO) + params.monthly_extra
        extra = min(round2(extra_target), max(ZERO, balance - amortization))

        remaining = round2(balance - amortization - extra)
        # Accumulated rounding drift only shows up once the nominal term is reached.
        sweep_limit = drift_tolerance if month >= term else BALANCE_EPSILON
        if ZERO < remaining <= sweep_limit:
            amortization += remaining
            installment += remaining
            remaining = ZERO
        balance = max(ZERO, remaining)

        records.append(
            InstallmentRecord(
                month=month,
                date=current_date,
                label=key or NO_DATE_LABEL,
                installment=installment,
                amortization=amortization,
                interest=interest,
                fee=fee,
                extra=extra,
                balance=balance,
                correction=correction,
            )
        )
        total_interest += interest
        total_paid += installment + extra

        if balance <= BALANCE_EPSILON:
            break

    if balance > BALANCE_EPSILON:
        month = cap + 1
        current_date = add_months(params.start_date, month - 1) if params.start_date else None
        interest = round2(balance * rate)
        logger.info(
            "Balance %s still open after %d months; settling it in month %d", balance, cap, month
        )
        records.append(
            InstallmentRecord(
                month=month,
                date=current_date,
                label=month_key(current_date) if current_date else NO_DATE_LABEL,
                installment=balance + interest,
                amortization=balance,
                interest=interest,
                fee=ZERO,
                extra=ZERO,
                balance=ZERO,
                correction=ZERO,
            )
        )
        total_interest += interest
        total_paid += balance + interest

    return ScheduleResult(
        records=tuple(records),
        total_interest=round2(total_interest),
        total_paid=round2(total_paid),
        months_executed=len(records),
    )
