"""Output helpers for the amortization calculator.

This module turns a ``ScheduleResult`` into a summary dictionary, a
JSON-serializable payload and a plain tab-separated text table. It never
formats currency symbols; values are printed with two decimal places.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .data_models import InstallmentRecord, ScheduleResult


def summarize(result: ScheduleResult, term: Optional[int] = None) -> Dict[str, Any]:
    """Return aggregate metrics of a schedule as plain floats and ints."""
    records = result.records
    summary: Dict[str, Any] = {
        "total_interest": float(result.total_interest),
        "total_paid": float(result.total_paid),
        "total_amortization": float(result.total_amortization),
        "total_extra": float(result.total_extra),
        "total_fees": float(result.total_fees),
        "months_executed": result.months_executed,
        "first_installment": float(records[0].installment) if records else 0.0,
        "last_installment": float(records[-1].installment) if records else 0.0,
        "end_label": records[-1].label if records else None,
        "final_balance": float(result.final_balance),
    }
    if term is not None:
        summary["term_months"] = term
        summary["months_saved"] = max(0, term - result.months_executed)
    return summary


def record_to_dict(record: InstallmentRecord) -> Dict[str, Any]:
    return {
        "month": record.month,
        "date": record.date.isoformat() if record.date else None,
        "label": record.label,
        "installment": float(record.installment),
        "amortization": float(record.amortization),
        "interest": float(record.interest),
        "fee": float(record.fee),
        "extra": float(record.extra),
        "total_paid": float(record.total_paid),
        "balance": float(record.balance),
        "correction": float(record.correction),
    }


def schedule_to_dict(result: ScheduleResult, term: Optional[int] = None) -> Dict[str, Any]:
    """Convert a schedule into a JSON-serializable dictionary."""
    return {
        "summary": summarize(result, term),
        "schedule": [record_to_dict(r) for r in result.records],
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print a summary of schedule metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total amortization : {summary['total_amortization']:.2f}")
    if summary.get("total_extra"):
        print(f"Total extra        : {summary['total_extra']:.2f}")
    if summary.get("total_fees"):
        print(f"Total fees         : {summary['total_fees']:.2f}")
    print(f"Total paid         : {summary['total_paid']:.2f}")
    print(f"First installment  : {summary['first_installment']:.2f}")
    print(f"Last installment   : {summary['last_installment']:.2f}")
    print(f"Months executed    : {summary['months_executed']}")
    if summary.get("months_saved"):
        print(f"Term reduction     : {summary['months_saved']} months")
    print("-" * 72)


def _percent(fraction: Decimal) -> str:
    return f"{fraction * 100:.5f}%"


def print_schedule(records: Iterable[InstallmentRecord], show_correction: bool = False) -> None:
    """Print the schedule as a simple table.

    Parameters
    ----------
    records: Iterable[InstallmentRecord]
        The records to print.
    show_correction: bool
        Whether to include the monthly correction column. Hidden by default
        because most schedules run without correction.
    """
    headers: List[str] = [
        "Month",
        "Date",
        "Installment",
        "Amortization",
        "Interest",
        "Fee",
        "Extra",
        "Balance",
    ]
    if show_correction:
        headers.append("Correction")
    print("\t".join(headers))
    for record in records:
        row = [
            str(record.month),
            record.label,
            f"{record.installment:.2f}",
            f"{record.amortization:.2f}",
            f"{record.interest:.2f}",
            f"{record.fee:.2f}",
            f"{record.extra:.2f}",
            f"{record.balance:.2f}",
        ]
        if show_correction:
            row.append(_percent(record.correction))
        print("\t".join(row))
