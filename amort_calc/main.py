"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full schedules or only their summary, optionally
correcting the balance by a TR history file. Results can be printed to the
terminal or exported to a JSON file.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import click

from .data_models import DEFAULT_SAFETY_MARGIN, AmortizationSystem, CorrectionPolicy, ExtraPayment, LoanParameters
from .engine import compute_schedule
from .errors import ScheduleError
from .formatter import print_schedule, print_summary, schedule_to_dict, summarize
from .rates import monthly_from_annual
from .tr_history import DEFAULT_AVERAGE_WINDOW, resolve_tr_inputs
from .utils import decimal_from_str, parse_iso_date

logger = logging.getLogger(__name__)

RATE_TYPES = ("monthly", "annual")


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("250000") and shorthand with ``k``/``m`` suffixes
    (e.g., "250k" meaning 250_000).
    """
    value = str(value).strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def periodic_rate(rate: Decimal, rate_type: str) -> Decimal:
    """Convert a percentage rate into the monthly fraction used by the engine."""
    if rate_type == "annual":
        if rate <= -100:
            raise click.BadParameter(f"Annual rate must be above -100%; got {rate}")
        return monthly_from_annual(rate)
    return rate / Decimal(100)


def parse_extra_strings(values: Tuple[str, ...]) -> List[ExtraPayment]:
    """Parse ``YYYY-MM-DD:AMOUNT`` or ``M<index>:AMOUNT`` entries."""
    extras: List[ExtraPayment] = []
    for item in values:
        target, sep, amt_str = item.rpartition(":")
        if not sep or not target:
            raise click.BadParameter(
                f"Extra payment must be in YYYY-MM-DD:AMOUNT or M<month>:AMOUNT format; got {item}"
            )
        amount = parse_amount(amt_str)
        if target.upper().startswith("M") and target[1:].isdigit():
            extras.append(ExtraPayment(amount=amount, month=int(target[1:])))
            continue
        try:
            extras.append(ExtraPayment(amount=amount, date=parse_iso_date(target)))
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    return extras


def build_parameters_from_options(
    principal: str,
    rate: str,
    rate_type: str,
    term: int,
    system: str,
    fee: Optional[str] = None,
    start_date: Optional[str] = None,
    extra: Tuple[str, ...] = (),
    monthly_extra: Optional[str] = None,
    tr_file: Optional[str] = None,
    tr_window: int = DEFAULT_AVERAGE_WINDOW,
    projected_tr: Optional[str] = None,
    policy: str = CorrectionPolicy.COMPOUND_INSTALLMENT.value,
    safety_margin: int = DEFAULT_SAFETY_MARGIN,
) -> LoanParameters:
    principal_value = parse_amount(principal)
    try:
        rate_value = decimal_from_str(str(rate))
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    if rate_type not in RATE_TYPES:
        raise click.BadParameter(f"Rate type must be one of {', '.join(RATE_TYPES)}; got {rate_type}")
    start_dt = None
    if start_date:
        try:
            start_dt = parse_iso_date(start_date)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    table, average = resolve_tr_inputs(tr_file, tr_window) if tr_file else (None, Decimal("0"))
    if table is not None and projected_tr:
        # Explicit projection, in percent, overrides the history average.
        try:
            average = decimal_from_str(projected_tr) / Decimal(100)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    if table is not None:
        logger.info("Projected TR for months past the history: %.5f%% a.m.", average * 100)
    return LoanParameters(
        principal=principal_value,
        rate=periodic_rate(rate_value, rate_type),
        term=term,
        system=system.lower(),
        fee=parse_amount(fee) if fee else Decimal("0"),
        start_date=start_dt,
        extras=parse_extra_strings(extra) if extra else [],
        monthly_extra=parse_amount(monthly_extra) if monthly_extra else Decimal("0"),
        correction_table=table,
        projected_correction=average,
        correction_policy=policy,
        safety_margin=safety_margin,
    )


def export_to_json(path: Path, payload: dict) -> None:
    """Export a serialized schedule to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


_LOAN_OPTIONS = [
    click.option("--principal", "-p", "principal", required=True, help="Financed amount"),
    click.option("--rate", "-r", "rate", required=True, help="Interest rate in percent"),
    click.option(
        "--rate-type",
        "rate_type",
        type=click.Choice(RATE_TYPES),
        default="monthly",
        help="Whether --rate is a monthly or an annual (effective) percentage",
    ),
    click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
    click.option(
        "--system",
        "system",
        type=click.Choice([s.value for s in AmortizationSystem], case_sensitive=False),
        default=AmortizationSystem.PRICE.value,
        help="Amortization system",
    ),
    click.option("--fee", "fee", help="Fixed monthly fee (insurance, administration)"),
    click.option("--start-date", "-s", "start_date", help="First installment date (YYYY-MM-DD)"),
    click.option("--extra", "extra", multiple=True, help="Extra payment in YYYY-MM-DD:AMOUNT or M<month>:AMOUNT format"),
    click.option("--monthly-extra", "monthly_extra", help="Extra amount paid every month"),
    click.option("--tr-file", "tr_file", type=click.Path(dir_okay=False), help="TR history file; enables correction"),
    click.option(
        "--tr-window",
        "tr_window",
        type=click.IntRange(min=1),
        default=DEFAULT_AVERAGE_WINDOW,
        show_default=True,
        help="Months averaged to project the TR past the history",
    ),
    click.option("--projected-tr", "projected_tr", help="Monthly TR (percent) to use past the history"),
    click.option(
        "--policy",
        "policy",
        type=click.Choice([p.value for p in CorrectionPolicy]),
        default=CorrectionPolicy.COMPOUND_INSTALLMENT.value,
        show_default=True,
        help="How correction reaches the PRICE installment",
    ),
    click.option(
        "--safety-margin",
        "safety_margin",
        type=click.IntRange(min=0),
        default=DEFAULT_SAFETY_MARGIN,
        show_default=True,
        help="Months allowed past the term before the balance is settled at once",
    ),
]


def loan_options(func: Callable) -> Callable:
    for option in reversed(_LOAN_OPTIONS):
        func = option(func)
    return func


def _compute(options: dict[str, Any]):
    params = build_parameters_from_options(**options)
    try:
        return params, compute_schedule(params)
    except ScheduleError as exc:
        raise click.ClickException(str(exc))


@click.group()
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """A command-line SAC/PRICE amortization calculator with TR correction."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def schedule(output: Optional[str], **options: Any) -> None:
    """Compute and print the full amortization schedule."""
    params, result = _compute(options)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Unsupported output format; use .json")
        export_to_json(path, schedule_to_dict(result, params.term))
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(summarize(result, params.term))
    print_schedule(result.records, show_correction=params.correction_table is not None)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the summary metrics for a loan."""
    params, result = _compute(options)
    summary_data = summarize(result, params.term)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        export_to_json(path, {"summary": summary_data})
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


if __name__ == "__main__":
    cli()
