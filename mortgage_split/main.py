"""Command-line interface for the mortgage split calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can split a recorded mortgage payment into principal,
interest and escrow, look up which payment of the loan a date falls on,
print the amortization schedule or check a manually entered split. Results
can be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from .data_models import LoanTerms, PaymentFrequency, PaymentSplit, ScheduleEntry, validate_loan_terms
from .engine import build_schedule, scheduled_payment
from .formatter import print_preview, print_schedule, print_split
from .payment_index import resolve_payment_index
from .preview import preview_manual_split
from .reconciler import compute_mortgage_split
from .utils import parse_amount, parse_iso_date, parse_optional_date

logger = logging.getLogger("mortgage_split.cli")

FREQUENCY_CHOICES = [f.value for f in PaymentFrequency]


def _amount(value: Optional[str], name: str) -> Decimal:
    if value is None or not value.strip():
        return Decimal("0")
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint=name)


def _date(value: Optional[str], name: str):
    try:
        return parse_optional_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint=name)


def build_terms_from_options(
    principal: str,
    rate: float,
    term: int,
    close_date: str,
    first_payment_date: Optional[str],
    frequency: str,
) -> LoanTerms:
    """Turn raw CLI option values into validated ``LoanTerms``."""
    origination = _date(close_date, "--close-date")
    first = _date(first_payment_date, "--first-payment-date")
    if origination is None and first is None:
        raise click.BadParameter("A close date or first payment date is required")
    if not math.isfinite(rate):
        raise click.BadParameter(f"Invalid interest rate: {rate}", param_hint="--rate")
    terms = LoanTerms(
        original_principal=_amount(principal, "--principal"),
        annual_rate_percent=Decimal(str(rate)),
        term_months=term,
        origination_date=origination or first,
        first_payment_date=first,
        payment_frequency=PaymentFrequency.parse(frequency),
    )
    problems = validate_loan_terms(terms)
    if problems:
        raise click.BadParameter("; ".join(problems))
    return terms


def loan_options(func):
    """Attach the loan term options shared by every command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Original loan amount"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", required=True, type=int, help="Loan term in months"),
        click.option("--close-date", "close_date", help="Close date (YYYY-MM-DD)"),
        click.option("--first-payment-date", "-f", "first_payment_date", help="First payment date (YYYY-MM-DD)"),
        click.option(
            "--frequency",
            "frequency",
            type=click.Choice(FREQUENCY_CHOICES),
            default=PaymentFrequency.MONTHLY.value,
            help="Payment frequency",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def split_to_dict(split: PaymentSplit) -> Dict[str, Any]:
    return {
        "payment_number": split.payment_number,
        "frequency": split.frequency.value,
        "total_payment": float(split.total_payment),
        "principal": float(split.principal),
        "interest": float(split.interest),
        "escrow_taxes": float(split.escrow_taxes),
        "escrow_insurance": float(split.escrow_insurance),
        "escrow_inferred": split.escrow_inferred,
    }


def export_schedule_to_json(path: Path, schedule: List[ScheduleEntry], payment: Decimal) -> None:
    """Export the schedule and its level payment to a JSON file."""
    rows = []
    for e in schedule:
        rows.append(
            {
                "payment_number": e.payment_number,
                "due_date": e.due_date.isoformat(),
                "starting_balance": float(e.starting_balance),
                "payment": float(e.payment),
                "principal": float(e.principal),
                "interest": float(e.interest),
                "ending_balance": float(e.ending_balance),
            }
        )
    data = {"scheduled_payment": float(payment), "schedule": rows}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_schedule_to_csv(path: Path, schedule: List[ScheduleEntry]) -> None:
    """Export the schedule to a CSV file."""
    header = ["Payment", "Due_Date", "Starting_Balance", "Payment_Amount", "Principal", "Interest", "Ending_Balance"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for e in schedule:
            writer.writerow(
                [
                    e.payment_number,
                    e.due_date.isoformat(),
                    f"{e.starting_balance:.2f}",
                    f"{e.payment:.2f}",
                    f"{e.principal:.2f}",
                    f"{e.interest:.2f}",
                    f"{e.ending_balance:.2f}",
                ]
            )


@click.group()
@click.option(
    "--log-level",
    "log_level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """Split mortgage payments into principal, interest and escrow."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@cli.command()
@loan_options
@click.option("--date", "-d", "payment_date", required=True, help="Payment date (YYYY-MM-DD)")
@click.option("--amount", "-a", "amount", required=True, help="Total amount paid")
@click.option("--taxes", "taxes", help="Known monthly property taxes")
@click.option("--insurance", "insurance", help="Known monthly insurance")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def split(
    principal: str,
    rate: float,
    term: int,
    close_date: Optional[str],
    first_payment_date: Optional[str],
    frequency: str,
    payment_date: str,
    amount: str,
    taxes: Optional[str],
    insurance: Optional[str],
    output: Optional[str],
) -> None:
    """Split a recorded mortgage payment."""
    terms = build_terms_from_options(principal, rate, term, close_date, first_payment_date, frequency)
    total = _amount(amount, "--amount")
    if total <= 0:
        raise click.BadParameter("Amount must be a positive number", param_hint="--amount")
    try:
        paid_on = parse_iso_date(payment_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--date")
    logger.debug("Splitting %s paid on %s", total, paid_on.isoformat())
    result = compute_mortgage_split(
        terms, _amount(taxes, "--taxes"), _amount(insurance, "--insurance"), paid_on, total
    )
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Split export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"split": split_to_dict(result)}, f, indent=2)
        click.echo(f"Split exported to {path}")
    else:
        print_split(result)


@cli.command()
@loan_options
@click.option("--date", "-d", "payment_date", required=True, help="Payment date (YYYY-MM-DD)")
def index(
    principal: str,
    rate: float,
    term: int,
    close_date: Optional[str],
    first_payment_date: Optional[str],
    frequency: str,
    payment_date: str,
) -> None:
    """Show which payment of the loan falls on a date."""
    terms = build_terms_from_options(principal, rate, term, close_date, first_payment_date, frequency)
    try:
        paid_on = parse_iso_date(payment_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--date")
    payment_index = resolve_payment_index(terms, paid_on)
    click.echo(f"Payment index  : {payment_index}")
    click.echo(f"Payment number : {payment_index + 1} of {terms.total_payments}")
    if terms.uses_close_date_anchor:
        click.echo("Using close date as fallback anchor.")


@cli.command()
@loan_options
@click.option("--limit", "limit", type=int, help="Only compute the first N payments")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    term: int,
    close_date: Optional[str],
    first_payment_date: Optional[str],
    frequency: str,
    limit: Optional[int],
    output: Optional[str],
) -> None:
    """Compute and print the amortization schedule."""
    terms = build_terms_from_options(principal, rate, term, close_date, first_payment_date, frequency)
    rows = build_schedule(terms, limit=limit)
    payment = scheduled_payment(terms)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_schedule_to_json(path, rows, payment)
        elif path.suffix.lower() == ".csv":
            export_schedule_to_csv(path, rows)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    click.echo(f"Scheduled payment: {payment:.2f} x {terms.total_payments}")
    max_rows = 120
    if len(rows) > max_rows:
        click.echo(f"Schedule has {len(rows)} rows; showing first {max_rows} rows.")
        rows = rows[:max_rows]
    print_schedule(rows)


@cli.command()
@click.option("--amount", "-a", "amount", required=True, help="Total amount paid")
@click.option("--interest", "-i", "interest", required=True, help="Interest portion")
@click.option("--escrow", "-e", "escrow", default="0", help="Escrow portion")
@click.option("--deal", "deal", default="Unknown", help="Deal nickname")
def manual(amount: str, interest: str, escrow: str, deal: str) -> None:
    """Check a split entered by hand and show the resulting principal."""
    try:
        preview = preview_manual_split(
            _amount(amount, "--amount"), _amount(interest, "--interest"), _amount(escrow, "--escrow"), deal
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    print_preview(preview)


if __name__ == "__main__":
    cli()
