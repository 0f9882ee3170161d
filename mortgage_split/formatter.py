"""Output helpers for the mortgage split calculator.

This module provides simple functions to render payment splits, split
previews and amortization schedules in a tabular text format. We rely only
on built-in printing and string formatting.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import PaymentSplit, ScheduleEntry
from .preview import SplitPreview


def print_split(split: PaymentSplit) -> None:
    """Print a payment split in a human-readable format."""
    print("Payment split")
    print("-" * 48)
    print(f"Payment number     : {split.payment_number} ({split.frequency.value})")
    print(f"Total payment      : {split.total_payment:.2f}")
    print(f"Principal          : {split.principal:.2f}")
    print(f"Interest           : {split.interest:.2f}")
    print(f"Escrow - taxes     : {split.escrow_taxes:.2f}")
    print(f"Escrow - insurance : {split.escrow_insurance:.2f}")
    if split.escrow_inferred:
        print("Escrow was inferred from the payment difference")
    print("-" * 48)


def print_preview(preview: SplitPreview) -> None:
    """Print a split preview with its warnings."""
    kind = "auto" if preview.is_auto_calculated else "manual"
    print(f"Split preview ({kind}) - {preview.deal_nickname or 'Unknown deal'}")
    print("-" * 48)
    if preview.payment_number is not None:
        print(f"Payment number     : {preview.payment_number}")
    print(f"Total payment      : {preview.total:.2f}")
    print(f"Principal          : {preview.principal:.2f}")
    print(f"Interest           : {preview.interest:.2f}")
    print(f"Escrow             : {preview.escrow:.2f}")
    for warning in preview.warnings:
        print(f"Warning: {warning}")
    print("-" * 48)


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = ["Payment", "Due", "StartBal", "Amount", "Principal", "Interest", "EndBal"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.payment_number),
            entry.due_date.isoformat(),
            f"{entry.starting_balance:.2f}",
            f"{entry.payment:.2f}",
            f"{entry.principal:.2f}",
            f"{entry.interest:.2f}",
            f"{entry.ending_balance:.2f}",
        ]
        print("\t".join(row))
