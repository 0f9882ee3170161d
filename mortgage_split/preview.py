"""Preview mortgage payment splits for a real-estate deal.

When a mortgage payment is entered against a deal, the entry screen shows a
preview of how the payment will be split before anything is saved. The
preview is either computed from the deal's loan terms (auto split) or built
from the interest and escrow amounts the user typed in (manual split). This
module adapts the deal record to ``LoanTerms`` and assembles both kinds of
preview, including the warnings shown next to an auto split.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_DOWN
from typing import List, Optional

from .data_models import LoanTerms, PaymentFrequency, PaymentSplit
from .reconciler import compute_mortgage_split
from .utils import CENT, ZERO, round_cents

logger = logging.getLogger("mortgage_split.preview")

# allocations may drift from the total by this much before we warn
SPLIT_TOLERANCE = Decimal("0.02")

WARNING_CLOSE_DATE_FALLBACK = "Using close date as fallback."
WARNING_SPLIT_MISMATCH = "Computed split differs from total."
WARNING_ESCROW_INFERRED = "Escrow inferred from payment difference."


class SplitValidationError(ValueError):
    """Raised when user-entered split amounts cannot make up the payment."""


@dataclass
class DealRecord:
    """The loan fields of a real-estate deal row.

    Every field is optional because deals are created before their
    financing is known; ``can_auto_split`` tells whether enough is filled
    in to compute a split.
    """

    nickname: str = ""
    original_loan_amount: Optional[Decimal] = None
    interest_rate: Optional[Decimal] = None  # annual, in percent
    loan_term_months: Optional[int] = None
    close_date: Optional[date] = None
    first_payment_date: Optional[date] = None
    payment_frequency: Optional[str] = None
    rental_monthly_taxes: Optional[Decimal] = None
    rental_monthly_insurance: Optional[Decimal] = None


@dataclass
class SplitPreview:
    """What the user confirms before a mortgage payment is recorded."""

    deal_nickname: str
    total: Decimal
    principal: Decimal
    interest: Decimal
    escrow_taxes: Decimal
    escrow_insurance: Decimal
    is_auto_calculated: bool
    warnings: List[str] = field(default_factory=list)
    payment_number: Optional[int] = None
    escrow_inferred: bool = False
    frequency: Optional[str] = None  # only known for auto splits

    @property
    def escrow(self) -> Decimal:
        return self.escrow_taxes + self.escrow_insurance

    def as_dict(self) -> dict:
        return {
            "deal_nickname": self.deal_nickname,
            "total": float(self.total),
            "principal": float(self.principal),
            "interest": float(self.interest),
            "escrow": float(self.escrow),
            "escrow_taxes": float(self.escrow_taxes),
            "escrow_insurance": float(self.escrow_insurance),
            "is_auto_calculated": self.is_auto_calculated,
            "warnings": list(self.warnings),
            "payment_number": self.payment_number,
            "escrow_inferred": self.escrow_inferred,
            "frequency": self.frequency,
        }


def can_auto_split(deal: DealRecord) -> bool:
    """Whether ``deal`` carries enough loan data for an automatic split."""
    return bool(
        deal.original_loan_amount is not None
        and deal.original_loan_amount > 0
        and deal.interest_rate is not None
        and deal.interest_rate >= 0
        and deal.loan_term_months
        and deal.loan_term_months > 0
        and (deal.first_payment_date or deal.close_date)
    )


def loan_terms_from_deal(deal: DealRecord) -> LoanTerms:
    """Build ``LoanTerms`` from a deal record.

    Raises
    ------
    ValueError
        If the deal is missing loan data (see ``can_auto_split``) or has an
        unknown payment frequency.
    """
    if not can_auto_split(deal):
        raise ValueError(f"Deal '{deal.nickname}' does not have complete loan terms")
    return LoanTerms(
        original_principal=Decimal(deal.original_loan_amount),
        annual_rate_percent=Decimal(deal.interest_rate),
        term_months=int(deal.loan_term_months),
        origination_date=deal.close_date or deal.first_payment_date,
        first_payment_date=deal.first_payment_date,
        payment_frequency=PaymentFrequency.parse(deal.payment_frequency),
    )


def _preview_from_split(
    deal: DealRecord, total: Decimal, split: PaymentSplit, warnings: List[str]
) -> SplitPreview:
    return SplitPreview(
        deal_nickname=deal.nickname,
        total=round_cents(total),
        principal=split.principal,
        interest=split.interest,
        escrow_taxes=split.escrow_taxes,
        escrow_insurance=split.escrow_insurance,
        is_auto_calculated=True,
        warnings=warnings,
        payment_number=split.payment_number,
        escrow_inferred=split.escrow_inferred,
        frequency=split.frequency.value,
    )


def preview_auto_split(
    deal: DealRecord,
    payment_date: date,
    total: Decimal,
    tolerance: Decimal = SPLIT_TOLERANCE,
) -> SplitPreview:
    """Compute the split of ``total`` from the deal's loan terms.

    Warnings are attached when the close date stands in for a missing first
    payment date, when the allocated components miss the total by more than
    ``tolerance`` and when escrow had to be inferred.
    """
    terms = loan_terms_from_deal(deal)
    warnings: List[str] = []
    if deal.first_payment_date is None:
        warnings.append(WARNING_CLOSE_DATE_FALLBACK)

    split = compute_mortgage_split(
        terms,
        deal.rental_monthly_taxes,
        deal.rental_monthly_insurance,
        payment_date,
        Decimal(total),
    )
    if abs(split.allocated_total - Decimal(total)) > tolerance:
        warnings.append(WARNING_SPLIT_MISMATCH)
    if split.escrow_inferred:
        warnings.append(WARNING_ESCROW_INFERRED)
    if warnings:
        logger.info("Split preview for '%s' has warnings: %s", deal.nickname, "; ".join(warnings))
    return _preview_from_split(deal, Decimal(total), split, warnings)


def preview_manual_split(
    total: Decimal,
    interest: Decimal,
    escrow: Decimal,
    deal_nickname: str = "Unknown",
) -> SplitPreview:
    """Build a preview from user-entered interest and escrow amounts.

    Principal is whatever is left of ``total``. The escrow amount is shared
    evenly between taxes and insurance, with an odd cent going to insurance.

    Raises
    ------
    SplitValidationError
        If ``total`` is not positive or interest plus escrow exceed it.
    """
    total = Decimal(total)
    interest = Decimal(interest or 0)
    escrow = Decimal(escrow or 0)
    if total <= 0:
        raise SplitValidationError("Total mortgage payment amount is required.")
    if interest < 0 or escrow < 0:
        raise SplitValidationError("Interest and escrow cannot be negative.")
    if interest + escrow > total:
        raise SplitValidationError(
            "Interest + Escrow cannot be greater than the total mortgage payment."
        )
    escrow = round_cents(escrow)
    escrow_taxes = (escrow / 2).quantize(CENT, rounding=ROUND_DOWN)
    return SplitPreview(
        deal_nickname=deal_nickname,
        total=round_cents(total),
        principal=round_cents(max(total - interest - escrow, ZERO)),
        interest=round_cents(interest),
        escrow_taxes=escrow_taxes,
        escrow_insurance=escrow - escrow_taxes,
        is_auto_calculated=False,
    )
