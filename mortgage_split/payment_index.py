"""Map calendar dates to payment sequence numbers.

A payment index is the zero-based position of a payment in the loan's
schedule. Index 0 is the payment due on the anchor date, which is the first
payment date when the deal has one and the close date otherwise. How dates
map to indices depends on the payment frequency:

* monthly: whole months since the anchor, where a month only counts once
  its day of month has been reached;
* bi-weekly: whole 14-day periods since the anchor;
* semi-monthly: two slots per calendar month, days 1-14 being the first-half
  slot and days 15-31 the second-half slot.

Dates before the anchor resolve to index 0.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date, timedelta

from .data_models import LoanTerms, PaymentFrequency
from .utils import add_months, calendar_months_between

logger = logging.getLogger("mortgage_split.payment_index")

BIWEEKLY_DAYS = 14
SECOND_HALF_START_DAY = 15


def _month_half(dt: date) -> int:
    """0 for the first-half slot of the month, 1 for the second half."""
    return 0 if dt.day < SECOND_HALF_START_DAY else 1


def _monthly_index(anchor: date, payment_date: date) -> int:
    n = calendar_months_between(anchor, payment_date)
    if payment_date.day < anchor.day:
        # this month's payment has not come due yet
        n -= 1
    return n


def _biweekly_index(anchor: date, payment_date: date) -> int:
    return (payment_date - anchor).days // BIWEEKLY_DAYS


def _semimonthly_index(anchor: date, payment_date: date) -> int:
    n = calendar_months_between(anchor, payment_date) * 2
    # +1 when the payment sits in the later half than the anchor, -1 when earlier
    return n + _month_half(payment_date) - _month_half(anchor)


_RESOLVERS = {
    PaymentFrequency.MONTHLY: _monthly_index,
    PaymentFrequency.BIWEEKLY: _biweekly_index,
    PaymentFrequency.SEMIMONTHLY: _semimonthly_index,
}


def resolve_payment_index(terms: LoanTerms, payment_date: date) -> int:
    """Return the zero-based payment index for a payment made on ``payment_date``.

    Parameters
    ----------
    terms: LoanTerms
        The loan. Its ``anchor_date`` and ``payment_frequency`` drive the
        calculation.
    payment_date: date
        The day the payment was made or recorded.

    Returns
    -------
    int
        The payment index, never negative. Later dates never produce a
        smaller index.
    """
    frequency = PaymentFrequency.parse(terms.payment_frequency)
    anchor = terms.anchor_date
    raw = _RESOLVERS[frequency](anchor, payment_date)
    index = max(raw, 0)
    logger.debug(
        "Resolved %s payment on %s against anchor %s to index %d (raw %d)",
        frequency.value,
        payment_date.isoformat(),
        anchor.isoformat(),
        index,
        raw,
    )
    return index


def payment_due_date(terms: LoanTerms, payment_index: int) -> date:
    """Return the nominal due date of the payment at ``payment_index``.

    This is used to date the rows of a schedule. Month-end anchors are
    clamped to the last day of shorter months. For semi-monthly loans the
    slot opposite the anchor's half falls 15 days after (or before) the
    anchor's day of month.
    """
    if payment_index < 0:
        raise ValueError(f"Payment index cannot be negative: {payment_index}")
    frequency = PaymentFrequency.parse(terms.payment_frequency)
    anchor = terms.anchor_date
    if frequency is PaymentFrequency.MONTHLY:
        return add_months(anchor, payment_index)
    if frequency is PaymentFrequency.BIWEEKLY:
        return anchor + timedelta(days=BIWEEKLY_DAYS * payment_index)

    anchor_half = _month_half(anchor)
    slot = anchor_half + payment_index
    month_start = add_months(anchor.replace(day=1), slot // 2)
    if slot % 2 == anchor_half:
        day = anchor.day
    elif anchor_half == 0:
        day = anchor.day + SECOND_HALF_START_DAY
    else:
        day = min(max(anchor.day - SECOND_HALF_START_DAY, 1), SECOND_HALF_START_DAY - 1)
    last_day = calendar.monthrange(month_start.year, month_start.month)[1]
    return month_start.replace(day=min(day, last_day))
