"""
Module: chitfund_engines.ledger
Responsibility:
    Participant ledger reconciliation: what a participant has paid, what
    they still owe, how each month stands, and whether a payment toward a
    later month may be accepted.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes ``chitfund_engines.dues``.

Invariants enforced:
    - Outstanding = expected dues for months <= ceiling - everything the
      participant has paid (all months, so paying ahead is netted in).
    - Month status compares Decimals exactly: the due is already
      quantized to minor units, so there is no epsilon.
    - Status never regresses as payments for a fixed month accumulate:
      unpaid -> partial -> paid -> overpaid.

Failure modes:
    - ParticipantNotFoundError / SchemeNotFoundError / MonthNotFoundError
      for missing references.
    - AdvancePaymentNotAllowedError from ``ensure_payment_allowed``.

Audit relevance:
    ``has_paid_all_previous_months`` is the advance-payment gate.  The
    engine only evaluates it; the write path must call
    ``ensure_payment_allowed`` before storing a payment.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Iterable

from chitfund_engines.dues import monthly_due, participant_monthly_due
from chitfund_engines.tracer import traced_engine
from chitfund_kernel.domain.entities import Payment
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import (
    DEFAULT_ROUNDING,
    ZERO,
    RoundingPolicy,
    sum_amounts,
)
from chitfund_kernel.exceptions import AdvancePaymentNotAllowedError
from chitfund_kernel.logging_config import get_logger

logger = get_logger("engines.ledger")


class PaymentStatus(str, Enum):
    """How a participant's payments for one month compare to the due."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    OVERPAID = "overpaid"

    @property
    def is_settled(self) -> bool:
        """True for paid and overpaid."""
        return self in (PaymentStatus.PAID, PaymentStatus.OVERPAID)


def participant_payments(participant_id: str, payments: Iterable[Payment]) -> tuple[Payment, ...]:
    """The participant's payments in input order (not sorted)."""
    return tuple(p for p in payments if p.participant_id == participant_id)


def participant_total_paid(participant_id: str, payments: Iterable[Payment]) -> Decimal:
    return sum_amounts(p.amount for p in participant_payments(participant_id, payments))


def participant_month_paid(
    participant_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
) -> Decimal:
    """Sum of the participant's payments tagged with exactly ``month_number``."""
    return sum_amounts(
        p.amount for p in snapshot.payments
        if p.participant_id == participant_id and p.month_number == month_number
    )


def classify_payment(paid: Decimal, due: Decimal) -> PaymentStatus:
    """Map a paid amount against a due onto a PaymentStatus."""
    if paid == ZERO:
        return PaymentStatus.UNPAID
    if paid < due:
        return PaymentStatus.PARTIAL
    if paid == due:
        return PaymentStatus.PAID
    return PaymentStatus.OVERPAID


@traced_engine("ledger", "1.0", fingerprint_fields=("participant_id", "up_to_month"))
def participant_outstanding(
    participant_id: str,
    snapshot: ChitFundSnapshot,
    up_to_month: int | None = None,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Cumulative amount the participant owes.

    Preconditions:
        - ``up_to_month`` (if given) is the ceiling month; otherwise the
          highest recorded month of the scheme is used (0 when none).
    Postconditions:
        - Positive = owes money; negative = paid in advance; zero = settled.
    Raises:
        ParticipantNotFoundError: If the participant is absent.
        SchemeNotFoundError: If the participant's scheme is absent.
    """
    participant = snapshot.require_participant(participant_id)
    scheme = snapshot.require_scheme(participant.chit_id)
    months = snapshot.months_for_scheme(participant.chit_id)

    if up_to_month is not None:
        ceiling = up_to_month
    else:
        ceiling = max((m.month_number for m in months), default=0)

    total_expected = sum_amounts(
        monthly_due(scheme, m, rounding) for m in months if m.month_number <= ceiling
    )
    total_paid = participant_total_paid(participant_id, snapshot.payments)
    outstanding = total_expected - total_paid

    logger.debug("participant_outstanding_calculated", extra={
        "participant_id": participant_id,
        "scheme_id": participant.chit_id,
        "ceiling_month": ceiling,
        "total_expected": str(total_expected),
        "total_paid": str(total_paid),
        "outstanding": str(outstanding),
    })
    return outstanding


@traced_engine("ledger", "1.0", fingerprint_fields=("participant_id", "month_number"))
def participant_month_status(
    participant_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> PaymentStatus:
    """
    Compare what the participant paid toward ``month_number`` with the due.

    Raises:
        ParticipantNotFoundError, SchemeNotFoundError, MonthNotFoundError
    """
    due = participant_monthly_due(participant_id, month_number, snapshot, rounding)
    paid = participant_month_paid(participant_id, month_number, snapshot)
    return classify_payment(paid, due)


def _first_unsettled_month(
    participant_id: str,
    up_to_month_exclusive: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy,
) -> tuple[int, PaymentStatus] | None:
    participant = snapshot.require_participant(participant_id)
    for month in snapshot.months_for_scheme(participant.chit_id):
        if month.month_number >= up_to_month_exclusive:
            break
        status = participant_month_status(
            participant_id, month.month_number, snapshot, rounding
        )
        if not status.is_settled:
            return month.month_number, status
    return None


@traced_engine("ledger", "1.0", fingerprint_fields=("participant_id", "up_to_month_exclusive"))
def has_paid_all_previous_months(
    participant_id: str,
    up_to_month_exclusive: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> bool:
    """
    Advance-payment gate.

    True iff every month of the participant's scheme numbered below
    ``up_to_month_exclusive`` is paid or overpaid.  Vacuously true when
    there are no such months.

    Raises:
        ParticipantNotFoundError: If the participant is absent.
    """
    blocking = _first_unsettled_month(participant_id, up_to_month_exclusive, snapshot, rounding)
    return blocking is None


def ensure_payment_allowed(
    participant_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> None:
    """
    Guard for the payment write path.

    Raises:
        MonthNotFoundError: If the target month is not recorded.
        AdvancePaymentNotAllowedError: If an earlier month is unpaid or
            partial.
    """
    participant = snapshot.require_participant(participant_id)
    snapshot.require_month(participant.chit_id, month_number)

    blocking = _first_unsettled_month(participant_id, month_number, snapshot, rounding)
    if blocking is not None:
        blocking_month, status = blocking
        logger.info("advance_payment_rejected", extra={
            "participant_id": participant_id,
            "month_number": month_number,
            "blocking_month_number": blocking_month,
            "blocking_status": status.value,
        })
        raise AdvancePaymentNotAllowedError(
            participant_id, month_number, blocking_month, status.value
        )
