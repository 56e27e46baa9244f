"""
Module: chitfund_engines.dues
Responsibility:
    Per-month dues: the amount each participant owes for one month, the
    winner's payout, a participant's total expected contribution and the
    month-level shortfall.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    ``monthly_due`` is the foundational formula; every other monetary
    calculation in this package composes it.

Invariants enforced:
    - Auction month:
          collection_base = scheme_value + commission - auction_amount
          monthly_due     = collection_base / participants_count
    - Company month:
          monthly_due     = scheme_value / duration_months
    - The per-participant due is quantized to currency minor units
      through the caller's RoundingPolicy; every figure derived from it
      (expected collection, shortfall, outstanding) uses the rounded due.
    - Winner payout is exact (scheme_value - auction_amount).

Failure modes:
    - InvalidMonthError when an auction month has no positive
      auction_amount.
    - SchemeNotFoundError / MonthNotFoundError / ParticipantNotFoundError
      when a referenced id is missing from the snapshot.

Usage:
    from chitfund_engines.dues import monthly_due, month_shortfall

    monthly_due(scheme, month)                  # Decimal("18250.00")
    month_shortfall("chit-1", 1, snapshot)      # Decimal("26500.00")
"""

from __future__ import annotations

from decimal import Decimal

from chitfund_engines.commission import commission_amount
from chitfund_engines.tracer import traced_engine
from chitfund_kernel.domain.entities import AuctionMonth, ChitMonth, Scheme
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import (
    DEFAULT_ROUNDING,
    ZERO,
    RoundingPolicy,
    sum_amounts,
)
from chitfund_kernel.exceptions import InvalidMonthError
from chitfund_kernel.logging_config import get_logger

logger = get_logger("engines.dues")


def monthly_due(
    scheme: Scheme,
    month: ChitMonth,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Amount owed by each participant for one month.

    Preconditions:
        - ``month`` belongs to ``scheme``.
    Postconditions:
        - Result is quantized to ``rounding`` minor units.
    Raises:
        InvalidMonthError: If an auction month has no positive auction amount.

    Example:
        scheme_value=500000, commission 3%, 20 participants, bid 150000:
        (500000 + 15000 - 150000) / 20 = 18250
    """
    if isinstance(month, AuctionMonth):
        auction_amount = month.auction_amount
        if auction_amount is None or auction_amount <= ZERO:
            logger.warning("auction_month_without_amount", extra={
                "scheme_id": scheme.id,
                "month_number": month.month_number,
            })
            raise InvalidMonthError(scheme.id, month.month_number, auction_amount)

        collection_base = scheme.scheme_value + commission_amount(scheme) - auction_amount
        raw_due = collection_base / scheme.participants_count
    else:
        raw_due = scheme.scheme_value / scheme.duration_months

    due = rounding.quantize(raw_due)
    logger.debug("monthly_due_calculated", extra={
        "scheme_id": scheme.id,
        "month_number": month.month_number,
        "month_type": month.type.value,
        "raw_due": str(raw_due),
        "monthly_due": str(due),
    })
    return due


def winner_payout(scheme: Scheme, month: ChitMonth) -> Decimal:
    """
    Amount handed to the auction winner: scheme value less the winning bid.

    Company months, and auction months with no bid recorded, have no
    payout obligation and return zero.
    """
    if not isinstance(month, AuctionMonth) or not month.auction_amount:
        return ZERO
    return scheme.scheme_value - month.auction_amount


def expected_collection(
    scheme: Scheme,
    month: ChitMonth,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """What the scheme should collect for the month: due x participants."""
    return monthly_due(scheme, month, rounding) * scheme.participants_count


def month_collected(scheme_id: str, month_number: int, snapshot: ChitFundSnapshot) -> Decimal:
    """Sum of every payment tagged with the scheme and month."""
    return sum_amounts(
        p.amount for p in snapshot.payments_for_month(scheme_id, month_number)
    )


@traced_engine("dues", "1.0", fingerprint_fields=("scheme_id",))
def total_expected_contribution(
    scheme_id: str,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Total one participant is expected to contribute over the recorded
    months of a scheme (sum of ``monthly_due`` over every month).

    Raises:
        SchemeNotFoundError: If the scheme is absent.
        InvalidMonthError: If any auction month lacks its amount.
    """
    scheme = snapshot.require_scheme(scheme_id)
    months = snapshot.months_for_scheme(scheme_id)
    total = sum_amounts(monthly_due(scheme, m, rounding) for m in months)

    logger.debug("total_expected_contribution_calculated", extra={
        "scheme_id": scheme_id,
        "month_count": len(months),
        "total": str(total),
    })
    return total


@traced_engine("dues", "1.0", fingerprint_fields=("scheme_id", "month_number"))
def month_shortfall(
    scheme_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Expected collection for the month minus what was actually collected.

    Positive = under-collected, negative = over-collected, zero = exact.

    Raises:
        SchemeNotFoundError: If the scheme is absent.
        MonthNotFoundError: If the month is absent.
    """
    scheme = snapshot.require_scheme(scheme_id)
    month = snapshot.require_month(scheme_id, month_number)

    expected = expected_collection(scheme, month, rounding)
    collected = month_collected(scheme_id, month_number, snapshot)
    shortfall = expected - collected

    logger.debug("month_shortfall_calculated", extra={
        "scheme_id": scheme_id,
        "month_number": month_number,
        "expected_collection": str(expected),
        "actual_collection": str(collected),
        "shortfall": str(shortfall),
    })
    return shortfall


@traced_engine("dues", "1.0", fingerprint_fields=("participant_id", "month_number"))
def participant_monthly_due(
    participant_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Due for one participant in one month (participant -> scheme -> month).

    Raises:
        ParticipantNotFoundError, SchemeNotFoundError, MonthNotFoundError:
            naming whichever id is missing.
    """
    participant = snapshot.require_participant(participant_id)
    scheme = snapshot.require_scheme(participant.chit_id)
    month = snapshot.require_month(participant.chit_id, month_number)
    return monthly_due(scheme, month, rounding)
