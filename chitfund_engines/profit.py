"""
Module: chitfund_engines.profit
Responsibility:
    Profit and cash-flow separation.

    Profit is commission actually realized through collected payments.
    Cash is the literal ledger of money in and out.  Unpaid dues are
    neither.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes ``commission``, ``dues`` and ``ledger``.

Invariants enforced:
    - Only auction months carry commission.  Each auction month realizes
      commission * collected / expected_collection, so a month collected at
      50% realizes exactly 50% of its commission.
    - Company-wide cash trusts the cash-movement log for winner payouts.
    - Per-scheme cash takes payouts from the auction formula by default
      (PayoutSource.FORMULA) or from recorded movements
      (PayoutSource.LEDGER).
    - Total outstanding counts only participants who are behind; those
      ahead are not netted against them.

Failure modes:
    - SchemeNotFoundError for an unknown scheme id.
    - InvalidMonthError from ``monthly_due`` for a bad auction month.
"""

from __future__ import annotations

from decimal import Decimal

from chitfund_engines.commission import commission_amount
from chitfund_engines.dues import expected_collection, month_collected, winner_payout
from chitfund_engines.ledger import participant_outstanding
from chitfund_engines.tracer import traced_engine
from chitfund_kernel.domain.entities import AuctionMonth, CashMovementType
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import (
    DEFAULT_ROUNDING,
    ZERO,
    PayoutSource,
    RoundingPolicy,
    sum_amounts,
)
from chitfund_kernel.logging_config import get_logger

logger = get_logger("engines.profit")


@traced_engine("profit", "1.0", fingerprint_fields=("scheme_id",))
def chit_profit(
    scheme_id: str,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Commission realized so far across the scheme's auction months.

    Postconditions:
        - Quantized to ``rounding`` minor units once, after summing.
    Raises:
        SchemeNotFoundError: If the scheme is absent.
    """
    scheme = snapshot.require_scheme(scheme_id)
    commission = commission_amount(scheme)

    realized = ZERO
    auction_month_count = 0
    for month in snapshot.months_for_scheme(scheme_id):
        if not isinstance(month, AuctionMonth):
            continue
        auction_month_count += 1
        expected = expected_collection(scheme, month, rounding)
        if expected > ZERO:
            collected = month_collected(scheme_id, month.month_number, snapshot)
            realized += commission * collected / expected

    profit = rounding.quantize(realized)
    logger.debug("chit_profit_calculated", extra={
        "scheme_id": scheme_id,
        "auction_month_count": auction_month_count,
        "commission_per_month": str(commission),
        "profit": str(profit),
    })
    return profit


def _movement_total(movements, movement_type: CashMovementType) -> Decimal:
    return sum_amounts(m.amount for m in movements if m.type is movement_type)


@traced_engine("profit", "1.0")
def company_cash_balance(snapshot: ChitFundSnapshot) -> Decimal:
    """
    Operator's cash across all schemes:
    payments + injections - withdrawals - recorded winner payouts.
    """
    payments = sum_amounts(p.amount for p in snapshot.payments)
    injected = _movement_total(snapshot.cash_movements, CashMovementType.OUTSIDE_CASH_INJECTED)
    withdrawn = _movement_total(snapshot.cash_movements, CashMovementType.CASH_WITHDRAWN)
    paid_out = _movement_total(snapshot.cash_movements, CashMovementType.WINNER_PAYOUT)

    balance = payments + injected - withdrawn - paid_out
    logger.debug("company_cash_balance_calculated", extra={
        "payments_received": str(payments),
        "cash_injected": str(injected),
        "cash_withdrawn": str(withdrawn),
        "winner_payouts": str(paid_out),
        "balance": str(balance),
    })
    return balance


@traced_engine("profit", "1.0", fingerprint_fields=("scheme_id", "payout_source"))
def chit_cash_balance(
    scheme_id: str,
    snapshot: ChitFundSnapshot,
    payout_source: PayoutSource = PayoutSource.FORMULA,
) -> Decimal:
    """
    Cash position of one scheme:
    payments + injections - withdrawals - winner payouts.

    With PayoutSource.FORMULA (default) payouts are
    ``winner_payout()`` over the scheme's auction months and recorded
    ``winner_payout`` movements are ignored.  With PayoutSource.LEDGER the
    recorded movements are used, matching ``company_cash_balance``.

    Raises:
        SchemeNotFoundError: If the scheme is absent.
    """
    scheme = snapshot.require_scheme(scheme_id)
    movements = snapshot.cash_movements_for_scheme(scheme_id)

    payments = sum_amounts(p.amount for p in snapshot.payments_for_scheme(scheme_id))
    injected = _movement_total(movements, CashMovementType.OUTSIDE_CASH_INJECTED)
    withdrawn = _movement_total(movements, CashMovementType.CASH_WITHDRAWN)

    if payout_source is PayoutSource.LEDGER:
        paid_out = _movement_total(movements, CashMovementType.WINNER_PAYOUT)
    else:
        paid_out = sum_amounts(
            winner_payout(scheme, m) for m in snapshot.months_for_scheme(scheme_id)
        )
        recorded = _movement_total(movements, CashMovementType.WINNER_PAYOUT)
        if recorded and recorded != paid_out:
            logger.warning("winner_payout_ledger_mismatch", extra={
                "scheme_id": scheme_id,
                "formula_payouts": str(paid_out),
                "recorded_payouts": str(recorded),
            })

    balance = payments + injected - withdrawn - paid_out
    logger.debug("chit_cash_balance_calculated", extra={
        "scheme_id": scheme_id,
        "payout_source": payout_source.value,
        "payments_received": str(payments),
        "cash_injected": str(injected),
        "cash_withdrawn": str(withdrawn),
        "winner_payouts": str(paid_out),
        "balance": str(balance),
    })
    return balance


@traced_engine("profit", "1.0", fingerprint_fields=("scheme_id",))
def total_outstanding(
    scheme_id: str,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Money owed to the scheme: sum of positive participant outstanding.

    Raises:
        SchemeNotFoundError: If the scheme is absent.
    """
    snapshot.require_scheme(scheme_id)
    total = ZERO
    behind = 0
    for participant in snapshot.participants_for_scheme(scheme_id):
        outstanding = participant_outstanding(participant.id, snapshot, rounding=rounding)
        if outstanding > ZERO:
            total += outstanding
            behind += 1

    logger.debug("total_outstanding_calculated", extra={
        "scheme_id": scheme_id,
        "participants_behind": behind,
        "total_outstanding": str(total),
    })
    return total
