"""
Module: chitfund_engines.summary
Responsibility:
    Report records composed from the calculators: the month collection
    sheet, the members roster, the payment-entry preview, per-scheme
    financial summaries and the portfolio roll-up.  Presentation renders
    these verbatim and does no arithmetic of its own.

Architecture position:
    Engines -- pure composition over ``dues``, ``ledger``, ``profit``.

Invariants enforced:
    - Every figure is produced by the same calculator the rest of the
      system uses; nothing is recomputed with a different formula.
    - Rows and points follow snapshot order (participants) or month order
      (collection points).
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal

from chitfund_engines.commission import commission_amount
from chitfund_engines.dues import (
    month_collected,
    month_shortfall,
    monthly_due,
    total_expected_contribution,
    winner_payout,
)
from chitfund_engines.ledger import (
    PaymentStatus,
    classify_payment,
    has_paid_all_previous_months,
    participant_month_paid,
    participant_month_status,
    participant_outstanding,
    participant_payments,
    participant_total_paid,
)
from chitfund_engines.profit import (
    chit_cash_balance,
    chit_profit,
    company_cash_balance,
    total_outstanding,
)
from chitfund_engines.tracer import traced_engine
from chitfund_kernel.domain.entities import AuctionMonth, Participant
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import (
    DEFAULT_ROUNDING,
    ZERO,
    PayoutSource,
    RoundingPolicy,
    sum_amounts,
)
from chitfund_kernel.logging_config import LogContext, get_logger

logger = get_logger("engines.summary")


@dataclass(frozen=True)
class ParticipantMonthRow:
    """One participant's standing for one month."""

    participant: Participant
    paid: Decimal
    expected: Decimal
    status: PaymentStatus

    @property
    def outstanding(self) -> Decimal:
        """Expected minus paid for this month only (negative if overpaid)."""
        return self.expected - self.paid


@dataclass(frozen=True)
class MonthCollectionSummary:
    """
    Collection sheet for one month of one scheme.

    Guarantees:
        - ``shortfall == expected_collection - actual_collection``.
        - ``paid_count + partial_count + unpaid_count == len(rows)``.
    """

    scheme_id: str
    month_number: int
    monthly_due: Decimal
    expected_collection: Decimal
    actual_collection: Decimal
    shortfall: Decimal
    winner_payout: Decimal
    winner_participant_id: str | None
    rows: tuple[ParticipantMonthRow, ...]

    @property
    def paid_count(self) -> int:
        return sum(1 for r in self.rows if r.status.is_settled)

    @property
    def partial_count(self) -> int:
        return sum(1 for r in self.rows if r.status is PaymentStatus.PARTIAL)

    @property
    def unpaid_count(self) -> int:
        return sum(1 for r in self.rows if r.status is PaymentStatus.UNPAID)


@dataclass(frozen=True)
class ParticipantRosterRow:
    """A participant's running totals across every recorded month."""

    participant: Participant
    total_expected: Decimal
    total_paid: Decimal
    outstanding: Decimal
    payment_count: int


@dataclass(frozen=True)
class PaymentPreview:
    """Figures shown while a payment is being entered."""

    participant_id: str
    month_number: int
    expected_due: Decimal
    outstanding: Decimal
    month_status: PaymentStatus
    advance_allowed: bool


@dataclass(frozen=True)
class CollectionPoint:
    """Collected amount and (non-negative) shortfall for one month."""

    month_number: int
    collected: Decimal
    shortfall: Decimal


@dataclass(frozen=True)
class SchemeFinancialSummary:
    """
    Profit, cash and outstanding for one scheme.

    ``profit`` and ``cash_balance`` differ: profit is
    realized commission, cash is money actually held.
    """

    scheme_id: str
    display_name: str
    commission: Decimal
    profit: Decimal
    cash_balance: Decimal
    outstanding: Decimal
    collection_trend: tuple[CollectionPoint, ...]


@dataclass(frozen=True)
class PortfolioSummary:
    """Roll-up across every scheme in the snapshot."""

    company_cash_balance: Decimal
    schemes: tuple[SchemeFinancialSummary, ...]

    @property
    def total_profit(self) -> Decimal:
        return sum_amounts(s.profit for s in self.schemes)

    @property
    def total_outstanding(self) -> Decimal:
        return sum_amounts(s.outstanding for s in self.schemes)

    @property
    def total_commission(self) -> Decimal:
        return sum_amounts(s.commission for s in self.schemes)


@traced_engine("summary", "1.0", fingerprint_fields=("scheme_id", "month_number"))
def month_collection_summary(
    scheme_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> MonthCollectionSummary:
    """
    Build the collection sheet for one month.

    Raises:
        SchemeNotFoundError, MonthNotFoundError, InvalidMonthError
    """
    scheme = snapshot.require_scheme(scheme_id)
    month = snapshot.require_month(scheme_id, month_number)

    due = monthly_due(scheme, month, rounding)
    rows: list[ParticipantMonthRow] = []
    for participant in snapshot.participants_for_scheme(scheme_id):
        paid = participant_month_paid(participant.id, month_number, snapshot)
        rows.append(ParticipantMonthRow(
            participant=participant,
            paid=paid,
            expected=due,
            status=classify_payment(paid, due),
        ))

    return MonthCollectionSummary(
        scheme_id=scheme_id,
        month_number=month_number,
        monthly_due=due,
        expected_collection=due * scheme.participants_count,
        actual_collection=month_collected(scheme_id, month_number, snapshot),
        shortfall=month_shortfall(scheme_id, month_number, snapshot, rounding),
        winner_payout=winner_payout(scheme, month),
        winner_participant_id=(
            month.winner_participant_id if isinstance(month, AuctionMonth) else None
        ),
        rows=tuple(rows),
    )


@traced_engine("summary", "1.0", fingerprint_fields=("scheme_id",))
def participant_roster(
    scheme_id: str,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> tuple[ParticipantRosterRow, ...]:
    """
    Members list for one scheme: expected, paid and outstanding to date
    plus the number of payments, one row per participant in snapshot order.

    Raises:
        SchemeNotFoundError: If the scheme is absent.
        InvalidMonthError: If any auction month lacks its amount.
    """
    snapshot.require_scheme(scheme_id)
    expected = total_expected_contribution(scheme_id, snapshot, rounding)

    rows = []
    for participant in snapshot.participants_for_scheme(scheme_id):
        rows.append(ParticipantRosterRow(
            participant=participant,
            total_expected=expected,
            total_paid=participant_total_paid(participant.id, snapshot.payments),
            outstanding=participant_outstanding(participant.id, snapshot, rounding=rounding),
            payment_count=len(participant_payments(participant.id, snapshot.payments)),
        ))
    return tuple(rows)


@traced_engine("summary", "1.0", fingerprint_fields=("participant_id", "month_number"))
def payment_preview(
    participant_id: str,
    month_number: int,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
) -> PaymentPreview:
    """
    What the payment form shows for a participant and target month:
    the due, outstanding up to that month, current status, and whether
    every earlier month is settled.

    Raises:
        ParticipantNotFoundError, SchemeNotFoundError, MonthNotFoundError
    """
    status = participant_month_status(participant_id, month_number, snapshot, rounding)
    participant = snapshot.require_participant(participant_id)
    scheme = snapshot.require_scheme(participant.chit_id)
    month = snapshot.require_month(participant.chit_id, month_number)

    return PaymentPreview(
        participant_id=participant_id,
        month_number=month_number,
        expected_due=monthly_due(scheme, month, rounding),
        outstanding=participant_outstanding(
            participant_id, snapshot, up_to_month=month_number, rounding=rounding
        ),
        month_status=status,
        advance_allowed=has_paid_all_previous_months(
            participant_id, month_number, snapshot, rounding
        ),
    )


@traced_engine("summary", "1.0", fingerprint_fields=("scheme_id", "payout_source"))
def scheme_financial_summary(
    scheme_id: str,
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
    payout_source: PayoutSource = PayoutSource.FORMULA,
) -> SchemeFinancialSummary:
    """
    Profit vs cash vs outstanding for one scheme, plus its month-by-month
    collection trend.

    Raises:
        SchemeNotFoundError, InvalidMonthError
    """
    scheme = snapshot.require_scheme(scheme_id)

    trend = tuple(
        CollectionPoint(
            month_number=month.month_number,
            collected=month_collected(scheme_id, month.month_number, snapshot),
            shortfall=max(
                month_shortfall(scheme_id, month.month_number, snapshot, rounding), ZERO
            ),
        )
        for month in snapshot.months_for_scheme(scheme_id)
    )

    return SchemeFinancialSummary(
        scheme_id=scheme_id,
        display_name=scheme.display_name,
        commission=commission_amount(scheme),
        profit=chit_profit(scheme_id, snapshot, rounding),
        cash_balance=chit_cash_balance(scheme_id, snapshot, payout_source),
        outstanding=total_outstanding(scheme_id, snapshot, rounding),
        collection_trend=trend,
    )


def portfolio_summary(
    snapshot: ChitFundSnapshot,
    rounding: RoundingPolicy = DEFAULT_ROUNDING,
    payout_source: PayoutSource = PayoutSource.FORMULA,
) -> PortfolioSummary:
    """Company cash plus a financial summary for every scheme, in snapshot order."""
    t0 = time.monotonic()
    schemes = []
    for scheme in snapshot.chits:
        with LogContext.bind(scheme_id=scheme.id):
            schemes.append(
                scheme_financial_summary(scheme.id, snapshot, rounding, payout_source)
            )
    summary = PortfolioSummary(
        company_cash_balance=company_cash_balance(snapshot),
        schemes=tuple(schemes),
    )
    logger.info("portfolio_summary_built", extra={
        "scheme_count": len(summary.schemes),
        "company_cash_balance": str(summary.company_cash_balance),
        "total_profit": str(summary.total_profit),
        "total_outstanding": str(summary.total_outstanding),
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return summary
