"""
Module: chitfund_engines
Responsibility:
    Package entrypoint that re-exports all public symbols from the pure
    calculation engine sub-modules.  This is the canonical import surface
    for the API, import and presentation layers.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import chitfund_kernel (and sibling engine modules).
    MUST NOT import chitfund_config.

Invariants enforced:
    - Purity: engines never read the clock, files or environment; the
      snapshot is always an explicit parameter and is never retained.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Failure modes:
    - Typed ``chitfund_kernel.exceptions`` errors propagated from the
      individual calculators (NotFound, InvalidMonth, AdvancePayment).

Audit relevance:
    Top-level calculator invocations are traced via ``@traced_engine``
    (see ``chitfund_engines.tracer``), emitting CHITFUND_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.

Usage:
    from chitfund_engines import monthly_due, participant_outstanding
    from chitfund_engines import chit_profit, chit_cash_balance
"""

from chitfund_kernel.logging_config import get_logger

logger = get_logger("engines")

from chitfund_engines.commission import commission_amount
from chitfund_engines.dues import (
    expected_collection,
    month_collected,
    month_shortfall,
    monthly_due,
    participant_monthly_due,
    total_expected_contribution,
    winner_payout,
)
from chitfund_engines.ledger import (
    PaymentStatus,
    classify_payment,
    ensure_payment_allowed,
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
from chitfund_engines.recoveries import (
    due_balance,
    due_recovered_amount,
    total_pending_dues,
)
from chitfund_engines.summary import (
    CollectionPoint,
    MonthCollectionSummary,
    ParticipantMonthRow,
    ParticipantRosterRow,
    PaymentPreview,
    PortfolioSummary,
    SchemeFinancialSummary,
    month_collection_summary,
    participant_roster,
    payment_preview,
    portfolio_summary,
    scheme_financial_summary,
)

__all__ = [
    # Commission
    "commission_amount",
    # Dues
    "monthly_due",
    "winner_payout",
    "expected_collection",
    "month_collected",
    "total_expected_contribution",
    "month_shortfall",
    "participant_monthly_due",
    # Participant ledger
    "PaymentStatus",
    "classify_payment",
    "participant_payments",
    "participant_total_paid",
    "participant_month_paid",
    "participant_outstanding",
    "participant_month_status",
    "has_paid_all_previous_months",
    "ensure_payment_allowed",
    # Profit and cash
    "chit_profit",
    "company_cash_balance",
    "chit_cash_balance",
    "total_outstanding",
    # Dues & recoveries
    "due_recovered_amount",
    "due_balance",
    "total_pending_dues",
    # Reports
    "ParticipantMonthRow",
    "ParticipantRosterRow",
    "MonthCollectionSummary",
    "PaymentPreview",
    "CollectionPoint",
    "SchemeFinancialSummary",
    "PortfolioSummary",
    "month_collection_summary",
    "payment_preview",
    "participant_roster",
    "scheme_financial_summary",
    "portfolio_summary",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 6,
    "modules": ["commission", "dues", "ledger", "profit", "recoveries", "summary"],
})
