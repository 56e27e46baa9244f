"""
Pure domain layer.

Entities, the snapshot they live in, the persisted-shape codec and the
entity invariants, with NO dependencies on:
- Storage
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from chitfund_kernel.domain.entities import (
    AuctionMonth,
    CashMovement,
    CashMovementType,
    ChitMonth,
    CompanyMonth,
    DuesRecovery,
    DuesRecoveryType,
    DuesStatus,
    MonthType,
    Participant,
    ParticipantRole,
    ParticipantStatus,
    Payment,
    Scheme,
    SchemeStatus,
)
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import (
    DEFAULT_ROUNDING,
    PayoutSource,
    ZERO,
    RoundingPolicy,
    sum_amounts,
    to_decimal,
)

__all__ = [
    # Entities
    "Scheme",
    "SchemeStatus",
    "AuctionMonth",
    "CompanyMonth",
    "ChitMonth",
    "MonthType",
    "Participant",
    "ParticipantRole",
    "ParticipantStatus",
    "Payment",
    "CashMovement",
    "CashMovementType",
    "DuesRecovery",
    "DuesRecoveryType",
    "DuesStatus",
    # Snapshot
    "ChitFundSnapshot",
    # Values
    "RoundingPolicy",
    "PayoutSource",
    "DEFAULT_ROUNDING",
    "ZERO",
    "sum_amounts",
    "to_decimal",
]
