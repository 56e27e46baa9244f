"""
Entities -- immutable records of the chit fund store.

Responsibility:
    Typed, frozen representations of the six persisted collections:
    schemes (chits), months, participants, payments, company cash
    movements and dues/recoveries.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.
    Built by ``chitfund_kernel.domain.codec`` (or directly by callers) and
    read by every engine. Nothing in the kernel or engines mutates them.

Invariants enforced:
    - Amounts are ``Decimal`` (coerced in ``__post_init__``).
    - Enumerated fields hold enum members, never bare strings.
    - Months are a tagged variant: only ``AuctionMonth`` carries
      auction fields.

Non-goals:
    - Cross-entity checks (references, uniqueness, auction bounds) live in
      ``chitfund_kernel.domain.validation``; a record can be constructed
      in an invalid state so that the calculators can reject it loudly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Union

from chitfund_kernel.domain.values import to_decimal


class SchemeStatus(str, Enum):
    """Lifecycle status of a scheme."""

    ACTIVE = "active"
    COMPLETED = "completed"
    PENDING = "pending"


class MonthType(str, Enum):
    """Whether a month was auctioned or is a company month."""

    AUCTION = "auction"
    COMPANY = "company"


class ParticipantRole(str, Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"
    COMPANY = "company"


class ParticipantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    WON = "won"


class CashMovementType(str, Enum):
    """Kind of operator cash movement."""

    OUTSIDE_CASH_INJECTED = "outside_cash_injected"
    CASH_WITHDRAWN = "cash_withdrawn"
    WINNER_PAYOUT = "winner_payout"


class DuesRecoveryType(str, Enum):
    DUE = "due"
    RECOVERY = "recovery"


class DuesStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    RECOVERED = "recovered"
    WRITTEN_OFF = "written_off"


def _coerce_amount(obj: object, attr: str) -> None:
    value = getattr(obj, attr)
    if value is not None and not isinstance(value, Decimal):
        object.__setattr__(obj, attr, to_decimal(value, attr))


@dataclass(frozen=True, slots=True)
class Scheme:
    """
    A chit scheme: fixed pool value shared by a fixed participant count
    over a fixed number of months.

    ``commission_percent`` is a fraction (0.03 means 3%).
    """

    id: str
    scheme_value: Decimal
    participants_count: int
    duration_months: int
    commission_percent: Decimal
    status: SchemeStatus = SchemeStatus.ACTIVE
    name: str | None = None
    start_date: date | None = None

    def __post_init__(self) -> None:
        _coerce_amount(self, "scheme_value")
        _coerce_amount(self, "commission_percent")

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True, slots=True)
class AuctionMonth:
    """
    A month whose pool was auctioned.

    ``auction_amount`` is the winning discount bid. Both auction fields may
    be ``None`` for an incompletely entered month; the dues calculator
    rejects such a month rather than defaulting it.
    """

    id: str
    chit_id: str
    month_number: int
    auction_amount: Decimal | None = None
    winner_participant_id: str | None = None
    date: date | None = None

    type = MonthType.AUCTION

    def __post_init__(self) -> None:
        _coerce_amount(self, "auction_amount")


@dataclass(frozen=True, slots=True)
class CompanyMonth:
    """A month with no auction; every participant pays an equal share."""

    id: str
    chit_id: str
    month_number: int
    date: date | None = None

    type = MonthType.COMPANY


ChitMonth = Union[AuctionMonth, CompanyMonth]


@dataclass(frozen=True, slots=True)
class Participant:
    id: str
    chit_id: str
    name: str
    role: ParticipantRole = ParticipantRole.EXTERNAL
    status: ParticipantStatus = ParticipantStatus.ACTIVE
    joined_month_number: int | None = None


@dataclass(frozen=True, slots=True)
class Payment:
    """
    Money received from a participant toward one month's obligation.

    Several payments may target the same participant and month; they
    accumulate.
    """

    id: str
    participant_id: str
    chit_id: str
    month_number: int
    amount: Decimal
    date: date
    note: str | None = None

    def __post_init__(self) -> None:
        _coerce_amount(self, "amount")


@dataclass(frozen=True, slots=True)
class CashMovement:
    """A recorded injection, withdrawal or winner payout."""

    id: str
    chit_id: str
    month_number: int
    type: CashMovementType
    amount: Decimal
    reason: str
    date: date

    def __post_init__(self) -> None:
        _coerce_amount(self, "amount")


@dataclass(frozen=True, slots=True)
class DuesRecovery:
    """
    External money owed to the operator ("due") or recovered against a
    due ("recovery", linked through ``due_id``).
    """

    id: str
    type: DuesRecoveryType
    amount: Decimal
    due_date: date
    reason: str
    debtor: str
    status: DuesStatus
    created_date: date
    due_id: str | None = None
    recovered_amount: Decimal | None = None
    recovery_date: date | None = None
    recovery_method: str | None = None
    note: str | None = None

    def __post_init__(self) -> None:
        _coerce_amount(self, "amount")
        _coerce_amount(self, "recovered_amount")
