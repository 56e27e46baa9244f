"""
Entity builders shared by the test suite.

Amounts are given as strings or ints and coerced to Decimal by the
entities themselves.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from chitfund_kernel.domain.entities import (
    AuctionMonth,
    CashMovement,
    CashMovementType,
    CompanyMonth,
    Participant,
    ParticipantStatus,
    Payment,
    Scheme,
)
from chitfund_kernel.domain.snapshot import ChitFundSnapshot

CHIT_ID = "chit-1"
PAY_DATE = date(2024, 1, 10)


def make_scheme(
    scheme_id: str = CHIT_ID,
    scheme_value="500000",
    participants_count: int = 20,
    duration_months: int = 20,
    commission_percent="0.03",
    name: str | None = "Gold 5L",
) -> Scheme:
    return Scheme(
        id=scheme_id,
        scheme_value=Decimal(str(scheme_value)),
        participants_count=participants_count,
        duration_months=duration_months,
        commission_percent=Decimal(str(commission_percent)),
        name=name,
        start_date=date(2024, 1, 1),
    )


def make_participants(
    scheme_id: str = CHIT_ID,
    count: int = 20,
    prefix: str = "p",
) -> tuple[Participant, ...]:
    return tuple(
        Participant(
            id=f"{prefix}{i:02d}",
            chit_id=scheme_id,
            name=f"Member {i:02d}",
        )
        for i in range(1, count + 1)
    )


def auction_month(
    month_number: int,
    auction_amount="150000",
    winner: str | None = "p01",
    scheme_id: str = CHIT_ID,
) -> AuctionMonth:
    return AuctionMonth(
        id=f"{scheme_id}-m{month_number}",
        chit_id=scheme_id,
        month_number=month_number,
        auction_amount=None if auction_amount is None else Decimal(str(auction_amount)),
        winner_participant_id=winner,
    )


def company_month(month_number: int, scheme_id: str = CHIT_ID) -> CompanyMonth:
    return CompanyMonth(
        id=f"{scheme_id}-m{month_number}",
        chit_id=scheme_id,
        month_number=month_number,
    )


_payment_seq = 0


def pay(
    participant_id: str,
    month_number: int,
    amount,
    scheme_id: str = CHIT_ID,
    payment_id: str | None = None,
) -> Payment:
    global _payment_seq
    _payment_seq += 1
    return Payment(
        id=payment_id or f"pay-{_payment_seq}",
        participant_id=participant_id,
        chit_id=scheme_id,
        month_number=month_number,
        amount=Decimal(str(amount)),
        date=PAY_DATE,
    )


def movement(
    movement_type: CashMovementType,
    amount,
    scheme_id: str = CHIT_ID,
    month_number: int = 1,
    movement_id: str | None = None,
) -> CashMovement:
    return CashMovement(
        id=movement_id or f"mv-{movement_type.value}-{month_number}-{amount}",
        chit_id=scheme_id,
        month_number=month_number,
        type=movement_type,
        amount=Decimal(str(amount)),
        reason="Recorded by the branch office",
        date=PAY_DATE,
    )


def worked_example_snapshot() -> ChitFundSnapshot:
    """
    Month 1 auction of a 5L / 20-member scheme at a 150000 bid
    (due 18250): p01-p17 pay in full, p18 pays 10000, p19 pays in full,
    p20 pays nothing.
    """
    participants = make_participants()
    winner = participants[0]
    participants = (
        Participant(
            id=winner.id,
            chit_id=winner.chit_id,
            name=winner.name,
            status=ParticipantStatus.WON,
        ),
    ) + participants[1:]

    payments = [pay(f"p{i:02d}", 1, "18250") for i in range(1, 18)]
    payments.append(pay("p18", 1, "10000"))
    payments.append(pay("p19", 1, "18250"))

    return ChitFundSnapshot(
        chits=(make_scheme(),),
        chit_months=(auction_month(1),),
        participants=participants,
        payments=tuple(payments),
    )
