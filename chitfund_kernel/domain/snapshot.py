"""ChitFundSnapshot -- frozen, consistent view of the whole store."""

from __future__ import annotations

from dataclasses import dataclass

from chitfund_kernel.domain.entities import (
    CashMovement,
    ChitMonth,
    DuesRecovery,
    Participant,
    Payment,
    Scheme,
)
from chitfund_kernel.exceptions import (
    MonthNotFoundError,
    ParticipantNotFoundError,
    SchemeNotFoundError,
)


@dataclass(frozen=True, slots=True)
class ChitFundSnapshot:
    """
    Immutable snapshot of all entity collections at one point in time.

    Contract:
        Every calculator receives the snapshot as an explicit parameter and
        never retains it past the call. Collections keep insertion order.
    Guarantees:
        - Collections are tuples; lists passed in are copied to tuples.
        - ``require_*`` lookups raise the typed NotFound errors instead of
          returning a default.
    Non-goals:
        - No indexing or caching: lookups are linear scans, matching the
          size of a single operator's book.
    """

    chits: tuple[Scheme, ...] = ()
    chit_months: tuple[ChitMonth, ...] = ()
    participants: tuple[Participant, ...] = ()
    payments: tuple[Payment, ...] = ()
    cash_movements: tuple[CashMovement, ...] = ()
    dues_recoveries: tuple[DuesRecovery, ...] = ()

    def __post_init__(self) -> None:
        for name in (
            "chits",
            "chit_months",
            "participants",
            "payments",
            "cash_movements",
            "dues_recoveries",
        ):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    # -- scheme ---------------------------------------------------------

    def find_scheme(self, scheme_id: str) -> Scheme | None:
        for scheme in self.chits:
            if scheme.id == scheme_id:
                return scheme
        return None

    def require_scheme(self, scheme_id: str) -> Scheme:
        """Return the scheme or raise SchemeNotFoundError."""
        scheme = self.find_scheme(scheme_id)
        if scheme is None:
            raise SchemeNotFoundError(scheme_id)
        return scheme

    # -- months ---------------------------------------------------------

    def months_for_scheme(self, scheme_id: str) -> tuple[ChitMonth, ...]:
        """Months of a scheme, ascending by month number."""
        months = [m for m in self.chit_months if m.chit_id == scheme_id]
        return tuple(sorted(months, key=lambda m: m.month_number))

    def find_month(self, scheme_id: str, month_number: int) -> ChitMonth | None:
        for month in self.chit_months:
            if month.chit_id == scheme_id and month.month_number == month_number:
                return month
        return None

    def require_month(self, scheme_id: str, month_number: int) -> ChitMonth:
        """Return the month or raise MonthNotFoundError."""
        month = self.find_month(scheme_id, month_number)
        if month is None:
            raise MonthNotFoundError(scheme_id, month_number)
        return month

    # -- participants ---------------------------------------------------

    def find_participant(self, participant_id: str) -> Participant | None:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def require_participant(self, participant_id: str) -> Participant:
        """Return the participant or raise ParticipantNotFoundError."""
        participant = self.find_participant(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(participant_id)
        return participant

    def participants_for_scheme(self, scheme_id: str) -> tuple[Participant, ...]:
        return tuple(p for p in self.participants if p.chit_id == scheme_id)

    # -- payments and movements -----------------------------------------

    def payments_for_scheme(self, scheme_id: str) -> tuple[Payment, ...]:
        return tuple(p for p in self.payments if p.chit_id == scheme_id)

    def payments_for_month(self, scheme_id: str, month_number: int) -> tuple[Payment, ...]:
        """Payments tagged with the scheme and month, in insertion order."""
        return tuple(
            p for p in self.payments
            if p.chit_id == scheme_id and p.month_number == month_number
        )

    def cash_movements_for_scheme(self, scheme_id: str) -> tuple[CashMovement, ...]:
        return tuple(m for m in self.cash_movements if m.chit_id == scheme_id)
