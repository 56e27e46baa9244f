"""
Snapshot validation -- entity invariants shared by every creation path.

Responsibility:
    Check a ``ChitFundSnapshot`` against the rules that forms, CSV import
    and the API all enforce before data is stored: scheme bounds, month
    uniqueness and auction validity, referential integrity and positive
    amounts.

Architecture position:
    Kernel > Domain -- pure checks, zero I/O. Engines never call this;
    callers validate on write and calculators fail loudly on read.

Invariants enforced:
    - ``validate_snapshot`` never raises for bad data; it reports every
      issue it finds in one pass.
    - Issues are returned in collection order (chits, months,
      participants, payments, cash movements).

Failure modes:
    - ``ensure_valid`` raises SnapshotValidationError carrying all issues.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Iterable

from chitfund_kernel.domain.entities import (
    AuctionMonth,
    ParticipantStatus,
)
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import ZERO
from chitfund_kernel.exceptions import SnapshotValidationError
from chitfund_kernel.logging_config import get_logger

logger = get_logger("domain.validation")


@dataclass(frozen=True)
class SchemeLimits:
    """
    Bounds a scheme must satisfy on creation.

    Defaults mirror the operator's scheme form.
    """

    min_scheme_value: Decimal = Decimal("10000")
    min_participants: int = 5
    max_participants: int = 50
    min_duration_months: int = 6
    max_duration_months: int = 60
    max_commission_percent: Decimal = Decimal("0.10")
    min_participant_name_length: int = 2
    min_cash_reason_length: int = 10

    def __post_init__(self) -> None:
        if self.min_participants > self.max_participants:
            raise ValueError("min_participants cannot exceed max_participants")
        if self.min_duration_months > self.max_duration_months:
            raise ValueError("min_duration_months cannot exceed max_duration_months")
        if self.max_commission_percent < 0:
            raise ValueError("max_commission_percent cannot be negative")


DEFAULT_LIMITS = SchemeLimits()

# Winners move from active to won once their month is recorded.
_WINNER_STATUSES = frozenset({ParticipantStatus.ACTIVE, ParticipantStatus.WON})


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single validation issue.

    Contract:
        Carries a machine-readable code, human-readable message, the field
        path (``collection[id].field``) and optional details.
    Non-goals:
        - Does NOT raise -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class ValidationResult:
    """
    Result of validation.

    Guarantees:
        - ``issues`` is always a tuple (never None)
        - bool(result) == result.is_valid
    """

    is_valid: bool
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls) -> ValidationResult:
        return cls(is_valid=True, issues=())

    @classmethod
    def failure(cls, *issues: ValidationIssue) -> ValidationResult:
        return cls(is_valid=False, issues=tuple(issues))

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> ValidationResult:
        collected = tuple(issues)
        if collected:
            return cls.failure(*collected)
        return cls.success()

    def codes(self) -> tuple[str, ...]:
        return tuple(issue.code for issue in self.issues)

    def __bool__(self) -> bool:
        return self.is_valid


def _duplicate_ids(collection: str, ids: Iterable[str]) -> list[ValidationIssue]:
    counts = Counter(ids)
    return [
        ValidationIssue(
            code="DUPLICATE_ID",
            message=f"{collection} id {entity_id} appears {count} times",
            field=f"{collection}[{entity_id}].id",
            details={"count": count},
        )
        for entity_id, count in counts.items()
        if count > 1
    ]


def _check_schemes(snapshot: ChitFundSnapshot, limits: SchemeLimits) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for scheme in snapshot.chits:
        path = f"chits[{scheme.id}]"
        if scheme.scheme_value <= ZERO or scheme.scheme_value < limits.min_scheme_value:
            issues.append(ValidationIssue(
                code="SCHEME_VALUE_TOO_LOW",
                message=f"Scheme value must be at least {limits.min_scheme_value}",
                field=f"{path}.schemeValue",
                details={"scheme_value": scheme.scheme_value},
            ))
        if not limits.min_participants <= scheme.participants_count <= limits.max_participants:
            issues.append(ValidationIssue(
                code="PARTICIPANTS_COUNT_OUT_OF_RANGE",
                message=(
                    f"Participants must be between {limits.min_participants} "
                    f"and {limits.max_participants}"
                ),
                field=f"{path}.participantsCount",
                details={"participants_count": scheme.participants_count},
            ))
        if not limits.min_duration_months <= scheme.duration_months <= limits.max_duration_months:
            issues.append(ValidationIssue(
                code="DURATION_OUT_OF_RANGE",
                message=(
                    f"Duration must be between {limits.min_duration_months} "
                    f"and {limits.max_duration_months} months"
                ),
                field=f"{path}.durationMonths",
                details={"duration_months": scheme.duration_months},
            ))
        if not ZERO <= scheme.commission_percent <= limits.max_commission_percent:
            issues.append(ValidationIssue(
                code="COMMISSION_OUT_OF_RANGE",
                message=f"Commission must be between 0 and {limits.max_commission_percent}",
                field=f"{path}.commissionPercent",
                details={"commission_percent": scheme.commission_percent},
            ))
    return issues


def _check_months(snapshot: ChitFundSnapshot) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    seen = Counter((m.chit_id, m.month_number) for m in snapshot.chit_months)
    reported: set[tuple[str, int]] = set()

    for month in snapshot.chit_months:
        path = f"chitMonths[{month.id}]"
        key = (month.chit_id, month.month_number)
        if seen[key] > 1 and key not in reported:
            reported.add(key)
            issues.append(ValidationIssue(
                code="DUPLICATE_MONTH",
                message=f"Month {month.month_number} recorded {seen[key]} times for {month.chit_id}",
                field=f"{path}.monthNumber",
                details={"chit_id": month.chit_id, "month_number": month.month_number},
            ))

        scheme = snapshot.find_scheme(month.chit_id)
        if scheme is None:
            issues.append(ValidationIssue(
                code="UNKNOWN_SCHEME",
                message=f"Month references unknown chit {month.chit_id}",
                field=f"{path}.chitId",
            ))
            continue

        if not 1 <= month.month_number <= scheme.duration_months:
            issues.append(ValidationIssue(
                code="MONTH_NUMBER_OUT_OF_RANGE",
                message=f"Month number must be between 1 and {scheme.duration_months}",
                field=f"{path}.monthNumber",
                details={"month_number": month.month_number},
            ))

        if not isinstance(month, AuctionMonth):
            continue

        amount = month.auction_amount
        if amount is None or not ZERO < amount < scheme.scheme_value:
            issues.append(ValidationIssue(
                code="INVALID_AUCTION_AMOUNT",
                message="Auction amount is required and must be below the scheme value",
                field=f"{path}.auctionAmount",
                details={"auction_amount": amount, "scheme_value": scheme.scheme_value},
            ))

        winner_id = month.winner_participant_id
        if not winner_id:
            issues.append(ValidationIssue(
                code="MISSING_WINNER",
                message="Winner is required for auction months",
                field=f"{path}.winnerParticipantId",
            ))
            continue
        winner = snapshot.find_participant(winner_id)
        if winner is None or winner.chit_id != month.chit_id:
            issues.append(ValidationIssue(
                code="UNKNOWN_WINNER",
                message=f"Winner {winner_id} is not a participant of {month.chit_id}",
                field=f"{path}.winnerParticipantId",
            ))
        elif winner.status not in _WINNER_STATUSES:
            issues.append(ValidationIssue(
                code="INACTIVE_WINNER",
                message=f"Winner {winner_id} is {winner.status.value}",
                field=f"{path}.winnerParticipantId",
                details={"status": winner.status.value},
            ))
    return issues


def _check_participants(snapshot: ChitFundSnapshot, limits: SchemeLimits) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for participant in snapshot.participants:
        path = f"participants[{participant.id}]"
        if snapshot.find_scheme(participant.chit_id) is None:
            issues.append(ValidationIssue(
                code="UNKNOWN_SCHEME",
                message=f"Participant references unknown chit {participant.chit_id}",
                field=f"{path}.chitId",
            ))
        if len(participant.name.strip()) < limits.min_participant_name_length:
            issues.append(ValidationIssue(
                code="NAME_TOO_SHORT",
                message=(
                    f"Name must be at least {limits.min_participant_name_length} characters"
                ),
                field=f"{path}.name",
            ))
    return issues


def _check_payments(snapshot: ChitFundSnapshot) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for payment in snapshot.payments:
        path = f"payments[{payment.id}]"
        if snapshot.find_scheme(payment.chit_id) is None:
            issues.append(ValidationIssue(
                code="UNKNOWN_SCHEME",
                message=f"Payment references unknown chit {payment.chit_id}",
                field=f"{path}.chitId",
            ))
        participant = snapshot.find_participant(payment.participant_id)
        if participant is None:
            issues.append(ValidationIssue(
                code="UNKNOWN_PARTICIPANT",
                message=f"Payment references unknown participant {payment.participant_id}",
                field=f"{path}.participantId",
            ))
        elif participant.chit_id != payment.chit_id:
            issues.append(ValidationIssue(
                code="PARTICIPANT_SCHEME_MISMATCH",
                message=(
                    f"Participant {participant.id} belongs to {participant.chit_id}, "
                    f"not {payment.chit_id}"
                ),
                field=f"{path}.chitId",
            ))
        if payment.amount <= ZERO:
            issues.append(ValidationIssue(
                code="NON_POSITIVE_AMOUNT",
                message="Amount must be greater than 0",
                field=f"{path}.amount",
                details={"amount": payment.amount},
            ))
        if payment.month_number < 1:
            issues.append(ValidationIssue(
                code="MONTH_NUMBER_OUT_OF_RANGE",
                message="Month number must be positive",
                field=f"{path}.monthNumber",
            ))
    return issues


def _check_cash_movements(snapshot: ChitFundSnapshot, limits: SchemeLimits) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for movement in snapshot.cash_movements:
        path = f"companyCashMovements[{movement.id}]"
        if snapshot.find_scheme(movement.chit_id) is None:
            issues.append(ValidationIssue(
                code="UNKNOWN_SCHEME",
                message=f"Cash movement references unknown chit {movement.chit_id}",
                field=f"{path}.chitId",
            ))
        if movement.amount <= ZERO:
            issues.append(ValidationIssue(
                code="NON_POSITIVE_AMOUNT",
                message="Amount must be greater than 0",
                field=f"{path}.amount",
                details={"amount": movement.amount},
            ))
        if len(movement.reason.strip()) < limits.min_cash_reason_length:
            issues.append(ValidationIssue(
                code="REASON_TOO_SHORT",
                message=f"Reason must be at least {limits.min_cash_reason_length} characters",
                field=f"{path}.reason",
            ))
    return issues


def validate_snapshot(
    snapshot: ChitFundSnapshot,
    limits: SchemeLimits = DEFAULT_LIMITS,
) -> ValidationResult:
    """
    Check every entity invariant and report all violations.

    Postconditions:
        - Returns ValidationResult.success() when no issue is found.
    """
    issues: list[ValidationIssue] = []
    issues += _duplicate_ids("chits", (s.id for s in snapshot.chits))
    issues += _duplicate_ids("chitMonths", (m.id for m in snapshot.chit_months))
    issues += _duplicate_ids("participants", (p.id for p in snapshot.participants))
    issues += _duplicate_ids("payments", (p.id for p in snapshot.payments))
    issues += _duplicate_ids("companyCashMovements", (m.id for m in snapshot.cash_movements))
    issues += _duplicate_ids("duesRecoveries", (d.id for d in snapshot.dues_recoveries))
    issues += _check_schemes(snapshot, limits)
    issues += _check_months(snapshot)
    issues += _check_participants(snapshot, limits)
    issues += _check_payments(snapshot)
    issues += _check_cash_movements(snapshot, limits)

    result = ValidationResult.from_issues(issues)
    if result.is_valid:
        logger.debug("snapshot_validated", extra={"scheme_count": len(snapshot.chits)})
    else:
        logger.warning("snapshot_validation_failed", extra={
            "issue_count": len(result.issues),
            "codes": sorted(set(result.codes())),
        })
    return result


def ensure_valid(
    snapshot: ChitFundSnapshot,
    limits: SchemeLimits = DEFAULT_LIMITS,
) -> None:
    """
    Raise SnapshotValidationError unless the snapshot is valid.
    """
    result = validate_snapshot(snapshot, limits)
    if not result:
        raise SnapshotValidationError(result.issues)
