"""
Typed Exception Hierarchy for the Chit Fund Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every calculator in ``chitfund_engines`` either returns a well-defined
number or fails outright. Callers (API handlers, import jobs, report
renderers) need to tell a dangling reference apart from a bad auction
month without parsing message text:

    try:
        due = participant_monthly_due(pid, 3, snapshot)
    except MonthNotFoundError as e:
        api_response(code=e.code, scheme=e.scheme_id, month=e.month_number)

Each exception has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ChitFundError (base)
    |
    +-- NotFoundError
    |   +-- SchemeNotFoundError
    |   +-- MonthNotFoundError
    |   +-- ParticipantNotFoundError
    |   +-- DueNotFoundError
    |
    +-- InvalidMonthError
    |
    +-- AdvancePaymentNotAllowedError
    |
    +-- SnapshotError
        +-- InvalidRecordError
        +-- SnapshotValidationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                          | When Raised
------------|-------------------------------|-----------------------------------
Not found   | SCHEME_NOT_FOUND              | chitId absent from the snapshot
            | MONTH_NOT_FOUND               | (chitId, monthNumber) absent
            | PARTICIPANT_NOT_FOUND         | participant id absent
            | DUE_NOT_FOUND                 | dues/recovery "due" id absent
------------|-------------------------------|-----------------------------------
Month       | INVALID_MONTH                 | auction month without a positive
            |                               | auctionAmount
------------|-------------------------------|-----------------------------------
Payments    | ADVANCE_PAYMENT_NOT_ALLOWED   | earlier month unpaid or partial
------------|-------------------------------|-----------------------------------
Snapshot    | INVALID_RECORD                | persisted record cannot be parsed
            | SNAPSHOT_VALIDATION_FAILED    | entity invariants violated

NotFound errors are never mapped to zero: a missing reference is a data
integrity problem the caller must surface.
"""

from __future__ import annotations

from typing import Any


class ChitFundError(Exception):
    """
    Base exception for all chit fund kernel errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "CHITFUND_ERROR"


# Lookup failures


class NotFoundError(ChitFundError):
    """Base exception for references missing from a snapshot."""

    code: str = "NOT_FOUND"


class SchemeNotFoundError(NotFoundError):
    """Scheme (chit) with given ID was not found."""

    code: str = "SCHEME_NOT_FOUND"

    def __init__(self, scheme_id: str):
        self.scheme_id = scheme_id
        super().__init__(f"Chit not found: {scheme_id}")


class MonthNotFoundError(NotFoundError):
    """No month with the given number exists for the scheme."""

    code: str = "MONTH_NOT_FOUND"

    def __init__(self, scheme_id: str, month_number: int):
        self.scheme_id = scheme_id
        self.month_number = month_number
        super().__init__(f"ChitMonth not found: {scheme_id}, month {month_number}")


class ParticipantNotFoundError(NotFoundError):
    """Participant with given ID was not found."""

    code: str = "PARTICIPANT_NOT_FOUND"

    def __init__(self, participant_id: str):
        self.participant_id = participant_id
        super().__init__(f"Participant not found: {participant_id}")


class DueNotFoundError(NotFoundError):
    """Dues record with given ID was not found (or is not of type 'due')."""

    code: str = "DUE_NOT_FOUND"

    def __init__(self, due_id: str):
        self.due_id = due_id
        super().__init__(f"Due not found: {due_id}")


# Month errors


class InvalidMonthError(ChitFundError):
    """
    Auction month lacks a positive auction amount.

    The dues formula has no sane default for a missing bid, so the
    calculation is rejected.
    """

    code: str = "INVALID_MONTH"

    def __init__(self, scheme_id: str, month_number: int, auction_amount: Any = None):
        self.scheme_id = scheme_id
        self.month_number = month_number
        self.auction_amount = auction_amount
        super().__init__(
            f"Auction month must have auctionAmount: "
            f"{scheme_id}, month {month_number} (got {auction_amount})"
        )


# Payment errors


class AdvancePaymentNotAllowedError(ChitFundError):
    """
    Payment targets a month while an earlier month is unpaid or partial.
    """

    code: str = "ADVANCE_PAYMENT_NOT_ALLOWED"

    def __init__(
        self,
        participant_id: str,
        month_number: int,
        blocking_month_number: int,
        blocking_status: str,
    ):
        self.participant_id = participant_id
        self.month_number = month_number
        self.blocking_month_number = blocking_month_number
        self.blocking_status = blocking_status
        super().__init__(
            f"Cannot record payment for month {month_number}. "
            f"Previous months must be paid first "
            f"(month {blocking_month_number} is {blocking_status})"
        )


# Snapshot errors


class SnapshotError(ChitFundError):
    """Base exception for snapshot decoding and validation errors."""

    code: str = "SNAPSHOT_ERROR"


class InvalidRecordError(SnapshotError):
    """A persisted record could not be turned into an entity."""

    code: str = "INVALID_RECORD"

    def __init__(self, collection: str, index: int, field: str, reason: str):
        self.collection = collection
        self.index = index
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {collection}[{index}].{field}: {reason}")


class SnapshotValidationError(SnapshotError):
    """One or more entity invariants are violated."""

    code: str = "SNAPSHOT_VALIDATION_FAILED"

    def __init__(self, issues: tuple):
        self.issues = issues
        codes = sorted({issue.code for issue in issues})
        super().__init__(
            f"Snapshot validation failed: {len(issues)} issue(s) "
            f"[{', '.join(codes)}]"
        )
