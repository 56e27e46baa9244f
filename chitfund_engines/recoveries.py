"""
Module: chitfund_engines.recoveries
Responsibility:
    Balances of external dues owed to the operator, net of the recovery
    records linked to them.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Independent of the scheme calculators: dues and recoveries are not
    tied to any chit.
"""

from __future__ import annotations

from decimal import Decimal

from chitfund_kernel.domain.entities import DuesRecovery, DuesRecoveryType, DuesStatus
from chitfund_kernel.domain.snapshot import ChitFundSnapshot
from chitfund_kernel.domain.values import ZERO, sum_amounts
from chitfund_kernel.exceptions import DueNotFoundError
from chitfund_kernel.logging_config import get_logger

logger = get_logger("engines.recoveries")


def _require_due(due_id: str, snapshot: ChitFundSnapshot) -> DuesRecovery:
    for record in snapshot.dues_recoveries:
        if record.id == due_id and record.type is DuesRecoveryType.DUE:
            return record
    raise DueNotFoundError(due_id)


def due_recovered_amount(due_id: str, snapshot: ChitFundSnapshot) -> Decimal:
    """
    Sum recovered against a due.

    A recovery record without ``recovered_amount`` counts as zero.

    Raises:
        DueNotFoundError: If no due with that id exists.
    """
    _require_due(due_id, snapshot)
    return sum_amounts(
        r.recovered_amount or ZERO
        for r in snapshot.dues_recoveries
        if r.type is DuesRecoveryType.RECOVERY and r.due_id == due_id
    )


def due_balance(due_id: str, snapshot: ChitFundSnapshot) -> Decimal:
    """Due amount minus everything recovered against it."""
    due = _require_due(due_id, snapshot)
    return due.amount - due_recovered_amount(due_id, snapshot)


def total_pending_dues(snapshot: ChitFundSnapshot) -> Decimal:
    """Positive balances of every due that has not been written off."""
    total = ZERO
    for record in snapshot.dues_recoveries:
        if record.type is not DuesRecoveryType.DUE:
            continue
        if record.status is DuesStatus.WRITTEN_OFF:
            continue
        balance = due_balance(record.id, snapshot)
        if balance > ZERO:
            total += balance

    logger.debug("total_pending_dues_calculated", extra={"total": str(total)})
    return total
