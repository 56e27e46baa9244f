"""
Codec -- persisted JSON shape <-> ChitFundSnapshot.

Responsibility:
    Translate the storage layer's camelCase document
    ``{chits, chitMonths, participants, payments, companyCashMovements,
    duesRecoveries}`` into typed entities and back.

Architecture position:
    Kernel > Domain -- pure translation. ``loads_snapshot`` and
    ``dumps_snapshot`` work on text; reading and writing files is the
    storage collaborator's job.

Invariants enforced:
    - Numbers are parsed exactly (``parse_float=Decimal``) and amounts are
      always ``Decimal`` after decoding.
    - Encoding is lossless: an amount a JSON float cannot carry exactly is
      written as a decimal string, which decoding accepts.
    - Dates are ISO-8601; a timestamp string is reduced to its date.
    - Optional fields absent on input stay absent on output.

Failure modes:
    - InvalidRecordError naming collection, index and field for missing
      keys, unknown enum values, bad numbers or bad dates.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping

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
from chitfund_kernel.domain.values import to_decimal
from chitfund_kernel.exceptions import InvalidRecordError
from chitfund_kernel.logging_config import get_logger

logger = get_logger("domain.codec")

_MISSING = object()


class _RecordReader:
    """Typed field access for one raw record, with located errors."""

    def __init__(self, collection: str, index: int, raw: Any):
        if not isinstance(raw, Mapping):
            raise InvalidRecordError(collection, index, "*", "record is not an object")
        self.collection = collection
        self.index = index
        self.raw = raw

    def _fail(self, key: str, reason: str) -> InvalidRecordError:
        return InvalidRecordError(self.collection, self.index, key, reason)

    def _get(self, key: str, required: bool) -> Any:
        value = self.raw.get(key, _MISSING)
        if value is _MISSING or value is None:
            if required:
                raise self._fail(key, "missing required field")
            return None
        return value

    def text(self, key: str, required: bool = True) -> str | None:
        value = self._get(key, required)
        if value is None:
            return None
        if not isinstance(value, str):
            raise self._fail(key, f"expected string, got {type(value).__name__}")
        return value

    def integer(self, key: str, required: bool = True) -> int | None:
        value = self._get(key, required)
        if value is None:
            return None
        if isinstance(value, bool):
            raise self._fail(key, "expected integer, got bool")
        if isinstance(value, int):
            return value
        if isinstance(value, (float, Decimal)):
            try:
                if value == int(value):
                    return int(value)
            except (ValueError, OverflowError):
                pass
        raise self._fail(key, f"expected integer, got {value!r}")

    def amount(self, key: str, required: bool = True) -> Decimal | None:
        value = self._get(key, required)
        if value is None:
            return None
        try:
            return to_decimal(value, key)
        except ValueError as e:
            raise self._fail(key, str(e)) from e

    def day(self, key: str, required: bool = True) -> date | None:
        value = self.text(key, required)
        if value is None or (not required and value == ""):
            return None
        try:
            return _parse_iso_date(value)
        except ValueError as e:
            raise self._fail(key, f"invalid ISO-8601 date {value!r}") from e

    def choice(self, key: str, enum_type: type[Enum], default: Enum | None = None) -> Any:
        value = self._get(key, default is None)
        if value is None:
            return default
        try:
            return enum_type(value)
        except ValueError as e:
            allowed = ", ".join(m.value for m in enum_type)
            raise self._fail(key, f"{value!r} is not one of: {allowed}") from e


def _parse_iso_date(value: str) -> date:
    if len(value) == 10:
        return date.fromisoformat(value)
    return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _scheme(r: _RecordReader) -> Scheme:
    return Scheme(
        id=r.text("id"),
        scheme_value=r.amount("schemeValue"),
        participants_count=r.integer("participantsCount"),
        duration_months=r.integer("durationMonths"),
        commission_percent=r.amount("commissionPercent"),
        status=r.choice("status", SchemeStatus, SchemeStatus.ACTIVE),
        name=r.text("name", required=False) or None,
        start_date=r.day("startDate", required=False),
    )


def _month(r: _RecordReader) -> ChitMonth:
    month_type = r.choice("type", MonthType)
    if month_type is MonthType.AUCTION:
        return AuctionMonth(
            id=r.text("id"),
            chit_id=r.text("chitId"),
            month_number=r.integer("monthNumber"),
            auction_amount=r.amount("auctionAmount", required=False),
            winner_participant_id=r.text("winnerParticipantId", required=False) or None,
            date=r.day("date", required=False),
        )
    return CompanyMonth(
        id=r.text("id"),
        chit_id=r.text("chitId"),
        month_number=r.integer("monthNumber"),
        date=r.day("date", required=False),
    )


def _participant(r: _RecordReader) -> Participant:
    return Participant(
        id=r.text("id"),
        chit_id=r.text("chitId"),
        name=r.text("name"),
        role=r.choice("role", ParticipantRole, ParticipantRole.EXTERNAL),
        status=r.choice("status", ParticipantStatus, ParticipantStatus.ACTIVE),
        joined_month_number=r.integer("joinedMonthNumber", required=False),
    )


def _payment(r: _RecordReader) -> Payment:
    return Payment(
        id=r.text("id"),
        participant_id=r.text("participantId"),
        chit_id=r.text("chitId"),
        month_number=r.integer("monthNumber"),
        amount=r.amount("amount"),
        date=r.day("date"),
        note=r.text("note", required=False),
    )


def _cash_movement(r: _RecordReader) -> CashMovement:
    return CashMovement(
        id=r.text("id"),
        chit_id=r.text("chitId"),
        month_number=r.integer("monthNumber"),
        type=r.choice("type", CashMovementType),
        amount=r.amount("amount"),
        reason=r.text("reason"),
        date=r.day("date"),
    )


def _dues_recovery(r: _RecordReader) -> DuesRecovery:
    return DuesRecovery(
        id=r.text("id"),
        type=r.choice("type", DuesRecoveryType),
        amount=r.amount("amount"),
        due_date=r.day("dueDate"),
        reason=r.text("reason"),
        debtor=r.text("debtor"),
        status=r.choice("status", DuesStatus),
        created_date=r.day("createdDate"),
        due_id=r.text("dueId", required=False),
        recovered_amount=r.amount("recoveredAmount", required=False),
        recovery_date=r.day("recoveryDate", required=False),
        recovery_method=r.text("recoveryMethod", required=False),
        note=r.text("note", required=False),
    )


_DECODERS: tuple[tuple[str, str, Callable[[_RecordReader], Any]], ...] = (
    ("chits", "chits", _scheme),
    ("chitMonths", "chit_months", _month),
    ("participants", "participants", _participant),
    ("payments", "payments", _payment),
    ("companyCashMovements", "cash_movements", _cash_movement),
    ("duesRecoveries", "dues_recoveries", _dues_recovery),
)


def snapshot_from_dict(data: Mapping[str, Any]) -> ChitFundSnapshot:
    """
    Build a snapshot from the persisted document.

    Missing collections are treated as empty.

    Raises:
        InvalidRecordError: If the document is not an object or any record
            cannot be decoded.
    """
    if not isinstance(data, Mapping):
        raise InvalidRecordError("*", -1, "*", "document is not an object")

    collections: dict[str, tuple] = {}
    for key, attr, decode in _DECODERS:
        raw_items = data.get(key) or []
        if not isinstance(raw_items, list):
            raise InvalidRecordError(key, -1, "*", "collection is not a list")
        collections[attr] = tuple(
            decode(_RecordReader(key, index, raw))
            for index, raw in enumerate(raw_items)
        )

    snapshot = ChitFundSnapshot(**collections)
    logger.debug("snapshot_decoded", extra={
        attr: len(items) for attr, items in collections.items()
    })
    return snapshot


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _number(value: Decimal) -> int | float | str:
    """
    JSON form of an amount: an integer when integral, a float when the
    float reads back to the same value, otherwise the exact decimal text.
    """
    if value == value.to_integral_value():
        return int(value)
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    """Set an optional key only when there is a value."""
    if value is None:
        return
    if isinstance(value, Decimal):
        value = _number(value)
    elif isinstance(value, date):
        value = value.isoformat()
    elif isinstance(value, Enum):
        value = value.value
    out[key] = value


def _encode_scheme(s: Scheme) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": s.id,
        "schemeValue": _number(s.scheme_value),
        "participantsCount": s.participants_count,
        "durationMonths": s.duration_months,
        "commissionPercent": _number(s.commission_percent),
        "status": s.status.value,
    }
    _put(out, "startDate", s.start_date)
    _put(out, "name", s.name)
    return out


def _encode_month(m: ChitMonth) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": m.id,
        "chitId": m.chit_id,
        "monthNumber": m.month_number,
        "type": m.type.value,
    }
    if isinstance(m, AuctionMonth):
        _put(out, "auctionAmount", m.auction_amount)
        _put(out, "winnerParticipantId", m.winner_participant_id)
    _put(out, "date", m.date)
    return out


def _encode_participant(p: Participant) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": p.id,
        "name": p.name,
        "chitId": p.chit_id,
        "role": p.role.value,
        "status": p.status.value,
    }
    _put(out, "joinedMonthNumber", p.joined_month_number)
    return out


def _encode_payment(p: Payment) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": p.id,
        "participantId": p.participant_id,
        "chitId": p.chit_id,
        "monthNumber": p.month_number,
        "amount": _number(p.amount),
        "date": p.date.isoformat(),
    }
    _put(out, "note", p.note)
    return out


def _encode_cash_movement(m: CashMovement) -> dict[str, Any]:
    return {
        "id": m.id,
        "chitId": m.chit_id,
        "monthNumber": m.month_number,
        "type": m.type.value,
        "amount": _number(m.amount),
        "reason": m.reason,
        "date": m.date.isoformat(),
    }


def _encode_dues_recovery(d: DuesRecovery) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": d.id,
        "type": d.type.value,
        "amount": _number(d.amount),
        "dueDate": d.due_date.isoformat(),
        "reason": d.reason,
        "debtor": d.debtor,
        "status": d.status.value,
    }
    _put(out, "dueId", d.due_id)
    _put(out, "recoveredAmount", d.recovered_amount)
    _put(out, "recoveryDate", d.recovery_date)
    _put(out, "recoveryMethod", d.recovery_method)
    _put(out, "note", d.note)
    out["createdDate"] = d.created_date.isoformat()
    return out


def snapshot_to_dict(snapshot: ChitFundSnapshot) -> dict[str, list[dict[str, Any]]]:
    """Render a snapshot in the persisted camelCase shape."""
    return {
        "chits": [_encode_scheme(s) for s in snapshot.chits],
        "chitMonths": [_encode_month(m) for m in snapshot.chit_months],
        "participants": [_encode_participant(p) for p in snapshot.participants],
        "payments": [_encode_payment(p) for p in snapshot.payments],
        "companyCashMovements": [_encode_cash_movement(m) for m in snapshot.cash_movements],
        "duesRecoveries": [_encode_dues_recovery(d) for d in snapshot.dues_recoveries],
    }


def loads_snapshot(text: str) -> ChitFundSnapshot:
    """Parse JSON text into a snapshot; numbers are read as exact decimals."""
    return snapshot_from_dict(json.loads(text, parse_float=Decimal))


def dumps_snapshot(snapshot: ChitFundSnapshot, indent: int | None = 2) -> str:
    return json.dumps(snapshot_to_dict(snapshot), indent=indent)
