"""
Values -- Decimal amount helpers and the rounding policy.

Responsibility:
    Normalizes raw numeric inputs (int, str, float from JSON) into
    ``Decimal`` and quantizes derived amounts to currency minor units.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by entities, codec and every engine module.

Invariants enforced:
    - All monetary amounts are ``Decimal``; floats are converted through
      ``str`` so 18250.5 becomes Decimal("18250.5"), not its binary
      expansion.
    - Rounding is explicit: nothing is quantized unless a calculator asks
      a ``RoundingPolicy`` to do it.

Failure modes:
    - ValueError on non-numeric, NaN or infinite input.
    - ValueError on a RoundingPolicy with negative decimal places or an
      unknown rounding mode.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable

ZERO = Decimal("0")

_ROUNDING_MODES = frozenset({
    decimal.ROUND_CEILING,
    decimal.ROUND_DOWN,
    decimal.ROUND_FLOOR,
    decimal.ROUND_HALF_DOWN,
    decimal.ROUND_HALF_EVEN,
    decimal.ROUND_HALF_UP,
    decimal.ROUND_UP,
    decimal.ROUND_05UP,
})


def to_decimal(value: Any, name: str = "amount") -> Decimal:
    """
    Convert a numeric value to Decimal.

    Raises:
        ValueError: If the value is not a finite number (bools rejected).
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ValueError(f"{name} must be numeric, got {value!r}")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"{name} is not a valid number: {value!r}") from e
    else:
        raise ValueError(f"{name} must be numeric, got {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum Decimals starting from an exact zero."""
    return sum(amounts, ZERO)


@dataclass(frozen=True, slots=True)
class RoundingPolicy:
    """
    Quantization rule for derived amounts.

    Contract:
        ``decimal_places`` is the currency's minor-unit precision (2 for
        INR paise). ``rounding`` is one of the ``decimal`` module modes.
    Guarantees:
        - ``quantize`` is deterministic and idempotent.
    """

    decimal_places: int = 2
    rounding: str = ROUND_HALF_UP

    def __post_init__(self) -> None:
        if self.decimal_places < 0:
            raise ValueError("decimal_places cannot be negative")
        if self.rounding not in _ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {self.rounding}")

    @property
    def quantum(self) -> Decimal:
        """Smallest representable unit, e.g. Decimal('0.01')."""
        return Decimal(1).scaleb(-self.decimal_places)

    def quantize(self, amount: Decimal) -> Decimal:
        """Round ``amount`` to the policy's minor units."""
        return amount.quantize(self.quantum, rounding=self.rounding)


DEFAULT_ROUNDING = RoundingPolicy()


class PayoutSource(str, Enum):
    """
    Where a per-scheme cash balance takes winner payouts from.

    FORMULA recomputes ``schemeValue - auctionAmount`` for every auction
    month; LEDGER sums recorded ``winner_payout`` cash movements, the same
    source the company-wide balance uses.
    """

    FORMULA = "formula"
    LEDGER = "ledger"
