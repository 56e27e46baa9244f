"""
Module: chitfund_engines.commission
Responsibility:
    Convert a scheme's value into the operator's commission.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``commission_amount(s) == s.scheme_value * s.commission_percent``
      exactly; no rounding is introduced.

Usage:
    commission_amount(scheme)  # 500000 x 0.03 -> Decimal("15000.00")
"""

from __future__ import annotations

from decimal import Decimal

from chitfund_kernel.domain.entities import Scheme
from chitfund_kernel.logging_config import get_logger

logger = get_logger("engines.commission")


def commission_amount(scheme: Scheme) -> Decimal:
    """Operator fee for the whole scheme: scheme value x commission rate."""
    amount = scheme.scheme_value * scheme.commission_percent
    logger.debug("commission_calculated", extra={
        "scheme_id": scheme.id,
        "scheme_value": str(scheme.scheme_value),
        "commission_percent": str(scheme.commission_percent),
        "commission_amount": str(amount),
    })
    return amount
