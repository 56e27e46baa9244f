"""
EngineSettings schema.

The typed form of the operator's settings file.  YAML is parsed into
these frozen dataclasses by ``chitfund_config.loader``; the kernel value
types they hold (RoundingPolicy, PayoutSource, SchemeLimits) are what the
engines and validators actually receive.
"""

from __future__ import annotations

from dataclasses import dataclass

from chitfund_kernel.domain.validation import DEFAULT_LIMITS, SchemeLimits
from chitfund_kernel.domain.values import DEFAULT_ROUNDING, PayoutSource, RoundingPolicy


@dataclass(frozen=True)
class EngineSettings:
    """
    Runtime settings for the calculators and validators.

    Contract:
        All fields have defaults matching the operator's original
        behaviour (INR, two decimal places, formula-derived per-scheme
        payouts).  ``__post_init__`` raises ``ValueError`` on violation.
    """

    currency: str = "INR"
    rounding: RoundingPolicy = DEFAULT_ROUNDING
    scheme_payout_source: PayoutSource = PayoutSource.FORMULA
    limits: SchemeLimits = DEFAULT_LIMITS
    source: str | None = None  # Path the settings were loaded from

    def __post_init__(self) -> None:
        code = (self.currency or "").strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"currency must be a three-letter code, got {self.currency!r}")
        object.__setattr__(self, "currency", code)
