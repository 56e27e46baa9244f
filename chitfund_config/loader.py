"""
Configuration Loader (``chitfund_config.loader``).

Responsibility
--------------
Loads the YAML settings file and parses it into ``EngineSettings``.
Callers use ``chitfund_config.get_engine_settings()``; this module is the
parsing step behind it.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass.
* Numeric limits and amounts become ``Decimal`` (never float).
* Unknown top-level keys are rejected so typos do not silently fall back
  to defaults.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Bad values  -> ``ValueError`` naming the offending key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from chitfund_config.schema import EngineSettings
from chitfund_kernel.domain.validation import SchemeLimits
from chitfund_kernel.domain.values import PayoutSource, RoundingPolicy, to_decimal

_TOP_LEVEL_KEYS = frozenset({"currency", "rounding", "scheme_payout_source", "limits"})

_DECIMAL_LIMITS = ("min_scheme_value", "max_commission_percent")
_INT_LIMITS = (
    "min_participants",
    "max_participants",
    "min_duration_months",
    "max_duration_months",
    "min_participant_name_length",
    "min_cash_reason_length",
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    return data


def _section(value: Any, key: str) -> dict[str, Any]:
    """A nested mapping; an empty (null) section counts as ``{}``."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a mapping, got {type(value).__name__}")
    return value


def _whole_number(value: Any, key: str) -> int:
    """Accept ints and integral floats or strings; never truncate."""
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a whole number, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        number = to_decimal(value, key)
    except ValueError as e:
        raise ValueError(f"{key} must be a whole number, got {value!r}") from e
    if number != number.to_integral_value():
        raise ValueError(f"{key} must be a whole number, got {value!r}")
    return int(number)


def parse_rounding(data: Any) -> RoundingPolicy:
    """Parse a RoundingPolicy from ``{decimal_places, mode}``."""
    data = _section(data, "rounding")
    return RoundingPolicy(
        decimal_places=_whole_number(data.get("decimal_places", 2), "decimal_places"),
        rounding=str(data.get("mode", "ROUND_HALF_UP")).upper(),
    )


def parse_payout_source(value: Any) -> PayoutSource:
    try:
        return PayoutSource(str(value).lower())
    except ValueError as e:
        allowed = ", ".join(s.value for s in PayoutSource)
        raise ValueError(f"scheme_payout_source must be one of: {allowed}") from e


def parse_limits(data: Any) -> SchemeLimits:
    """Parse SchemeLimits; keys left out keep their defaults."""
    data = _section(data, "limits")
    unknown = set(data) - set(_DECIMAL_LIMITS) - set(_INT_LIMITS)
    if unknown:
        raise ValueError(f"Unknown limits keys: {sorted(unknown)}")

    kwargs: dict[str, Any] = {}
    for key in _DECIMAL_LIMITS:
        if key in data:
            kwargs[key] = to_decimal(data[key], key)
    for key in _INT_LIMITS:
        if key in data:
            kwargs[key] = _whole_number(data[key], key)
    return SchemeLimits(**kwargs)


def parse_settings(data: dict[str, Any], source: str | None = None) -> EngineSettings:
    """
    Parse EngineSettings from a dict.

    Raises:
        ValueError: on unknown keys or invalid values.
    """
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"Unknown settings keys: {sorted(unknown)}")

    kwargs: dict[str, Any] = {"source": source}
    if "currency" in data:
        kwargs["currency"] = str(data["currency"])
    if "rounding" in data:
        kwargs["rounding"] = parse_rounding(data["rounding"])
    if "scheme_payout_source" in data:
        kwargs["scheme_payout_source"] = parse_payout_source(data["scheme_payout_source"])
    if "limits" in data:
        kwargs["limits"] = parse_limits(data["limits"])
    return EngineSettings(**kwargs)


def load_settings(path: Path) -> EngineSettings:
    """Load and parse a settings file."""
    return parse_settings(load_yaml_file(path), source=str(path))
