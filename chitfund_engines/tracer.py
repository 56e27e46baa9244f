"""
chitfund_engines.tracer -- Engine invocation tracer emitting CHITFUND_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    calculator invocations with structured trace logging.  The trace
    captures engine_name, engine_version, input_fingerprint (deterministic
    SHA-256 hash of selected arguments), outcome and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Does NOT introduce I/O into engines; emits a log record only.

Invariants enforced:
    - Fingerprint computation is deterministic -- _canonicalize produces
      stable string representations; dict keys are sorted; the hash is
      SHA-256 truncated to 16 hex chars.
    - Engine purity: the decorator only reads arguments and emits a log
      record; it does not mutate inputs, and exceptions raised by the
      engine propagate unchanged.
    - One record per top-level call: traced calculators invoked from
      inside another traced calculator run untraced.

Failure modes:
    - Fingerprint fields that are not parameters of the wrapped function
      are recorded as "null".

Usage:
    from chitfund_engines.tracer import traced_engine

    @traced_engine("dues", "1.0", fingerprint_fields=("scheme_id", "month_number"))
    def month_shortfall(scheme_id, month_number, snapshot):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import time
from collections.abc import Callable
from contextvars import ContextVar
from decimal import Decimal
from enum import Enum
from typing import Any

from chitfund_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

# Nesting depth of traced calls in the current context; only depth 0 emits.
_trace_depth: ContextVar[int] = ContextVar("chitfund_trace_depth", default=0)


def _canonicalize(value: Any) -> str:
    """Produce a stable string representation of a value for fingerprinting.

    Postconditions:
        Returns a deterministic string for None, int, Decimal, str, enums,
        dict (sorted keys), list/tuple (order-preserved).  Unknown types
        fall back to ``str(value)``.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        items = sorted(value.items())
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """Compute a deterministic SHA-256 fingerprint of selected arguments.

    Postconditions:
        Returns a 16-character hex string.  Missing fields are recorded
        as "null".  Identical inputs give identical fingerprints.
    """
    parts: list[str] = []
    for field in fingerprint_fields:
        val = arguments.get(field)
        parts.append(f"{field}={_canonicalize(val)}")
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits CHITFUND_ENGINE_TRACE for calculator calls.

    Args:
        engine_name: Engine identifier (e.g., "dues").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names (positional or keyword) to
            include in the input fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            depth = _trace_depth.get()
            token = _trace_depth.set(depth + 1)
            if depth > 0:
                try:
                    return func(*args, **kwargs)
                finally:
                    _trace_depth.reset(token)

            fp = ""
            t0 = time.monotonic()
            outcome = "ok"
            try:
                if fingerprint_fields:
                    bound = signature.bind_partial(*args, **kwargs)
                    fp = compute_input_fingerprint(fingerprint_fields, bound.arguments)
                return func(*args, **kwargs)
            except Exception as exc:
                outcome = getattr(exc, "code", type(exc).__name__)
                raise
            finally:
                _trace_depth.reset(token)
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                _logger.info(
                    "CHITFUND_ENGINE_TRACE",
                    extra={
                        "trace_type": "CHITFUND_ENGINE_TRACE",
                        "engine_name": engine_name,
                        "engine_version": engine_version,
                        "input_fingerprint": fp,
                        "outcome": outcome,
                        "duration_ms": duration_ms,
                        "function": func.__qualname__,
                    },
                )

        return wrapper

    return decorator
