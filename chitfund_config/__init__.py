"""
chitfund_config -- single public entrypoint for engine settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_engine_settings()``.  No engine reads files or environment
    variables; callers pass ``settings.rounding`` and
    ``settings.scheme_payout_source`` into the calculators explicitly.

Architecture position:
    Configuration -- sits above ``chitfund_kernel``.  ``chitfund_engines``
    MUST NEVER import from ``chitfund_config``.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``yaml.YAMLError`` -- malformed YAML.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful call emits a ``CHITFUND_CONFIG_TRACE`` log entry with
    the source path, currency, rounding and payout source, tying computed
    figures back to the settings that governed them.
"""

from __future__ import annotations

from pathlib import Path

from chitfund_config.loader import load_settings
from chitfund_config.schema import EngineSettings
from chitfund_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "defaults.yaml"


def get_engine_settings(path: Path | str | None = None) -> EngineSettings:
    """The ONLY public settings entrypoint.

    Args:
        path: Settings file to load.  Defaults to the packaged
            ``defaults.yaml``.

    Returns:
        Frozen EngineSettings.
    """
    settings_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH
    settings = load_settings(settings_path)

    _logger.info(
        "CHITFUND_CONFIG_TRACE",
        extra={
            "trace_type": "CHITFUND_CONFIG_TRACE",
            "source": settings.source,
            "currency": settings.currency,
            "decimal_places": settings.rounding.decimal_places,
            "rounding_mode": settings.rounding.rounding,
            "scheme_payout_source": settings.scheme_payout_source.value,
        },
    )
    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "EngineSettings",
    "get_engine_settings",
]
