"""Validated configuration objects for the exposure, scoring and alert stages.

Every numeric parameter is a required argument. Reference values live in
:mod:`graphene_trace.core.constants` and are only applied when a caller asks
for them explicitly (see :func:`graphene_trace.engine.config.reference_config`).
"""

import math
from dataclasses import dataclass, field
from typing import Any

from graphene_trace.core.errors import ConfigurationError


def _require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {value}")


def _require_non_negative(name: str, value: float) -> None:
    if not math.isfinite(value) or value < 0:
        raise ConfigurationError(f"{name} must be a non-negative number, got {value}")


@dataclass(frozen=True)
class ExposureConfig:
    """Exposure tracking parameters.

    Attributes:
        pressure_threshold: Pressure at or above which a region is loaded (mmHg)
        relief_confirmation_seconds: Sub-threshold time needed before decay starts
        relief_rate: Accumulated seconds removed per second of confirmed relief
        max_gap_seconds: Frame interval above which a sensor gap is reported
        max_accumulated_seconds: Upper clamp for accumulated exposure
    """

    pressure_threshold: float
    relief_confirmation_seconds: float
    relief_rate: float
    max_gap_seconds: float
    max_accumulated_seconds: float

    def __post_init__(self) -> None:
        _require_positive("pressure_threshold", self.pressure_threshold)
        _require_non_negative("relief_confirmation_seconds", self.relief_confirmation_seconds)
        _require_positive("relief_rate", self.relief_rate)
        _require_positive("max_gap_seconds", self.max_gap_seconds)
        _require_positive("max_accumulated_seconds", self.max_accumulated_seconds)


@dataclass(frozen=True)
class ScoringConfig:
    """Risk curve parameters.

    Attributes:
        curve: Curve type name (see ``graphene_trace.scoring.CURVE_TYPES``)
        saturation_seconds: Effective exposure at which the score reaches 100
        pressure_threshold: Pressure above which time-to-critical shortens (mmHg)
        pressure_gain: Exposure speed-up per threshold-width of excess pressure
        max_pressure_factor: Upper bound of the pressure speed-up factor
        curve_params: Extra keyword arguments for the curve
    """

    curve: str
    saturation_seconds: float
    pressure_threshold: float
    pressure_gain: float
    max_pressure_factor: float
    curve_params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _require_positive("saturation_seconds", self.saturation_seconds)
        _require_positive("pressure_threshold", self.pressure_threshold)
        _require_non_negative("pressure_gain", self.pressure_gain)
        if not math.isfinite(self.max_pressure_factor) or self.max_pressure_factor < 1.0:
            raise ConfigurationError(
                f"max_pressure_factor must be >= 1, got {self.max_pressure_factor}"
            )


@dataclass(frozen=True)
class AlertConfig:
    """Alert state machine thresholds and timers.

    Attributes:
        warning_threshold: Risk score entering WARNING (T_warn)
        critical_threshold: Risk score entering CRITICAL (T_crit)
        hysteresis_margin: Amount the score must fall below an entry threshold to clear
        warning_dwell_seconds: Time the score must hold >= T_warn before WARNING
        critical_dwell_seconds: Time the score must hold >= T_crit before CRITICAL
        clearing_confirmation_seconds: Time below T_warn - margin before NORMAL
    """

    warning_threshold: float
    critical_threshold: float
    hysteresis_margin: float
    warning_dwell_seconds: float
    critical_dwell_seconds: float
    clearing_confirmation_seconds: float

    def __post_init__(self) -> None:
        _require_positive("hysteresis_margin", self.hysteresis_margin)
        _require_non_negative("warning_dwell_seconds", self.warning_dwell_seconds)
        _require_non_negative("critical_dwell_seconds", self.critical_dwell_seconds)
        _require_non_negative(
            "clearing_confirmation_seconds", self.clearing_confirmation_seconds
        )
        if not 0 < self.warning_threshold < self.critical_threshold <= 100:
            raise ConfigurationError(
                "thresholds must satisfy 0 < warning < critical <= 100, got "
                f"warning={self.warning_threshold}, critical={self.critical_threshold}"
            )
        if self.hysteresis_margin >= self.warning_threshold:
            raise ConfigurationError(
                f"hysteresis_margin ({self.hysteresis_margin}) must be smaller than "
                f"warning_threshold ({self.warning_threshold})"
            )

    @property
    def warning_exit(self) -> float:
        """Score below which WARNING clears."""
        return self.warning_threshold - self.hysteresis_margin

    @property
    def critical_exit(self) -> float:
        """Score below which CRITICAL clears."""
        return self.critical_threshold - self.hysteresis_margin
