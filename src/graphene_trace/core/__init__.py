"""Core types, constants, errors and configuration for the risk engine."""

from graphene_trace.core.constants import (
    MMHG_TO_PA,
    CAPILLARY_CLOSING_PRESSURE_MMHG,
    HIGH_RISK_PRESSURE_MMHG,
    CLINICAL_SATURATION_SECONDS,
    DEFAULT_GRID_ROWS,
    DEFAULT_GRID_COLS,
    BODY_REGION_ROWS,
)
from graphene_trace.core.errors import (
    GrapheneTraceError,
    ConfigurationError,
    FrameError,
    OutOfOrderFrame,
    UnknownPatient,
    ResolutionMismatch,
    SensorGapDetected,
    IllegalTransition,
)
from graphene_trace.core.types import (
    PressureFrame,
    RegionDefinition,
    RegionReading,
    ExposureState,
    AlertState,
    AlertEvent,
    RegionStatus,
    FrameResult,
    PatientSnapshot,
)
from graphene_trace.core.config import ExposureConfig, ScoringConfig, AlertConfig

__all__ = [
    # Constants
    "MMHG_TO_PA",
    "CAPILLARY_CLOSING_PRESSURE_MMHG",
    "HIGH_RISK_PRESSURE_MMHG",
    "CLINICAL_SATURATION_SECONDS",
    "DEFAULT_GRID_ROWS",
    "DEFAULT_GRID_COLS",
    "BODY_REGION_ROWS",
    # Errors
    "GrapheneTraceError",
    "ConfigurationError",
    "FrameError",
    "OutOfOrderFrame",
    "UnknownPatient",
    "ResolutionMismatch",
    "SensorGapDetected",
    "IllegalTransition",
    # Types
    "PressureFrame",
    "RegionDefinition",
    "RegionReading",
    "ExposureState",
    "AlertState",
    "AlertEvent",
    "RegionStatus",
    "FrameResult",
    "PatientSnapshot",
    # Config
    "ExposureConfig",
    "ScoringConfig",
    "AlertConfig",
]
