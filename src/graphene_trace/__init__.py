"""
GrapheneTrace Pressure Exposure Risk Engine

Real-time pressure-ulcer risk tracking for patients lying on e-textile
pressure-mapping sensors. Each incoming pressure frame is split into body
regions, sustained high-pressure exposure is accumulated per region, turned
into a 0-100 risk score and fed through a hysteresis-aware alert state machine.

Main components:
- core: Frame/event types, errors, constants and stage configuration
- regions: Sensor region layouts and per-region aggregation
- exposure: Time-above-threshold tracking with relief debounce and gap handling
- scoring: Risk curves and the risk scorer
- alerts: NORMAL/WARNING/CRITICAL/CLEARING alert state machine
- engine: Per-patient orchestration, lane dispatch, config loading, recordings

Quick start:
    from graphene_trace import RiskEngine, RegionLayout, PressureFrame, reference_config

    layout = RegionLayout.body_layout(rows=64, cols=27)
    engine = RiskEngine()
    engine.admit("bed-12", reference_config(layout))
    events = engine.ingest(PressureFrame("bed-12", timestamp, grid))
"""

__version__ = "0.1.0"

# Core types
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

# Errors
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

# Stage configuration
from graphene_trace.core.config import ExposureConfig, ScoringConfig, AlertConfig

# Pipeline stages
from graphene_trace.regions import RegionLayout, RegionMapper
from graphene_trace.exposure import ExposureTracker
from graphene_trace.scoring import RiskScorer, create_curve
from graphene_trace.alerts import AlertStateMachine

# Engine
from graphene_trace.engine import (
    PatientConfig,
    reference_config,
    RiskEngine,
    IngestOutcome,
    PatientLaneDispatcher,
    load_config,
    save_config,
)

__all__ = [
    # Version
    "__version__",
    # Core types
    "PressureFrame",
    "RegionDefinition",
    "RegionReading",
    "ExposureState",
    "AlertState",
    "AlertEvent",
    "RegionStatus",
    "FrameResult",
    "PatientSnapshot",
    # Errors
    "GrapheneTraceError",
    "ConfigurationError",
    "FrameError",
    "OutOfOrderFrame",
    "UnknownPatient",
    "ResolutionMismatch",
    "SensorGapDetected",
    "IllegalTransition",
    # Configuration
    "ExposureConfig",
    "ScoringConfig",
    "AlertConfig",
    "PatientConfig",
    "reference_config",
    "load_config",
    "save_config",
    # Stages
    "RegionLayout",
    "RegionMapper",
    "ExposureTracker",
    "RiskScorer",
    "create_curve",
    "AlertStateMachine",
    # Engine
    "RiskEngine",
    "IngestOutcome",
    "PatientLaneDispatcher",
]
