"""Engine module orchestrating per-patient risk evaluation."""

from graphene_trace.engine.config import PatientConfig, reference_config
from graphene_trace.engine.risk_engine import RiskEngine, IngestOutcome
from graphene_trace.engine.dispatcher import PatientLaneDispatcher
from graphene_trace.engine.recording import save_recording, load_recording, replay
from graphene_trace.engine.config_loader import (
    load_config,
    load_config_file,
    config_from_dict,
    layout_from_config,
    save_config,
)

__all__ = [
    # Config
    "PatientConfig",
    "reference_config",
    # Engine
    "RiskEngine",
    "IngestOutcome",
    "PatientLaneDispatcher",
    # Recordings
    "save_recording",
    "load_recording",
    "replay",
    # Config I/O
    "load_config",
    "load_config_file",
    "config_from_dict",
    "layout_from_config",
    "save_config",
]
