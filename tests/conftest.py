"""Shared pytest fixtures for risk engine tests."""

import numpy as np
import pytest

from graphene_trace.core.config import AlertConfig, ExposureConfig, ScoringConfig
from graphene_trace.core.types import PressureFrame, RegionDefinition
from graphene_trace.engine.config import PatientConfig, reference_config
from graphene_trace.engine.risk_engine import RiskEngine
from graphene_trace.regions.layout import RegionLayout


@pytest.fixture
def small_layout():
    """8x4 sensor with three regions."""
    return RegionLayout(
        rows=8,
        cols=4,
        regions=[
            RegionDefinition("shoulders", tuple((r, c) for r in range(1, 3) for c in range(4))),
            RegionDefinition("sacrum", tuple((r, c) for r in range(4, 6) for c in range(1, 3))),
            RegionDefinition("heels", tuple((7, c) for c in range(4))),
        ],
        name="small",
    )


@pytest.fixture
def body_layout():
    """Coarse supine body layout (keeps long scenarios fast)."""
    return RegionLayout.body_layout(rows=20, cols=10)


@pytest.fixture
def exposure_config():
    return ExposureConfig(
        pressure_threshold=32.0,
        relief_confirmation_seconds=60.0,
        relief_rate=1.0,
        max_gap_seconds=30.0,
        max_accumulated_seconds=86400.0,
    )


@pytest.fixture
def scoring_config():
    return ScoringConfig(
        curve="saturating_exponential",
        saturation_seconds=7200.0,
        pressure_threshold=32.0,
        pressure_gain=1.0,
        max_pressure_factor=4.0,
        curve_params={"steepness": 3.0},
    )


@pytest.fixture
def instant_alert_config():
    """Alert config without dwell or confirmation delays."""
    return AlertConfig(
        warning_threshold=40.0,
        critical_threshold=75.0,
        hysteresis_margin=5.0,
        warning_dwell_seconds=0.0,
        critical_dwell_seconds=0.0,
        clearing_confirmation_seconds=0.0,
    )


@pytest.fixture
def alert_config():
    return AlertConfig(
        warning_threshold=40.0,
        critical_threshold=75.0,
        hysteresis_margin=5.0,
        warning_dwell_seconds=10.0,
        critical_dwell_seconds=10.0,
        clearing_confirmation_seconds=30.0,
    )


@pytest.fixture
def small_config(small_layout, exposure_config, scoring_config, alert_config):
    return PatientConfig(
        layout=small_layout,
        exposure=exposure_config,
        scoring=scoring_config,
        alerts=alert_config,
        aggregation="max",
    )


@pytest.fixture
def body_config(body_layout):
    return reference_config(body_layout, pressure_threshold=32.0)


@pytest.fixture
def engine():
    return RiskEngine()


@pytest.fixture
def make_frame():
    """Factory building a frame with given pressure per region."""

    def _make(layout, patient_id, timestamp, pressures=None, background=0.0):
        grid = np.full(layout.shape, background, dtype=np.float64)
        for region, value in (pressures or {}).items():
            grid[layout.indices(region)] = value
        return PressureFrame(patient_id, timestamp, grid)

    return _make
