"""Core type definitions for the pressure exposure risk engine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray

from graphene_trace.core.errors import SensorGapDetected


@dataclass(frozen=True, eq=False)
class PressureFrame:
    """One timestamped spatial pressure grid for one patient.

    The grid is copied into a read-only array on construction, so a frame
    cannot change after it has been handed to the engine.

    Attributes:
        patient_id: Patient the sensor mat belongs to
        timestamp: Acquisition time in seconds since the UTC epoch
        grid: Pressure readings (rows, cols) in mmHg, all non-negative
    """

    patient_id: str
    timestamp: float
    grid: NDArray[np.float64]

    def __post_init__(self) -> None:
        """Validate and freeze the pressure grid."""
        grid = np.array(self.grid, dtype=np.float64)

        if grid.ndim != 2:
            raise ValueError(f"grid must be 2D, got shape {grid.shape}")
        if grid.size == 0:
            raise ValueError("grid must not be empty")
        if not np.isfinite(grid).all():
            raise ValueError("grid contains non-finite readings")
        if (grid < 0).any():
            raise ValueError("grid contains negative pressure readings")
        if not np.isfinite(self.timestamp):
            raise ValueError(f"timestamp must be finite, got {self.timestamp}")

        grid.setflags(write=False)
        object.__setattr__(self, "grid", grid)
        object.__setattr__(self, "timestamp", float(self.timestamp))

    @classmethod
    def from_datetime(
        cls, patient_id: str, when: datetime, grid: NDArray[np.float64]
    ) -> "PressureFrame":
        """Create a frame from a timezone-aware datetime.

        Args:
            patient_id: Patient identifier
            when: Acquisition time (naive datetimes are rejected)
            grid: Pressure readings in mmHg

        Returns:
            Frame stamped in UTC epoch seconds
        """
        if when.tzinfo is None:
            raise ValueError("frame datetime must be timezone-aware")
        return cls(patient_id, when.astimezone(timezone.utc).timestamp(), grid)

    @property
    def shape(self) -> tuple[int, int]:
        """Grid dimensions (rows, cols)."""
        return self.grid.shape  # type: ignore


@dataclass(frozen=True)
class RegionDefinition:
    """A named anatomical region and the sensor cells it covers.

    Attributes:
        name: Region name (e.g. "sacrum")
        cells: (row, col) coordinates, normalised to a sorted tuple
    """

    name: str
    cells: tuple[tuple[int, int], ...]

    def __post_init__(self) -> None:
        cells = tuple(sorted({(int(r), int(c)) for r, c in self.cells}))
        object.__setattr__(self, "cells", cells)

    @property
    def size(self) -> int:
        """Number of cells in the region."""
        return len(self.cells)


@dataclass(frozen=True)
class RegionReading:
    """Aggregated pressure for one region in one frame.

    Attributes:
        region: Region name
        pressure: Aggregated value used for exposure tracking (mmHg)
        peak_pressure: Maximum cell pressure in the region
        mean_pressure: Mean cell pressure over the region
    """

    region: str
    pressure: float
    peak_pressure: float
    mean_pressure: float


@dataclass(frozen=True)
class ExposureState:
    """Accumulated time above threshold for one patient region.

    Attributes:
        accumulated_seconds: Time spent loaded above threshold (>= 0)
        last_update_time: Timestamp of the last frame applied (None before first)
        current_pressure: Region pressure at the last frame
        relief_since: Start of the current continuous sub-threshold period
        scoring_pressure: Pressure the risk score is computed from; holds the
            last loaded pressure until relief is confirmed
    """

    accumulated_seconds: float = 0.0
    last_update_time: Optional[float] = None
    current_pressure: float = 0.0
    relief_since: Optional[float] = None
    scoring_pressure: float = 0.0


class AlertState(str, Enum):
    """Alert lifecycle states for a patient region."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"
    CLEARING = "clearing"


@dataclass(frozen=True)
class AlertEvent:
    """A single alert state transition.

    Attributes:
        patient_id: Patient identifier
        region: Region name
        from_state: State before the transition
        to_state: State after the transition
        timestamp: Frame timestamp that confirmed the transition
        risk_score: Risk score at that frame (0-100)
    """

    patient_id: str
    region: str
    from_state: AlertState
    to_state: AlertState
    timestamp: float
    risk_score: float

    @property
    def is_escalation(self) -> bool:
        """Whether the transition raises the alert level."""
        return self.to_state in (AlertState.WARNING, AlertState.CRITICAL)

    def to_dict(self) -> dict[str, Any]:
        return {
            "patient_id": self.patient_id,
            "region": self.region,
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "timestamp": self.timestamp,
            "risk_score": self.risk_score,
        }


@dataclass(frozen=True)
class RegionStatus:
    """Derived per-region status after a frame."""

    region: str
    pressure: float
    accumulated_seconds: float
    risk_score: float
    alert_state: AlertState


@dataclass
class FrameResult:
    """Everything the engine produced for one ingested frame.

    Attributes:
        patient_id: Patient identifier
        timestamp: Frame timestamp
        events: Alert transitions in region-definition order
        gaps: Sensor gaps detected at this frame
        regions: Status per region in region-definition order
    """

    patient_id: str
    timestamp: float
    events: list[AlertEvent] = field(default_factory=list)
    gaps: list[SensorGapDetected] = field(default_factory=list)
    regions: dict[str, RegionStatus] = field(default_factory=dict)

    @property
    def max_risk_score(self) -> float:
        """Highest region risk score in this frame."""
        return max((s.risk_score for s in self.regions.values()), default=0.0)


@dataclass(frozen=True)
class PatientSnapshot:
    """Read-only view of a patient's current state bundle."""

    patient_id: str
    last_timestamp: Optional[float]
    regions: dict[str, RegionStatus]

    def alert_states(self) -> dict[str, AlertState]:
        """Current alert state per region."""
        return {name: s.alert_state for name, s in self.regions.items()}
