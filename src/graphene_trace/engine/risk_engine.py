"""Risk engine orchestrator: per-patient state and the per-frame pipeline."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, Optional

from graphene_trace.alerts.state_machine import AlertStateMachine, AlertTrack
from graphene_trace.core.errors import (
    GrapheneTraceError,
    OutOfOrderFrame,
    SensorGapDetected,
    UnknownPatient,
)
from graphene_trace.core.types import (
    AlertEvent,
    AlertState,
    ExposureState,
    FrameResult,
    PatientSnapshot,
    PressureFrame,
    RegionStatus,
)
from graphene_trace.engine.config import PatientConfig
from graphene_trace.exposure.tracker import ExposureTracker
from graphene_trace.regions.mapper import RegionMapper
from graphene_trace.scoring.risk_scorer import RiskScorer

logger = logging.getLogger(__name__)


@dataclass
class IngestOutcome:
    """Per-frame outcome of a batch or lane submission.

    Exactly one of ``result`` and ``error`` is set.
    """

    frame: PressureFrame
    result: Optional[FrameResult] = None
    error: Optional[GrapheneTraceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def events(self) -> list[AlertEvent]:
        """Alert events for the frame (empty if it was rejected)."""
        return self.result.events if self.result is not None else []


@dataclass
class _PatientBundle:
    """All mutable state for one admitted patient, guarded by ``lock``."""

    patient_id: str
    config: PatientConfig
    mapper: RegionMapper
    tracker: ExposureTracker
    scorer: RiskScorer
    machine: AlertStateMachine
    exposure: dict[str, ExposureState]
    alerts: dict[str, AlertTrack]
    status: dict[str, RegionStatus]
    last_timestamp: Optional[float] = None
    active: bool = True
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def create(cls, patient_id: str, config: PatientConfig) -> "_PatientBundle":
        names = config.layout.region_names
        return cls(
            patient_id=patient_id,
            config=config,
            mapper=RegionMapper(config.layout, config.aggregation, config.smooth_sigma),
            tracker=ExposureTracker(config.exposure),
            scorer=RiskScorer(config.scoring),
            machine=AlertStateMachine(config.alerts),
            exposure={name: ExposureState() for name in names},
            alerts={name: AlertStateMachine.initial_track() for name in names},
            status={
                name: RegionStatus(name, 0.0, 0.0, 0.0, AlertState.NORMAL)
                for name in names
            },
        )


class RiskEngine:
    """Pressure exposure risk engine.

    Feeds each frame through Region Mapper -> Exposure Tracker -> Risk Scorer
    -> Alert State Machine for every configured region, and returns the alert
    transitions in region-definition order.

    Frames of one patient are serialised by a lock on that patient's state
    bundle; frames of different patients can be ingested in parallel from
    separate threads. A frame is evaluated against the current state first and
    committed only when the whole frame succeeds, so a rejected frame leaves
    the previous state untouched.
    """

    def __init__(self):
        """Initialize an engine with no admitted patients."""
        self._patients: dict[str, _PatientBundle] = {}
        self._lock = threading.Lock()

    @property
    def patients(self) -> list[str]:
        """Identifiers of currently admitted patients."""
        with self._lock:
            return list(self._patients.keys())

    def is_admitted(self, patient_id: str) -> bool:
        """Whether a patient currently has a state bundle."""
        with self._lock:
            return patient_id in self._patients

    def admit(self, patient_id: str, config: PatientConfig) -> None:
        """Create the state bundle for a patient.

        Args:
            patient_id: Patient identifier
            config: Patient configuration, fixed for the lifetime of the bundle

        Raises:
            ValueError: If the patient is already admitted
        """
        bundle = _PatientBundle.create(patient_id, config)
        with self._lock:
            if patient_id in self._patients:
                raise ValueError(f"Patient '{patient_id}' is already admitted")
            self._patients[patient_id] = bundle

        logger.info(
            "Admitted patient %s (%dx%d grid, %d regions)",
            patient_id,
            config.layout.rows,
            config.layout.cols,
            len(config.layout),
        )

    def discharge(self, patient_id: str) -> None:
        """Tear down a patient's state bundle.

        Safe to call while a frame for the patient is being ingested: the
        in-flight frame finishes first, later frames fail with UnknownPatient.

        Raises:
            UnknownPatient: If the patient is not admitted
        """
        with self._lock:
            bundle = self._patients.pop(patient_id, None)
        if bundle is None:
            raise UnknownPatient(patient_id)

        with bundle.lock:
            bundle.active = False

        logger.info("Discharged patient %s", patient_id)

    def _bundle(self, patient_id: str, timestamp: Optional[float] = None) -> _PatientBundle:
        with self._lock:
            bundle = self._patients.get(patient_id)
        if bundle is None:
            raise UnknownPatient(patient_id, timestamp)
        return bundle

    def process(self, frame: PressureFrame) -> FrameResult:
        """Run one frame through the pipeline.

        Args:
            frame: Pressure frame

        Returns:
            FrameResult with alert events, sensor gaps and region status

        Raises:
            UnknownPatient: If the patient is not admitted (or was discharged)
            OutOfOrderFrame: If the frame precedes the last processed frame
            ResolutionMismatch: If the grid shape differs from the layout
        """
        bundle = self._bundle(frame.patient_id, frame.timestamp)

        with bundle.lock:
            if not bundle.active:
                raise UnknownPatient(frame.patient_id, frame.timestamp)

            previous = bundle.last_timestamp
            if previous is not None and frame.timestamp < previous:
                logger.warning(
                    "Rejected out-of-order frame for patient %s (t=%.3f < %.3f)",
                    frame.patient_id,
                    frame.timestamp,
                    previous,
                )
                raise OutOfOrderFrame(frame.patient_id, frame.timestamp, previous)

            result, exposure, alerts = self._evaluate(bundle, frame)

            bundle.exposure = exposure
            bundle.alerts = alerts
            bundle.status = dict(result.regions)
            bundle.last_timestamp = frame.timestamp

        for gap in result.gaps:
            logger.warning(str(gap))
        for event in result.events:
            logger.info(
                "Patient %s region %s: %s -> %s (score %.1f)",
                event.patient_id,
                event.region,
                event.from_state.value,
                event.to_state.value,
                event.risk_score,
            )

        return result

    def _evaluate(
        self, bundle: _PatientBundle, frame: PressureFrame
    ) -> tuple[FrameResult, dict[str, ExposureState], dict[str, AlertTrack]]:
        """Compute the frame's outcome and new states without mutating the bundle."""
        readings = bundle.mapper.map_frame(frame)

        previous = bundle.last_timestamp
        gap = previous is not None and bundle.tracker.is_gap(frame.timestamp - previous)

        result = FrameResult(patient_id=frame.patient_id, timestamp=frame.timestamp)
        if gap:
            result.gaps.append(
                SensorGapDetected(frame.patient_id, previous, frame.timestamp)
            )

        exposure: dict[str, ExposureState] = {}
        alerts: dict[str, AlertTrack] = {}
        for name in bundle.config.layout.region_names:
            update = bundle.tracker.update(bundle.exposure[name], readings[name], frame.timestamp)
            state = update.state
            score = bundle.scorer.score(state.accumulated_seconds, state.scoring_pressure)
            track, events = bundle.machine.evaluate(
                bundle.alerts[name],
                score,
                frame.timestamp,
                frame.patient_id,
                name,
                restart_timers=gap,
            )

            exposure[name] = state
            alerts[name] = track
            result.events.extend(events)
            result.regions[name] = RegionStatus(
                region=name,
                pressure=state.current_pressure,
                accumulated_seconds=state.accumulated_seconds,
                risk_score=score,
                alert_state=track.state,
            )

        return result, exposure, alerts

    def ingest(self, frame: PressureFrame) -> list[AlertEvent]:
        """Ingest one frame and return the alert transitions it caused.

        Args:
            frame: Pressure frame

        Returns:
            Alert events in region-definition order (empty if nothing changed)

        Raises:
            UnknownPatient: If the patient is not admitted (or was discharged)
            OutOfOrderFrame: If the frame precedes the last processed frame
            ResolutionMismatch: If the grid shape differs from the layout
        """
        return self.process(frame).events

    def ingest_batch(self, frames: Iterable[PressureFrame]) -> list[IngestOutcome]:
        """Ingest frames in order, capturing each frame's error.

        A rejected frame never stops the batch, so one patient's bad data
        cannot affect the processing of another patient's frames.

        Args:
            frames: Frames to ingest, possibly for several patients

        Returns:
            One outcome per frame, in input order
        """
        outcomes = []
        for frame in frames:
            try:
                outcomes.append(IngestOutcome(frame, result=self.process(frame)))
            except GrapheneTraceError as e:
                logger.warning("Frame for patient %s rejected: %s", frame.patient_id, e)
                outcomes.append(IngestOutcome(frame, error=e))
        return outcomes

    def snapshot(self, patient_id: str) -> PatientSnapshot:
        """Read-only view of a patient's current region status.

        Raises:
            UnknownPatient: If the patient is not admitted
        """
        bundle = self._bundle(patient_id)
        with bundle.lock:
            if not bundle.active:
                raise UnknownPatient(patient_id)
            return PatientSnapshot(
                patient_id=patient_id,
                last_timestamp=bundle.last_timestamp,
                regions=dict(bundle.status),
            )

    def exposure_state(self, patient_id: str, region: str) -> ExposureState:
        """Current exposure state of one region.

        Raises:
            UnknownPatient: If the patient is not admitted
            KeyError: If the region is not in the patient's layout
        """
        bundle = self._bundle(patient_id)
        with bundle.lock:
            if not bundle.active:
                raise UnknownPatient(patient_id)
            return bundle.exposure[region]
