"""Partitioned frame dispatch: one ordered processing lane per patient partition."""

import logging
import threading
import zlib
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from graphene_trace.core.errors import GrapheneTraceError
from graphene_trace.core.types import PressureFrame
from graphene_trace.engine.risk_engine import IngestOutcome, RiskEngine

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[IngestOutcome], None]


class PatientLaneDispatcher:
    """Runs frames through a RiskEngine on patient-partitioned worker lanes.

    Each lane is a single-worker executor and every patient hashes to exactly
    one lane, so a patient's frames are processed in submission order and
    never concurrently, while different lanes run in parallel.

    Outcomes are handed to the optional ``on_outcome`` callback on a separate
    delivery thread, so slow notification or storage consumers never hold up
    frame processing.

    Attributes:
        engine: Risk engine receiving the frames
        num_lanes: Number of processing lanes
    """

    def __init__(
        self,
        engine: RiskEngine,
        num_lanes: int = 4,
        on_outcome: Optional[OutcomeCallback] = None,
    ):
        """Initialize dispatcher.

        Args:
            engine: Risk engine to feed
            num_lanes: Number of parallel processing lanes
            on_outcome: Optional consumer called with every outcome
        """
        if num_lanes < 1:
            raise ValueError(f"num_lanes must be >= 1, got {num_lanes}")

        self.engine = engine
        self.num_lanes = num_lanes
        self._on_outcome = on_outcome
        self._lanes = [
            ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"risk-lane-{i}")
            for i in range(num_lanes)
        ]
        self._delivery = ThreadPoolExecutor(max_workers=1, thread_name_prefix="risk-delivery")
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()
        self._closed = False

    def lane_for(self, patient_id: str) -> int:
        """Stable lane index for a patient."""
        return zlib.crc32(patient_id.encode("utf-8")) % self.num_lanes

    def _run(self, frame: PressureFrame) -> IngestOutcome:
        try:
            outcome = IngestOutcome(frame, result=self.engine.process(frame))
        except GrapheneTraceError as e:
            logger.warning("Frame for patient %s rejected: %s", frame.patient_id, e)
            outcome = IngestOutcome(frame, error=e)

        if self._on_outcome is not None:
            try:
                self._delivery.submit(self._deliver, outcome)
            except RuntimeError:
                # Delivery stopped by a non-waiting shutdown
                logger.warning(
                    "Outcome for patient %s not delivered: dispatcher shut down",
                    frame.patient_id,
                )
        return outcome

    def _deliver(self, outcome: IngestOutcome) -> None:
        try:
            self._on_outcome(outcome)  # type: ignore[misc]
        except Exception:
            logger.exception(
                "Outcome consumer failed for patient %s", outcome.frame.patient_id
            )

    def _track(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.add(future)

        def _done(f: Future) -> None:
            with self._pending_lock:
                self._pending.discard(f)

        future.add_done_callback(_done)

    def submit(self, frame: PressureFrame) -> "Future[IngestOutcome]":
        """Queue a frame on its patient's lane.

        Args:
            frame: Pressure frame

        Returns:
            Future resolving to the frame's outcome (never raises engine errors)

        Raises:
            RuntimeError: If the dispatcher has been shut down
        """
        if self._closed:
            raise RuntimeError("Dispatcher has been shut down")

        future = self._lanes[self.lane_for(frame.patient_id)].submit(self._run, frame)
        self._track(future)
        return future

    def submit_many(self, frames: Iterable[PressureFrame]) -> list["Future[IngestOutcome]"]:
        """Queue several frames, preserving per-patient order."""
        return [self.submit(frame) for frame in frames]

    def drain(self, timeout: Optional[float] = None) -> None:
        """Wait for every queued frame to finish processing.

        Args:
            timeout: Maximum seconds to wait per frame (None = no limit)
        """
        with self._pending_lock:
            pending = list(self._pending)
        for future in pending:
            future.result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting frames and shut down all lanes.

        Args:
            wait: Wait for queued frames and deliveries to complete
        """
        self._closed = True
        for lane in self._lanes:
            lane.shutdown(wait=wait)
        self._delivery.shutdown(wait=wait)

    def __enter__(self) -> "PatientLaneDispatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)
