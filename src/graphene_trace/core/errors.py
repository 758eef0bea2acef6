"""Error taxonomy for the pressure exposure risk engine."""

from typing import Optional


class GrapheneTraceError(Exception):
    """Base class for all risk engine errors."""


class ConfigurationError(GrapheneTraceError, ValueError):
    """Malformed region, grid or engine configuration.

    Raised while building configuration objects, before any frame is processed.
    """


class FrameError(GrapheneTraceError):
    """A single frame was rejected.

    Attributes:
        patient_id: Patient the frame belongs to
        timestamp: Frame timestamp in seconds
    """

    def __init__(self, message: str, patient_id: str, timestamp: float):
        super().__init__(message)
        self.patient_id = patient_id
        self.timestamp = timestamp


class OutOfOrderFrame(FrameError):
    """Frame timestamp precedes the patient's last processed timestamp."""

    def __init__(self, patient_id: str, timestamp: float, last_timestamp: float):
        super().__init__(
            f"Frame for patient '{patient_id}' at t={timestamp:.3f} precedes "
            f"last processed frame at t={last_timestamp:.3f}",
            patient_id,
            timestamp,
        )
        self.last_timestamp = last_timestamp


class UnknownPatient(FrameError, LookupError):
    """Frame for a patient that was never admitted or has been discharged."""

    def __init__(self, patient_id: str, timestamp: Optional[float] = None):
        FrameError.__init__(
            self,
            f"Patient '{patient_id}' is not admitted",
            patient_id,
            timestamp if timestamp is not None else float("nan"),
        )


class ResolutionMismatch(ConfigurationError, FrameError):
    """Frame grid shape differs from the patient's configured sensor layout."""

    def __init__(
        self,
        patient_id: str,
        timestamp: float,
        expected: tuple[int, int],
        actual: tuple[int, ...],
    ):
        FrameError.__init__(
            self,
            f"Frame for patient '{patient_id}' has grid shape {actual}, "
            f"layout expects {expected}",
            patient_id,
            timestamp,
        )
        self.expected = expected
        self.actual = actual


class SensorGapDetected(GrapheneTraceError):
    """Frames stopped arriving for longer than the configured maximum gap.

    Non-fatal: the engine reports instances in its frame results instead of
    raising them. Exposure is neither accumulated nor reset across the gap.

    Attributes:
        patient_id: Patient whose sensor dropped out
        gap_start: Timestamp of the last frame before the gap
        gap_end: Timestamp of the first frame after the gap
    """

    def __init__(self, patient_id: str, gap_start: float, gap_end: float):
        super().__init__(
            f"Sensor gap of {gap_end - gap_start:.1f}s for patient '{patient_id}' "
            f"between t={gap_start:.3f} and t={gap_end:.3f}"
        )
        self.patient_id = patient_id
        self.gap_start = gap_start
        self.gap_end = gap_end

    @property
    def duration(self) -> float:
        """Length of the gap in seconds."""
        return self.gap_end - self.gap_start


class IllegalTransition(GrapheneTraceError):
    """An alert transition outside the transition table was attempted."""
