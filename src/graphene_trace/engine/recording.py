"""Frame recordings for offline replay through the risk engine."""

from pathlib import Path
from typing import Iterable, Sequence, Union

import numpy as np

from graphene_trace.core.types import PressureFrame
from graphene_trace.engine.risk_engine import IngestOutcome, RiskEngine


def save_recording(
    frames: Sequence[PressureFrame],
    path: Union[str, Path],
) -> Path:
    """Save one patient's frame sequence to NPZ.

    Args:
        frames: Frames of a single patient, in timestamp order
        path: Output file path

    Returns:
        Path to saved file

    Raises:
        ValueError: If frames are empty, mix patients or differ in resolution
    """
    if not frames:
        raise ValueError("cannot save an empty recording")

    patient_ids = {f.patient_id for f in frames}
    if len(patient_ids) != 1:
        raise ValueError(f"recording must hold one patient, got {sorted(patient_ids)}")
    shapes = {f.shape for f in frames}
    if len(shapes) != 1:
        raise ValueError(f"recording frames differ in resolution: {sorted(shapes)}")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    grids = np.stack([f.grid for f in frames])
    timestamps = np.array([f.timestamp for f in frames], dtype=np.float64)

    np.savez(path, grids=grids, timestamps=timestamps, patient_id=np.array(patient_ids.pop()))

    return path


def load_recording(path: Union[str, Path]) -> list[PressureFrame]:
    """Load a frame sequence saved by :func:`save_recording`.

    Args:
        path: Path to NPZ file

    Returns:
        Frames in recorded order
    """
    with np.load(Path(path)) as data:
        grids = data["grids"]
        timestamps = data["timestamps"]
        patient_id = str(data["patient_id"])

    if grids.ndim != 3 or len(grids) != len(timestamps):
        raise ValueError(
            f"malformed recording: grids {grids.shape}, timestamps {timestamps.shape}"
        )

    return [
        PressureFrame(patient_id, float(t), grid)
        for t, grid in zip(timestamps, grids)
    ]


def replay(engine: RiskEngine, frames: Iterable[PressureFrame]) -> list[IngestOutcome]:
    """Feed recorded frames through an engine.

    The patient must already be admitted; rejected frames are reported in
    their outcomes rather than stopping the replay.

    Args:
        engine: Risk engine
        frames: Frames to replay

    Returns:
        One outcome per frame
    """
    return engine.ingest_batch(frames)
