"""Tests for frame recordings and replay."""

import numpy as np
import pytest

from graphene_trace.core.types import AlertState, PressureFrame
from graphene_trace.engine import RiskEngine, load_recording, replay, save_recording


@pytest.fixture
def frames(small_layout, make_frame):
    return [
        make_frame(small_layout, "bed-3", float(t), {"sacrum": 60.0, "heels": 33.0})
        for t in range(0, 1500, 2)
    ]


class TestRecording:
    """Tests for NPZ recordings."""

    def test_save_and_load(self, tmp_path, frames):
        path = save_recording(frames, tmp_path / "runs" / "bed-3.npz")
        assert path.exists()

        loaded = load_recording(path)
        assert len(loaded) == len(frames)
        assert loaded[0].patient_id == "bed-3"
        assert [f.timestamp for f in loaded] == [f.timestamp for f in frames]
        np.testing.assert_array_equal(loaded[-1].grid, frames[-1].grid)

    def test_empty_recording_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="empty"):
            save_recording([], tmp_path / "empty.npz")

    def test_mixed_patients_rejected(self, tmp_path, small_layout, make_frame):
        mixed = [make_frame(small_layout, "a", 0.0), make_frame(small_layout, "b", 1.0)]
        with pytest.raises(ValueError, match="one patient"):
            save_recording(mixed, tmp_path / "mixed.npz")

    def test_mixed_resolution_rejected(self, tmp_path):
        mixed = [
            PressureFrame("a", 0.0, np.zeros((4, 4))),
            PressureFrame("a", 1.0, np.zeros((4, 5))),
        ]
        with pytest.raises(ValueError, match="resolution"):
            save_recording(mixed, tmp_path / "mixed.npz")


class TestReplay:
    """Tests for replaying recordings through an engine."""

    def test_replay_matches_live_ingest(self, tmp_path, frames, small_config):
        live = RiskEngine()
        live.admit("bed-3", small_config)
        live_events = [e for f in frames for e in live.ingest(f)]

        path = save_recording(frames, tmp_path / "bed-3.npz")
        replayed = RiskEngine()
        replayed.admit("bed-3", small_config)
        outcomes = replay(replayed, load_recording(path))

        assert all(o.ok for o in outcomes)
        replay_events = [e for o in outcomes for e in o.events]
        assert replay_events == live_events
        assert replayed.snapshot("bed-3") == live.snapshot("bed-3")
        assert replayed.snapshot("bed-3").alert_states()["sacrum"] != AlertState.NORMAL
