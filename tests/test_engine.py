"""Tests for the risk engine orchestrator."""

import threading

import numpy as np
import pytest

from graphene_trace.core.errors import (
    OutOfOrderFrame,
    ResolutionMismatch,
    SensorGapDetected,
    UnknownPatient,
)
from graphene_trace.core.types import AlertState, ExposureState, PressureFrame
from graphene_trace.engine import RiskEngine


@pytest.fixture
def admitted(engine, small_config):
    engine.admit("p1", small_config)
    return engine


class TestAdmission:
    """Tests for admit/discharge lifecycle."""

    def test_admit(self, engine, small_config):
        engine.admit("p1", small_config)
        assert engine.is_admitted("p1")
        assert engine.patients == ["p1"]

    def test_double_admit_rejected(self, admitted, small_config):
        with pytest.raises(ValueError, match="already admitted"):
            admitted.admit("p1", small_config)

    def test_initial_snapshot(self, admitted):
        snapshot = admitted.snapshot("p1")

        assert snapshot.last_timestamp is None
        assert list(snapshot.regions.keys()) == ["shoulders", "sacrum", "heels"]
        assert set(snapshot.alert_states().values()) == {AlertState.NORMAL}

    def test_discharge(self, admitted, small_layout, make_frame):
        admitted.discharge("p1")

        assert not admitted.is_admitted("p1")
        with pytest.raises(UnknownPatient):
            admitted.ingest(make_frame(small_layout, "p1", 0.0))
        with pytest.raises(UnknownPatient):
            admitted.snapshot("p1")

    def test_discharge_unknown(self, engine):
        with pytest.raises(UnknownPatient):
            engine.discharge("ghost")

    def test_unknown_patient_frame(self, engine, small_layout, make_frame):
        with pytest.raises(UnknownPatient) as excinfo:
            engine.ingest(make_frame(small_layout, "ghost", 5.0))
        assert excinfo.value.patient_id == "ghost"
        assert excinfo.value.timestamp == 5.0

    def test_readmission_starts_fresh(self, admitted, small_config, small_layout, make_frame):
        for t in range(100):
            admitted.ingest(make_frame(small_layout, "p1", float(t), {"sacrum": 50.0}))
        admitted.discharge("p1")
        admitted.admit("p1", small_config)

        assert admitted.exposure_state("p1", "sacrum") == ExposureState()


class TestIngest:
    """Tests for frame ingestion."""

    def test_updates_region_status(self, admitted, small_layout, make_frame):
        for t in range(11):
            result = admitted.process(make_frame(small_layout, "p1", float(t), {"sacrum": 40.0}))

        sacrum = result.regions["sacrum"]
        assert sacrum.pressure == 40.0
        assert sacrum.accumulated_seconds == pytest.approx(10.0)
        assert sacrum.risk_score > 0.0
        assert result.regions["heels"].accumulated_seconds == 0.0
        assert result.max_risk_score == sacrum.risk_score

    def test_equal_timestamp_accepted(self, admitted, small_layout, make_frame):
        admitted.ingest(make_frame(small_layout, "p1", 10.0, {"sacrum": 40.0}))
        assert admitted.ingest(make_frame(small_layout, "p1", 10.0, {"sacrum": 40.0})) == []

        assert admitted.exposure_state("p1", "sacrum").accumulated_seconds == 0.0

    def test_out_of_order_rejected_without_state_change(self, admitted, small_layout, make_frame):
        for t in range(20):
            admitted.ingest(make_frame(small_layout, "p1", float(t), {"sacrum": 40.0}))
        before = admitted.snapshot("p1")

        with pytest.raises(OutOfOrderFrame) as excinfo:
            admitted.ingest(make_frame(small_layout, "p1", 5.0, {"sacrum": 90.0}))

        assert excinfo.value.last_timestamp == 19.0
        assert admitted.snapshot("p1") == before

    def test_resolution_mismatch_rejected_without_state_change(self, admitted, small_layout, make_frame):
        for t in range(20):
            admitted.ingest(make_frame(small_layout, "p1", float(t), {"sacrum": 40.0}))
        before = admitted.snapshot("p1")

        with pytest.raises(ResolutionMismatch):
            admitted.ingest(PressureFrame("p1", 20.0, np.full((8, 5), 90.0)))

        assert admitted.snapshot("p1") == before
        assert admitted.exposure_state("p1", "sacrum").last_update_time == 19.0

    def test_events_in_region_order(self, engine, small_config, small_layout, make_frame):
        engine.admit("p1", small_config)
        pressures = {"heels": 60.0, "shoulders": 60.0}
        events = []
        for t in range(0, 4000):
            events.extend(engine.ingest(make_frame(small_layout, "p1", float(t), pressures)))
            if events:
                break

        assert [e.region for e in events] == ["shoulders", "heels"]
        assert all(e.to_state == AlertState.WARNING for e in events)

    def test_exposure_state_unknown_region(self, admitted):
        with pytest.raises(KeyError):
            admitted.exposure_state("p1", "elbows")


class TestSustainedPressureScenario:
    """Two hours of constant sacral loading at 1 Hz."""

    def test_single_warning_then_critical(self, engine, body_config, body_layout, make_frame):
        engine.admit("bed-1", body_config)

        events = []
        result = None
        for t in range(0, 7201):
            result = engine.process(make_frame(body_layout, "bed-1", float(t), {"sacrum": 40.0}))
            events.extend(result.events)

        assert [(e.region, e.from_state, e.to_state) for e in events] == [
            ("sacrum", AlertState.NORMAL, AlertState.WARNING),
            ("sacrum", AlertState.WARNING, AlertState.CRITICAL),
        ]
        warning, critical = events
        assert 900.0 <= warning.timestamp <= 960.0
        assert 2350.0 <= critical.timestamp <= 2450.0

        sacrum = result.regions["sacrum"]
        assert sacrum.accumulated_seconds == pytest.approx(7200.0)
        assert sacrum.risk_score == pytest.approx(100.0)
        assert sacrum.alert_state == AlertState.CRITICAL

    def test_dropout_holds_exposure(self, engine, body_config, body_layout, make_frame):
        engine.admit("bed-1", body_config)
        for t in range(0, 601):
            engine.ingest(make_frame(body_layout, "bed-1", float(t), {"sacrum": 40.0}))

        result = engine.process(make_frame(body_layout, "bed-1", 1200.0, {"sacrum": 40.0}))

        assert len(result.gaps) == 1
        gap = result.gaps[0]
        assert isinstance(gap, SensorGapDetected)
        assert (gap.gap_start, gap.gap_end) == (600.0, 1200.0)
        assert result.regions["sacrum"].accumulated_seconds == pytest.approx(600.0)

        for t in range(1201, 1301):
            result = engine.process(make_frame(body_layout, "bed-1", float(t), {"sacrum": 40.0}))
        assert result.gaps == []
        assert result.regions["sacrum"].accumulated_seconds == pytest.approx(700.0)

    def test_repositioning_clears_alert(self, engine, body_config, body_layout, make_frame):
        engine.admit("bed-1", body_config)
        for t in range(0, 1200):
            engine.ingest(make_frame(body_layout, "bed-1", float(t), {"sacrum": 40.0}))
        assert engine.snapshot("bed-1").alert_states()["sacrum"] == AlertState.WARNING

        events = []
        for t in range(1200, 3000):
            events.extend(engine.ingest(make_frame(body_layout, "bed-1", float(t))))

        assert [(e.from_state, e.to_state) for e in events] == [
            (AlertState.WARNING, AlertState.CLEARING),
            (AlertState.CLEARING, AlertState.NORMAL),
        ]
        assert engine.snapshot("bed-1").alert_states()["sacrum"] == AlertState.NORMAL


class TestRepeatsAndDips:
    """Duplicate frames and brief pressure dips must not produce alerts."""

    def test_duplicate_frame_emits_nothing(self, engine, body_config, body_layout, make_frame):
        engine.admit("bed-1", body_config)

        events = []
        for t in range(0, 2501):
            frame = make_frame(body_layout, "bed-1", float(t), {"sacrum": 40.0})
            events.extend(engine.ingest(frame))
            assert engine.ingest(frame) == []

        assert [(e.from_state, e.to_state) for e in events] == [
            (AlertState.NORMAL, AlertState.WARNING),
            (AlertState.WARNING, AlertState.CRITICAL),
        ]
        assert engine.exposure_state("bed-1", "sacrum").accumulated_seconds == pytest.approx(2500.0)

    def test_oscillation_matches_continuous_loading(self, body_config, body_layout, make_frame):
        """Test that toggling 40/20 mmHg every 5 s alerts exactly like a constant 40 mmHg."""
        continuous = RiskEngine()
        oscillating = RiskEngine()
        continuous.admit("bed-1", body_config)
        oscillating.admit("bed-1", body_config)

        steady_events, toggled_events = [], []
        for t in range(0, 3001):
            pressure = 40.0 if (t // 5) % 2 == 0 else 20.0
            steady_events.extend(
                continuous.ingest(make_frame(body_layout, "bed-1", float(t), {"sacrum": 40.0}))
            )
            toggled_events.extend(
                oscillating.ingest(make_frame(body_layout, "bed-1", float(t), {"sacrum": pressure}))
            )

        assert [(e.from_state, e.to_state, e.timestamp) for e in toggled_events] == [
            (e.from_state, e.to_state, e.timestamp) for e in steady_events
        ]
        assert [e.to_state for e in toggled_events] == [AlertState.WARNING, AlertState.CRITICAL]

        steady = continuous.exposure_state("bed-1", "sacrum")
        toggled = oscillating.exposure_state("bed-1", "sacrum")
        assert toggled.accumulated_seconds == pytest.approx(steady.accumulated_seconds)

    def test_brief_dip_keeps_critical(self, engine, body_config, body_layout, make_frame):
        """Test that a 5 s dip below threshold does not clear and re-raise CRITICAL."""
        engine.admit("bed-1", body_config)

        before, after = [], []
        for t in range(0, 2001):
            pressure = 20.0 if 1801 <= t <= 1805 else 64.0
            events = engine.ingest(make_frame(body_layout, "bed-1", float(t), {"sacrum": pressure}))
            (before if t < 1800 else after).extend(events)

        assert [e.to_state for e in before] == [AlertState.WARNING, AlertState.CRITICAL]
        assert after == []
        assert engine.snapshot("bed-1").alert_states()["sacrum"] == AlertState.CRITICAL
        assert engine.exposure_state("bed-1", "sacrum").accumulated_seconds == pytest.approx(2000.0)

    def test_confirmed_relief_lowers_score(self, engine, body_config, body_layout, make_frame):
        engine.admit("bed-1", body_config)
        for t in range(0, 1001):
            engine.ingest(make_frame(body_layout, "bed-1", float(t), {"sacrum": 64.0}))

        held = engine.process(make_frame(body_layout, "bed-1", 1030.0, {"sacrum": 20.0}))
        released = engine.process(make_frame(body_layout, "bed-1", 1060.0, {"sacrum": 20.0}))

        # Unconfirmed dip: scored at the loaded pressure, confirmed: at the dip pressure
        assert held.regions["sacrum"].risk_score > released.regions["sacrum"].risk_score
        assert engine.exposure_state("bed-1", "sacrum").scoring_pressure == 20.0


class TestBatch:
    """Tests for batch ingestion and patient isolation."""

    def test_bad_frame_does_not_affect_other_patient(self, engine, small_config, small_layout, make_frame):
        engine.admit("p1", small_config)
        engine.admit("p2", small_config)

        frames = []
        for t in range(30):
            frames.append(make_frame(small_layout, "p1", float(t), {"sacrum": 40.0}))
            frames.append(make_frame(small_layout, "p2", float(t), {"sacrum": 40.0}))
        frames.insert(21, make_frame(small_layout, "p1", 2.0, {"sacrum": 40.0}))
        frames.insert(31, PressureFrame("p1", 30.0, np.zeros((3, 3))))
        frames.append(make_frame(small_layout, "ghost", 1.0))

        outcomes = engine.ingest_batch(frames)

        assert len(outcomes) == len(frames)
        errors = [o.error for o in outcomes if not o.ok]
        assert [type(e) for e in errors] == [OutOfOrderFrame, ResolutionMismatch, UnknownPatient]
        assert all(o.events == [] for o in outcomes if not o.ok)

        p1 = engine.exposure_state("p1", "sacrum")
        p2 = engine.exposure_state("p2", "sacrum")
        assert p1 == p2
        assert p2.accumulated_seconds == pytest.approx(29.0)


class TestConcurrency:
    """Tests for thread-safe ingestion."""

    def test_parallel_patients(self, engine, small_config, small_layout, make_frame):
        patient_ids = [f"p{i}" for i in range(6)]
        for pid in patient_ids:
            engine.admit(pid, small_config)

        def feed(pid):
            for t in range(300):
                engine.ingest(make_frame(small_layout, pid, float(t), {"sacrum": 40.0}))

        threads = [threading.Thread(target=feed, args=(pid,)) for pid in patient_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for pid in patient_ids:
            state = engine.exposure_state(pid, "sacrum")
            assert state.accumulated_seconds == pytest.approx(299.0)
            assert engine.snapshot(pid).last_timestamp == 299.0

    def test_discharge_during_ingest(self, engine, small_config, small_layout, make_frame):
        engine.admit("p1", small_config)
        outcomes = []
        started = threading.Event()

        def feed():
            t = 0
            failures = 0
            while failures < 20 and t < 1_000_000:
                frame = make_frame(small_layout, "p1", float(t), {"sacrum": 40.0})
                (outcome,) = engine.ingest_batch([frame])
                outcomes.append(outcome)
                if not outcome.ok:
                    failures += 1
                started.set()
                t += 1

        thread = threading.Thread(target=feed)
        thread.start()
        started.wait(timeout=5.0)
        engine.discharge("p1")
        thread.join()

        assert not engine.is_admitted("p1")
        oks = [o.ok for o in outcomes]
        first_failure = oks.index(False)
        assert all(oks[:first_failure])
        assert not any(oks[first_failure:])
        assert all(isinstance(o.error, UnknownPatient) for o in outcomes[first_failure:])


def test_engine_starts_empty():
    assert RiskEngine().patients == []
