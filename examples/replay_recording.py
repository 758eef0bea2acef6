#!/usr/bin/env python3
"""Replay a saved frame recording through the risk engine.

Usage:
    python examples/replay_recording.py recording.npz
    python examples/replay_recording.py recording.npz --config patient.yaml --lanes 4
"""

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from graphene_trace import RegionLayout, RiskEngine, reference_config
from graphene_trace.engine import (
    PatientLaneDispatcher,
    load_config,
    load_recording,
    replay,
)


def main():
    parser = argparse.ArgumentParser(description="Replay an NPZ frame recording")
    parser.add_argument("recording", type=Path, help="Recording saved with save_recording")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML patient configuration (default: reference body layout)",
    )
    parser.add_argument(
        "--lanes",
        type=int,
        default=0,
        help="Replay through a lane dispatcher with this many lanes (default: direct)",
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    frames = load_recording(args.recording)
    if not frames:
        print("Recording is empty")
        return

    patient_id = frames[0].patient_id
    if args.config is not None:
        config = load_config(args.config)
    else:
        rows, cols = frames[0].shape
        config = reference_config(RegionLayout.body_layout(rows, cols))

    engine = RiskEngine()
    engine.admit(patient_id, config)

    print(f"Replaying {len(frames)} frames for patient {patient_id}...")
    if args.lanes > 0:
        with PatientLaneDispatcher(engine, num_lanes=args.lanes) as dispatcher:
            futures = dispatcher.submit_many(frames)
        outcomes = [f.result() for f in futures]
    else:
        outcomes = replay(engine, frames)

    rejected = Counter(type(o.error).__name__ for o in outcomes if not o.ok)
    events = [e for o in outcomes for e in o.events]

    print(f"\nProcessed: {sum(o.ok for o in outcomes)} frames")
    for name, count in rejected.items():
        print(f"Rejected ({name}): {count}")

    print(f"\nAlert transitions ({len(events)}):")
    for event in events:
        print(
            f"  t={event.timestamp:10.1f}  {event.region:12s} "
            f"{event.from_state.value} -> {event.to_state.value} "
            f"(score {event.risk_score:.1f})"
        )

    print("\nFinal alert states:")
    for name, state in engine.snapshot(patient_id).alert_states().items():
        print(f"  {name:12s}: {state.value}")


if __name__ == "__main__":
    main()
