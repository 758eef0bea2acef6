#!/usr/bin/env python3
"""Sustained pressure risk example.

This example demonstrates how to:
1. Build a supine body region layout for a sensor mat
2. Admit a patient with the clinical reference configuration
3. Stream synthetic frames with sacral loading and a repositioning turn
4. Print alert transitions and the final region status

Usage:
    python examples/sustained_pressure_demo.py
    python examples/sustained_pressure_demo.py --pressure 55 --turn-at 3000
    python examples/sustained_pressure_demo.py --save recording.npz
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from graphene_trace import PressureFrame, RegionLayout, RiskEngine, reference_config
from graphene_trace.engine import load_config, save_recording


def synthetic_frame(layout, patient_id, timestamp, pressure, turned, rng):
    """Sensor frame with a loaded sacrum (or left hip once turned) plus noise."""
    grid = rng.uniform(0.0, 8.0, size=layout.shape)
    if turned:
        rows, cols = layout.indices("hips")
        left = cols < layout.cols // 2
        grid[rows[left], cols[left]] = pressure
    else:
        grid[layout.indices("sacrum")] = pressure + rng.normal(0.0, 1.0)
    return PressureFrame(patient_id, timestamp, np.clip(grid, 0.0, None))


def main():
    parser = argparse.ArgumentParser(description="Sustained pressure risk example")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML patient configuration (default: reference body layout)",
    )
    parser.add_argument(
        "--pressure",
        type=float,
        default=40.0,
        help="Loaded region pressure in mmHg (default: 40)",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=7200.0,
        help="Simulated duration in seconds (default: 7200)",
    )
    parser.add_argument(
        "--turn-at",
        type=float,
        default=None,
        help="Time in seconds at which the patient is repositioned",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=1.0,
        help="Frame rate in Hz (default: 1)",
    )
    parser.add_argument(
        "--save",
        type=Path,
        default=None,
        help="Save the generated frames as an NPZ recording",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show engine log messages",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=" * 60)
    print("GrapheneTrace - Sustained Pressure Example")
    print("=" * 60)

    if args.config is not None:
        config = load_config(args.config)
    else:
        config = reference_config(RegionLayout.body_layout())
    layout = config.layout

    print(f"\nConfiguration:")
    print(f"  Grid size: {layout.rows} x {layout.cols}")
    print(f"  Regions: {', '.join(layout.region_names)}")
    print(f"  Threshold: {config.exposure.pressure_threshold:.0f} mmHg")
    print(
        f"  Alerts: warning >= {config.alerts.warning_threshold:.0f}, "
        f"critical >= {config.alerts.critical_threshold:.0f}"
    )

    engine = RiskEngine()
    engine.admit("demo-bed", config)
    rng = np.random.default_rng(42)

    step = 1.0 / args.rate
    timestamps = np.arange(0.0, args.duration + step / 2, step)
    frames = []

    print(f"\nStreaming {len(timestamps)} frames at {args.pressure:.0f} mmHg...")
    for t in timestamps:
        turned = args.turn_at is not None and t >= args.turn_at
        frame = synthetic_frame(layout, "demo-bed", float(t), args.pressure, turned, rng)
        frames.append(frame)

        for event in engine.ingest(frame):
            print(
                f"  t={event.timestamp:7.0f}s  {event.region:12s} "
                f"{event.from_state.value:>8s} -> {event.to_state.value:<8s} "
                f"(score {event.risk_score:5.1f})"
            )

    snapshot = engine.snapshot("demo-bed")
    print(f"\nRegion status at t={snapshot.last_timestamp:.0f}s:")
    for name, status in snapshot.regions.items():
        if status.accumulated_seconds > 0:
            print(
                f"  {name:12s}: {status.alert_state.value:8s} "
                f"score={status.risk_score:5.1f} "
                f"exposure={status.accumulated_seconds / 60:6.1f} min"
            )

    if args.save is not None:
        path = save_recording(frames, args.save)
        print(f"\nSaved recording: {path}")

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
