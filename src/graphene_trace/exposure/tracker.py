"""Incremental tracking of time spent above the pressure threshold."""

import logging
from dataclasses import dataclass, replace
from typing import Optional

from graphene_trace.core.config import ExposureConfig
from graphene_trace.core.types import ExposureState, RegionReading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExposureUpdate:
    """Result of applying one reading to an exposure state.

    Attributes:
        state: New exposure state
        gap: Whether the interval since the previous frame was a sensor gap
        loaded_seconds: Seconds added to the accumulation
        relieved_seconds: Seconds of confirmed relief applied as decay
    """

    state: ExposureState
    gap: bool = False
    loaded_seconds: float = 0.0
    relieved_seconds: float = 0.0


class ExposureTracker:
    """Accumulates per-region exposure across successive frames.

    Each reading applies to the interval since the previous frame:
    - At or above threshold the interval is added to the accumulation
    - Below threshold the interval still counts as loaded until the relief
      has held continuously for ``relief_confirmation_seconds``; after that
      the accumulation decays linearly at ``relief_rate``
    - Until relief is confirmed the scoring pressure stays at the last loaded
      pressure, so a brief dip does not lower the risk score
    - An interval longer than ``max_gap_seconds`` is a sensor gap: nothing is
      accumulated or decayed and the relief timer restarts after the gap

    The tracker is stateless; states are immutable and every update returns
    a new one.

    Attributes:
        config: Exposure configuration
    """

    def __init__(self, config: ExposureConfig):
        """Initialize exposure tracker.

        Args:
            config: Exposure configuration
        """
        self.config = config

    @property
    def threshold(self) -> float:
        """Pressure threshold in mmHg."""
        return self.config.pressure_threshold

    def is_loaded(self, pressure: float) -> bool:
        """Whether a pressure counts as loading the tissue."""
        return pressure >= self.config.pressure_threshold

    def is_gap(self, elapsed: float) -> bool:
        """Whether a frame interval exceeds the maximum sensor gap."""
        return elapsed > self.config.max_gap_seconds

    def update(
        self,
        state: ExposureState,
        reading: RegionReading,
        timestamp: float,
    ) -> ExposureUpdate:
        """Apply a new region reading.

        Args:
            state: Previous exposure state for the region
            reading: Region reading for the new frame
            timestamp: Frame timestamp in seconds

        Returns:
            ExposureUpdate with the new state

        Raises:
            ValueError: If the timestamp precedes the state's last update
        """
        previous = state.last_update_time
        elapsed = 0.0 if previous is None else timestamp - previous
        if elapsed < 0:
            raise ValueError(
                f"timestamp {timestamp} precedes last update {previous}"
            )

        pressure = reading.pressure
        loaded = self.is_loaded(pressure)
        accumulated = state.accumulated_seconds
        relief_since = state.relief_since

        if self.is_gap(elapsed):
            logger.debug(
                "Gap of %.1fs on region %s, holding accumulation at %.1fs",
                elapsed,
                reading.region,
                accumulated,
            )
            relief_since = None if loaded else timestamp
            new_state = ExposureState(
                accumulated_seconds=accumulated,
                last_update_time=timestamp,
                current_pressure=pressure,
                relief_since=relief_since,
                scoring_pressure=self._scoring_pressure(
                    state, pressure, relief_since, timestamp
                ),
            )
            return ExposureUpdate(state=new_state, gap=True)

        if loaded:
            loaded_part = elapsed
            relief_part = 0.0
            relief_since = None
        else:
            if relief_since is None:
                relief_since = previous if previous is not None else timestamp
            # Relief only counts once it has held for the confirmation period
            confirmed_at = relief_since + self.config.relief_confirmation_seconds
            start = previous if previous is not None else timestamp
            loaded_part = min(elapsed, max(0.0, confirmed_at - start))
            relief_part = elapsed - loaded_part

        accumulated = min(accumulated + loaded_part, self.config.max_accumulated_seconds)
        accumulated = max(0.0, accumulated - relief_part * self.config.relief_rate)

        new_state = replace(
            state,
            accumulated_seconds=accumulated,
            last_update_time=timestamp,
            current_pressure=pressure,
            relief_since=relief_since,
            scoring_pressure=self._scoring_pressure(state, pressure, relief_since, timestamp),
        )
        return ExposureUpdate(
            state=new_state,
            loaded_seconds=loaded_part,
            relieved_seconds=relief_part,
        )

    def _scoring_pressure(
        self,
        state: ExposureState,
        pressure: float,
        relief_since: Optional[float],
        timestamp: float,
    ) -> float:
        # An unconfirmed dip keeps the last loaded pressure, like the accumulation
        if relief_since is None:
            return pressure
        if timestamp - relief_since >= self.config.relief_confirmation_seconds:
            return pressure
        return state.scoring_pressure

    def relief_confirmed(self, state: ExposureState, timestamp: float) -> bool:
        """Whether relief has held long enough for decay to apply at ``timestamp``."""
        if state.relief_since is None:
            return False
        return timestamp - state.relief_since >= self.config.relief_confirmation_seconds
