"""Risk scoring from accumulated exposure and instantaneous pressure."""

import math

import numpy as np

from graphene_trace.core.config import ScoringConfig
from graphene_trace.core.constants import RISK_SCORE_MIN, RISK_SCORE_MAX
from graphene_trace.scoring.curves import RiskCurve, create_curve


class RiskScorer:
    """Converts exposure into a bounded 0-100 risk score.

    The score is a curve of effective exposure, where effective exposure is
    the accumulated time scaled up by how far the current pressure exceeds the
    threshold. Higher pressure therefore shortens the time to critical. The
    scorer is deterministic and holds no per-patient state.

    Attributes:
        config: Scoring configuration
        curve: Risk curve built from the configuration
    """

    def __init__(self, config: ScoringConfig):
        """Initialize risk scorer.

        Args:
            config: Scoring configuration
        """
        self.config = config
        self.curve: RiskCurve = create_curve(config.curve, **dict(config.curve_params))

    def pressure_factor(self, pressure: float) -> float:
        """Exposure speed-up for a given pressure.

        1.0 at or below threshold, rising linearly with the excess pressure
        and capped at ``max_pressure_factor``.
        """
        threshold = self.config.pressure_threshold
        excess = max(0.0, pressure - threshold) / threshold
        return min(self.config.max_pressure_factor, 1.0 + self.config.pressure_gain * excess)

    def score(self, accumulated_seconds: float, current_pressure: float) -> float:
        """Compute the risk score.

        Args:
            accumulated_seconds: Accumulated exposure in seconds
            current_pressure: Current region pressure in mmHg

        Returns:
            Risk score in [0, 100]
        """
        if not (math.isfinite(accumulated_seconds) and math.isfinite(current_pressure)):
            raise ValueError("score inputs must be finite")

        effective = max(0.0, accumulated_seconds) * self.pressure_factor(current_pressure)
        fraction = self.curve.evaluate(effective / self.config.saturation_seconds)
        return float(np.clip(fraction * RISK_SCORE_MAX, RISK_SCORE_MIN, RISK_SCORE_MAX))

    def seconds_until(
        self,
        target_score: float,
        accumulated_seconds: float,
        current_pressure: float,
    ) -> float:
        """Estimate sustained loading time until the score reaches a target.

        Assumes the current pressure is held. Useful for repositioning hints.

        Args:
            target_score: Score to reach (0-100)
            accumulated_seconds: Current accumulated exposure
            current_pressure: Current region pressure in mmHg

        Returns:
            Seconds until the target is reached (0 if already reached)
        """
        if self.score(accumulated_seconds, current_pressure) >= target_score:
            return 0.0
        if target_score > RISK_SCORE_MAX:
            return math.inf

        # Scores saturate once effective exposure reaches the window
        hi = self.config.saturation_seconds / self.pressure_factor(current_pressure)
        lo = max(0.0, accumulated_seconds)
        for _ in range(60):
            mid = (lo + hi) / 2
            if self.score(mid, current_pressure) >= target_score:
                hi = mid
            else:
                lo = mid
        return max(0.0, hi - accumulated_seconds)
