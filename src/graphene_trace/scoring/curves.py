"""Risk curves mapping normalised exposure to a risk fraction."""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from graphene_trace.core.constants import SATURATION_STEEPNESS
from graphene_trace.core.errors import ConfigurationError


class RiskCurve(ABC):
    """Abstract base for risk curves.

    A curve maps normalised exposure ``x >= 0`` (effective exposure divided by
    the saturation window) to a risk fraction in [0, 1]. Implementations must
    be continuous, non-decreasing, return 0 at ``x = 0`` and saturate at 1 for
    ``x >= 1``.
    """

    @abstractmethod
    def evaluate(self, x: float) -> float:
        """Evaluate the curve.

        Args:
            x: Normalised exposure (>= 0)

        Returns:
            Risk fraction in [0, 1]
        """
        pass

    @property
    def name(self) -> str:
        """Curve name."""
        return self.__class__.__name__


@dataclass
class SaturatingExponentialCurve(RiskCurve):
    """Exponential approach to saturation, rescaled to reach 1 exactly at x = 1.

    Attributes:
        steepness: Exponential rate; larger values front-load the risk
    """

    steepness: float = SATURATION_STEEPNESS

    def __post_init__(self) -> None:
        if not math.isfinite(self.steepness) or self.steepness <= 0:
            raise ConfigurationError(f"steepness must be positive, got {self.steepness}")
        self._norm = 1.0 - math.exp(-self.steepness)

    def evaluate(self, x: float) -> float:
        if x <= 0:
            return 0.0
        if x >= 1:
            return 1.0
        return (1.0 - math.exp(-self.steepness * x)) / self._norm


@dataclass
class PiecewiseLinearCurve(RiskCurve):
    """Linear interpolation between clinical breakpoints.

    Attributes:
        breakpoints: (x, risk) pairs with strictly increasing x starting at
            (0, 0), non-decreasing risk and final risk of 1
    """

    breakpoints: tuple[tuple[float, float], ...] = ((0.0, 0.0), (0.5, 0.35), (1.0, 1.0))

    def __post_init__(self) -> None:
        points = np.asarray(self.breakpoints, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2 or len(points) < 2:
            raise ConfigurationError("breakpoints must be at least two (x, risk) pairs")

        xs, ys = points[:, 0], points[:, 1]
        if xs[0] != 0.0 or ys[0] != 0.0:
            raise ConfigurationError("breakpoints must start at (0, 0)")
        if ys[-1] != 1.0 or xs[-1] > 1.0:
            raise ConfigurationError("breakpoints must reach risk 1 at or before x = 1")
        if (np.diff(xs) <= 0).any():
            raise ConfigurationError("breakpoint x values must be strictly increasing")
        if (np.diff(ys) < 0).any() or ys.max() > 1.0:
            raise ConfigurationError("breakpoint risk values must be non-decreasing in [0, 1]")

        self._xs = xs
        self._ys = ys

    def evaluate(self, x: float) -> float:
        if x <= 0:
            return 0.0
        # np.interp holds the last value beyond the final breakpoint
        return float(np.interp(x, self._xs, self._ys))


@dataclass
class LinearCurve(RiskCurve):
    """Risk proportional to exposure until saturation."""

    def evaluate(self, x: float) -> float:
        return min(1.0, max(0.0, x))


# Curve registry for configuration by name
CURVE_TYPES = {
    "saturating_exponential": SaturatingExponentialCurve,
    "piecewise_linear": PiecewiseLinearCurve,
    "linear": LinearCurve,
}


def create_curve(curve_type: str, **kwargs) -> RiskCurve:
    """Create risk curve by type name.

    Args:
        curve_type: Curve type name
        **kwargs: Curve-specific parameters

    Returns:
        Configured risk curve

    Raises:
        ConfigurationError: If the curve type or its parameters are invalid
    """
    if curve_type not in CURVE_TYPES:
        available = ", ".join(CURVE_TYPES.keys())
        raise ConfigurationError(f"Unknown curve type '{curve_type}'. Available: {available}")

    if curve_type == "piecewise_linear" and "breakpoints" in kwargs:
        kwargs["breakpoints"] = tuple(tuple(p) for p in kwargs["breakpoints"])

    try:
        return CURVE_TYPES[curve_type](**kwargs)
    except TypeError as e:
        raise ConfigurationError(f"Invalid parameters for curve '{curve_type}': {e}") from e
