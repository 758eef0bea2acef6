"""Scoring module for risk curves and the risk scorer."""

from graphene_trace.scoring.curves import (
    RiskCurve,
    SaturatingExponentialCurve,
    PiecewiseLinearCurve,
    LinearCurve,
    CURVE_TYPES,
    create_curve,
)
from graphene_trace.scoring.risk_scorer import RiskScorer

__all__ = [
    "RiskCurve",
    "SaturatingExponentialCurve",
    "PiecewiseLinearCurve",
    "LinearCurve",
    "CURVE_TYPES",
    "create_curve",
    "RiskScorer",
]
