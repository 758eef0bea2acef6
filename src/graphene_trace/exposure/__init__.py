"""Exposure module for time-above-threshold tracking."""

from graphene_trace.exposure.tracker import ExposureTracker, ExposureUpdate

__all__ = [
    "ExposureTracker",
    "ExposureUpdate",
]
