"""Alerts module for the region alert state machine."""

from graphene_trace.alerts.state_machine import (
    AlertStateMachine,
    AlertTrack,
    TRANSITIONS,
    is_legal_transition,
)

__all__ = [
    "AlertStateMachine",
    "AlertTrack",
    "TRANSITIONS",
    "is_legal_transition",
]
