"""Hysteresis-aware alert state machine for region risk scores.

NORMAL -> WARNING -> CRITICAL, and WARNING/CRITICAL -> CLEARING -> NORMAL,
with CLEARING able to re-escalate. Escalations must hold for a dwell time,
clearing must fall below the entry threshold minus a margin and return to
NORMAL only after a confirmation period.
"""

from dataclasses import dataclass, replace
from typing import Optional

from graphene_trace.core.config import AlertConfig
from graphene_trace.core.errors import IllegalTransition
from graphene_trace.core.types import AlertEvent, AlertState


# Every permitted transition. Anything missing here (NORMAL -> CRITICAL,
# CRITICAL -> NORMAL, CRITICAL -> WARNING, self-loops) is illegal.
TRANSITIONS: dict[AlertState, frozenset[AlertState]] = {
    AlertState.NORMAL: frozenset({AlertState.WARNING}),
    AlertState.WARNING: frozenset({AlertState.CRITICAL, AlertState.CLEARING}),
    AlertState.CRITICAL: frozenset({AlertState.CLEARING}),
    AlertState.CLEARING: frozenset(
        {AlertState.NORMAL, AlertState.WARNING, AlertState.CRITICAL}
    ),
}


def is_legal_transition(from_state: AlertState, to_state: AlertState) -> bool:
    """Whether the transition table permits a transition."""
    return to_state in TRANSITIONS[from_state]


@dataclass(frozen=True)
class AlertTrack:
    """Alert state and dwell timers for one patient region.

    Timers record when the score started to hold a condition continuously;
    they are tracked independently of the current state so a single large
    jump can confirm several transitions at once.

    Attributes:
        state: Current alert state
        entered_at: Timestamp the current state was entered (None for initial)
        above_warning_since: Score has held >= T_warn since this time
        above_critical_since: Score has held >= T_crit since this time
        below_exit_since: Score has held < T_warn - margin since this time
        last_score: Score at the last evaluation
    """

    state: AlertState = AlertState.NORMAL
    entered_at: Optional[float] = None
    above_warning_since: Optional[float] = None
    above_critical_since: Optional[float] = None
    below_exit_since: Optional[float] = None
    last_score: float = 0.0


def _hold(since: Optional[float], condition: bool, timestamp: float) -> Optional[float]:
    if not condition:
        return None
    return timestamp if since is None else since


def _restart(since: Optional[float], timestamp: float) -> Optional[float]:
    return None if since is None else timestamp


class AlertStateMachine:
    """Converts risk score trajectories into alert lifecycle events.

    Stateless apart from its configuration: callers own one ``AlertTrack``
    per patient region and pass it in on every evaluation.

    Attributes:
        config: Alert configuration
    """

    def __init__(self, config: AlertConfig):
        """Initialize alert state machine.

        Args:
            config: Alert configuration
        """
        self.config = config

    @staticmethod
    def initial_track() -> AlertTrack:
        """Track for a newly admitted patient region."""
        return AlertTrack()

    def observe(
        self,
        track: AlertTrack,
        score: float,
        timestamp: float,
        restart_timers: bool = False,
    ) -> AlertTrack:
        """Update dwell timers with a new score without changing state.

        Args:
            track: Current track
            score: New risk score
            timestamp: Frame timestamp
            restart_timers: Restart running timers at ``timestamp`` (after a
                sensor gap nothing can be assumed about the missing interval)

        Returns:
            Track with updated timers
        """
        if restart_timers:
            track = replace(
                track,
                above_warning_since=_restart(track.above_warning_since, timestamp),
                above_critical_since=_restart(track.above_critical_since, timestamp),
                below_exit_since=_restart(track.below_exit_since, timestamp),
            )

        cfg = self.config
        return replace(
            track,
            above_warning_since=_hold(
                track.above_warning_since, score >= cfg.warning_threshold, timestamp
            ),
            above_critical_since=_hold(
                track.above_critical_since, score >= cfg.critical_threshold, timestamp
            ),
            below_exit_since=_hold(
                track.below_exit_since, score < cfg.warning_exit, timestamp
            ),
            last_score=score,
        )

    def _held(self, since: Optional[float], duration: float, timestamp: float) -> bool:
        return since is not None and timestamp - since >= duration

    def next_state(self, track: AlertTrack, timestamp: float) -> Optional[AlertState]:
        """Determine the next transition for an observed track.

        Args:
            track: Track with timers already updated by ``observe``
            timestamp: Frame timestamp

        Returns:
            Target state, or None if no transition is due
        """
        cfg = self.config
        score = track.last_score
        warning_held = self._held(
            track.above_warning_since, cfg.warning_dwell_seconds, timestamp
        )
        critical_held = self._held(
            track.above_critical_since, cfg.critical_dwell_seconds, timestamp
        )

        if track.state == AlertState.NORMAL:
            if warning_held:
                return AlertState.WARNING

        elif track.state == AlertState.WARNING:
            if critical_held:
                return AlertState.CRITICAL
            if score < cfg.warning_exit:
                return AlertState.CLEARING

        elif track.state == AlertState.CRITICAL:
            if score < cfg.critical_exit:
                return AlertState.CLEARING

        elif track.state == AlertState.CLEARING:
            if critical_held:
                return AlertState.CRITICAL
            if warning_held:
                return AlertState.WARNING
            if self._held(
                track.below_exit_since, cfg.clearing_confirmation_seconds, timestamp
            ):
                return AlertState.NORMAL

        return None

    def transition(
        self, track: AlertTrack, to_state: AlertState, timestamp: float
    ) -> AlertTrack:
        """Move a track to a new state.

        Raises:
            IllegalTransition: If the transition table forbids the move
        """
        if not is_legal_transition(track.state, to_state):
            raise IllegalTransition(
                f"Transition {track.state.value} -> {to_state.value} is not permitted"
            )
        return replace(track, state=to_state, entered_at=timestamp)

    def evaluate(
        self,
        track: AlertTrack,
        score: float,
        timestamp: float,
        patient_id: str,
        region: str,
        restart_timers: bool = False,
    ) -> tuple[AlertTrack, list[AlertEvent]]:
        """Apply one frame's risk score.

        Runs transitions until none is due, so a single frame may emit e.g.
        NORMAL -> WARNING followed by WARNING -> CRITICAL. Re-entering the
        current state emits nothing.

        Args:
            track: Current track for the region
            score: Risk score for this frame
            timestamp: Frame timestamp
            patient_id: Patient identifier for emitted events
            region: Region name for emitted events
            restart_timers: Restart dwell timers (sensor gap before this frame)

        Returns:
            (new track, events in transition order)
        """
        track = self.observe(track, score, timestamp, restart_timers)
        events: list[AlertEvent] = []

        # Each state is visited at most once per evaluation
        for _ in range(len(AlertState)):
            target = self.next_state(track, timestamp)
            if target is None:
                break

            event = AlertEvent(
                patient_id=patient_id,
                region=region,
                from_state=track.state,
                to_state=target,
                timestamp=timestamp,
                risk_score=score,
            )
            track = self.transition(track, target, timestamp)
            events.append(event)

        return track, events
