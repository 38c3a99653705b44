# =======================================================================================
# campus_access/scanner/state.py - Scan Session State Machine
# =======================================================================================
"""
Scan session state as an immutable value plus pure transitions.

    IDLE --arm--> ARMED --accept_detection--> RESOLVING --begin_submission--> SUBMITTING
      ^             |                            |                                 |
      +---disarm----+                            +-------------finish--------------+

The last accepted (code, time) pair survives ``finish`` and re-arming so the
debounce window spans scan sessions.
"""
from dataclasses import dataclass, replace
from typing import Optional, Tuple
from ..models.enums import ScanPhase

DEFAULT_DEBOUNCE_MS = 3000


@dataclass(frozen=True)
class ScanState:
    phase: ScanPhase = ScanPhase.IDLE
    last_code: Optional[str] = None
    last_accepted_at: Optional[float] = None

    @property
    def armed(self) -> bool:
        return self.phase is ScanPhase.ARMED

    @property
    def in_flight(self) -> bool:
        return self.phase in (ScanPhase.RESOLVING, ScanPhase.SUBMITTING)


def arm(state: ScanState) -> ScanState:
    """Only an idle session can be armed; anything else is returned as is."""
    if state.phase is not ScanPhase.IDLE:
        return state
    return replace(state, phase=ScanPhase.ARMED)


def disarm(state: ScanState) -> ScanState:
    """Stop accepting detections. An in-flight submission keeps its phase."""
    if state.phase is ScanPhase.ARMED:
        return replace(state, phase=ScanPhase.IDLE)
    return state


def is_duplicate(state: ScanState, code: str, detected_at: float, window_ms: float) -> bool:
    return (
        state.last_code == code
        and state.last_accepted_at is not None
        and detected_at - state.last_accepted_at < window_ms
    )


def accept_detection(
    state: ScanState,
    code: str,
    detected_at: float,
    window_ms: float = DEFAULT_DEBOUNCE_MS,
) -> Tuple[ScanState, bool]:
    """
    Decide whether a raw detection starts a resolution.

    Returns the next state and True when accepted. Rejected detections leave
    the state untouched.
    """
    if not code or not state.armed:
        return state, False
    if is_duplicate(state, code, detected_at, window_ms):
        return state, False
    return ScanState(phase=ScanPhase.RESOLVING, last_code=code, last_accepted_at=detected_at), True


def begin_submission(state: ScanState) -> ScanState:
    if state.phase is not ScanPhase.RESOLVING:
        raise ValueError(f"Cannot submit from {state.phase.value}")
    return replace(state, phase=ScanPhase.SUBMITTING)


def finish(state: ScanState) -> ScanState:
    """Resolution or submission done; back to idle until re-armed."""
    return replace(state, phase=ScanPhase.IDLE)
