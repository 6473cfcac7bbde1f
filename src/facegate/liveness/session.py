"""Mutable per-attempt liveness state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from facegate.liveness.output import BEHAVIORAL_SIGNALS, Signal


def _cleared_flags() -> Dict[Signal, bool]:
    return {s: False for s in BEHAVIORAL_SIGNALS}


@dataclass
class LivenessSession:
    """State of one verification attempt.

    Owned by exactly one caller at a time and passed into every
    LivenessStateMachine.update() call. Never persisted.
    """

    start_ms: Optional[int] = None

    # Sticky flags, set once per session
    flags: Dict[Signal, bool] = field(default_factory=_cleared_flags)

    # Last accepted trigger time per debounced signal (absent = never fired)
    last_trigger_ms: Dict[Signal, int] = field(default_factory=dict)

    # Previous-observation trackers
    last_center: Optional[tuple[float, float]] = None
    last_area: float = 0.0
    last_smile_prob: Optional[float] = None  # None when the previous frame had no smile reading

    # Eyes seen open at least once this session
    eyes_armed: bool = False

    frames_seen: int = 0

    def reset(self, now_ms: Optional[int] = None) -> None:
        """Clear flags, trackers and debounce timers and restart the session clock.

        Args:
            now_ms: New session start. None defers the start to the next observation.
        """
        self.start_ms = now_ms
        self.flags = _cleared_flags()
        self.last_trigger_ms = {}
        self.last_center = None
        self.last_area = 0.0
        self.last_smile_prob = None
        self.eyes_armed = False
        self.frames_seen = 0

    def debounce_elapsed(self, signal: Signal, now_ms: int, window_ms: int) -> bool:
        """True when ``signal`` may fire again at ``now_ms``."""
        last = self.last_trigger_ms.get(signal)
        return last is None or now_ms - last > window_ms


__all__ = ["LivenessSession"]
