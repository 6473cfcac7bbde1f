"""LivenessStateMachine — per-session signal accumulation with debounce.

Each observation is checked against the session's previous state for
seven behavioral signals (blink, smile, expression change, head turn,
head nod, movement, size change) plus an optional texture check on the
face crop. Behavioral signals are sticky: once reached they count until
the session is reset. The verdict is the policy's weighted score
against its threshold.

The machine itself holds only configuration; all mutable state lives in
the LivenessSession passed to update(), so independent sessions never
interfere.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from facegate.liveness.output import (
    BEHAVIORAL_SIGNALS,
    LivenessConfig,
    LivenessPolicy,
    LivenessResult,
    Signal,
)
from facegate.liveness.session import LivenessSession
from facegate.liveness.texture import luma_variance, texture_plausible
from facegate.types import FaceObservation

logger = logging.getLogger(__name__)


def _reported(value: Optional[float]) -> Optional[float]:
    """The probability as a float, or None when the detector did not classify."""
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return value


def _prob(value: Optional[float]) -> float:
    """Missing detector probabilities count as 0 (not open / not smiling)."""
    reported = _reported(value)
    return 0.0 if reported is None else reported


class LivenessStateMachine:
    """Turns a stream of FaceObservations into a live/not-live verdict.

    Args:
        config: Signal thresholds and debounce windows.
        policy: Scoring policy. Defaults to LivenessPolicy.behavioral().
    """

    def __init__(
        self,
        config: LivenessConfig | None = None,
        policy: LivenessPolicy | None = None,
    ):
        self.config = config or LivenessConfig()
        self.policy = policy or LivenessPolicy.behavioral()

    def new_session(self, now_ms: Optional[int] = None) -> LivenessSession:
        """Create a fresh session starting at ``now_ms``."""
        session = LivenessSession()
        self.reset(session, now_ms)
        return session

    def reset(self, session: LivenessSession, now_ms: Optional[int] = None) -> None:
        """Begin a new verification attempt on ``session``."""
        session.reset(now_ms)
        logger.debug("Liveness session reset (start=%s, policy=%s)", now_ms, self.policy.name)

    def update(
        self,
        session: LivenessSession,
        observation: FaceObservation,
        crop: Optional[np.ndarray] = None,
        now_ms: Optional[int] = None,
    ) -> LivenessResult:
        """Evaluate one observation and return the verdict so far.

        Args:
            session: Session state, mutated in place.
            observation: Detector output for this frame.
            crop: Face crop for the texture check (optional).
            now_ms: Current time; defaults to ``observation.timestamp_ms``.

        Returns:
            LivenessResult for the session after this observation.
        """
        cfg = self.config
        now = int(observation.timestamp_ms if now_ms is None else now_ms)
        if session.start_ms is None:
            session.start_ms = now
        session.frames_seen += 1

        triggered: set[Signal] = set()

        # (1) Blink: closed, debounced, once the eyes have been seen open
        left = _prob(observation.left_eye_open_prob)
        right = _prob(observation.right_eye_open_prob)
        eyes_open = left > cfg.eye_open_min and right > cfg.eye_open_min
        eyes_closed = left < cfg.eye_closed_max and right < cfg.eye_closed_max
        if eyes_open:
            session.eyes_armed = True
        elif eyes_closed and session.eyes_armed:
            if self._fire(session, Signal.BLINK, now, cfg.blink_debounce_ms):
                triggered.add(Signal.BLINK)

        # (2) Smile, debounced
        smile = _prob(observation.smile_prob)
        if smile > cfg.smile_min:
            if self._fire(session, Signal.SMILE, now, cfg.smile_debounce_ms):
                triggered.add(Signal.SMILE)

        # (3) Expression change between two consecutive reported smile probabilities
        reported = _reported(observation.smile_prob)
        if (
            reported is not None
            and session.last_smile_prob is not None
            and abs(reported - session.last_smile_prob) > cfg.expression_delta_min
        ):
            session.flags[Signal.EXPRESSION_CHANGE] = True
            triggered.add(Signal.EXPRESSION_CHANGE)
        session.last_smile_prob = reported

        # (4) Head turn (yaw), debounced
        if abs(observation.head_yaw_deg) > cfg.yaw_min_deg:
            if self._fire(session, Signal.HEAD_TURN, now, cfg.head_turn_debounce_ms):
                triggered.add(Signal.HEAD_TURN)

        # (5) Head nod (pitch), debounced
        if abs(observation.head_pitch_deg) > cfg.pitch_min_deg:
            if self._fire(session, Signal.HEAD_NOD, now, cfg.head_nod_debounce_ms):
                triggered.add(Signal.HEAD_NOD)

        # (6) Movement of the box center, after the warmup period
        bbox = observation.bbox
        center = bbox.center if bbox.width > 0 and bbox.height > 0 else None
        if (
            center is not None
            and session.last_center is not None
            and session.start_ms + cfg.movement_warmup_ms < now
        ):
            dx = center[0] - session.last_center[0]
            dy = center[1] - session.last_center[1]
            if math.hypot(dx, dy) > cfg.movement_min_px:
                session.flags[Signal.MOVEMENT] = True
                triggered.add(Signal.MOVEMENT)
        session.last_center = center

        # (7) Relative size change of the box area
        area = max(0.0, bbox.area)
        if session.last_area > 0:
            change = abs(area - session.last_area) / session.last_area
            if change > cfg.size_change_min:
                session.flags[Signal.SIZE_CHANGE] = True
                triggered.add(Signal.SIZE_CHANGE)
        session.last_area = area

        # (8) Texture on the current crop only
        variance: Optional[float] = None
        texture_ok: Optional[bool] = None
        if crop is not None:
            variance = luma_variance(crop)
            texture_ok = texture_plausible(
                variance, cfg.texture_variance_min, cfg.texture_variance_max,
            )
            if texture_ok:
                triggered.add(Signal.TEXTURE)

        score = self._score(session, bool(texture_ok))
        is_live = score >= self.policy.threshold
        if self.policy.require_texture and not texture_ok:
            is_live = False

        if triggered:
            logger.debug(
                "t=%d triggered=%s score=%d live=%s",
                now, sorted(s.value for s in triggered), score, is_live,
            )

        signals = {s.value: session.flags[s] for s in BEHAVIORAL_SIGNALS}
        signals[Signal.TEXTURE.value] = bool(texture_ok)

        return LivenessResult(
            is_live=is_live,
            score=score,
            signals=signals,
            triggered=frozenset(s.value for s in triggered),
            texture_variance=variance,
            texture_ok=texture_ok,
        )

    def _fire(self, session: LivenessSession, signal: Signal, now: int, window_ms: int) -> bool:
        """Accept a debounced trigger if its window has elapsed."""
        if not session.debounce_elapsed(signal, now, window_ms):
            return False
        session.last_trigger_ms[signal] = now
        session.flags[signal] = True
        return True

    def _score(self, session: LivenessSession, texture_ok: bool) -> int:
        policy = self.policy
        score = sum(policy.weight(s) for s in BEHAVIORAL_SIGNALS if session.flags[s])
        if texture_ok:
            score += policy.weight(Signal.TEXTURE)
        return score


__all__ = ["LivenessStateMachine"]
