"""Liveness (anti-spoofing) state machine."""

from facegate.liveness.output import (
    BEHAVIORAL_SIGNALS,
    LivenessConfig,
    LivenessPolicy,
    LivenessResult,
    Signal,
)
from facegate.liveness.session import LivenessSession
from facegate.liveness.machine import LivenessStateMachine
from facegate.liveness.texture import luma_variance, texture_plausible

__all__ = [
    "BEHAVIORAL_SIGNALS",
    "LivenessConfig",
    "LivenessPolicy",
    "LivenessResult",
    "LivenessSession",
    "LivenessStateMachine",
    "Signal",
    "luma_variance",
    "texture_plausible",
]
