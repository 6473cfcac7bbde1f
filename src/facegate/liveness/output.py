"""Config, policy and result types for the liveness state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class Signal(str, Enum):
    """Liveness signals. Values are the keys used in results and weights."""

    BLINK = "blink"
    SMILE = "smile"
    EXPRESSION_CHANGE = "expression_change"
    HEAD_TURN = "head_turn"
    HEAD_NOD = "head_nod"
    MOVEMENT = "movement"
    SIZE_CHANGE = "size_change"
    TEXTURE = "texture"


BEHAVIORAL_SIGNALS: tuple[Signal, ...] = (
    Signal.BLINK,
    Signal.SMILE,
    Signal.EXPRESSION_CHANGE,
    Signal.HEAD_TURN,
    Signal.HEAD_NOD,
    Signal.MOVEMENT,
    Signal.SIZE_CHANGE,
)


@dataclass(frozen=True)
class LivenessConfig:
    """Signal thresholds and debounce windows.

    Debounce comparisons are strict: a signal may fire again only once
    more than the window has elapsed since it last fired.
    """

    # Eyes
    eye_closed_max: float = 0.3       # both eyes below → closed
    eye_open_min: float = 0.7         # both eyes above → open (arms blink)
    blink_debounce_ms: int = 1000

    # Smile / expression
    smile_min: float = 0.7
    smile_debounce_ms: int = 1500
    expression_delta_min: float = 0.3

    # Head pose (degrees)
    yaw_min_deg: float = 20.0
    pitch_min_deg: float = 15.0
    head_turn_debounce_ms: int = 1500
    head_nod_debounce_ms: int = 1500

    # Face box
    movement_min_px: float = 20.0
    movement_warmup_ms: int = 1000    # ignore movement right after session start
    size_change_min: float = 0.2      # relative area change

    # Texture (luma population variance, exclusive bounds)
    texture_variance_min: float = 300.0
    texture_variance_max: float = 5000.0


def _frozen(weights: dict[Signal, int]) -> Mapping[Signal, int]:
    return MappingProxyType(dict(weights))


@dataclass(frozen=True)
class LivenessPolicy:
    """Scoring strategy: per-signal weights, score threshold and texture gate.

    A machine uses exactly one policy for its whole lifetime.

    Example:
        >>> policy = LivenessPolicy.behavioral()
        >>> # or
        >>> policy = LivenessPolicy.texture_gated()
    """

    name: str
    weights: Mapping[Signal, int] = field(default_factory=lambda: _frozen({}))
    threshold: int = 3
    require_texture: bool = False

    @classmethod
    def behavioral(cls) -> LivenessPolicy:
        """Unweighted count of the seven behavioral signals (score 0–7)."""
        return cls(
            name="behavioral",
            weights=_frozen({s: 1 for s in BEHAVIORAL_SIGNALS}),
            threshold=3,
            require_texture=False,
        )

    @classmethod
    def texture_gated(cls) -> LivenessPolicy:
        """Weighted score with a mandatory texture check."""
        return cls(
            name="texture_gated",
            weights=_frozen({
                Signal.MOVEMENT: 1,
                Signal.BLINK: 2,
                Signal.SMILE: 1,
                Signal.TEXTURE: 3,
            }),
            threshold=3,
            require_texture=True,
        )

    @classmethod
    def from_name(cls, name: str) -> LivenessPolicy:
        if name == "behavioral":
            return cls.behavioral()
        if name == "texture_gated":
            return cls.texture_gated()
        raise ValueError(f"Unknown liveness policy: {name!r}")

    def weight(self, signal: Signal) -> int:
        return self.weights.get(signal, 0)


@dataclass(frozen=True)
class LivenessResult:
    """Per-observation liveness verdict.

    Attributes:
        is_live: Verdict under the machine's policy.
        score: Weighted sum of the signals reached so far.
        signals: Sticky state of every signal after this step
            (texture reflects the current frame only).
        triggered: Signals accepted on this step. A debounced signal
            rejected inside its window is absent even if its condition held.
        texture_variance: Luma variance of the crop, None without a crop.
        texture_ok: Texture plausibility, None without a crop.
    """

    is_live: bool
    score: int
    signals: Mapping[str, bool]
    triggered: frozenset[str] = frozenset()
    texture_variance: Optional[float] = None
    texture_ok: Optional[bool] = None


__all__ = [
    "Signal",
    "BEHAVIORAL_SIGNALS",
    "LivenessConfig",
    "LivenessPolicy",
    "LivenessResult",
]
