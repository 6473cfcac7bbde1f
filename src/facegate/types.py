"""facegate data types.

Shared records passed between the detector, the embedding codec,
the similarity matcher and the liveness state machine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

# 1-D float32 vector of length D
Embedding = np.ndarray

# Canonical enrollment angles, in capture order
ANGLES: tuple[str, ...] = ("front", "left", "right", "up", "down")


@dataclass(frozen=True)
class BoundingBox:
    """Face rectangle in pixel coordinates (left, top, right, bottom)."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        return ((self.left + self.right) / 2.0, (self.top + self.bottom) / 2.0)


@dataclass(frozen=True)
class FaceObservation:
    """Per-frame snapshot produced by the face detector.

    Probabilities are in [0, 1] or None when the detector did not
    classify that attribute. Head angles are Euler angles in degrees
    (yaw: left/right turn, pitch: up/down nod).
    """

    bbox: BoundingBox
    left_eye_open_prob: Optional[float] = None
    right_eye_open_prob: Optional[float] = None
    smile_prob: Optional[float] = None
    head_yaw_deg: float = 0.0
    head_pitch_deg: float = 0.0
    timestamp_ms: int = 0


@dataclass(frozen=True)
class StoredEmbedding:
    """One enrolled embedding of a person, captured at a given angle.

    ``embedding`` is either a decoded vector or its serialized byte form
    as kept by the persistence layer; the matcher decodes bytes lazily.
    """

    person_id: int
    angle: str
    embedding: Union[np.ndarray, bytes]


@dataclass(frozen=True)
class MatchResult:
    """Best-match result from find_best_match().

    ``similarity`` is the best score seen (reported even when unmatched),
    0.0 for an empty corpus or a degenerate query.
    """

    matched: bool
    person_id: Optional[int] = None
    similarity: float = 0.0
    angle: Optional[str] = None
    degenerate: bool = False


@dataclass
class Person:
    """Enrolled person record."""

    person_id: int
    name: str
    face_images: dict[str, str] = field(default_factory=dict)  # angle -> image path


__all__ = [
    "ANGLES",
    "Embedding",
    "BoundingBox",
    "FaceObservation",
    "StoredEmbedding",
    "MatchResult",
    "Person",
]
