"""Verifier — one verification attempt: identity match plus liveness.

Flow per admitted frame:
    FrameGate.try_acquire() → FaceEmbedder.embed()
    → SimilarityMatcher.match(snapshot) → LivenessStateMachine.update()
    → verified = matched and live

The corpus is snapshotted when the attempt starts so concurrent
enrollments never change what one attempt matches against. Session
timeouts are left to the caller.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from facegate.embedder import FaceEmbedder
from facegate.liveness import LivenessResult, LivenessStateMachine
from facegate.matcher import SimilarityMatcher, snapshot
from facegate.types import FaceObservation, MatchResult, StoredEmbedding

logger = logging.getLogger(__name__)


class FrameGate:
    """Keep-latest frame admission.

    A frame is admitted only when no other frame is in flight and at
    least ``min_interval_ms`` has passed since the last admitted frame.
    Rejected frames are dropped, never queued.

    Args:
        min_interval_ms: Minimum spacing between admitted frames (0 = no throttle).
    """

    def __init__(self, min_interval_ms: int = 300):
        self.min_interval_ms = min_interval_ms
        self._lock = threading.Lock()
        self._busy = False
        self._last_admitted_ms: Optional[int] = None
        self.dropped = 0

    def try_acquire(self, now_ms: int) -> bool:
        with self._lock:
            if self._busy or (
                self._last_admitted_ms is not None
                and now_ms - self._last_admitted_ms < self.min_interval_ms
            ):
                self.dropped += 1
                return False
            self._busy = True
            self._last_admitted_ms = now_ms
            return True

    def release(self) -> None:
        with self._lock:
            self._busy = False

    def reset(self) -> None:
        with self._lock:
            self._busy = False
            self._last_admitted_ms = None
            self.dropped = 0


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one admitted frame."""

    match: MatchResult
    liveness: LivenessResult

    @property
    def verified(self) -> bool:
        return self.match.matched and self.liveness.is_live


class Verifier:
    """Runs a single verification attempt over a stream of frames.

    Args:
        corpus: Stored embeddings; snapshotted at start and on restart().
        matcher: Threshold-configured matcher.
        liveness: Liveness machine (its policy applies to the whole attempt).
        embedder: Embedder used when process() is not given an embedding.
        gate: Frame admission gate. Defaults to FrameGate(0), which only
            drops frames that overlap an in-flight frame.
        now_ms: Start time of the attempt.
    """

    def __init__(
        self,
        corpus: Iterable[StoredEmbedding],
        matcher: SimilarityMatcher,
        liveness: LivenessStateMachine,
        embedder: Optional[FaceEmbedder] = None,
        gate: Optional[FrameGate] = None,
        now_ms: Optional[int] = None,
    ):
        self.matcher = matcher
        self.liveness = liveness
        self.embedder = embedder
        self.gate = gate or FrameGate(min_interval_ms=0)
        self.corpus = snapshot(corpus)
        self.session = liveness.new_session(now_ms)

    def restart(self, corpus: Optional[Iterable[StoredEmbedding]] = None, now_ms: Optional[int] = None) -> None:
        """Begin a new attempt, optionally against a fresh corpus."""
        if corpus is not None:
            self.corpus = snapshot(corpus)
        self.liveness.reset(self.session, now_ms)
        self.gate.reset()
        logger.info("Verification restarted (%d corpus entries)", len(self.corpus))

    def process(
        self,
        observation: FaceObservation,
        crop: Optional[np.ndarray] = None,
        embedding: Optional[np.ndarray] = None,
        now_ms: Optional[int] = None,
    ) -> Optional[VerificationResult]:
        """Evaluate one frame.

        Args:
            observation: Detector output for the frame.
            crop: Face crop (for texture and, without ``embedding``, for embedding).
            embedding: Precomputed query embedding.
            now_ms: Current time; defaults to ``observation.timestamp_ms``.

        Returns:
            VerificationResult, or None when the frame was dropped.

        Raises:
            ValueError: If neither an embedding nor a crop with an embedder is available.
            DimensionMismatch: If the query and a corpus entry differ in length.
                The liveness session is left unchanged.
        """
        now = int(observation.timestamp_ms if now_ms is None else now_ms)
        if not self.gate.try_acquire(now):
            logger.debug("Frame at t=%d dropped", now)
            return None

        try:
            if embedding is None:
                if crop is None or self.embedder is None:
                    raise ValueError("process() needs an embedding or a crop with an embedder")
                embedding = self.embedder.embed(crop)

            # Match first: a failing match must leave the session untouched
            match = self.matcher.match(embedding, self.corpus)
            live = self.liveness.update(self.session, observation, crop, now)
        finally:
            self.gate.release()

        result = VerificationResult(match=match, liveness=live)
        if result.verified:
            logger.info(
                "Verified person %s (similarity %.3f, liveness score %d)",
                match.person_id, match.similarity, live.score,
            )
        return result


__all__ = ["FrameGate", "VerificationResult", "Verifier"]
