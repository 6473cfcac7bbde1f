"""facegate - Face embedding matching and liveness verification.

Matches a live face embedding against enrolled per-angle embeddings and
gates acceptance behind a multi-signal liveness check.

Quick Start:
    >>> from facegate import SimilarityMatcher, LivenessStateMachine
    >>> matcher = SimilarityMatcher(threshold=0.8, dim=512)
    >>> result = matcher.match(query, store.embeddings())
    >>> print(result.matched, result.person_id, f"{result.similarity:.2f}")

    >>> machine = LivenessStateMachine()
    >>> session = machine.new_session(now_ms=0)
    >>> verdict = machine.update(session, observation, crop)
    >>> print(verdict.is_live, verdict.score)
"""

__version__ = "0.1.0"

from facegate.errors import (
    FaceGateError,
    DimensionMismatch,
    MalformedEmbedding,
    DegenerateEmbedding,
)
from facegate.types import (
    ANGLES,
    BoundingBox,
    FaceObservation,
    StoredEmbedding,
    MatchResult,
    Person,
)
from facegate.codec import normalize, is_degenerate, serialize, deserialize
from facegate.matcher import similarity, snapshot, find_best_match, SimilarityMatcher
from facegate.liveness import (
    LivenessConfig,
    LivenessPolicy,
    LivenessResult,
    LivenessSession,
    LivenessStateMachine,
    Signal,
)
from facegate.embedder import FaceEmbedder, crop_face
from facegate.store import EmbeddingStore, save_store, load_store
from facegate.enrollment import enroll
from facegate.verifier import FrameGate, VerificationResult, Verifier
from facegate.config import Settings

__all__ = [
    "__version__",
    # Errors
    "FaceGateError",
    "DimensionMismatch",
    "MalformedEmbedding",
    "DegenerateEmbedding",
    # Types
    "ANGLES",
    "BoundingBox",
    "FaceObservation",
    "StoredEmbedding",
    "MatchResult",
    "Person",
    # Codec
    "normalize",
    "is_degenerate",
    "serialize",
    "deserialize",
    # Matching
    "similarity",
    "snapshot",
    "find_best_match",
    "SimilarityMatcher",
    # Liveness
    "LivenessConfig",
    "LivenessPolicy",
    "LivenessResult",
    "LivenessSession",
    "LivenessStateMachine",
    "Signal",
    # Enrollment / verification
    "FaceEmbedder",
    "crop_face",
    "EmbeddingStore",
    "save_store",
    "load_store",
    "enroll",
    "FrameGate",
    "VerificationResult",
    "Verifier",
    "Settings",
]
