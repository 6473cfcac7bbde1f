"""SimilarityMatcher — best-match search over stored embeddings.

Every stored embedding competes on its own: a person enrolled at five
angles has five independent chances to be the best match. Scores are
never pooled per person.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from facegate.codec import deserialize, l2_norm
from facegate.errors import DimensionMismatch, MalformedEmbedding
from facegate.types import MatchResult, StoredEmbedding

logger = logging.getLogger(__name__)


def similarity(a: np.ndarray, b: np.ndarray, assume_normalized: bool = False) -> float:
    """Cosine similarity clamped to [-1, 1].

    Args:
        a: First embedding.
        b: Second embedding.
        assume_normalized: Both inputs are known to be unit length, so the
            dot product is used directly.

    Returns:
        Similarity in [-1, 1]; 0.0 if either vector has zero norm.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    a = np.asarray(a, dtype=np.float64).reshape(-1)
    b = np.asarray(b, dtype=np.float64).reshape(-1)
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(a.shape[0], b.shape[0], "similarity")

    dot = float(np.dot(a, b))
    if assume_normalized:
        return max(-1.0, min(1.0, dot))

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return max(-1.0, min(1.0, dot / (norm_a * norm_b)))


def snapshot(corpus: Iterable[StoredEmbedding]) -> tuple[StoredEmbedding, ...]:
    """Freeze a corpus so a match sees a consistent view while enrollments continue."""
    return tuple(corpus)


def find_best_match(
    query: np.ndarray,
    corpus: Sequence[StoredEmbedding],
    threshold: float,
) -> MatchResult:
    """Find the single stored embedding most similar to ``query``.

    Logic:
    1. Degenerate query: unmatched, similarity 0
    2. Score every entry (no early exit); malformed bytes are skipped
    3. Keep the highest score; ties keep the first entry encountered
    4. matched iff best >= threshold

    Args:
        query: Query embedding.
        corpus: Stored embeddings in a deterministic order.
        threshold: Acceptance threshold on cosine similarity.

    Returns:
        MatchResult. Unmatched results still report the best score.

    Raises:
        DimensionMismatch: If any corpus entry differs in length from the query.
    """
    query = np.asarray(query, dtype=np.float32).reshape(-1)
    if not corpus:
        return MatchResult(matched=False)

    if l2_norm(query) == 0.0:
        logger.debug("Degenerate query embedding, not matchable")
        return MatchResult(matched=False, degenerate=True)

    best: Optional[StoredEmbedding] = None
    best_sim = -np.inf

    for entry in corpus:
        try:
            vec = _entry_vector(entry)
        except MalformedEmbedding as e:
            logger.warning(
                "Skipping corpus entry person=%s angle=%s: %s",
                entry.person_id, entry.angle, e,
            )
            continue

        if vec.shape[0] != query.shape[0]:
            raise DimensionMismatch(
                query.shape[0], vec.shape[0],
                f"corpus entry person={entry.person_id} angle={entry.angle}",
            )

        if l2_norm(vec) == 0.0:
            # Degenerate entries score 0 and are never eligible
            logger.debug("person=%s angle=%s degenerate, skipped", entry.person_id, entry.angle)
            continue

        sim = similarity(query, vec)
        logger.debug("person=%s angle=%s similarity=%.4f", entry.person_id, entry.angle, sim)
        if sim > best_sim:
            best_sim = sim
            best = entry

    if best is None:
        return MatchResult(matched=False)

    if best_sim >= threshold:
        return MatchResult(
            matched=True,
            person_id=best.person_id,
            similarity=best_sim,
            angle=best.angle,
        )
    return MatchResult(matched=False, similarity=best_sim)


def _entry_vector(entry: StoredEmbedding) -> np.ndarray:
    emb = entry.embedding
    if isinstance(emb, (bytes, bytearray, memoryview)):
        return deserialize(emb)
    vec = np.asarray(emb, dtype=np.float32)
    if vec.ndim != 1 or vec.shape[0] == 0:
        raise MalformedEmbedding(f"expected non-empty 1-D vector, got shape {vec.shape}")
    return vec


class SimilarityMatcher:
    """Threshold-configured matcher with an optional fixed dimension.

    Practical thresholds for unit-normalized cosine embeddings lie in
    roughly [0.5, 0.9] and must be tuned per embedding model.

    Args:
        threshold: Minimum similarity for a match.
        dim: Expected embedding dimension D. Queries of another length
            fail fast with DimensionMismatch.
    """

    def __init__(self, threshold: float = 0.8, dim: Optional[int] = None):
        self.threshold = threshold
        self.dim = dim

    def match(
        self,
        query: Union[np.ndarray, bytes],
        corpus: Sequence[StoredEmbedding],
    ) -> MatchResult:
        """Match a query (vector or serialized bytes) against ``corpus``.

        Raises:
            MalformedEmbedding: If a byte query cannot be decoded.
            DimensionMismatch: If the query or any corpus entry has the wrong length.
        """
        if isinstance(query, (bytes, bytearray, memoryview)):
            query = deserialize(query, dim=self.dim)
        query = np.asarray(query, dtype=np.float32).reshape(-1)
        if self.dim is not None and query.shape[0] != self.dim:
            raise DimensionMismatch(self.dim, query.shape[0], "query")

        result = find_best_match(query, corpus, self.threshold)
        logger.debug(
            "match: matched=%s person=%s similarity=%.4f (threshold %.2f, %d entries)",
            result.matched, result.person_id, result.similarity, self.threshold, len(corpus),
        )
        return result


__all__ = ["similarity", "snapshot", "find_best_match", "SimilarityMatcher"]
