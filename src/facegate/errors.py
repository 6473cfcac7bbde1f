"""Error types raised by the matching engine."""

from __future__ import annotations


class FaceGateError(Exception):
    """Base class for all facegate errors."""


class DimensionMismatch(FaceGateError, ValueError):
    """Raised when two embeddings (or an embedding and the configured D)
    disagree on length.

    Attributes:
        expected: Expected number of components.
        actual: Number of components actually supplied.
    """

    def __init__(self, expected: int, actual: int, context: str = ""):
        self.expected = expected
        self.actual = actual
        msg = f"Embedding dimension mismatch: expected {expected}, got {actual}"
        if context:
            msg = f"{msg} ({context})"
        super().__init__(msg)


class MalformedEmbedding(FaceGateError, ValueError):
    """Raised when an embedding byte buffer cannot be decoded."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Malformed embedding: {reason}")


class DegenerateEmbedding(FaceGateError, ValueError):
    """Raised when a zero-norm embedding is used where a matchable one is required."""

    def __init__(self, context: str = ""):
        msg = "Degenerate (zero-norm) embedding"
        if context:
            msg = f"{msg}: {context}"
        super().__init__(msg)


__all__ = [
    "FaceGateError",
    "DimensionMismatch",
    "MalformedEmbedding",
    "DegenerateEmbedding",
]
