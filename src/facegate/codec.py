"""Embedding codec.

L2 normalization and the fixed-width byte layout used for storage:
4-byte little-endian IEEE-754 float per component, no header. The
buffer length alone determines D.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from facegate.errors import DimensionMismatch, MalformedEmbedding

_WIRE_DTYPE = np.dtype("<f4")


def l2_norm(v: np.ndarray) -> float:
    """L2 norm computed in float64."""
    return float(np.linalg.norm(np.asarray(v, dtype=np.float64)))


def normalize(raw: np.ndarray) -> np.ndarray:
    """L2 normalize a raw model output.

    A zero vector is returned unchanged (as float32); use
    :func:`is_degenerate` to detect it.

    Args:
        raw: 1-D vector of any float dtype.

    Returns:
        float32 vector with unit norm, or the zero vector.
    """
    v = np.asarray(raw, dtype=np.float64).reshape(-1)
    norm = np.linalg.norm(v)
    if norm > 0:
        return (v / norm).astype(np.float32)
    return v.astype(np.float32)


def is_degenerate(e: np.ndarray) -> bool:
    """True when the embedding has zero norm and can never match."""
    return l2_norm(e) == 0.0


def serialize(e: np.ndarray) -> bytes:
    """Encode an embedding as 4×D bytes."""
    return np.asarray(e, dtype=np.float32).reshape(-1).astype(_WIRE_DTYPE).tobytes()


def deserialize(data: bytes, dim: Optional[int] = None) -> np.ndarray:
    """Decode bytes produced by :func:`serialize`.

    Args:
        data: Raw buffer.
        dim: Expected dimension, checked when given.

    Returns:
        float32 vector (a writable copy).

    Raises:
        MalformedEmbedding: If the length is not a positive multiple of 4.
        DimensionMismatch: If ``dim`` is given and differs from the decoded length.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedEmbedding(f"expected bytes, got {type(data).__name__}")
    n = len(data)
    if n == 0 or n % 4 != 0:
        raise MalformedEmbedding(f"byte length {n} is not a positive multiple of 4")

    vec = np.frombuffer(data, dtype=_WIRE_DTYPE).astype(np.float32)
    if dim is not None and vec.shape[0] != dim:
        raise DimensionMismatch(dim, vec.shape[0], "deserialize")
    return vec


__all__ = ["l2_norm", "normalize", "is_degenerate", "serialize", "deserialize"]
